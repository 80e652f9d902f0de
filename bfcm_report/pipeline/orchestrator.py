"""
Fetch orchestration for the merchant report.

The ``FetchOrchestrator`` runs every ``FetchTask`` concurrently and waits for
all of them to settle before building the ``AggregateResult``:

  Step 1 : Validate the task list (non-empty, unique labels and slots,
           every slot known).  Nothing is started if this fails.
  Step 2 : Wrap each task so it yields a tagged ``FetchOutcome`` instead of
           raising.  Payloads are validated against the slot type here; a
           payload of the wrong shape is a failure like any other.
  Step 3 : Consume outcomes with ``asyncio.as_completed``.  This single loop
           owns the completion counter, so concurrent completions cannot
           double count; it fires the progress callback once per task in
           completion order.
  Step 4 : Fill each slot with its payload, or with the task default when it
           failed.  Slot placement follows the ``AggregateResult`` schema,
           not completion order.

Failure isolation
-----------------
- Single task failure:  Logged at WARNING, default substituted, label recorded
                        in ``failed_labels`` (completion order).  Not raised.
- All tasks failed:     ``AllSourcesFailedError``.  No partial aggregate.
- Progress callback:    An exception from the callback is logged and ignored.

No retries, timeouts or cancellation happen here.  A failed task is terminal
for the run; timeouts belong to the individual source operations.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import TypeAdapter, ValidationError

from bfcm_report.models.report import AGGREGATE_SLOTS, AggregateResult
from bfcm_report.pipeline.tasks import FetchTask

logger = logging.getLogger(__name__)


# ── Result types ──────────────────────────────────────────────────────────────

@dataclass
class FetchOutcome:
    """Terminal state of one task.

    Attributes:
        label:   Task label.
        slot:    ``AggregateResult`` slot the task fills.
        ok:      True if the fetch succeeded and the payload validated.
        payload: Validated payload (``None`` when ``ok`` is False).
        error:   ``"<ExceptionType>: <message>"`` when ``ok`` is False.
    """

    label:   str
    slot:    str
    ok:      bool
    payload: Any = None
    error:   Optional[str] = None


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification fired as each task settles.

    Attributes:
        completed:     Tasks settled so far, including this one (1..total).
        total:         Number of tasks in the run.
        current_label: Label of the task that just settled.
    """

    completed:     int
    total:         int
    current_label: str


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class OrchestrationResult:
    """Outcome of one orchestration run.

    Attributes:
        aggregate:     Every slot filled (payload or default).
        failed_labels: Labels of failed tasks, in completion order.
        outcomes:      Per-task outcomes keyed by label.
        duration_s:    Wall time of the run in seconds.
    """

    aggregate:     AggregateResult
    failed_labels: list[str]              = field(default_factory=list)
    outcomes:      dict[str, FetchOutcome] = field(default_factory=dict)
    duration_s:    float                  = 0.0

    @property
    def status(self) -> str:
        """``"success"`` when nothing failed, else ``"partial"``."""
        return "partial" if self.failed_labels else "success"


class AllSourcesFailedError(RuntimeError):
    """Raised when every fetch task in a run failed.

    Attributes:
        failed_labels: Labels of all tasks, in completion order.
        errors:        Error string per label.
    """

    def __init__(self, failed_labels: list[str], errors: dict[str, str]) -> None:
        self.failed_labels = failed_labels
        self.errors = errors
        super().__init__(
            f"All {len(failed_labels)} data sources failed; no report can be built. "
            f"First error: {errors.get(failed_labels[0], 'unknown') if failed_labels else 'n/a'}"
        )


# ── Orchestrator ──────────────────────────────────────────────────────────────

class FetchOrchestrator:
    """Settle-all fan-out/fan-in over a list of ``FetchTask``s."""

    def __init__(self) -> None:
        self._adapters: dict[str, TypeAdapter] = {}

    def _adapter(self, task: FetchTask) -> TypeAdapter:
        if task.slot not in self._adapters:
            self._adapters[task.slot] = TypeAdapter(task.payload_type)
        return self._adapters[task.slot]

    @staticmethod
    def _validate_tasks(tasks: list[FetchTask]) -> None:
        if not tasks:
            raise ValueError("No fetch tasks given.")
        labels = [t.label for t in tasks]
        dup_labels = sorted({lbl for lbl in labels if labels.count(lbl) > 1})
        if dup_labels:
            raise ValueError(f"Duplicate task labels: {dup_labels}")
        slots = [t.slot for t in tasks]
        dup_slots = sorted({s for s in slots if slots.count(s) > 1})
        if dup_slots:
            raise ValueError(f"More than one task fills slot(s): {dup_slots}")
        unknown = sorted(set(slots) - set(AGGREGATE_SLOTS))
        if unknown:
            raise ValueError(f"Unknown AggregateResult slot(s): {unknown}")

    async def _settle(self, task: FetchTask) -> FetchOutcome:
        """Run one task to a terminal state.  Never raises (except cancellation)."""
        try:
            raw = await task.operation()
            payload = self._adapter(task).validate_python(raw)
        except ValidationError as exc:
            return FetchOutcome(
                task.label, task.slot, ok=False,
                error=f"ValidationError: {exc.error_count()} invalid field(s) in payload",
            )
        except Exception as exc:
            return FetchOutcome(
                task.label, task.slot, ok=False, error=f"{type(exc).__name__}: {exc}"
            )
        return FetchOutcome(task.label, task.slot, ok=True, payload=payload)

    async def run(
        self,
        tasks: list[FetchTask],
        on_progress: Optional[ProgressCallback] = None,
    ) -> OrchestrationResult:
        """Execute all tasks concurrently and assemble the aggregate.

        Args:
            tasks:       Tasks to run.  Labels and slots must be unique.
            on_progress: Called once per task as it settles.

        Returns:
            ``OrchestrationResult`` with the aggregate and failed labels.

        Raises:
            ValueError:            If the task list is invalid (nothing runs).
            AllSourcesFailedError: If every task failed.
        """
        self._validate_tasks(tasks)
        total = len(tasks)
        started = time.perf_counter()
        logger.info("Fetching %d sources", total)

        outcomes: dict[str, FetchOutcome] = {}
        failed_labels: list[str] = []
        completed = 0

        for next_done in asyncio.as_completed([self._settle(t) for t in tasks]):
            outcome = await next_done
            completed += 1
            outcomes[outcome.label] = outcome
            if not outcome.ok:
                failed_labels.append(outcome.label)
                logger.warning("Source '%s' failed: %s", outcome.label, outcome.error)
            else:
                logger.debug("Source '%s' ok (%d/%d)", outcome.label, completed, total)

            if on_progress is not None:
                event = ProgressEvent(completed=completed, total=total,
                                      current_label=outcome.label)
                try:
                    on_progress(event)
                except Exception:
                    logger.exception("Progress callback raised for '%s'", outcome.label)

        duration = time.perf_counter() - started

        if len(failed_labels) == total:
            logger.error("All %d sources failed after %.2fs", total, duration)
            raise AllSourcesFailedError(
                failed_labels, {lbl: outcomes[lbl].error or "" for lbl in failed_labels}
            )

        slots: dict[str, Any] = {}
        for task in tasks:
            outcome = outcomes[task.label]
            slots[task.slot] = outcome.payload if outcome.ok else task.default()

        result = OrchestrationResult(
            aggregate=AggregateResult(**slots),
            failed_labels=failed_labels,
            outcomes=outcomes,
            duration_s=duration,
        )
        logger.info(
            "Fetch complete: %d/%d sources ok in %.2fs (status=%s)",
            total - len(failed_labels), total, duration, result.status,
        )
        return result

    def run_sync(
        self,
        tasks: list[FetchTask],
        on_progress: Optional[ProgressCallback] = None,
    ) -> OrchestrationResult:
        """Blocking wrapper around ``run()`` for callers without an event loop."""
        return asyncio.run(self.run(tasks, on_progress))
