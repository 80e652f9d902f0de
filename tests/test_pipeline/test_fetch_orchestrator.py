"""
Tests for bfcm_report/pipeline/orchestrator.py.

What we test
------------
FetchOrchestrator.run():
  - All tasks succeed → status "success", no failed labels, payloads in slots.
  - k of N tasks fail (0 < k < N) → exactly k defaulted slots, k failed labels,
    no exception.
  - All N tasks fail → AllSourcesFailedError carrying every label.
  - Progress callback fires exactly N times, completed = 1..N, total = N.
  - Progress events and failed labels follow completion order, not
    declaration order.
  - Slot placement is independent of completion order.
  - A payload that fails type validation counts as a failure.
  - A raising progress callback does not change the outcome.
  - Tasks run concurrently (all start before any finishes).

Task list validation:
  - Empty list, duplicate labels, duplicate slots and unknown slots raise
    ValueError before any task runs.

run_sync():
  - Returns the same result shape outside an event loop.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest

from bfcm_report.models.metrics import CoreMetrics, RetailMetrics
from bfcm_report.models.report import AggregateResult
from bfcm_report.pipeline.orchestrator import (
    AllSourcesFailedError,
    FetchOrchestrator,
    ProgressEvent,
)
from bfcm_report.pipeline.tasks import FetchTask


# ── Helpers ────────────────────────────────────────────────────────────────────

def _task(
    label: str,
    slot: str,
    payload: Any = None,
    error: Optional[Exception] = None,
    delay: float = 0.0,
    started: Optional[list[str]] = None,
) -> FetchTask:
    async def op() -> Any:
        if started is not None:
            started.append(label)
        await asyncio.sleep(delay)
        if error is not None:
            raise error
        return payload

    return FetchTask(label=label, slot=slot, operation=op)


def _run(tasks: list[FetchTask], events: Optional[list[ProgressEvent]] = None):
    callback = events.append if events is not None else None
    return asyncio.run(FetchOrchestrator().run(tasks, callback))


_CORE = {"total_orders": 10, "total_gmv": 1000.0, "aov": 100.0}


# ── Success and partial failure ───────────────────────────────────────────────

class TestSettleAll:
    def test_all_succeed(self):
        result = _run([
            _task("Core", "metrics_current", _CORE),
            _task("UPT", "units_per_transaction", 2.5),
        ])
        assert result.failed_labels == []
        assert result.status == "success"
        assert result.aggregate.metrics_current == CoreMetrics(**_CORE)
        assert result.aggregate.units_per_transaction == pytest.approx(2.5)

    def test_partial_failure_defaults_only_failed_slots(self):
        result = _run([
            _task("Core", "metrics_current", _CORE),
            _task("Retail", "retail_metrics", error=RuntimeError("timeout")),
            _task("Peak", "peak_gmv", error=ConnectionError("reset")),
            _task("UPT", "units_per_transaction", 1.7),
        ])
        assert sorted(result.failed_labels) == ["Peak", "Retail"]
        assert result.status == "partial"
        assert result.aggregate.retail_metrics == RetailMetrics()
        assert result.aggregate.peak_gmv is None
        assert result.aggregate.metrics_current.total_gmv == pytest.approx(1000.0)
        assert result.aggregate.units_per_transaction == pytest.approx(1.7)

    def test_outcome_records_error_text(self):
        result = _run([
            _task("Core", "metrics_current", _CORE),
            _task("Retail", "retail_metrics", error=RuntimeError("warehouse timeout")),
        ])
        outcome = result.outcomes["Retail"]
        assert not outcome.ok
        assert "RuntimeError" in outcome.error
        assert "warehouse timeout" in outcome.error

    def test_all_fail_raises(self):
        tasks = [
            _task("A", "metrics_current", error=RuntimeError("a")),
            _task("B", "metrics_previous", error=RuntimeError("b")),
            _task("C", "peak_gmv", error=RuntimeError("c")),
        ]
        with pytest.raises(AllSourcesFailedError) as exc_info:
            _run(tasks)
        assert sorted(exc_info.value.failed_labels) == ["A", "B", "C"]
        assert set(exc_info.value.errors) == {"A", "B", "C"}

    def test_single_task_failing_is_total_failure(self):
        with pytest.raises(AllSourcesFailedError):
            _run([_task("Only", "metrics_current", error=ValueError("x"))])

    def test_invalid_payload_counts_as_failure(self):
        result = _run([
            _task("Core", "metrics_current", {"total_orders": "many", "total_gmv": -5}),
            _task("UPT", "units_per_transaction", 2.0),
        ])
        assert result.failed_labels == ["Core"]
        assert result.aggregate.metrics_current == CoreMetrics()

    def test_negative_scalar_payload_fails_validation(self):
        result = _run([
            _task("Core", "metrics_current", _CORE),
            _task("UPT", "units_per_transaction", -1.0),
        ])
        assert result.failed_labels == ["UPT"]
        assert result.aggregate.units_per_transaction == 0.0

    def test_none_payload_is_valid_for_nullable_slot(self):
        result = _run([
            _task("Core", "metrics_current", _CORE),
            _task("Peak", "peak_gmv", None),
        ])
        assert result.failed_labels == []
        assert result.aggregate.peak_gmv is None


# ── Progress and ordering ─────────────────────────────────────────────────────

class TestProgress:
    def test_one_event_per_task_strictly_increasing(self):
        events: list[ProgressEvent] = []
        tasks = [
            _task(f"T{i}", slot, payload)
            for i, (slot, payload) in enumerate([
                ("metrics_current", _CORE),
                ("metrics_previous", _CORE),
                ("top_products", []),
                ("units_per_transaction", 1.0),
            ])
        ]
        _run(tasks, events)
        assert len(events) == 4
        assert [e.completed for e in events] == [1, 2, 3, 4]
        assert all(e.total == 4 for e in events)
        assert sorted(e.current_label for e in events) == ["T0", "T1", "T2", "T3"]

    def test_failures_count_toward_progress(self):
        events: list[ProgressEvent] = []
        _run([
            _task("ok", "metrics_current", _CORE),
            _task("bad", "metrics_previous", error=RuntimeError("x")),
        ], events)
        assert [e.completed for e in events] == [1, 2]
        assert {e.current_label for e in events} == {"ok", "bad"}

    def test_events_follow_completion_order(self):
        events: list[ProgressEvent] = []
        _run([
            _task("slow", "metrics_current", _CORE, delay=0.06),
            _task("fast", "metrics_previous", _CORE, delay=0.0),
            _task("mid", "units_per_transaction", 1.0, delay=0.03),
        ], events)
        assert [e.current_label for e in events] == ["fast", "mid", "slow"]

    def test_failed_labels_in_completion_order(self):
        result = _run([
            _task("late-fail", "peak_gmv", error=RuntimeError("x"), delay=0.05),
            _task("early-fail", "retail_metrics", error=RuntimeError("y"), delay=0.0),
            _task("ok", "metrics_current", _CORE, delay=0.02),
        ])
        assert result.failed_labels == ["early-fail", "late-fail"]

    def test_slots_independent_of_completion_order(self):
        current = {"total_orders": 2, "total_gmv": 200.0, "aov": 100.0}
        previous = {"total_orders": 1, "total_gmv": 50.0, "aov": 50.0}
        a = _run([
            _task("cur", "metrics_current", current, delay=0.04),
            _task("prev", "metrics_previous", previous, delay=0.0),
        ]).aggregate
        b = _run([
            _task("cur", "metrics_current", current, delay=0.0),
            _task("prev", "metrics_previous", previous, delay=0.04),
        ]).aggregate
        assert a == b
        assert a.metrics_current.total_gmv == pytest.approx(200.0)
        assert a.metrics_previous.total_gmv == pytest.approx(50.0)

    def test_raising_callback_is_ignored(self):
        calls: list[int] = []

        def bad_callback(event: ProgressEvent) -> None:
            calls.append(event.completed)
            raise RuntimeError("UI went away")

        result = asyncio.run(FetchOrchestrator().run(
            [_task("a", "metrics_current", _CORE), _task("b", "metrics_previous", _CORE)],
            bad_callback,
        ))
        assert calls == [1, 2]
        assert result.failed_labels == []


class TestConcurrency:
    def test_all_tasks_start_before_any_finishes(self):
        specs = [
            ("t0", "metrics_current", _CORE),
            ("t1", "metrics_previous", _CORE),
            ("t2", "units_per_transaction", 1.0),
            ("t3", "top_products", []),
            ("t4", "shop_breakdown", []),
        ]
        started: list[str] = []

        async def scenario():
            all_started = asyncio.Event()

            def make(label: str, slot: str, payload: Any) -> FetchTask:
                async def op() -> Any:
                    started.append(label)
                    if len(started) == len(specs):
                        all_started.set()
                    # Sequential execution would never set the event.
                    await asyncio.wait_for(all_started.wait(), timeout=2.0)
                    return payload
                return FetchTask(label=label, slot=slot, operation=op)

            return await FetchOrchestrator().run([make(*s) for s in specs])

        result = asyncio.run(scenario())
        assert result.failed_labels == []
        assert sorted(started) == ["t0", "t1", "t2", "t3", "t4"]


# ── Validation ────────────────────────────────────────────────────────────────

class TestTaskValidation:
    def test_empty_task_list(self):
        with pytest.raises(ValueError, match="No fetch tasks"):
            _run([])

    def test_duplicate_labels(self):
        started: list[str] = []
        with pytest.raises(ValueError, match="Duplicate task labels"):
            _run([
                _task("Same", "metrics_current", _CORE, started=started),
                _task("Same", "metrics_previous", _CORE, started=started),
            ])
        assert started == []

    def test_duplicate_slots(self):
        with pytest.raises(ValueError, match="metrics_current"):
            _run([
                _task("A", "metrics_current", _CORE),
                _task("B", "metrics_current", _CORE),
            ])

    def test_unknown_slot(self):
        with pytest.raises(ValueError, match="Unknown AggregateResult slot"):
            _run([_task("A", "not_a_slot", 1)])


class TestRunSync:
    def test_run_sync(self):
        result = FetchOrchestrator().run_sync([
            _task("Core", "metrics_current", _CORE),
            _task("Peak", "peak_gmv", error=RuntimeError("x")),
        ])
        assert isinstance(result.aggregate, AggregateResult)
        assert result.failed_labels == ["Peak"]
