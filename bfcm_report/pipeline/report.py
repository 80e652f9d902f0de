"""
Report assembly: fetch, derive, evaluate.

    FetchRequest ──► build_report_tasks ──► FetchOrchestrator
                                               │
                              AggregateResult ◄┘
                                  │
                compute_derived_metrics ──► run_rule_engine ──► BusinessReport

Data flows one way.  The only I/O is inside the source fetchers; the
derived-metrics and rule stages are pure.

Errors
------
- Invalid window (too long):  ``ValueError`` before any fetch starts.
- Every source failed:        ``AllSourcesFailedError`` from the orchestrator.
- Some sources failed:        report returned with ``failed_labels`` set.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from bfcm_report.config import AppConfig
from bfcm_report.metrics.derived import compute_derived_metrics
from bfcm_report.insights.engine import run_rule_engine
from bfcm_report.models.report import BusinessReport
from bfcm_report.models.request import FetchRequest, check_window_length
from bfcm_report.pipeline.orchestrator import FetchOrchestrator, ProgressCallback
from bfcm_report.pipeline.tasks import build_report_tasks
from bfcm_report.sources.base import SourceFetcherSet

logger = logging.getLogger(__name__)


async def generate_report(
    request: FetchRequest,
    fetchers: SourceFetcherSet,
    config: Optional[AppConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> BusinessReport:
    """Build a complete merchant report.

    Args:
        request:     Validated report request.
        fetchers:    Source operations to fetch from.
        config:      App config.  Defaults to ``AppConfig()``.
        on_progress: Called once per source as it settles.

    Returns:
        ``BusinessReport``.

    Raises:
        ValueError:            If the window exceeds ``report.max_window_days``.
        AllSourcesFailedError: If every source failed.
    """
    config = config or AppConfig()
    check_window_length(request, config.report.max_window_days)

    context = {
        "shops": ",".join(request.shop_ids),
        "window": f"{request.start_date}..{request.end_date}",
    }
    logger.info("Generating report", extra=context)
    tasks = build_report_tasks(fetchers, request)
    fetched = await FetchOrchestrator().run(tasks, on_progress)
    if fetched.failed_labels:
        logger.warning(
            "Report is partial: %d source(s) failed", len(fetched.failed_labels),
            extra=context,
        )

    derived = compute_derived_metrics(fetched.aggregate)
    rules = run_rule_engine(fetched.aggregate, derived, config)

    return BusinessReport(
        request=request,
        aggregate=fetched.aggregate,
        failed_labels=fetched.failed_labels,
        total_sources=len(tasks),
        derived=derived,
        rules=rules,
        generated_at=datetime.now(tz=timezone.utc),
    )


def run_report(
    request: FetchRequest,
    fetchers: SourceFetcherSet,
    config: Optional[AppConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> BusinessReport:
    """Blocking wrapper around ``generate_report()``.  Closes the fetchers."""

    async def _run() -> BusinessReport:
        try:
            return await generate_report(request, fetchers, config, on_progress)
        finally:
            await fetchers.aclose()

    return asyncio.run(_run())
