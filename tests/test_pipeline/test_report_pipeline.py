"""
End-to-end tests for bfcm_report/pipeline/report.py with fixture sources.

What we test
------------
- Full run: 14 progress events, no failed labels, derived + rules populated.
- Partial run: failing sources are listed, their slots hold defaults, the
  rest of the report is intact.
- Every source failing → AllSourcesFailedError.
- Window longer than report.max_window_days → ValueError before any fetch.
- run_report() closes the fetchers.
- The same inputs give the same derived metrics and rule output.
"""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from bfcm_report.config import AppConfig, ReportConfig
from bfcm_report.models.metrics import RetailMetrics
from bfcm_report.models.request import FetchRequest
from bfcm_report.pipeline.orchestrator import AllSourcesFailedError, ProgressEvent
from bfcm_report.pipeline.report import generate_report, run_report
from bfcm_report.pipeline.tasks import build_report_tasks
from bfcm_report.sources.base import SOURCE_NAMES
from bfcm_report.sources.fixture import FixtureSourceFetcherSet


class _ClosingFetchers(FixtureSourceFetcherSet):
    closed = False

    async def aclose(self) -> None:
        self.closed = True


class TestFullRun:
    def test_complete_report(self, sample_payloads, sample_request):
        events: list[ProgressEvent] = []
        report = run_report(
            sample_request, FixtureSourceFetcherSet(sample_payloads),
            on_progress=events.append,
        )
        assert report.failed_labels == []
        assert report.is_partial is False
        tasks = build_report_tasks(FixtureSourceFetcherSet(sample_payloads), sample_request)
        assert report.total_sources == len(tasks) == 14
        assert [e.completed for e in events] == list(range(1, 15))
        assert all(e.total == 14 for e in events)
        assert report.derived.yoy_gmv_change_pct == pytest.approx(50.0)
        assert report.derived.performance_grade == "D"
        assert len(report.rules.recommendations) == 3
        assert report.rules.insights.channel is not None
        assert report.generated_at.tzinfo is not None

    def test_deterministic_rules(self, sample_payloads, sample_request):
        a = run_report(sample_request, FixtureSourceFetcherSet(sample_payloads))
        b = run_report(sample_request, FixtureSourceFetcherSet(sample_payloads))
        assert a.derived == b.derived
        assert a.rules == b.rules

    def test_closes_fetchers(self, sample_payloads, sample_request):
        fetchers = _ClosingFetchers(sample_payloads)
        run_report(sample_request, fetchers)
        assert fetchers.closed is True


class TestPartialRun:
    def test_failed_sources_default(self, sample_payloads, sample_request):
        fetchers = FixtureSourceFetcherSet(
            sample_payloads, failing=["retail_metrics", "peak_gmv"],
        )
        report = run_report(sample_request, fetchers)
        assert sorted(report.failed_labels) == ["Peak GMV", "Retail Metrics"]
        assert report.is_partial is True
        assert report.aggregate.retail_metrics == RetailMetrics()
        assert report.aggregate.peak_gmv is None
        assert report.aggregate.metrics_current.total_gmv == pytest.approx(150000.0)
        assert report.rules.highlights.peak_gmv_context is None
        assert "night-owl" not in [b.badge_id for b in report.rules.badges]

    def test_failed_prior_year_reads_as_new_baseline(self, sample_payloads, sample_request):
        fetchers = FixtureSourceFetcherSet(sample_payloads, failing=["core_metrics:2024"])
        report = run_report(sample_request, fetchers)
        assert report.failed_labels == ["Core Metrics 2024"]
        assert report.derived.yoy_gmv_change_pct == 100.0

    def test_all_sources_fail(self, sample_payloads, sample_request):
        fetchers = FixtureSourceFetcherSet(sample_payloads, failing=SOURCE_NAMES)
        with pytest.raises(AllSourcesFailedError) as exc_info:
            run_report(sample_request, fetchers)
        assert len(exc_info.value.failed_labels) == 14

    def test_failures_listed_in_completion_order(self, sample_payloads, sample_request):
        fetchers = FixtureSourceFetcherSet(
            sample_payloads,
            failing=["referrer_data", "platform_stats"],
            delays={"referrer_data": 0.05, "platform_stats": 0.01},
        )
        report = run_report(sample_request, fetchers)
        assert report.failed_labels == ["Platform Stats", "Referrer Data"]


class TestRequestChecks:
    def test_window_too_long(self, sample_payloads):
        request = FetchRequest(
            shop_ids=["12345"],
            start_date=date(2025, 9, 1),
            end_date=date(2025, 12, 1),
        )
        fetchers = FixtureSourceFetcherSet(sample_payloads)
        with pytest.raises(ValueError, match="exceeds the maximum"):
            asyncio.run(generate_report(request, fetchers))
        assert fetchers.calls == []

    def test_window_limit_from_config(self, sample_payloads, sample_request):
        config = AppConfig(report=ReportConfig(max_window_days=3))
        with pytest.raises(ValueError, match="maximum of 3 days"):
            asyncio.run(generate_report(
                sample_request, FixtureSourceFetcherSet(sample_payloads), config,
            ))
