"""
Shared pytest fixtures for the BFCM report test suite.

Provides:
  - ``sample_payloads``: raw source payloads from ``tests/fixtures/sample_sources.json``.
  - ``sample_request``: a valid 4-day BFCM ``FetchRequest`` for one shop.
  - ``sample_aggregate``: ``AggregateResult`` built from the sample payloads.
  - ``make_aggregate``: factory building an ``AggregateResult`` from keyword
    overrides on top of all-default slots.
"""

from __future__ import annotations

import copy
import json
from datetime import date
from pathlib import Path
from typing import Any, Callable

import pytest

from bfcm_report.models.report import AggregateResult
from bfcm_report.models.request import FetchRequest

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_SOURCES = FIXTURES_DIR / "sample_sources.json"


@pytest.fixture
def sample_sources_path() -> Path:
    return SAMPLE_SOURCES


@pytest.fixture
def sample_payloads() -> dict[str, Any]:
    """Raw ``sources`` mapping from the sample snapshot (fresh copy per test)."""
    with open(SAMPLE_SOURCES, encoding="utf-8") as f:
        return copy.deepcopy(json.load(f)["sources"])


@pytest.fixture
def sample_request() -> FetchRequest:
    """Black Friday through Cyber Monday 2025 for shop 12345."""
    return FetchRequest(
        shop_ids=["12345"],
        start_date=date(2025, 11, 28),
        end_date=date(2025, 12, 1),
        account_name="Northwind Outfitters",
    )


@pytest.fixture
def sample_aggregate(sample_payloads: dict[str, Any]) -> AggregateResult:
    p = sample_payloads
    return AggregateResult(
        metrics_current=p["core_metrics"]["2025"],
        metrics_previous=p["core_metrics"]["2024"],
        peak_gmv=p["peak_gmv"],
        top_products=p["top_products"],
        channel_performance=p["channel_performance"],
        retail_metrics=p["retail_metrics"],
        conversion_metrics=p["conversion_metrics"],
        customer_insights=p["customer_insights"],
        referrer_data=p["referrer_data"],
        platform_stats=p["platform_stats"],
        shop_breakdown=p["shop_breakdown"],
        discount_metrics=p["discount_metrics"],
        international_sales=p["international_sales"],
        units_per_transaction=p["units_per_transaction"],
    )


@pytest.fixture
def make_aggregate() -> Callable[..., AggregateResult]:
    """Return a factory: ``make_aggregate(metrics_current={...}, ...)``."""

    def _make(**slots: Any) -> AggregateResult:
        return AggregateResult(**slots)

    return _make
