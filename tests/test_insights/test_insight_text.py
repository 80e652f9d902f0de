"""
Tests for bfcm_report/insights/generator.py.

What we test
------------
- Each insight ladder picks the expected rung at and around its thresholds.
- Values and benchmarks are interpolated into the text.
- Special cases: zero retail locations, no dominant channel.
- build_insights() on the sample and all-default aggregates.
"""

from __future__ import annotations

import pytest

from bfcm_report.config import AppConfig, ReportConfig
from bfcm_report.insights.generator import (
    aov_insight,
    build_insights,
    channel_insight,
    funnel_insight,
    growth_insight,
    international_insight,
    loyalty_insight,
    mobile_insight,
    product_insight,
    retail_insight,
)
from bfcm_report.metrics.derived import compute_derived_metrics
from bfcm_report.models.report import AggregateResult


class TestGrowthInsight:
    @pytest.mark.parametrize("pct, opening", [
        (45.0, "Exceptional"),
        (30.0, "Outstanding"),
        (15.0, "Strong"),
        (5.0, "Steady positive"),
        (0.0, "Consolidating"),
        (-25.0, "Strategic reset"),
    ])
    def test_rungs(self, pct, opening):
        assert growth_insight(pct).startswith(opening)

    def test_comparison_label(self):
        assert "vs LY growth of 25.0%" in growth_insight(25.0, "vs LY")
        assert "vs LY momentum" in growth_insight(12.0, "vs LY")


class TestFunnelInsight:
    def test_exceptional_quotes_benchmark(self):
        text = funnel_insight(4.2, benchmark=2.5)
        assert "4.2%" in text
        assert "2.5% industry standard" in text

    def test_at_threshold_drops_a_rung(self):
        assert "solid intent capture" in funnel_insight(2.5)

    def test_low(self):
        assert funnel_insight(0.8).startswith("Conversion rate optimization")


class TestLoyaltyInsight:
    def test_exactly_forty_is_strong_loyalty(self):
        text = loyalty_insight(40.0)
        assert "strong loyalty" in text
        assert "exceptional brand loyalty" not in text

    def test_above_forty(self):
        assert "exceptional brand loyalty" in loyalty_insight(40.1)

    def test_low(self):
        assert loyalty_insight(10.0).startswith("Retention strategies")


class TestChannelRetailAovInsights:
    def test_channel_dominant(self):
        text = channel_insight("online", 80.0)
        assert "online channel is highly dominant at 80.0%" in text

    def test_channel_minor(self):
        assert channel_insight("pos", 20.0).startswith("pos represents 20.0%")

    def test_retail_no_locations(self):
        assert retail_insight(0.0, 0).startswith("Pure digital commerce")

    def test_retail_location_plural(self):
        assert "across 1 location." in retail_insight(45.0, 1)
        assert "across 3 locations." in retail_insight(25.0, 3)

    def test_aov_vs_benchmark(self):
        assert aov_insight(120.0, 75.0).startswith("Exceptional $120 AOV")
        assert aov_insight(100.0, 75.0).startswith("Strong $100 AOV")
        assert aov_insight(60.0, 75.0).startswith("$60 AOV is an opportunity")


class TestProductMobileInternational:
    def test_product_hero(self):
        assert "53.1% of sales" in product_insight(53.1, 3)

    def test_product_balanced(self):
        assert product_insight(20.0, 5).startswith("Balanced product portfolio")

    def test_mobile_shares(self):
        assert mobile_insight(75.0).startswith("75.0% mobile traffic")
        assert mobile_insight(55.0).startswith("Mobile-first audience")
        assert "Desktop remains strong at 60.0%" in mobile_insight(40.0)

    def test_international(self):
        assert "across 7 markets" in international_insight(45.0, 7)
        assert international_insight(12.0, 3).startswith("Emerging international")
        assert international_insight(2.0, 1).startswith("Primarily domestic")


class TestBuildInsights:
    def test_sample(self, sample_aggregate):
        derived = compute_derived_metrics(sample_aggregate)
        ins = build_insights(sample_aggregate, derived)
        assert ins.growth.startswith("Exceptional YoY growth")
        assert "strong loyalty" in ins.loyalty
        assert ins.channel.startswith("Your online channel is highly dominant at 80.0%")
        assert ins.retail.startswith("Emerging retail channel at 20.0%")

    def test_comparison_label_from_config(self, sample_aggregate):
        config = AppConfig(report=ReportConfig(comparison_label="vs 2024"))
        derived = compute_derived_metrics(sample_aggregate)
        assert "vs 2024 growth" in build_insights(sample_aggregate, derived, config).growth

    def test_all_defaults(self):
        agg = AggregateResult()
        ins = build_insights(agg, compute_derived_metrics(agg))
        assert ins.channel is None
        assert ins.retail.startswith("Pure digital commerce")
        assert ins.international.startswith("Primarily domestic")
