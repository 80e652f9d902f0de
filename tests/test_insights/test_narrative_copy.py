"""Tests for bfcm_report/insights/narrative.py: transitions, intros and highlights."""

from __future__ import annotations

import pytest

from bfcm_report.insights.narrative import (
    build_highlights,
    build_narrative,
    channel_intro,
    customer_context,
    customer_transition,
    gmv_context,
    international_context,
    metrics_transition,
    peak_gmv_context,
    peak_hour_context,
    product_intro,
    recommendations_transition,
    top_customer_context,
    yoy_growth_context,
)
from bfcm_report.metrics.derived import compute_derived_metrics
from bfcm_report.models.report import AggregateResult, DominantChannel


class TestTransitions:
    def test_metrics_transition_tones(self, sample_aggregate):
        assert metrics_transition(compute_derived_metrics(sample_aggregate)).tone == "positive"
        assert metrics_transition(compute_derived_metrics(AggregateResult())).tone == "neutral"

    def test_customer_transition_keyed_on_repeat_rate(self, sample_aggregate):
        # Sample repeat rate is exactly 40%, which is not above 40.
        t = customer_transition(compute_derived_metrics(sample_aggregate))
        assert t.tone == "neutral"
        assert customer_transition(compute_derived_metrics(AggregateResult())).tone == "concern"

    def test_recommendations_transition_by_grade(self, sample_aggregate):
        # Grade D.
        t = recommendations_transition(compute_derived_metrics(sample_aggregate))
        assert t.tone == "concern"
        assert t.text.startswith("Let's turn insights into action")


class TestIntros:
    def test_channel_intro(self):
        assert channel_intro(None).startswith("Let's explore")
        dominant = DominantChannel(name="online", percentage=80.0, gmv=800.0)
        assert "dominates at 80%" in channel_intro(dominant)
        balanced = DominantChannel(name="pos", percentage=55.0, gmv=550.0)
        assert "healthy channel mix" in channel_intro(balanced)

    def test_product_intro(self):
        assert product_intro(53.0).startswith("Your product portfolio has a clear hero")
        assert product_intro(10.0).startswith("Your balanced product mix")


class TestContextCopy:
    @pytest.mark.parametrize("pct, fragment", [
        (150.0, "more than doubled"),
        (50.0, "Strong 50% growth"),
        (5.0, "You grew by 5%"),
        (-5.0, "held steady"),
        (-40.0, "learning experience"),
    ])
    def test_yoy_growth_context(self, pct, fragment):
        assert fragment in yoy_growth_context(pct)

    def test_gmv_context(self):
        assert "94,900+ merchants" in gmv_context(5_000_000.0)
        assert "81,000,000+ consumers" in gmv_context(150_000.0)

    def test_peak_hour_context(self):
        assert peak_hour_context("2025-11-28T02:14:00") == "when insomniacs were shopping"
        assert "12:01 PM EST" in peak_hour_context("2025-11-28T12:03:00")
        assert peak_hour_context("2025-11-28T12:06:00").startswith("in the noon rush")
        assert peak_hour_context("garbage") == "at peak shopping time"

    def test_peak_hour_context_with_timezone(self):
        text = peak_hour_context("2025-11-28T17:01:00Z", "America/New_York")
        assert "12:01 PM EST" in text

    def test_peak_gmv_context(self):
        text = peak_gmv_context(12500.0, "2025-11-28T02:14:00")
        assert text.startswith("Your peak of $12.5K/min happened when insomniacs were shopping")
        assert "contributing to the $5.1M/min platform peak" in text

    def test_customer_context(self):
        assert "first-timers" in customer_context(800, 100)
        assert "came back strong" in customer_context(100, 900)
        assert "balanced growth and loyalty" in customer_context(780, 520)

    def test_top_customer_context(self):
        assert "ordered from you 4 times" in top_customer_context(4, 2400.0)
        assert "spent $2.4K" in top_customer_context(1, 2400.0)

    def test_international_context(self):
        assert international_context(0) is None
        assert international_context(1) == "You shipped to 1 country, expanding your reach."
        assert "3 countries, expanding" in international_context(3)
        assert "spans 5 countries" in international_context(5)
        assert "true global seller" in international_context(12)


class TestAssembly:
    def test_build_narrative(self, sample_aggregate):
        derived = compute_derived_metrics(sample_aggregate)
        narrative = build_narrative(sample_aggregate, derived)
        assert narrative.conversion_intro.startswith("Understanding your funnel")
        assert "dominates at 80%" in narrative.channel_intro

    def test_build_highlights_sample(self, sample_aggregate):
        highlights = build_highlights(sample_aggregate, compute_derived_metrics(sample_aggregate))
        assert highlights.peak_gmv_context is not None
        assert highlights.international_context.startswith("You shipped to 3 countries")
        assert "ordered from you 4 times" in highlights.top_customer_context

    def test_build_highlights_defaults(self):
        agg = AggregateResult()
        highlights = build_highlights(agg, compute_derived_metrics(agg))
        assert highlights.peak_gmv_context is None
        assert highlights.international_context is None
