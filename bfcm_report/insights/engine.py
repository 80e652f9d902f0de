"""
Rule engine entry point.

``run_rule_engine(aggregate, derived, config)`` runs every rule family over
one report and returns a frozen ``RuleEngineOutput``.  It is a pure
function of its inputs; nothing here does I/O or raises on valid models.
"""

from __future__ import annotations

import logging
from typing import Optional

from bfcm_report.config import AppConfig
from bfcm_report.insights.badges import calculate_badges
from bfcm_report.insights.context import RuleContext
from bfcm_report.insights.generator import build_insights
from bfcm_report.insights.narrative import build_highlights, build_narrative
from bfcm_report.insights.personality import detect_personalities
from bfcm_report.insights.recommendations import generate_recommendations
from bfcm_report.models.report import AggregateResult, DerivedMetrics, RuleEngineOutput

logger = logging.getLogger(__name__)


def run_rule_engine(
    aggregate: AggregateResult,
    derived: DerivedMetrics,
    config: Optional[AppConfig] = None,
) -> RuleEngineOutput:
    """Evaluate insights, recommendations, badges and personalities.

    Args:
        aggregate: Source payloads (defaults substituted for failures).
        derived:   ``compute_derived_metrics(aggregate)``.
        config:    Benchmarks, limits and peak timezone.  Defaults to
                   ``AppConfig()``.

    Returns:
        ``RuleEngineOutput``.
    """
    config = config or AppConfig()
    ctx = RuleContext.build(aggregate, derived, config)

    output = RuleEngineOutput(
        insights=build_insights(aggregate, derived, config),
        recommendations=generate_recommendations(ctx),
        badges=calculate_badges(ctx),
        personalities=detect_personalities(ctx),
        narrative=build_narrative(aggregate, derived),
        highlights=build_highlights(aggregate, derived, config.report.peak_timezone),
    )
    logger.info(
        "Rule engine: %d recommendations, %d badges, %d personalities",
        len(output.recommendations), len(output.badges), len(output.personalities),
    )
    return output
