"""
Derived metrics: year-over-year deltas, ratios and the performance score.

``compute_derived_metrics(aggregate)`` is a pure function.  Calling it twice
on the same ``AggregateResult`` gives equal output.

YoY percent
-----------
    previous > 0  →  (current − previous) / previous × 100
    previous == 0 →  100 if current > 0 else 0

No prior baseline with positive current reads as +100%, never infinity.
Applied independently to GMV, orders and AOV.

Performance score (0–100)
-------------------------
Five bucketed components, summed and clamped to 100.  Each ladder is read
top-down, first match wins; comparisons are strict (``>``).

    growth     (GMV YoY %)       >50:30  >30:25  >15:20  >0:15  >-10:10  else 0
    conversion (conversion rate) >3.5:25 >2.5:20 >1.5:15 >1:10            else 5
    repeat     (repeat rate %)   >40:20  >30:15  >20:10                   else 5
    aov        (current AOV)     >150:15 >100:12 >75:9   >50:6            else 3
    scale      (current GMV)     >10M:10 >5M:8   >1M:6   >500K:4          else 2

Grade: ≥90 A, ≥80 B, ≥70 C, ≥60 D, else F.
Growth rate: >30 exceptional, >15 strong, >0 moderate, >-10 flat, else declining.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bfcm_report.insights.ladder import ThresholdLadder, above, at_least
from bfcm_report.models.metrics import ChannelPerformance, ProductPerformance
from bfcm_report.models.report import AggregateResult, DerivedMetrics, DominantChannel

# ── Score ladders ─────────────────────────────────────────────────────────────

_GROWTH_POINTS = ThresholdLadder[int](
    "growth_points",
    [(above(50), 30), (above(30), 25), (above(15), 20), (above(0), 15), (above(-10), 10)],
    otherwise=0,
)
_CONVERSION_POINTS = ThresholdLadder[int](
    "conversion_points",
    [(above(3.5), 25), (above(2.5), 20), (above(1.5), 15), (above(1), 10)],
    otherwise=5,
)
_REPEAT_POINTS = ThresholdLadder[int](
    "repeat_points",
    [(above(40), 20), (above(30), 15), (above(20), 10)],
    otherwise=5,
)
_AOV_POINTS = ThresholdLadder[int](
    "aov_points",
    [(above(150), 15), (above(100), 12), (above(75), 9), (above(50), 6)],
    otherwise=3,
)
_SCALE_POINTS = ThresholdLadder[int](
    "scale_points",
    [(above(10_000_000), 10), (above(5_000_000), 8), (above(1_000_000), 6),
     (above(500_000), 4)],
    otherwise=2,
)
_GRADE = ThresholdLadder[str](
    "grade",
    [(at_least(90), "A"), (at_least(80), "B"), (at_least(70), "C"), (at_least(60), "D")],
    otherwise="F",
)
_GROWTH_RATE = ThresholdLadder[str](
    "growth_rate",
    [(above(30), "exceptional"), (above(15), "strong"), (above(0), "moderate"),
     (above(-10), "flat")],
    otherwise="declining",
)

MAX_SCORE = 100


@dataclass
class ScoreComponents:
    """Points awarded by each performance-score component.

    Attributes:
        growth:     0–30, from GMV YoY %.
        conversion: 5–25, from conversion rate.
        repeat:     5–20, from repeat-customer rate.
        aov:        3–15, from current AOV.
        scale:      2–10, from current GMV.
    """

    growth:     int
    conversion: int
    repeat:     int
    aov:        int
    scale:      int

    @property
    def total(self) -> int:
        """Sum of all components, clamped to 100."""
        return min(
            self.growth + self.conversion + self.repeat + self.aov + self.scale,
            MAX_SCORE,
        )

    def as_dict(self) -> dict[str, int]:
        return {
            "growth": self.growth,
            "conversion": self.conversion,
            "repeat": self.repeat,
            "aov": self.aov,
            "scale": self.scale,
        }


# ── Helpers ───────────────────────────────────────────────────────────────────

def yoy_change(current: float, previous: float) -> float:
    return current - previous


def yoy_change_pct(current: float, previous: float) -> float:
    """YoY percent change with the no-baseline rule (see module docstring)."""
    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


def _pct(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def dominant_channel(channels: list[ChannelPerformance]) -> Optional[DominantChannel]:
    """Return the highest-GMV channel and its share of channel GMV.

    Ties go to the first channel listed.  ``None`` when there are no
    channels or their GMV sums to zero.
    """
    if not channels:
        return None
    total = sum(c.gmv_current for c in channels)
    if total <= 0:
        return None
    top = channels[0]
    for channel in channels[1:]:
        if channel.gmv_current > top.gmv_current:
            top = channel
    return DominantChannel(
        name=top.channel_type,
        percentage=top.gmv_current / total * 100,
        gmv=top.gmv_current,
    )


def top_product_share(products: list[ProductPerformance]) -> float:
    """First-listed product's revenue as a percent of all listed revenue."""
    if not products:
        return 0.0
    return _pct(products[0].revenue, sum(p.revenue for p in products))


def compute_score_components(
    gmv_yoy_pct: float,
    conversion_rate: float,
    repeat_rate: float,
    aov: float,
    gmv: float,
) -> ScoreComponents:
    return ScoreComponents(
        growth=_GROWTH_POINTS.evaluate(gmv_yoy_pct),
        conversion=_CONVERSION_POINTS.evaluate(conversion_rate),
        repeat=_REPEAT_POINTS.evaluate(repeat_rate),
        aov=_AOV_POINTS.evaluate(aov),
        scale=_SCALE_POINTS.evaluate(gmv),
    )


def grade_for_score(score: float) -> str:
    return _GRADE.evaluate(score)


def classify_growth(gmv_yoy_pct: float) -> str:
    return _GROWTH_RATE.evaluate(gmv_yoy_pct)


# ── Public entry point ────────────────────────────────────────────────────────

def compute_derived_metrics(aggregate: AggregateResult) -> DerivedMetrics:
    """Compute every derived metric from one ``AggregateResult``.

    Args:
        aggregate: Source payloads, defaults substituted for failed sources.

    Returns:
        Frozen ``DerivedMetrics``.  All-default input yields zeros, grade F
        and growth rate ``"flat"``.
    """
    cur = aggregate.metrics_current
    prev = aggregate.metrics_previous
    customers = aggregate.customer_insights
    conversion = aggregate.conversion_metrics

    gmv_pct = yoy_change_pct(cur.total_gmv, prev.total_gmv)

    total_customers = customers.new_customers + customers.returning_customers
    returning_pct = _pct(customers.returning_customers, total_customers)

    sessions = conversion.mobile_sessions + conversion.desktop_sessions

    products = aggregate.top_products

    components = compute_score_components(
        gmv_yoy_pct=gmv_pct,
        conversion_rate=conversion.conversion_rate,
        repeat_rate=returning_pct,
        aov=cur.aov,
        gmv=cur.total_gmv,
    )
    score = components.total

    return DerivedMetrics(
        yoy_gmv_change=yoy_change(cur.total_gmv, prev.total_gmv),
        yoy_gmv_change_pct=gmv_pct,
        yoy_orders_change=yoy_change(cur.total_orders, prev.total_orders),
        yoy_orders_change_pct=yoy_change_pct(cur.total_orders, prev.total_orders),
        yoy_aov_change=yoy_change(cur.aov, prev.aov),
        yoy_aov_change_pct=yoy_change_pct(cur.aov, prev.aov),
        total_customers=total_customers,
        new_customer_pct=_pct(customers.new_customers, total_customers),
        returning_customer_pct=returning_pct,
        repeat_customer_rate=returning_pct,
        average_upt=aggregate.units_per_transaction,
        mobile_session_pct=_pct(conversion.mobile_sessions, sessions),
        desktop_session_pct=_pct(conversion.desktop_sessions, sessions),
        dominant_channel=dominant_channel(aggregate.channel_performance),
        top_product_revenue=products[0].revenue if products else 0.0,
        top_product_share=top_product_share(products),
        performance_score=score,
        performance_grade=grade_for_score(score),
        score_breakdown=components.as_dict(),
        is_growing=gmv_pct > 0,
        growth_rate=classify_growth(gmv_pct),
    )
