"""
Report-level models: the aggregate record, derived metrics and rule output.

``AggregateResult`` has one slot per fetch task.  Its schema, not the order
in which sources finish, fixes the shape of the result: every slot carries a
task-specific neutral default so the record is total even when sources fail.

``DerivedMetrics`` and ``RuleEngineOutput`` are pure functions of an
``AggregateResult`` (plus config); both are frozen.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from bfcm_report.models.metrics import (
    ChannelPerformance,
    ConversionMetrics,
    CoreMetrics,
    CustomerInsights,
    DiscountMetrics,
    InternationalSales,
    PeakGMV,
    PlatformStats,
    ProductPerformance,
    ReferrerData,
    RetailMetrics,
    ShopBreakdown,
)
from bfcm_report.models.request import FetchRequest

Grade = Literal["A", "B", "C", "D", "F"]
GrowthRate = Literal["exceptional", "strong", "moderate", "flat", "declining"]
Priority = Literal["high", "medium", "low"]
Category = Literal["growth", "optimization", "risk"]
Tone = Literal["positive", "neutral", "concern"]

PRIORITY_RANK: dict[str, int] = {"high": 0, "medium": 1, "low": 2}


# ── Aggregate ─────────────────────────────────────────────────────────────────

class AggregateResult(BaseModel):
    """All source payloads for one report run, defaults substituted for failures."""

    model_config = ConfigDict(frozen=True)

    metrics_current: CoreMetrics = CoreMetrics()
    metrics_previous: CoreMetrics = CoreMetrics()
    peak_gmv: Optional[PeakGMV] = None
    top_products: list[ProductPerformance] = Field(default_factory=list)
    channel_performance: list[ChannelPerformance] = Field(default_factory=list)
    retail_metrics: RetailMetrics = RetailMetrics()
    conversion_metrics: ConversionMetrics = ConversionMetrics()
    customer_insights: CustomerInsights = CustomerInsights()
    referrer_data: ReferrerData = ReferrerData()
    platform_stats: Optional[PlatformStats] = None
    shop_breakdown: list[ShopBreakdown] = Field(default_factory=list)
    discount_metrics: DiscountMetrics = DiscountMetrics()
    international_sales: InternationalSales = InternationalSales()
    units_per_transaction: float = Field(default=0.0, ge=0)


AGGREGATE_SLOTS: tuple[str, ...] = tuple(AggregateResult.model_fields)


def slot_default(slot: str) -> Any:
    """Return a fresh neutral default for an ``AggregateResult`` slot.

    Raises:
        KeyError: If ``slot`` is not an ``AggregateResult`` field.
    """
    return AggregateResult.model_fields[slot].get_default(call_default_factory=True)


def slot_type(slot: str) -> Any:
    """Return the declared payload type of a slot, constraints included."""
    info = AggregateResult.model_fields[slot]
    if info.metadata:
        return Annotated[(info.annotation, *info.metadata)]
    return info.annotation


# ── Derived metrics ───────────────────────────────────────────────────────────

class DominantChannel(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    percentage: float
    gmv: float


class DerivedMetrics(BaseModel):
    """Year-over-year deltas, ratios and the composite performance score.

    Percentages are on a 0–100 scale.  ``score_breakdown`` maps each score
    component (``growth``, ``conversion``, ``repeat``, ``aov``, ``scale``)
    to the points it awarded.
    """

    model_config = ConfigDict(frozen=True)

    yoy_gmv_change: float
    yoy_gmv_change_pct: float
    yoy_orders_change: float
    yoy_orders_change_pct: float
    yoy_aov_change: float
    yoy_aov_change_pct: float

    total_customers: int
    new_customer_pct: float
    returning_customer_pct: float
    repeat_customer_rate: float

    average_upt: float
    mobile_session_pct: float
    desktop_session_pct: float

    dominant_channel: Optional[DominantChannel] = None
    top_product_revenue: float
    top_product_share: float

    performance_score: int
    performance_grade: Grade
    score_breakdown: dict[str, int]
    is_growing: bool
    growth_rate: GrowthRate


# ── Rule engine output ────────────────────────────────────────────────────────

class Recommendation(BaseModel):
    """One prioritized action item.

    Attributes:
        priority:         ``high`` | ``medium`` | ``low``.
        category:         ``growth`` | ``optimization`` | ``risk``.
        title:            Short headline.
        description:      One or two sentences grounded in the merchant's numbers.
        potential_impact: Expected effect if acted on.
        platform_feature: Platform product that addresses it, if any.
    """

    model_config = ConfigDict(frozen=True)

    priority: Priority
    category: Category
    title: str
    description: str
    potential_impact: str
    platform_feature: Optional[str] = None


class Badge(BaseModel):
    model_config = ConfigDict(frozen=True)

    badge_id: str
    title: str
    description: str
    visual_tag: str
    unlocked: bool = True


class PersonalityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    personality: str
    title: str
    description: str
    visual_tag: str


class InsightSet(BaseModel):
    """Free-text insight per metric family.

    ``channel`` is ``None`` when there is no channel data to talk about.
    """

    model_config = ConfigDict(frozen=True)

    growth: str
    funnel: str
    loyalty: str
    channel: Optional[str] = None
    retail: str
    aov: str
    product: str
    mobile: str
    international: str


class NarrativeTransition(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    tone: Tone


class NarrativeSet(BaseModel):
    """Connective copy between report sections."""

    model_config = ConfigDict(frozen=True)

    metrics_transition: NarrativeTransition
    customer_transition: NarrativeTransition
    recommendations_transition: NarrativeTransition
    channel_intro: str
    product_intro: str
    conversion_intro: str


class HighlightSet(BaseModel):
    """Contextual one-liners that place the merchant's numbers in perspective."""

    model_config = ConfigDict(frozen=True)

    gmv_context: str
    yoy_growth_context: str
    customer_context: str
    top_customer_context: str
    peak_gmv_context: Optional[str] = None
    international_context: Optional[str] = None


class RuleEngineOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    insights: InsightSet
    recommendations: list[Recommendation]
    badges: list[Badge]
    personalities: list[PersonalityResult]
    narrative: NarrativeSet
    highlights: HighlightSet


class BusinessReport(BaseModel):
    """Everything a presentation layer needs for one merchant report.

    Attributes:
        request:       The validated request the report was built for.
        aggregate:     Source payloads (defaults substituted for failures).
        failed_labels: Labels of sources that failed, in completion order.
        total_sources: Number of fetch tasks the run issued.
        derived:       Derived metrics computed from ``aggregate``.
        rules:         Insights, recommendations, badges and personalities.
        generated_at:  UTC timestamp of report assembly.
    """

    model_config = ConfigDict(frozen=True)

    request: FetchRequest
    aggregate: AggregateResult
    failed_labels: list[str]
    total_sources: int = Field(ge=1)
    derived: DerivedMetrics
    rules: RuleEngineOutput
    generated_at: datetime

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_labels)
