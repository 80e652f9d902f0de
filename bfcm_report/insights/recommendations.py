"""
Recommendation battery.

A fixed, ordered list of independent rules.  Each rule looks at the
``RuleContext`` and returns one ``Recommendation`` or ``None``.  After every
rule has run:

  1. Recommendations are stably sorted by priority (high → medium → low);
     within a tier they keep battery order.
  2. The list is truncated to ``report.max_recommendations`` (default 8).

Rules only fire on data that is present: a failed conversion source leaves
zero sessions, and a zero-session funnel is "no data", not "0% conversion".
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from bfcm_report.config import MAX_RECOMMENDATIONS
from bfcm_report.insights.context import RuleContext
from bfcm_report.models.report import PRIORITY_RANK, Recommendation
from bfcm_report.reporting.formatters import format_currency, format_percent

logger = logging.getLogger(__name__)

RecommendationRule = Callable[[RuleContext], Optional[Recommendation]]


# ── Rules ─────────────────────────────────────────────────────────────────────

def declining_growth(ctx: RuleContext) -> Optional[Recommendation]:
    if ctx.derived.growth_rate != "declining":
        return None
    return Recommendation(
        priority="high",
        category="risk",
        title="Reverse the year-over-year sales decline",
        description=(
            f"GMV is down {format_percent(ctx.derived.yoy_gmv_change_pct)} on last "
            f"year's BFCM. Review which channels and products lost ground and "
            f"re-engage lapsed customers before the next peak."
        ),
        potential_impact="Recovering even half of the lost GMV next season",
        platform_feature="Shopify Email win-back campaigns",
    )


def low_conversion(ctx: RuleContext) -> Optional[Recommendation]:
    if ctx.aggregate.conversion_metrics.total_sessions == 0 or ctx.conversion_rate >= 1.5:
        return None
    return Recommendation(
        priority="high",
        category="optimization",
        title="Lift checkout conversion",
        description=(
            f"Only {ctx.conversion_rate:.2f}% of sessions converted, against an "
            f"industry average of {ctx.config.benchmarks.conversion_rate:.1f}%. "
            f"Accelerated checkout removes form friction for returning buyers."
        ),
        potential_impact="Up to 50% higher conversion for Shop Pay users",
        platform_feature="Shop Pay",
    )


def low_retention(ctx: RuleContext) -> Optional[Recommendation]:
    if not ctx.has_customers or ctx.derived.repeat_customer_rate >= 20:
        return None
    return Recommendation(
        priority="high",
        category="growth",
        title="Build a retention program",
        description=(
            f"Returning customers were {ctx.derived.repeat_customer_rate:.1f}% of "
            f"BFCM shoppers (benchmark {ctx.config.benchmarks.repeat_rate:.0f}%). "
            f"Post-purchase flows and loyalty offers turn BFCM buyers into repeat buyers."
        ),
        potential_impact="Higher customer lifetime value and lower acquisition spend",
        platform_feature="Shopify Email and Shopify Flow",
    )


def cart_abandonment(ctx: RuleContext) -> Optional[Recommendation]:
    conv = ctx.aggregate.conversion_metrics
    if conv.sessions_with_cart == 0 or ctx.cart_to_checkout_rate >= 50:
        return None
    return Recommendation(
        priority="medium",
        category="optimization",
        title="Recover abandoned carts",
        description=(
            f"Only {ctx.cart_to_checkout_rate:.1f}% of carts reached checkout. "
            f"Automated abandoned-cart reminders and clearer shipping costs close "
            f"the gap."
        ),
        potential_impact="Recovering 5-10% of abandoned carts",
        platform_feature="Abandoned checkout automations",
    )


def channel_concentration(ctx: RuleContext) -> Optional[Recommendation]:
    dominant = ctx.derived.dominant_channel
    if dominant is None or dominant.percentage <= 80:
        return None
    return Recommendation(
        priority="medium",
        category="risk",
        title="Diversify sales channels",
        description=(
            f"{dominant.name} produced {dominant.percentage:.1f}% of channel GMV. "
            f"Adding marketplaces, social or in-person selling spreads the risk of "
            f"a single channel underperforming."
        ),
        potential_impact="Lower exposure to a single channel's traffic swings",
        platform_feature="Shopify Marketplace Connect",
    )


def product_concentration(ctx: RuleContext) -> Optional[Recommendation]:
    if ctx.derived.top_product_share <= 50:
        return None
    return Recommendation(
        priority="medium",
        category="risk",
        title="Reduce dependence on a single product",
        description=(
            f"Your top product drove {ctx.derived.top_product_share:.1f}% of "
            f"top-product revenue. Cross-sell complementary items on its product "
            f"page to broaden the catalog's contribution."
        ),
        potential_impact="More resilient revenue if the hero product stalls",
        platform_feature="Shopify Search & Discovery recommendations",
    )


def low_aov(ctx: RuleContext) -> Optional[Recommendation]:
    benchmark = ctx.config.benchmarks.aov
    if not 0 < ctx.aov < benchmark:
        return None
    return Recommendation(
        priority="medium",
        category="growth",
        title="Raise average order value",
        description=(
            f"AOV of {format_currency(ctx.aov)} is below the "
            f"{format_currency(benchmark)} benchmark. Pay-over-time options and "
            f"free-shipping thresholds encourage larger baskets."
        ),
        potential_impact="10-20% higher AOV on financed orders",
        platform_feature="Shop Pay Installments",
    )


def low_units_per_transaction(ctx: RuleContext) -> Optional[Recommendation]:
    upt = ctx.derived.average_upt
    if not 0 < upt < 1.5:
        return None
    return Recommendation(
        priority="low",
        category="growth",
        title="Encourage multi-item orders",
        description=(
            f"Orders averaged {upt:.2f} units. Bundles and volume discounts give "
            f"shoppers a reason to add a second item."
        ),
        potential_impact="More units per order at the same acquisition cost",
        platform_feature="Shopify Bundles",
    )


def mobile_conversion_gap(ctx: RuleContext) -> Optional[Recommendation]:
    if not ctx.has_sessions or ctx.mobile_pct <= 70:
        return None
    if ctx.conversion_rate >= ctx.config.benchmarks.conversion_rate:
        return None
    return Recommendation(
        priority="medium",
        category="optimization",
        title="Optimize the mobile checkout",
        description=(
            f"{ctx.mobile_pct:.0f}% of sessions were on mobile, but conversion is "
            f"{ctx.conversion_rate:.2f}%. One-tap checkout and faster mobile pages "
            f"matter most for this audience."
        ),
        potential_impact="Conversion closer to the industry benchmark on mobile",
        platform_feature="Shop Pay",
    )


def discount_dependence(ctx: RuleContext) -> Optional[Recommendation]:
    pct = ctx.aggregate.discount_metrics.discounted_sales_pct
    if ctx.total_sales <= 0 or pct < 70:
        return None
    return Recommendation(
        priority="medium",
        category="risk",
        title="Protect margin from discount dependence",
        description=(
            f"{pct:.0f}% of sales used a discount. Tiered or gift-with-purchase "
            f"offers can keep BFCM urgency without training customers to wait for "
            f"markdowns."
        ),
        potential_impact="Healthier margins on peak-season revenue",
        platform_feature="Shopify Discounts",
    )


def aov_erosion(ctx: RuleContext) -> Optional[Recommendation]:
    if ctx.aggregate.metrics_previous.aov <= 0 or ctx.orders_growth_vs_baseline <= 0:
        return None
    if ctx.derived.yoy_aov_change_pct >= -5:
        return None
    return Recommendation(
        priority="medium",
        category="optimization",
        title="Win back basket size",
        description=(
            f"Orders grew {format_percent(ctx.orders_growth_vs_baseline)} but AOV "
            f"moved {format_percent(ctx.derived.yoy_aov_change_pct)}. Deeper "
            f"discounts or a cheaper product mix may be trading value for volume."
        ),
        potential_impact="Converting order growth into GMV growth",
        platform_feature=None,
    )


def domestic_only(ctx: RuleContext) -> Optional[Recommendation]:
    if ctx.gmv <= 0 or ctx.cross_border_pct >= 5:
        return None
    return Recommendation(
        priority="low",
        category="growth",
        title="Test international markets",
        description=(
            f"Cross-border sales were {ctx.cross_border_pct:.1f}% of GMV while "
            f"cross-border orders made up 16% of platform BFCM orders. Local "
            f"currencies and duties at checkout make a first market low risk."
        ),
        potential_impact="A new revenue stream from international shoppers",
        platform_feature="Shopify Markets",
    )


def heavy_cross_border(ctx: RuleContext) -> Optional[Recommendation]:
    if ctx.cross_border_pct <= 40:
        return None
    return Recommendation(
        priority="medium",
        category="optimization",
        title="Streamline global operations",
        description=(
            f"{ctx.cross_border_pct:.1f}% of GMV crossed borders across "
            f"{ctx.country_count} markets. Managed duties, tax and compliance "
            f"reduce the overhead of selling internationally."
        ),
        potential_impact="Lower cross-border friction and fewer returned parcels",
        platform_feature="Shopify Markets Pro",
    )


def no_retail_presence(ctx: RuleContext) -> Optional[Recommendation]:
    if ctx.gmv <= 1_000_000 or ctx.has_retail_orders:
        return None
    return Recommendation(
        priority="low",
        category="growth",
        title="Explore in-person selling",
        description=(
            f"With {format_currency(ctx.gmv, compact=True)} in online GMV and no "
            f"retail orders, pop-ups or wholesale events could meet customers "
            f"offline."
        ),
        potential_impact="Brand presence and a second revenue channel",
        platform_feature="Shopify POS",
    )


def scale_acquisition(ctx: RuleContext) -> Optional[Recommendation]:
    if ctx.derived.growth_rate != "exceptional" or ctx.previous_gmv <= 0:
        return None
    return Recommendation(
        priority="medium",
        category="growth",
        title="Scale what's working",
        description=(
            f"GMV grew {format_percent(ctx.derived.yoy_gmv_change_pct)}. Lookalike "
            f"audiences built from BFCM buyers can extend this momentum into the "
            f"rest of the quarter."
        ),
        potential_impact="Lower cost per acquisition on high-intent audiences",
        platform_feature="Shopify Audiences",
    )


def first_time_buyer_follow_up(ctx: RuleContext) -> Optional[Recommendation]:
    if not ctx.has_customers or ctx.new_customer_pct < 70:
        return None
    if ctx.derived.repeat_customer_rate < 20:
        return None
    return Recommendation(
        priority="medium",
        category="growth",
        title="Convert first-time buyers",
        description=(
            f"{ctx.new_customer_pct:.0f}% of BFCM customers were new. A second-"
            f"purchase offer within 30 days is the cheapest way to keep them."
        ),
        potential_impact="More of this season's new customers becoming repeat buyers",
        platform_feature="Shopify Email",
    )


def peak_readiness(ctx: RuleContext) -> Optional[Recommendation]:
    if ctx.peak_gmv_per_minute < 10_000:
        return None
    return Recommendation(
        priority="low",
        category="optimization",
        title="Plan inventory for the next peak",
        description=(
            f"Sales peaked at {format_currency(ctx.peak_gmv_per_minute)} per minute. "
            f"Forecast stock for your top sellers against this surge so they do not "
            f"sell out mid-peak."
        ),
        potential_impact="Fewer stock-outs during the highest-value minutes",
        platform_feature=None,
    )


RECOMMENDATION_RULES: list[RecommendationRule] = [
    declining_growth,
    low_conversion,
    low_retention,
    cart_abandonment,
    channel_concentration,
    product_concentration,
    low_aov,
    low_units_per_transaction,
    mobile_conversion_gap,
    discount_dependence,
    aov_erosion,
    domestic_only,
    heavy_cross_border,
    no_retail_presence,
    scale_acquisition,
    first_time_buyer_follow_up,
    peak_readiness,
]


# ── Public entry point ────────────────────────────────────────────────────────

def prioritize(recommendations: list[Recommendation], limit: int) -> list[Recommendation]:
    """Stable sort by priority (high first), then keep the first ``limit``."""
    ordered = sorted(recommendations, key=lambda r: PRIORITY_RANK[r.priority])
    return ordered[:limit]


def generate_recommendations(
    ctx: RuleContext,
    rules: Optional[list[RecommendationRule]] = None,
) -> list[Recommendation]:
    """Run the battery and return the prioritized, truncated list.

    Args:
        ctx:   Rule context for the report.
        rules: Override the battery (tests).  Defaults to ``RECOMMENDATION_RULES``.
    """
    battery = RECOMMENDATION_RULES if rules is None else rules
    fired = [rec for rule in battery if (rec := rule(ctx)) is not None]
    limit = min(ctx.config.report.max_recommendations, MAX_RECOMMENDATIONS)
    if len(fired) > limit:
        logger.debug("Truncating %d recommendations to %d", len(fired), limit)
    return prioritize(fired, limit)
