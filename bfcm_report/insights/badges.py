"""
Achievement badges.

Each badge is an independent predicate over a ``RuleContext``.  Any number
may unlock; none depends on another.  Badges are returned in battery order.

Growth-based badges use the baseline growth figures from ``RuleContext``
(0 when there is no prior year), so "Comeback Kid" cannot unlock for a
brand-new merchant.  "Record Breaker" unlocks on >100% growth, or on a first
BFCM with sales.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from bfcm_report.insights.context import RuleContext
from bfcm_report.models.report import Badge
from bfcm_report.reporting.formatters import format_currency, format_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeRule:
    """One badge definition.

    Attributes:
        badge_id:   Stable identifier.
        title:      Display title.
        visual_tag: Short tag a presentation layer maps to an icon.
        unlocked:   Predicate over the rule context.
        describe:   Builds the description from the context.
    """

    badge_id:   str
    title:      str
    visual_tag: str
    unlocked:   Callable[[RuleContext], bool]
    describe:   Callable[[RuleContext], str]


def _record_breaker_text(ctx: RuleContext) -> str:
    if ctx.gmv_growth_vs_baseline > 100:
        return f"{ctx.gmv_growth_vs_baseline:.0f}% growth from last year"
    return "Your first BFCM, and you crushed it!"


BADGE_RULES: list[BadgeRule] = [
    BadgeRule(
        "record-breaker", "Record Breaker", "trophy",
        lambda c: c.gmv_growth_vs_baseline > 100 or (c.previous_gmv == 0 and c.gmv > 0),
        _record_breaker_text,
    ),
    BadgeRule(
        "global-seller", "Global Seller", "globe",
        lambda c: c.country_count >= 5,
        lambda c: f"Shipped to {c.country_count} countries",
    ),
    BadgeRule(
        "comeback-kid", "Comeback Kid", "rocket",
        lambda c: c.previous_gmv > 0 and c.gmv_growth_vs_baseline >= 50,
        lambda c: f"{c.gmv_growth_vs_baseline:.0f}% growth, an incredible comeback!",
    ),
    BadgeRule(
        "millionaire", "Millionaire", "money-bag",
        lambda c: c.gmv >= 1_000_000,
        lambda c: "Crossed the $1M mark",
    ),
    BadgeRule(
        "order-master", "Order Master", "package",
        lambda c: c.orders >= 10_000,
        lambda c: f"{format_number(c.orders)} orders fulfilled",
    ),
    BadgeRule(
        "night-owl", "Night Owl", "owl",
        lambda c: c.peak_hour is not None and 0 <= c.peak_hour < 6,
        lambda c: "Peak sales in the wee hours",
    ),
    BadgeRule(
        "omnichannel-champion", "Omnichannel Champion", "storefront",
        lambda c: c.has_retail_orders and c.has_online_channel,
        lambda c: "Thriving across online and in-person channels",
    ),
    BadgeRule(
        "customer-loyalty", "Customer Loyalty", "heart",
        lambda c: c.has_customers and c.returning_customer_pct >= 60,
        lambda c: f"{c.returning_customer_pct:.0f}% returning customers",
    ),
    BadgeRule(
        "first-timer", "First Timer", "party",
        lambda c: c.previous_gmv == 0 and c.gmv > 0,
        lambda c: "Your first BFCM. Welcome!",
    ),
    BadgeRule(
        "speed-demon", "Speed Demon", "lightning",
        lambda c: c.aov >= 200,
        lambda c: f"AOV of {format_currency(c.aov)}: customers love your products!",
    ),
    BadgeRule(
        "volume-king", "Volume King", "chart",
        lambda c: c.aggregate.units_per_transaction >= 3,
        lambda c: f"{c.aggregate.units_per_transaction:.1f} units per transaction: "
                  f"customers stock up!",
    ),
    BadgeRule(
        "discount-master", "Discount Master", "target",
        lambda c: c.total_sales > 0 and c.aggregate.discount_metrics.discounted_sales_pct >= 70,
        lambda c: f"{c.aggregate.discount_metrics.discounted_sales_pct:.0f}% of sales "
                  f"were discounted",
    ),
    BadgeRule(
        "premium-player", "Premium Player", "crown",
        lambda c: c.total_sales > 0 and c.aggregate.discount_metrics.full_price_sales_pct >= 80,
        lambda c: f"{c.aggregate.discount_metrics.full_price_sales_pct:.0f}% full-price "
                  f"sales: premium positioning!",
    ),
    BadgeRule(
        "conversion-champion", "Conversion Champion", "checkmark",
        lambda c: c.conversion_rate >= 3,
        lambda c: f"{c.conversion_rate:.2f}% conversion rate, excellent!",
    ),
    BadgeRule(
        "mobile-first", "Mobile First", "phone",
        lambda c: c.has_sessions and c.mobile_pct >= 70,
        lambda c: f"{c.mobile_pct:.0f}% mobile traffic: mobile-optimized!",
    ),
    BadgeRule(
        "peak-performer", "Peak Performer", "fire",
        lambda c: c.peak_gmv_per_minute >= 10_000,
        lambda c: f"{format_currency(c.peak_gmv_per_minute)}/min at peak, an incredible surge!",
    ),
    BadgeRule(
        "growth-machine", "Growth Machine", "rocket",
        lambda c: (c.previous_gmv > 0 and c.gmv_growth_vs_baseline > 20
                   and c.orders_growth_vs_baseline > 20),
        lambda c: "Growing across GMV and orders: the momentum is real!",
    ),
    BadgeRule(
        "cross-border-hero", "Cross-Border Hero", "airplane",
        lambda c: c.cross_border_pct >= 30,
        lambda c: f"{c.cross_border_pct:.0f}% international sales: global reach!",
    ),
    BadgeRule(
        "top-product-powerhouse", "Top Product Powerhouse", "star",
        lambda c: c.top_product_fraction >= 0.4,
        lambda c: f"{c.top_product_fraction * 100:.0f}% of revenue from one product!",
    ),
    BadgeRule(
        "retail-rockstar", "Retail Rockstar", "guitar",
        lambda c: c.gmv > 0 and c.aggregate.retail_metrics.retail_gmv > 0 and c.retail_pct >= 50,
        lambda c: f"{c.retail_pct:.0f}% of sales from retail: brick and mortar champion!",
    ),
    BadgeRule(
        "new-customer-magnet", "New Customer Magnet", "magnet",
        lambda c: c.has_customers and c.new_customer_pct >= 70,
        lambda c: f"{c.new_customer_pct:.0f}% new customers: amazing acquisition!",
    ),
]


def calculate_badges(ctx: RuleContext) -> list[Badge]:
    """Return every unlocked badge, in battery order."""
    badges = [
        Badge(
            badge_id=rule.badge_id,
            title=rule.title,
            description=rule.describe(ctx),
            visual_tag=rule.visual_tag,
        )
        for rule in BADGE_RULES
        if rule.unlocked(ctx)
    ]
    logger.debug("Badges unlocked: %s", [b.badge_id for b in badges])
    return badges
