"""
Commerce personality detection.

Classifies a merchant into zero or more archetypes from BFCM behaviour
(when customers shop, where they come from, how the business grew).  Every
archetype is an independent predicate; several can apply at once.

Rules (all evaluated, in this order)
------------------------------------
    night-owl            peak hour 0–5
    early-bird           peak hour 6–11
    global-seller        ≥ 5 destination countries
    comeback-kid         baseline GMV growth > 50%
    first-timer          no prior GMV or no prior orders, and current GMV > 0
    record-breaker       prior GMV > 0 and baseline GMV growth > 100%
    speed-demon          AOV ≥ 200
    volume-king          units per transaction ≥ 3
    premium-player       full-price share ≥ 80% (with sales)
    discount-master      discounted share ≥ 70% (with sales)
    mobile-first         mobile sessions ≥ 70%
    retail-rockstar      retail GMV ≥ 50% of GMV
    new-customer-magnet  new customers ≥ 70%
    loyalty-legend       returning customers ≥ 60%
    peak-performer       peak minute ≥ 10,000
    growth-machine       GMV and orders baseline growth both > 20%

"Steady Eddie" is the fallback: it applies only when nothing above matched
and the merchant had sales.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from bfcm_report.insights.context import RuleContext
from bfcm_report.models.report import PersonalityResult
from bfcm_report.reporting.formatters import format_currency


@dataclass(frozen=True)
class PersonalityRule:
    personality: str
    title:       str
    visual_tag:  str
    matches:     Callable[[RuleContext], bool]
    describe:    Callable[[RuleContext], str]


def _peak_between(lo: int, hi: int) -> Callable[[RuleContext], bool]:
    return lambda c: c.peak_hour is not None and lo <= c.peak_hour < hi


PERSONALITY_RULES: list[PersonalityRule] = [
    PersonalityRule(
        "night-owl", "The Night Owl", "owl", _peak_between(0, 6),
        lambda c: "Your customers shop when the world sleeps",
    ),
    PersonalityRule(
        "early-bird", "The Early Bird", "sunrise", _peak_between(6, 12),
        lambda c: "You catch the morning shoppers",
    ),
    PersonalityRule(
        "global-seller", "The Global Seller", "globe",
        lambda c: c.country_count >= 5,
        lambda c: f"You shipped to {c.country_count} countries",
    ),
    PersonalityRule(
        "comeback-kid", "The Comeback Kid", "rocket",
        lambda c: c.gmv_growth_vs_baseline > 50,
        lambda c: f"{c.gmv_growth_vs_baseline:.0f}% growth from last year",
    ),
    PersonalityRule(
        "first-timer", "The First Timer", "party",
        lambda c: (c.previous_gmv == 0 or c.aggregate.metrics_previous.total_orders == 0)
        and c.gmv > 0,
        lambda c: "Your first BFCM, and you crushed it!",
    ),
    PersonalityRule(
        "record-breaker", "Record Breaker", "trophy",
        lambda c: c.previous_gmv > 0 and c.gmv_growth_vs_baseline > 100,
        lambda c: "You had your best BFCM ever",
    ),
    PersonalityRule(
        "speed-demon", "The Speed Demon", "lightning",
        lambda c: c.aov >= 200,
        lambda c: f"Your AOV of {format_currency(c.aov)} shows customers value quality",
    ),
    PersonalityRule(
        "volume-king", "The Volume King", "chart",
        lambda c: c.aggregate.units_per_transaction >= 3,
        lambda c: f"{c.aggregate.units_per_transaction:.1f} units per order: "
                  f"customers stock up with you",
    ),
    PersonalityRule(
        "premium-player", "The Premium Player", "crown",
        lambda c: c.total_sales > 0 and c.aggregate.discount_metrics.full_price_sales_pct >= 80,
        lambda c: f"{c.aggregate.discount_metrics.full_price_sales_pct:.0f}% full-price "
                  f"sales: premium positioning",
    ),
    PersonalityRule(
        "discount-master", "The Discount Master", "target",
        lambda c: c.total_sales > 0 and c.aggregate.discount_metrics.discounted_sales_pct >= 70,
        lambda c: f"{c.aggregate.discount_metrics.discounted_sales_pct:.0f}% discounted: "
                  f"strategic pricing wins",
    ),
    PersonalityRule(
        "mobile-first", "The Mobile First", "phone",
        lambda c: c.has_sessions and c.mobile_pct >= 70,
        lambda c: f"{c.mobile_pct:.0f}% mobile traffic: you've mastered mobile commerce",
    ),
    PersonalityRule(
        "retail-rockstar", "The Retail Rockstar", "storefront",
        lambda c: c.gmv > 0 and c.aggregate.retail_metrics.retail_gmv > 0 and c.retail_pct >= 50,
        lambda c: f"{c.retail_pct:.0f}% retail sales: brick and mortar champion",
    ),
    PersonalityRule(
        "new-customer-magnet", "The New Customer Magnet", "magnet",
        lambda c: c.has_customers and c.new_customer_pct >= 70,
        lambda c: f"{c.new_customer_pct:.0f}% new customers: amazing acquisition power",
    ),
    PersonalityRule(
        "loyalty-legend", "The Loyalty Legend", "diamond",
        lambda c: c.has_customers and c.returning_customer_pct >= 60,
        lambda c: f"{c.returning_customer_pct:.0f}% returning customers: you build "
                  f"lasting relationships",
    ),
    PersonalityRule(
        "peak-performer", "The Peak Performer", "fire",
        lambda c: c.peak_gmv_per_minute >= 10_000,
        lambda c: f"{format_currency(c.peak_gmv_per_minute, compact=True)}/min at peak: "
                  f"incredible surge capacity",
    ),
    PersonalityRule(
        "growth-machine", "The Growth Machine", "rocket",
        lambda c: (c.previous_gmv > 0 and c.gmv_growth_vs_baseline > 20
                   and c.orders_growth_vs_baseline > 20),
        lambda c: "Growing across all metrics: the momentum is unstoppable",
    ),
]

STEADY_EDDIE = PersonalityResult(
    personality="steady-eddie",
    title="Steady Eddie",
    description="Consistent performance, reliable results",
    visual_tag="chart",
)


def detect_personalities(ctx: RuleContext) -> list[PersonalityResult]:
    """Return every matching personality, or the fallback when none match."""
    found = [
        PersonalityResult(
            personality=rule.personality,
            title=rule.title,
            description=rule.describe(ctx),
            visual_tag=rule.visual_tag,
        )
        for rule in PERSONALITY_RULES
        if rule.matches(ctx)
    ]
    if not found and ctx.gmv > 0:
        found.append(STEADY_EDDIE)
    return found
