"""
Insight text: one sentence per metric family, chosen by threshold ladder.

Each ``*_insight`` function is a ladder over a single number whose outcomes
are format templates.  Templates may reference ``{value}`` plus any extra
keyword the function supplies; unused keywords are ignored.

Ladders (strict ``>``, first match wins)
----------------------------------------
    growth        GMV YoY %         >30  >20  >10  >0  >-10  else
    funnel        conversion rate   >3.5 >2.5 >1.5            else
    loyalty       repeat rate %     >40  >30  >20             else
    channel       dominant share %  >60  >40  >25             else
    retail        retail GMV share  (no locations) >40 >20    else
    aov           % vs benchmark    >50  >20  >0              else
    product       top product share >50  >30                  else
    mobile        mobile session %  >70  >50                  else
    international cross-border %    >40  >20  >5              else

A repeat rate of exactly 40.0 is not ``> 40`` and lands on the "strong
loyalty" rung.
"""

from __future__ import annotations

from typing import Optional

from bfcm_report.config import AppConfig
from bfcm_report.insights.ladder import ThresholdLadder, above
from bfcm_report.models.report import AggregateResult, DerivedMetrics, InsightSet
from bfcm_report.reporting.formatters import format_currency

_GROWTH = ThresholdLadder[str](
    "growth_insight",
    [
        (above(30), "Exceptional {label} growth trajectory of {value:.1f}%, outpacing "
                    "the top 5% of merchants in your category."),
        (above(20), "Outstanding {label} growth of {value:.1f}% places you in the top "
                    "10% of merchants globally."),
        (above(10), "Strong {label} momentum of {value:.1f}% demonstrates solid market "
                    "positioning and customer demand."),
        (above(0), "Steady positive {label} growth of {value:.1f}% in a challenging "
                   "macroeconomic environment."),
        (above(-10), "Consolidating market position while optimizing for operational "
                     "efficiency and profitability."),
    ],
    otherwise="Strategic reset period: the right time to refine positioning, optimize "
              "operations and prepare for renewed growth.",
)

_FUNNEL = ThresholdLadder[str](
    "funnel_insight",
    [
        (above(3.5), "Your {value:.1f}% conversion rate is exceptional, well above the "
                     "{benchmark:.1f}% industry standard and in the top tier globally."),
        (above(2.5), "Your checkout optimization is delivering strong results with a "
                     "{value:.1f}% conversion rate above industry average."),
        (above(1.5), "Your {value:.1f}% conversion rate indicates solid intent capture "
                     "with room to optimize the checkout flow."),
    ],
    otherwise="Conversion rate optimization is a significant opportunity: small "
              "improvements here can have an outsized effect on revenue.",
)

_LOYALTY = ThresholdLadder[str](
    "loyalty_insight",
    [
        (above(40), "A {value:.1f}% repeat rate signals exceptional brand loyalty and "
                    "strong customer lifetime value."),
        (above(30), "Your {value:.1f}% repeat customer rate shows strong loyalty: a "
                    "highly engaged customer base driving sustainable lifetime value."),
        (above(20), "With {value:.1f}% of customers returning you have built solid "
                    "loyalty; continuing to nurture it will amplify lifetime value."),
    ],
    otherwise="Retention strategies could unlock significant lifetime value, as new "
              "customer acquisition remains your primary revenue driver.",
)

_CHANNEL = ThresholdLadder[str](
    "channel_insight",
    [
        (above(60), "Your {name} channel is highly dominant at {value:.1f}%; consider "
                    "diversifying to reduce channel concentration risk."),
        (above(40), "{name} drives {value:.1f}% of revenue, demonstrating strong channel "
                    "fit and customer preference."),
        (above(25), "{name} contributes {value:.1f}% of total revenue, showing healthy "
                    "channel diversification."),
    ],
    otherwise="{name} represents {value:.1f}% of revenue; there is room to grow this "
              "channel's contribution.",
)

_RETAIL = ThresholdLadder[str](
    "retail_insight",
    [
        (above(40), "Strong omnichannel presence with {value:.1f}% of GMV from retail "
                    "across {locations}."),
        (above(20), "Growing retail footprint contributing {value:.1f}% of GMV across "
                    "{locations}."),
    ],
    otherwise="Emerging retail channel at {value:.1f}% of GMV, with room to expand "
              "physical presence.",
)

_AOV = ThresholdLadder[str](
    "aov_insight",
    [
        (above(50), "Exceptional {aov} AOV indicates premium positioning and strong "
                    "value perception."),
        (above(20), "Strong {aov} AOV demonstrates effective upselling and product mix."),
        (above(0), "Your {aov} AOV is solid; bundles or Shop Pay Installments could "
                   "push it further."),
    ],
    otherwise="{aov} AOV is an opportunity: product bundling and cross-sells could "
              "lift this metric significantly.",
)

_PRODUCT = ThresholdLadder[str](
    "product_insight",
    [
        (above(50), "Your top product drives {value:.1f}% of sales; consider diversifying "
                    "to reduce dependency on a single SKU."),
        (above(30), "Strong hero product at {value:.1f}% of sales with healthy catalog "
                    "depth across {count} top performers."),
    ],
    otherwise="Balanced product portfolio with no single SKU dominating, a sign of "
              "healthy catalog diversity.",
)

_MOBILE = ThresholdLadder[str](
    "mobile_insight",
    [
        (above(70), "{value:.1f}% mobile traffic makes your mobile experience critical: "
                    "keep pages fast and checkout seamless."),
        (above(50), "Mobile-first audience at {value:.1f}%; Shop Pay and mobile "
                    "optimization are key growth levers."),
    ],
    otherwise="Desktop remains strong at {desktop:.1f}%, so mobile and desktop both "
              "need optimization attention.",
)

_INTERNATIONAL = ThresholdLadder[str](
    "international_insight",
    [
        (above(40), "Significant {value:.1f}% cross-border business across {markets} "
                    "markets; Shopify Markets Pro could streamline operations."),
        (above(20), "Growing international presence at {value:.1f}%, a strong "
                    "foundation for further global expansion."),
        (above(5), "Emerging international opportunity at {value:.1f}%: test and scale "
                   "in high-potential markets."),
    ],
    otherwise="Primarily domestic market; international expansion is a significant "
              "untapped growth opportunity.",
)


# ── Per-family insights ───────────────────────────────────────────────────────

def growth_insight(yoy_growth_pct: float, comparison_label: str = "YoY") -> str:
    return _GROWTH.evaluate(yoy_growth_pct).format(
        value=yoy_growth_pct, label=comparison_label
    )


def funnel_insight(conversion_rate: float, benchmark: float = 2.5) -> str:
    return _FUNNEL.evaluate(conversion_rate).format(
        value=conversion_rate, benchmark=benchmark
    )


def loyalty_insight(repeat_customer_rate: float) -> str:
    return _LOYALTY.evaluate(repeat_customer_rate).format(value=repeat_customer_rate)


def channel_insight(channel_name: str, percentage: float) -> str:
    return _CHANNEL.evaluate(percentage).format(value=percentage, name=channel_name)


def retail_insight(retail_pct: float, location_count: int) -> str:
    """Retail share insight.  Zero locations means a pure digital business."""
    if location_count == 0:
        return ("Pure digital commerce model; physical retail or pop-up experiences "
                "could help build brand presence.")
    locations = f"{location_count} location{'s' if location_count > 1 else ''}"
    return _RETAIL.evaluate(retail_pct).format(value=retail_pct, locations=locations)


def aov_insight(aov: float, industry_average: float = 75.0) -> str:
    """AOV insight, graded on percent difference from ``industry_average``."""
    diff_pct = (aov - industry_average) / industry_average * 100 if industry_average > 0 else 0.0
    return _AOV.evaluate(diff_pct).format(value=diff_pct, aov=format_currency(aov))


def product_insight(top_product_share: float, product_count: int) -> str:
    return _PRODUCT.evaluate(top_product_share).format(
        value=top_product_share, count=product_count
    )


def mobile_insight(mobile_pct: float) -> str:
    return _MOBILE.evaluate(mobile_pct).format(value=mobile_pct, desktop=100 - mobile_pct)


def international_insight(cross_border_pct: float, market_count: int) -> str:
    return _INTERNATIONAL.evaluate(cross_border_pct).format(
        value=cross_border_pct, markets=market_count
    )


# ── Assembly ──────────────────────────────────────────────────────────────────

def _retail_location_count(aggregate: AggregateResult) -> int:
    retail = aggregate.retail_metrics
    return 1 if (retail.top_location or retail.retail_orders > 0) else 0


def build_insights(
    aggregate: AggregateResult,
    derived: DerivedMetrics,
    config: Optional[AppConfig] = None,
) -> InsightSet:
    """Build every insight for a report.

    Args:
        aggregate: Source payloads.
        derived:   Derived metrics for ``aggregate``.
        config:    Supplies the comparison label and benchmarks.  Defaults
                   to ``AppConfig()``.
    """
    config = config or AppConfig()
    gmv = aggregate.metrics_current.total_gmv
    retail_pct = aggregate.retail_metrics.retail_gmv / gmv * 100 if gmv > 0 else 0.0
    dominant = derived.dominant_channel

    return InsightSet(
        growth=growth_insight(derived.yoy_gmv_change_pct, config.report.comparison_label),
        funnel=funnel_insight(
            aggregate.conversion_metrics.conversion_rate, config.benchmarks.conversion_rate
        ),
        loyalty=loyalty_insight(derived.repeat_customer_rate),
        channel=channel_insight(dominant.name, dominant.percentage) if dominant else None,
        retail=retail_insight(retail_pct, _retail_location_count(aggregate)),
        aov=aov_insight(aggregate.metrics_current.aov, config.benchmarks.aov),
        product=product_insight(derived.top_product_share, len(aggregate.top_products)),
        mobile=mobile_insight(derived.mobile_session_pct),
        international=international_insight(
            aggregate.international_sales.cross_border_pct,
            len(aggregate.international_sales.top_countries),
        ),
    )
