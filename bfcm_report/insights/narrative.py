"""
Narrative copy: section transitions, section intros and contextual one-liners.

Transitions carry a tone (``positive`` | ``neutral`` | ``concern``) that a
presentation layer can style; this module only chooses the text.

Contextual copy compares the merchant against platform-wide BFCM totals
(``PLATFORM_STATS``).  These are published figures for the 2025 weekend and
are quoted verbatim; they are not fetched.
"""

from __future__ import annotations

from typing import Optional

from bfcm_report.insights.ladder import ThresholdLadder, above, at_least
from bfcm_report.models.report import (
    AggregateResult,
    DerivedMetrics,
    DominantChannel,
    HighlightSet,
    NarrativeSet,
    NarrativeTransition,
)
from bfcm_report.reporting.formatters import format_currency, format_number
from bfcm_report.utils.time_utils import peak_clock

PLATFORM_STATS: dict[str, float] = {
    "total_merchants":      94_900,           # merchants with their best day ever
    "total_customers":      81_000_000,
    "peak_gmv_per_minute":  5_100_000,        # at 12:01 PM EST
    "total_gmv":            14_600_000_000,
    "cross_border_pct":     16,
    "shop_pay_orders_pct":  32,
    "shop_pay_yoy_pct":     39,
    "average_cart":         114.70,
}

_PEAK_HOUR_CONTEXT: dict[int, str] = {
    0:  "right when midnight shoppers were browsing",
    1:  "in the wee hours, with dedicated night owls",
    2:  "when insomniacs were shopping",
    3:  "deep in the night, with your most committed customers",
    4:  "before dawn, when early risers found you",
    5:  "at sunrise, as morning people started their day",
    6:  "bright and early, during coffee-break shopping",
    7:  "in the morning rush, with commuters on the go",
    8:  "at work-break time, with office shoppers",
    9:  "in the mid-morning surge",
    10: "in late morning, during pre-lunch browsing",
    11: "at lunch hour",
    12: "in the noon rush, right when the platform peaked",
    13: "at the afternoon kickoff",
    14: "mid-afternoon, during the afternoon slump",
    15: "in late afternoon, during pre-dinner browsing",
    16: "during evening prep",
    17: "at dinner time",
    18: "in the evening rush, as people got home from work",
    19: "in prime time",
    20: "during night browsing, while people relaxed at home",
    21: "in late evening, during wind-down shopping",
    22: "late at night, with the night owls",
    23: "just before midnight, with dedicated customers",
}

# ── Transitions ───────────────────────────────────────────────────────────────


def metrics_transition(derived: DerivedMetrics) -> NarrativeTransition:
    """Transition from headline metrics to the performance drivers."""
    if derived.yoy_gmv_change_pct > 30:
        return NarrativeTransition(
            text="Now that we've seen your exceptional growth, let's understand "
                 "what drove this success...",
            tone="positive",
        )
    if derived.is_growing:
        return NarrativeTransition(
            text="With solid momentum established, let's explore the key drivers "
                 "behind your performance...",
            tone="positive",
        )
    return NarrativeTransition(
        text="To uncover optimization opportunities, let's analyze your "
             "performance drivers...",
        tone="neutral",
    )


def customer_transition(derived: DerivedMetrics) -> NarrativeTransition:
    """Transition into the customer section, keyed on repeat rate."""
    if derived.repeat_customer_rate > 40:
        return NarrativeTransition(
            text="Your strong performance is powered by a loyal customer base. "
                 "Let's dive into who's shopping with you...",
            tone="positive",
        )
    if derived.repeat_customer_rate > 25:
        return NarrativeTransition(
            text="Understanding your customer mix reveals opportunities to build "
                 "even stronger relationships...",
            tone="neutral",
        )
    return NarrativeTransition(
        text="Building customer loyalty is a key opportunity. Let's see who's "
             "currently shopping with you...",
        tone="concern",
    )


def recommendations_transition(derived: DerivedMetrics) -> NarrativeTransition:
    """Transition into recommendations, keyed on performance grade."""
    if derived.performance_grade == "A":
        return NarrativeTransition(
            text="You're firing on all cylinders. Here's how to maintain momentum "
                 "and explore new growth vectors...",
            tone="positive",
        )
    if derived.performance_grade in ("B", "C"):
        return NarrativeTransition(
            text="Based on your performance analysis, here are high-impact "
                 "opportunities to accelerate growth...",
            tone="neutral",
        )
    return NarrativeTransition(
        text="Let's turn insights into action. Here are strategic priorities to "
             "unlock your growth potential...",
        tone="concern",
    )


# ── Section intros ────────────────────────────────────────────────────────────


def channel_intro(dominant: Optional[DominantChannel]) -> str:
    if dominant is None:
        return "Let's explore how sales are distributed across your channels..."
    if dominant.percentage > 70:
        return (f"Your {dominant.name} channel dominates at {dominant.percentage:.0f}% "
                f"of sales. Let's see the full channel mix...")
    return (f"Your {dominant.name} channel leads at {dominant.percentage:.0f}%, but "
            f"you maintain a healthy channel mix...")


_PRODUCT_INTRO = ThresholdLadder[str](
    "product_intro",
    [
        (above(50), "Your product portfolio has a clear hero. Let's see what customers "
                    "love most..."),
        (above(30), "A strong hero product leads a diverse catalog. Here's what sold "
                    "best..."),
    ],
    otherwise="Your balanced product mix shows no single SKU dominates. Here are your "
              "top performers...",
)

_CONVERSION_INTRO = ThresholdLadder[str](
    "conversion_intro",
    [
        (above(3.5), "Your checkout flow is world-class. Let's break down the "
                     "conversion journey..."),
        (above(2.5), "Your conversion funnel performs above industry standard. Here's "
                     "the breakdown..."),
    ],
    otherwise="Understanding your funnel reveals optimization opportunities. Let's "
              "analyze the journey...",
)


def product_intro(top_product_share: float) -> str:
    return _PRODUCT_INTRO.evaluate(top_product_share)


def conversion_intro(conversion_rate: float) -> str:
    return _CONVERSION_INTRO.evaluate(conversion_rate)


# ── Contextual copy ───────────────────────────────────────────────────────────

_YOY_CONTEXT = ThresholdLadder[str](
    "yoy_growth_context",
    [
        (above(100), "You more than doubled your sales: {value:.0f}% growth is incredible!"),
        (above(50), "You grew by {value:.0f}%, a massive win!"),
        (above(20), "Strong {value:.0f}% growth: you're on the right track!"),
        (above(0), "You grew by {value:.0f}%, and every step forward counts!"),
        (above(-10), "You held steady; consistency is key in commerce."),
    ],
    otherwise="You're building for the future; this BFCM was a learning experience.",
)

_INTERNATIONAL_CONTEXT = ThresholdLadder[Optional[str]](
    "international_context",
    [
        (at_least(10), "You're a true global seller, shipping to {count} countries!"),
        (at_least(5), "Your reach spans {count} countries: global commerce at its finest."),
        (above(0), "You shipped to {count} {noun}, expanding your reach."),
    ],
    otherwise=None,
)


def yoy_growth_context(yoy_change_pct: float) -> str:
    return _YOY_CONTEXT.evaluate(yoy_change_pct).format(value=yoy_change_pct)


def gmv_context(gmv: float) -> str:
    """Place the merchant's GMV among platform-wide BFCM sales."""
    share_pct = gmv / PLATFORM_STATS["total_gmv"] * 100
    if share_pct > 0.01:
        return (f"You were part of {format_number(PLATFORM_STATS['total_merchants'])}+ "
                f"merchants who had their best day ever on Shopify.")
    return (f"You were part of something massive: "
            f"{format_number(PLATFORM_STATS['total_customers'])}+ consumers worldwide "
            f"bought from Shopify-powered brands.")


def peak_hour_context(peak_minute: str, tz_name: Optional[str] = None) -> str:
    """Describe when in the day the merchant's peak minute fell.

    12:00–12:05 gets the platform-peak callout.  Unparseable timestamps get
    a generic phrase.
    """
    clock = peak_clock(peak_minute, tz_name)
    if clock is None:
        return "at peak shopping time"
    hour, minute = clock
    if hour == 12 and minute <= 5:
        return "right at 12:01 PM EST, when the platform hit $5.1M/min"
    return _PEAK_HOUR_CONTEXT.get(hour, "at peak shopping time")


def peak_gmv_context(
    peak_gmv_per_minute: float,
    peak_minute: str,
    tz_name: Optional[str] = None,
) -> str:
    """Compare the merchant's peak minute with the platform peak."""
    platform_peak = PLATFORM_STATS["peak_gmv_per_minute"]
    share_pct = peak_gmv_per_minute / platform_peak * 100
    when = peak_hour_context(peak_minute, tz_name)
    peak = f"{format_currency(peak_gmv_per_minute, compact=True)}/min"
    platform = f"{format_currency(platform_peak, compact=True)}/min"
    if share_pct > 1:
        return (f"Your peak of {peak} came {when}, part of the {platform} platform "
                f"peak at 12:01 PM EST!")
    if share_pct > 0.1:
        return f"Your peak of {peak} happened {when}, contributing to the {platform} platform peak."
    return f"Your peak of {peak} happened {when}."


def customer_context(new_customers: int, returning_customers: int) -> str:
    """Describe the new-vs-returning customer balance."""
    total = new_customers + returning_customers
    new_pct = new_customers / total * 100 if total > 0 else 0.0
    if new_pct > 70:
        return (f"You welcomed {format_number(new_customers)} new customers: "
                f"{new_pct:.0f}% of your BFCM shoppers were first-timers!")
    if new_pct < 30:
        return (f"Your loyal customers came back strong: "
                f"{format_number(returning_customers)} returning customers "
                f"({100 - new_pct:.0f}%).")
    return (f"You balanced growth and loyalty: {format_number(new_customers)} new "
            f"customers and {format_number(returning_customers)} returning fans.")


def top_customer_context(top_customer_orders: int, top_customer_spend: float) -> str:
    if top_customer_orders > 1:
        return (f"Someone ordered from you {top_customer_orders} times during BFCM. "
                f"Now that's loyalty!")
    return (f"Your top customer spent "
            f"{format_currency(top_customer_spend, compact=True)}. Impressive!")


def international_context(country_count: int) -> Optional[str]:
    """Reach copy by number of destination countries; ``None`` for none."""
    template = _INTERNATIONAL_CONTEXT.evaluate(country_count)
    if template is None:
        return None
    return template.format(
        count=country_count, noun="country" if country_count == 1 else "countries"
    )


# ── Assembly ──────────────────────────────────────────────────────────────────


def build_narrative(aggregate: AggregateResult, derived: DerivedMetrics) -> NarrativeSet:
    return NarrativeSet(
        metrics_transition=metrics_transition(derived),
        customer_transition=customer_transition(derived),
        recommendations_transition=recommendations_transition(derived),
        channel_intro=channel_intro(derived.dominant_channel),
        product_intro=product_intro(derived.top_product_share),
        conversion_intro=conversion_intro(aggregate.conversion_metrics.conversion_rate),
    )


def build_highlights(
    aggregate: AggregateResult,
    derived: DerivedMetrics,
    tz_name: Optional[str] = None,
) -> HighlightSet:
    customers = aggregate.customer_insights
    peak = aggregate.peak_gmv
    return HighlightSet(
        gmv_context=gmv_context(aggregate.metrics_current.total_gmv),
        yoy_growth_context=yoy_growth_context(derived.yoy_gmv_change_pct),
        customer_context=customer_context(
            customers.new_customers, customers.returning_customers
        ),
        top_customer_context=top_customer_context(
            customers.top_customer_orders, customers.top_customer_spend
        ),
        peak_gmv_context=(
            peak_gmv_context(peak.peak_gmv_per_minute, peak.peak_minute, tz_name)
            if peak is not None else None
        ),
        international_context=international_context(
            len(aggregate.international_sales.top_countries)
        ),
    )
