"""
Rule context: the facts every badge, personality and recommendation rule reads.

Rules never compute ratios themselves.  ``RuleContext.build()`` derives each
fact once, with the same zero-denominator handling everywhere, so a rule is
a plain predicate over named numbers and cannot raise on all-default input.

Baseline growth
---------------
``DerivedMetrics.yoy_gmv_change_pct`` reads +100% when there is no prior
baseline.  Rules that reward growth must not fire for a merchant with no
prior year, so they use ``gmv_growth_vs_baseline`` / ``orders_growth_vs_baseline``
instead, which are 0 whenever the previous value is 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bfcm_report.config import AppConfig
from bfcm_report.models.report import AggregateResult, DerivedMetrics
from bfcm_report.utils.time_utils import peak_clock


def _pct(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


@dataclass(frozen=True)
class RuleContext:
    """Precomputed facts for one report.

    Attributes:
        aggregate:                 Source payloads.
        derived:                   Derived metrics.
        config:                    App config (benchmarks, timezone, limits).
        gmv:                       Current-window GMV.
        previous_gmv:              Comparison-window GMV.
        orders:                    Current-window orders.
        aov:                       Current-window AOV.
        gmv_growth_vs_baseline:    GMV YoY %, 0 when previous GMV is 0.
        orders_growth_vs_baseline: Orders YoY %, 0 when previous orders are 0.
        peak_hour:                 Hour of the peak minute, ``None`` if unknown.
        peak_gmv_per_minute:       0 when there is no peak record.
        conversion_rate:           Session conversion percent.
        cart_to_checkout_rate:     Cart-to-checkout percent.
        mobile_pct:                Mobile share of mobile+desktop sessions.
        has_sessions:              True when any mobile/desktop sessions exist.
        new_customer_pct:          New share of customers.
        returning_customer_pct:    Returning share of customers.
        has_customers:             True when any customers were counted.
        retail_pct:                Retail GMV share of current GMV.
        total_sales:               Discounted + full-price sales.
        country_count:             Destination countries listed.
        cross_border_pct:          Cross-border share of GMV.
        top_product_fraction:      Top product revenue / listed revenue, 0–1.
        has_online_channel:        A channel named ``online`` is present.
        has_retail_orders:         Any POS orders in the window.
    """

    aggregate:                 AggregateResult
    derived:                   DerivedMetrics
    config:                    AppConfig
    gmv:                       float
    previous_gmv:              float
    orders:                    int
    aov:                       float
    gmv_growth_vs_baseline:    float
    orders_growth_vs_baseline: float
    peak_hour:                 Optional[int]
    peak_gmv_per_minute:       float
    conversion_rate:           float
    cart_to_checkout_rate:     float
    mobile_pct:                float
    has_sessions:              bool
    new_customer_pct:          float
    returning_customer_pct:    float
    has_customers:             bool
    retail_pct:                float
    total_sales:               float
    country_count:             int
    cross_border_pct:          float
    top_product_fraction:      float
    has_online_channel:        bool
    has_retail_orders:         bool

    @classmethod
    def build(
        cls,
        aggregate: AggregateResult,
        derived: DerivedMetrics,
        config: Optional[AppConfig] = None,
    ) -> "RuleContext":
        config = config or AppConfig()
        cur = aggregate.metrics_current
        prev = aggregate.metrics_previous
        conv = aggregate.conversion_metrics
        peak = aggregate.peak_gmv

        peak_hour: Optional[int] = None
        if peak is not None:
            clock = peak_clock(peak.peak_minute, config.report.peak_timezone)
            if clock is not None:
                peak_hour = clock[0]

        sessions = conv.mobile_sessions + conv.desktop_sessions
        products = aggregate.top_products
        product_total = sum(p.revenue for p in products)

        return cls(
            aggregate=aggregate,
            derived=derived,
            config=config,
            gmv=cur.total_gmv,
            previous_gmv=prev.total_gmv,
            orders=cur.total_orders,
            aov=cur.aov,
            gmv_growth_vs_baseline=(
                derived.yoy_gmv_change_pct if prev.total_gmv > 0 else 0.0
            ),
            orders_growth_vs_baseline=(
                derived.yoy_orders_change_pct if prev.total_orders > 0 else 0.0
            ),
            peak_hour=peak_hour,
            peak_gmv_per_minute=peak.peak_gmv_per_minute if peak is not None else 0.0,
            conversion_rate=conv.conversion_rate,
            cart_to_checkout_rate=conv.cart_to_checkout_rate,
            mobile_pct=_pct(conv.mobile_sessions, sessions),
            has_sessions=sessions > 0,
            new_customer_pct=derived.new_customer_pct,
            returning_customer_pct=derived.returning_customer_pct,
            has_customers=derived.total_customers > 0,
            retail_pct=_pct(aggregate.retail_metrics.retail_gmv, cur.total_gmv),
            total_sales=aggregate.discount_metrics.total_sales,
            country_count=len(aggregate.international_sales.top_countries),
            cross_border_pct=aggregate.international_sales.cross_border_pct,
            top_product_fraction=(
                products[0].revenue / product_total if product_total > 0 else 0.0
            ),
            has_online_channel=any(
                c.channel_type.lower() == "online" for c in aggregate.channel_performance
            ),
            has_retail_orders=aggregate.retail_metrics.retail_orders > 0,
        )
