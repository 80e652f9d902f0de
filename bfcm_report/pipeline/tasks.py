"""
Fetch task definitions for the merchant report.

A ``FetchTask`` binds one source operation (already closed over the request
window) to the ``AggregateResult`` slot it fills.  The default for a failed
task and the type its payload is validated against both come from the
``AggregateResult`` schema, so a task cannot disagree with its slot.

The merchant report has 14 tasks: 13 source operations, with core metrics
called once for the current window and once for the comparison window.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from bfcm_report.models.report import slot_default, slot_type
from bfcm_report.models.request import FetchRequest
from bfcm_report.sources.base import SourceFetcherSet


@dataclass(frozen=True)
class FetchTask:
    """One unit of fan-out work.

    Attributes:
        label:     Human-readable, unique per run (used in progress events and
                   the failed-labels list).
        slot:      ``AggregateResult`` field this task fills.
        operation: Zero-argument coroutine factory performing the fetch.
    """

    label:     str
    slot:      str
    operation: Callable[[], Awaitable[Any]] = field(compare=False)

    @property
    def payload_type(self) -> Any:
        return slot_type(self.slot)

    def default(self) -> Any:
        return slot_default(self.slot)


def build_report_tasks(
    fetchers: SourceFetcherSet,
    request: FetchRequest,
) -> list[FetchTask]:
    """Build the 14 fetch tasks for one merchant report.

    Labels carry the window year where a reader needs it to tell two calls
    apart (``"Core Metrics 2025"`` vs ``"Core Metrics 2024"``).

    Args:
        fetchers: Source operations to call.
        request:  Validated request (comparison window already derived).

    Returns:
        Tasks in declaration order.  Completion order is independent of it.
    """
    ids = list(request.shop_ids)
    start, end = request.start_date, request.end_date
    cmp_start, cmp_end = request.comparison_start, request.comparison_end
    assert cmp_start is not None and cmp_end is not None

    def window(op: Callable[..., Awaitable[Any]]) -> Callable[[], Awaitable[Any]]:
        return lambda: op(ids, start, end)

    return [
        FetchTask(f"Core Metrics {request.current_year}", "metrics_current",
                  window(fetchers.core_metrics)),
        FetchTask(f"Core Metrics {request.comparison_year}", "metrics_previous",
                  lambda: fetchers.core_metrics(ids, cmp_start, cmp_end)),
        FetchTask("Peak GMV", "peak_gmv", window(fetchers.peak_gmv)),
        FetchTask("Top Products", "top_products", window(fetchers.top_products)),
        FetchTask("Channel Performance", "channel_performance",
                  lambda: fetchers.channel_performance(ids, start, end, cmp_start, cmp_end)),
        FetchTask("Retail Metrics", "retail_metrics", window(fetchers.retail_metrics)),
        FetchTask("Conversion Metrics", "conversion_metrics",
                  window(fetchers.conversion_metrics)),
        FetchTask("Customer Insights", "customer_insights",
                  window(fetchers.customer_insights)),
        FetchTask("Referrer Data", "referrer_data", window(fetchers.referrer_data)),
        FetchTask("Platform Stats", "platform_stats", window(fetchers.platform_stats)),
        FetchTask("Shop Breakdown", "shop_breakdown", window(fetchers.shop_breakdown)),
        FetchTask("Discount Metrics", "discount_metrics", window(fetchers.discount_metrics)),
        FetchTask("International Sales", "international_sales",
                  window(fetchers.international_sales)),
        FetchTask("Units Per Transaction", "units_per_transaction",
                  window(fetchers.units_per_transaction)),
    ]
