"""
Abstract base class for analytical source fetchers.

A ``SourceFetcherSet`` exposes one async operation per data source.  The
report pipeline never talks to a warehouse or API directly; it calls these
operations and treats each one as opaque.  Each returns a raw payload
(dict, list, scalar or ``None``) which the orchestrator validates against the
slot's declared type.

Concrete implementations:
  FixtureSourceFetcherSet : serves payloads from a JSON snapshot (no network).
  HttpSourceFetcherSet    : calls an analytics HTTP API via ``httpx``.

Timeouts are the responsibility of each implementation; the orchestrator
waits unconditionally for every operation to settle.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

# Source names, in the order the report tasks are declared.
SOURCE_NAMES: tuple[str, ...] = (
    "core_metrics",
    "peak_gmv",
    "top_products",
    "channel_performance",
    "retail_metrics",
    "conversion_metrics",
    "customer_insights",
    "referrer_data",
    "platform_stats",
    "shop_breakdown",
    "discount_metrics",
    "international_sales",
    "units_per_transaction",
)


class SourceFetchError(RuntimeError):
    """Raised when a source cannot produce a payload.

    Attributes:
        source: Source name, e.g. ``"peak_gmv"``.
        reason: Human-readable cause.
    """

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Source '{source}' failed: {reason}")


class SourceFetcherSet(ABC):
    """Abstract set of async source operations for one merchant.

    All operations share the same window arguments.  ``core_metrics`` is
    called twice per report (current and comparison window);
    ``channel_performance`` needs both windows in one call because the
    source computes the per-channel growth itself.
    """

    @abstractmethod
    async def core_metrics(self, shop_ids: list[str], start: date, end: date) -> Any:
        """Return ``{total_orders, total_gmv, aov}`` for the window."""

    @abstractmethod
    async def peak_gmv(self, shop_ids: list[str], start: date, end: date) -> Any:
        """Return the peak-minute record, or ``None`` when there were no sales."""

    @abstractmethod
    async def top_products(self, shop_ids: list[str], start: date, end: date) -> Any: ...

    @abstractmethod
    async def channel_performance(
        self,
        shop_ids: list[str],
        start: date,
        end: date,
        comparison_start: date,
        comparison_end: date,
    ) -> Any: ...

    @abstractmethod
    async def retail_metrics(self, shop_ids: list[str], start: date, end: date) -> Any: ...

    @abstractmethod
    async def conversion_metrics(self, shop_ids: list[str], start: date, end: date) -> Any: ...

    @abstractmethod
    async def customer_insights(self, shop_ids: list[str], start: date, end: date) -> Any: ...

    @abstractmethod
    async def referrer_data(self, shop_ids: list[str], start: date, end: date) -> Any: ...

    @abstractmethod
    async def platform_stats(self, shop_ids: list[str], start: date, end: date) -> Any:
        """Return platform-wide totals, or ``None`` if unavailable for the window."""

    @abstractmethod
    async def shop_breakdown(self, shop_ids: list[str], start: date, end: date) -> Any: ...

    @abstractmethod
    async def discount_metrics(self, shop_ids: list[str], start: date, end: date) -> Any: ...

    @abstractmethod
    async def international_sales(self, shop_ids: list[str], start: date, end: date) -> Any: ...

    @abstractmethod
    async def units_per_transaction(self, shop_ids: list[str], start: date, end: date) -> Any: ...

    async def aclose(self) -> None:
        """Release any held resources.  Default: nothing to release."""
