"""
Fixture source fetchers: serve payloads from a JSON snapshot.

Used for local runs without analytics credentials and throughout the test
suite.  Snapshot layout::

    {
      "sources": {
        "core_metrics": {"2025": {...}, "2024": {...}},   # keyed by window end year
        "peak_gmv": {"peak_gmv_per_minute": 12000, "peak_minute": "..."},
        "top_products": [...],
        ...
      },
      "fail": ["referrer_data", "core_metrics:2024"]
    }

``fail`` entries simulate source failures.  ``core_metrics:<year>`` fails only
the call for that window; a bare source name fails every call to it.
A source missing from ``sources`` also fails, the same way an empty warehouse
view would surface as an error rather than silent zeros.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Optional

from bfcm_report.sources.base import SourceFetcherSet, SourceFetchError

logger = logging.getLogger(__name__)


class FixtureSourceFetcherSet(SourceFetcherSet):
    """Serve source payloads from an in-memory snapshot.

    Args:
        payloads: Mapping of source name to payload (see module docstring).
        failing:  Source names (or ``core_metrics:<year>``) that raise.
        delays:   Optional per-source delay in seconds, to control the order
                  in which sources complete.
    """

    def __init__(
        self,
        payloads: dict[str, Any],
        failing: Iterable[str] = (),
        delays: Optional[dict[str, float]] = None,
    ) -> None:
        self._payloads = payloads
        self._failing = frozenset(failing)
        self._delays = delays or {}
        self.calls: list[str] = []

    @classmethod
    def from_file(cls, path: Path | str) -> "FixtureSourceFetcherSet":
        """Load a snapshot file.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
            ValueError:        If the file has no ``sources`` object.
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict) or not isinstance(data.get("sources"), dict):
            raise ValueError(f"Fixture file {path} has no 'sources' object.")
        logger.info(
            "Fixture sources loaded from %s (%d sources, %d failing)",
            path, len(data["sources"]), len(data.get("fail", [])),
        )
        return cls(data["sources"], failing=data.get("fail", []))

    async def _serve(self, source: str, key: Optional[str] = None) -> Any:
        call_name = f"{source}:{key}" if key else source
        self.calls.append(call_name)

        delay = self._delays.get(call_name, self._delays.get(source, 0.0))
        if delay:
            await asyncio.sleep(delay)
        else:
            await asyncio.sleep(0)

        if source in self._failing or call_name in self._failing:
            raise SourceFetchError(source, "simulated failure (fixture)")
        if source not in self._payloads:
            raise SourceFetchError(source, "no fixture payload")

        payload = self._payloads[source]
        if key is not None:
            if not isinstance(payload, dict) or key not in payload:
                raise SourceFetchError(source, f"no fixture payload for window {key}")
            payload = payload[key]
        return copy.deepcopy(payload)

    async def core_metrics(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("core_metrics", str(end.year))

    async def peak_gmv(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("peak_gmv")

    async def top_products(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("top_products")

    async def channel_performance(
        self,
        shop_ids: list[str],
        start: date,
        end: date,
        comparison_start: date,
        comparison_end: date,
    ) -> Any:
        return await self._serve("channel_performance")

    async def retail_metrics(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("retail_metrics")

    async def conversion_metrics(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("conversion_metrics")

    async def customer_insights(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("customer_insights")

    async def referrer_data(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("referrer_data")

    async def platform_stats(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("platform_stats")

    async def shop_breakdown(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("shop_breakdown")

    async def discount_metrics(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("discount_metrics")

    async def international_sales(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("international_sales")

    async def units_per_transaction(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._serve("units_per_transaction")
