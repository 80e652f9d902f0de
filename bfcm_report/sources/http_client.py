"""
HTTP source fetchers backed by an analytics API.

Endpoints (relative to ``sources.base_url``)::

    GET  /sources/{source}?shop_ids=1,2&start_date=YYYY-MM-DD&end_date=YYYY-MM-DD
         → {"data": <payload>}
    POST /oauth/token   (only when client credentials are configured)
         → Body: grant_type=client_credentials, Auth: Basic (id:secret)
         → {"access_token": "..."}

Token handling
--------------
All 14 report tasks start at once, so without coordination each would race
to obtain its own token.  ``_ensure_token`` is a single-flight guard: the
first caller fetches the token while holding an ``asyncio.Lock``; everyone
else waits on the lock and then reuses the cached value.  A failed token
request is not cached, so the next caller tries again.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from datetime import date
from typing import Any, Optional

import httpx

from bfcm_report.config import SourcesConfig
from bfcm_report.sources.base import SourceFetcherSet, SourceFetchError

logger = logging.getLogger(__name__)


class HttpSourceFetcherSet(SourceFetcherSet):
    """Fetch source payloads from the analytics HTTP API.

    Args:
        config: ``SourcesConfig`` with ``base_url`` and optional credentials.
        client: Pre-built ``httpx.AsyncClient`` (tests pass one with a
                ``MockTransport``).  When omitted, one is created and owned
                by this instance.

    Raises:
        ValueError: If ``config.base_url`` is not set.
    """

    def __init__(
        self,
        config: SourcesConfig,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not config.base_url:
            raise ValueError(
                "sources.base_url is not configured; set it in config or "
                "BFCM_REPORT_SOURCES_BASE_URL, or use a fixture file."
            )
        self.config = config
        self._base_url = config.base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._access_token: Optional[str] = None
        self._token_lock = asyncio.Lock()
        self.token_requests = 0

    # ── Plumbing ───────────────────────────────────────────────────────────────

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _ensure_token(self) -> Optional[str]:
        """Return a bearer token, fetching it at most once concurrently.

        Returns ``None`` when no client credentials are configured (the API
        is then called without an Authorization header).

        Raises:
            SourceFetchError: If the token endpoint fails.
        """
        if not self.config.has_credentials:
            return None
        if self._access_token is not None:
            return self._access_token

        async with self._token_lock:
            if self._access_token is not None:
                return self._access_token

            credentials = base64.b64encode(
                f"{self.config.client_id}:{self.config.client_secret}".encode()
            ).decode()
            self.token_requests += 1
            try:
                resp = await self._get_client().post(
                    f"{self._base_url}/oauth/token",
                    headers={
                        "Authorization": f"Basic {credentials}",
                        "Content-Type": "application/x-www-form-urlencoded",
                    },
                    data={"grant_type": "client_credentials"},
                    timeout=30.0,
                )
                resp.raise_for_status()
                token = resp.json()["access_token"]
            except (httpx.HTTPError, KeyError, ValueError) as exc:
                raise SourceFetchError("oauth", f"token request failed: {exc}") from exc

            self._access_token = token
            logger.info("Analytics API token obtained for %s", self._base_url)
            return token

    async def _get(self, source: str, params: dict[str, str]) -> Any:
        """GET one source and unwrap its ``data`` envelope.

        Raises:
            SourceFetchError: On transport errors, non-2xx responses, or a
                response body without a ``data`` key.
        """
        token = await self._ensure_token()
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            resp = await self._get_client().get(
                f"{self._base_url}/sources/{source}",
                params=params,
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as exc:
            raise SourceFetchError(
                source, f"HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceFetchError(source, f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise SourceFetchError(source, "response is not valid JSON") from exc

        if not isinstance(body, dict) or "data" not in body:
            raise SourceFetchError(source, "response has no 'data' field")
        logger.debug("Source %s: %d bytes", source, len(resp.content))
        return body["data"]

    @staticmethod
    def _params(shop_ids: list[str], start: date, end: date) -> dict[str, str]:
        return {
            "shop_ids": ",".join(shop_ids),
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        }

    # ── Source operations ──────────────────────────────────────────────────────

    async def core_metrics(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("core_metrics", self._params(shop_ids, start, end))

    async def peak_gmv(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("peak_gmv", self._params(shop_ids, start, end))

    async def top_products(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("top_products", self._params(shop_ids, start, end))

    async def channel_performance(
        self,
        shop_ids: list[str],
        start: date,
        end: date,
        comparison_start: date,
        comparison_end: date,
    ) -> Any:
        params = self._params(shop_ids, start, end)
        params["comparison_start"] = comparison_start.isoformat()
        params["comparison_end"] = comparison_end.isoformat()
        return await self._get("channel_performance", params)

    async def retail_metrics(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("retail_metrics", self._params(shop_ids, start, end))

    async def conversion_metrics(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("conversion_metrics", self._params(shop_ids, start, end))

    async def customer_insights(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("customer_insights", self._params(shop_ids, start, end))

    async def referrer_data(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("referrer_data", self._params(shop_ids, start, end))

    async def platform_stats(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("platform_stats", self._params(shop_ids, start, end))

    async def shop_breakdown(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("shop_breakdown", self._params(shop_ids, start, end))

    async def discount_metrics(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("discount_metrics", self._params(shop_ids, start, end))

    async def international_sales(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get("international_sales", self._params(shop_ids, start, end))

    async def units_per_transaction(self, shop_ids: list[str], start: date, end: date) -> Any:
        return await self._get(
            "units_per_transaction", self._params(shop_ids, start, end)
        )
