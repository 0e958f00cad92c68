"""
Listing Signals: History provider fetcher.

Wraps the one HTTP call a batch needs (the provider's ``/product``
endpoint) plus the token-balance check.  Handles retries and backoff, and
raises ``TransportError`` when the provider cannot be reached; the caller
decides whether to retry the batch.

The analysis engine never imports this module; it only consumes the
envelope this returns.

Usage::

    fetcher  = HistoryFetcher()
    envelope = await fetcher.fetch_products(["B00EXAMPLE"])
    await fetcher.close()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from listing_signals import config
from listing_signals.core.errors import TransportError
from listing_signals.data_pipeline.normalizer import clean_identifiers

logger = logging.getLogger(__name__)


class HistoryFetcher:
    """Async HTTP client for the rank/price history provider.

    Instantiate once per process; the internal httpx.AsyncClient is
    lazily created and reused across calls.
    """

    RETRY_BACKOFF_BASE: float = 2.0   # 2 s, 4 s, 8 s, …

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        domain: Optional[int] = None,
        history_days: Optional[int] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or config.HISTORY_PROVIDER_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else config.HISTORY_PROVIDER_KEY
        self.domain = domain if domain is not None else config.HISTORY_PROVIDER_DOMAIN
        self.history_days = history_days if history_days is not None else config.HISTORY_WINDOW_DAYS
        self.timeout = timeout if timeout is not None else config.HISTORY_PROVIDER_TIMEOUT_SECONDS
        self.max_retries = max(1, max_retries if max_retries is not None else config.HISTORY_PROVIDER_MAX_RETRIES)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _client_get(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        """GET ``path`` with retries and exponential backoff.

        Retries on 429, 5xx and transport errors.  Returns the parsed JSON
        body on success.

        Raises
        ------
        TransportError
            On a non-retryable status, an unparseable body, or once every
            attempt has failed.
        """
        client = await self._client_get()
        url = f"{self.base_url}{path}"
        delay = self.RETRY_BACKOFF_BASE
        last_error = "no attempt made"
        last_status: Optional[int] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                resp = await client.get(url, params=params)
                resp.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                last_status = status
                last_error = f"HTTP {status}"
                if status != 429 and status < 500:
                    logger.error("History provider HTTP error %s for %s", status, path)
                    raise TransportError(f"History provider returned HTTP {status}", status) from exc
            except httpx.HTTPError as exc:
                last_error = str(exc) or exc.__class__.__name__
            else:
                try:
                    return resp.json()
                except ValueError as exc:
                    raise TransportError("History provider returned a non-JSON body", resp.status_code) from exc

            if attempt < self.max_retries:
                logger.warning(
                    "History provider request failed (%s); retry %d/%d in %.0fs",
                    last_error, attempt, self.max_retries, delay,
                )
                await self._sleep(delay)
                delay *= 2

        logger.error("History provider request failed after %d attempts: %s", self.max_retries, last_error)
        raise TransportError(
            f"History provider unreachable after {self.max_retries} attempts: {last_error}",
            last_status,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_products(self, identifiers: Sequence[str]) -> Dict[str, Any]:
        """Fetch history for a whole batch in one request.

        Returns the provider envelope::

            {"products": [{"asin": "B00EXAMPLE", "title": "...", "csv": [[...], ...]}, ...]}

        Raises ``InputError`` when no identifier is valid and
        ``TransportError`` when the request fails.
        """
        ids = clean_identifiers(identifiers)
        logger.info("Requesting history for %d listings (%d-day window)", len(ids), self.history_days)
        data = await self._get("/product", {
            "key": self.api_key,
            "domain": self.domain,
            "asin": ",".join(ids),
            "stats": self.history_days,
        })
        if not isinstance(data, dict):
            raise TransportError("History response is not a JSON object")
        return data

    async def check_tokens(self) -> Dict[str, Any]:
        """Query the remaining request quota for the configured key."""
        data = await self._get("/token", {"key": self.api_key})
        if not isinstance(data, dict):
            raise TransportError("Token response is not a JSON object")
        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise TransportError(f"History provider error: {message}")
        tokens_left = int(data.get("tokensLeft") or 0)
        return {
            "success": tokens_left > 0,
            "tokens_left": tokens_left,
            "message": f"Available tokens: {tokens_left}",
        }

    async def close(self) -> None:
        """Cleanly close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "HistoryFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

