"""Twelve Data REST API async client.

Fetches OHLC time series for forex pairs.  Only raw records are returned
here; ``fxlead.feed.normalize`` turns them into candles.
"""

import asyncio
import logging
from typing import Optional

import httpx

from fxlead.config import Config

logger = logging.getLogger("fxlead.feed")

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}


class TwelveDataError(Exception):
    """The provider answered with an error payload."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code


class TwelveDataClient:
    """Async client wrapping the Twelve Data ``time_series`` endpoint."""

    def __init__(self, config: Config) -> None:
        self._config = config
        self._base_url = config.base_url

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _get_with_retry(self, url: str, params: dict) -> httpx.Response:
        """GET with exponential-backoff retry.

        Retries on transient server errors (502, 503, 504), rate-limits
        (429) and transport failures.  Other HTTP errors raise immediately.
        """
        last_exc: Optional[Exception] = None

        for attempt in range(_MAX_RETRIES):
            try:
                async with httpx.AsyncClient() as client:
                    resp = await client.get(url, params=params, timeout=30.0)

                if resp.status_code in _RETRYABLE_STATUS_CODES:
                    delay = _RETRY_BASE_DELAY * (2 ** attempt)
                    logger.warning(
                        "Twelve Data GET %s returned %d, retry %d/%d in %.1fs",
                        url, resp.status_code, attempt + 1, _MAX_RETRIES, delay,
                    )
                    last_exc = httpx.HTTPStatusError(
                        f"Server error '{resp.status_code}'",
                        request=resp.request,
                        response=resp,
                    )
                    await asyncio.sleep(delay)
                    continue

                resp.raise_for_status()
                return resp

            except httpx.TransportError as exc:
                delay = _RETRY_BASE_DELAY * (2 ** attempt)
                logger.warning(
                    "Twelve Data GET %s transport error (%s), retry %d/%d in %.1fs",
                    url, exc, attempt + 1, _MAX_RETRIES, delay,
                )
                last_exc = exc
                await asyncio.sleep(delay)

        raise last_exc  # type: ignore[misc]

    # ── Time series ──────────────────────────────────────────────────────

    async def fetch_series(
        self,
        pair: str,
        interval: str,
        outputsize: int,
        api_key: str,
    ) -> list[dict]:
        """Fetch raw OHLC records for *pair*.

        Args:
            pair: e.g. ``"EUR/USD"``
            interval: e.g. ``"1day"``, ``"4h"``
            outputsize: number of records to request
            api_key: key for this interval (daily and 4H use separate keys)

        Returns:
            The provider's ``values`` list (newest-first, string numbers).

        Raises:
            TwelveDataError: when the payload has ``status == "error"``.
        """
        url = f"{self._base_url}/time_series"
        params = {
            "symbol": pair,
            "interval": interval,
            "outputsize": outputsize,
            "apikey": api_key,
        }

        resp = await self._get_with_retry(url, params)

        data = resp.json()
        if data.get("status") == "error":
            raise TwelveDataError(
                data.get("message", "Unknown Twelve Data error"),
                code=data.get("code"),
            )
        return data.get("values") or []

    async def fetch_h4(self, pair: str) -> list[dict]:
        return await self.fetch_series(
            pair, "4h", self._config.h4_outputsize, self._config.api_key_h4,
        )

    async def fetch_daily(self, pair: str) -> list[dict]:
        return await self.fetch_series(
            pair, "1day", self._config.daily_outputsize, self._config.api_key_daily,
        )
