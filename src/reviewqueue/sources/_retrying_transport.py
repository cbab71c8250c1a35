"""httpx async transport wrapper with retry, backoff, and rate-limit handling."""

from __future__ import annotations

import asyncio
import logging
import random
import time

import httpx

_LOG = logging.getLogger(__name__)

# Status codes considered transient and eligible for automatic retry.
_RETRYABLE_STATUS_CODES = frozenset({502, 503, 504})


class RetryingTransport(httpx.AsyncBaseTransport):
    """Wraps an httpx async transport with automatic retry on transient failures.

    A rate-limited response (429, or 403 with an exhausted
    ``x-ratelimit-remaining``) pauses **all** requests sharing this transport
    until the advertised reset, so a burst of detail fetches backs off as one.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 3,
        max_backoff: float = 4.0,
        max_rate_limit_pause: float = 60.0,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries
        self._max_backoff = max_backoff
        self._max_rate_limit_pause = max_rate_limit_pause

        self._rate_limit_lock = asyncio.Lock()
        self._rate_limit_clear = asyncio.Event()
        self._rate_limit_clear.set()
        self._rate_limit_pause_until = 0.0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        for attempt in range(self._max_retries + 1):
            await self._rate_limit_clear.wait()

            try:
                response = await self._transport.handle_async_request(request)
            except httpx.TransportError:
                if attempt >= self._max_retries:
                    raise
                await self._sleep_backoff(request, attempt)
                continue

            if self._is_rate_limited(response):
                if attempt >= self._max_retries:
                    return response
                await response.aclose()
                await self._apply_rate_limit_pause(self._rate_limit_wait(response))
                continue

            if response.status_code in _RETRYABLE_STATUS_CODES and attempt < self._max_retries:
                await response.aclose()
                await self._sleep_backoff(request, attempt)
                continue

            return response

        raise httpx.TransportError("Request failed after retries")  # pragma: no cover

    async def aclose(self) -> None:
        await self._transport.aclose()

    # ------------------------------------------------------------------
    # Rate-limit helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_rate_limited(response: httpx.Response) -> bool:
        if response.status_code == 429:
            return True
        return response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0"

    def _rate_limit_wait(self, response: httpx.Response) -> float:
        retry_after = response.headers.get("Retry-After")
        if retry_after is not None:
            try:
                return min(self._max_rate_limit_pause, max(0.0, float(retry_after)))
            except ValueError:
                pass

        reset = response.headers.get("x-ratelimit-reset")
        if reset is not None:
            try:
                return min(self._max_rate_limit_pause, max(0.0, float(reset) - time.time()))
            except ValueError:
                pass

        return 1.0

    async def _apply_rate_limit_pause(self, seconds: float) -> None:
        now = time.monotonic()
        async with self._rate_limit_lock:
            until = now + seconds
            if until <= self._rate_limit_pause_until:
                return
            self._rate_limit_pause_until = until
            self._rate_limit_clear.clear()

        _LOG.warning("Rate limited, pausing outbound requests for %.1fs", seconds)
        await asyncio.sleep(max(0.0, until - time.monotonic()))

        async with self._rate_limit_lock:
            # A later, longer pause owns the event now.
            if self._rate_limit_pause_until <= until:
                self._rate_limit_clear.set()

    async def _sleep_backoff(self, request: httpx.Request, attempt: int) -> None:
        seconds = min(self._max_backoff, float(2**attempt)) + random.uniform(0.0, 0.25)
        _LOG.warning("Retrying %s %s (attempt %d)", request.method, request.url.host, attempt + 1)
        await asyncio.sleep(seconds)
