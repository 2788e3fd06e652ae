"""Fixed-window rate limiting with a pluggable counter backend.

The primary backend may be remote (Upstash Redis REST). If it fails for any
reason the limiter counts locally for that call instead of blocking the
caller; being rate limited is always a structured result, never an exception.
"""

import logging
import math
import threading
import time
from typing import Callable, Optional, Protocol
from urllib.parse import quote

import httpx

from draft_oracle.models.rate_limit import RateLimitResult, RateLimitWindow

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 30
DEFAULT_WINDOW_MS = 60_000


def _now_ms() -> int:
    return int(time.time() * 1000)


class RateLimitBackend(Protocol):
    """Atomically increments a window counter."""

    name: str

    async def increment(self, key: str, window_end: int, now: int) -> int:
        """Increment the counter for key and return the new count.

        Args:
            key: Window key (identifier plus window number)
            window_end: Epoch ms when the window closes and the key may expire
            now: Current epoch ms
        """
        ...


class InMemoryRateLimitBackend:
    """Process-local counters. Best effort: not shared between processes.

    Expired windows are swept on every access instead of relying on timers.
    """

    name = "memory"

    def __init__(self):
        self._counters: dict[str, tuple[int, int]] = {}  # key -> (count, expires_at)
        self._lock = threading.Lock()

    async def increment(self, key: str, window_end: int, now: int) -> int:
        with self._lock:
            self._sweep(now)
            count, expires_at = self._counters.get(key, (0, window_end))
            count += 1
            self._counters[key] = (count, expires_at)
            return count

    def _sweep(self, now: int) -> None:
        expired = [k for k, (_, expires_at) in self._counters.items() if expires_at <= now]
        for k in expired:
            del self._counters[k]

    @property
    def entries_count(self) -> int:
        return len(self._counters)


class UpstashRateLimitBackend:
    """Counters in Upstash Redis, incremented in one REST round trip.

    INCR and PEXPIREAT travel together in a pipeline request so the counter
    and its expiry are set without a second call.
    """

    name = "redis"

    def __init__(self, url: str, token: str, timeout: float = 3.0):
        self.url = url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def increment(self, key: str, window_end: int, now: int) -> int:
        client = await self._get_client()
        response = await client.post(
            f"{self.url}/pipeline",
            headers={"Authorization": f"Bearer {self.token}"},
            json=[["INCR", key], ["PEXPIREAT", key, str(window_end)]],
        )
        response.raise_for_status()
        results = response.json()
        first = results[0]
        if first.get("error"):
            raise RuntimeError(f"Redis INCR failed: {first['error']}")
        return int(first["result"])


class RateLimiter:
    """Fixed-window request counter.

    Args:
        backend: Primary counter backend (local memory if omitted)
        fallback: Backend used when the primary raises
        clock: Returns the current time in epoch milliseconds
        max_requests: Default requests allowed per window
        window_ms: Default window length in milliseconds
    """

    def __init__(
        self,
        backend: Optional[RateLimitBackend] = None,
        fallback: Optional[InMemoryRateLimitBackend] = None,
        clock: Callable[[], int] = _now_ms,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_ms: int = DEFAULT_WINDOW_MS,
    ):
        self.fallback = fallback or InMemoryRateLimitBackend()
        self.backend = backend or self.fallback
        self.clock = clock
        self.max_requests = max_requests
        self.window_ms = window_ms

    def window_key(self, identifier: str, now: int, window_ms: int) -> str:
        return f"ratelimit:{quote(identifier, safe='')}:{now // window_ms}"

    async def check_rate_limit(
        self,
        identifier: str,
        *,
        max_requests: Optional[int] = None,
        window_ms: Optional[int] = None,
    ) -> RateLimitResult:
        """Count one request for identifier and report whether it is allowed.

        Raises:
            ValueError: If window_ms is not positive
        """
        if max_requests is None:
            max_requests = self.max_requests
        if window_ms is None:
            window_ms = self.window_ms
        if window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {window_ms}")
        now = self.clock()
        window_start = (now // window_ms) * window_ms
        key = self.window_key(identifier, now, window_ms)

        try:
            count = await self.backend.increment(key, window_start + window_ms, now)
        except Exception as e:
            if self.backend is self.fallback:
                raise
            logger.warning(f"Rate limit backend '{self.backend.name}' failed, using memory: {e}")
            count = await self.fallback.increment(key, window_start + window_ms, now)

        window = RateLimitWindow(
            identifier=identifier,
            window_start=window_start,
            window_ms=window_ms,
            count=count,
            max_requests=max_requests,
        )
        remaining = max(0, max_requests - count)
        if window.allowed:
            return RateLimitResult(allowed=True, remaining=remaining, reset=window.reset, limit=max_requests)

        retry_after = max(1, math.ceil((window.reset - now) / 1000))
        logger.info(f"Rate limited {identifier}: {count}/{max_requests}, retry in {retry_after}s")
        return RateLimitResult(
            allowed=False,
            remaining=remaining,
            reset=window.reset,
            limit=max_requests,
            retry_after=retry_after,
        )

    def get_stats(self) -> dict:
        """Backend type and local counter count (for debugging)."""
        return {
            "type": self.backend.name,
            "entries_count": self.fallback.entries_count,
            "configured": self.backend is not self.fallback,
        }


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """HTTP headers describing a rate limit result."""
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset),
    }
    if not result.allowed:
        headers["Retry-After"] = str(result.retry_after or 60)
    return headers


def rate_limit_error_body(result: RateLimitResult) -> dict:
    """JSON body for a rejected request."""
    return {
        "error": "Too many requests. Please try again later.",
        "retryAfter": result.retry_after,
        "type": "rate_limit",
    }
