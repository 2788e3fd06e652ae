"""Rate limiting models."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RateLimitWindow:
    """Request count for one identifier inside one clock-aligned window."""

    identifier: str
    window_start: int  # Epoch milliseconds, aligned to window_ms
    window_ms: int
    count: int
    max_requests: int

    @property
    def reset(self) -> int:
        return self.window_start + self.window_ms

    @property
    def allowed(self) -> bool:
        return self.count <= self.max_requests


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate limit check."""

    allowed: bool
    remaining: int
    reset: int  # Epoch milliseconds when the window resets
    limit: int
    retry_after: Optional[int] = None  # Seconds, set only when rejected

    def to_dict(self) -> dict:
        data = {
            "allowed": self.allowed,
            "remaining": self.remaining,
            "reset": self.reset,
        }
        if self.retry_after is not None:
            data["retryAfter"] = self.retry_after
        return data
