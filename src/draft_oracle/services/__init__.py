"""Business logic services."""

from draft_oracle.services.ai_client import (
    AIClient,
    AIServiceError,
    DraftAdvisor,
    InsightResult,
)
from draft_oracle.services.cache_store import CacheStore
from draft_oracle.services.draft_service import (
    ChampionAlreadyTaken,
    DraftError,
    DraftService,
    InvalidSavedDraft,
    NothingToUndo,
    SessionComplete,
    SessionExists,
    WrongPhase,
)
from draft_oracle.services.rate_limiter import RateLimiter
from draft_oracle.services.request_coordinator import CancellationToken, RequestCoordinator

__all__ = [
    "AIClient",
    "AIServiceError",
    "DraftAdvisor",
    "InsightResult",
    "CacheStore",
    "ChampionAlreadyTaken",
    "DraftError",
    "DraftService",
    "InvalidSavedDraft",
    "NothingToUndo",
    "SessionComplete",
    "SessionExists",
    "WrongPhase",
    "RateLimiter",
    "CancellationToken",
    "RequestCoordinator",
]
