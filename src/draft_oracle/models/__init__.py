"""Data models for the draft assistant."""

from draft_oracle.models.analytics import (
    CompositionReport,
    CounterCandidate,
    DamageProfile,
    DraftAnalysis,
    SynergyPair,
    SynergyReport,
    WinRatePrediction,
)
from draft_oracle.models.cache import CacheEntry
from draft_oracle.models.champion import (
    ChampionAttributes,
    ChampionPool,
    DamageType,
    Rating,
    TeamSlot,
)
from draft_oracle.models.draft import (
    ActionType,
    DraftAction,
    DraftFormat,
    DraftSession,
    DraftTurn,
    Team,
    TeamDraft,
)
from draft_oracle.models.rate_limit import RateLimitResult, RateLimitWindow

__all__ = [
    "CompositionReport",
    "CounterCandidate",
    "DamageProfile",
    "DraftAnalysis",
    "SynergyPair",
    "SynergyReport",
    "WinRatePrediction",
    "CacheEntry",
    "ChampionAttributes",
    "ChampionPool",
    "DamageType",
    "Rating",
    "TeamSlot",
    "ActionType",
    "DraftAction",
    "DraftFormat",
    "DraftSession",
    "DraftTurn",
    "Team",
    "TeamDraft",
    "RateLimitResult",
    "RateLimitWindow",
]
