"""Draft analytics facade with content-addressed caching."""

import hashlib
import json
import logging
from typing import Any, Iterable, Optional

from draft_oracle.models.analytics import DraftAnalysis
from draft_oracle.models.champion import ChampionAttributes, ChampionPool
from draft_oracle.models.draft import DraftSession
from draft_oracle.services.analysis_worker import AnalysisWorker, run_analysis
from draft_oracle.services.cache_store import TTL, CacheStore
from draft_oracle.services.counter_engine import DEFAULT_COUNTER_LIMIT
from draft_oracle.services.win_rate_predictor import compare_compositions

logger = logging.getLogger(__name__)


def content_signature(*rosters: Iterable[ChampionAttributes], **extra: Any) -> str:
    """Stable SHA-256 over roster contents (attributes, not just ids)."""
    payload = {
        "rosters": [[champ.to_dict() for champ in roster] for roster in rosters],
        "extra": extra,
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


class DraftAnalysisService:
    """Runs composition, synergy, counter and win-rate analytics for a draft.

    Args:
        cache: Cache for finished analyses (no caching if omitted)
        worker: Optional background worker; computation runs in-process otherwise
        cache_ttl: TTL for cached analyses in milliseconds
        counter_limit: Maximum counter candidates returned per side
        worker_timeout: Seconds to wait for a worker result
    """

    CACHE_NAMESPACE = "analysis"
    CACHE_VERSION = "1"

    def __init__(
        self,
        cache: Optional[CacheStore] = None,
        worker: Optional[AnalysisWorker] = None,
        cache_ttl: int = TTL["THIRTY_MINUTES"],
        counter_limit: int = DEFAULT_COUNTER_LIMIT,
        worker_timeout: float = 10.0,
    ):
        self.cache = cache
        self.worker = worker
        self.cache_ttl = cache_ttl
        self.counter_limit = counter_limit
        self.worker_timeout = worker_timeout

    def _run(self, kind: str, payload: dict) -> Any:
        if self.worker is not None:
            return self.worker.submit(kind, payload).result(timeout=self.worker_timeout)
        return run_analysis(kind, payload)

    def analyze(
        self,
        blue: list[ChampionAttributes],
        red: list[ChampionAttributes],
        candidates: Optional[list[ChampionAttributes]] = None,
    ) -> DraftAnalysis:
        """Analyze both rosters; counters are drawn from candidates.

        Candidates already on either roster are ignored.
        """
        candidates = candidates or []
        key = content_signature(blue, red, candidates, limit=self.counter_limit)

        if self.cache is not None:
            cached = self.cache.get(
                key,
                version=self.CACHE_VERSION,
                namespace=self.CACHE_NAMESPACE,
                ttl=self.cache_ttl,
            )
            if cached is not None:
                try:
                    return DraftAnalysis.from_dict(cached)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Discarding unreadable cached analysis {key[:12]}: {e}")

        analysis = self._compute(blue, red, candidates)

        if self.cache is not None:
            self.cache.set(
                key,
                analysis.to_dict(),
                version=self.CACHE_VERSION,
                namespace=self.CACHE_NAMESPACE,
                ttl=self.cache_ttl,
            )
        return analysis

    def _compute(
        self,
        blue: list[ChampionAttributes],
        red: list[ChampionAttributes],
        candidates: list[ChampionAttributes],
    ) -> DraftAnalysis:
        taken = {champ.id for champ in blue} | {champ.id for champ in red}
        pool = [champ for champ in candidates if champ.id not in taken]

        blue_composition = self._run("analyze_team", {"team": blue})
        red_composition = self._run("analyze_team", {"team": red})

        return DraftAnalysis(
            blue_composition=blue_composition,
            red_composition=red_composition,
            blue_synergy=self._run("calculate_synergy", {"champions": blue}),
            red_synergy=self._run("calculate_synergy", {"champions": red}),
            blue_counters=self._run(
                "find_counters",
                {"enemy_team": red, "candidates": pool, "limit": self.counter_limit},
            ),
            red_counters=self._run(
                "find_counters",
                {"enemy_team": blue, "candidates": pool, "limit": self.counter_limit},
            ),
            win_rate=compare_compositions(blue_composition, red_composition),
        )

    def analyze_session(self, session: DraftSession, pool: ChampionPool) -> DraftAnalysis:
        """Analyze a session's committed picks, drawing counters from unused champions."""
        blue = pool.resolve(session.blue_picks)
        red = pool.resolve(session.red_picks)
        taken = session.committed_ids
        candidates = [champ for cid, champ in pool.champions.items() if cid not in taken]
        return self.analyze(blue, red, candidates)
