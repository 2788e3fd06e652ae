"""Counter-pick scoring against a revealed enemy roster."""

from typing import Iterable, Optional

from draft_oracle.models.analytics import CounterCandidate
from draft_oracle.models.champion import ChampionAttributes

DEFAULT_COUNTER_LIMIT = 10

# Points for each rule (thresholds on the 10-point intensity scale)
MOBILITY_POINTS = 2  # Mobile candidate vs immobile enemy
TANK_VS_ASSASSIN_POINTS = 3
DISENGAGE_POINTS = 2  # Disengage vs heavy engage
WAVE_CLEAR_POINTS = 2  # Wave clear vs siege
DIRECT_COUNTER_POINTS = 5  # Enemy listed in candidate's counters


def score_against(candidate: ChampionAttributes, enemy: ChampionAttributes) -> int:
    """Points a candidate earns against one enemy champion."""
    score = 0
    if candidate.mobility.intensity > 7 and enemy.mobility.intensity < 4:
        score += MOBILITY_POINTS
    if candidate.tankiness.intensity > 8 and enemy.is_assassin:
        score += TANK_VS_ASSASSIN_POINTS
    if candidate.disengage.intensity > 7 and enemy.engage.intensity > 7:
        score += DISENGAGE_POINTS
    if candidate.wave_clear.intensity > 8 and enemy.siege.intensity > 7:
        score += WAVE_CLEAR_POINTS
    if enemy.id in candidate.counters:
        score += DIRECT_COUNTER_POINTS
    return score


def find_counters(
    enemy_team: Iterable[Optional[ChampionAttributes]],
    candidates: Iterable[ChampionAttributes],
    limit: int = DEFAULT_COUNTER_LIMIT,
) -> list[CounterCandidate]:
    """Rank candidates by how well they counter the enemy roster.

    Candidates already on the enemy team are skipped. Only positive scores are
    returned, highest first (ties broken by champion id), truncated to limit.
    """
    enemies = [enemy for enemy in enemy_team if enemy is not None]
    enemy_ids = {enemy.id for enemy in enemies}

    scored = []
    for candidate in candidates:
        if candidate.id in enemy_ids:
            continue
        score = sum(score_against(candidate, enemy) for enemy in enemies)
        if score > 0:
            scored.append(
                CounterCandidate(
                    champion_id=candidate.id,
                    score=score,
                    roles=sorted(candidate.roles),
                )
            )

    scored.sort(key=lambda c: (-c.score, c.champion_id))
    return scored[:limit]
