"""Pairwise synergy scoring for a roster."""

from itertools import combinations
from typing import Callable, Iterable, Optional

from draft_oracle.models.analytics import SynergyPair, SynergyReport
from draft_oracle.models.champion import ChampionAttributes

PairRule = Callable[[ChampionAttributes, ChampionAttributes], bool]


def _both(attr: str, threshold: int) -> PairRule:
    def rule(a: ChampionAttributes, b: ChampionAttributes) -> bool:
        return getattr(a, attr).intensity > threshold and getattr(b, attr).intensity > threshold
    return rule


def _either_way(attr_a: str, threshold_a: int, attr_b: str, threshold_b: int) -> PairRule:
    """One champion meets the first condition and the other meets the second."""
    def holds(x: ChampionAttributes, y: ChampionAttributes) -> bool:
        return getattr(x, attr_a).intensity > threshold_a and getattr(y, attr_b).intensity > threshold_b

    def rule(a: ChampionAttributes, b: ChampionAttributes) -> bool:
        return holds(a, b) or holds(b, a)
    return rule


# (rule, points, reason) - thresholds are on the 10-point intensity scale
SYNERGY_RULES: list[tuple[PairRule, int, str]] = [
    (_both("crowd_control", 6), 2, "CC chain potential"),
    (_either_way("engage", 7, "damage", 7), 3, "Engage + Damage follow-up"),
    (_either_way("tankiness", 7, "damage", 8), 2, "Tank protects carry"),
    (_both("poke", 7), 2, "Poke synergy"),
    (_either_way("split_push", 7, "team_fight", 7), 2, "Split push + Teamfight pressure"),
]


def score_pair(a: ChampionAttributes, b: ChampionAttributes) -> SynergyPair:
    """Score a single pair against every synergy rule."""
    score = 0
    reasons: list[str] = []
    for rule, points, reason in SYNERGY_RULES:
        if rule(a, b):
            score += points
            reasons.append(reason)
    return SynergyPair(champion_a=a.id, champion_b=b.id, score=score, reasons=reasons)


def calculate_synergy(champions: Iterable[Optional[ChampionAttributes]]) -> SynergyReport:
    """Sum pair scores over every unordered pair on a team.

    Only pairs with a positive score are listed; callers may sort them.
    """
    team = [champ for champ in champions if champ is not None]
    report = SynergyReport()
    for a, b in combinations(team, 2):
        pair = score_pair(a, b)
        if pair.score > 0:
            report.pairs.append(pair)
            report.total += pair.score
    return report
