"""Team composition aggregation: damage mix, crowd control, engage."""

from typing import Iterable, Optional

from draft_oracle.models.analytics import CompositionReport, DamageProfile
from draft_oracle.models.champion import ChampionAttributes, DamageType, Rating

# Share of the maximum possible score (team_size * 3) separating rating bands
LOW_RATING_CUTOFF = 0.34
MEDIUM_RATING_CUTOFF = 0.67

# A team is balanced when its AD share is within this distance of 50/50
BALANCE_TOLERANCE = 0.2
HEAVY_PHYSICAL_SHARE = 0.7
HEAVY_MAGIC_SHARE = 0.3


def classify_rating(score: int, team_size: int) -> Rating:
    """Band an aggregate ordinal score into Low/Medium/High for a team size."""
    max_score = team_size * Rating.HIGH.value
    if max_score == 0:
        return Rating.LOW
    ratio = score / max_score
    if ratio < LOW_RATING_CUTOFF:
        return Rating.LOW
    if ratio < MEDIUM_RATING_CUTOFF:
        return Rating.MEDIUM
    return Rating.HIGH


def is_damage_lopsided(damage: DamageProfile) -> bool:
    """Four or more champions of one damage type and none of the other."""
    if damage.total < 4:
        return False
    return (damage.ad >= 4 and damage.ap == 0) or (damage.ap >= 4 and damage.ad == 0)


def is_damage_balanced(damage: DamageProfile) -> bool:
    """AD share strictly within BALANCE_TOLERANCE of 50/50, on exact counts.

    With mixed counting half, the AD share is (2*ad + mixed) / (2*size), so
    the comparison is done in integers to keep mirrored rosters symmetric.
    """
    size = damage.total
    if size == 0:
        return False
    distance = abs(_physical_half_units(damage) - size)
    return 10 * distance < round(10 * BALANCE_TOLERANCE) * 2 * size


def analyze_composition(champions: Iterable[Optional[ChampionAttributes]]) -> CompositionReport:
    """Aggregate a roster's attributes into totals, ratings and imbalance flags.

    Empty slots (None) are ignored. The result depends only on the multiset of
    champions, never on their order.
    """
    team = [champ for champ in champions if champ is not None]
    if not team:
        return CompositionReport()

    damage = DamageProfile(
        ad=sum(1 for c in team if c.damage_type is DamageType.AD),
        ap=sum(1 for c in team if c.damage_type is DamageType.AP),
        mixed=sum(1 for c in team if c.damage_type is DamageType.MIXED),
    )
    size = len(team)
    report = CompositionReport(
        team_size=size,
        damage=damage,
        crowd_control=sum(c.crowd_control.value for c in team),
        engage=sum(c.engage.value for c in team),
        tankiness=sum(c.tankiness.value for c in team),
        mobility=sum(c.mobility.value for c in team),
        wave_clear=sum(c.wave_clear.value for c in team),
        poke=sum(c.poke.value for c in team),
    )
    report.crowd_control_rating = classify_rating(report.crowd_control, size)
    report.engage_rating = classify_rating(report.engage, size)
    report.tankiness_rating = classify_rating(report.tankiness, size)

    # Mixed damage counts half toward each side
    report.ad_share = round((damage.ad + damage.mixed / 2) / size, 3)
    report.is_balanced = is_damage_balanced(damage)
    report.is_unbalanced = is_damage_lopsided(damage)

    report.strengths, report.weaknesses = _describe(report)
    return report


def _physical_half_units(damage: DamageProfile) -> int:
    # AD share in units of 1 / (2 * size)
    return 2 * damage.ad + damage.mixed


def _describe(report: CompositionReport) -> tuple[list[str], list[str]]:
    strengths: list[str] = []
    weaknesses: list[str] = []

    if report.crowd_control_rating is Rating.HIGH:
        strengths.append("Excellent crowd control")
    elif report.crowd_control_rating is Rating.LOW:
        weaknesses.append("Limited crowd control")

    if report.tankiness_rating is Rating.HIGH:
        strengths.append("High tankiness")
    elif report.tankiness_rating is Rating.LOW:
        weaknesses.append("Squishy composition")

    if report.engage_rating is Rating.HIGH:
        strengths.append("Strong engage")
    elif report.engage_rating is Rating.LOW:
        weaknesses.append("Weak engage")

    # Shares compared as 10 * half_units vs 20 * size * threshold, in integers
    half_units = _physical_half_units(report.damage)
    double_size = 2 * report.team_size
    if 10 * half_units > round(10 * HEAVY_PHYSICAL_SHARE) * double_size:
        weaknesses.append("Heavy physical damage (enemy can stack armor)")
    elif 10 * half_units < round(10 * HEAVY_MAGIC_SHARE) * double_size:
        weaknesses.append("Heavy magic damage (enemy can stack MR)")

    return strengths, weaknesses
