"""Heuristic win-rate estimate from two compositions."""

from fractions import Fraction
from typing import Iterable, Optional

from draft_oracle.models.analytics import CompositionReport, WinRatePrediction
from draft_oracle.models.champion import ChampionAttributes
from draft_oracle.services.composition_analyzer import analyze_composition

# Averages compared head to head; the strictly larger side earns a point
COMPARED_ATTRIBUTES = ("crowd_control", "tankiness", "engage", "wave_clear")

# Hand-picked coefficients, not fitted to match data
POINT_WEIGHT = 5
BALANCE_WEIGHT = 5
BASE_WIN_RATE = 50
MIN_WIN_RATE = 30
MAX_WIN_RATE = 70


def average_rating(report: CompositionReport, attr: str) -> Fraction:
    """Per-champion average of an aggregate; 0 for an empty team."""
    if report.team_size == 0:
        return Fraction(0)
    return Fraction(getattr(report, attr), report.team_size)


def compare_compositions(blue: CompositionReport, red: CompositionReport) -> WinRatePrediction:
    """Turn two composition reports into a clamped win-rate split.

    Attributes are compared as per-champion averages, so a side with more
    picks mid-draft does not win a point just by having more champions.
    """
    blue_points = 0
    red_points = 0
    for attr in COMPARED_ATTRIBUTES:
        blue_value = average_rating(blue, attr)
        red_value = average_rating(red, attr)
        if blue_value > red_value:
            blue_points += 1
        elif red_value > blue_value:
            red_points += 1

    blue_balance = 1 if blue.is_balanced else 0
    red_balance = 1 if red.is_balanced else 0

    advantage = (blue_points - red_points) * POINT_WEIGHT + (blue_balance - red_balance) * BALANCE_WEIGHT
    blue_win_rate = max(MIN_WIN_RATE, min(MAX_WIN_RATE, BASE_WIN_RATE + advantage))

    return WinRatePrediction(
        blue_win_rate=blue_win_rate,
        red_win_rate=100 - blue_win_rate,
        blue_points=blue_points,
        red_points=red_points,
        blue_strengths=list(blue.strengths),
        red_strengths=list(red.strengths),
        blue_weaknesses=list(blue.weaknesses),
        red_weaknesses=list(red.weaknesses),
    )


def predict_win_rate(
    blue_team: Iterable[Optional[ChampionAttributes]],
    red_team: Iterable[Optional[ChampionAttributes]],
) -> WinRatePrediction:
    """Estimate each side's win probability (percent) from their rosters."""
    return compare_compositions(analyze_composition(blue_team), analyze_composition(red_team))
