"""Tests for counter-pick scoring."""

import pytest

from draft_oracle.services.counter_engine import find_counters, score_against


@pytest.fixture
def candidates(champion):
    return [
        champion("Malphite", "AP", ["top"], tankiness="High"),
        champion("Poppy", "AD", ["top", "jungle"], tankiness="Medium", counters=["Zed"]),
        champion("Kassadin", "AP", ["mid"], mobility="High"),
        champion("Janna", "AP", ["support"], disengage="High"),
        champion("Fiora", "AD", ["top"], mobility="High"),
    ]


def test_score_rules(champion):
    enemy = champion("Enemy", mobility="Low", engage="High", siege="High", is_assassin=True)
    candidate = champion(
        "Candidate", mobility="High", tankiness="High", disengage="High",
        wave_clear="High", counters=["Enemy"],
    )
    assert score_against(candidate, enemy) == 2 + 3 + 2 + 2 + 5


def test_ranking_against_dive_team(glass_team, candidates):
    counters = find_counters(glass_team, candidates)
    assert [(c.champion_id, c.score) for c in counters] == [
        ("Malphite", 9),
        ("Poppy", 5),
        ("Kassadin", 4),
    ]
    assert counters[1].roles == ["jungle", "top"]


def test_enemy_champions_are_not_suggested(glass_team, candidates):
    ids = [c.champion_id for c in find_counters(glass_team, candidates)]
    assert "Fiora" not in ids


def test_zero_scores_are_excluded(glass_team, candidates):
    ids = [c.champion_id for c in find_counters(glass_team, candidates)]
    assert "Janna" not in ids


def test_limit(glass_team, candidates):
    assert len(find_counters(glass_team, candidates, limit=2)) == 2


def test_ties_break_by_id(glass_team, champion):
    tanks = [champion("Zac", tankiness="High"), champion("Maokai", tankiness="High")]
    assert [c.champion_id for c in find_counters(glass_team, tanks)] == ["Maokai", "Zac"]


def test_empty_enemy_team(candidates):
    assert find_counters([None], candidates) == []
