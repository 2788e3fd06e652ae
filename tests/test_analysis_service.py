"""Tests for the draft analysis service and background worker."""

from unittest.mock import patch

import pytest

from draft_oracle.models.champion import ChampionPool
from draft_oracle.services.analysis_service import DraftAnalysisService, content_signature
from draft_oracle.services.analysis_worker import AnalysisWorker, run_analysis
from draft_oracle.services.cache_store import CacheStore
from draft_oracle.services.composition_analyzer import analyze_composition
from draft_oracle.services.draft_service import DraftService
from draft_oracle.services.win_rate_predictor import predict_win_rate


@pytest.fixture
def candidates(champion):
    return [
        champion("Malphite", "AP", ["top"], tankiness="High"),
        champion("Kassadin", "AP", ["mid"], mobility="High"),
        champion("Janna", "AP", ["support"], disengage="High"),
    ]


@pytest.fixture
def worker():
    with AnalysisWorker() as worker:
        yield worker


def test_analyze_bundles_every_result(frontline_team, glass_team, candidates):
    analysis = DraftAnalysisService().analyze(frontline_team, glass_team, candidates)
    assert analysis.blue_composition == analyze_composition(frontline_team)
    assert analysis.win_rate == predict_win_rate(frontline_team, glass_team)
    assert [c.champion_id for c in analysis.blue_counters] == ["Malphite", "Kassadin"]
    # Frontline has no mobility and heavy engage
    assert [c.champion_id for c in analysis.red_counters] == ["Kassadin", "Janna"]


def test_candidates_on_either_roster_are_ignored(frontline_team, glass_team, candidates):
    analysis = DraftAnalysisService().analyze(frontline_team, glass_team, candidates + [frontline_team[0]])
    ids = {c.champion_id for c in analysis.blue_counters + analysis.red_counters}
    assert "Ornn" not in ids


def test_results_are_cached_by_content(frontline_team, glass_team, candidates):
    cache = CacheStore()
    service = DraftAnalysisService(cache=cache)
    first = service.analyze(frontline_team, glass_team, candidates)

    with patch("draft_oracle.services.analysis_service.run_analysis", wraps=run_analysis) as spy:
        second = service.analyze(frontline_team, glass_team, candidates)
        assert spy.call_count == 0
        service.analyze(glass_team, frontline_team, candidates)
        assert spy.call_count > 0

    assert second == first
    assert cache.get_stats()["count"] == 2


def test_signature_tracks_attributes(champion):
    assert content_signature([champion("A", engage="High")]) != content_signature([champion("A")])
    assert content_signature([champion("A")]) == content_signature([champion("A")])


def test_worker_matches_in_process(worker, frontline_team, glass_team, candidates):
    in_process = DraftAnalysisService().analyze(frontline_team, glass_team, candidates)
    off_thread = DraftAnalysisService(worker=worker).analyze(frontline_team, glass_team, candidates)
    assert off_thread == in_process


def test_worker_kinds(worker, frontline_team, glass_team):
    assert worker.submit("analyze_team", {"team": frontline_team}).result(timeout=5) == analyze_composition(frontline_team)
    prediction = worker.submit(
        "predict_win_rate", {"blue_team": frontline_team, "red_team": glass_team}
    ).result(timeout=5)
    assert prediction.blue_win_rate == 70


def test_worker_unknown_kind(worker):
    with pytest.raises(ValueError, match="Unknown analysis type"):
        worker.submit("predict_weather", {}).result(timeout=5)


def test_worker_rejects_after_shutdown():
    worker = AnalysisWorker()
    worker.shutdown()
    with pytest.raises(RuntimeError):
        worker.submit("analyze_team", {"team": []})


def test_analyze_session(frontline_team, glass_team, candidates):
    pool = ChampionPool.from_list(frontline_team + glass_team + candidates)
    service = DraftService()
    session = service.create_session("SOLO")
    session = service.apply_actions(session, ["Janna", "Zed"] + [f"Ban{i}" for i in range(8)])
    session = service.apply_actions(session, ["Ornn", "Fiora", "KhaZix", "Sejuani"])

    analysis = DraftAnalysisService().analyze_session(session, pool)
    assert analysis.blue_composition.team_size == 2
    assert analysis.red_composition.team_size == 2
    counter_ids = {c.champion_id for c in analysis.blue_counters + analysis.red_counters}
    assert "Janna" not in counter_ids
    assert "Zed" not in counter_ids
