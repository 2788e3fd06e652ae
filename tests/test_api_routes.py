"""Tests for the HTTP API."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from draft_oracle.main import app
from draft_oracle.services.ai_client import DraftAdvisor
from draft_oracle.services.analysis_service import DraftAnalysisService
from draft_oracle.services.cache_store import CacheStore
from draft_oracle.services.rate_limiter import RateLimiter
from draft_oracle.services.session_manager import DraftSessionManager

pytestmark = pytest.mark.anyio


@pytest.fixture
def ai_client():
    client = MagicMock()
    client.generate = AsyncMock(return_value="Ban Azir, blue lacks engage.")
    client.close = AsyncMock()
    return client


@pytest.fixture
async def client(ai_client):
    """Async test client with fresh services (mimics lifespan startup)."""
    app.state.cache = CacheStore()
    app.state.rate_limiter = RateLimiter(max_requests=2)
    app.state.session_manager = DraftSessionManager()
    app.state.analysis_worker = None
    app.state.analysis_service = DraftAnalysisService(cache=app.state.cache)
    app.state.advisor = DraftAdvisor(ai_client, app.state.rate_limiter)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def _create(client, fmt="COMPETITIVE") -> dict:
    response = await client.post("/api/drafts", json={"format": fmt})
    assert response.status_code == 201
    return response.json()


async def test_health(client):
    response = await client.get("/health")
    assert response.json()["status"] == "healthy"


class TestDrafts:
    async def test_create(self, client):
        draft = await _create(client, "solo")
        assert draft["format"] == "SOLO"
        assert draft["turn"] == 0
        assert draft["total_turns"] == 20
        assert draft["current_turn"] == {"team": "blue", "action": "ban", "phase": "Ban Phase"}

    async def test_create_unknown_format(self, client):
        response = await client.post("/api/drafts", json={"format": "ARAM"})
        assert response.status_code == 422

    async def test_get_unknown(self, client):
        response = await client.get("/api/drafts/draft_missing")
        assert response.status_code == 404

    async def test_actions_and_undo(self, client):
        draft = await _create(client)
        url = f"/api/drafts/{draft['session_id']}"

        response = await client.post(f"{url}/actions", json={"champion": "Azir"})
        assert response.status_code == 200
        assert response.json()["blue"]["bans"] == ["Azir"]

        response = await client.post(f"{url}/actions", json={"champion": "Vi", "team": "red", "action": "ban"})
        assert response.json()["red"]["bans"] == ["Vi"]
        assert response.json()["actions"][-1]["sequence"] == 2

        response = await client.post(f"{url}/undo")
        assert response.json()["red"]["bans"] == []

        response = await client.get(url)
        assert response.json()["turn"] == 1

    async def test_taken_champion_conflict(self, client):
        draft = await _create(client)
        url = f"/api/drafts/{draft['session_id']}/actions"
        await client.post(url, json={"champion": "Azir"})

        response = await client.post(url, json={"champion": "Azir"})
        assert response.status_code == 409
        assert response.json()["type"] == "champion_already_taken"

        state = (await client.get(f"/api/drafts/{draft['session_id']}")).json()
        assert state["turn"] == 1

    async def test_wrong_phase_conflict(self, client):
        draft = await _create(client)
        response = await client.post(
            f"/api/drafts/{draft['session_id']}/actions",
            json={"champion": "Azir", "action": "pick"},
        )
        assert response.status_code == 409
        assert response.json()["type"] == "wrong_phase"

    async def test_nothing_to_undo(self, client):
        draft = await _create(client)
        response = await client.post(f"/api/drafts/{draft['session_id']}/undo")
        assert response.status_code == 409
        assert response.json()["type"] == "nothing_to_undo"

    async def test_restore(self, client):
        draft = await _create(client)
        await client.post(f"/api/drafts/{draft['session_id']}/actions", json={"champion": "Azir"})
        saved = (await client.get(f"/api/drafts/{draft['session_id']}")).json()["saved"]
        saved["session_id"] = "draft_restored"

        response = await client.post("/api/drafts/restore", json={"saved": saved})
        assert response.status_code == 201
        assert response.json()["blue"]["bans"] == ["Azir"]
        assert (await client.get("/api/drafts/draft_restored")).status_code == 200

    async def test_restore_does_not_overwrite_live_session(self, client):
        draft = await _create(client)
        saved = (await client.get(f"/api/drafts/{draft['session_id']}")).json()["saved"]
        await client.post(f"/api/drafts/{draft['session_id']}/actions", json={"champion": "Azir"})

        response = await client.post("/api/drafts/restore", json={"saved": saved})
        assert response.status_code == 409
        assert response.json()["type"] == "session_exists"
        live = (await client.get(f"/api/drafts/{draft['session_id']}")).json()
        assert live["blue"]["bans"] == ["Azir"]

    async def test_restore_invalid(self, client):
        response = await client.post("/api/drafts/restore", json={"saved": {"format": "SOLO", "turn": 50}})
        assert response.status_code == 409
        assert response.json()["type"] == "invalid_saved_draft"

    async def test_delete(self, client):
        draft = await _create(client)
        assert (await client.delete(f"/api/drafts/{draft['session_id']}")).status_code == 204
        assert (await client.get(f"/api/drafts/{draft['session_id']}")).status_code == 404


@pytest.fixture
def blue_payload():
    return [
        {"id": "Ornn", "damage_type": "Mixed", "roles": ["top"], "crowd_control": "High", "tankiness": "High", "engage": "High"},
        {"id": "Jinx", "damage_type": "AD", "roles": ["bot"], "damage": "High"},
    ]


@pytest.fixture
def red_payload():
    return [
        {"id": "Zed", "damage_type": "AD", "mobility": "High", "is_assassin": True},
        {"id": "Draven", "damage_type": "AD"},
    ]


class TestAnalysis:
    async def test_composition(self, client, blue_payload):
        response = await client.post("/api/analysis/composition", json={"team": blue_payload})
        assert response.status_code == 200
        assert response.json()["team_size"] == 2
        assert response.json()["crowd_control_rating"] == "Medium"

    async def test_synergy(self, client, blue_payload):
        response = await client.post("/api/analysis/synergy", json={"champions": blue_payload})
        assert response.json()["total"] == 5

    async def test_counters(self, client, red_payload):
        candidates = [{"id": "Malphite", "damage_type": "AP", "tankiness": "High"}]
        response = await client.post(
            "/api/analysis/counters",
            json={"enemy_team": red_payload, "candidates": candidates, "limit": 5},
        )
        assert response.json()["counters"] == [{"champion_id": "Malphite", "score": 3, "roles": []}]

    async def test_win_rate(self, client, blue_payload, red_payload):
        response = await client.post(
            "/api/analysis/win-rate", json={"blue_team": blue_payload, "red_team": red_payload}
        )
        data = response.json()
        assert data["blue_win_rate"] + data["red_win_rate"] == 100
        assert data["blue_win_rate"] > 50

    async def test_draft_bundle_is_cached(self, client, blue_payload, red_payload):
        body = {"blue_team": blue_payload, "red_team": red_payload}
        first = await client.post("/api/analysis/draft", json=body)
        second = await client.post("/api/analysis/draft", json=body)
        assert first.json() == second.json()
        assert app.state.cache.get_stats()["count"] == 1

    async def test_invalid_rating(self, client):
        response = await client.post(
            "/api/analysis/composition",
            json={"team": [{"id": "Ornn", "engage": "Extreme"}]},
        )
        assert response.status_code == 422


class TestInsights:
    async def test_insight_with_rate_limit_headers(self, client, ai_client):
        response = await client.post("/api/insights", json={"prompt": "Who should blue ban?"})
        assert response.status_code == 200
        assert response.json()["text"] == "Ban Azir, blue lacks engage."
        assert response.headers["X-RateLimit-Limit"] == "2"
        assert response.headers["X-RateLimit-Remaining"] == "1"

    async def test_session_prompt(self, client, ai_client):
        draft = await _create(client)
        response = await client.post("/api/insights", json={"session_id": draft["session_id"]})
        assert response.status_code == 200
        prompt = ai_client.generate.await_args.args[0]
        assert "## Current Draft State" in prompt

    async def test_rate_limited(self, client):
        for _ in range(2):
            await client.post("/api/insights", json={"prompt": "hi"})
        response = await client.post("/api/insights", json={"prompt": "hi"})
        assert response.status_code == 429
        assert response.json()["type"] == "rate_limit"
        assert response.json()["retryAfter"] >= 1
        assert int(response.headers["Retry-After"]) >= 1
        assert response.headers["X-RateLimit-Remaining"] == "0"

    async def test_ai_failure(self, client, ai_client):
        from draft_oracle.services.ai_client import AIServiceError

        ai_client.generate.side_effect = AIServiceError("AI service unavailable: boom")
        response = await client.post("/api/insights", json={"prompt": "hi"})
        assert response.status_code == 502
        assert response.json()["error"] == "AI service unavailable: boom"

    async def test_missing_prompt(self, client):
        response = await client.post("/api/insights", json={})
        assert response.status_code == 422

    async def test_not_configured(self, client):
        app.state.advisor = None
        response = await client.post("/api/insights", json={"prompt": "hi"})
        assert response.status_code == 503
