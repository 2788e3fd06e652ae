"""REST endpoints for composition analytics over supplied champion attributes."""

from dataclasses import asdict
from typing import Optional, Union

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from draft_oracle.models.champion import ChampionAttributes
from draft_oracle.services.composition_analyzer import analyze_composition
from draft_oracle.services.counter_engine import DEFAULT_COUNTER_LIMIT, find_counters
from draft_oracle.services.synergy_engine import calculate_synergy
from draft_oracle.services.win_rate_predictor import predict_win_rate

router = APIRouter(prefix="/api/analysis", tags=["analysis"])

RatingValue = Optional[Union[str, int]]


class ChampionPayload(BaseModel):
    """Attribute profile for one champion; ratings are Low/Medium/High or 1-3."""

    id: str
    name: Optional[str] = None
    damage_type: str = "Mixed"
    roles: list[str] = []
    crowd_control: RatingValue = None
    engage: RatingValue = None
    tankiness: RatingValue = None
    mobility: RatingValue = None
    wave_clear: RatingValue = None
    poke: RatingValue = None
    split_push: RatingValue = None
    team_fight: RatingValue = None
    damage: RatingValue = None
    disengage: RatingValue = None
    siege: RatingValue = None
    is_assassin: bool = False
    counters: list[str] = []


class TeamRequest(BaseModel):
    team: list[ChampionPayload]


class SynergyRequest(BaseModel):
    champions: list[ChampionPayload]


class CountersRequest(BaseModel):
    enemy_team: list[ChampionPayload]
    candidates: list[ChampionPayload]
    limit: int = Field(default=DEFAULT_COUNTER_LIMIT, ge=1, le=50)


class MatchupRequest(BaseModel):
    blue_team: list[ChampionPayload]
    red_team: list[ChampionPayload]
    candidates: list[ChampionPayload] = []


def _to_attributes(payloads: list[ChampionPayload]) -> list[ChampionAttributes]:
    try:
        return [ChampionAttributes.from_dict(p.model_dump()) for p in payloads]
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/composition")
async def composition(body: TeamRequest):
    """Aggregate attribute profile of one team."""
    return analyze_composition(_to_attributes(body.team)).to_dict()


@router.post("/synergy")
async def synergy(body: SynergyRequest):
    """Pairwise synergy score for a set of champions."""
    return calculate_synergy(_to_attributes(body.champions)).to_dict()


@router.post("/counters")
async def counters(body: CountersRequest):
    """Rank candidates against an enemy roster."""
    ranked = find_counters(
        _to_attributes(body.enemy_team),
        _to_attributes(body.candidates),
        body.limit,
    )
    return {"counters": [asdict(c) for c in ranked]}


@router.post("/win-rate")
async def win_rate(body: MatchupRequest):
    """Heuristic win rate for two rosters."""
    return predict_win_rate(_to_attributes(body.blue_team), _to_attributes(body.red_team)).to_dict()


@router.post("/draft")
def analyze_draft(request: Request, body: MatchupRequest):
    """Full analytics bundle for both sides (cached by content)."""
    service = request.app.state.analysis_service
    analysis = service.analyze(
        _to_attributes(body.blue_team),
        _to_attributes(body.red_team),
        _to_attributes(body.candidates),
    )
    return analysis.to_dict()
