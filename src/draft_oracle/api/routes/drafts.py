"""REST endpoints for draft sessions."""

from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from draft_oracle.models.draft import DraftFormat, DraftSession, TeamDraft
from draft_oracle.services.session_manager import DraftSessionManager

router = APIRouter(prefix="/api/drafts", tags=["drafts"])


class CreateDraftRequest(BaseModel):
    format: str = DraftFormat.COMPETITIVE.value


class DraftActionRequest(BaseModel):
    champion: str
    team: Optional[Literal["blue", "red"]] = None
    action: Optional[Literal["ban", "pick"]] = None


class RestoreDraftRequest(BaseModel):
    saved: dict


def _get_manager(request: Request) -> DraftSessionManager:
    return request.app.state.session_manager


def _get_session(manager: DraftSessionManager, session_id: str) -> DraftSession:
    session = manager.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _team_payload(team_draft: TeamDraft) -> dict:
    return {
        "picks": [asdict(slot) for slot in team_draft.picks],
        "bans": team_draft.ban_ids,
    }


def _session_payload(manager: DraftSessionManager, session: DraftSession) -> dict:
    """Serialize a session for the client."""
    turn = session.next_turn
    return {
        "session_id": session.session_id,
        "format": session.format.value,
        "turn": session.current_index,
        "total_turns": len(session.sequence),
        "phase": manager.draft_service.phase_label(session),
        "is_complete": session.is_complete,
        "current_turn": {
            "team": turn.team.value,
            "action": turn.action.value,
            "phase": turn.phase,
        } if turn else None,
        "blue": _team_payload(session.blue),
        "red": _team_payload(session.red),
        "actions": [
            {
                "sequence": a.sequence,
                "team": a.team.value,
                "action": a.action.value,
                "champion_id": a.champion_id,
            }
            for a in session.actions
        ],
        "saved": manager.draft_service.to_saved_draft(session),
    }


@router.post("", status_code=201)
async def create_draft(request: Request, body: CreateDraftRequest):
    """Start a new draft session."""
    manager = _get_manager(request)
    try:
        draft_format = DraftFormat(body.format.upper())
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown draft format: {body.format}")
    session = manager.create_session(draft_format)
    return _session_payload(manager, session)


@router.post("/restore", status_code=201)
async def restore_draft(request: Request, body: RestoreDraftRequest):
    """Rebuild a session from a saved snapshot (DraftError -> 409).

    A snapshot whose id belongs to a live session is rejected rather than
    overwriting it.
    """
    manager = _get_manager(request)
    session = manager.add_session(manager.draft_service.from_saved_draft(body.saved))
    return _session_payload(manager, session)


@router.get("/{session_id}")
async def get_draft(request: Request, session_id: str):
    """Get the current state of a draft session."""
    manager = _get_manager(request)
    return _session_payload(manager, _get_session(manager, session_id))


@router.post("/{session_id}/actions")
async def submit_action(request: Request, session_id: str, body: DraftActionRequest):
    """Ban or pick a champion for the current turn."""
    manager = _get_manager(request)
    session = _get_session(manager, session_id)
    if not body.champion.strip():
        raise HTTPException(status_code=422, detail="champion must not be empty")
    updated = manager.draft_service.apply_action(
        session,
        body.champion.strip(),
        team=body.team,
        action=body.action,
    )
    manager.replace_session(updated)
    return _session_payload(manager, updated)


@router.post("/{session_id}/undo")
async def undo_action(request: Request, session_id: str):
    """Revert the most recent action."""
    manager = _get_manager(request)
    session = _get_session(manager, session_id)
    updated = manager.draft_service.undo_last_action(session)
    manager.replace_session(updated)
    return _session_payload(manager, updated)


@router.delete("/{session_id}", status_code=204)
async def delete_draft(request: Request, session_id: str):
    manager = _get_manager(request)
    _get_session(manager, session_id)
    manager.remove_session(session_id)
