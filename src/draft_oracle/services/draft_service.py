"""Draft session state machine."""

import logging
import uuid
from dataclasses import replace
from typing import Iterable, Optional, Union

from draft_oracle.models.champion import TeamSlot
from draft_oracle.models.draft import (
    ActionType,
    DraftAction,
    DraftFormat,
    DraftSession,
    DraftTurn,
    Team,
)
from draft_oracle.services.draft_sequence import get_draft_sequence
from draft_oracle.utils.role_normalizer import role_for_pick_index

logger = logging.getLogger(__name__)


class DraftError(Exception):
    """Base class for rejected draft actions.

    A DraftError never leaves a session partially modified; the caller can
    always recover by choosing a different action.
    """

    code = "draft_error"


class ChampionAlreadyTaken(DraftError):
    code = "champion_already_taken"

    def __init__(self, champion_id: str):
        super().__init__(f"Champion '{champion_id}' is already picked or banned")
        self.champion_id = champion_id


class SessionComplete(DraftError):
    code = "session_complete"

    def __init__(self, session_id: str):
        super().__init__(f"Draft session '{session_id}' is already complete")
        self.session_id = session_id


class WrongPhase(DraftError):
    code = "wrong_phase"

    def __init__(self, expected: DraftTurn, team: Optional[Team], action: Optional[ActionType]):
        got = f"{team.value if team else expected.team.value} {action.value if action else expected.action.value}"
        super().__init__(
            f"Expected {expected.team.value} {expected.action.value} ({expected.phase}), got {got}"
        )
        self.expected = expected


class NothingToUndo(DraftError):
    code = "nothing_to_undo"

    def __init__(self, session_id: str):
        super().__init__(f"Draft session '{session_id}' has no actions to undo")


class InvalidSavedDraft(DraftError):
    code = "invalid_saved_draft"


class SessionExists(DraftError):
    code = "session_exists"

    def __init__(self, session_id: str):
        super().__init__(f"Draft session '{session_id}' is already active")
        self.session_id = session_id


class DraftService:
    """Pure, synchronous transitions over DraftSession values.

    The service holds no state; every method returns a new session (or raises
    a DraftError) and never touches the session it was given.
    """

    def create_session(
        self,
        draft_format: Union[DraftFormat, str] = DraftFormat.COMPETITIVE,
        session_id: Optional[str] = None,
    ) -> DraftSession:
        """Create an empty session at turn 0.

        Raises:
            ValueError: If the format is unknown
        """
        fmt = DraftFormat(draft_format)
        return DraftSession(
            session_id=session_id or f"draft_{uuid.uuid4().hex[:12]}",
            format=fmt,
            sequence=get_draft_sequence(fmt),
        )

    def apply_action(
        self,
        session: DraftSession,
        champion_id: str,
        *,
        team: Union[Team, str, None] = None,
        action: Union[ActionType, str, None] = None,
    ) -> DraftSession:
        """Commit a champion to the current turn.

        Args:
            session: Session to advance
            champion_id: Champion to ban or pick
            team: Optional team the caller believes is acting; checked against the turn
            action: Optional action the caller believes is due; checked against the turn

        Returns:
            New session with the slot filled and the turn index advanced

        Raises:
            ChampionAlreadyTaken: champion_id is already picked or banned
            SessionComplete: every turn has been played
            WrongPhase: team/action do not match the current turn
        """
        if not champion_id:
            raise ValueError("champion_id must be a non-empty string")
        if champion_id in session.committed_ids:
            raise ChampionAlreadyTaken(champion_id)
        if session.is_complete:
            raise SessionComplete(session.session_id)

        turn = session.sequence[session.current_index]
        claimed_team = Team(team) if team is not None else None
        claimed_action = ActionType(action) if action is not None else None
        if (claimed_team is not None and claimed_team is not turn.team) or (
            claimed_action is not None and claimed_action is not turn.action
        ):
            raise WrongPhase(turn, claimed_team, claimed_action)

        team_draft = session.team_draft(turn.team)
        if turn.action is ActionType.PICK:
            slot = TeamSlot(champion_id=champion_id, role=role_for_pick_index(len(team_draft.picks)))
            updated = replace(team_draft, picks=team_draft.picks + (slot,))
        else:
            updated = replace(team_draft, bans=team_draft.bans + (TeamSlot(champion_id=champion_id),))

        record = DraftAction(
            sequence=session.current_index + 1,
            team=turn.team,
            action=turn.action,
            champion_id=champion_id,
        )
        side = "blue" if turn.team is Team.BLUE else "red"
        return replace(
            session,
            current_index=session.current_index + 1,
            actions=session.actions + (record,),
            **{side: updated},
        )

    def apply_actions(self, session: DraftSession, champion_ids: Iterable[str]) -> DraftSession:
        """Apply several actions in order, stopping at the first error."""
        for champion_id in champion_ids:
            session = self.apply_action(session, champion_id)
        return session

    def undo_last_action(self, session: DraftSession) -> DraftSession:
        """Return the session as it was before its most recent action.

        Raises:
            NothingToUndo: The session has no committed actions
        """
        if not session.actions:
            raise NothingToUndo(session.session_id)
        fresh = self.create_session(session.format, session_id=session.session_id)
        return self.apply_actions(fresh, [a.champion_id for a in session.actions[:-1]])

    def current_turn(self, session: DraftSession) -> Optional[DraftTurn]:
        return session.next_turn

    def is_complete(self, session: DraftSession) -> bool:
        return session.is_complete

    def phase_label(self, session: DraftSession) -> str:
        turn = session.next_turn
        return turn.phase if turn else "Complete"

    def available_champions(self, session: DraftSession, pool: Iterable[str]) -> list[str]:
        """Filter a champion pool down to identifiers not yet picked or banned."""
        taken = session.committed_ids
        return [champion_id for champion_id in pool if champion_id not in taken]

    def to_saved_draft(self, session: DraftSession) -> dict:
        """Lightweight JSON-compatible snapshot holding only champion ids."""
        return {
            "session_id": session.session_id,
            "format": session.format.value,
            "turn": session.current_index,
            "blue": {"picks": session.blue_picks, "bans": session.blue_bans},
            "red": {"picks": session.red_picks, "bans": session.red_bans},
        }

    def from_saved_draft(self, data: dict) -> DraftSession:
        """Rebuild a session from to_saved_draft() output by replaying its turns.

        Raises:
            InvalidSavedDraft: The snapshot is malformed or not reachable by legal actions
        """
        try:
            session = self.create_session(data["format"], session_id=data.get("session_id"))
            turn_count = int(data["turn"])
            queues = {
                (team, ActionType.PICK): list(data[team.value]["picks"])
                for team in Team
            }
            queues.update(
                {(team, ActionType.BAN): list(data[team.value]["bans"]) for team in Team}
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidSavedDraft(f"Malformed saved draft: {e}") from e

        if not 0 <= turn_count <= len(session.sequence):
            raise InvalidSavedDraft(f"Turn {turn_count} is outside the draft sequence")

        for turn in session.sequence[:turn_count]:
            queue = queues[(turn.team, turn.action)]
            if not queue:
                raise InvalidSavedDraft(
                    f"Missing {turn.team.value} {turn.action.value} for turn {session.current_index + 1}"
                )
            try:
                session = self.apply_action(session, queue.pop(0))
            except (DraftError, ValueError) as e:
                raise InvalidSavedDraft(str(e)) from e

        leftover = [cid for queue in queues.values() for cid in queue]
        if leftover:
            raise InvalidSavedDraft(f"Saved draft has champions beyond turn {turn_count}: {leftover}")

        logger.debug(f"Restored draft {session.session_id} at turn {session.current_index}")
        return session
