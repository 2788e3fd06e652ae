"""Draft session and turn models."""

from dataclasses import dataclass, field
from enum import Enum

from draft_oracle.models.champion import TeamSlot


class DraftFormat(str, Enum):
    """Supported draft formats."""

    SOLO = "SOLO"  # Ranked solo queue: 10 bans then snake picks
    COMPETITIVE = "COMPETITIVE"  # Tournament: two ban phases, two pick phases


class Team(str, Enum):
    BLUE = "blue"
    RED = "red"

    @property
    def opponent(self) -> "Team":
        return Team.RED if self is Team.BLUE else Team.BLUE


class ActionType(str, Enum):
    BAN = "ban"
    PICK = "pick"


@dataclass(frozen=True)
class DraftTurn:
    """One step of a draft sequence."""

    team: Team
    action: ActionType
    phase: str  # Display label, e.g. "Ban Phase 1"


@dataclass(frozen=True)
class DraftAction:
    """A committed ban or pick."""

    sequence: int  # 1-based position in the draft
    team: Team
    action: ActionType
    champion_id: str


@dataclass(frozen=True)
class TeamDraft:
    """Committed picks and bans for one team."""

    picks: tuple[TeamSlot, ...] = ()
    bans: tuple[TeamSlot, ...] = ()

    @property
    def pick_ids(self) -> list[str]:
        return [slot.champion_id for slot in self.picks if slot.champion_id]

    @property
    def ban_ids(self) -> list[str]:
        return [slot.champion_id for slot in self.bans if slot.champion_id]


@dataclass(frozen=True)
class DraftSession:
    """Complete state of a draft at a point in time.

    Sessions are values: every transition in DraftService returns a new
    DraftSession and leaves the previous one untouched.
    """

    session_id: str
    format: DraftFormat
    sequence: tuple[DraftTurn, ...]
    current_index: int = 0
    blue: TeamDraft = field(default_factory=TeamDraft)
    red: TeamDraft = field(default_factory=TeamDraft)
    actions: tuple[DraftAction, ...] = ()

    @property
    def committed_ids(self) -> frozenset[str]:
        """All champion identifiers picked or banned by either team."""
        return frozenset(action.champion_id for action in self.actions)

    @property
    def is_complete(self) -> bool:
        return self.current_index >= len(self.sequence)

    @property
    def next_turn(self) -> DraftTurn | None:
        if self.is_complete:
            return None
        return self.sequence[self.current_index]

    def team_draft(self, team: Team) -> TeamDraft:
        return self.blue if team is Team.BLUE else self.red

    @property
    def blue_picks(self) -> list[str]:
        """Champion ids picked by blue team."""
        return self.blue.pick_ids

    @property
    def red_picks(self) -> list[str]:
        """Champion ids picked by red team."""
        return self.red.pick_ids

    @property
    def blue_bans(self) -> list[str]:
        return self.blue.ban_ids

    @property
    def red_bans(self) -> list[str]:
        return self.red.ban_ids
