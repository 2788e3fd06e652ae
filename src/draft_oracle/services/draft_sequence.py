"""Turn order tables for each draft format."""

from typing import Union

from draft_oracle.models.draft import ActionType, DraftFormat, DraftTurn, Team

B, R = Team.BLUE, Team.RED
BAN, PICK = ActionType.BAN, ActionType.PICK


def _turns(phase: str, action: ActionType, teams: list[Team]) -> list[DraftTurn]:
    return [DraftTurn(team=team, action=action, phase=phase) for team in teams]


# Ranked solo queue: 10 alternating bans, then snake picks B R R B B R R B B R
SOLO_SEQUENCE: tuple[DraftTurn, ...] = tuple(
    _turns("Ban Phase", BAN, [B, R] * 5)
    + _turns("Pick Phase", PICK, [B, R, R, B, B, R, R, B, B, R])
)

# Tournament draft
COMPETITIVE_SEQUENCE: tuple[DraftTurn, ...] = tuple(
    # Ban Phase 1: B1, R1, B2, R2, B3, R3
    _turns("Ban Phase 1", BAN, [B, R, B, R, B, R])
    # Pick Phase 1: B1, R1-R2, B2-B3, R3
    + _turns("Pick Phase 1", PICK, [B, R, R, B, B, R])
    # Ban Phase 2: red bans first
    + _turns("Ban Phase 2", BAN, [R, B, R, B])
    # Pick Phase 2: R4, B4-B5, R5
    + _turns("Pick Phase 2", PICK, [R, B, B, R])
)

_SEQUENCES = {
    DraftFormat.SOLO: SOLO_SEQUENCE,
    DraftFormat.COMPETITIVE: COMPETITIVE_SEQUENCE,
}


def get_draft_sequence(draft_format: Union[DraftFormat, str]) -> tuple[DraftTurn, ...]:
    """Get the ordered turns for a draft format.

    Args:
        draft_format: DraftFormat member or its value ("SOLO", "COMPETITIVE")

    Returns:
        Immutable tuple of DraftTurn records

    Raises:
        ValueError: If the format is unknown
    """
    return _SEQUENCES[DraftFormat(draft_format)]
