"""Role normalization for champion role sets and pick slots.

The canonical format is lowercase: top, jungle, mid, bot, support.
"""

from typing import Optional

CANONICAL_ROLES = frozenset({"top", "jungle", "mid", "bot", "support"})

# Pick slots are assigned roles in this order (first pick of a team -> top, ...)
ROLE_ORDER = ["top", "jungle", "mid", "bot", "support"]

# Known aliases, matched case-insensitively
ROLE_ALIASES: dict[str, str] = {
    # Top
    "top": "top",
    "toplane": "top",
    "top laner": "top",
    # Jungle
    "jungle": "jungle",
    "jungler": "jungle",
    "jng": "jungle",
    "jg": "jungle",
    # Mid
    "mid": "mid",
    "middle": "mid",
    "midlane": "mid",
    "mid laner": "mid",
    # Bot - ADC and marksman all normalize to "bot"
    "bot": "bot",
    "bottom": "bot",
    "adc": "bot",
    "ad carry": "bot",
    "marksman": "bot",
    # Support
    "support": "support",
    "sup": "support",
    "supp": "support",
    "utility": "support",
}


def normalize_role(role: Optional[str]) -> Optional[str]:
    """Normalize a role string to canonical lowercase format.

    Examples:
        >>> normalize_role("JUNGLE")
        'jungle'
        >>> normalize_role("BOTTOM")
        'bot'
        >>> normalize_role("feeder")
        None
    """
    if role is None:
        return None
    return ROLE_ALIASES.get(role.strip().lower())


def normalize_role_strict(role: str) -> str:
    """Normalize a role string, raising ValueError if unknown."""
    normalized = normalize_role(role)
    if normalized is None:
        raise ValueError(f"Unknown role: {role}")
    return normalized


def role_for_pick_index(index: int) -> Optional[str]:
    """Intended role of a team's Nth pick (0-based), None past the fifth."""
    if 0 <= index < len(ROLE_ORDER):
        return ROLE_ORDER[index]
    return None
