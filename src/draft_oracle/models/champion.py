"""Champion attribute models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from draft_oracle.utils.role_normalizer import normalize_role


class Rating(int, Enum):
    """Ordinal Low/Medium/High score for a champion attribute."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def intensity(self) -> int:
        """Value of this rating on the 10-point scale used by pairwise rules."""
        return RATING_INTENSITY[self]

    @classmethod
    def parse(cls, value: Union["Rating", str, int, None]) -> "Rating":
        """Parse "Low"/"Medium"/"High" (any case) or 1/2/3 into a Rating.

        None parses as LOW, matching how missing scores are treated.

        Raises:
            ValueError: If the value is not a known rating
        """
        if value is None:
            return cls.LOW
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
            raise ValueError(f"Unknown rating: {value!r}")
        return cls(int(value))


# Canonical mapping from ordinal rating to the 10-point intensity scale.
# Thresholds like "> 7" in the synergy/counter rules are read on this scale.
RATING_INTENSITY: dict[Rating, int] = {
    Rating.LOW: 2,
    Rating.MEDIUM: 5,
    Rating.HIGH: 9,
}


class DamageType(str, Enum):
    """Primary damage type dealt by a champion."""

    AD = "AD"
    AP = "AP"
    MIXED = "Mixed"

    @classmethod
    def parse(cls, value: Union["DamageType", str]) -> "DamageType":
        if isinstance(value, cls):
            return value
        key = value.strip().lower()
        if key in ("ad", "physical"):
            return cls.AD
        if key in ("ap", "magic", "magical"):
            return cls.AP
        if key in ("mixed", "hybrid"):
            return cls.MIXED
        raise ValueError(f"Unknown damage type: {value!r}")


# Attribute fields carried as Rating on ChampionAttributes
RATED_ATTRIBUTES = (
    "crowd_control",
    "engage",
    "tankiness",
    "mobility",
    "wave_clear",
    "poke",
    "split_push",
    "team_fight",
    "damage",
    "disengage",
    "siege",
)


@dataclass(frozen=True)
class ChampionAttributes:
    """Externally supplied attribute profile for one champion."""

    id: str
    name: str
    damage_type: DamageType
    roles: frozenset[str] = frozenset()
    crowd_control: Rating = Rating.LOW
    engage: Rating = Rating.LOW
    tankiness: Rating = Rating.LOW
    mobility: Rating = Rating.LOW
    wave_clear: Rating = Rating.LOW
    poke: Rating = Rating.LOW
    split_push: Rating = Rating.LOW
    team_fight: Rating = Rating.LOW
    # Capability scores used by the pairwise synergy and counter rules
    damage: Rating = Rating.LOW
    disengage: Rating = Rating.LOW
    siege: Rating = Rating.LOW
    is_assassin: bool = False
    counters: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChampionAttributes":
        """Build attributes from a loosely-typed dict (JSON payloads, fixtures).

        Unknown roles are dropped; missing ratings default to LOW.
        """
        roles = frozenset(
            role for role in (normalize_role(r) for r in data.get("roles", [])) if role
        )
        ratings = {name: Rating.parse(data.get(name)) for name in RATED_ATTRIBUTES}
        return cls(
            id=data["id"],
            name=data.get("name") or data["id"],
            damage_type=DamageType.parse(data.get("damage_type", "Mixed")),
            roles=roles,
            is_assassin=bool(data.get("is_assassin", False)),
            counters=tuple(data.get("counters", ())),
            **ratings,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "damage_type": self.damage_type.value,
            "roles": sorted(self.roles),
            "is_assassin": self.is_assassin,
            "counters": list(self.counters),
        }
        for name in RATED_ATTRIBUTES:
            data[name] = getattr(self, name).name.title()
        return data


@dataclass(frozen=True)
class TeamSlot:
    """A filled pick or ban slot."""

    champion_id: Optional[str] = None
    role: Optional[str] = None  # Lowercase canonical: top/jungle/mid/bot/support


@dataclass
class ChampionPool:
    """Lookup of champion attributes by identifier."""

    champions: dict[str, ChampionAttributes] = field(default_factory=dict)

    @classmethod
    def from_list(cls, champions: list[ChampionAttributes]) -> "ChampionPool":
        return cls({champ.id: champ for champ in champions})

    def resolve(self, champion_ids: list[Optional[str]]) -> list[ChampionAttributes]:
        """Resolve identifiers to attributes, skipping empty or unknown ids."""
        return [
            self.champions[cid]
            for cid in champion_ids
            if cid is not None and cid in self.champions
        ]

    def __contains__(self, champion_id: str) -> bool:
        return champion_id in self.champions

    def __len__(self) -> int:
        return len(self.champions)
