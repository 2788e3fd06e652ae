"""Analytics result models."""

from dataclasses import asdict, dataclass, field

from draft_oracle.models.champion import Rating


@dataclass
class DamageProfile:
    """Champion counts by damage type."""

    ad: int = 0
    ap: int = 0
    mixed: int = 0

    @property
    def total(self) -> int:
        return self.ad + self.ap + self.mixed


@dataclass
class CompositionReport:
    """Aggregated attribute profile of one team."""

    team_size: int = 0
    damage: DamageProfile = field(default_factory=DamageProfile)
    crowd_control: int = 0
    engage: int = 0
    tankiness: int = 0
    mobility: int = 0
    wave_clear: int = 0
    poke: int = 0
    crowd_control_rating: Rating = Rating.LOW
    engage_rating: Rating = Rating.LOW
    tankiness_rating: Rating = Rating.LOW
    ad_share: float = 0.0
    is_balanced: bool = False
    is_unbalanced: bool = False
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["crowd_control_rating"] = self.crowd_control_rating.name.title()
        data["engage_rating"] = self.engage_rating.name.title()
        data["tankiness_rating"] = self.tankiness_rating.name.title()
        return data


@dataclass
class SynergyPair:
    """Two champions that score together."""

    champion_a: str
    champion_b: str
    score: int
    reasons: list[str] = field(default_factory=list)


@dataclass
class SynergyReport:
    total: int = 0
    pairs: list[SynergyPair] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CounterCandidate:
    """A champion scored against an enemy roster."""

    champion_id: str
    score: int
    roles: list[str] = field(default_factory=list)


@dataclass
class WinRatePrediction:
    """Heuristic win probability for two rosters.

    The point and balance coefficients are hand-picked constants, not a
    fitted model.
    """

    blue_win_rate: int
    red_win_rate: int
    blue_points: int = 0
    red_points: int = 0
    blue_strengths: list[str] = field(default_factory=list)
    red_strengths: list[str] = field(default_factory=list)
    blue_weaknesses: list[str] = field(default_factory=list)
    red_weaknesses: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DraftAnalysis:
    """Full analytics bundle for a draft."""

    blue_composition: CompositionReport
    red_composition: CompositionReport
    blue_synergy: SynergyReport
    red_synergy: SynergyReport
    blue_counters: list[CounterCandidate]
    red_counters: list[CounterCandidate]
    win_rate: WinRatePrediction

    def to_dict(self) -> dict:
        return {
            "blue_composition": self.blue_composition.to_dict(),
            "red_composition": self.red_composition.to_dict(),
            "blue_synergy": self.blue_synergy.to_dict(),
            "red_synergy": self.red_synergy.to_dict(),
            "blue_counters": [asdict(c) for c in self.blue_counters],
            "red_counters": [asdict(c) for c in self.red_counters],
            "win_rate": self.win_rate.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DraftAnalysis":
        """Rebuild from to_dict() output (used for cached payloads)."""
        return cls(
            blue_composition=_composition_from_dict(data["blue_composition"]),
            red_composition=_composition_from_dict(data["red_composition"]),
            blue_synergy=_synergy_from_dict(data["blue_synergy"]),
            red_synergy=_synergy_from_dict(data["red_synergy"]),
            blue_counters=[CounterCandidate(**c) for c in data["blue_counters"]],
            red_counters=[CounterCandidate(**c) for c in data["red_counters"]],
            win_rate=WinRatePrediction(**data["win_rate"]),
        )


def _composition_from_dict(data: dict) -> CompositionReport:
    fields = dict(data)
    fields["damage"] = DamageProfile(**fields["damage"])
    for key in ("crowd_control_rating", "engage_rating", "tankiness_rating"):
        fields[key] = Rating.parse(fields[key])
    return CompositionReport(**fields)


def _synergy_from_dict(data: dict) -> SynergyReport:
    return SynergyReport(
        total=data["total"],
        pairs=[SynergyPair(**pair) for pair in data["pairs"]],
    )
