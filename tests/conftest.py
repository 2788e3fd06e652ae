"""Shared fixtures."""

import pytest

from draft_oracle.models.champion import ChampionAttributes


def make_champion(champion_id: str, damage_type: str = "AD", roles=(), **attributes) -> ChampionAttributes:
    """Build a champion; unspecified ratings default to Low."""
    return ChampionAttributes.from_dict(
        {"id": champion_id, "damage_type": damage_type, "roles": list(roles), **attributes}
    )


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def champion():
    """Factory fixture for ChampionAttributes."""
    return make_champion


@pytest.fixture
def frontline_team():
    """Balanced, tanky engage team."""
    return [
        make_champion("Ornn", "Mixed", ["top"], crowd_control="High", tankiness="High", engage="High", wave_clear="Medium"),
        make_champion("Sejuani", "AP", ["jungle"], crowd_control="High", tankiness="High", engage="High", wave_clear="Medium"),
        make_champion("Orianna", "AP", ["mid"], crowd_control="Medium", tankiness="Low", engage="Medium", wave_clear="High", damage="High", team_fight="High"),
        make_champion("Jinx", "AD", ["bot"], crowd_control="Low", wave_clear="High", damage="High"),
        make_champion("Leona", "AD", ["support"], crowd_control="High", tankiness="High", engage="High"),
    ]


@pytest.fixture
def glass_team():
    """All-AD squishy team."""
    return [
        make_champion("Fiora", "AD", ["top"], mobility="High", split_push="High"),
        make_champion("KhaZix", "AD", ["jungle"], mobility="High", is_assassin=True),
        make_champion("Zed", "AD", ["mid"], mobility="High", is_assassin=True),
        make_champion("Draven", "AD", ["bot"], damage="High"),
        make_champion("Pyke", "Mixed", ["support"], crowd_control="Medium", is_assassin=True),
    ]
