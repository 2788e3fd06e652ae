"""Tests for champion attribute models and role normalization."""

import pytest

from draft_oracle.models.champion import ChampionAttributes, ChampionPool, DamageType, Rating
from draft_oracle.utils.role_normalizer import normalize_role, normalize_role_strict, role_for_pick_index


class TestRating:
    @pytest.mark.parametrize("value,expected", [
        ("Low", Rating.LOW),
        ("medium", Rating.MEDIUM),
        ("HIGH", Rating.HIGH),
        (3, Rating.HIGH),
        (None, Rating.LOW),
    ])
    def test_parse(self, value, expected):
        assert Rating.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            Rating.parse("Extreme")

    def test_ordering_and_intensity(self):
        assert Rating.LOW < Rating.MEDIUM < Rating.HIGH
        assert Rating.LOW.intensity < Rating.MEDIUM.intensity < Rating.HIGH.intensity


@pytest.mark.parametrize("value,expected", [
    ("AD", DamageType.AD),
    ("physical", DamageType.AD),
    ("ap", DamageType.AP),
    ("Hybrid", DamageType.MIXED),
])
def test_damage_type_parse(value, expected):
    assert DamageType.parse(value) is expected


def test_from_dict_normalizes_roles_and_defaults():
    champ = ChampionAttributes.from_dict({
        "id": "Ezreal",
        "damage_type": "AD",
        "roles": ["ADC", "MIDDLE", "feeder"],
        "poke": "High",
    })
    assert champ.name == "Ezreal"
    assert champ.roles == frozenset({"bot", "mid"})
    assert champ.poke is Rating.HIGH
    assert champ.engage is Rating.LOW


def test_to_dict_round_trip():
    champ = ChampionAttributes.from_dict({
        "id": "Malphite", "damage_type": "AP", "roles": ["top"],
        "engage": "High", "counters": ["Yasuo"],
    })
    assert ChampionAttributes.from_dict(champ.to_dict()) == champ


def test_pool_resolve_skips_unknown():
    pool = ChampionPool.from_list([ChampionAttributes.from_dict({"id": "Ahri", "damage_type": "AP"})])
    assert "Ahri" in pool
    assert [c.id for c in pool.resolve(["Ahri", None, "Nobody"])] == ["Ahri"]


class TestRoleNormalizer:
    @pytest.mark.parametrize("raw,expected", [
        ("JUNGLE", "jungle"),
        ("Bottom", "bot"),
        ("utility", "support"),
        (" mid ", "mid"),
        ("feeder", None),
        (None, None),
    ])
    def test_normalize_role(self, raw, expected):
        assert normalize_role(raw) == expected

    def test_strict_raises(self):
        with pytest.raises(ValueError):
            normalize_role_strict("feeder")

    def test_role_for_pick_index(self):
        assert role_for_pick_index(0) == "top"
        assert role_for_pick_index(4) == "support"
        assert role_for_pick_index(5) is None
