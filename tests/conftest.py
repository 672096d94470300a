#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import json
import pathlib
import random

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from runecalc.runes import BonusEffect, Modifier, Rune, StatTarget
from runecalc.scales import ScaleTable

SCALES = {
    "": 1, "K": 1e3, "M": 1e6, "B": 1e9, "T": 1e12,
    "QnVt": 1e78, "Tqg": 1e132, "TQg": 1e162,
}

RUNE_RECORDS = [
    {"name": "Basic", "source": "Starter Chest", "chance": 10, "tags": ["common"], "bonuses": [], "max": "1,000"},
    {"name": "Superstar", "source": "Star Chest", "chance": 1e12, "tags": ["rare"], "max": 25,
     "bonuses": [
         {"type": "runeSpeed", "modifier": "multiplier", "value": 1.1, "max": 2},
         {"type": "runeBulk", "modifier": "additive", "value": 1},
         {"type": "luck", "modifier": "multiplier", "value": 3},
     ]},
    {"name": "Cosmic", "source": "Void Chest", "chance": 1e300, "tags": [], "bonuses": [
        {"type": "runeSpeed", "modifier": "multiplier", "value": 1.5, "isExponential": True},
        {"type": "runeBulk", "modifier": "power", "value": "1.01^n"},
    ]},
    {"name": "Stellar", "source": "Star Shop", "chance": {"value": 500, "unit": "Stars"}, "bonuses": []},
]


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture
def table() -> ScaleTable:
    """Synthetic scale table with an ambiguous lowercase pair: Tqg / TQg."""
    return ScaleTable(SCALES)


@pytest.fixture
def small_table() -> ScaleTable:
    return ScaleTable({"": 1, "K": 1e3, "M": 1e6})


@pytest.fixture
def rng() -> random.Random:
    return random.Random(108)


@pytest.fixture
def plain_rune() -> Rune:
    """Rune without bonuses, 1 in 1e12."""
    return Rune(name="Plain", source="Test Chest", chance=1e12)


@pytest.fixture
def make_rune():
    """Factory for a numeric-odds rune with the given bonuses."""

    def _make_rune(*bonuses: BonusEffect, chance: float = 1e6, max_count: int | None = None) -> Rune:
        return Rune(name="Test", source="Test Chest", chance=chance, bonuses=tuple(bonuses), max_count=max_count)

    return _make_rune


@pytest.fixture
def speed_bonus():
    """Factory for a rune speed bonus."""

    def _speed_bonus(modifier: Modifier, magnitude: float | None, **kwargs) -> BonusEffect:
        return BonusEffect(target=StatTarget.RUNE_SPEED, modifier=modifier, magnitude=magnitude, **kwargs)

    return _speed_bonus


@pytest.fixture
def catalog_files(tmp_path: pathlib.Path) -> tuple[pathlib.Path, pathlib.Path]:
    """runes.json and scales.json written to a temporary directory."""
    runes_path = tmp_path / "runes.json"
    scales_path = tmp_path / "scales.json"
    runes_path.write_text(json.dumps(RUNE_RECORDS), encoding="utf-8")
    scales_path.write_text(json.dumps(SCALES), encoding="utf-8")
    return runes_path, scales_path


@pytest.fixture
def rune_records() -> list[dict]:
    """Dataset records: plain, capped-linear, exponential and special-cost runes."""
    return json.loads(json.dumps(RUNE_RECORDS))
