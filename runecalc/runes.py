"""
Rune catalog records: runes, their acquisition odds and per-acquisition bonus effects.

Catalog data comes from an external dataset (runes.json and scales.json). This module
only converts already retrieved records to immutable objects; retrieval is up to the caller.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import json
import math
import os
from dataclasses import dataclass, field
from enum import StrEnum, unique
from pathlib import Path
from typing import Any, Iterable, Mapping

# Local ----------------------------------------------------------------------------------------------------------------
from .numbers import format_number, to_exponential
from .scales import ScaleTable, build_scale_table


# Classes --------------------------------------------------------------------------------------------------------------

# @formatter:off
@unique
class StatTarget(StrEnum):
    """
    Stat a bonus applies to.

    Attributes:
        RUNE_SPEED (str) : Rune production speed, simulated
        RUNE_BULK (str)  : Runes produced per roll, simulated
        OTHER (str)      : Any other stat, inert in simulation
    """
    RUNE_SPEED = "runeSpeed"
    RUNE_BULK = "runeBulk"
    OTHER = "other"


@unique
class Modifier(StrEnum):
    """
    How a bonus changes its stat on every acquisition.

    Attributes:
        ADDITIVE (str)    : stat += magnitude
        MULTIPLIER (str)  : stat *= magnitude, or capped linear growth 1 + count × (magnitude - 1)
        SUBTRACTIVE (str) : reduces stats the simulation does not model
        POWER (str)       : stat = stat ** magnitude
    """
    ADDITIVE = "additive"
    MULTIPLIER = "multiplier"
    SUBTRACTIVE = "subtractive"
    POWER = "power"
# @formatter:on


@dataclass(frozen=True)
class BonusEffect:
    """
    Bonus granted by every acquired copy of a rune.

    Attributes:
        target: Stat the bonus applies to.
        modifier: Modifier kind, None for bonuses without one (talents, perks), which are inert.
        magnitude: Bonus value, None when the dataset gives a non-numeric value (e.g. a formula text).
        cap: Upper bound of an accumulating linear multiplier, None for uncapped.
        is_exponential: Bonus grows exponentially with the rune count.
        is_dual_exponential: Bonus grows double-exponentially with the rune count.
    """
    target: StatTarget
    modifier: Modifier | None
    magnitude: float | None = None
    cap: float | None = None
    is_exponential: bool = False
    is_dual_exponential: bool = False

    @property
    def is_simulated(self) -> bool:
        """True if the bonus has a modifier, a numeric magnitude and targets rune speed or bulk."""
        return (self.modifier is not None and self.magnitude is not None
                and self.target in (StatTarget.RUNE_SPEED, StatTarget.RUNE_BULK))


@dataclass(frozen=True)
class SpecialCost:
    """Non-odds acquisition cost, e.g. SpecialCost(500, "Stars")."""
    value: float
    unit: str


@dataclass(frozen=True)
class Rune:
    """
    Catalog rune.

    Attributes:
        name: Rune name, unique within a catalog.
        source: Where the rune drops from.
        chance: Expected production units per acquisition (1 in N odds), or a SpecialCost.
        tags: Free-form labels.
        bonuses: Bonus effects in dataset order.
        max_count: Maximum number of copies, None if unspecified.
    """
    name: str
    source: str
    chance: float | SpecialCost
    tags: frozenset[str] = frozenset()
    bonuses: tuple[BonusEffect, ...] = ()
    max_count: int | None = None

    @property
    def is_simulatable(self) -> bool:
        """True for plain numeric odds, SpecialCost runes cannot be simulated."""
        return not isinstance(self.chance, SpecialCost)

    @property
    def numeric_chance(self) -> float:
        """Numeric odds, or inf for a SpecialCost rune so that it sorts last."""
        return math.inf if isinstance(self.chance, SpecialCost) else self.chance


@dataclass(frozen=True)
class RuneCatalog:
    """Runes and the scale table they were published with."""
    runes: tuple[Rune, ...]
    scales: ScaleTable = field(default_factory=ScaleTable)

    def find(self, name: str) -> Rune | None:
        """Rune by exact name or None."""
        return next((rune for rune in self.runes if rune.name == name), None)

    @property
    def simulatable(self) -> tuple[Rune, ...]:
        """Runes with numeric odds, sorted by chance ascending."""
        return tuple(sorted((r for r in self.runes if r.is_simulatable), key=lambda r: r.chance))


# Methods --------------------------------------------------------------------------------------------------------------

def bonus_from_dict(record: Mapping[str, Any]) -> BonusEffect:
    """
    Build a BonusEffect from a dataset record.

    Record keys: type, modifier, value, max, isExponential, isDualExponential.
    Unknown stat types map to StatTarget.OTHER; non-numeric values become magnitude None.
    A missing or unknown modifier leaves modifier None and the bonus inert, unless the
    bonus would be simulated.

    Raises:
        ValueError: If a rune speed or bulk bonus with a numeric value has a missing or unknown modifier.
    """
    try:
        target = StatTarget(record.get("type"))
    except ValueError:
        target = StatTarget.OTHER

    magnitude = _number_or_none(record.get("value"))
    try:
        modifier = Modifier(record.get("modifier"))
    except ValueError:
        if magnitude is not None and target in (StatTarget.RUNE_SPEED, StatTarget.RUNE_BULK):
            raise ValueError(
                f"Unknown {target} bonus modifier {record.get('modifier')!r}, "
                f"expected one of {[m.value for m in Modifier]}"
            ) from None
        modifier = None

    cap = _number_or_none(record.get("max"))
    return BonusEffect(
        target=target,
        modifier=modifier,
        magnitude=magnitude,
        cap=cap if cap else None,
        is_exponential=bool(record.get("isExponential", False)),
        is_dual_exponential=bool(record.get("isDualExponential", False)),
    )


def rune_from_dict(record: Mapping[str, Any]) -> Rune:
    """
    Build a Rune from a dataset record.

    The chance is either a number or a {"value": ..., "unit": ...} special cost. The max
    count may be an int or a string with thousands separators ("1,000"); anything else
    leaves max_count unset.

    Raises:
        ValueError: If name or chance are missing or malformed, or a bonus is malformed.
    """
    name = record.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError(f"Rune name must be a non-empty string, got {name!r}")

    return Rune(
        name=name,
        source=str(record.get("source", "")),
        chance=_chance_from_raw(name, record.get("chance")),
        tags=frozenset(record.get("tags") or ()),
        bonuses=tuple(bonus_from_dict(b) for b in record.get("bonuses") or ()),
        max_count=_max_count(record.get("max")),
    )


def load_runes(records: Iterable[Mapping[str, Any]]) -> tuple[Rune, ...]:
    """
    Build runes from dataset records.

    Raises:
        ValueError: If a record is malformed or a rune name repeats.
    """
    runes = tuple(rune_from_dict(r) for r in records)
    seen = set()
    for rune in runes:
        if rune.name in seen:
            raise ValueError(f"Duplicate rune name: {rune.name!r}")
        seen.add(rune.name)
    return runes


def load_runes_json(path: str | os.PathLike[str]) -> tuple[Rune, ...]:
    """Load runes from a runes.json file holding a list of rune records."""
    records = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"Runes file must hold a JSON list, got {type(records).__name__}: {path}")
    return load_runes(records)


def load_scales_json(path: str | os.PathLike[str]) -> ScaleTable:
    """Load a scale table from a scales.json file holding a suffix → magnitude object."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Scales file must hold a JSON object, got {type(raw).__name__}: {path}")
    return build_scale_table(raw)


def load_catalog_json(runes_path: str | os.PathLike[str], scales_path: str | os.PathLike[str]) -> RuneCatalog:
    """Load runes.json and scales.json into a RuneCatalog."""
    return RuneCatalog(runes=load_runes_json(runes_path), scales=load_scales_json(scales_path))


def format_chance(rune: Rune, table: ScaleTable) -> str:
    """
    Display a rune's cost.

    Examples:
        numeric odds 1e12   → "1 / 1 T (1e+12)"
        SpecialCost(500, "Stars") → "500 Stars"
    """
    if isinstance(rune.chance, SpecialCost):
        return f"{format_number(rune.chance.value, table)} {rune.chance.unit}"
    return f"1 / {format_number(rune.chance, table)} ({to_exponential(rune.chance, 0)})"


def _chance_from_raw(name: str, raw: Any) -> float | SpecialCost:
    number = _number_or_none(raw)
    if number is not None:
        return number
    if isinstance(raw, Mapping) and raw.get("unit"):
        value = _number_or_none(raw.get("value"))
        if value is not None:
            return SpecialCost(value=value, unit=str(raw["unit"]))
    raise ValueError(f"Rune {name!r} chance must be a number or a {{value, unit}} cost, got {raw!r}")


def _max_count(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        digits = raw.replace(",", "").strip()
        if digits.isdigit():
            return int(digits)
    return None


def _number_or_none(raw: Any) -> float | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    try:
        return float(raw)
    except OverflowError:
        return math.inf if raw > 0 else -math.inf
