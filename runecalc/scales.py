"""
Magnitude suffix registry: suffix → magnitude table with case-insensitive disambiguation.

A ScaleTable is built once from raw dataset entries (e.g. {"K": 1e3, "QnVt": 1e51})
and is read-only afterwards. Exact lookups are case-sensitive; the derived
case-insensitive index marks lowercase forms shared by several suffixes as ambiguous.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
import warnings
from collections.abc import Iterator, ItemsView, KeysView, Mapping, ValuesView
from dataclasses import dataclass
from typing import Any, Iterable

# Local ----------------------------------------------------------------------------------------------------------------
from .sentinels import NOT_FOUND, NotFoundType


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class ScaleEntry:
    """
    Single scale suffix and its magnitude, e.g. ScaleEntry("M", 1e6).

    The empty suffix is the identity scale with magnitude 1.
    """
    suffix: str
    magnitude: float


@dataclass(frozen=True)
class Ambiguous:
    """
    Case-insensitive lookup result for a lowercase form shared by several suffixes.

    Attributes:
        candidates: Original-case suffixes sharing the lowercase form, in dataset order.
    """
    candidates: tuple[str, ...]

    def __str__(self) -> str:
        return ", ".join(self.candidates)


class ScaleTable(Mapping[str, float]):
    """
    Read-only table of scale suffixes with Mapping-compatible API on the suffix → magnitude direction.

    - Forward direction (suffix -> magnitude) implements the stdlib Mapping protocol,
      membership applies to suffixes and is case-sensitive, like dict.
    - entries holds ScaleEntry items sorted descending by magnitude for largest-first matching.
    - Case-insensitive lookup via lookup_case_insensitive(suffix).

    Prefer build_scale_table() for raw dataset input, it skips invalid magnitudes with a warning.

    Raises:
        ValueError: If a magnitude is not a positive finite number or is used by more than one suffix.
    """

    def __init__(self, initial: Mapping[str, float] | Iterable[tuple[str, float]] | None = None) -> None:
        self._forward_map: dict[str, float] = {}
        self._backward_map: dict[float, str] = {}

        pairs = initial.items() if isinstance(initial, Mapping) else (initial or ())
        for suffix, magnitude in pairs:
            self._add(suffix, magnitude)

        self._entries = tuple(
            ScaleEntry(suffix, magnitude)
            for suffix, magnitude in sorted(self._forward_map.items(), key=lambda kv: kv[1], reverse=True)
        )
        self._lower_index = _case_insensitive_index(self._forward_map)

    # ----- Mapping required methods -----

    def __getitem__(self, suffix: str) -> float:
        return self._forward_map[suffix]

    def __iter__(self) -> Iterator[str]:
        return iter(self._forward_map)

    def __len__(self) -> int:
        return len(self._forward_map)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._forward_map!r})"

    def keys(self) -> KeysView[str]:
        return self._forward_map.keys()

    def values(self) -> ValuesView[float]:
        return self._forward_map.values()

    def items(self) -> ItemsView[str, float]:
        return self._forward_map.items()

    # ----- Lookups -----

    @property
    def entries(self) -> tuple[ScaleEntry, ...]:
        """Scale entries sorted descending by magnitude."""
        return self._entries

    @property
    def ambiguous(self) -> dict[str, Ambiguous]:
        """Lowercase forms shared by several suffixes, mapped to their candidates."""
        return {lower: hit for lower, hit in self._lower_index.items() if isinstance(hit, Ambiguous)}

    def lookup_exact(self, suffix: str) -> float | NotFoundType:
        """Case-sensitive magnitude lookup, returns NOT_FOUND for unknown suffix."""
        return self._forward_map.get(suffix, NOT_FOUND)

    def lookup_case_insensitive(self, suffix: str) -> float | Ambiguous | NotFoundType:
        """
        Case-insensitive magnitude lookup.

        Returns:
            float: magnitude if the lowercase form maps to a single suffix;
            Ambiguous: if the lowercase form is shared by several suffixes;
            NOT_FOUND: if no suffix matches.
        """
        return self._lower_index.get(suffix.lower(), NOT_FOUND)

    # ----- Construction -----

    def _add(self, suffix: str, magnitude: float) -> None:
        if not isinstance(suffix, str):
            raise TypeError(f"scale suffix must be str, got {type(suffix).__name__}: {suffix!r}")
        if not _is_positive_number(magnitude):
            raise ValueError(f"scale magnitude must be a positive finite number, got {suffix!r}: {magnitude!r}")
        if suffix in self._forward_map:
            raise ValueError(f"Suffix {suffix!r} already exists (maps to {self._forward_map[suffix]!r})")
        magnitude = float(magnitude)
        if magnitude in self._backward_map:
            raise ValueError(
                f"Magnitude {magnitude!r} already exists (mapped from {self._backward_map[magnitude]!r})"
            )
        self._forward_map[suffix] = magnitude
        self._backward_map[magnitude] = suffix


# Methods --------------------------------------------------------------------------------------------------------------

def build_scale_table(raw_entries: Mapping[str, Any]) -> ScaleTable:
    """
    Build a ScaleTable from raw dataset entries of suffix → magnitude.

    Magnitudes may be int, float or numeric strings such as "1e303". Entries with a
    non-numeric, non-positive or non-finite magnitude are skipped with a UserWarning,
    so that a magnitude of 0 can never be matched while formatting.

    Args:
        raw_entries: Mapping of suffix to magnitude, in dataset order.

    Returns:
        Immutable ScaleTable.

    Raises:
        TypeError: If raw_entries is not a mapping.
        ValueError: If two suffixes share one magnitude.

    Examples:
        >>> table = build_scale_table({"": 1, "K": 1e3, "M": 1e6, "bad": 0})
        >>> [e.suffix for e in table.entries]
        ['M', 'K', '']
    """
    if not isinstance(raw_entries, Mapping):
        raise TypeError(f"raw_entries must be a mapping of suffix to magnitude, got {type(raw_entries).__name__}")

    valid = {}
    for suffix, raw in raw_entries.items():
        magnitude = _to_magnitude(raw)
        if magnitude is None:
            warnings.warn(f"Scale {suffix!r} skipped, magnitude must be a positive finite number: {raw!r}",
                          stacklevel=2)
            continue
        valid[suffix] = magnitude

    return ScaleTable(valid)


def _case_insensitive_index(scales: Mapping[str, float]) -> dict[str, float | Ambiguous]:
    """Group suffixes by lowercase form, any group with several members becomes Ambiguous."""
    groups: dict[str, list[str]] = {}
    for suffix in scales:
        groups.setdefault(suffix.lower(), []).append(suffix)

    index = {}
    for lower, members in groups.items():
        if len(members) > 1:
            index[lower] = Ambiguous(tuple(members))
        else:
            index[lower] = scales[members[0]]
    return index


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        value = float(value)
    except OverflowError:
        return False
    return math.isfinite(value) and value > 0


def _to_magnitude(raw: Any) -> float | None:
    if isinstance(raw, str):
        try:
            raw = float(raw.replace(",", ""))
        except ValueError:
            return None
    # float("1e600") is inf, rejected below with the other non-finite values
    if not _is_positive_number(raw):
        return None
    return float(raw)
