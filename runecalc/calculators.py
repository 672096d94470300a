"""
Calculators built on the numeric core: target rate, time to max, time to a target count,
rune ranking by acquisition time, and chance notation hints.

Inputs are raw user strings where a form would provide them; outcomes that are not
estimates ("Already maxed!", "Enter valid stats", ...) are returned as Estimate.text.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
import random
import re
from dataclasses import dataclass
from typing import Any, Iterable, Literal

# Local ----------------------------------------------------------------------------------------------------------------
from .durations import format_duration
from .numbers import PLAIN_NUMBER, format_number, parse_number, to_exponential
from .runes import Rune
from .scales import ScaleTable
from .simulate import SimulationConf, simulate


# @formatter:off

class CalculatorConf:
    """
    Default configuration constants for calculators.

    Attributes:
        NEXT_UPGRADE_MAX_SECONDS: A rune is the next upgrade if it takes at least 1 second and less than this.
        Status texts for estimates that are not durations.
    """
    NEXT_UPGRADE_MAX_SECONDS = 3600
    SELECT_RUNE = "Select a rune"
    NO_MAX_COUNT = "Max count not specified"
    ALREADY_MAXED = "Already maxed!"
    TARGET_REACHED = "Target reached or passed!"
    INVALID_STATS = "Enter valid stats"
    SPECIAL_COST = "Special cost runes cannot be simulated"
    TOO_MANY_STEPS = "Too many runes to simulate"

# @formatter:on


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Estimate:
    """
    Time-to calculator outcome.

    Attributes:
        rps: Initial speed × bulk, 0 if the stats are not valid.
        runes_needed: Copies left to acquire, None if the rune has no max count.
        text: Formatted duration or status text.
        total_seconds: Simulated seconds, None if nothing was simulated.
        trace_log: Simulation trace.
    """
    rps: float
    runes_needed: int | None
    text: str
    total_seconds: float | None = None
    trace_log: tuple[str, ...] = ()


@dataclass(frozen=True)
class RankedRune:
    rune: Rune
    seconds: float

    @property
    def is_instant(self) -> bool:
        return self.seconds < 1


@dataclass(frozen=True)
class RuneRanking:
    """Runes with acquisition times in display order and the suggested next upgrade name."""
    entries: tuple[RankedRune, ...]
    next_upgrade: str | None = None


# Methods --------------------------------------------------------------------------------------------------------------

def required_rps(rune: Rune, seconds: float) -> float:
    """
    Production rate needed to acquire one rune within the given time.

    Returns:
        chance / seconds; inf for seconds <= 0; 0 for a special cost rune.
    """
    if not rune.is_simulatable:
        return 0.0
    if not seconds > 0:
        return math.inf
    return rune.chance / seconds


def time_to_max(
        rune: Rune | None,
        current_count: Any,
        speed: str,
        bulk: str,
        table: ScaleTable,
        *,
        rng: random.Random | None = None,
        max_steps: int = SimulationConf.MAX_STEPS,
) -> Estimate:
    """
    Estimate the time to acquire a rune up to its max count.

    Args:
        rune: Selected rune or None.
        current_count: Copies owned, int or user string; unparsable counts as 0.
        speed: Rune speed input, e.g. "11.9QnTg".
        bulk: Rune bulk input, e.g. "57.62Qdqg".
        table: Scale table for parsing and display.
        rng: Random source for forever quotes.
        max_steps: Largest simulated count range.
    """
    if rune is None:
        return Estimate(rps=0.0, runes_needed=0, text=CalculatorConf.SELECT_RUNE)

    rps = parse_number(speed, table).value * parse_number(bulk, table).value
    if rune.max_count is None:
        return Estimate(rps=rps, runes_needed=None, text=CalculatorConf.NO_MAX_COUNT)

    return _estimate(rune, parse_count(current_count), rune.max_count, speed, bulk, table,
                     done_text=CalculatorConf.ALREADY_MAXED, rng=rng, max_steps=max_steps)


def time_to_target(
        rune: Rune | None,
        current_count: Any,
        target_count: Any,
        speed: str,
        bulk: str,
        table: ScaleTable,
        *,
        rng: random.Random | None = None,
        max_steps: int = SimulationConf.MAX_STEPS,
) -> Estimate:
    """Estimate the time to acquire a rune from current_count up to target_count, see time_to_max()."""
    if rune is None:
        return Estimate(rps=0.0, runes_needed=0, text=CalculatorConf.SELECT_RUNE)

    return _estimate(rune, parse_count(current_count), parse_count(target_count), speed, bulk, table,
                     done_text=CalculatorConf.TARGET_REACHED, rng=rng, max_steps=max_steps)


def rank_runes(
        runes: Iterable[Rune],
        rps: float,
        *,
        query: str = "",
        hide_instant: bool = True,
        order: Literal["asc", "desc"] = "asc",
) -> RuneRanking:
    """
    Rank runes by chance with their expected acquisition time at a fixed rate.

    Args:
        runes: Catalog runes.
        rps: Production rate; runes take inf seconds if rps <= 0.
        query: Case-insensitive substring of the rune name or source, empty matches all.
        hide_instant: Drop runes that take less than one second.
        order: "asc" or "desc" by numeric chance, special cost runes count as inf.

    Returns:
        RuneRanking; for ascending order next_upgrade names the first rune taking
        at least a second and less than an hour.

    Raises:
        ValueError: If order is not "asc" or "desc".
    """
    if order not in ("asc", "desc"):
        raise ValueError(f"order must be 'asc' or 'desc', got {order!r}")

    needle = query.lower()
    entries = []
    for rune in runes:
        seconds = rune.numeric_chance / rps if rps > 0 else math.inf
        ranked = RankedRune(rune, seconds)
        if needle not in rune.name.lower() and needle not in rune.source.lower():
            continue
        if hide_instant and ranked.is_instant:
            continue
        entries.append(ranked)

    entries.sort(key=lambda r: r.rune.numeric_chance, reverse=(order == "desc"))

    next_upgrade = None
    if order == "asc":
        next_upgrade = next(
            (r.rune.name for r in entries if 1 <= r.seconds < CalculatorConf.NEXT_UPGRADE_MAX_SECONDS), None
        )
    return RuneRanking(tuple(entries), next_upgrade)


def conversion_hint(text: str, table: ScaleTable) -> str:
    """
    Alternate notation of a typed chance: "1e300" → "(1 NoNoVt)", "1.5M" → "(1.5e+6)".

    Returns an empty string for empty or unparsable input, zero or non-finite values,
    and plain numbers that need no conversion.
    """
    cleaned = text.strip()
    if not cleaned:
        return ""

    if re.search(r"e[+-]?\d", cleaned, re.IGNORECASE):
        match = PLAIN_NUMBER.match(cleaned)
        if not match:
            return ""
        return f"({format_number(float(match.group(0)), table)})"

    value = parse_number(cleaned, table).value
    if value == 0 or not math.isfinite(value) or _plain_str(value) == cleaned:
        return ""
    return f"({to_exponential(value)})"


def parse_count(raw: Any) -> int:
    """Leading integer of a count input ("18", " 18 copies"), 0 if there is none."""
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        match = re.match(r"\s*([+-]?\d+)", raw)
        if match:
            return int(match.group(1))
    return 0


def _estimate(rune: Rune, start: int, end: int, speed: str, bulk: str, table: ScaleTable, *,
              done_text: str, rng: random.Random | None, max_steps: int) -> Estimate:
    initial_speed = parse_number(speed, table).value
    initial_bulk = parse_number(bulk, table).value
    rps = initial_speed * initial_bulk

    start = max(start, 0)
    runes_needed = end - start
    if runes_needed <= 0:
        return Estimate(rps=rps, runes_needed=0, text=done_text)
    if not rps > 0:
        return Estimate(rps=0.0, runes_needed=runes_needed, text=CalculatorConf.INVALID_STATS)
    if not rune.is_simulatable:
        return Estimate(rps=rps, runes_needed=runes_needed, text=CalculatorConf.SPECIAL_COST)
    if runes_needed > max_steps:
        return Estimate(rps=rps, runes_needed=runes_needed, text=CalculatorConf.TOO_MANY_STEPS)

    result = simulate(rune, start, end, initial_speed, initial_bulk, table=table, rng=rng, max_steps=max_steps)
    return Estimate(
        rps=rps,
        runes_needed=runes_needed,
        text=format_duration(result.total_time_seconds, rng=rng),
        total_seconds=result.total_time_seconds,
        trace_log=result.trace_log,
    )


def _plain_str(value: float) -> str:
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)
