"""
Compounding acquisition-time simulation.

Every acquired copy of a rune may raise rune speed or bulk for all following copies, so
the time to go from count N to count M is summed step by step rather than in closed form.

Known approximation: exponential and dual-exponential multiplier bonuses are applied as a
flat multiplier per acquisition. The dataset carries no scaling law for them versus the
rune count, so estimates for such runes are indicative only.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
import random
from dataclasses import dataclass, field

# Local ----------------------------------------------------------------------------------------------------------------
from .durations import format_duration
from .numbers import format_number, to_exponential
from .runes import BonusEffect, Modifier, Rune, SpecialCost, StatTarget
from .scales import ScaleTable


# @formatter:off

class SimulationConf:
    """
    Default configuration constants for the simulation.

    Attributes:
        TRACE_LIMIT: Maximum number of trace log lines.
        MAX_STEPS: Maximum number of simulated acquisitions per call.
        NON_POSITIVE_RPS: Trace line recorded when production stops.
    """
    TRACE_LIMIT = 200
    MAX_STEPS = 1_000_000
    NON_POSITIVE_RPS = "Error: RPS is zero or negative."

# @formatter:on


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass
class SimulationState:
    """Mutable per-call state, created fresh by simulate()."""
    speed: float
    bulk: float
    total_seconds: float = 0.0
    trace_log: list[str] = field(default_factory=list)
    trace_limit: int = SimulationConf.TRACE_LIMIT

    @property
    def rps(self) -> float:
        return self.speed * self.bulk

    @property
    def trace_full(self) -> bool:
        return len(self.trace_log) >= self.trace_limit

    def record(self, line: str) -> None:
        if not self.trace_full:
            self.trace_log.append(line)

    def record_error(self, line: str) -> None:
        """Append a final error line, replacing the last line if the trace is full."""
        if self.trace_limit > 0 and self.trace_full:
            self.trace_log[-1:] = [line]
        elif self.trace_limit > 0:
            self.trace_log.append(line)


@dataclass(frozen=True)
class SimulationResult:
    """
    Outcome of simulate().

    Attributes:
        total_time_seconds: Expected time for all simulated acquisitions, inf if production stopped.
        final_rps: Speed × bulk after the last acquisition, 0 if production stopped.
        trace_log: Per-acquisition trace lines, at most SimulationConf.TRACE_LIMIT.
    """
    total_time_seconds: float
    final_rps: float
    trace_log: tuple[str, ...] = ()

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.total_time_seconds)


# Methods --------------------------------------------------------------------------------------------------------------

def simulate(
        rune: Rune,
        start_count: int,
        end_count: int,
        initial_speed: float,
        initial_bulk: float,
        *,
        table: ScaleTable | None = None,
        rng: random.Random | None = None,
        trace_limit: int = SimulationConf.TRACE_LIMIT,
        max_steps: int = SimulationConf.MAX_STEPS,
) -> SimulationResult:
    """
    Simulate acquiring rune copies start_count + 1 … end_count at an evolving production rate.

    For each count the expected time chance / (speed × bulk) is added, a trace line is
    recorded while the trace has room, then the rune's speed and bulk bonuses are applied
    for the copy just acquired, see apply_bonus().

    Args:
        rune: Rune with numeric odds.
        start_count: Copies already owned, >= 0.
        end_count: Target copy count, > start_count.
        initial_speed: Rune speed at start_count.
        initial_bulk: Rune bulk at start_count.
        table: Scale table for trace numbers, scientific notation if None.
        rng: Random source for forever quotes in trace durations, see format_duration().
        trace_limit: Maximum number of trace lines.
        max_steps: Maximum end_count - start_count accepted.

    Returns:
        SimulationResult. Production at zero or negative rps yields total_time_seconds = inf
        and final_rps = 0, with an explanatory last trace line.

    Raises:
        TypeError: If the rune has a SpecialCost chance or counts are not int.
        ValueError: If counts are out of range or exceed max_steps.
    """
    if isinstance(rune.chance, SpecialCost):
        raise TypeError(f"Rune {rune.name!r} has a special cost chance and cannot be simulated")
    _validate_counts(start_count, end_count, max_steps)

    state = SimulationState(speed=initial_speed, bulk=initial_bulk, trace_limit=trace_limit)
    if not state.rps > 0:
        state.record_error(SimulationConf.NON_POSITIVE_RPS)
        return SimulationResult(math.inf, 0.0, tuple(state.trace_log))

    bonuses = [b for b in rune.bonuses if b.is_simulated]

    for count in range(start_count, end_count):
        rps = state.rps
        if not rps > 0:
            state.record_error(SimulationConf.NON_POSITIVE_RPS)
            return SimulationResult(math.inf, 0.0, tuple(state.trace_log))

        seconds = rune.chance / rps
        state.total_seconds += seconds

        if not state.trace_full:
            state.record(_trace_line(count, state, seconds, table, rng))

        for bonus in bonuses:
            if bonus.target == StatTarget.RUNE_SPEED:
                state.speed = apply_bonus(state.speed, bonus, count)
            elif bonus.target == StatTarget.RUNE_BULK:
                state.bulk = apply_bonus(state.bulk, bonus, count)

    return SimulationResult(state.total_seconds, state.rps, tuple(state.trace_log))


def apply_bonus(rate: float, bonus: BonusEffect, count: int) -> float:
    """
    Apply one acquisition's worth of a bonus to a rate, the acquired copy being number count + 1.

    - ADDITIVE: rate + magnitude
    - MULTIPLIER, exponential or dual-exponential: rate × magnitude (flat approximation)
    - MULTIPLIER, otherwise: the rune holds a linear multiplier 1 + count × (magnitude - 1),
      capped at bonus.cap; the rate is scaled by the change of that multiplier from count to count + 1
    - POWER: rate ** magnitude
    - SUBTRACTIVE: unchanged, it acts on stats not simulated here

    Raises:
        ValueError: If the bonus has no numeric magnitude or an unsupported modifier.
    """
    if bonus.magnitude is None:
        raise ValueError(f"Bonus has no numeric magnitude: {bonus!r}")
    magnitude = bonus.magnitude

    if bonus.modifier == Modifier.ADDITIVE:
        return rate + magnitude

    elif bonus.modifier == Modifier.MULTIPLIER:
        if bonus.is_exponential or bonus.is_dual_exponential:
            return rate * magnitude
        before = linear_multiplier(magnitude, count, bonus.cap)
        after = linear_multiplier(magnitude, count + 1, bonus.cap)
        if before > 0 and after != before:
            return rate * (after / before)
        return rate

    elif bonus.modifier == Modifier.POWER:
        return _power(rate, magnitude)

    elif bonus.modifier == Modifier.SUBTRACTIVE:
        return rate

    raise ValueError(f"Unsupported bonus modifier: {bonus.modifier!r}")


def linear_multiplier(magnitude: float, count: int, cap: float | None = None) -> float:
    """
    Accumulated multiplier of a linear bonus after count copies: 1 + count × (magnitude - 1), capped.

    Examples:
        >>> linear_multiplier(1.5, 5)
        3.5
        >>> linear_multiplier(1.5, 20, cap=2.0)
        2.0
    """
    multiplier = 1 + count * (magnitude - 1)
    return min(multiplier, cap) if cap is not None else multiplier


def _power(rate: float, exponent: float) -> float:
    try:
        return math.pow(rate, exponent)
    except OverflowError:
        return math.inf
    except ValueError:
        # Negative base with a fractional exponent
        return math.nan


def _trace_line(count: int, state: SimulationState, seconds: float,
                table: ScaleTable | None, rng: random.Random | None) -> str:
    if table is not None:
        speed, bulk, rps = (format_number(x, table) for x in (state.speed, state.bulk, state.rps))
        time_str = format_duration(seconds, rng=rng)
    else:
        speed, bulk, rps = (to_exponential(x, 2) for x in (state.speed, state.bulk, state.rps))
        time_str = f"{seconds:.2f}s"
    return f"Rune #{count + 1}: Speed={speed}, Bulk={bulk}, RPS={rps} -> Time: {time_str}"


def _validate_counts(start_count: int, end_count: int, max_steps: int) -> None:
    for name, value in (("start_count", start_count), ("end_count", end_count)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{name} must be int, got {type(value).__name__}: {value!r}")
    if start_count < 0:
        raise ValueError(f"start_count must be >= 0, got {start_count}")
    if end_count <= start_count:
        raise ValueError(f"end_count must be > start_count, got {end_count} <= {start_count}")
    if end_count - start_count > max_steps:
        raise ValueError(f"Simulation of {end_count - start_count} steps exceeds max_steps={max_steps}")
