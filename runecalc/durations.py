"""
Human-readable durations: 3_000_000 s → "34 days, 17 hours, 20 minutes".
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
import random
from typing import Any

# @formatter:off

class DurationConf:
    """
    Default configuration constants for duration formatting.

    Attributes:
        UNITS: Unit names and sizes in seconds, largest first. Fixed 365-day year, no leap years.
        PLURALS: Plural unit names.
        MAX_PARTS: Number of leading non-zero units shown.
        FOREVER_SECONDS: Durations above this (100 years) are shown as a forever quote.
        FOREVER_QUOTES: Placeholder strings for effectively infinite durations.
        INSTANT: Text for durations below one second.
        UNKNOWN: Text for negative or non-finite durations.
    """
    UNITS = (
        ("year", 31_536_000), ("day", 86_400), ("hour", 3_600),
        ("minute", 60), ("second", 1),
    )
    PLURALS = {
        "year": "years", "day": "days", "hour": "hours",
        "minute": "minutes", "second": "seconds",
    }
    MAX_PARTS = 3
    FOREVER_SECONDS = 100 * 31_536_000
    FOREVER_QUOTES = (
        "Heat death of the universe",
        "Basically forever",
        "Just don't even try",
        "An eternity or two",
        "Beyond comprehension",
    )
    INSTANT = "Instant"
    UNKNOWN = "..."

# @formatter:on


# Methods --------------------------------------------------------------------------------------------------------------

def format_duration(seconds: Any, *, rng: random.Random | None = None) -> str:
    """
    Format a duration in seconds as its three largest non-zero units.

    Durations longer than 100 years are not decomposed: one of DurationConf.FOREVER_QUOTES
    is picked at random instead. Pass a seeded rng to make that choice reproducible.

    Args:
        seconds: Duration in seconds.
        rng: Random source for the forever quote, defaults to random.SystemRandom().

    Returns:
        "..." for negative, non-finite or non-numeric input,
        "Instant" below one second,
        a forever quote above 100 years,
        otherwise e.g. "1 year, 3 days, 2 hours".
    """
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return DurationConf.UNKNOWN
    try:
        seconds = float(seconds)
    except OverflowError:
        return DurationConf.UNKNOWN
    if seconds < 0 or not math.isfinite(seconds):
        return DurationConf.UNKNOWN
    if seconds < 1:
        return DurationConf.INSTANT

    if seconds > DurationConf.FOREVER_SECONDS:
        rng = rng if rng is not None else random.SystemRandom()
        return rng.choice(DurationConf.FOREVER_QUOTES)

    parts = []
    remaining = seconds
    for unit, size in DurationConf.UNITS:
        if remaining >= size:
            count = math.floor(remaining / size)
            parts.append(f"{count} {_unit_str(unit, count)}")
            remaining %= size
    return ", ".join(parts[:DurationConf.MAX_PARTS])


def _unit_str(unit: str, count: int) -> str:
    return DurationConf.PLURALS.get(unit, unit) if count > 1 else unit
