"""
Number display and parsing with magnitude suffixes: 95 QnVt ↔ 9.5e52.

Both directions are total: formatting never raises for any input, and parsing
reports problems as data in ParsedValue instead of raising.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .scales import Ambiguous, ScaleTable
from .sentinels import NOT_FOUND


# @formatter:off

class NumberConf:
    """
    Default configuration constants for number formatting and parsing.

    Attributes:
        SIG_DIGITS: Significant digits kept in formatted numbers.
        PLAIN_INT_LIMIT: Whole numbers below this limit are printed as plain integers.
        AMBIGUOUS_WARNING: Warning template for ambiguous suffixes, fields: suffix, options.
    """
    SIG_DIGITS = 3
    PLAIN_INT_LIMIT = 1000
    AMBIGUOUS_WARNING = "Warning: '{suffix}' is ambiguous. Use one of these case-sensitive options: {options}."


SUFFIXED_NUMBER = re.compile(r"(\d*\.?\d+)\s*([A-Za-z]+)", re.ASCII)
PLAIN_NUMBER = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)

# @formatter:on

# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class ParsedValue:
    """
    Result of parse_number().

    Attributes:
        value: Parsed number, 0 for unparsable or ambiguous input.
        warning: Message for the user when the input could not be resolved, otherwise None.
    """
    value: float = 0.0
    warning: str | None = None


# Methods --------------------------------------------------------------------------------------------------------------

def format_number(value: Any, table: ScaleTable, *, sig_digits: int = NumberConf.SIG_DIGITS) -> str:
    """
    Format a number with the largest scale suffix not exceeding it.

    Args:
        value: Number to format. Non-numeric and non-finite input yields "0".
        table: Scale table to pick the suffix from.
        sig_digits: Significant digits of the scaled number.

    Returns:
        "<scaled number> <suffix>", or a bare number for small whole numbers,
        the empty suffix and values below the smallest magnitude.

    Examples:
        >>> table = ScaleTable({"": 1, "K": 1e3, "M": 1e6})
        >>> format_number(999, table)
        '999'
        >>> format_number(1_234_567, table)
        '1.23 M'
        >>> format_number(0.5, table)
        '0.5'
    """
    number = _finite_float(value)
    if number is None:
        return "0"

    if number.is_integer() and number < NumberConf.PLAIN_INT_LIMIT:
        return str(int(number))

    for entry in table.entries:
        if entry.magnitude > 0 and number >= entry.magnitude:
            scaled = _trimmed_str(number / entry.magnitude, sig_digits)
            return f"{scaled} {entry.suffix}" if entry.suffix else scaled

    return _trimmed_str(number, sig_digits)


def parse_number(text: Any, table: ScaleTable) -> ParsedValue:
    """
    Parse user input such as "95QnVt", "1.5 M", "1e300" or "1000".

    Resolution order for suffixed input:
        1. exact-case suffix;
        2. lowercase form shared by several suffixes: value 0 and a warning listing the candidates;
        3. unique case-insensitive suffix.

    Input that does not match <number><letters>, or has an unknown suffix, is parsed
    as a plain decimal or scientific-notation number. Anything else yields value 0
    with no warning, so 0 may stand for unparsable input.

    Examples:
        >>> table = ScaleTable({"Tqg": 1e132, "TQg": 1e162})
        >>> parse_number("5Tqg", table).value == 5 * 1e132
        True
        >>> parse_number("5tQg", table).warning
        "Warning: 'tQg' is ambiguous. Use one of these case-sensitive options: Tqg, TQg."
    """
    if not isinstance(text, str) or not text:
        return ParsedValue()

    cleaned = text.strip()
    match = SUFFIXED_NUMBER.fullmatch(cleaned)
    if match:
        number, suffix = float(match.group(1)), match.group(2)

        magnitude = table.lookup_exact(suffix)
        if magnitude is not NOT_FOUND:
            return ParsedValue(number * magnitude)

        hit = table.lookup_case_insensitive(suffix)
        if isinstance(hit, Ambiguous):
            warning = NumberConf.AMBIGUOUS_WARNING.format(suffix=suffix, options=hit)
            return ParsedValue(warning=warning)
        if hit is not NOT_FOUND:
            return ParsedValue(number * hit)

    if PLAIN_NUMBER.fullmatch(cleaned):
        return ParsedValue(float(cleaned))
    return ParsedValue()


def to_exponential(value: float, digits: int | None = None) -> str:
    """
    Scientific notation with a compact exponent: 1.5e+52, 1e-7.

    Args:
        value: Finite number.
        digits: Digits after the decimal point, or None for as many as needed to represent the value.
    """
    if digits is None:
        significant = len(Decimal(repr(float(value))).normalize().as_tuple().digits)
        digits = max(significant - 1, 0)
    return _compact_exponent(f"{value:.{digits}e}")


def _finite_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _trimmed_str(number: float, sig_digits: int) -> str:
    """Round to significant digits and drop insignificant trailing zeros."""
    rounded = float(f"{number:.{sig_digits}g}")
    if rounded.is_integer() and abs(rounded) < 1e21:
        return str(int(rounded))
    if 1e-6 <= abs(rounded) < 1e21:
        return format(Decimal(repr(rounded)), "f")
    return _compact_exponent(repr(rounded))


def _compact_exponent(text: str) -> str:
    """Drop exponent zero padding: 1.5e-07 → 1.5e-7."""
    return re.sub(r"e([+-])0*(\d)", r"e\1\2", text)
