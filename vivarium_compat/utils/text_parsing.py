"""
Regex helpers for pulling explicit numbers out of free-text plant attributes.

All patterns expect lowercased text and are compiled case-insensitively anyway.
"""
import re
from typing import Optional, Sequence

_NUM = r"(\d+(?:\.\d+)?)"
_DASH = r"\s*[-–]\s*"


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


PERCENT_RANGE_PATTERNS = _compile(r"(\d+)\s*[-–]\s*(\d+)")

TEMPERATURE_RANGE_PATTERNS = _compile(rf"{_NUM}{_DASH}{_NUM}\s*°?\s*c\b")
TEMPERATURE_SINGLE_PATTERNS = _compile(rf"{_NUM}\s*°?\s*c\b")

SOIL_PH_RANGE_PATTERNS = _compile(
    rf"soil\s+ph\s+{_NUM}{_DASH}{_NUM}",
    rf"\bph\s+{_NUM}{_DASH}{_NUM}\s*\(soil\)",
)
SOIL_PH_SINGLE_PATTERNS = _compile(rf"soil\s+ph\s+{_NUM}")

WATER_PH_RANGE_PATTERNS = _compile(
    rf"water\s+ph\s+{_NUM}{_DASH}{_NUM}",
    rf"\bph\s+{_NUM}{_DASH}{_NUM}\s*\(water\)",
    rf"\bph\s+{_NUM}{_DASH}{_NUM}",
)
WATER_PH_SINGLE_PATTERNS = _compile(
    rf"water\s+ph\s+{_NUM}",
    rf"\bph\s+{_NUM}",
)

HARDNESS_RANGE_PATTERNS = _compile(
    rf"{_NUM}{_DASH}{_NUM}\s*dgh\b",
    rf"hardness\s+{_NUM}{_DASH}{_NUM}",
    rf"{_NUM}{_DASH}{_NUM}\s*gh\b",
)
HARDNESS_SINGLE_PATTERNS = _compile(
    rf"{_NUM}\s*dgh\b",
    rf"hardness\s+{_NUM}",
    rf"{_NUM}\s*gh\b",
)

SPECIFIC_GRAVITY_RANGE_PATTERNS = _compile(
    rf"salinity\s+(1\.\d{{3}}){_DASH}(1\.\d{{3}})",
    rf"(1\.\d{{3}}){_DASH}(1\.\d{{3}})\s*salinity",
)
PPT_RANGE_PATTERNS = _compile(
    rf"salinity\s+{_NUM}{_DASH}{_NUM}\s*ppt",
    rf"{_NUM}{_DASH}{_NUM}\s*ppt",
)

# Dedicated fields ("waterPh": "6.5-7.5") may omit the unit or keyword
BARE_RANGE_PATTERNS = _compile(rf"{_NUM}{_DASH}{_NUM}")
BARE_SINGLE_PATTERNS = _compile(_NUM)
BARE_SPECIFIC_GRAVITY_PATTERNS = _compile(rf"(1\.\d{{3}}){_DASH}(1\.\d{{3}})")

LENGTH_RANGE_PATTERN = re.compile(rf"{_NUM}{_DASH}{_NUM}\s*(cm|mm|meters?|metres?|m)\b", re.IGNORECASE)
LENGTH_SINGLE_PATTERN = re.compile(rf"{_NUM}\s*(cm|mm|meters?|metres?|m)\b", re.IGNORECASE)
FIRST_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")


def parse_range(text: str, patterns: Sequence[re.Pattern]) -> Optional[tuple[float, float]]:
    """
    Find the first explicit "a-b" interval matched by any pattern.

    Args:
        text: Text to search
        patterns: Patterns with two capture groups, tried in order

    Returns:
        (a, b) as floats, or None if nothing matched
    """
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return float(match.group(1)), float(match.group(2))
    return None


def parse_single(text: str, patterns: Sequence[re.Pattern]) -> Optional[float]:
    """Find the first single value matched by any pattern."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return float(match.group(1))
    return None


def _length_unit(unit: str) -> str:
    unit = unit.lower()
    return "m" if unit.startswith("met") else unit


def parse_length(text: str) -> Optional[tuple[Optional[float], float, str]]:
    """
    Parse a plant size such as "8-25 cm", "1-2 meters" or "40 mm".

    Returns:
        (lower, upper, unit) where lower is None for a single value and unit
        is one of cm, mm or m, or None if no length with a unit was found
    """
    match = LENGTH_RANGE_PATTERN.search(text)
    if match:
        return float(match.group(1)), float(match.group(2)), _length_unit(match.group(3))
    match = LENGTH_SINGLE_PATTERN.search(text)
    if match:
        return None, float(match.group(1)), _length_unit(match.group(2))
    return None


def first_number(text: str) -> Optional[float]:
    """Return the first number in text, or None."""
    match = FIRST_NUMBER_PATTERN.search(text)
    return float(match.group(0)) if match else None


def round_half_up(value: float) -> int:
    """Round a non-negative value to the nearest integer, halves going up."""
    return int(value + 0.5)
