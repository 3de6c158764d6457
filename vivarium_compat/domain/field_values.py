"""
Tagged union describing how a record supplied one environmental dimension.

Each dimension arrives either as a trusted structured range, as free text
to be parsed, or not at all. Resolvers dispatch on the variant instead of
re-checking raw types.
"""
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from vivarium_compat.domain.models import Range


@dataclass(frozen=True)
class StructuredValue:
    """Pre-normalized {min, max, ideal} range supplied by the data layer."""
    range: Range


@dataclass(frozen=True)
class RawText:
    """Lowercased free text for the dimension."""
    text: str


@dataclass(frozen=True)
class Missing:
    """Dimension absent from the record."""


FieldValue = Union[StructuredValue, RawText, Missing]

MISSING = Missing()


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def read_structured(value: Any) -> Optional[Range]:
    """
    Interpret a raw ``{min, max, ideal}`` mapping.

    Both bounds must be numeric for the range to be trusted; the ideal is
    optional and defaults to the midpoint.

    Returns:
        A valid Range, or None if the value cannot be trusted
    """
    if not isinstance(value, Mapping):
        return None
    low, high = value.get("min"), value.get("max")
    if not (_is_number(low) and _is_number(high)):
        return None
    ideal = value.get("ideal")
    return Range.from_bounds(low, high, ideal if _is_number(ideal) else None)


def read_field(structured: Any, text: Optional[str]) -> FieldValue:
    """
    Classify one dimension of a record.

    Args:
        structured: Raw value of the ``*_range`` field
        text: Free-text value of the dimension

    Returns:
        StructuredValue, RawText or MISSING
    """
    parsed = read_structured(structured)
    if parsed is not None:
        return StructuredValue(parsed)
    if text and text.strip():
        return RawText(text.strip().lower())
    return MISSING
