"""
Unit conversion utilities between physical units and the 0-100 normalized scale.
"""
from typing import NamedTuple, Optional

import numpy as np

from vivarium_compat.domain.models import Range


class LinearScale(NamedTuple):
    """Physical interval mapped linearly onto 0-100%."""
    low: float
    high: float
    unit: str


TEMPERATURE_SCALE = LinearScale(0.0, 50.0, "degC")
PH_SCALE = LinearScale(0.0, 14.0, "pH")
HARDNESS_SCALE = LinearScale(0.0, 30.0, "dGH")
SALINITY_PPT_SCALE = LinearScale(0.0, 40.0, "ppt")
SPECIFIC_GRAVITY_SCALE = LinearScale(1.000, 1.030, "SG")

# Half-widths of the band built around a single reading
PH_BAND = 3.0
HARDNESS_BAND = 5.0
TEMPERATURE_BAND = 5.0


def to_percent(value: float, scale: LinearScale) -> float:
    """
    Convert a physical value to the normalized scale.

    Args:
        value: Value in the scale's unit
        scale: Linear scale definition

    Returns:
        Percentage clamped to [0, 100]
    """
    percent = (value - scale.low) / (scale.high - scale.low) * 100
    return float(np.clip(percent, 0.0, 100.0))


def from_percent(percent: float, scale: LinearScale) -> float:
    """
    Convert a normalized percentage back to the scale's unit.

    Args:
        percent: Value on the 0-100 scale

    Returns:
        Value in the scale's unit
    """
    return scale.low + (percent / 100) * (scale.high - scale.low)


def range_to_percent(low: float, high: float, scale: LinearScale) -> Range:
    """
    Convert a physical interval to a Range with a midpoint ideal.

    Args:
        low: Lower bound in the scale's unit
        high: Upper bound in the scale's unit
        scale: Linear scale definition

    Returns:
        Normalized Range
    """
    return Range.from_bounds(to_percent(low, scale), to_percent(high, scale))


def value_to_band(value: float, scale: LinearScale, half_width: float) -> Range:
    """Symmetric band of +/- half_width points around a single converted value."""
    return Range.around(to_percent(value, scale), half_width)


def celsius_to_percent(celsius: float) -> float:
    return to_percent(celsius, TEMPERATURE_SCALE)


def percent_to_celsius(percent: float) -> float:
    return from_percent(percent, TEMPERATURE_SCALE)


def ph_to_percent(ph: float) -> float:
    return to_percent(ph, PH_SCALE)


def percent_to_ph(percent: float) -> float:
    return from_percent(percent, PH_SCALE)


def dgh_to_percent(dgh: float) -> float:
    return to_percent(dgh, HARDNESS_SCALE)


def percent_to_dgh(percent: float) -> float:
    return from_percent(percent, HARDNESS_SCALE)


def ppt_to_percent(ppt: float) -> float:
    return to_percent(ppt, SALINITY_PPT_SCALE)


def percent_to_ppt(percent: float) -> float:
    return from_percent(percent, SALINITY_PPT_SCALE)


def specific_gravity_to_percent(specific_gravity: float) -> float:
    return to_percent(specific_gravity, SPECIFIC_GRAVITY_SCALE)


def length_to_cm(value: float, unit: Optional[str]) -> float:
    """
    Convert a plant length to centimeters.

    Args:
        value: Numeric length
        unit: "m", "mm" or "cm" (None is treated as cm)

    Returns:
        Length in centimeters
    """
    if unit == "m":
        return value * 100
    if unit == "mm":
        return value / 10
    return value
