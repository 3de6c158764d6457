"""
Qualitative buckets mapped to numeric requirement ranges.

All values are on the 0-100 normalized scale:
- humidity: 0 = very dry, 100 = fully submerged
- light: 0 = darkness, 100 = direct sunlight
- air_circulation: 0 = sealed, 100 = open air
- water_needs: 0 = drought tolerant, 100 = constantly wet
- water_circulation: 0 = stagnant, 100 = strong current
- temperature / water_temperature: 0-50 degC
- soil_ph / water_ph: pH 0-14
- water_hardness: 0-30 dGH
- salinity: 0-40 ppt (0 = fresh, 100 = marine)
- difficulty: 0 = very easy, 100 = extremely hard
- growth_rate: 0 = very slow, 100 = very fast
"""
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from vivarium_compat.domain.models import Range


def _r(low: float, high: float, ideal: float) -> Range:
    return Range(min=low, max=high, ideal=ideal)


class ScaleTable:
    """Read-only lookup of dimension -> bucket -> Range."""

    def __init__(self, scales: Mapping[str, Mapping[str, Range]]):
        self._scales = MappingProxyType(
            {dimension: MappingProxyType(dict(buckets)) for dimension, buckets in scales.items()}
        )

    def get(self, dimension: str, bucket: str) -> Range:
        """
        Look up a bucket range.

        Raises:
            KeyError: If the dimension or bucket is not defined
        """
        return self._scales[dimension][bucket]

    def has(self, dimension: str, bucket: str) -> bool:
        return bucket in self._scales.get(dimension, {})

    def buckets(self, dimension: str) -> Mapping[str, Range]:
        return self._scales[dimension]

    @property
    def dimensions(self) -> Iterable[str]:
        return self._scales.keys()


DEFAULT_SCALE_TABLE = ScaleTable({
    "humidity": {
        "very-low": _r(20, 35, 25),
        "low": _r(35, 50, 40),
        "moderate": _r(50, 70, 60),
        "high": _r(70, 90, 80),
        "very-high": _r(90, 100, 95),
        "aquatic": _r(100, 100, 100),
    },
    "light": {
        "very-low": _r(0, 20, 10),
        "low": _r(20, 40, 30),
        "moderate": _r(40, 60, 50),
        "bright": _r(60, 80, 70),
        "very-bright": _r(80, 100, 90),
    },
    "air_circulation": {
        "minimal": _r(0, 20, 10),
        "low": _r(20, 40, 30),
        "moderate": _r(40, 60, 50),
        "high": _r(60, 80, 70),
        "very-high": _r(80, 100, 90),
    },
    "water_needs": {
        "minimal": _r(0, 20, 10),
        "low": _r(20, 40, 30),
        "moderate": _r(40, 60, 50),
        "high": _r(60, 80, 70),
        "constant": _r(80, 100, 90),
    },
    "water_circulation": {
        "none": _r(0, 10, 5),
        "low": _r(10, 30, 20),
        "moderate": _r(30, 60, 45),
        "high": _r(60, 80, 70),
        "very-high": _r(80, 100, 90),
    },
    "water_hardness": {
        "very-soft": _r(0, 6.67, 3.33),        # 0-2 dGH
        "soft": _r(6.67, 20, 13.33),           # 2-6 dGH
        "moderate": _r(20, 40, 30),            # 6-12 dGH
        "hard": _r(40, 66.67, 53.33),          # 12-20 dGH
        "very-hard": _r(66.67, 100, 83.33),    # 20-30 dGH
        "default": _r(6.67, 40, 23.33),        # 2-12 dGH
    },
    "salinity": {
        "freshwater": _r(0, 5, 2.5),           # 0-2 ppt
        "brackish": _r(12.5, 75, 43.75),       # 5-30 ppt
        "marine": _r(75, 100, 87.5),           # 30-40 ppt
    },
    "temperature": {
        "default": _r(40, 50, 45),             # 20-25 degC
    },
    "water_temperature": {
        "default": _r(44, 52, 48),             # 22-26 degC
    },
    "soil_ph": {
        "default": _r(42.9, 50, 46.4),         # pH 6.0-7.0
    },
    "water_ph": {
        "default": _r(50, 57.1, 53.6),         # pH 7.0-8.0
    },
    "difficulty": {
        "easy": _r(0, 30, 15),
        "moderate": _r(40, 60, 50),
        "hard": _r(70, 100, 85),
    },
    "growth_rate": {
        "very-slow": _r(0, 20, 10),
        "slow": _r(20, 40, 30),
        "slow-moderate": _r(30, 50, 40),
        "moderate": _r(40, 60, 50),
        "moderate-fast": _r(50, 80, 65),
        "fast": _r(60, 80, 70),
        "very-fast": _r(80, 100, 90),
    },
})
