"""
Range overlap helper functions.

Provides utilities for:
- Intersecting a plant requirement range with a profile target range
- Overlap-weighted scoring with an ideal-distance penalty
"""
from typing import NamedTuple, Optional

from vivarium_compat.domain.models import Range

# Overlap share of the plant range that earns the full dimension credit
FULL_CREDIT_OVERLAP = 0.3


class Overlap(NamedTuple):
    """Intersection of two ranges."""
    low: float
    high: float

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2

    @property
    def width(self) -> float:
        return self.high - self.low


def intersect(plant: Range, target: Range) -> Optional[Overlap]:
    """
    Intersect a plant range with a target range.

    Args:
        plant: Plant requirement range
        target: Profile target range

    Returns:
        Overlap bounds, or None if the ranges are disjoint
    """
    low = max(plant.min, target.min)
    high = min(plant.max, target.max)
    if low > high:
        return None
    return Overlap(low, high)


def overlap_fraction(plant: Range, overlap: Overlap) -> float:
    """
    Share of the plant's range covered by the overlap.

    A zero-width plant range is a point estimate: it is fully covered when
    the point lies inside the overlap, otherwise not at all.

    Returns:
        Fraction in [0, 1]
    """
    if plant.width == 0:
        return 1.0 if overlap.low <= plant.min <= overlap.high else 0.0
    return overlap.width / plant.width


def score_range_overlap(
    plant: Range,
    target: Range,
    credit: float,
    penalty_rate: float,
    penalty_cap: float,
) -> float:
    """
    Score how well a target range satisfies a plant range.

    base = credit when at least 30% of the plant range is covered, else the
    covered share of credit. The penalty grows with the distance between the
    overlap midpoint and the target ideal, capped at a share of base.

    Args:
        plant: Plant requirement range
        target: Profile target range
        credit: Points available for the dimension
        penalty_rate: Points lost per percentage point of ideal distance
        penalty_cap: Maximum penalty as a fraction of base

    Returns:
        Contribution in [0, credit]; 0 when the ranges do not overlap
    """
    overlap = intersect(plant, target)
    if overlap is None:
        return 0.0

    fraction = overlap_fraction(plant, overlap)
    base = credit if fraction >= FULL_CREDIT_OVERLAP else fraction * credit
    penalty = min(abs(overlap.midpoint - target.ideal) * penalty_rate, base * penalty_cap)
    return max(0.0, base - penalty)
