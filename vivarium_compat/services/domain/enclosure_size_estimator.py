"""
Domain service: minimum enclosure size estimation.

Sizes an enclosure for the juvenile (smallest stated) plant size, leaving
room for substrate and headroom above the plant.
"""
from typing import Any, NamedTuple, Optional
from dataclasses import dataclass
import math
import re
import logging

from vivarium_compat.domain.models import EnclosureEstimate, PlantRecord
from vivarium_compat.utils.text_parsing import first_number
from vivarium_compat.utils.unit_conversion import length_to_cm
from vivarium_compat.config import settings

logger = logging.getLogger(__name__)

_METERS = re.compile(r"\d\s*(?:m|meters?|metres?)\b")


class EnclosureCategory(NamedTuple):
    """Enclosure class with its height limit and position on the size scale."""
    name: str
    max_height_cm: float
    height_band: str
    scale_min: float
    scale_max: float


ENCLOSURE_CATEGORIES: tuple[EnclosureCategory, ...] = (
    EnclosureCategory("tiny", 5, "0-5 cm", 0, 16.67),
    EnclosureCategory("small", 15, "5-15 cm", 16.67, 33.33),
    EnclosureCategory("medium", 30, "15-30 cm", 33.33, 50),
    EnclosureCategory("large", 60, "30-60 cm", 50, 66.67),
    EnclosureCategory("xlarge", 180, "60-180 cm", 66.67, 90),
    EnclosureCategory("open", math.inf, "180+ cm", 90, 100),
)

DEFAULT_CATEGORY = ENCLOSURE_CATEGORIES[1]


@dataclass
class EnclosureConfig:
    """Configuration for enclosure sizing."""

    usable_height_ratio: float = settings.enclosure_usable_height_ratio
    """Share of enclosure height left after substrate"""

    padding_ratio: float = settings.enclosure_padding_ratio
    """Headroom above the plant as a share of its size"""

    min_padding_cm: float = settings.enclosure_min_padding_cm
    """Smallest headroom regardless of plant size"""


def detect_unit(size_text: str) -> Optional[str]:
    """
    Detect the length unit of a size string.

    Returns:
        "cm", "mm", "m", or None when no unit is present
    """
    if "cm" in size_text:
        return "cm"
    if "mm" in size_text:
        return "mm"
    if _METERS.search(size_text):
        return "m"
    return None


def category_for_height(required_height_cm: float) -> EnclosureCategory:
    """Smallest category whose height limit fits the required height."""
    for category in ENCLOSURE_CATEGORIES:
        if required_height_cm <= category.max_height_cm:
            return category
    return ENCLOSURE_CATEGORIES[-1]


class EnclosureSizeEstimator:
    """Domain service mapping a plant size string to an enclosure category."""

    def __init__(self, config: Optional[EnclosureConfig] = None):
        self.config = config or EnclosureConfig()

    def padding(self, juvenile_cm: float) -> float:
        return max(juvenile_cm * self.config.padding_ratio, self.config.min_padding_cm)

    def required_height(self, juvenile_cm: float) -> float:
        """
        Enclosure height needed for a plant.

        Args:
            juvenile_cm: Plant height in cm

        Returns:
            Plant height scaled up for substrate, plus headroom
        """
        return juvenile_cm / self.config.usable_height_ratio + self.padding(juvenile_cm)

    def estimate(self, size: Any) -> EnclosureEstimate:
        """
        Estimate the minimum enclosure for a size string such as "8-25 cm".

        Only the first number (juvenile size) is used. Text without a
        number and a length unit falls back to the "small" category.

        Args:
            size: Raw size value from the record

        Returns:
            EnclosureEstimate
        """
        text = size.strip().lower() if isinstance(size, str) else ""
        unit = detect_unit(text)
        number = first_number(text)

        if unit is None or number is None:
            if text:
                logger.debug(f"Unparseable size '{size}', defaulting to {DEFAULT_CATEGORY.name}")
            return self._build(DEFAULT_CATEGORY)

        juvenile = length_to_cm(number, unit)
        required = self.required_height(juvenile)
        category = category_for_height(required)
        logger.debug(f"Size '{size}': juvenile={juvenile:.1f}cm, required={required:.2f}cm -> {category.name}")
        return self._build(category, juvenile, required)

    def estimate_for_record(self, raw: Any) -> EnclosureEstimate:
        return self.estimate(PlantRecord.from_raw(raw).size)

    @staticmethod
    def _build(
        category: EnclosureCategory,
        juvenile: Optional[float] = None,
        required: Optional[float] = None,
    ) -> EnclosureEstimate:
        return EnclosureEstimate(
            category=category.name,
            height_band=category.height_band,
            scale_min=category.scale_min,
            scale_max=category.scale_max,
            juvenile_size_cm=juvenile,
            required_height_cm=required,
        )
