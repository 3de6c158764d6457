"""
Domain models for plant records, requirement ranges and classification results.

These models represent the core domain entities and should be independent
of any presentation or data-loading concerns.
"""
import logging
import math
from collections.abc import Mapping
from typing import Any, Literal, Optional

import numpy as np
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


Substrate = Literal["dry", "moist", "wet", "epiphytic", "aquatic"]
SpecialNeeds = Literal[
    "none", "carnivorous", "epiphytic", "aquatic", "succulent", "bromeliad", "orchid"
]
EnclosureCategoryName = Literal["tiny", "small", "medium", "large", "xlarge", "open"]

SUBSTRATES: tuple[str, ...] = ("dry", "moist", "wet", "epiphytic", "aquatic")
SPECIAL_NEEDS: tuple[str, ...] = (
    "none", "carnivorous", "epiphytic", "aquatic", "succulent", "bromeliad", "orchid"
)

# Ranges that only exist for plants living in water
AQUATIC_ONLY_FIELDS: tuple[str, ...] = (
    "water_circulation_range",
    "water_temperature_range",
    "water_ph_range",
    "water_hardness_range",
    "salinity_range",
)

SCALE_MIN = 0.0
SCALE_MAX = 100.0


def _clamp(value: float) -> float:
    return float(np.clip(value, SCALE_MIN, SCALE_MAX))


class Range(BaseModel):
    """Requirement range on the 0-100 normalized scale."""
    model_config = ConfigDict(frozen=True)

    min: float = Field(ge=SCALE_MIN, le=SCALE_MAX)
    max: float = Field(ge=SCALE_MIN, le=SCALE_MAX)
    ideal: float = Field(ge=SCALE_MIN, le=SCALE_MAX)

    @model_validator(mode="after")
    def _check_ordering(self) -> "Range":
        if not (self.min <= self.ideal <= self.max):
            raise ValueError(
                f"Range must satisfy min <= ideal <= max, got "
                f"min={self.min}, ideal={self.ideal}, max={self.max}"
            )
        return self

    @classmethod
    def from_bounds(
        cls,
        low: float,
        high: float,
        ideal: Optional[float] = None,
    ) -> "Range":
        """
        Build a valid range from untrusted bounds.

        Bounds are clamped to [0, 100] and swapped if reversed. A missing
        ideal becomes the midpoint; an out-of-range ideal is pulled inside.

        Args:
            low: Lower bound (percent)
            high: Upper bound (percent)
            ideal: Optional preferred value (percent)

        Returns:
            Range satisfying 0 <= min <= ideal <= max <= 100
        """
        low, high = sorted((_clamp(low), _clamp(high)))
        if ideal is None or not math.isfinite(ideal):
            ideal = (low + high) / 2
        ideal = float(np.clip(ideal, low, high))
        return cls(min=low, max=high, ideal=ideal)

    @classmethod
    def around(cls, center: float, half_width: float) -> "Range":
        """Symmetric band around a single converted value."""
        center = _clamp(center)
        return cls.from_bounds(center - half_width, center + half_width, center)

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2

    @property
    def width(self) -> float:
        return self.max - self.min

    def widen(self, delta: float) -> "Range":
        """Extend both bounds by delta points, keeping the ideal."""
        return Range.from_bounds(self.min - delta, self.max + delta, self.ideal)

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


# ============================================================
# Input record
# ============================================================

_TEXT_FIELDS = (
    "name", "description",
    "humidity", "light_requirements", "air_circulation", "watering",
    "water_circulation", "temperature", "water_temperature", "water_ph",
    "water_hardness", "salinity", "substrate", "growth_habit",
    "substrate_type", "special_needs", "size", "difficulty", "growth_rate",
)


class PlantRecord(BaseModel):
    """
    Semi-structured plant record as stored by the catalog data layer.

    Every environmental dimension may arrive as a pre-normalized
    ``{min, max, ideal}`` range (the ``*_range`` fields, kept untyped so the
    normalizer can decide whether to trust them), as free text, or not at all.
    Wrong-typed values are coerced to "absent" instead of failing validation.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: Optional[str] = None
    name: Optional[str] = None
    scientific_name: Optional[str] = None
    description: Optional[str] = None
    care_tips: list[str] = Field(default_factory=list)
    category: list[str] = Field(default_factory=list)

    humidity: Optional[str] = None
    humidity_range: Any = None
    light_requirements: Optional[str] = None
    light_range: Any = None
    air_circulation: Optional[str] = None
    air_circulation_range: Any = None
    watering: Optional[str] = None
    water_needs_range: Any = None
    temperature: Optional[str] = None
    temperature_range: Any = None
    soil_ph_range: Any = None

    water_circulation: Optional[str] = None
    water_circulation_range: Any = None
    water_temperature: Optional[str] = None
    water_temperature_range: Any = None
    water_ph: Optional[str] = None
    water_ph_range: Any = None
    water_hardness: Optional[str] = None
    water_hardness_range: Any = None
    salinity: Optional[str] = None
    salinity_range: Any = None

    substrate: Optional[str] = None
    substrate_type: Optional[str] = None
    growth_habit: Optional[str] = None
    special_needs: Optional[str] = None

    size: Optional[str] = None
    difficulty: Optional[str] = None
    difficulty_range: Any = None
    growth_rate: Optional[str] = None
    growth_rate_range: Any = None

    taxonomy: Optional[dict[str, Any]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, (dict, list)):
            return None
        return str(value)

    @field_validator("scientific_name", mode="before")
    @classmethod
    def _coerce_scientific_name(cls, value: Any) -> Optional[str]:
        # Some records store {"scientificName": ..., "authorship": ...}
        if isinstance(value, Mapping):
            value = value.get("scientificName") or value.get("name")
        return value if isinstance(value, str) else None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return None

    @field_validator("care_tips", "category", mode="before")
    @classmethod
    def _coerce_text_list(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [str(item) for item in value if isinstance(item, (str, int, float))]

    @field_validator("taxonomy", mode="before")
    @classmethod
    def _coerce_taxonomy(cls, value: Any) -> Optional[dict[str, Any]]:
        return dict(value) if isinstance(value, Mapping) else None

    @classmethod
    def from_raw(cls, raw: Any) -> "PlantRecord":
        """
        Build a record from whatever the data layer handed over.

        Never raises: anything that is not a mapping, or fails validation,
        becomes an empty record so every dimension resolves to its default.
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            logger.warning(f"Plant record is not a mapping ({type(raw).__name__}), using defaults")
            return cls()
        try:
            return cls.model_validate(dict(raw))
        except ValidationError as e:
            logger.warning(f"Plant record failed validation, using defaults: {e.error_count()} errors")
            return cls()

    @property
    def identity(self) -> Optional[str]:
        """Best available identifier for labelling a plant."""
        return self.id or self.scientific_name or self.name

    @property
    def categories(self) -> list[str]:
        return [c.lower() for c in self.category]


# ============================================================
# Normalized output
# ============================================================

class NormalizedInputs(BaseModel):
    """Canonical numeric view of a plant's environmental requirements."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    humidity_range: Range
    light_range: Range
    air_circulation_range: Range
    water_needs_range: Range
    temperature_range: Range
    soil_ph_range: Range
    difficulty_range: Range
    growth_rate_range: Range
    substrate: Substrate
    special_needs: SpecialNeeds
    max_size: float = Field(ge=0, description="Maximum plant size in cm")
    desert_adapted: bool = False

    water_circulation_range: Optional[Range] = None
    water_temperature_range: Optional[Range] = None
    water_ph_range: Optional[Range] = None
    water_hardness_range: Optional[Range] = None
    salinity_range: Optional[Range] = None

    @model_validator(mode="after")
    def _check_aquatic_ranges(self) -> "NormalizedInputs":
        present = [name for name in AQUATIC_ONLY_FIELDS if getattr(self, name) is not None]
        if self.is_aquatic and len(present) != len(AQUATIC_ONLY_FIELDS):
            missing = sorted(set(AQUATIC_ONLY_FIELDS) - set(present))
            raise ValueError(f"Aquatic plant is missing water ranges: {missing}")
        if not self.is_aquatic and present:
            raise ValueError(f"Water ranges set for a non-aquatic plant: {present}")
        return self

    @property
    def is_aquatic(self) -> bool:
        return self.substrate == "aquatic" or self.special_needs == "aquatic"

    @property
    def is_epiphytic(self) -> bool:
        return self.substrate == "epiphytic" or self.special_needs == "epiphytic"

    def to_record_fields(self) -> dict[str, Any]:
        """Camel-case fields as stored on standardized catalog records."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================
# Environment profiles and results
# ============================================================

class EnvironmentProfile(BaseModel):
    """A vivarium archetype with the conditions it can provide."""
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    summary: str = ""
    humidity: Range
    light: Range
    air_circulation: Range
    substrates: frozenset[str]
    water_needs: Range
    temperature: Range
    difficulty: Range
    soil_ph: Range
    growth_rate: Optional[Range] = None

    water_body: bool = False
    submerged: bool = Field(
        default=False,
        description="Fully water-filled enclosure; terrestrial dimensions do not apply"
    )
    water_circulation: Optional[Range] = None
    water_temperature: Optional[Range] = None
    water_ph: Optional[Range] = None
    water_hardness: Optional[Range] = None
    salinity: Optional[Range] = None

    required_trait: Optional[Literal["aquatic", "epiphytic"]] = None
    specialties: frozenset[str] = frozenset()
    related_specialties: frozenset[str] = frozenset()


class ScoreResult(BaseModel):
    """Compatibility of one plant with one profile."""
    profile_key: str
    profile_name: str
    score: float = Field(ge=0, le=100, description="Percentage of attainable points")
    points: float
    max_points: float
    breakdown: dict[str, float] = Field(default_factory=dict)


class ClassificationResult(BaseModel):
    """Ranked vivarium types for one plant."""
    vivarium_types: list[str]
    scores: list[ScoreResult] = Field(default_factory=list)
    used_fallback: bool = False


class EnclosureEstimate(BaseModel):
    """Minimum enclosure size for a plant."""
    category: EnclosureCategoryName
    height_band: str
    scale_min: float = Field(description="Start of the category on the 0-100 size scale")
    scale_max: float = Field(description="End of the category on the 0-100 size scale")
    juvenile_size_cm: Optional[float] = None
    required_height_cm: Optional[float] = None

    @property
    def parsed(self) -> bool:
        return self.juvenile_size_cm is not None


class PlantCompatibility(BaseModel):
    """Everything the presentation layer needs about one plant."""
    plant_id: Optional[str] = None
    inputs: NormalizedInputs
    vivarium_types: list[str]
    enclosure: EnclosureEstimate
    used_fallback: bool = False
