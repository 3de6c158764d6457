"""
Domain service: plant-to-vivarium compatibility scoring.

Scores a plant's NormalizedInputs against every environment profile using:
- Hard eligibility gates (aquatic / epiphytic requirements)
- Weighted range overlap with an ideal-distance penalty per dimension
- Binary substrate matching and a special-needs bonus
- A deterministic fallback when no profile qualifies
"""
from typing import Any, Optional
from dataclasses import dataclass
import numpy as np
import logging

from vivarium_compat.domain.models import (
    ClassificationResult,
    EnvironmentProfile,
    NormalizedInputs,
    Range,
    ScoreResult,
)
from vivarium_compat.domain.profile_catalog import DEFAULT_CATALOG, EnvironmentProfileCatalog
from vivarium_compat.services.domain.attribute_normalizer import AttributeNormalizer
from vivarium_compat.utils.range_overlap import score_range_overlap
from vivarium_compat.config import settings

logger = logging.getLogger(__name__)


class ScoringError(Exception):
    """Unexpected fault while scoring a plant against a profile."""

    def __init__(self, message: str, profile_key: Optional[str] = None):
        self.message = message
        self.profile_key = profile_key
        super().__init__(message)


@dataclass(frozen=True)
class DimensionWeight:
    """Scoring constants for one range dimension."""
    weight: float
    """Points the dimension adds to the attainable maximum"""
    credit: float
    """Points a well-overlapping range can earn (may be below weight)"""
    penalty_rate: float
    """Points lost per percentage point between overlap midpoint and profile ideal"""
    penalty_cap: float
    """Maximum penalty as a fraction of the earned base"""


@dataclass
class ScoringWeights:
    """Per-dimension weights; they sum to 100 for a non-water profile."""
    humidity: DimensionWeight = DimensionWeight(25, 20, 0.15, 0.25)
    light: DimensionWeight = DimensionWeight(15, 15, 0.1, 0.2)
    air_circulation: DimensionWeight = DimensionWeight(15, 15, 0.1, 0.2)
    water_needs: DimensionWeight = DimensionWeight(10, 10, 0.08, 0.15)
    temperature: DimensionWeight = DimensionWeight(5, 5, 0.03, 0.15)
    soil_ph: DimensionWeight = DimensionWeight(5, 5, 0.03, 0.15)

    water_circulation: DimensionWeight = DimensionWeight(5, 5, 0.05, 0.15)
    water_temperature: DimensionWeight = DimensionWeight(3, 3, 0.02, 0.15)
    water_ph: DimensionWeight = DimensionWeight(3, 3, 0.02, 0.15)
    water_hardness: DimensionWeight = DimensionWeight(2, 2, 0.01, 0.15)
    salinity: DimensionWeight = DimensionWeight(2, 2, 0.01, 0.15)

    substrate: float = 20
    special_needs: float = 10
    special_needs_related: float = 8
    special_needs_none: float = 5


@dataclass
class ScoringConfig:
    """Configuration for classification thresholds."""

    qualifying_threshold: float = settings.qualifying_score_threshold
    """Minimum percentage for a profile to be listed"""

    fallback_threshold: float = settings.fallback_score_threshold
    """Minimum percentage for Deserterium/Aerarium to win the fallback"""

    closed_terrarium_max_air_ideal: Optional[float] = None
    """Air circulation ideal at or below which the fallback picks Closed Terrarium
    (defaults to the ideal of the normalizer's "low" air circulation bucket)"""


# Which scoring rule governs each range dimension
_TERRESTRIAL = "terrestrial"   # not applicable in a water context
_SOIL = "soil"                 # not applicable for aquatic plants in a semi-aquatic setup
_ALWAYS = "always"
_WATER = "water"               # applicable only in a water context

# (dimension, NormalizedInputs attribute, EnvironmentProfile attribute, rule)
_RANGE_DIMENSIONS: tuple[tuple[str, str, str, str], ...] = (
    ("humidity", "humidity_range", "humidity", _TERRESTRIAL),
    ("light", "light_range", "light", _ALWAYS),
    ("air_circulation", "air_circulation_range", "air_circulation", _TERRESTRIAL),
    ("water_needs", "water_needs_range", "water_needs", _TERRESTRIAL),
    ("temperature", "temperature_range", "temperature", _TERRESTRIAL),
    ("soil_ph", "soil_ph_range", "soil_ph", _SOIL),
    ("water_circulation", "water_circulation_range", "water_circulation", _WATER),
    ("water_temperature", "water_temperature_range", "water_temperature", _WATER),
    ("water_ph", "water_ph_range", "water_ph", _WATER),
    ("water_hardness", "water_hardness_range", "water_hardness", _WATER),
    ("salinity", "salinity_range", "salinity", _WATER),
)

DESERTERIUM_KEY = "deserterium"
AERARIUM_KEY = "aerarium"
INDOOR_KEY = "indoor"
OPEN_TERRARIUM_KEY = "open-terrarium"
CLOSED_TERRARIUM_KEY = "closed-terrarium"


def in_water_context(profile: EnvironmentProfile, inputs: NormalizedInputs) -> bool:
    """A fully submerged profile, or a water-body profile hosting an aquatic plant."""
    return profile.submerged or (profile.water_body and inputs.substrate == "aquatic")


def passes_gate(profile: EnvironmentProfile, inputs: NormalizedInputs) -> bool:
    """Check the profile's hard physical requirement."""
    if profile.required_trait == "aquatic":
        return inputs.is_aquatic
    if profile.required_trait == "epiphytic":
        return inputs.is_epiphytic
    return True


class CompatibilityScorer:
    """
    Domain service ranking environment profiles for a plant.

    Each applicable dimension adds its weight to the profile's attainable
    maximum and its overlap score to the earned points. Dimensions that do
    not apply to a profile/plant pair count as fully satisfied, so the
    percentage is never distorted by them.
    """

    def __init__(
        self,
        catalog: Optional[EnvironmentProfileCatalog] = None,
        weights: Optional[ScoringWeights] = None,
        config: Optional[ScoringConfig] = None,
        normalizer: Optional[AttributeNormalizer] = None,
    ):
        self.catalog = catalog or DEFAULT_CATALOG
        self.weights = weights or ScoringWeights()
        self.config = config or ScoringConfig()
        self.normalizer = normalizer or AttributeNormalizer()

    def rank_profiles(self, plant: Any) -> list[str]:
        """
        Classify a plant into vivarium types.

        Args:
            plant: PlantRecord, raw mapping or already NormalizedInputs

        Returns:
            Qualifying profile names, best first, or a single fallback name
        """
        inputs = plant if isinstance(plant, NormalizedInputs) else self.normalizer.normalize(plant)
        return self.evaluate(inputs).vivarium_types

    def evaluate(self, inputs: NormalizedInputs) -> ClassificationResult:
        """
        Score every eligible profile and pick the qualifying ones.

        Args:
            inputs: Normalized plant requirements

        Returns:
            ClassificationResult with ranked names and all scores

        Raises:
            ScoringError: If a profile cannot be scored
        """
        scores = self.score_profiles(inputs)
        threshold = self.config.qualifying_threshold

        qualifying = sorted(
            (s for s in scores if s.score >= threshold),
            key=lambda s: (-s.score, self.catalog.index(s.profile_key)),
        )
        if qualifying:
            names = [s.profile_name for s in qualifying]
            logger.info(f"{len(names)} profiles qualify (>= {threshold}%): {names}")
            return ClassificationResult(vivarium_types=names, scores=scores)

        fallback = self.fallback(inputs, scores)
        logger.info(f"No profile reached {threshold}%, falling back to {fallback}")
        return ClassificationResult(vivarium_types=[fallback], scores=scores, used_fallback=True)

    def score_profiles(self, inputs: NormalizedInputs) -> list[ScoreResult]:
        """
        Score the plant against every profile that passes its hard gate.

        Returns:
            ScoreResults in catalog order
        """
        results = []
        for profile in self.catalog:
            if not passes_gate(profile, inputs):
                logger.debug(f"Skipping {profile.name}: requires {profile.required_trait} plant")
                continue
            results.append(self.score_profile(profile, inputs))

        if results:
            values = np.array([r.score for r in results])
            logger.debug(
                f"Scored {len(results)} profiles: mean={np.mean(values):.1f}%, "
                f"max={np.max(values):.1f}%"
            )
        return results

    def score_profile(self, profile: EnvironmentProfile, inputs: NormalizedInputs) -> ScoreResult:
        """
        Score one profile without applying its gate.

        Raises:
            ScoringError: If any dimension cannot be evaluated
        """
        try:
            points, max_points, breakdown = self._accumulate(profile, inputs)
            percentage = float(np.clip(points / max_points * 100, 0.0, 100.0))
        except (ArithmeticError, AttributeError, TypeError, ValueError) as e:
            raise ScoringError(f"Failed to score profile '{profile.key}': {e}", profile.key) from e

        logger.debug(f"{profile.name}: {points:.2f}/{max_points:.0f} = {percentage:.1f}%")
        return ScoreResult(
            profile_key=profile.key,
            profile_name=profile.name,
            score=percentage,
            points=points,
            max_points=max_points,
            breakdown=breakdown,
        )

    def fallback(self, inputs: NormalizedInputs, scores: list[ScoreResult]) -> str:
        """
        Choose a single vivarium type when nothing qualifies.

        Desert plants get Deserterium when it scores reasonably, else Indoor.
        Epiphytes get Aerarium when it scores reasonably. Everything else is
        a terrarium chosen by air circulation.
        """
        by_key = {s.profile_key: s.score for s in scores}
        threshold = self.config.fallback_threshold

        if inputs.desert_adapted:
            if by_key.get(DESERTERIUM_KEY, 0.0) >= threshold:
                return self.profile_name(DESERTERIUM_KEY)
            return self.profile_name(INDOOR_KEY)

        if inputs.is_epiphytic and by_key.get(AERARIUM_KEY, 0.0) >= threshold:
            return self.profile_name(AERARIUM_KEY)

        return self.terrarium_by_air_circulation(inputs.air_circulation_range)

    @property
    def closed_terrarium_max_air_ideal(self) -> float:
        if self.config.closed_terrarium_max_air_ideal is not None:
            return self.config.closed_terrarium_max_air_ideal
        return self.normalizer.scale_table.get("air_circulation", "low").ideal

    def terrarium_by_air_circulation(self, air_circulation: Range) -> str:
        if air_circulation.ideal <= self.closed_terrarium_max_air_ideal:
            return self.profile_name(CLOSED_TERRARIUM_KEY)
        return self.profile_name(OPEN_TERRARIUM_KEY)

    def profile_name(self, key: str) -> str:
        return self.catalog.get(key).name

    def _accumulate(
        self,
        profile: EnvironmentProfile,
        inputs: NormalizedInputs,
    ) -> tuple[float, float, dict[str, float]]:
        points = 0.0
        max_points = 0.0
        breakdown: dict[str, float] = {}
        water_context = in_water_context(profile, inputs)

        for dimension, input_attr, profile_attr, rule in _RANGE_DIMENSIONS:
            weight: DimensionWeight = getattr(self.weights, dimension)
            max_points += weight.weight

            if not self._applies(rule, profile, inputs, water_context):
                earned = weight.weight
            else:
                plant_range = getattr(inputs, input_attr)
                target = getattr(profile, profile_attr)
                if plant_range is None or target is None:
                    earned = 0.0
                else:
                    earned = score_range_overlap(
                        plant_range,
                        target,
                        credit=weight.credit,
                        penalty_rate=weight.penalty_rate,
                        penalty_cap=weight.penalty_cap,
                    )
            points += earned
            breakdown[dimension] = earned

        max_points += self.weights.substrate
        breakdown["substrate"] = self.weights.substrate if inputs.substrate in profile.substrates else 0.0
        points += breakdown["substrate"]

        max_points += self.weights.special_needs
        breakdown["special_needs"] = self._special_needs_points(profile, inputs.special_needs)
        points += breakdown["special_needs"]

        return points, max_points, breakdown

    @staticmethod
    def _applies(
        rule: str,
        profile: EnvironmentProfile,
        inputs: NormalizedInputs,
        water_context: bool,
    ) -> bool:
        if rule == _TERRESTRIAL:
            return not water_context
        if rule == _WATER:
            return water_context
        if rule == _SOIL:
            # Aquariums still score soil pH
            return not (profile.water_body and not profile.submerged and inputs.substrate == "aquatic")
        return True

    def _special_needs_points(self, profile: EnvironmentProfile, special_needs: str) -> float:
        if special_needs == "none":
            return self.weights.special_needs_none
        if special_needs in profile.specialties:
            return self.weights.special_needs
        if special_needs in profile.related_specialties:
            return self.weights.special_needs_related
        return 0.0
