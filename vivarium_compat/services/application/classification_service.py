"""
Application service: orchestration of normalization, scoring and sizing.
"""
from typing import Any, Optional
import logging

from vivarium_compat.domain.models import (
    ClassificationResult,
    EnclosureEstimate,
    NormalizedInputs,
    PlantCompatibility,
    PlantRecord,
)
from vivarium_compat.domain.profile_catalog import OPEN_TERRARIUM
from vivarium_compat.services.domain.attribute_normalizer import AttributeNormalizer
from vivarium_compat.services.domain.compatibility_scorer import (
    AERARIUM_KEY,
    DESERTERIUM_KEY,
    CompatibilityScorer,
    ScoringError,
)
from vivarium_compat.services.domain.enclosure_size_estimator import EnclosureSizeEstimator
from vivarium_compat.config import settings

logger = logging.getLogger(__name__)

AQUARIUM_KEY = "aquarium"


class VivariumClassificationService:
    """
    Application service for plant compatibility lookups.

    Coordinates the normalizer, scorer and enclosure estimator, memoizes
    normalized inputs per plant id, and guarantees a best-effort
    answer: scoring faults are logged and replaced by a simplified
    fallback instead of surfacing to the caller.
    """

    def __init__(
        self,
        normalizer: AttributeNormalizer,
        scorer: CompatibilityScorer,
        estimator: EnclosureSizeEstimator,
        cache_size: Optional[int] = None,
    ):
        """
        Initialize the service with dependencies.

        Args:
            normalizer: Attribute normalizer for raw records
            scorer: Compatibility scorer for vivarium profiles
            estimator: Enclosure size estimator
            cache_size: Maximum number of memoized plants (0 disables caching)
        """
        self.normalizer = normalizer
        self.scorer = scorer
        self.estimator = estimator
        self.cache_size = settings.normalized_cache_size if cache_size is None else cache_size
        # id -> (record fingerprint, inputs)
        self._cache: dict[str, tuple[str, NormalizedInputs]] = {}

    def normalize(self, raw: Any) -> NormalizedInputs:
        """
        Normalize a plant, reusing the cached result for an unchanged record.

        Only records with an id are cached. A cached entry is reused while
        the record content matches; an edited record is normalized again
        and replaces the entry.

        Args:
            raw: PlantRecord or raw mapping

        Returns:
            NormalizedInputs for the plant
        """
        record = PlantRecord.from_raw(raw)
        key = record.id
        if key is None or self.cache_size <= 0:
            return self.normalizer.normalize(record)

        try:
            fingerprint = record.model_dump_json()
        except ValueError as e:
            logger.warning(f"Record {key} is not serializable, skipping cache: {str(e)}")
            return self.normalizer.normalize(record)

        cached = self._cache.get(key)
        if cached is not None and cached[0] == fingerprint:
            return cached[1]

        inputs = self.normalizer.normalize(record)
        if cached is not None:
            logger.debug(f"Record {key} changed, replacing cached inputs")
            self._cache.pop(key)
        elif len(self._cache) >= self.cache_size:
            # Evict the oldest entry
            self._cache.pop(next(iter(self._cache)))
        self._cache[key] = (fingerprint, inputs)
        return inputs

    def classify(self, raw: Any) -> ClassificationResult:
        """
        Rank the vivarium types for a plant.

        Never raises: any fault during normalization or scoring falls back
        to a classification from the plant's basic traits.

        Args:
            raw: PlantRecord or raw mapping

        Returns:
            ClassificationResult (used_fallback is set on any fallback)
        """
        record = PlantRecord.from_raw(raw)
        label = record.name or record.identity or "<unnamed>"

        try:
            return self.scorer.evaluate(self.normalize(record))
        except ScoringError as e:
            logger.error(f"Scoring error for {label} (profile {e.profile_key}): {e.message}")
        except Exception as e:
            logger.exception(f"Unexpected error classifying {label}: {str(e)}")

        fallback = self.simplified_fallback(record)
        logger.warning(f"Using simplified fallback for {label}: {fallback}")
        return ClassificationResult(vivarium_types=[fallback], used_fallback=True)

    def vivarium_types(self, raw: Any) -> list[str]:
        """Ordered vivarium type names for a plant."""
        return self.classify(raw).vivarium_types

    def simplified_fallback(self, raw: Any) -> str:
        """
        Classify from basic traits only.

        Aquatic plants get Aquarium, desert plants Deserterium, epiphytes
        Aerarium, everything else a terrarium chosen by air circulation.
        Open Terrarium is returned if even normalization fails.
        """
        try:
            inputs = self.normalize(raw)
            if inputs.is_aquatic:
                return self.scorer.profile_name(AQUARIUM_KEY)
            if inputs.desert_adapted:
                return self.scorer.profile_name(DESERTERIUM_KEY)
            if inputs.is_epiphytic:
                return self.scorer.profile_name(AERARIUM_KEY)
            return self.scorer.terrarium_by_air_circulation(inputs.air_circulation_range)
        except Exception as e:
            logger.exception(f"Fallback classification also failed: {str(e)}")
            return OPEN_TERRARIUM.name

    def estimate_enclosure(self, raw: Any) -> EnclosureEstimate:
        return self.estimator.estimate_for_record(raw)

    def profile_plant(self, raw: Any) -> PlantCompatibility:
        """
        Everything the presentation layer shows for one plant.

        Args:
            raw: PlantRecord or raw mapping

        Returns:
            PlantCompatibility with normalized ranges, vivarium types and enclosure
        """
        record = PlantRecord.from_raw(raw)
        classification = self.classify(record)
        return PlantCompatibility(
            plant_id=record.identity,
            inputs=self.normalize(record),
            vivarium_types=classification.vivarium_types,
            enclosure=self.estimate_enclosure(record),
            used_fallback=classification.used_fallback,
        )

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cached_count(self) -> int:
        return len(self._cache)
