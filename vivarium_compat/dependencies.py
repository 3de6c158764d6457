"""
Dependency factories for the classification engine.
"""
from typing import Optional

from vivarium_compat.services.domain.attribute_normalizer import AttributeNormalizer
from vivarium_compat.services.domain.compatibility_scorer import CompatibilityScorer
from vivarium_compat.services.domain.enclosure_size_estimator import EnclosureSizeEstimator
from vivarium_compat.services.application.classification_service import (
    VivariumClassificationService,
)


def get_attribute_normalizer() -> AttributeNormalizer:
    """
    Dependency factory for AttributeNormalizer.

    Returns:
        AttributeNormalizer with the default scale table
    """
    return AttributeNormalizer()


def get_compatibility_scorer(
    normalizer: Optional[AttributeNormalizer] = None,
) -> CompatibilityScorer:
    """
    Dependency factory for CompatibilityScorer.

    Args:
        normalizer: Normalizer used for raw records (created if omitted)

    Returns:
        CompatibilityScorer over the default profile catalog
    """
    return CompatibilityScorer(normalizer=normalizer or get_attribute_normalizer())


def get_enclosure_size_estimator() -> EnclosureSizeEstimator:
    return EnclosureSizeEstimator()


# Process-wide service instance, so the normalized-input cache is shared
_classification_service: Optional[VivariumClassificationService] = None


def get_classification_service() -> VivariumClassificationService:
    """
    Get or create the shared classification service.

    Returns:
        VivariumClassificationService instance
    """
    global _classification_service
    if _classification_service is None:
        normalizer = get_attribute_normalizer()
        _classification_service = VivariumClassificationService(
            normalizer=normalizer,
            scorer=get_compatibility_scorer(normalizer),
            estimator=get_enclosure_size_estimator(),
        )
    return _classification_service


def reset_classification_service() -> None:
    """Drop the shared service (and its cache); the next call builds a new one."""
    global _classification_service
    _classification_service = None
