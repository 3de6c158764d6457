"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample plant records (tropical, aquatic, succulent, epiphyte)
- Domain services wired with default tables
- The classification service
"""
import pytest

from vivarium_compat.domain.models import PlantRecord
from vivarium_compat.services.domain.attribute_normalizer import AttributeNormalizer
from vivarium_compat.services.domain.compatibility_scorer import CompatibilityScorer
from vivarium_compat.services.domain.enclosure_size_estimator import EnclosureSizeEstimator
from vivarium_compat.services.application.classification_service import (
    VivariumClassificationService,
)


# ============================================================
# Sample Record Fixtures
# ============================================================

@pytest.fixture
def tropical_record() -> dict:
    """Humid-loving terrestrial plant described in free text."""
    return {
        "id": "fittonia-albivenis",
        "name": "Nerve Plant",
        "scientificName": "Fittonia albivenis",
        "humidity": "70-90%",
        "lightRequirements": "Bright indirect light",
        "substrate": "Moist, peat-based mix",
        "watering": "Moderate, keep evenly damp",
        "temperature": "20-25°C",
        "difficulty": "Easy",
        "size": "8-15 cm",
    }


@pytest.fixture
def aquatic_record() -> dict:
    """Aquatic plant with no humidity information."""
    return {
        "id": "anubias-nana",
        "name": "Anubias",
        "substrateType": "aquatic",
        "lightRequirements": "Low to moderate",
        "size": "5-10 cm",
    }


@pytest.fixture
def succulent_record() -> dict:
    """Desert succulent."""
    return {
        "id": "haworthia-cooperi",
        "name": "Haworthia",
        "category": ["succulent"],
        "substrate": "Well-draining sand",
        "humidity": "Low",
        "lightRequirements": "Very-bright",
        "watering": "Minimal, drought tolerant",
        "size": "5-10 cm",
    }


@pytest.fixture
def epiphyte_record() -> dict:
    """Air plant mounted without soil."""
    return {
        "id": "tillandsia-ionantha",
        "name": "Air Plant",
        "category": ["air-plant", "bromeliad"],
        "growthHabit": "Epiphytic",
        "humidity": "Moderate",
        "lightRequirements": "Bright",
        "airCirculation": "High",
        "watering": "Mist regularly",
        "size": "4-8 cm",
    }


@pytest.fixture
def plant_record(tropical_record) -> PlantRecord:
    return PlantRecord.from_raw(tropical_record)


# ============================================================
# Service Fixtures
# ============================================================

@pytest.fixture
def normalizer() -> AttributeNormalizer:
    return AttributeNormalizer()


@pytest.fixture
def scorer(normalizer) -> CompatibilityScorer:
    return CompatibilityScorer(normalizer=normalizer)


@pytest.fixture
def estimator() -> EnclosureSizeEstimator:
    return EnclosureSizeEstimator()


@pytest.fixture
def classification_service(normalizer, scorer, estimator) -> VivariumClassificationService:
    """Service with a small cache so eviction is easy to exercise."""
    return VivariumClassificationService(
        normalizer=normalizer,
        scorer=scorer,
        estimator=estimator,
        cache_size=3,
    )
