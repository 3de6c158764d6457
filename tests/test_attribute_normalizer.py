"""
Unit tests for plant attribute normalization.

Tests cover:
- Structured range trust and sanitizing
- Free-text parsing with unit conversion
- Keyword bucket mapping and defaults
- Substrate / special-needs precedence
- Aquatic-only ranges
- Malformed input handling
"""
import pytest
import numpy as np

from vivarium_compat.domain.models import AQUATIC_ONLY_FIELDS, NormalizedInputs, Range
from vivarium_compat.services.domain.attribute_normalizer import (
    AttributeNormalizer,
    NormalizerConfig,
    describe_air_circulation,
)


def assert_range(actual: Range, low: float, high: float, ideal: float):
    assert np.isclose(actual.min, low, atol=0.01), actual
    assert np.isclose(actual.max, high, atol=0.01), actual
    assert np.isclose(actual.ideal, ideal, atol=0.01), actual


def all_ranges(inputs: NormalizedInputs) -> list[Range]:
    return [value for value in dict(inputs).values() if isinstance(value, Range)]


# ============================================================
# Reference Records
# ============================================================

class TestReferenceRecords:
    """End-to-end normalization of typical catalog records."""

    def test_tropical_plant(self, normalizer, tropical_record):
        """Free-text tropical record resolves every dimension."""
        inputs = normalizer.normalize(tropical_record)

        assert_range(inputs.humidity_range, 70, 90, 80)
        assert_range(inputs.light_range, 60, 80, 70)
        assert_range(inputs.water_needs_range, 40, 60, 50)
        assert_range(inputs.temperature_range, 40, 50, 45)
        assert_range(inputs.difficulty_range, 0, 30, 15)
        assert inputs.substrate == "moist"
        assert inputs.special_needs == "none"
        assert inputs.max_size == 15
        assert inputs.desert_adapted is False

    def test_air_circulation_inferred_from_humidity(self, normalizer, tropical_record):
        """Humidity midpoint 80 maps to the low bucket, widened by 10 points."""
        inputs = normalizer.normalize(tropical_record)

        assert_range(inputs.air_circulation_range, 10, 50, 30)

    def test_aquatic_plant_without_humidity(self, normalizer, aquatic_record):
        """Aquatic substrate implies submerged humidity and constant water."""
        inputs = normalizer.normalize(aquatic_record)

        assert inputs.substrate == "aquatic"
        assert inputs.special_needs == "aquatic"
        assert_range(inputs.humidity_range, 100, 100, 100)
        assert_range(inputs.water_needs_range, 80, 100, 90)
        assert_range(inputs.air_circulation_range, 0, 30, 10)

    def test_aquatic_defaults(self, normalizer, aquatic_record):
        """Aquatic ranges fall back to their documented defaults."""
        inputs = normalizer.normalize(aquatic_record)

        assert_range(inputs.water_circulation_range, 30, 60, 45)
        assert_range(inputs.water_temperature_range, 44, 52, 48)
        assert_range(inputs.water_ph_range, 50, 57.1, 53.6)
        assert_range(inputs.water_hardness_range, 6.67, 40, 23.33)
        assert_range(inputs.salinity_range, 0, 5, 2.5)

    def test_succulent(self, normalizer, succulent_record):
        """Succulent category and sandy substrate make a desert plant."""
        inputs = normalizer.normalize(succulent_record)

        assert inputs.substrate == "dry"
        assert inputs.special_needs == "succulent"
        assert inputs.desert_adapted is True
        assert_range(inputs.humidity_range, 35, 50, 40)
        assert_range(inputs.light_range, 80, 100, 90)
        assert_range(inputs.water_needs_range, 0, 20, 10)

    def test_epiphyte(self, normalizer, epiphyte_record):
        """Epiphytic growth habit wins over the bromeliad category."""
        inputs = normalizer.normalize(epiphyte_record)

        assert inputs.substrate == "epiphytic"
        assert inputs.special_needs == "epiphytic"
        assert inputs.is_epiphytic
        assert_range(inputs.air_circulation_range, 50, 90, 70)


# ============================================================
# Invariants
# ============================================================

class TestInvariants:
    """Properties that hold for every record."""

    @pytest.mark.parametrize("raw", [
        {},
        {"humidity": "95-100%", "substrateType": "aquatic"},
        {"humidityRange": {"min": -20, "max": 150}},
        {"temperature": "45-60°C", "description": "soil pH 1-14"},
        {"name": "Water Moss", "careTips": ["salinity 1.000-1.030", "40-50 dGH"]},
        {"lightRange": {"min": 80, "max": 20, "ideal": 500}},
    ])
    def test_ranges_within_scale(self, normalizer, raw):
        """Every produced range satisfies 0 <= min <= ideal <= max <= 100."""
        inputs = normalizer.normalize(raw)

        for r in all_ranges(inputs):
            assert 0 <= r.min <= r.ideal <= r.max <= 100

    def test_idempotent(self, normalizer, tropical_record, aquatic_record):
        """Normalizing the same record twice yields identical inputs."""
        for raw in (tropical_record, aquatic_record):
            assert normalizer.normalize(raw) == normalizer.normalize(raw)

    def test_record_not_mutated(self, normalizer, tropical_record):
        """The source record is left untouched."""
        snapshot = dict(tropical_record)
        normalizer.normalize(tropical_record)

        assert tropical_record == snapshot

    @pytest.mark.parametrize("raw, aquatic", [
        ({"substrateType": "aquatic"}, True),
        ({"specialNeeds": "aquatic", "substrateType": "wet"}, True),
        ({"category": ["aquatic"]}, True),
        ({"substrate": "moist"}, False),
        ({"category": ["succulent"]}, False),
    ])
    def test_aquatic_ranges_present_iff_aquatic(self, normalizer, raw, aquatic):
        """Water ranges exist exactly when the plant is aquatic."""
        inputs = normalizer.normalize(raw)

        present = [getattr(inputs, name) is not None for name in AQUATIC_ONLY_FIELDS]
        assert inputs.is_aquatic is aquatic
        assert all(present) if aquatic else not any(present)


# ============================================================
# Structured Ranges
# ============================================================

class TestStructuredRanges:
    """Pre-normalized ranges supplied by the data layer."""

    def test_trusted_with_midpoint_ideal(self, normalizer):
        """Missing ideal defaults to the midpoint."""
        inputs = normalizer.normalize({"humidityRange": {"min": 60, "max": 80}, "humidity": "low"})

        assert_range(inputs.humidity_range, 60, 80, 70)

    def test_reversed_and_out_of_scale_bounds(self, normalizer):
        """Bounds are ordered and clamped into [0, 100]."""
        inputs = normalizer.normalize({"lightRange": {"min": 150, "max": -5}})

        assert_range(inputs.light_range, 0, 100, 50)

    def test_air_circulation_not_widened(self, normalizer):
        """Structured air circulation is used as-is."""
        inputs = normalizer.normalize({"airCirculationRange": {"min": 20, "max": 40, "ideal": 25}})

        assert_range(inputs.air_circulation_range, 20, 40, 25)

    def test_non_numeric_bounds_fall_back_to_text(self, normalizer):
        """A range with a non-numeric bound is ignored in favour of text."""
        inputs = normalizer.normalize({
            "humidityRange": {"min": "high", "max": 90},
            "humidity": "High",
        })

        assert_range(inputs.humidity_range, 70, 90, 80)

    def test_boolean_bounds_rejected(self, normalizer):
        """Booleans are not numbers for structured ranges."""
        inputs = normalizer.normalize({"waterNeedsRange": {"min": True, "max": 1}})

        assert_range(inputs.water_needs_range, 40, 60, 50)

    def test_growth_rate_and_difficulty_ranges(self, normalizer):
        """Supplementary dimensions also trust structured ranges."""
        inputs = normalizer.normalize({
            "growthRateRange": {"min": 10, "max": 30, "ideal": 20},
            "difficultyRange": {"min": 70, "max": 90},
        })

        assert_range(inputs.growth_rate_range, 10, 30, 20)
        assert_range(inputs.difficulty_range, 70, 90, 80)


# ============================================================
# Keyword Buckets
# ============================================================

class TestKeywordBuckets:
    """Free text mapped onto scale buckets."""

    @pytest.mark.parametrize("text, expected", [
        ("Very high", (90, 100, 95)),
        ("High humidity", (70, 90, 80)),
        ("Medium", (50, 70, 60)),
        ("Very low", (20, 35, 25)),
        ("Low", (35, 50, 40)),
        ("Submerged", (100, 100, 100)),
        ("", (50, 70, 60)),
    ])
    def test_humidity(self, normalizer, text, expected):
        inputs = normalizer.normalize({"humidity": text})
        assert_range(inputs.humidity_range, *expected)

    def test_humidity_range_rounds_half_up(self, normalizer):
        """Ideal of "65-80%" rounds 72.5 up to 73."""
        inputs = normalizer.normalize({"humidity": "65-80%"})
        assert_range(inputs.humidity_range, 65, 80, 73)

    @pytest.mark.parametrize("text, expected", [
        ("Full sun", (80, 100, 90)),
        ("Direct sunlight", (80, 100, 90)),
        ("Bright indirect", (60, 80, 70)),
        ("Medium light", (40, 60, 50)),
        ("Deep shade", (0, 20, 10)),
        ("Partial shade", (20, 40, 30)),
        ("", (40, 60, 50)),
    ])
    def test_light(self, normalizer, text, expected):
        inputs = normalizer.normalize({"lightRequirements": text})
        assert_range(inputs.light_range, *expected)

    @pytest.mark.parametrize("raw, expected", [
        ({"airCirculation": "Very high"}, (70, 100, 90)),
        ({"airCirculation": "Semi-closed"}, (10, 50, 30)),
        ({"airCirculation": "Closed"}, (0, 30, 10)),
        ({"description": "Thrives in a sealed jar"}, (0, 30, 10)),
        ({"careTips": ["Best kept semi-closed"]}, (10, 50, 30)),
        ({"description": "Grows well outdoor"}, (70, 100, 90)),
        ({"humidity": "very high"}, (0, 30, 10)),
        ({"humidity": "low"}, (50, 90, 70)),
    ])
    def test_air_circulation(self, normalizer, raw, expected):
        inputs = normalizer.normalize(raw)
        assert_range(inputs.air_circulation_range, *expected)

    def test_air_circulation_widening_configurable(self):
        """Widening comes from the normalizer config."""
        normalizer = AttributeNormalizer(config=NormalizerConfig(air_circulation_widening=0))
        inputs = normalizer.normalize({"airCirculation": "moderate"})

        assert_range(inputs.air_circulation_range, 40, 60, 50)

    @pytest.mark.parametrize("raw, expected", [
        ({"watering": "Semi-aquatic, keep wet"}, (60, 80, 70)),
        ({"watering": "Keep always moist"}, (80, 100, 90)),
        ({"watering": "Water frequently"}, (60, 80, 70)),
        ({"watering": "Regular watering"}, (40, 60, 50)),
        ({"watering": "Infrequent"}, (20, 40, 30)),
        ({"watering": "Drought tolerant"}, (0, 20, 10)),
        ({"watering": "Weekly", "substrateType": "aquatic"}, (80, 100, 90)),
        ({"watering": "Semi-submerged", "substrateType": "aquatic"}, (40, 60, 50)),
    ])
    def test_water_needs(self, normalizer, raw, expected):
        inputs = normalizer.normalize(raw)
        assert_range(inputs.water_needs_range, *expected)

    @pytest.mark.parametrize("text, expected", [
        ("Easy", (0, 30, 15)),
        ("Moderate", (40, 60, 50)),
        ("Hard", (70, 100, 85)),
        ("Unknown", (40, 60, 50)),
    ])
    def test_difficulty(self, normalizer, text, expected):
        inputs = normalizer.normalize({"difficulty": text})
        assert_range(inputs.difficulty_range, *expected)

    @pytest.mark.parametrize("text, expected", [
        ("Very slow", (0, 20, 10)),
        ("Slow", (20, 40, 30)),
        ("Slow to moderate", (30, 50, 40)),
        ("Moderate", (40, 60, 50)),
        ("Moderate to fast", (50, 80, 65)),
        ("Fast", (60, 80, 70)),
        ("Very fast", (80, 100, 90)),
    ])
    def test_growth_rate(self, normalizer, text, expected):
        inputs = normalizer.normalize({"growthRate": text})
        assert_range(inputs.growth_rate_range, *expected)

    def test_describe_air_circulation(self, normalizer, tropical_record):
        """Labels follow the closest bucket ideal."""
        inputs = normalizer.normalize(tropical_record)

        assert describe_air_circulation(inputs.air_circulation_range) == "Low (Semi-closed)"
        assert describe_air_circulation(Range(min=80, max=100, ideal=90)) == "Very High (Open Air)"


# ============================================================
# Numeric Text Parsing
# ============================================================

class TestNumericText:
    """Explicit numbers in text converted to the normalized scale."""

    def test_single_temperature_band(self, normalizer):
        """A single Celsius value becomes a +/-5 point band."""
        inputs = normalizer.normalize({"temperature": "Around 24°C"})
        assert_range(inputs.temperature_range, 43, 53, 48)

    def test_temperature_default(self, normalizer):
        inputs = normalizer.normalize({"temperature": "Warm"})
        assert_range(inputs.temperature_range, 40, 50, 45)

    def test_soil_ph_range(self, normalizer):
        inputs = normalizer.normalize({"description": "Prefers soil pH 5.5-6.5"})
        assert_range(inputs.soil_ph_range, 39.29, 46.43, 42.86)

    def test_soil_ph_single(self, normalizer):
        """A single soil pH becomes a +/-3 point band."""
        inputs = normalizer.normalize({"careTips": ["Keep soil pH 6"]})
        assert_range(inputs.soil_ph_range, 39.86, 45.86, 42.86)

    def test_soil_ph_default(self, normalizer):
        inputs = normalizer.normalize({})
        assert_range(inputs.soil_ph_range, 42.9, 50, 46.4)

    def test_water_ph_from_care_tips(self, normalizer):
        inputs = normalizer.normalize({
            "substrateType": "aquatic",
            "careTips": ["Keep water pH 6.5-7.5"],
        })
        assert_range(inputs.water_ph_range, 46.43, 53.57, 50)

    def test_water_ph_field_without_keyword(self, normalizer):
        """The dedicated field may hold bare numbers."""
        inputs = normalizer.normalize({"substrateType": "aquatic", "waterPh": "6.0-7.0"})
        assert_range(inputs.water_ph_range, 42.86, 50, 46.43)

    def test_hardness_range(self, normalizer):
        inputs = normalizer.normalize({"substrateType": "aquatic", "description": "Tolerates 4-8 dGH"})
        assert_range(inputs.water_hardness_range, 13.33, 26.67, 20)

    def test_hardness_single(self, normalizer):
        """A single hardness becomes a +/-5 point band."""
        inputs = normalizer.normalize({"substrateType": "aquatic", "careTips": ["hardness 6"]})
        assert_range(inputs.water_hardness_range, 15, 25, 20)

    def test_hardness_descriptive(self, normalizer):
        inputs = normalizer.normalize({"substrateType": "aquatic", "waterHardness": "Very soft"})
        assert_range(inputs.water_hardness_range, 0, 6.67, 3.33)

    def test_salinity_specific_gravity(self, normalizer):
        inputs = normalizer.normalize({
            "substrateType": "aquatic",
            "description": "Brackish, salinity 1.005-1.010",
        })
        assert_range(inputs.salinity_range, 16.67, 33.33, 25)

    def test_salinity_ppt(self, normalizer):
        inputs = normalizer.normalize({"substrateType": "aquatic", "careTips": ["5-10 ppt"]})
        assert_range(inputs.salinity_range, 12.5, 25, 18.75)

    @pytest.mark.parametrize("text, expected", [
        ("Marine reef tank", (75, 100, 87.5)),
        ("Brackish estuaries", (12.5, 75, 43.75)),
        ("Freshwater streams", (0, 5, 2.5)),
    ])
    def test_salinity_keywords(self, normalizer, text, expected):
        inputs = normalizer.normalize({"substrateType": "aquatic", "description": text})
        assert_range(inputs.salinity_range, *expected)

    def test_water_temperature_follows_air_temperature(self, normalizer):
        inputs = normalizer.normalize({"substrateType": "aquatic", "temperature": "22-26°C"})
        assert_range(inputs.water_temperature_range, 44, 52, 48)

    def test_water_temperature_field_wins(self, normalizer):
        inputs = normalizer.normalize({
            "substrateType": "aquatic",
            "temperature": "22-26°C",
            "waterTemperature": "18°C",
        })
        assert_range(inputs.water_temperature_range, 31, 41, 36)

    @pytest.mark.parametrize("raw, expected", [
        ({"waterCirculation": "No flow"}, (0, 10, 5)),
        ({"waterCirculation": "Low"}, (10, 30, 20)),
        ({"description": "Found in strong current"}, (80, 100, 90)),
        ({"careTips": ["Prefers still water"]}, (10, 30, 20)),
    ])
    def test_water_circulation(self, normalizer, raw, expected):
        inputs = normalizer.normalize({"substrateType": "aquatic", **raw})
        assert_range(inputs.water_circulation_range, *expected)

    @pytest.mark.parametrize("size, expected", [
        ("10-20cm", 20),
        ("12 cm", 12),
        ("1.5 m", 150),
        ("40 mm", 4),
        ("1-2 meters", 200),
        ("3 metres", 300),
        ("Small", 30),
        (None, 30),
    ])
    def test_max_size(self, normalizer, size, expected):
        inputs = normalizer.normalize({"size": size})
        assert np.isclose(inputs.max_size, expected)


# ============================================================
# Substrate and Special Needs
# ============================================================

class TestCategoricalFields:
    """Substrate and special-needs precedence."""

    def test_explicit_substrate_wins(self, normalizer):
        inputs = normalizer.normalize({"substrateType": "Dry", "category": ["aquatic"]})
        assert inputs.substrate == "dry"

    def test_unknown_explicit_substrate_ignored(self, normalizer):
        inputs = normalizer.normalize({"substrateType": "rocky", "substrate": "bog soil"})
        assert inputs.substrate == "wet"

    @pytest.mark.parametrize("raw", [
        {"substrate": "Aquatic"},
        {"growthHabit": "aquatic"},
        {"humidity": "Submerged"},
        {"name": "Java Water Fern"},
        {"name": "Aquatic Moss"},
        {"description": "A fully aquatic stem plant"},
        {"description": "Popular aquarium plant"},
    ])
    def test_aquatic_heuristics(self, normalizer, raw):
        assert normalizer.normalize(raw).substrate == "aquatic"

    def test_aquatic_beats_epiphytic(self, normalizer):
        inputs = normalizer.normalize({"growthHabit": "epiphytic", "description": "grows underwater"})
        assert inputs.substrate == "aquatic"

    @pytest.mark.parametrize("raw, expected", [
        ({"category": ["bromeliad"]}, "epiphytic"),
        ({"substrate": "Mounted, epiphytic"}, "epiphytic"),
        ({"category": ["cactus"]}, "dry"),
        ({"substrate": "Gritty, well-draining"}, "dry"),
        ({"substrate": "Waterlogged peat"}, "wet"),
        ({}, "moist"),
    ])
    def test_substrate_chain(self, normalizer, raw, expected):
        assert normalizer.normalize(raw).substrate == expected

    @pytest.mark.parametrize("raw, expected", [
        ({"specialNeeds": "Orchid"}, "orchid"),
        ({"category": ["carnivorous", "epiphytic"]}, "carnivorous"),
        ({"category": ["air-plant"]}, "epiphytic"),
        ({"substrateType": "aquatic"}, "aquatic"),
        ({"category": ["cactus"]}, "succulent"),
        ({"category": ["bromeliad"]}, "bromeliad"),
        ({"category": ["Orchid"]}, "orchid"),
        ({"specialNeeds": "unknown"}, "none"),
    ])
    def test_special_needs_chain(self, normalizer, raw, expected):
        assert normalizer.normalize(raw).special_needs == expected

    def test_desert_adapted_from_cactus_category(self, normalizer):
        inputs = normalizer.normalize({"category": ["Cactus"], "substrateType": "moist"})
        assert inputs.desert_adapted is True


# ============================================================
# Malformed Input
# ============================================================

class TestMalformedInput:
    """Bad data resolves to defaults instead of raising."""

    @pytest.mark.parametrize("raw", [None, "Fittonia", 42, ["humidity", "high"]])
    def test_non_mapping_record(self, normalizer, raw):
        inputs = normalizer.normalize(raw)

        assert inputs.substrate == "moist"
        assert_range(inputs.humidity_range, 50, 70, 60)

    def test_wrong_typed_fields(self, normalizer):
        inputs = normalizer.normalize({
            "humidity": 42,
            "category": "succulent",
            "careTips": {"tip": "sealed"},
            "lightRequirements": ["bright"],
            "size": {"cm": 10},
        })

        assert_range(inputs.humidity_range, 50, 70, 60)
        assert_range(inputs.light_range, 40, 60, 50)
        assert inputs.substrate == "moist"
        assert inputs.max_size == 30

    def test_record_fields_export(self, normalizer, tropical_record):
        """Exported fields use camelCase keys and omit water ranges for land plants."""
        fields = normalizer.normalize(tropical_record).to_record_fields()

        assert fields["humidityRange"] == {"min": 70, "max": 90, "ideal": 80}
        assert fields["specialNeeds"] == "none"
        assert "waterPhRange" not in fields
