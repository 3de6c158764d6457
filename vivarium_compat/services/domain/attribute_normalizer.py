"""
Domain service: normalization of semi-structured plant records.

Turns a raw record into canonical NormalizedInputs using, per dimension:
- Trusted structured {min, max, ideal} ranges
- Explicit numbers parsed from free text (unit-converted)
- Ordered keyword rules mapped onto ScaleTable buckets
- Fixed default buckets
"""
from typing import Any, Optional
from dataclasses import dataclass
import logging

from vivarium_compat.domain.models import (
    SPECIAL_NEEDS,
    SUBSTRATES,
    NormalizedInputs,
    PlantRecord,
    Range,
)
from vivarium_compat.domain.field_values import (
    FieldValue,
    RawText,
    StructuredValue,
    read_field,
)
from vivarium_compat.domain.keyword_rules import (
    AIR_CIRCULATION_FIELD_RULES,
    AIR_CIRCULATION_LABELS,
    AIR_CIRCULATION_TEXT_RULES,
    DIFFICULTY_RULES,
    GROWTH_RATE_RULES,
    HUMIDITY_RULES,
    LIGHT_RULES,
    SALINITY_RULES,
    SPECIAL_NEEDS_RULES,
    SUBSTRATE_RULES,
    WATER_CIRCULATION_RULES,
    WATER_HARDNESS_RULES,
    PlantText,
    first_keyword_match,
    first_rule,
    water_needs_rules,
)
from vivarium_compat.domain.scale_table import DEFAULT_SCALE_TABLE, ScaleTable
from vivarium_compat.utils.text_parsing import (
    BARE_RANGE_PATTERNS,
    BARE_SINGLE_PATTERNS,
    BARE_SPECIFIC_GRAVITY_PATTERNS,
    HARDNESS_RANGE_PATTERNS,
    HARDNESS_SINGLE_PATTERNS,
    PERCENT_RANGE_PATTERNS,
    PPT_RANGE_PATTERNS,
    SOIL_PH_RANGE_PATTERNS,
    SOIL_PH_SINGLE_PATTERNS,
    SPECIFIC_GRAVITY_RANGE_PATTERNS,
    TEMPERATURE_RANGE_PATTERNS,
    TEMPERATURE_SINGLE_PATTERNS,
    WATER_PH_RANGE_PATTERNS,
    WATER_PH_SINGLE_PATTERNS,
    parse_length,
    parse_range,
    parse_single,
    round_half_up,
)
from vivarium_compat.utils.unit_conversion import (
    HARDNESS_BAND,
    HARDNESS_SCALE,
    PH_BAND,
    PH_SCALE,
    SALINITY_PPT_SCALE,
    SPECIFIC_GRAVITY_SCALE,
    TEMPERATURE_BAND,
    TEMPERATURE_SCALE,
    LinearScale,
    length_to_cm,
    range_to_percent,
    value_to_band,
)
from vivarium_compat.config import settings

logger = logging.getLogger(__name__)


@dataclass
class NormalizerConfig:
    """Configuration for attribute normalization."""

    air_circulation_widening: float = settings.air_circulation_widening
    """Points added on each side of a keyword-derived air circulation bucket"""

    default_max_size_cm: float = settings.default_max_size_cm
    """Max size assumed when the size text has no length"""


@dataclass(frozen=True)
class _NumericPatterns:
    """Regexes and unit scale used to read one numeric dimension."""
    range_patterns: tuple
    single_patterns: tuple
    scale: LinearScale
    band: float


_TEMPERATURE = _NumericPatterns(
    TEMPERATURE_RANGE_PATTERNS, TEMPERATURE_SINGLE_PATTERNS, TEMPERATURE_SCALE, TEMPERATURE_BAND
)
_SOIL_PH = _NumericPatterns(SOIL_PH_RANGE_PATTERNS, SOIL_PH_SINGLE_PATTERNS, PH_SCALE, PH_BAND)
_WATER_PH = _NumericPatterns(WATER_PH_RANGE_PATTERNS, WATER_PH_SINGLE_PATTERNS, PH_SCALE, PH_BAND)
_WATER_PH_FIELD = _NumericPatterns(
    WATER_PH_RANGE_PATTERNS + BARE_RANGE_PATTERNS,
    WATER_PH_SINGLE_PATTERNS + BARE_SINGLE_PATTERNS,
    PH_SCALE,
    PH_BAND,
)
_HARDNESS = _NumericPatterns(
    HARDNESS_RANGE_PATTERNS, HARDNESS_SINGLE_PATTERNS, HARDNESS_SCALE, HARDNESS_BAND
)
_HARDNESS_FIELD = _NumericPatterns(
    HARDNESS_RANGE_PATTERNS + BARE_RANGE_PATTERNS,
    HARDNESS_SINGLE_PATTERNS + BARE_SINGLE_PATTERNS,
    HARDNESS_SCALE,
    HARDNESS_BAND,
)


def _text(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _parse_numeric(text: str, patterns: _NumericPatterns) -> Optional[Range]:
    """
    Read an explicit range, else a single value, from text.

    Args:
        text: Lowercased text
        patterns: Patterns and scale for the dimension

    Returns:
        Normalized Range, or None if the text has no usable number
    """
    if not text:
        return None
    bounds = parse_range(text, patterns.range_patterns)
    if bounds:
        return range_to_percent(bounds[0], bounds[1], patterns.scale)
    value = parse_single(text, patterns.single_patterns)
    if value is not None:
        return value_to_band(value, patterns.scale, patterns.band)
    return None


class AttributeNormalizer:
    """
    Domain service converting plant records into NormalizedInputs.

    Total: every malformed or missing field resolves to a documented
    default bucket, so normalize() never raises on bad data.
    """

    def __init__(
        self,
        scale_table: Optional[ScaleTable] = None,
        config: Optional[NormalizerConfig] = None,
    ):
        self.scale_table = scale_table or DEFAULT_SCALE_TABLE
        self.config = config or NormalizerConfig()

    def normalize(self, raw: Any) -> NormalizedInputs:
        """
        Normalize a plant record.

        Args:
            raw: PlantRecord or raw mapping from the data layer

        Returns:
            NormalizedInputs with every Range inside [0, 100]
        """
        record = PlantRecord.from_raw(raw)
        combined = " ".join([_text(record.description), _text(" ".join(record.care_tips))])
        plant_text = PlantText(
            substrate=_text(record.substrate),
            growth_habit=_text(record.growth_habit),
            categories=tuple(record.categories),
            name=_text(record.name),
            description=_text(record.description),
            scientific_name=_text(record.scientific_name),
            humidity=_text(record.humidity),
        )

        substrate = self._resolve_substrate(record, plant_text)
        special_needs = self._resolve_special_needs(record, plant_text, substrate)
        is_aquatic = substrate == "aquatic" or special_needs == "aquatic"

        humidity = self._resolve_humidity(read_field(record.humidity_range, record.humidity), substrate)
        temperature_field = read_field(record.temperature_range, record.temperature)

        fields: dict[str, Any] = dict(
            humidity_range=humidity,
            light_range=self._resolve_light(read_field(record.light_range, record.light_requirements)),
            air_circulation_range=self._resolve_air_circulation(
                read_field(record.air_circulation_range, record.air_circulation),
                combined,
                humidity,
            ),
            water_needs_range=self._resolve_water_needs(
                read_field(record.water_needs_range, record.watering),
                substrate,
            ),
            temperature_range=self._resolve_temperature(temperature_field),
            soil_ph_range=self._resolve_soil_ph(read_field(record.soil_ph_range, combined)),
            difficulty_range=self._resolve_bucket(
                read_field(record.difficulty_range, record.difficulty),
                "difficulty",
                DIFFICULTY_RULES,
            ),
            growth_rate_range=self._resolve_bucket(
                read_field(record.growth_rate_range, record.growth_rate),
                "growth_rate",
                GROWTH_RATE_RULES,
            ),
            substrate=substrate,
            special_needs=special_needs,
            max_size=self._resolve_max_size(record.size),
            desert_adapted=(
                substrate == "dry"
                or special_needs == "succulent"
                or plant_text.has_category("succulent", "cactus")
            ),
        )

        if is_aquatic:
            fields.update(
                water_circulation_range=self._resolve_water_circulation(
                    read_field(record.water_circulation_range, record.water_circulation),
                    combined,
                ),
                water_temperature_range=self._resolve_water_temperature(
                    read_field(record.water_temperature_range, record.water_temperature),
                    temperature_field,
                ),
                water_ph_range=self._resolve_water_ph(
                    read_field(record.water_ph_range, record.water_ph),
                    combined,
                ),
                water_hardness_range=self._resolve_water_hardness(
                    read_field(record.water_hardness_range, record.water_hardness),
                    combined,
                ),
                salinity_range=self._resolve_salinity(
                    read_field(record.salinity_range, record.salinity),
                    combined,
                ),
            )

        inputs = NormalizedInputs(**fields)
        logger.debug(
            f"Normalized {record.identity or '<unnamed>'}: substrate={substrate}, "
            f"special_needs={special_needs}, aquatic={is_aquatic}"
        )
        return inputs

    # ============================================================
    # Categorical fields
    # ============================================================

    def _resolve_substrate(self, record: PlantRecord, text: PlantText) -> str:
        explicit = _text(record.substrate_type)
        if explicit in SUBSTRATES:
            return explicit
        if explicit:
            logger.warning(f"Ignoring unknown substrateType '{record.substrate_type}' for {record.identity}")
        return first_rule(SUBSTRATE_RULES, text, default="moist")

    def _resolve_special_needs(self, record: PlantRecord, text: PlantText, substrate: str) -> str:
        explicit = _text(record.special_needs)
        if explicit in SPECIAL_NEEDS:
            return explicit
        if explicit:
            logger.warning(f"Ignoring unknown specialNeeds '{record.special_needs}' for {record.identity}")
        return first_rule(SPECIAL_NEEDS_RULES, text, substrate, default="none")

    # ============================================================
    # Terrestrial dimensions
    # ============================================================

    def _resolve_humidity(self, value: FieldValue, substrate: str) -> Range:
        if isinstance(value, StructuredValue):
            return value.range
        default = "aquatic" if substrate == "aquatic" else "moderate"
        if isinstance(value, RawText):
            bounds = parse_range(value.text, PERCENT_RANGE_PATTERNS)
            if bounds:
                low, high = bounds
                return Range.from_bounds(low, high, round_half_up((low + high) / 2))
            bucket = first_keyword_match(HUMIDITY_RULES, value.text, default=default)
        else:
            bucket = default
        return self.scale_table.get("humidity", bucket)

    def _resolve_light(self, value: FieldValue) -> Range:
        return self._resolve_bucket(value, "light", LIGHT_RULES)

    def _resolve_air_circulation(self, value: FieldValue, combined: str, humidity: Range) -> Range:
        if isinstance(value, StructuredValue):
            return value.range

        bucket = None
        if isinstance(value, RawText):
            bucket = first_keyword_match(AIR_CIRCULATION_FIELD_RULES, value.text)
        if bucket is None:
            bucket = first_keyword_match(AIR_CIRCULATION_TEXT_RULES, combined)
        if bucket is None:
            bucket = self._air_circulation_from_humidity(humidity)

        base = self.scale_table.get("air_circulation", bucket)
        return base.widen(self.config.air_circulation_widening)

    @staticmethod
    def _air_circulation_from_humidity(humidity: Range) -> str:
        # Wetter plants are assumed to want a more enclosed setup
        midpoint = humidity.midpoint
        if midpoint >= 90:
            return "minimal"
        if midpoint >= 70:
            return "low"
        if midpoint >= 50:
            return "moderate"
        return "high"

    def _resolve_water_needs(self, value: FieldValue, substrate: str) -> Range:
        if isinstance(value, StructuredValue):
            return value.range
        text = value.text if isinstance(value, RawText) else ""
        bucket = first_keyword_match(water_needs_rules(substrate == "aquatic"), text, default="moderate")
        return self.scale_table.get("water_needs", bucket)

    def _resolve_temperature(self, value: FieldValue) -> Range:
        if isinstance(value, StructuredValue):
            return value.range
        if isinstance(value, RawText):
            parsed = _parse_numeric(value.text, _TEMPERATURE)
            if parsed is not None:
                return parsed
        return self.scale_table.get("temperature", "default")

    def _resolve_soil_ph(self, value: FieldValue) -> Range:
        if isinstance(value, StructuredValue):
            return value.range
        if isinstance(value, RawText):
            parsed = _parse_numeric(value.text, _SOIL_PH)
            if parsed is not None:
                return parsed
        return self.scale_table.get("soil_ph", "default")

    def _resolve_bucket(self, value: FieldValue, dimension: str, rules) -> Range:
        """Structured range, else keyword bucket, else the "moderate" bucket."""
        if isinstance(value, StructuredValue):
            return value.range
        bucket = "moderate"
        if isinstance(value, RawText):
            bucket = first_keyword_match(rules, value.text, default="moderate")
        return self.scale_table.get(dimension, bucket)

    def _resolve_max_size(self, size: Optional[str]) -> float:
        parsed = parse_length(_text(size))
        if parsed is None:
            return self.config.default_max_size_cm
        _, upper, unit = parsed
        return length_to_cm(upper, unit)

    # ============================================================
    # Aquatic-only dimensions
    # ============================================================

    def _resolve_water_circulation(self, value: FieldValue, combined: str) -> Range:
        if isinstance(value, StructuredValue):
            return value.range
        text = value.text if isinstance(value, RawText) else ""
        bucket = first_keyword_match(WATER_CIRCULATION_RULES, text, context=combined, default="moderate")
        return self.scale_table.get("water_circulation", bucket)

    def _resolve_water_temperature(self, value: FieldValue, air_temperature: FieldValue) -> Range:
        if isinstance(value, StructuredValue):
            return value.range
        if isinstance(value, RawText):
            parsed = _parse_numeric(value.text, _TEMPERATURE)
            if parsed is not None:
                return parsed
        # Water follows the stated air temperature when nothing more specific exists
        if isinstance(air_temperature, StructuredValue):
            return air_temperature.range
        if isinstance(air_temperature, RawText):
            parsed = _parse_numeric(air_temperature.text, _TEMPERATURE)
            if parsed is not None:
                return parsed
        return self.scale_table.get("water_temperature", "default")

    def _resolve_water_ph(self, value: FieldValue, combined: str) -> Range:
        if isinstance(value, StructuredValue):
            return value.range
        parsed = None
        if isinstance(value, RawText):
            parsed = _parse_numeric(value.text, _WATER_PH_FIELD)
        if parsed is None:
            parsed = _parse_numeric(combined, _WATER_PH)
        return parsed or self.scale_table.get("water_ph", "default")

    def _resolve_water_hardness(self, value: FieldValue, combined: str) -> Range:
        if isinstance(value, StructuredValue):
            return value.range
        field_text = value.text if isinstance(value, RawText) else ""

        parsed = _parse_numeric(field_text, _HARDNESS_FIELD) or _parse_numeric(combined, _HARDNESS)
        if parsed is not None:
            return parsed

        bucket = (
            first_keyword_match(WATER_HARDNESS_RULES, field_text)
            or first_keyword_match(WATER_HARDNESS_RULES, combined)
            or "default"
        )
        return self.scale_table.get("water_hardness", bucket)

    def _resolve_salinity(self, value: FieldValue, combined: str) -> Range:
        if isinstance(value, StructuredValue):
            return value.range
        field_text = value.text if isinstance(value, RawText) else ""

        sources = (
            (field_text, SPECIFIC_GRAVITY_RANGE_PATTERNS + BARE_SPECIFIC_GRAVITY_PATTERNS),
            (combined, SPECIFIC_GRAVITY_RANGE_PATTERNS),
        )
        for text, gravity_patterns in sources:
            if not text:
                continue
            bounds = parse_range(text, gravity_patterns)
            if bounds:
                return range_to_percent(bounds[0], bounds[1], SPECIFIC_GRAVITY_SCALE)
            bounds = parse_range(text, PPT_RANGE_PATTERNS)
            if bounds:
                return range_to_percent(bounds[0], bounds[1], SALINITY_PPT_SCALE)

        bucket = (
            first_keyword_match(SALINITY_RULES, field_text)
            or first_keyword_match(SALINITY_RULES, combined)
            or "freshwater"
        )
        return self.scale_table.get("salinity", bucket)


def describe_air_circulation(air_circulation: Range, scale_table: Optional[ScaleTable] = None) -> str:
    """
    Human label for an air circulation range.

    Args:
        air_circulation: Normalized air circulation range
        scale_table: Bucket table (defaults to DEFAULT_SCALE_TABLE)

    Returns:
        Label of the bucket whose ideal is closest to the range's ideal
    """
    buckets = (scale_table or DEFAULT_SCALE_TABLE).buckets("air_circulation")
    bucket = min(buckets, key=lambda name: abs(buckets[name].ideal - air_circulation.ideal))
    return AIR_CIRCULATION_LABELS[bucket]
