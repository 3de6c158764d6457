"""
Catalog of the nine vivarium archetypes a plant can be matched against.

Target ranges use the same 0-100 normalized scale as NormalizedInputs.
Declaration order is significant: it breaks ties between equal scores.
"""
from collections.abc import Iterable, Iterator
from typing import Optional

from vivarium_compat.domain.models import EnvironmentProfile, Range


def _r(low: float, high: float, ideal: float) -> Range:
    return Range(min=low, max=high, ideal=ideal)


# Tropical room-temperature band and slightly acidic soil shared by most profiles
_TROPICAL_TEMPERATURE = _r(36, 50, 42)
_ACIDIC_SOIL = _r(35.7, 57.1, 46.4)

# Soft, slightly acidic fresh water
_FRESH_WATER = dict(
    water_temperature=_r(40, 50, 45),
    water_ph=_r(46.4, 53.6, 50),
    water_hardness=_r(0, 50, 25),
    salinity=_r(0, 5, 0),
)

_TERRARIUM_SUBSTRATES = frozenset({"moist", "wet", "epiphytic"})
_WATER_EDGE_SUBSTRATES = frozenset({"wet", "aquatic", "moist", "epiphytic"})


OPEN_TERRARIUM = EnvironmentProfile(
    key="open-terrarium",
    name="Open Terrarium",
    summary="Humid glass enclosure with a ventilated top.",
    humidity=_r(70, 100, 85),
    light=_r(20, 80, 50),
    air_circulation=_r(40, 60, 50),
    substrates=_TERRARIUM_SUBSTRATES,
    water_needs=_r(40, 100, 70),
    temperature=_TROPICAL_TEMPERATURE,
    difficulty=_r(30, 70, 50),
    soil_ph=_ACIDIC_SOIL,
    specialties=frozenset({"epiphytic", "carnivorous"}),
    related_specialties=frozenset({"bromeliad", "orchid"}),
)

CLOSED_TERRARIUM = EnvironmentProfile(
    key="closed-terrarium",
    name="Closed Terrarium",
    summary="Sealed, self-watering enclosure with stagnant humid air.",
    humidity=_r(60, 100, 80),
    light=_r(20, 70, 40),
    air_circulation=_r(0, 30, 20),
    substrates=_TERRARIUM_SUBSTRATES,
    water_needs=_r(40, 100, 70),
    temperature=_TROPICAL_TEMPERATURE,
    difficulty=_r(20, 50, 35),
    soil_ph=_ACIDIC_SOIL,
    specialties=frozenset({"epiphytic", "carnivorous"}),
    related_specialties=frozenset({"bromeliad", "orchid"}),
)

PALUDARIUM = EnvironmentProfile(
    key="paludarium",
    name="Paludarium",
    summary="Half land, half water enclosure with a still pool.",
    humidity=_r(70, 100, 90),
    light=_r(20, 100, 60),
    air_circulation=_r(20, 60, 50),
    substrates=_WATER_EDGE_SUBSTRATES,
    water_needs=_r(40, 100, 80),
    temperature=_TROPICAL_TEMPERATURE,
    difficulty=_r(50, 90, 70),
    soil_ph=_ACIDIC_SOIL,
    water_body=True,
    water_circulation=_r(10, 30, 20),
    **_FRESH_WATER,
    specialties=frozenset({"aquatic", "carnivorous"}),
)

AERARIUM = EnvironmentProfile(
    key="aerarium",
    name="Aerarium",
    summary="Bright, airy display for mounted air plants and epiphytes.",
    humidity=_r(50, 90, 70),
    light=_r(40, 100, 70),
    air_circulation=_r(60, 100, 80),
    substrates=frozenset({"epiphytic"}),
    water_needs=_r(20, 60, 40),
    temperature=_TROPICAL_TEMPERATURE,
    difficulty=_r(50, 90, 70),
    soil_ph=_ACIDIC_SOIL,
    required_trait="epiphytic",
    specialties=frozenset({"epiphytic"}),
    related_specialties=frozenset({"bromeliad", "orchid"}),
)

DESERTERIUM = EnvironmentProfile(
    key="deserterium",
    name="Deserterium",
    summary="Dry, sunny enclosure with fast-draining mineral substrate.",
    humidity=_r(20, 50, 30),
    light=_r(60, 100, 90),
    air_circulation=_r(60, 100, 80),
    substrates=frozenset({"dry"}),
    water_needs=_r(0, 30, 15),
    temperature=_r(40, 60, 50),
    difficulty=_r(30, 60, 45),
    soil_ph=_r(42.9, 64.3, 53.6),
    specialties=frozenset({"succulent"}),
)

AQUARIUM = EnvironmentProfile(
    key="aquarium",
    name="Aquarium",
    summary="Fully submerged freshwater tank.",
    humidity=_r(100, 100, 100),
    light=_r(20, 70, 50),
    air_circulation=_r(0, 30, 20),
    substrates=frozenset({"aquatic"}),
    water_needs=_r(80, 100, 90),
    temperature=_TROPICAL_TEMPERATURE,
    difficulty=_r(50, 90, 70),
    soil_ph=_ACIDIC_SOIL,
    water_body=True,
    submerged=True,
    water_circulation=_r(0, 100, 50),
    **_FRESH_WATER,
    required_trait="aquatic",
    specialties=frozenset({"aquatic"}),
)

RIPARIUM = EnvironmentProfile(
    key="riparium",
    name="Riparium",
    summary="Riverbank setup with emergent plants over flowing water.",
    humidity=_r(70, 100, 85),
    light=_r(20, 70, 50),
    air_circulation=_r(60, 100, 80),
    substrates=_WATER_EDGE_SUBSTRATES,
    water_needs=_r(60, 100, 80),
    temperature=_TROPICAL_TEMPERATURE,
    difficulty=_r(50, 90, 70),
    soil_ph=_ACIDIC_SOIL,
    water_body=True,
    water_circulation=_r(30, 80, 55),
    **_FRESH_WATER,
)

INDOOR = EnvironmentProfile(
    key="indoor",
    name="Indoor",
    summary="Ordinary houseplant conditions on a windowsill or shelf.",
    humidity=_r(30, 70, 50),
    light=_r(40, 100, 70),
    air_circulation=_r(60, 100, 80),
    substrates=frozenset({"moist", "dry"}),
    water_needs=_r(20, 60, 40),
    temperature=_TROPICAL_TEMPERATURE,
    difficulty=_r(20, 60, 40),
    soil_ph=_ACIDIC_SOIL,
    growth_rate=_r(0, 100, 50),
)

OUTDOOR = EnvironmentProfile(
    key="outdoor",
    name="Outdoor",
    summary="Garden or balcony exposed to weather and full sun.",
    humidity=_r(20, 80, 50),
    light=_r(60, 100, 90),
    air_circulation=_r(80, 100, 95),
    substrates=frozenset({"moist", "dry", "wet"}),
    water_needs=_r(10, 70, 40),
    temperature=_r(20, 80, 50),
    difficulty=_r(20, 60, 40),
    soil_ph=_r(28.6, 64.3, 46.4),
)


class EnvironmentProfileCatalog:
    """Immutable ordered collection of environment profiles."""

    def __init__(self, profiles: Iterable[EnvironmentProfile]):
        self._profiles: tuple[EnvironmentProfile, ...] = tuple(profiles)
        keys = [p.key for p in self._profiles]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate profile keys in catalog: {keys}")
        self._by_key = {p.key: p for p in self._profiles}
        self._by_name = {p.name: p for p in self._profiles}
        self._index = {p.key: i for i, p in enumerate(self._profiles)}

    def __iter__(self) -> Iterator[EnvironmentProfile]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def get(self, key: str) -> EnvironmentProfile:
        """
        Look up a profile by key.

        Raises:
            KeyError: If no profile has this key
        """
        return self._by_key[key]

    def by_name(self, name: str) -> Optional[EnvironmentProfile]:
        return self._by_name.get(name)

    def index(self, key: str) -> int:
        """Declaration position, used for deterministic tie-breaking."""
        return self._index[key]

    @property
    def names(self) -> list[str]:
        return [p.name for p in self._profiles]


DEFAULT_CATALOG = EnvironmentProfileCatalog((
    OPEN_TERRARIUM,
    CLOSED_TERRARIUM,
    PALUDARIUM,
    AERARIUM,
    DESERTERIUM,
    AQUARIUM,
    RIPARIUM,
    INDOOR,
    OUTDOOR,
))
