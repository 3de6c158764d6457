"""
Ordered keyword rules that map free text to scale buckets.

Rules are evaluated top to bottom and the first match wins, so more specific
phrases ("very high", "semi-closed") sit above the generic words they contain.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional


@dataclass(frozen=True)
class KeywordRule:
    """Match lowercase text by substring or regex and yield a bucket name."""
    result: str
    keywords: tuple[str, ...] = ()
    pattern: Optional[re.Pattern] = None
    context_keywords: tuple[str, ...] = ()
    """Phrases looked up in the secondary (description/care tips) text"""

    def matches(self, text: str, context: str = "") -> bool:
        if any(keyword in text for keyword in self.keywords):
            return True
        if self.pattern is not None and self.pattern.search(text):
            return True
        return any(keyword in context for keyword in self.context_keywords)


@dataclass(frozen=True)
class Rule:
    """Generic (predicate, result) rule over arbitrary evidence."""
    result: str
    predicate: Callable[..., bool] = field(compare=False)

    def applies(self, *evidence) -> bool:
        return self.predicate(*evidence)


def first_keyword_match(
    rules: Iterable[KeywordRule],
    text: str,
    context: str = "",
    default: Optional[str] = None,
) -> Optional[str]:
    """Return the result of the first rule matching text (or context)."""
    for rule in rules:
        if rule.matches(text, context):
            return rule.result
    return default


def first_rule(rules: Iterable[Rule], *evidence, default: Optional[str] = None) -> Optional[str]:
    """Return the result of the first rule whose predicate holds."""
    for rule in rules:
        if rule.applies(*evidence):
            return rule.result
    return default


def _word(*words: str) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b")


HUMIDITY_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("very-high", ("very high", "very-high")),
    KeywordRule("high", ("high",)),
    KeywordRule("moderate", ("moderate", "medium")),
    KeywordRule("very-low", ("very low", "very-low")),
    KeywordRule("low", ("low",)),
    KeywordRule("aquatic", ("submerged", "aquatic")),
)

LIGHT_RULES: tuple[KeywordRule, ...] = (
    # "indirect" must not count as direct sun
    KeywordRule("very-bright", ("very bright", "very-bright", "full sun"), pattern=_word("direct")),
    KeywordRule("bright", ("bright",)),
    KeywordRule("moderate", ("moderate", "medium")),
    KeywordRule("very-low", ("very low", "very-low", "deep shade")),
    KeywordRule("low", ("low", "shade")),
)

AIR_CIRCULATION_FIELD_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("very-high", ("very high", "very-high", "open air", "outdoor")),
    KeywordRule("high", ("high", "well-ventilated", "good air flow")),
    KeywordRule("moderate", ("moderate", "ventilated", "air circulation")),
    KeywordRule("low", ("low", "semi-closed", "partially open")),
    KeywordRule("minimal", ("minimal", "closed", "sealed", "self-contained")),
)

AIR_CIRCULATION_TEXT_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("low", ("semi-closed", "partially open")),
    KeywordRule("minimal", ("closed", "sealed", "self-contained")),
    KeywordRule("very-high", ("open air", "outdoor")),
    KeywordRule("high", ("well-ventilated", "good air flow")),
    KeywordRule("moderate", ("ventilated", "air circulation")),
    KeywordRule("high", ("open",)),
)

AIR_CIRCULATION_LABELS: dict[str, str] = {
    "minimal": "Minimal (Closed/Sealed)",
    "low": "Low (Semi-closed)",
    "moderate": "Moderate (Ventilated)",
    "high": "High (Open/Well-ventilated)",
    "very-high": "Very High (Open Air)",
}

_CONSTANT_WATERING = KeywordRule("constant", ("constantly", "always moist", "always wet"))
_HIGH_WATERING = KeywordRule("high", ("frequently", "keep moist", "high"))
_LOWER_WATERING: tuple[KeywordRule, ...] = (
    KeywordRule("moderate", ("moderate", "regular")),
    KeywordRule("low", ("infrequent", "low")),
    KeywordRule("minimal", ("minimal", "drought")),
)


def water_needs_rules(aquatic: bool) -> tuple[KeywordRule, ...]:
    """
    Watering rules for a plant.

    Aquatic plants need constant water unless the text says semi-aquatic,
    which is caught by the first rule.
    """
    rules = [KeywordRule("high", ("semi-aquatic",)), _CONSTANT_WATERING]
    if aquatic:
        # matches any watering text that does not mention "semi"
        rules.append(KeywordRule("constant", pattern=re.compile(r"^(?!.*semi)", re.DOTALL)))
    rules.append(_HIGH_WATERING)
    rules.extend(_LOWER_WATERING)
    return tuple(rules)


WATER_CIRCULATION_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        "very-high",
        ("very high", "strong current", "fast flow"),
        context_keywords=("strong current", "fast flow"),
    ),
    KeywordRule(
        "high",
        ("high", "good flow", "moderate current"),
        context_keywords=("good flow", "moderate current"),
    ),
    KeywordRule(
        "moderate",
        ("moderate", "gentle flow"),
        context_keywords=("gentle flow",),
    ),
    # "no flow" contains "low"
    KeywordRule("none", ("none", "no flow")),
    KeywordRule(
        "low",
        ("low", "still", "stagnant"),
        context_keywords=("still water", "stagnant"),
    ),
)

WATER_HARDNESS_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("very-soft", ("very soft", "extremely soft")),
    KeywordRule("very-hard", ("very hard", "extremely hard")),
    KeywordRule("moderate", ("moderately hard", "moderate hardness", "medium hard")),
    KeywordRule("soft", pattern=_word("soft")),
    KeywordRule("hard", pattern=_word("hard")),
)

SALINITY_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("marine", ("marine", "saltwater", "seawater")),
    KeywordRule("brackish", ("brackish",)),
    KeywordRule("freshwater", ("freshwater", "fresh water")),
)

DIFFICULTY_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("easy", ("easy",)),
    KeywordRule("moderate", ("moderate",)),
    KeywordRule("hard", pattern=_word("hard")),
)

GROWTH_RATE_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("very-fast", ("very fast", "extremely fast")),
    KeywordRule("very-slow", ("very slow", "extremely slow")),
    KeywordRule(
        "moderate-fast",
        ("fast to moderate", "moderate to fast", "fast-moderate", "moderate-fast"),
    ),
    KeywordRule(
        "slow-moderate",
        ("slow to moderate", "moderate to slow", "slow-moderate", "moderate-slow"),
    ),
    KeywordRule("fast", ("fast",)),
    KeywordRule("moderate", ("moderate", "medium")),
    KeywordRule("slow", ("slow",)),
)


# ============================================================
# Categorical rules over several record fields
# ============================================================

@dataclass(frozen=True)
class PlantText:
    """Lowercased text fields used by the categorical rules."""
    substrate: str = ""
    growth_habit: str = ""
    categories: tuple[str, ...] = ()
    name: str = ""
    description: str = ""
    scientific_name: str = ""
    humidity: str = ""

    def has_category(self, *names: str) -> bool:
        return any(name in self.categories for name in names)


def _aquatic_name(text: PlantText) -> bool:
    return "aquatic" in text.name or (
        "water" in text.name
        and any(word in text.name for word in ("plant", "fern", "moss"))
    )


SUBSTRATE_RULES: tuple[Rule, ...] = (
    Rule("aquatic", lambda t: "aquatic" in t.substrate),
    Rule("aquatic", lambda t: t.growth_habit == "aquatic" or t.has_category("aquatic")),
    Rule("aquatic", lambda t: "submerged" in t.humidity),
    Rule("aquatic", _aquatic_name),
    Rule("aquatic", lambda t: any(
        phrase in t.description
        for phrase in ("fully aquatic", "submerged", "underwater", "aquarium plant")
    )),
    Rule("aquatic", lambda t: "aquatic" in t.scientific_name),
    Rule("epiphytic", lambda t: t.growth_habit == "epiphytic" or "epiphytic" in t.substrate),
    Rule("epiphytic", lambda t: t.has_category("epiphytic", "air-plant", "bromeliad")),
    Rule("dry", lambda t: any(word in t.substrate for word in ("dry", "well-draining", "sand"))),
    Rule("dry", lambda t: t.has_category("succulent", "cactus")),
    Rule("wet", lambda t: any(word in t.substrate for word in ("wet", "waterlogged", "bog"))),
)

SPECIAL_NEEDS_RULES: tuple[Rule, ...] = (
    Rule("carnivorous", lambda t, substrate: t.has_category("carnivorous")),
    Rule("epiphytic", lambda t, substrate: t.has_category("epiphytic", "air-plant")),
    Rule("aquatic", lambda t, substrate: t.has_category("aquatic") or substrate == "aquatic"),
    Rule("succulent", lambda t, substrate: t.has_category("succulent", "cactus")),
    Rule("bromeliad", lambda t, substrate: t.has_category("bromeliad")),
    Rule("orchid", lambda t, substrate: t.has_category("orchid")),
)
