"""Scoring domain models."""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal

AgeGroup = Literal["adult", "child", "senior"]
Diet = Literal["none", "veg", "vegan", "jain"]
DietTag = Literal["veg", "non-veg", "egg"]
Condition = Literal["diabetes", "hypertension"]
Grade = Literal["A", "B", "C", "D", "E"]
Severity = Literal["high", "medium"]

CONDITIONS: frozenset[str] = frozenset({"diabetes", "hypertension"})
ALLERGENS: frozenset[str] = frozenset(
    {"peanut", "milk", "egg", "soy", "gluten", "sesame", "shellfish"}
)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round to ndigits decimals with ties going up, like JavaScript Math.round."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def _as_float(value: object) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient values per 100g. Sodium is in mg, everything else in g or kcal."""

    energy: float = 0.0
    protein: float = 0.0
    carbohydrates: float = 0.0
    sugar: float = 0.0
    fat: float = 0.0
    saturated_fat: float = 0.0
    trans_fat: float = 0.0
    sodium: float = 0.0
    fiber: float | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, object] | None) -> "NutrientProfile":
        """Build a profile from loose data, coercing missing values to 0."""
        values = values or {}
        fiber = values.get("fiber")
        return cls(
            energy=_as_float(values.get("energy")),
            protein=_as_float(values.get("protein")),
            carbohydrates=_as_float(values.get("carbohydrates")),
            sugar=_as_float(values.get("sugar")),
            fat=_as_float(values.get("fat")),
            saturated_fat=_as_float(values.get("saturated_fat")),
            trans_fat=_as_float(values.get("trans_fat")),
            sodium=_as_float(values.get("sodium")),
            fiber=None if fiber is None else _as_float(fiber),
        )


@dataclass(frozen=True)
class Product:
    """A scannable product as seen by the scorer."""

    barcode: str
    nutrients: NutrientProfile = field(default_factory=NutrientProfile)
    allergens: tuple[str, ...] = ()
    additives: tuple[str, ...] = ()
    diet_tag: DietTag | None = None
    name: str | None = None
    brand: str | None = None
    ingredients: str | None = None

    def __post_init__(self) -> None:
        # Accept lists or None from callers while keeping the product hashable.
        object.__setattr__(self, "allergens", _as_tuple(self.allergens))
        object.__setattr__(self, "additives", _as_tuple(self.additives))


@dataclass(frozen=True)
class HealthProfile:
    """A consumer's standing health context."""

    conditions: tuple[str, ...] = ()
    allergies: tuple[str, ...] = ()
    diet: Diet = "none"
    age_group: AgeGroup = "adult"

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", _as_tuple(self.conditions))
        object.__setattr__(self, "allergies", _as_tuple(self.allergies))

    @property
    def is_child(self) -> bool:
        """Return True when child-specific rules apply."""
        return self.age_group == "child"


@dataclass(frozen=True)
class HealthScore:
    """Result of scoring a product for a profile."""

    score: int
    grade: Grade
    reasons: tuple[str, ...]


@dataclass(frozen=True)
class ProfileWarning:
    """Qualitative suitability warning for a profile."""

    type: str
    severity: Severity
    message: str


def _as_tuple(values: Iterable[str] | None) -> tuple[str, ...]:
    if values is None:
        return ()
    return tuple(values)
