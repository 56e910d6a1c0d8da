"""Domain models for recognized food entries."""

from dataclasses import dataclass, replace

from calorie_snap.domain.confidence import (
    confidence_level,
    is_low_confidence,
    needs_review,
)

NUMERIC_FIELDS: tuple[str, ...] = (
    "estimated_weight_g",
    "calories",
    "protein_g",
    "carbs_g",
    "fat_g",
)
NUTRITION_FIELDS: tuple[str, ...] = ("calories", "protein_g", "carbs_g", "fat_g")


@dataclass(frozen=True)
class ConfidenceValue:
    """A numeric field paired with the recognizer's confidence (0-100)."""

    value: float
    confidence: float

    def with_value(self, value: float) -> "ConfidenceValue":
        """Return a copy with a new value and the same confidence."""
        return ConfidenceValue(value=value, confidence=self.confidence)

    def to_dict(self) -> dict[str, object]:
        return {
            "value": self.value,
            "confidence": self.confidence,
            "level": confidence_level(self.confidence).value,
            "needs_review": needs_review(self),
        }


@dataclass(frozen=True)
class FoodEntry:
    """One recognized or user-added food item."""

    id: str
    food_name: str
    confidence: float
    estimated_weight_g: ConfidenceValue
    calories: ConfidenceValue
    protein_g: ConfidenceValue
    carbs_g: ConfidenceValue
    fat_g: ConfidenceValue

    def field(self, name: str) -> ConfidenceValue:
        """Return a numeric field by name."""
        if name not in NUMERIC_FIELDS:
            raise KeyError(name)
        return getattr(self, name)

    def with_field(self, name: str, value: ConfidenceValue) -> "FoodEntry":
        """Return a copy with one numeric field replaced."""
        if name not in NUMERIC_FIELDS:
            raise KeyError(name)
        return replace(self, **{name: value})

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "id": self.id,
            "food_name": self.food_name,
            "confidence": self.confidence,
            "level": confidence_level(self.confidence).value,
            "low_confidence": is_low_confidence(self),
        }
        for name in NUMERIC_FIELDS:
            payload[name] = self.field(name).to_dict()
        return payload


@dataclass(frozen=True)
class RecognitionResult:
    """Normalized output of a recognition call."""

    foods: list[FoodEntry]
    total_calories: float

    @property
    def is_empty(self) -> bool:
        """True when the model detected no food."""
        return not self.foods

    @property
    def live_total_calories(self) -> float:
        """Sum of entry calories; authoritative over ``total_calories``."""
        return sum(food.calories.value for food in self.foods)

    def to_dict(self) -> dict[str, object]:
        return {
            "foods": [food.to_dict() for food in self.foods],
            "total_calories": self.total_calories,
        }
