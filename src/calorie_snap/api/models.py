"""Request models for the HTTP API."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from calorie_snap.domain.foods import ConfidenceValue, FoodEntry
from calorie_snap.domain.meals import MealType


class RecognizeFoodRequest(BaseModel):
    """Body of a recognition request."""

    image: object = None


class ConfidenceValuePayload(BaseModel):
    value: float = Field(ge=0, allow_inf_nan=False)
    confidence: float = Field(ge=0, le=100)

    def to_domain(self) -> ConfidenceValue:
        return ConfidenceValue(value=self.value, confidence=self.confidence)


class FoodEntryPayload(BaseModel):
    """A reviewed food entry as sent back by the client."""

    id: str
    food_name: str
    confidence: float = Field(ge=0, le=100)
    estimated_weight_g: ConfidenceValuePayload
    calories: ConfidenceValuePayload
    protein_g: ConfidenceValuePayload
    carbs_g: ConfidenceValuePayload
    fat_g: ConfidenceValuePayload

    def to_domain(self) -> FoodEntry:
        """Convert to the domain entry."""
        return FoodEntry(
            id=self.id,
            food_name=self.food_name,
            confidence=self.confidence,
            estimated_weight_g=self.estimated_weight_g.to_domain(),
            calories=self.calories.to_domain(),
            protein_g=self.protein_g.to_domain(),
            carbs_g=self.carbs_g.to_domain(),
            fat_g=self.fat_g.to_domain(),
        )


class SaveMealRequest(BaseModel):
    """Body of a meal save request."""

    user_id: UUID
    meal_type: MealType = MealType.LUNCH
    entry_date: date | None = None
    foods: list[FoodEntryPayload]
