"""Domain models for saving confirmed meals."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from uuid import UUID


class MealType(StrEnum):
    """Meal slot a confirmed entry is logged against."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class FoodEntryRecord:
    """Scalar snapshot of a confirmed food entry for persistence."""

    user_id: UUID
    food_name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    estimated_weight_g: float
    meal_type: MealType
    entry_date: date


@dataclass(frozen=True)
class LibraryFoodUpsert:
    """Per-100g macros for a user's food library, keyed by (user, food name)."""

    user_id: UUID
    food_name: str
    calories_per_100g: float
    protein_g_per_100g: float
    carbs_g_per_100g: float
    fat_g_per_100g: float


@dataclass(frozen=True)
class MealSaveSummary:
    """Outcome of saving a reviewed recognition session."""

    saved: int
    library_updates: int
    total_calories: float
