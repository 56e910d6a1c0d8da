"""Meal saving service for reviewed food entries."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from calorie_snap.domain.foods import FoodEntry
from calorie_snap.domain.meals import (
    FoodEntryRecord,
    LibraryFoodUpsert,
    MealSaveSummary,
    MealType,
)
from calorie_snap.services.editor import FoodEntryEditor
from calorie_snap.services.portions import round_half_up

logger = logging.getLogger(__name__)


class MealRepository(Protocol):
    """Persistence interface for confirmed food entries."""

    def insert_food_entry(self, record: FoodEntryRecord) -> None:
        """Store one confirmed food entry."""

    def upsert_library_food(self, food: LibraryFoodUpsert) -> None:
        """Create or update the user's library entry for a food name."""


@dataclass
class MealService:
    """Service that turns confirmed entries into persisted records."""

    repository: MealRepository

    def save_entries(
        self,
        user_id: UUID,
        entries: list[FoodEntry],
        meal_type: MealType = MealType.LUNCH,
        entry_date: date | None = None,
    ) -> MealSaveSummary:
        """Persist entries and refresh the user's food library."""
        resolved_date = entry_date or datetime.now(tz=UTC).date()
        library_updates = 0
        for entry in entries:
            self.repository.insert_food_entry(
                to_record(entry, user_id, meal_type, resolved_date)
            )
            library_food = to_library_food(entry, user_id)
            if library_food is None:
                logger.warning(
                    "Skipping library update for %r: weight is zero", entry.food_name
                )
                continue
            self.repository.upsert_library_food(library_food)
            library_updates += 1

        return MealSaveSummary(
            saved=len(entries),
            library_updates=library_updates,
            total_calories=sum(entry.calories.value for entry in entries),
        )

    def save_session(
        self,
        user_id: UUID,
        editor: FoodEntryEditor,
        meal_type: MealType = MealType.LUNCH,
        entry_date: date | None = None,
    ) -> MealSaveSummary:
        """Save the editor's confirmed entries, then clear the session."""
        summary = self.save_entries(
            user_id, editor.confirmed_entries(), meal_type, entry_date
        )
        editor.clear()
        return summary


def to_record(
    entry: FoodEntry, user_id: UUID, meal_type: MealType, entry_date: date
) -> FoodEntryRecord:
    """Resolve confidence wrappers into a scalar record."""
    return FoodEntryRecord(
        user_id=user_id,
        food_name=entry.food_name,
        calories=entry.calories.value,
        protein_g=entry.protein_g.value,
        carbs_g=entry.carbs_g.value,
        fat_g=entry.fat_g.value,
        estimated_weight_g=entry.estimated_weight_g.value,
        meal_type=meal_type,
        entry_date=entry_date,
    )


def to_library_food(entry: FoodEntry, user_id: UUID) -> LibraryFoodUpsert | None:
    """Normalize an entry to per-100g macros, or None for a zero weight."""
    weight = entry.estimated_weight_g.value
    if weight <= 0:
        return None
    return LibraryFoodUpsert(
        user_id=user_id,
        food_name=entry.food_name,
        calories_per_100g=round_half_up(entry.calories.value / weight * 100),
        protein_g_per_100g=round_half_up(entry.protein_g.value / weight * 100, 2),
        carbs_g_per_100g=round_half_up(entry.carbs_g.value / weight * 100, 2),
        fat_g_per_100g=round_half_up(entry.fat_g.value / weight * 100, 2),
    )
