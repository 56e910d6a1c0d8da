"""Supabase repository for confirmed food entries and the food library."""

from dataclasses import dataclass

from supabase import Client

from calorie_snap.domain.meals import FoodEntryRecord, LibraryFoodUpsert
from calorie_snap.services.meals import MealRepository


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meal persistence."""

    client: Client

    def insert_food_entry(self, record: FoodEntryRecord) -> None:
        """Insert a food entry row."""
        response = (
            self.client.table("food_entries")
            .insert(
                {
                    "user_id": str(record.user_id),
                    "food_name": record.food_name,
                    "calories": record.calories,
                    "protein_g": record.protein_g,
                    "carbs_g": record.carbs_g,
                    "fat_g": record.fat_g,
                    "meal_type": record.meal_type.value,
                    "estimated_weight_g": record.estimated_weight_g,
                    "entry_date": record.entry_date.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food entry")

    def upsert_library_food(self, food: LibraryFoodUpsert) -> None:
        """Upsert the library row keyed by user and food name."""
        self.client.table("user_food_library").upsert(
            {
                "user_id": str(food.user_id),
                "food_name": food.food_name,
                "calories_per_100g": food.calories_per_100g,
                "protein_g_per_100g": food.protein_g_per_100g,
                "carbs_g_per_100g": food.carbs_g_per_100g,
                "fat_g_per_100g": food.fat_g_per_100g,
            },
            on_conflict="user_id,food_name",
        ).execute()
