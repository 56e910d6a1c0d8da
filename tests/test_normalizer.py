"""Tests for recognition normalization."""

from calorie_snap.domain.foods import NUMERIC_FIELDS, ConfidenceValue
from calorie_snap.services.normalizer import normalize_recognition
from tests.conftest import RICE_RESPONSE


def _fixed_clock() -> float:
    return 1700000000.123


def test_normalizes_confidence_annotated_shape() -> None:
    result = normalize_recognition(RICE_RESPONSE, clock=_fixed_clock)

    assert result.total_calories == 260
    assert len(result.foods) == 1
    food = result.foods[0]
    assert food.id
    assert food.food_name == "米饭"
    assert food.confidence == 85
    assert food.estimated_weight_g == ConfidenceValue(200, 80)
    assert food.calories == ConfidenceValue(260, 85)
    assert food.protein_g == ConfidenceValue(5, 80)
    assert food.carbs_g == ConfidenceValue(56, 85)
    assert food.fat_g == ConfidenceValue(0.5, 75)


def test_normalizing_normalized_output_is_idempotent() -> None:
    first = normalize_recognition(RICE_RESPONSE, clock=_fixed_clock)
    second = normalize_recognition(first.to_dict(), clock=_fixed_clock)

    for name in NUMERIC_FIELDS:
        assert second.foods[0].field(name) == first.foods[0].field(name)
    assert second.foods[0].confidence == first.foods[0].confidence


def test_legacy_item_uses_overall_confidence() -> None:
    payload = {
        "foods": [
            {
                "food_name": "苹果",
                "confidence": 70,
                "estimated_weight_g": 150,
                "calories": 78,
                "protein_g": 0.4,
                "carbs_g": 20.6,
                "fat_g": 0.3,
            }
        ],
        "total_calories": 78,
    }

    food = normalize_recognition(payload).foods[0]

    assert food.calories == ConfidenceValue(78, 70)
    assert food.carbs_g.value == 20.6
    assert all(food.field(name).confidence == 70 for name in NUMERIC_FIELDS)


def test_legacy_item_without_confidence_defaults_to_75() -> None:
    payload = {
        "foods": [
            {
                "food_name": "bread",
                "estimated_weight_g": 50,
                "calories": 130,
                "protein_g": 4,
                "carbs_g": 25,
                "fat_g": 1.5,
            }
        ]
    }

    food = normalize_recognition(payload).foods[0]

    assert food.confidence == 75
    assert all(food.field(name).confidence == 75 for name in NUMERIC_FIELDS)


def test_null_overall_confidence_defaults_to_75() -> None:
    payload = {"foods": [{"food_name": "egg", "confidence": None, "calories": 70}]}

    food = normalize_recognition(payload).foods[0]

    assert food.confidence == 75
    assert food.calories == ConfidenceValue(70, 75)


def test_legacy_sibling_confidence_words_and_numbers() -> None:
    payload = {
        "foods": [
            {
                "food_name": "noodles",
                "confidence": 60,
                "estimated_weight_g": 300,
                "estimated_weight_g_confidence": "low",
                "calories": 420,
                "calories_confidence": "high",
                "protein_g": 12,
                "protein_g_confidence": "medium",
                "carbs_g": 80,
                "carbs_g_confidence": 55,
                "fat_g": 6,
            }
        ]
    }

    food = normalize_recognition(payload).foods[0]

    assert food.estimated_weight_g.confidence == 40
    assert food.calories.confidence == 90
    assert food.protein_g.confidence == 65
    assert food.carbs_g.confidence == 55
    assert food.fat_g.confidence == 60


def test_word_level_overall_confidence() -> None:
    payload = {"foods": [{"food_name": "soup", "confidence": "medium", "fat_g": 2}]}

    food = normalize_recognition(payload).foods[0]

    assert food.confidence == 65
    assert food.fat_g.confidence == 65


def test_ids_are_unique_within_batch() -> None:
    payload = {
        "foods": [
            {"food_name": "a", "calories": 1},
            {"food_name": "b", "calories": 2},
            {"food_name": "c", "calories": 3},
        ]
    }

    result = normalize_recognition(payload, clock=_fixed_clock)

    ids = [food.id for food in result.foods]
    assert len(set(ids)) == 3
    assert ids[0] == "0-1700000000123"


def test_empty_foods_is_a_valid_result() -> None:
    result = normalize_recognition({"foods": [], "total_calories": 0})

    assert result.is_empty
    assert result.total_calories == 0


def test_missing_foods_and_total_degrade_to_empty() -> None:
    result = normalize_recognition({"unexpected": True})

    assert result.foods == []
    assert result.total_calories == 0


def test_unreadable_fields_default_instead_of_failing() -> None:
    payload = {
        "foods": [
            "not-an-item",
            {
                "food_name": "mystery",
                "confidence": 90,
                "estimated_weight_g": {"confidence": 50},
                "calories": "about 200",
                "protein_g": -3,
                "carbs_g": {"value": "12.5", "confidence": 30},
                "fat_g": None,
                "extra": {"ignored": True},
            },
        ],
        "total_calories": "n/a",
    }

    result = normalize_recognition(payload)

    assert len(result.foods) == 1
    food = result.foods[0]
    assert food.estimated_weight_g == ConfidenceValue(0, 90)
    assert food.calories == ConfidenceValue(0, 90)
    assert food.protein_g.value == 0
    assert food.carbs_g == ConfidenceValue(12.5, 30)
    assert food.fat_g == ConfidenceValue(0, 90)
    assert result.total_calories == 0


def test_total_calories_is_passed_through_unmodified() -> None:
    payload = dict(RICE_RESPONSE)
    payload["total_calories"] = 999

    result = normalize_recognition(payload)

    assert result.total_calories == 999
    assert result.live_total_calories == 260


def test_food_name_is_preserved_verbatim() -> None:
    payload = {"foods": [{"food_name": "  宫保鸡丁 (spicy) ", "calories": 300}]}

    food = normalize_recognition(payload).foods[0]

    assert food.food_name == "  宫保鸡丁 (spicy) "
