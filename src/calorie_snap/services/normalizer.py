"""Normalize raw vision responses into confidence-annotated food entries."""

import logging
import time
from collections.abc import Callable

from pydantic import ValidationError

from calorie_snap.domain.confidence import DEFAULT_CONFIDENCE
from calorie_snap.domain.foods import (
    NUMERIC_FIELDS,
    ConfidenceValue,
    FoodEntry,
    RecognitionResult,
)
from calorie_snap.domain.recognition import (
    RawConfidenceValue,
    RawFoodItem,
    RawRecognition,
)

logger = logging.getLogger(__name__)


def normalize_recognition(
    payload: dict[str, object],
    clock: Callable[[], float] = time.time,
) -> RecognitionResult:
    """Convert a parsed, non-error model response into a RecognitionResult.

    Accepts both the per-field confidence shape and the legacy bare-number
    shape. Never raises: unreadable items are skipped and unreadable fields
    default to zero with the item's overall confidence.
    """
    envelope = RawRecognition.model_validate(payload)
    stamp = int(clock() * 1000)
    foods: list[FoodEntry] = []
    for ordinal, raw_item in enumerate(envelope.foods):
        item = _read_item(raw_item)
        if item is None:
            logger.warning("Skipping unreadable food item at position %s", ordinal)
            continue
        foods.append(normalize_item(item, entry_id=f"{ordinal}-{stamp}"))

    total = envelope.total_calories
    if total is None:
        total = sum(food.calories.value for food in foods)
    return RecognitionResult(foods=foods, total_calories=total)


def normalize_item(item: RawFoodItem, entry_id: str) -> FoodEntry:
    """Build a FoodEntry from one validated raw item."""
    overall = item.confidence if item.confidence is not None else DEFAULT_CONFIDENCE
    fields = {
        name: _normalize_field(
            getattr(item, name), item.sibling_confidence(name), overall
        )
        for name in NUMERIC_FIELDS
    }
    return FoodEntry(
        id=entry_id,
        food_name=item.food_name,
        confidence=overall,
        **fields,
    )


def _read_item(raw_item: object) -> RawFoodItem | None:
    if not isinstance(raw_item, dict):
        return None
    try:
        return RawFoodItem.model_validate(raw_item)
    except ValidationError:
        return None


def _normalize_field(
    raw: RawConfidenceValue | float | None,
    sibling_confidence: float | None,
    overall: float,
) -> ConfidenceValue:
    if isinstance(raw, RawConfidenceValue):
        confidence = raw.confidence if raw.confidence is not None else overall
        return ConfidenceValue(value=max(raw.value, 0.0), confidence=confidence)
    confidence = sibling_confidence if sibling_confidence is not None else overall
    if raw is None:
        return ConfidenceValue(value=0.0, confidence=confidence)
    return ConfidenceValue(value=max(raw, 0.0), confidence=confidence)
