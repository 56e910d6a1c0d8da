"""Confidence classification shared by all consumers."""

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from calorie_snap.domain.foods import ConfidenceValue, FoodEntry

HIGH_THRESHOLD = 80
MEDIUM_THRESHOLD = 50
REVIEW_THRESHOLD = 70
DEFAULT_CONFIDENCE = 75

WORD_LEVELS: dict[str, int] = {"high": 90, "medium": 65, "low": 40}


class ConfidenceLevel(StrEnum):
    """Banded confidence for display and gating."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def confidence_level(score: float) -> ConfidenceLevel:
    """Classify a 0-100 score as high (>=80), medium (>=50) or low."""
    if score >= HIGH_THRESHOLD:
        return ConfidenceLevel.HIGH
    if score >= MEDIUM_THRESHOLD:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def is_low_confidence(entry: "FoodEntry") -> bool:
    """Return True when the entry as a whole should carry a warning."""
    return confidence_level(entry.confidence) is ConfidenceLevel.LOW


def needs_review(value: "ConfidenceValue") -> bool:
    """Return True when a single field should be highlighted for review."""
    return value.confidence < REVIEW_THRESHOLD
