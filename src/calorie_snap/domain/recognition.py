"""Boundary models for raw vision-model responses.

The model may answer in the current shape, where every nutrition field is a
``{"value", "confidence"}`` object, in the legacy shape, where fields are bare
numbers with optional ``<field>_confidence`` siblings, or with an explicit
``{"error", "suggestion"}`` decline. Validators here are lenient: a value that
cannot be read becomes ``None`` instead of failing the whole item.
"""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from calorie_snap.domain.confidence import WORD_LEVELS
from calorie_snap.domain.foods import NUMERIC_FIELDS


def lenient_number(value: object) -> float | None:
    """Read a finite number from JSON-ish input, or return None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def lenient_confidence(value: object) -> float | None:
    """Read a 0-100 confidence from a number or a high/medium/low word."""
    if isinstance(value, str) and value.strip().lower() in WORD_LEVELS:
        return float(WORD_LEVELS[value.strip().lower()])
    number = lenient_number(value)
    if number is None:
        return None
    return min(max(number, 0.0), 100.0)


class RawConfidenceValue(BaseModel):
    """A field already annotated with its own confidence."""

    model_config = ConfigDict(extra="ignore")

    value: float
    confidence: float | None = None


class RawFoodItem(BaseModel):
    """One food item as returned by the model, in either shape."""

    model_config = ConfigDict(extra="allow")

    food_name: str = ""
    confidence: float | None = None
    estimated_weight_g: RawConfidenceValue | float | None = None
    calories: RawConfidenceValue | float | None = None
    protein_g: RawConfidenceValue | float | None = None
    carbs_g: RawConfidenceValue | float | None = None
    fat_g: RawConfidenceValue | float | None = None

    @field_validator("food_name", mode="before")
    @classmethod
    def _read_name(cls, value: object) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _read_confidence(cls, value: object) -> float | None:
        return lenient_confidence(value)

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def _read_field(cls, value: object) -> object:
        if isinstance(value, dict):
            if "value" not in value:
                return None
            number = lenient_number(value.get("value"))
            if number is None:
                return None
            return {
                "value": number,
                "confidence": lenient_confidence(value.get("confidence")),
            }
        return lenient_number(value)

    def sibling_confidence(self, name: str) -> float | None:
        """Return the legacy ``<name>_confidence`` value, if the model sent one."""
        extra = self.model_extra or {}
        return lenient_confidence(extra.get(f"{name}_confidence"))


class RawRecognition(BaseModel):
    """Envelope of a non-error model response."""

    model_config = ConfigDict(extra="ignore")

    foods: list[Any] = []
    total_calories: float | None = None

    @field_validator("foods", mode="before")
    @classmethod
    def _read_foods(cls, value: object) -> list[Any]:
        return value if isinstance(value, list) else []

    @field_validator("total_calories", mode="before")
    @classmethod
    def _read_total(cls, value: object) -> float | None:
        return lenient_number(value)


class RecognitionDecline(BaseModel):
    """Explicit refusal from the model when no food can be identified."""

    model_config = ConfigDict(extra="ignore")

    error: str
    suggestion: str | None = None

    @field_validator("error", mode="before")
    @classmethod
    def _read_error(cls, value: object) -> str:
        if isinstance(value, dict):
            return str(value.get("message") or "")
        return "" if value is None else str(value)

    @field_validator("suggestion", mode="before")
    @classmethod
    def _read_suggestion(cls, value: object) -> str | None:
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    @classmethod
    def matches(cls, payload: dict[str, object]) -> bool:
        """Return True when a parsed response is a decline rather than a result."""
        return "error" in payload
