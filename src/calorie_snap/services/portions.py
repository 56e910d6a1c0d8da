"""Portion scaling with cascading nutrition recalculation."""

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext

from calorie_snap.domain.errors import ScalingGuardError
from calorie_snap.domain.foods import NUTRITION_FIELDS, FoodEntry

PORTION_PRESETS: tuple[int, ...] = (50, 75, 100, 125, 150, 200)
MIN_PERCENTAGE = 50
MAX_PERCENTAGE = 200
PERCENTAGE_STEP = 25
REDUCED_BELOW = 75
INCREASED_ABOVE = 125


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero, as portion displays expect (2.5 -> 3).

    Non-finite values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    number = Decimal(repr(value))
    with localcontext() as context:
        context.prec = max(context.prec, number.adjusted() + digits + 2)
        rounded = number.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    return float(rounded)


def scale_entry(
    entry: FoodEntry, new_weight: float, cascade: bool = True
) -> FoodEntry:
    """Set a new weight and, when cascading, rescale calories and macros.

    Calories are rounded to whole kcal and macros to 0.1 g. Confidence
    scores are left untouched.
    """
    _require_positive(new_weight, "new weight")
    scaled = entry.with_field(
        "estimated_weight_g", entry.estimated_weight_g.with_value(new_weight)
    )
    if not cascade:
        return scaled

    old_weight = entry.estimated_weight_g.value
    _require_positive(old_weight, "current weight")
    ratio = new_weight / old_weight
    for name in NUTRITION_FIELDS:
        field = entry.field(name)
        digits = 0 if name == "calories" else 1
        scaled = scaled.with_field(
            name, field.with_value(round_half_up(field.value * ratio, digits))
        )
    return scaled


def preset_weight(original_weight: float, percent: float) -> float:
    """Weight for a percentage of the original (not current) estimate."""
    _require_positive(original_weight, "original weight")
    return round_half_up(original_weight * percent / 100)


def apply_preset(
    entry: FoodEntry,
    original: FoodEntry,
    percent: float,
    cascade: bool = True,
) -> FoodEntry:
    """Jump to a preset share of the original estimate.

    The target weight and, when cascading, the nutrition values are derived
    from ``original`` rather than from the current entry, so the 100% preset
    restores the recognized values regardless of earlier edits.
    """
    target = preset_weight(original.estimated_weight_g.value, percent)
    if not cascade:
        return scale_entry(entry, target, cascade=False)

    rescaled = scale_entry(original, target)
    updated = entry
    for name in ("estimated_weight_g", *NUTRITION_FIELDS):
        updated = updated.with_field(
            name, entry.field(name).with_value(rescaled.field(name).value)
        )
    return updated


def portion_percentage(current_weight: float, original_weight: float) -> int:
    """Current weight as a whole percentage of the original."""
    _require_positive(original_weight, "original weight")
    return int(round_half_up(current_weight / original_weight * 100))


def snap_percentage(
    raw: float,
    minimum: int = MIN_PERCENTAGE,
    maximum: int = MAX_PERCENTAGE,
    step: int = PERCENTAGE_STEP,
) -> int:
    """Clamp a free slider position and snap it to the step grid."""
    clamped = max(minimum, min(maximum, raw))
    snapped = int(round_half_up(clamped / step)) * step
    return max(minimum, min(maximum, snapped))


def percentage_band(percent: float) -> str:
    """Describe a portion percentage as reduced, normal or increased."""
    if percent < REDUCED_BELOW:
        return "reduced"
    if percent > INCREASED_ABOVE:
        return "increased"
    return "normal"


def _require_positive(weight: float, label: str) -> None:
    valid = isinstance(weight, int | float) and math.isfinite(weight)
    if not valid or weight <= 0:
        raise ScalingGuardError(f"{label} must be a positive number, got {weight!r}")
