"""
EcoPoints award rules.

Pure functions: an award depends only on the arguments, so the same input
always yields the same points. Attaching an award to a new record is what
makes it count; calling these functions has no side effects.
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from config.points_config import BASE_POINTS, FOOD_POINTS_PER_UNIT, MAX_QUANTITY, WasteCategory
from utils.exceptions import InvalidQuantity, UnknownCategory, ValidationError

Number = Union[int, float, Decimal]


def round_half_away_from_zero(value: Number) -> int:
    """Round to the nearest integer, .5 going away from zero (37.5 -> 38, -2.5 -> -3)."""
    # str() keeps the decimal digits the caller wrote, so 0.1 stays 0.1
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _check_quantity(quantity: Number) -> Decimal:
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float, Decimal)):
        raise InvalidQuantity(f"Quantity must be a number, got {quantity!r}")
    if isinstance(quantity, float) and not math.isfinite(quantity):
        raise InvalidQuantity(f"Quantity must be finite, got {quantity!r}")
    amount = Decimal(str(quantity))
    if not amount.is_finite() or amount <= 0:
        raise InvalidQuantity(f"Quantity must be greater than zero, got {quantity!r}")
    if amount > MAX_QUANTITY:
        raise InvalidQuantity(f"Quantity must be at most {MAX_QUANTITY}, got {quantity!r}")
    return amount


def base_points_for_category(category: Union[str, WasteCategory]) -> int:
    try:
        return BASE_POINTS[WasteCategory(category)]
    except ValueError:
        raise UnknownCategory(f"Unknown waste category: {category!r}")


def waste_points(category: Union[str, WasteCategory], weight: Number) -> int:
    """Points for recycling ``weight`` kilograms of ``category`` waste."""
    base = base_points_for_category(category)
    amount = _check_quantity(weight)
    return round_half_away_from_zero(Decimal(base) * amount)


def food_points(quantity: Number) -> int:
    """Points for donating ``quantity`` units (or kg) of food."""
    amount = _check_quantity(quantity)
    return round_half_away_from_zero(Decimal(FOOD_POINTS_PER_UNIT) * amount)


def award_for(kind: str, category: Optional[str], quantity: Number) -> int:
    if kind == "waste":
        if category is None:
            raise UnknownCategory("Waste awards need a category")
        return waste_points(category, quantity)
    if kind == "food":
        return food_points(quantity)
    raise ValidationError(f"Unknown action kind: {kind!r}")
