import math
from decimal import Decimal

import pytest

from api.eco_points.points_policy import (
    award_for,
    base_points_for_category,
    food_points,
    round_half_away_from_zero,
    waste_points,
)
from config.points_config import BASE_POINTS, MAX_QUANTITY, WasteCategory
from utils.exceptions import InvalidQuantity, UnknownCategory, ValidationError


@pytest.mark.parametrize("category, weight, expected", [
    ("metal", 3.0, 60),
    ("plastic", 2.5, 38),
    ("paper", 0.25, 3),
    ("glass", 0.1, 1),
    ("electronic", 2, 50),
    ("organic", 1, 8),
    ("other", 3, 15),
])
def test_waste_points(category, weight, expected):
    assert waste_points(category, weight) == expected


def test_waste_points_accepts_enum_members():
    assert waste_points(WasteCategory.metal, 1) == 20


@pytest.mark.parametrize("quantity, expected", [(4, 20), (0.5, 3), (1.5, 8), (0.1, 1), (10, 50)])
def test_food_points(quantity, expected):
    assert food_points(quantity) == expected


def test_every_category_has_base_points():
    assert set(BASE_POINTS) == set(WasteCategory)
    assert base_points_for_category("electronic") == 25


@pytest.mark.parametrize("value, expected", [
    (37.5, 38), (2.4, 2), (2.5, 3), (-2.5, -3), (0.49, 0), (Decimal("7.5"), 8),
])
def test_round_half_away_from_zero(value, expected):
    assert round_half_away_from_zero(value) == expected


@pytest.mark.parametrize("category", ["wood", "Metal", "", "plastics"])
def test_unknown_category_is_rejected(category):
    with pytest.raises(UnknownCategory):
        waste_points(category, 1)


@pytest.mark.parametrize("quantity", [0, -1, -0.5, math.nan, math.inf, "3", None, True])
def test_invalid_quantity_is_rejected(quantity):
    with pytest.raises(InvalidQuantity):
        waste_points("metal", quantity)
    with pytest.raises(InvalidQuantity):
        food_points(quantity)


def test_unknown_category_wins_over_bad_quantity():
    with pytest.raises(UnknownCategory):
        waste_points("wood", -1)


def test_award_for_dispatches_on_kind():
    assert award_for("waste", "metal", 3.0) == 60
    assert award_for("food", None, 4) == 20


def test_award_for_waste_needs_a_category():
    with pytest.raises(UnknownCategory):
        award_for("waste", None, 1)


def test_award_for_unknown_kind():
    with pytest.raises(ValidationError):
        award_for("compost", "organic", 1)


def test_award_is_deterministic():
    results = {waste_points("plastic", 2.5) for _ in range(50)}
    assert results == {38}


def test_award_errors_carry_codes():
    with pytest.raises(InvalidQuantity) as exc:
        food_points(0)
    assert exc.value.status_code == 422
    assert exc.value.to_detail()["code"] == "INVALID_QUANTITY"


def test_quantity_upper_bound():
    assert waste_points("electronic", MAX_QUANTITY) == 25 * MAX_QUANTITY
    for too_much in (MAX_QUANTITY + 0.5, 1e18):
        with pytest.raises(InvalidQuantity):
            waste_points("electronic", too_much)
        with pytest.raises(InvalidQuantity):
            food_points(too_much)
