# config/points_config.py

from enum import Enum


class WasteCategory(str, Enum):
    plastic    = "plastic"
    paper      = "paper"
    glass      = "glass"
    metal      = "metal"
    electronic = "electronic"
    organic    = "organic"
    other      = "other"


class PointReason(str, Enum):
    waste_recycled   = "waste_recycled"     # base points per kg x weight
    food_donated     = "food_donated"       # 5 points per unit
    record_cancelled = "record_cancelled"   # reverses the original award
    reconciliation   = "reconciliation"     # drift corrected by the worker


# EcoPoints per kilogram of recycled waste
BASE_POINTS = {
    WasteCategory.plastic:    15,
    WasteCategory.paper:      10,
    WasteCategory.glass:      12,
    WasteCategory.metal:      20,
    WasteCategory.electronic: 25,
    WasteCategory.organic:     8,
    WasteCategory.other:       5,
}

# EcoPoints per donated food unit
FOOD_POINTS_PER_UNIT = 5

# largest weight (kg) or food quantity accepted for one request
MAX_QUANTITY = 10_000

FOOD_TYPES = [
    "Cooked Meals",
    "Fresh Produce",
    "Dairy Products",
    "Bakery Items",
    "Canned Goods",
    "Beverages",
    "Other",
]

# (threshold, title) per stat, highest first; only the first match is awarded
ECO_POINTS_ACHIEVEMENTS = [
    (1000, "Eco Master"),
    (500,  "Eco Champion"),
    (100,  "Eco Warrior"),
]
WASTE_ACHIEVEMENTS = [
    (100, "Waste Warrior"),
    (50,  "Recycling Hero"),
]
MEALS_ACHIEVEMENTS = [
    (50, "Food Hero"),
    (20, "Meal Rescuer"),
]
