import enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class LeaderboardSortKey(str, enum.Enum):
    eco_points     = "ecoPoints"
    waste_recycled = "wasteRecycled"
    meals_rescued  = "mealsRescued"


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    display_name: str
    email: Optional[str] = None
    photo_url: Optional[str] = None
    eco_points: int
    waste_recycled: float
    meals_rescued: float
    waste_recycling_count: int = 0
    food_donation_count: int = 0
    achievements: List[str] = []

    model_config = ConfigDict(from_attributes=True)


class LeaderboardResponse(BaseModel):
    sort_by: LeaderboardSortKey
    entries: List[LeaderboardEntry]
