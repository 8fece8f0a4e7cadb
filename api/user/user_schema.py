from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from api.user.user_model import UserRole
from config.points_config import PointReason


# ----- Stats Schemas -----
class UserStatsResponse(BaseModel):
    eco_points: int = Field(0, ge=0, description="Cumulative EcoPoints")
    waste_recycled: float = Field(0.0, ge=0, description="Cumulative waste recycled, in kg")
    meals_rescued: float = Field(0.0, ge=0, description="Cumulative food rescued, in units or kg")
    waste_recycling_count: int = 0
    food_donation_count: int = 0
    last_recycling_at: Optional[datetime] = None
    last_donation_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ----- Response Schema -----
class UserResponse(UserStatsResponse):
    id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None
    role: UserRole = UserRole.user
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
    )


# ----- Update Schema -----
class UserUpdate(BaseModel):
    display_name: Optional[str] = Field(
        None,
        min_length=1,
        max_length=100,
        description="Name shown on the leaderboard"
    )
    photo_url: Optional[str] = Field(
        None,
        max_length=1024,
        description="Profile photo URL"
    )

    model_config = ConfigDict(extra="forbid")


# ----- Generic Response -----
class Message(BaseModel):
    message: str


class PointsLogEntry(BaseModel):
    delta: int
    reason: PointReason
    record_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StatsCorrection(BaseModel):
    user_id: str
    eco_points_delta: int
    waste_recycled: float
    meals_rescued: float


class ReconcileResponse(BaseModel):
    corrected: int
    corrections: List[StatsCorrection]
