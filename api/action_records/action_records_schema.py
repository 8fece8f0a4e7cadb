from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.action_records.action_records_model import ActionKind, ActionStatus
from config.points_config import FOOD_TYPES, MAX_QUANTITY, WasteCategory


class Address(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    country: str = "United States"


class _RecordCreateBase(BaseModel):
    description: str = Field(..., min_length=1, description="Brief description of the items")
    address: Address
    preferred_pickup_date: date = Field(..., description="Preferred pickup date, today or later")
    image_urls: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("preferred_pickup_date")
    @classmethod
    def pickup_not_in_past(cls, v: date) -> date:
        if v < date.today():
            raise ValueError("Pickup date must be today or in the future.")
        return v


class WasteRecordCreate(_RecordCreateBase):
    waste_type: WasteCategory
    weight: float = Field(..., gt=0, le=MAX_QUANTITY, allow_inf_nan=False, description="Estimated weight in kg")


class FoodRecordCreate(_RecordCreateBase):
    food_type: str
    quantity: float = Field(..., gt=0, le=MAX_QUANTITY, allow_inf_nan=False, description="Quantity in units or kg")
    expiry_date: date

    @field_validator("food_type")
    @classmethod
    def known_food_type(cls, v: str) -> str:
        if v not in FOOD_TYPES:
            raise ValueError(f"food_type must be one of {FOOD_TYPES}")
        return v

    @field_validator("expiry_date")
    @classmethod
    def expiry_not_in_past(cls, v: date) -> date:
        if v < date.today():
            raise ValueError("Expiry date must be today or in the future.")
        return v


class ActionRecordResponse(BaseModel):
    id: UUID
    user_id: str
    kind: ActionKind
    waste_type: Optional[WasteCategory] = None
    weight: Optional[float] = None
    food_type: Optional[str] = None
    quantity: Optional[float] = None
    expiry_date: Optional[date] = None
    description: str
    image_urls: List[str] = []
    address: Optional[Address] = None
    status: ActionStatus
    preferred_pickup_date: Optional[date] = None
    scheduled_pickup_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    points_awarded: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActionRecordListResponse(BaseModel):
    total_count: int
    records: List[ActionRecordResponse]


class StatusUpdate(BaseModel):
    status: ActionStatus
    scheduled_pickup_date: Optional[datetime] = Field(
        None, description="Required when moving a record to 'scheduled'"
    )

    model_config = ConfigDict(extra="forbid")
