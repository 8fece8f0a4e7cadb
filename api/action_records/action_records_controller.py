import logging
from typing import Any, Dict, List, Optional, Type

from fastapi import UploadFile
from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from api.action_records.action_records_model import ActionKind, ActionRecord, ActionStatus
from api.action_records.action_records_schema import (
    ActionRecordListResponse,
    ActionRecordResponse,
    FoodRecordCreate,
    StatusUpdate,
    WasteRecordCreate,
)
from api.action_records.action_records_service import (
    get_record,
    list_records,
    list_records_by_user,
    submit_food,
    submit_waste,
    transition_status,
)
from api.eco_points.points_policy import food_points, waste_points
from api.uploads.uploads_service import upload_images, validate_images
from api.user.user_service import get_or_create_profile
from utils.exceptions import NetworkError, PermissionDenied, ValidationError
from utils.query_params import QueryParams

logger = logging.getLogger(__name__)


def _parse_form(schema: Type[BaseModel], data: Dict[str, Any]) -> BaseModel:
    """Validate form input, reporting every bad field in one message."""
    try:
        return schema(**data)
    except PydanticValidationError as e:
        error_messages = ", ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Validation Error: {error_messages}")


def _store_images(category: str, user_id: str, images: List[UploadFile]) -> List[str]:
    try:
        return upload_images(category, user_id, images)
    except OSError as e:
        logger.exception("Image upload failed for user %s", user_id)
        raise NetworkError("Could not store images, please try again") from e


def create_waste_record_controller(
    form: Dict[str, Any],
    images: List[UploadFile],
    db: Session,
    current_user: dict,
) -> ActionRecordResponse:
    """
    Validate the form, upload images, then create the record and apply its
    award.
    """
    # unknown category and bad weight get their own error codes
    waste_points(form.get("waste_type"), form.get("weight"))
    payload = _parse_form(WasteRecordCreate, form)
    validate_images(images)

    profile = get_or_create_profile(db, current_user)
    image_urls = _store_images("waste", profile.id, images)
    record = submit_waste(db, profile.id, payload, image_urls)
    return ActionRecordResponse.model_validate(record)


def create_food_record_controller(
    form: Dict[str, Any],
    images: List[UploadFile],
    db: Session,
    current_user: dict,
) -> ActionRecordResponse:
    food_points(form.get("quantity"))
    payload = _parse_form(FoodRecordCreate, form)
    validate_images(images)

    profile = get_or_create_profile(db, current_user)
    image_urls = _store_images("food", profile.id, images)
    record = submit_food(db, profile.id, payload, image_urls)
    return ActionRecordResponse.model_validate(record)


def list_my_records_controller(
    db: Session,
    current_user: dict,
    params: QueryParams[ActionRecord],
    kind: Optional[ActionKind] = None,
    status: Optional[ActionStatus] = None,
) -> ActionRecordListResponse:
    result = list_records_by_user(db, current_user["id"], kind=kind, status=status, params=params)
    return ActionRecordListResponse(
        total_count=result["total_count"],
        records=[ActionRecordResponse.model_validate(r) for r in result["records"]],
    )


def list_all_records_controller(
    db: Session,
    params: QueryParams[ActionRecord],
    kind: Optional[ActionKind] = None,
    status: Optional[ActionStatus] = None,
) -> ActionRecordListResponse:
    result = list_records(db, kind=kind, status=status, params=params)
    return ActionRecordListResponse(
        total_count=result["total_count"],
        records=[ActionRecordResponse.model_validate(r) for r in result["records"]],
    )


def get_record_controller(record_id, db: Session, current_user: dict) -> ActionRecordResponse:
    record = get_record(db, record_id)
    if record.user_id != current_user["id"] and "admin" not in current_user.get("roles", []):
        raise PermissionDenied("You can only view your own requests")
    return ActionRecordResponse.model_validate(record)


def update_status_controller(
    record_id,
    data: StatusUpdate,
    db: Session,
    current_user: dict,
) -> ActionRecordResponse:
    record = transition_status(
        db,
        record_id,
        data.status,
        current_user,
        scheduled_pickup_date=data.scheduled_pickup_date,
    )
    return ActionRecordResponse.model_validate(record)
