import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status as http_status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from middlewares.role_middleware import role_middleware
from api.action_records.action_records_controller import (
    create_food_record_controller,
    create_waste_record_controller,
    get_record_controller,
    list_all_records_controller,
    list_my_records_controller,
    update_status_controller,
)
from api.action_records.action_records_model import ActionKind, ActionRecord, ActionStatus
from api.action_records.action_records_schema import (
    ActionRecordListResponse,
    ActionRecordResponse,
    StatusUpdate,
)
from utils.query_params import QueryParams

router = APIRouter(prefix="/action_records", tags=["Action Records"])


@router.post(
    "/waste",
    response_model=ActionRecordResponse,
    status_code=http_status.HTTP_201_CREATED,
    summary="Schedule a waste pickup and earn EcoPoints",
)
def create_waste_record(
    waste_type: str = Form(...),
    weight: float = Form(...),
    description: str = Form(...),
    street: str = Form(...),
    city: str = Form(...),
    state: str = Form(...),
    postal_code: str = Form(...),
    country: str = Form("United States"),
    preferred_pickup_date: date = Form(...),
    images: List[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    form = {
        "waste_type": waste_type,
        "weight": weight,
        "description": description,
        "address": {
            "street": street,
            "city": city,
            "state": state,
            "postal_code": postal_code,
            "country": country,
        },
        "preferred_pickup_date": preferred_pickup_date,
    }
    return create_waste_record_controller(form, images, db, current_user)


@router.post(
    "/food",
    response_model=ActionRecordResponse,
    status_code=http_status.HTTP_201_CREATED,
    summary="Schedule a food donation pickup and earn EcoPoints",
)
def create_food_record(
    food_type: str = Form(...),
    quantity: float = Form(...),
    expiry_date: date = Form(...),
    description: str = Form(...),
    street: str = Form(...),
    city: str = Form(...),
    state: str = Form(...),
    postal_code: str = Form(...),
    country: str = Form("United States"),
    preferred_pickup_date: date = Form(...),
    images: List[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    form = {
        "food_type": food_type,
        "quantity": quantity,
        "expiry_date": expiry_date,
        "description": description,
        "address": {
            "street": street,
            "city": city,
            "state": state,
            "postal_code": postal_code,
            "country": country,
        },
        "preferred_pickup_date": preferred_pickup_date,
    }
    return create_food_record_controller(form, images, db, current_user)


@router.get(
    "/mine",
    response_model=ActionRecordListResponse,
    summary="List my waste and food requests",
)
def list_my_records(
    params: QueryParams[ActionRecord] = Depends(),
    kind: Optional[ActionKind] = Query(None, description="Filter by waste or food"),
    status: Optional[ActionStatus] = Query(None, description="Filter by request status"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    return list_my_records_controller(db, current_user, params, kind, status)


@router.get(
    "",
    response_model=ActionRecordListResponse,
    summary="(Admin only) List all requests",
    dependencies=[Depends(role_middleware(required_roles=["admin"]))],
)
def list_all_records(
    params: QueryParams[ActionRecord] = Depends(),
    kind: Optional[ActionKind] = Query(None, description="Filter by waste or food"),
    status: Optional[ActionStatus] = Query(None, description="Filter by request status"),
    db: Session = Depends(get_db),
):
    return list_all_records_controller(db, params, kind, status)


@router.get(
    "/{record_id}",
    response_model=ActionRecordResponse,
    summary="Get a single request",
)
def get_record_route(
    record_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    return get_record_controller(record_id, db, current_user)


@router.patch(
    "/{record_id}/status",
    response_model=ActionRecordResponse,
    summary="Schedule, complete or cancel a request",
)
def update_record_status(
    record_id: uuid.UUID,
    data: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    return update_status_controller(record_id, data, db, current_user)
