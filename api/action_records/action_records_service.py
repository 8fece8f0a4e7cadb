import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import update
from sqlalchemy.exc import DataError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from api.action_records.action_records_model import (
    ActionRecord,
    ActionKind,
    ActionStatus,
    STATUS_TRANSITIONS,
)
from api.action_records.action_records_schema import FoodRecordCreate, WasteRecordCreate
from api.eco_points.points_policy import award_for
from api.notifications.notifications_service import record_status_changed, record_submitted
from api.user.user_model import User  # noqa: F401  (registers the mapper)
from api.user.user_service import Award, apply_award
from config.points_config import PointReason
from utils.exceptions import (
    EcoCycleError,
    InvalidStatusTransition,
    NetworkError,
    PermissionDenied,
    RecordNotFound,
    UserNotFound,
    ValidationError,
    WriteConflict,
)
from utils.query_params import QueryParams

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    ActionKind.waste: ("waste_type", "weight"),
    ActionKind.food: ("food_type", "quantity", "expiry_date"),
}


def award_of(record: ActionRecord) -> Award:
    """The stats change a record contributed when it was submitted."""
    if record.kind == ActionKind.waste.value:
        return Award(eco_points=record.points_awarded, waste_kg=record.weight)
    return Award(eco_points=record.points_awarded, meals_units=record.quantity)


def create_record(db: Session, record_data: Dict[str, Any], commit: bool = True) -> ActionRecord:
    """
    Persist a new action record with status ``pending``.

    ``points_awarded`` must already be in ``record_data``; it is stored as a
    snapshot and never recomputed.
    """
    try:
        kind = ActionKind(record_data.get("kind"))
    except ValueError:
        raise ValidationError(f"Unknown action kind: {record_data.get('kind')!r}")

    missing = [
        f for f in ("user_id", "description", "points_awarded") + REQUIRED_FIELDS[kind]
        if record_data.get(f) in (None, "")
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    record = ActionRecord(**{**record_data, "kind": kind.value, "status": ActionStatus.pending.value})
    db.add(record)
    try:
        db.flush()
    except IntegrityError as e:
        # owner row is gone (foreign key)
        db.rollback()
        raise WriteConflict(f"User {record_data['user_id']} no longer exists") from e

    if commit:
        db.commit()
        db.refresh(record)
    return record


def _submit(
    db: Session,
    user_id: str,
    kind: ActionKind,
    record_data: Dict[str, Any],
    award: Award,
    reason: PointReason,
) -> ActionRecord:
    """
    Create the record and apply its award in one transaction: the record is
    inserted first, the stats increment follows, and both commit together.
    """
    try:
        record = create_record(db, {**record_data, "user_id": user_id, "kind": kind.value}, commit=False)
        apply_award(db, user_id, award, reason=reason, record_id=str(record.id), commit=False)
        db.commit()
    except UserNotFound as e:
        db.rollback()
        raise WriteConflict(f"User {user_id} no longer exists") from e
    except EcoCycleError:
        db.rollback()
        raise
    except (DataError, OverflowError) as e:
        db.rollback()
        raise ValidationError("Submitted values are out of range") from e
    except OperationalError as e:
        db.rollback()
        logger.exception("Database unavailable while submitting %s request for %s", kind.value, user_id)
        raise NetworkError() from e

    db.refresh(record)
    logger.info(
        "User %s submitted %s request %s (+%d EcoPoints)",
        user_id, kind.value, record.id, record.points_awarded,
    )
    record_submitted.send(_submit, record=record)
    return record


def submit_waste(
    db: Session,
    user_id: str,
    data: WasteRecordCreate,
    image_urls: Sequence[str] = (),
) -> ActionRecord:
    points = award_for(ActionKind.waste.value, data.waste_type.value, data.weight)
    record_data = {
        "waste_type": data.waste_type.value,
        "weight": data.weight,
        "description": data.description,
        "address": data.address.model_dump(),
        "preferred_pickup_date": data.preferred_pickup_date,
        "image_urls": list(data.image_urls) + list(image_urls),
        "points_awarded": points,
    }
    award = Award(eco_points=points, waste_kg=data.weight)
    return _submit(db, user_id, ActionKind.waste, record_data, award, PointReason.waste_recycled)


def submit_food(
    db: Session,
    user_id: str,
    data: FoodRecordCreate,
    image_urls: Sequence[str] = (),
) -> ActionRecord:
    points = award_for(ActionKind.food.value, None, data.quantity)
    record_data = {
        "food_type": data.food_type,
        "quantity": data.quantity,
        "expiry_date": data.expiry_date,
        "description": data.description,
        "address": data.address.model_dump(),
        "preferred_pickup_date": data.preferred_pickup_date,
        "image_urls": list(data.image_urls) + list(image_urls),
        "points_awarded": points,
    }
    award = Award(eco_points=points, meals_units=data.quantity)
    return _submit(db, user_id, ActionKind.food, record_data, award, PointReason.food_donated)


def _as_uuid(record_id) -> uuid.UUID:
    if isinstance(record_id, uuid.UUID):
        return record_id
    try:
        return uuid.UUID(str(record_id))
    except ValueError:
        raise RecordNotFound(f"Action record {record_id} not found")


def get_record(db: Session, record_id) -> ActionRecord:
    record = db.get(ActionRecord, _as_uuid(record_id))
    if not record:
        raise RecordNotFound(f"Action record {record_id} not found")
    return record


def list_records_by_user(
    db: Session,
    user_id: str,
    kind: Optional[ActionKind] = None,
    status: Optional[ActionStatus] = None,
    params: Optional[QueryParams[ActionRecord]] = None,
) -> Dict[str, Any]:
    """
    Fetch a user's records, newest first unless ``params`` says otherwise.
    Every call runs a fresh query.
    """
    return list_records(db, user_id=user_id, kind=kind, status=status, params=params)


def list_records(
    db: Session,
    user_id: Optional[str] = None,
    kind: Optional[ActionKind] = None,
    status: Optional[ActionStatus] = None,
    params: Optional[QueryParams[ActionRecord]] = None,
) -> Dict[str, Any]:
    query = db.query(ActionRecord)
    if user_id is not None:
        query = query.filter(ActionRecord.user_id == user_id)
    if kind:
        query = query.filter(ActionRecord.kind == ActionKind(kind).value)
    if status:
        query = query.filter(ActionRecord.status == ActionStatus(status).value)

    total_count = query.count()

    if params is not None:
        try:
            query = params.apply(query, ActionRecord)
        except ValueError as e:
            raise ValidationError(f"Invalid pagination parameters: {e}")
    else:
        query = query.order_by(ActionRecord.created_at.desc())

    records: List[ActionRecord] = query.all()
    return {"total_count": total_count, "records": records}


def transition_status(
    db: Session,
    record_id,
    new_status: ActionStatus,
    actor: Dict[str, Any],
    scheduled_pickup_date: Optional[datetime] = None,
) -> ActionRecord:
    """
    Move a record along ``pending -> scheduled -> completed`` or cancel it.

    Owners may cancel their own open records; scheduling and completing
    need the admin role. Cancelling reverses the record's award in the same
    transaction as the status change.
    """
    record = get_record(db, record_id)
    new_status = ActionStatus(new_status)
    is_admin = "admin" in (actor.get("roles") or [])

    if not is_admin:
        if record.user_id != actor.get("id"):
            raise PermissionDenied("You can only change your own requests")
        if new_status != ActionStatus.cancelled:
            raise PermissionDenied("Only admins can schedule or complete pickups")

    current = ActionStatus(record.status)
    if new_status not in STATUS_TRANSITIONS[current]:
        raise InvalidStatusTransition(
            f"Cannot move a {current.value} request to {new_status.value}"
        )

    now = datetime.now(timezone.utc)
    values: Dict[str, Any] = {"status": new_status.value, "updated_at": now}
    if new_status == ActionStatus.scheduled:
        if scheduled_pickup_date is None:
            raise ValidationError("scheduled_pickup_date is required to schedule a pickup")
        values["scheduled_pickup_date"] = scheduled_pickup_date
    elif new_status == ActionStatus.completed:
        values["completed_date"] = now

    try:
        # compare-and-set on the current status so a record changes state once
        result = db.execute(
            update(ActionRecord)
            .where(ActionRecord.id == record.id, ActionRecord.status == current.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise InvalidStatusTransition("The request was changed by someone else, please reload")

        if new_status == ActionStatus.cancelled:
            apply_award(
                db,
                record.user_id,
                award_of(record).reversed(),
                reason=PointReason.record_cancelled,
                record_id=str(record.id),
                commit=False,
            )
        db.commit()
    except EcoCycleError:
        db.rollback()
        raise
    except OperationalError as e:
        db.rollback()
        logger.exception("Database unavailable while updating request %s", record.id)
        raise NetworkError() from e

    db.refresh(record)
    logger.info("Request %s moved %s -> %s by %s", record.id, current.value, new_status.value, actor.get("id"))
    record_status_changed.send(transition_status, record=record, previous=current.value)
    return record
