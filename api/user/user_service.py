import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.user.user_model import User, UserRole
from api.user.user_points_model import UserPointsLog
from api.action_records.action_records_model import ActionRecord, ActionKind, ActionStatus
from config.points_config import PointReason
from utils.exceptions import UserNotFound, WriteConflict

logger = logging.getLogger(__name__)

# float columns are compared with this tolerance when reconciling
STATS_EPSILON = 1e-6


@dataclass(frozen=True)
class Award:
    """
    A change to a user's cumulative stats.

    ``actions`` is +1 for a new submission and -1 when a submission's award
    is reversed; it drives the per-kind counters and activity timestamps.
    """
    eco_points: int
    waste_kg: Optional[float] = None
    meals_units: Optional[float] = None
    actions: int = 1

    def reversed(self) -> "Award":
        return Award(
            eco_points=-self.eco_points,
            waste_kg=-self.waste_kg if self.waste_kg is not None else None,
            meals_units=-self.meals_units if self.meals_units is not None else None,
            actions=-self.actions,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clamped_add(column, delta: float):
    """`column + delta`; a decrease that leaves less than STATS_EPSILON stores 0."""
    total = column + delta
    if delta >= 0:
        return total
    return case((total < STATS_EPSILON, 0.0), else_=total)


def get_or_create_profile(db: Session, identity: Dict[str, Any]) -> User:
    """
    Return the profile for an authenticated identity, creating it with
    all-zero stats on first access.
    """
    user_id = identity["id"]
    user = db.get(User, user_id)
    if user:
        return user

    roles = identity.get("roles") or []
    user = User(
        id=user_id,
        display_name=identity.get("name"),
        email=identity.get("email"),
        photo_url=identity.get("picture"),
        role=UserRole.admin if "admin" in roles else UserRole.user,
        eco_points=0,
        waste_recycled=0.0,
        meals_rescued=0.0,
        waste_recycling_count=0,
        food_donation_count=0,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # another request created the profile first
        db.rollback()
        user = db.get(User, user_id)
        if user is None:
            raise WriteConflict(f"Could not create profile for user {user_id}")
        return user

    db.refresh(user)
    logger.info("Created profile for user %s", user_id)
    return user


def get_user_profile(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise UserNotFound(f"User {user_id} not found")
    return user


def update_user_profile(db: Session, user_id: str, **fields) -> User:
    """
    Update provided identity fields for a user.
    """
    user = get_user_profile(db, user_id)
    for key, value in fields.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


def apply_award(
    db: Session,
    user_id: str,
    award: Award,
    reason: Optional[PointReason] = None,
    record_id: Optional[str] = None,
    commit: bool = True,
) -> None:
    """
    Add ``award`` to the user's cumulative stats.

    The change is a single ``UPDATE users SET col = col + :delta`` so
    concurrent awards for the same user are all counted. Applying the same
    award twice counts it twice. Pass ``commit=False`` to make the increment
    part of the caller's transaction.
    """
    now = _utcnow()
    values: Dict[str, Any] = {"eco_points": User.eco_points + award.eco_points}
    if award.actions > 0:
        values["last_activity_at"] = now

    if award.waste_kg is not None:
        values["waste_recycled"] = _clamped_add(User.waste_recycled, award.waste_kg)
        values["waste_recycling_count"] = User.waste_recycling_count + award.actions
        if award.actions > 0:
            values["last_recycling_at"] = now

    if award.meals_units is not None:
        values["meals_rescued"] = _clamped_add(User.meals_rescued, award.meals_units)
        values["food_donation_count"] = User.food_donation_count + award.actions
        if award.actions > 0:
            values["last_donation_at"] = now

    result = db.execute(
        update(User)
        .where(User.id == user_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        if commit:
            db.rollback()
        raise UserNotFound(f"User {user_id} not found")

    if reason is not None:
        db.add(UserPointsLog(
            user_id=user_id,
            delta=award.eco_points,
            reason=reason.value,
            record_id=record_id,
        ))

    if commit:
        db.commit()


def get_user_points_log(db: Session, user_id: str) -> List[UserPointsLog]:
    return (
        db.query(UserPointsLog)
          .filter(UserPointsLog.user_id == user_id)
          .order_by(UserPointsLog.created_at.desc(), UserPointsLog.id.desc())
          .all()
    )


def reconcile_user_stats(db: Session, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Re-derive cumulative stats from the non-cancelled action records and
    correct any drift.

    Users and their derived totals are read in one statement and the
    difference is applied as an increment, so awards committed while the job
    runs are not undone.
    """
    is_waste = ActionRecord.kind == ActionKind.waste.value
    is_food = ActionRecord.kind == ActionKind.food.value
    derived = (
        db.query(
            ActionRecord.user_id.label("user_id"),
            func.coalesce(func.sum(ActionRecord.points_awarded), 0).label("eco_points"),
            func.coalesce(func.sum(case((is_waste, ActionRecord.weight), else_=0.0)), 0.0).label("waste_recycled"),
            func.coalesce(func.sum(case((is_food, ActionRecord.quantity), else_=0.0)), 0.0).label("meals_rescued"),
            func.coalesce(func.sum(case((is_waste, 1), else_=0)), 0).label("waste_count"),
            func.coalesce(func.sum(case((is_food, 1), else_=0)), 0).label("food_count"),
        )
        .filter(ActionRecord.status != ActionStatus.cancelled.value)
        .group_by(ActionRecord.user_id)
        .subquery()
    )

    query = (
        db.query(
            User.id,
            User.eco_points,
            User.waste_recycled,
            User.meals_rescued,
            User.waste_recycling_count,
            User.food_donation_count,
            func.coalesce(derived.c.eco_points, 0),
            func.coalesce(derived.c.waste_recycled, 0.0),
            func.coalesce(derived.c.meals_rescued, 0.0),
            func.coalesce(derived.c.waste_count, 0),
            func.coalesce(derived.c.food_count, 0),
        )
        .outerjoin(derived, derived.c.user_id == User.id)
    )
    if user_id is not None:
        query = query.filter(User.id == user_id)

    corrections: List[Dict[str, Any]] = []
    for (uid, points, waste, meals, waste_count, food_count,
         d_points, d_waste, d_meals, d_waste_count, d_food_count) in query.all():
        points_delta = int(d_points) - points
        waste_delta = float(d_waste) - waste
        meals_delta = float(d_meals) - meals
        waste_count_delta = int(d_waste_count) - waste_count
        food_count_delta = int(d_food_count) - food_count

        if (
            points_delta == 0
            and abs(waste_delta) < STATS_EPSILON
            and abs(meals_delta) < STATS_EPSILON
            and waste >= 0
            and meals >= 0
            and waste_count_delta == 0
            and food_count_delta == 0
        ):
            continue

        db.execute(
            update(User)
            .where(User.id == uid)
            .values(
                eco_points=User.eco_points + points_delta,
                # a negative total is replaced by the derived value outright
                waste_recycled=float(d_waste) if waste < 0 else _clamped_add(User.waste_recycled, waste_delta),
                meals_rescued=float(d_meals) if meals < 0 else _clamped_add(User.meals_rescued, meals_delta),
                waste_recycling_count=User.waste_recycling_count + waste_count_delta,
                food_donation_count=User.food_donation_count + food_count_delta,
            )
            .execution_options(synchronize_session=False)
        )
        if points_delta:
            db.add(UserPointsLog(
                user_id=uid,
                delta=points_delta,
                reason=PointReason.reconciliation.value,
            ))
        logger.warning(
            "Stats drift for user %s: points %+d, waste %+.3f kg, meals %+.3f",
            uid, points_delta, waste_delta, meals_delta,
        )
        corrections.append({
            "user_id": uid,
            "eco_points_delta": points_delta,
            "waste_recycled": float(d_waste),
            "meals_rescued": float(d_meals),
        })

    db.commit()
    return corrections
