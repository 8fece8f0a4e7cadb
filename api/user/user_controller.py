from typing import List
from sqlalchemy.orm import Session

from api.user.user_schema import (
    PointsLogEntry,
    ReconcileResponse,
    StatsCorrection,
    UserResponse,
    UserStatsResponse,
    UserUpdate,
)
from api.user.user_service import (
    get_or_create_profile,
    get_user_points_log,
    reconcile_user_stats,
    update_user_profile,
)

# Controller functions for profile and stats operations


# Profile retrieval; first access creates the profile with zero stats
def get_profile_details(current_user: dict, db: Session) -> UserResponse:
    user = get_or_create_profile(db, current_user)
    return UserResponse.model_validate(user)


def get_stats_controller(current_user: dict, db: Session) -> UserStatsResponse:
    user = get_or_create_profile(db, current_user)
    return UserStatsResponse.model_validate(user)


# Profile update
def update_profile(data: UserUpdate, current_user: dict, db: Session) -> UserResponse:
    """
    Update identity fields for the current_user.
    """
    get_or_create_profile(db, current_user)
    updates = data.model_dump(exclude_unset=True)
    user = update_user_profile(db, current_user["id"], **updates)
    return UserResponse.model_validate(user)


# fetch current user's points log
def get_my_points_log(db: Session, current_user: dict) -> List[PointsLogEntry]:
    return [PointsLogEntry.model_validate(e) for e in get_user_points_log(db, current_user["id"])]


def reconcile_stats_controller(db: Session) -> ReconcileResponse:
    corrections = reconcile_user_stats(db)
    return ReconcileResponse(
        corrected=len(corrections),
        corrections=[StatsCorrection(**c) for c in corrections],
    )
