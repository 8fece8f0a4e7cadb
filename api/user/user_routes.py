from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from middlewares.role_middleware import role_middleware
from api.user.user_controller import (
    get_profile_details,
    get_stats_controller,
    update_profile,
    get_my_points_log,
    reconcile_stats_controller,
)
from api.user.user_schema import (
    UserUpdate,
    UserResponse,
    UserStatsResponse,
    PointsLogEntry,
    ReconcileResponse,
)

router = APIRouter(prefix="/users", tags=["Users"])


# ─── Profile Routes (protected) ─────────────────────────────────────────────────
@router.get("/profile", response_model=UserResponse)
def get_profile(
    current_user=Depends(auth_middleware),
    db: Session = Depends(get_db)
):
    return get_profile_details(current_user, db)


@router.put("/profile", response_model=UserResponse)
def edit_profile(
    data: UserUpdate,
    current_user=Depends(auth_middleware),
    db: Session = Depends(get_db)
):
    return update_profile(data, current_user, db)


@router.get("/stats", response_model=UserStatsResponse)
def read_my_stats(
    current_user=Depends(auth_middleware),
    db: Session = Depends(get_db)
):
    return get_stats_controller(current_user, db)


@router.get("/points", response_model=List[PointsLogEntry])
def read_my_points_log(
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware)
):
    return get_my_points_log(db, current_user)


@router.post(
    "/stats/reconcile",
    response_model=ReconcileResponse,
    summary="(Admin only) Re-derive user stats from action records",
    dependencies=[Depends(role_middleware(required_roles=["admin"]))]
)
def reconcile_stats(db: Session = Depends(get_db)):
    return reconcile_stats_controller(db)
