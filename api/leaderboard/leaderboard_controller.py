from fastapi import Depends, Query
from sqlalchemy.orm import Session

from config.database import get_db
from config.settings import settings
from api.leaderboard.leaderboard_schema import LeaderboardResponse, LeaderboardSortKey
from api.leaderboard.leaderboard_service import project


def get_leaderboard_controller(
    sort_by: LeaderboardSortKey = Query(LeaderboardSortKey.eco_points, description="Stat to rank by"),
    limit: int = Query(
        settings.LEADERBOARD_DEFAULT_LIMIT,
        ge=1,
        le=settings.LEADERBOARD_MAX_LIMIT,
        description="Number of top users to return",
    ),
    db: Session = Depends(get_db),
) -> LeaderboardResponse:
    return LeaderboardResponse(sort_by=sort_by, entries=project(db, sort_by, limit))
