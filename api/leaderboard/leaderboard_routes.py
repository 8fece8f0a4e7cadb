from fastapi import APIRouter, Depends

from api.leaderboard.leaderboard_controller import get_leaderboard_controller
from api.leaderboard.leaderboard_schema import LeaderboardResponse

router = APIRouter(prefix="/leaderboard", tags=["Leaderboard"])


@router.get(
    "",
    response_model=LeaderboardResponse,
    summary="Get top users by EcoPoints, waste recycled or meals rescued",
)
def read_leaderboard(
    leaderboard: LeaderboardResponse = Depends(get_leaderboard_controller),
) -> LeaderboardResponse:
    return leaderboard
