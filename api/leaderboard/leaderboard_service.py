"""
Leaderboard projection.

Standings are derived from the users' cumulative stats on every call and are
never stored; two viewers may see different ranks if stats change between
their queries.
"""
from typing import List, Sequence, Tuple, Union

from sqlalchemy.orm import Session

from api.leaderboard.leaderboard_schema import LeaderboardEntry, LeaderboardSortKey
from api.user.user_model import User
from config.points_config import (
    ECO_POINTS_ACHIEVEMENTS,
    MEALS_ACHIEVEMENTS,
    WASTE_ACHIEVEMENTS,
)
from utils.exceptions import ValidationError

SORT_COLUMNS = {
    LeaderboardSortKey.eco_points:     User.eco_points,
    LeaderboardSortKey.waste_recycled: User.waste_recycled,
    LeaderboardSortKey.meals_rescued:  User.meals_rescued,
}


def _first_reached(value: float, tiers: Sequence[Tuple[float, str]]) -> List[str]:
    for threshold, title in tiers:
        if value >= threshold:
            return [title]
    return []


def achievements_for(eco_points: int, waste_recycled: float, meals_rescued: float) -> List[str]:
    """At most one title per stat, the highest tier reached."""
    return (
        _first_reached(eco_points, ECO_POINTS_ACHIEVEMENTS)
        + _first_reached(waste_recycled, WASTE_ACHIEVEMENTS)
        + _first_reached(meals_rescued, MEALS_ACHIEVEMENTS)
    )


def project(
    db: Session,
    sort_key: Union[str, LeaderboardSortKey] = LeaderboardSortKey.eco_points,
    limit: int = 50,
) -> List[LeaderboardEntry]:
    """
    Return the top ``limit`` users ordered by ``sort_key`` descending.

    Ties are broken by user id so one query always ranks the same way;
    ``rank`` is the 1-based position in the result, so ranks run 1..N with
    no gaps even when values tie.
    """
    try:
        key = LeaderboardSortKey(sort_key)
    except ValueError:
        raise ValidationError(f"Cannot sort leaderboard by {sort_key!r}")
    if limit < 1:
        raise ValidationError("limit must be at least 1")

    users = (
        db.query(User)
          .order_by(SORT_COLUMNS[key].desc(), User.id.asc())
          .limit(limit)
          .all()
    )

    return [
        LeaderboardEntry(
            rank=position + 1,
            user_id=u.id,
            # never show an empty name; fall back like the profile page does
            display_name=u.display_name or "Anonymous",
            email=u.email,
            photo_url=u.photo_url,
            eco_points=u.eco_points or 0,
            waste_recycled=u.waste_recycled or 0.0,
            meals_rescued=u.meals_rescued or 0.0,
            waste_recycling_count=u.waste_recycling_count or 0,
            food_donation_count=u.food_donation_count or 0,
            achievements=achievements_for(u.eco_points or 0, u.waste_recycled or 0.0, u.meals_rescued or 0.0),
        )
        for position, u in enumerate(users)
    ]
