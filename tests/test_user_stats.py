import threading

import pytest

from api.user.user_model import User, UserRole
from api.user.user_service import (
    Award,
    apply_award,
    get_or_create_profile,
    get_user_points_log,
    get_user_profile,
)
from config.database import SessionLocal
from config.points_config import PointReason
from utils.exceptions import UserNotFound


def _stats(user_id):
    session = SessionLocal()
    try:
        return session.get(User, user_id)
    finally:
        session.close()


def test_profile_is_created_with_zero_stats(db):
    user = get_or_create_profile(db, {"id": "alice", "name": "Alice", "email": "alice@example.com"})
    assert user.eco_points == 0
    assert user.waste_recycled == 0.0
    assert user.meals_rescued == 0.0
    assert user.waste_recycling_count == 0
    assert user.food_donation_count == 0
    assert user.role == UserRole.user
    assert user.last_activity_at is None


def test_profile_creation_is_idempotent(db, make_user):
    first = make_user("alice")
    apply_award(db, "alice", Award(eco_points=10, waste_kg=1.0))
    again = get_or_create_profile(db, {"id": "alice", "name": "Someone Else"})
    assert again.id == first.id
    assert again.eco_points == 10
    assert again.display_name == "Alice"


def test_admin_role_comes_from_identity(make_user):
    assert make_user("root", roles=["user", "admin"]).role == UserRole.admin


def test_get_user_profile_missing(db):
    with pytest.raises(UserNotFound):
        get_user_profile(db, "nobody")


def test_waste_award_increments_stats(db, make_user):
    make_user("alice")
    apply_award(db, "alice", Award(eco_points=60, waste_kg=3.0))

    user = _stats("alice")
    assert user.eco_points == 60
    assert user.waste_recycled == pytest.approx(3.0)
    assert user.waste_recycling_count == 1
    assert user.meals_rescued == 0.0
    assert user.food_donation_count == 0
    assert user.last_recycling_at is not None
    assert user.last_activity_at is not None
    assert user.last_donation_at is None


def test_food_award_increments_meals(db, make_user):
    make_user("alice")
    apply_award(db, "alice", Award(eco_points=20, meals_units=4))

    user = _stats("alice")
    assert user.eco_points == 20
    assert user.meals_rescued == pytest.approx(4.0)
    assert user.food_donation_count == 1
    assert user.waste_recycled == 0.0
    assert user.last_donation_at is not None


def test_applying_the_same_award_twice_counts_twice(db, make_user):
    make_user("alice")
    award = Award(eco_points=38, waste_kg=2.5)
    apply_award(db, "alice", award)
    apply_award(db, "alice", award)

    user = _stats("alice")
    assert user.eco_points == 76
    assert user.waste_recycled == pytest.approx(5.0)
    assert user.waste_recycling_count == 2


def test_reversed_award_undoes_the_increment(db, make_user):
    make_user("alice")
    award = Award(eco_points=60, waste_kg=3.0)
    apply_award(db, "alice", award)
    apply_award(db, "alice", award.reversed())

    user = _stats("alice")
    assert user.eco_points == 0
    assert user.waste_recycled == pytest.approx(0.0)
    assert user.waste_recycling_count == 0


def test_award_for_unknown_user(db):
    with pytest.raises(UserNotFound):
        apply_award(db, "ghost", Award(eco_points=10))
    assert db.get(User, "ghost") is None


def test_award_with_reason_is_logged(db, make_user):
    make_user("alice")
    apply_award(db, "alice", Award(eco_points=60, waste_kg=3.0), reason=PointReason.waste_recycled, record_id="r-1")
    apply_award(db, "alice", Award(eco_points=20, meals_units=4), reason=PointReason.food_donated, record_id="r-2")

    log = get_user_points_log(db, "alice")
    assert [(e.delta, e.reason, e.record_id) for e in log] == [
        (20, "food_donated", "r-2"),
        (60, "waste_recycled", "r-1"),
    ]


def test_uncommitted_award_rolls_back_with_the_caller(db, make_user):
    make_user("alice")
    apply_award(db, "alice", Award(eco_points=60, waste_kg=3.0), commit=False)
    db.rollback()
    assert _stats("alice").eco_points == 0


def test_two_concurrent_awards_are_both_counted(make_user):
    make_user("alice")
    barrier = threading.Barrier(2)
    errors = []

    def worker(points):
        session = SessionLocal()
        try:
            barrier.wait()
            apply_award(session, "alice", Award(eco_points=points, waste_kg=1.0))
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(p,)) for p in (10, 15)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    user = _stats("alice")
    assert user.eco_points == 25
    assert user.waste_recycling_count == 2
    assert user.waste_recycled == pytest.approx(2.0)


def test_many_concurrent_awards_sum_exactly(make_user):
    make_user("alice")
    points = list(range(1, 21))
    errors = []

    def worker(p):
        session = SessionLocal()
        try:
            apply_award(session, "alice", Award(eco_points=p, meals_units=1), reason=PointReason.food_donated)
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(p,)) for p in points]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    user = _stats("alice")
    assert user.eco_points == sum(points)
    assert user.food_donation_count == len(points)
    assert user.meals_rescued == pytest.approx(len(points))


def test_reversing_float_totals_never_goes_below_zero(db, make_user):
    from api.user.user_schema import UserStatsResponse

    make_user("alice")
    small, smaller = Award(eco_points=7, waste_kg=0.7), Award(eco_points=1, waste_kg=0.1)
    apply_award(db, "alice", small)
    apply_award(db, "alice", smaller)
    apply_award(db, "alice", small.reversed())
    apply_award(db, "alice", smaller.reversed())

    user = _stats("alice")
    assert user.waste_recycled == 0.0
    assert user.waste_recycling_count == 0
    assert UserStatsResponse.model_validate(user).waste_recycled == 0.0
