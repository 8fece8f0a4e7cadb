import threading
import uuid
from datetime import datetime, timezone

import pytest

from api.action_records.action_records_model import ActionKind, ActionRecord, ActionStatus
from api.action_records.action_records_service import (
    create_record,
    get_record,
    list_records,
    list_records_by_user,
    submit_food,
    submit_waste,
    transition_status,
)
from api.user.user_model import User
from api.user.user_points_model import UserPointsLog
from api.user.user_service import get_user_points_log
from config.database import SessionLocal
from utils.exceptions import (
    InvalidStatusTransition,
    PermissionDenied,
    RecordNotFound,
    ValidationError,
    WriteConflict,
)
from utils.query_params import QueryParams

ALICE = {"id": "alice", "roles": ["user"]}
BOB = {"id": "bob", "roles": ["user"]}
ADMIN = {"id": "root", "roles": ["user", "admin"]}
PICKUP = datetime(2030, 1, 15, 10, 0, tzinfo=timezone.utc)


def _user(db, user_id):
    db.expire_all()
    return db.get(User, user_id)


def test_submit_waste_creates_record_and_awards_points(db, make_user, waste_payload):
    make_user("alice")
    record = submit_waste(db, "alice", waste_payload("metal", 3.0), ["/uploads/waste_images/alice/1_a.png"])

    assert record.kind == "waste"
    assert record.status == ActionStatus.pending.value
    assert record.points_awarded == 60
    assert record.weight == 3.0
    assert record.image_urls == ["/uploads/waste_images/alice/1_a.png"]
    assert record.address["city"] == "Springfield"

    user = _user(db, "alice")
    assert user.eco_points == 60
    assert user.waste_recycled == pytest.approx(3.0)
    assert user.waste_recycling_count == 1

    log = get_user_points_log(db, "alice")
    assert [(e.delta, e.reason, e.record_id) for e in log] == [(60, "waste_recycled", str(record.id))]


def test_submit_food_creates_record_and_awards_points(db, make_user, food_payload):
    make_user("alice")
    record = submit_food(db, "alice", food_payload(quantity=4))

    assert record.kind == "food"
    assert record.points_awarded == 20
    assert record.food_type == "Cooked Meals"

    user = _user(db, "alice")
    assert user.eco_points == 20
    assert user.meals_rescued == pytest.approx(4.0)
    assert user.food_donation_count == 1
    assert user.waste_recycled == 0.0


def test_points_snapshot_is_rounded(db, make_user, waste_payload):
    make_user("alice")
    record = submit_waste(db, "alice", waste_payload("plastic", 2.5))
    assert record.points_awarded == 38
    assert _user(db, "alice").eco_points == 38


def test_submit_for_missing_user_writes_nothing(db, waste_payload):
    with pytest.raises(WriteConflict):
        submit_waste(db, "ghost", waste_payload())

    assert db.query(ActionRecord).count() == 0
    assert db.query(UserPointsLog).count() == 0


def test_create_record_rejects_missing_fields(db, make_user):
    make_user("alice")
    with pytest.raises(ValidationError) as exc:
        create_record(db, {"user_id": "alice", "kind": "waste", "description": "cans", "points_awarded": 10})
    assert "waste_type" in exc.value.message
    assert "weight" in exc.value.message


def test_create_record_rejects_unknown_kind(db, make_user):
    make_user("alice")
    with pytest.raises(ValidationError):
        create_record(db, {"user_id": "alice", "kind": "compost", "description": "x", "points_awarded": 1})


def test_create_record_forces_pending_status(db, make_user):
    make_user("alice")
    record = create_record(db, {
        "user_id": "alice",
        "kind": "food",
        "food_type": "Bakery Items",
        "quantity": 2,
        "expiry_date": PICKUP.date(),
        "description": "bread",
        "points_awarded": 10,
        "status": "completed",
    })
    assert record.status == "pending"


def test_records_are_listed_newest_first(db, make_user, waste_payload, food_payload):
    make_user("alice")
    make_user("bob")
    first = submit_waste(db, "alice", waste_payload("paper", 1))
    second = submit_food(db, "alice", food_payload(quantity=2))
    third = submit_waste(db, "alice", waste_payload("glass", 2))
    submit_waste(db, "bob", waste_payload("metal", 1))

    result = list_records_by_user(db, "alice")
    assert result["total_count"] == 3
    assert [r.id for r in result["records"]] == [third.id, second.id, first.id]


def test_list_filters_by_kind_and_status(db, make_user, waste_payload, food_payload):
    make_user("alice")
    submit_waste(db, "alice", waste_payload())
    food = submit_food(db, "alice", food_payload())
    transition_status(db, food.id, ActionStatus.cancelled, ALICE)

    assert list_records_by_user(db, "alice", kind=ActionKind.waste)["total_count"] == 1
    cancelled = list_records_by_user(db, "alice", status=ActionStatus.cancelled)
    assert [r.id for r in cancelled["records"]] == [food.id]


def test_list_for_user_without_records_is_empty(db, make_user):
    make_user("carol")
    assert list_records_by_user(db, "carol") == {"total_count": 0, "records": []}


def test_list_paginates_with_query_params(db, make_user, waste_payload):
    make_user("alice")
    ids = [submit_waste(db, "alice", waste_payload(weight=w)).id for w in (1, 2, 3, 4)]

    page = list_records_by_user(db, "alice", params=QueryParams[ActionRecord](limit=2, offset=1))
    assert page["total_count"] == 4
    assert [r.id for r in page["records"]] == [ids[2], ids[1]]

    oldest = list_records_by_user(db, "alice", params=QueryParams[ActionRecord](sort_order="asc", limit=1))
    assert oldest["records"][0].id == ids[0]


def test_list_rejects_unknown_sort_column(db, make_user):
    make_user("alice")
    with pytest.raises(ValidationError):
        list_records_by_user(db, "alice", params=QueryParams[ActionRecord](sort_by="password"))


def test_list_all_records_spans_users(db, make_user, waste_payload):
    make_user("alice")
    make_user("bob")
    submit_waste(db, "alice", waste_payload())
    submit_waste(db, "bob", waste_payload())
    assert list_records(db)["total_count"] == 2


def test_get_record_unknown_or_malformed_id(db):
    with pytest.raises(RecordNotFound):
        get_record(db, uuid.uuid4())
    with pytest.raises(RecordNotFound):
        get_record(db, "not-a-uuid")


def test_admin_moves_record_through_lifecycle(db, make_user, waste_payload):
    make_user("alice")
    record = submit_waste(db, "alice", waste_payload())

    scheduled = transition_status(db, record.id, ActionStatus.scheduled, ADMIN, scheduled_pickup_date=PICKUP)
    assert scheduled.status == "scheduled"
    assert scheduled.scheduled_pickup_date is not None

    completed = transition_status(db, record.id, ActionStatus.completed, ADMIN)
    assert completed.status == "completed"
    assert completed.completed_date is not None
    # completion keeps the award
    assert _user(db, "alice").eco_points == 60


def test_scheduling_requires_a_date(db, make_user, waste_payload):
    make_user("alice")
    record = submit_waste(db, "alice", waste_payload())
    with pytest.raises(ValidationError):
        transition_status(db, record.id, ActionStatus.scheduled, ADMIN)
    assert get_record(db, record.id).status == "pending"


def test_terminal_states_cannot_change(db, make_user, waste_payload):
    make_user("alice")
    record = submit_waste(db, "alice", waste_payload())
    transition_status(db, record.id, ActionStatus.cancelled, ALICE)

    with pytest.raises(InvalidStatusTransition):
        transition_status(db, record.id, ActionStatus.scheduled, ADMIN, scheduled_pickup_date=PICKUP)
    with pytest.raises(InvalidStatusTransition):
        transition_status(db, record.id, ActionStatus.cancelled, ALICE)


def test_pending_cannot_skip_to_completed(db, make_user, waste_payload):
    make_user("alice")
    record = submit_waste(db, "alice", waste_payload())
    with pytest.raises(InvalidStatusTransition):
        transition_status(db, record.id, ActionStatus.completed, ADMIN)


def test_owner_cancel_reverses_the_award(db, make_user, waste_payload, food_payload):
    make_user("alice")
    waste = submit_waste(db, "alice", waste_payload("metal", 3.0))
    submit_food(db, "alice", food_payload(quantity=4))

    transition_status(db, waste.id, ActionStatus.cancelled, ALICE)

    user = _user(db, "alice")
    assert user.eco_points == 20
    assert user.waste_recycled == pytest.approx(0.0)
    assert user.waste_recycling_count == 0
    assert user.meals_rescued == pytest.approx(4.0)

    latest = get_user_points_log(db, "alice")[0]
    assert (latest.delta, latest.reason, latest.record_id) == (-60, "record_cancelled", str(waste.id))


def test_only_owner_or_admin_may_cancel(db, make_user, waste_payload):
    make_user("alice")
    make_user("bob")
    record = submit_waste(db, "alice", waste_payload())

    with pytest.raises(PermissionDenied):
        transition_status(db, record.id, ActionStatus.cancelled, BOB)

    transition_status(db, record.id, ActionStatus.cancelled, ADMIN)
    assert _user(db, "alice").eco_points == 0


def test_owner_cannot_schedule_own_record(db, make_user, waste_payload):
    make_user("alice")
    record = submit_waste(db, "alice", waste_payload())
    with pytest.raises(PermissionDenied):
        transition_status(db, record.id, ActionStatus.scheduled, ALICE, scheduled_pickup_date=PICKUP)


def test_submission_sends_notification(db, make_user, waste_payload):
    from api.notifications.notifications_service import list_notifications

    make_user("alice")
    record = submit_waste(db, "alice", waste_payload())
    transition_status(db, record.id, ActionStatus.scheduled, ADMIN, scheduled_pickup_date=PICKUP)

    notes = list_notifications(db, "alice")
    assert [n.related_id for n in notes] == [str(record.id)] * 2
    assert {n.type for n in notes} == {"waste"}
    assert any("60 EcoPoints" in n.body for n in notes)


def test_concurrent_submissions_are_all_counted(make_user, waste_payload):
    make_user("alice")
    weights = [1, 2, 3, 4, 5, 6]
    errors = []

    def worker(weight):
        session = SessionLocal()
        try:
            submit_waste(session, "alice", waste_payload("paper", weight))
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(w,)) for w in weights]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    session = SessionLocal()
    try:
        user = session.get(User, "alice")
        assert user.eco_points == sum(10 * w for w in weights)
        assert user.waste_recycling_count == len(weights)
        assert session.query(ActionRecord).count() == len(weights)
    finally:
        session.close()


def test_oversized_quantities_fail_validation(waste_payload, food_payload):
    from pydantic import ValidationError as PydanticValidationError
    from config.points_config import MAX_QUANTITY

    with pytest.raises(PydanticValidationError):
        waste_payload("electronic", MAX_QUANTITY + 1)
    with pytest.raises(PydanticValidationError):
        food_payload(quantity=1e18)
