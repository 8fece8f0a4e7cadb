import os
import tempfile
from datetime import date, timedelta

# settings are read once at import, so the environment goes first
_TMP = tempfile.mkdtemp(prefix="ecocycle-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-with-at-least-32-characters"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from main import app
from config.database import Base, SessionLocal, engine
from helpers.token_helper import create_identity_token
from api.user.user_service import get_or_create_profile
from api.action_records.action_records_schema import Address, FoodRecordCreate, WasteRecordCreate


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers():
    def _headers(user_id="alice", roles=None, **claims):
        token = create_identity_token(user_id, roles=roles, name=claims.get("name", user_id.title()),
                                      email=claims.get("email", f"{user_id}@example.com"))
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_user(db):
    def _make(user_id="alice", name=None, roles=None):
        return get_or_create_profile(db, {
            "id": user_id,
            "name": name or user_id.title(),
            "email": f"{user_id}@example.com",
            "roles": roles or ["user"],
        })
    return _make


@pytest.fixture
def tomorrow():
    return date.today() + timedelta(days=1)


@pytest.fixture
def waste_payload(tomorrow):
    def _payload(waste_type="metal", weight=3.0, **overrides):
        data = {
            "waste_type": waste_type,
            "weight": weight,
            "description": "Bag of cans",
            "address": Address(street="1 Main St", city="Springfield", state="IL", postal_code="62701"),
            "preferred_pickup_date": tomorrow,
        }
        data.update(overrides)
        return WasteRecordCreate(**data)
    return _payload


@pytest.fixture
def food_payload(tomorrow):
    def _payload(quantity=4, food_type="Cooked Meals", **overrides):
        data = {
            "food_type": food_type,
            "quantity": quantity,
            "expiry_date": tomorrow + timedelta(days=1),
            "description": "Trays of rice",
            "address": Address(street="1 Main St", city="Springfield", state="IL", postal_code="62701"),
            "preferred_pickup_date": tomorrow,
        }
        data.update(overrides)
        return FoodRecordCreate(**data)
    return _payload
