"""
Shared fixtures.

Every test gets its own app built on an in-memory SQLite database. Fixture
helpers commit their rows so requests served by the app (which open their
own sessions) can see them.
"""

from __future__ import annotations

from datetime import time as dt_time
from decimal import Decimal
from typing import Any, Callable, Optional

from fastapi.testclient import TestClient
import pytest

from classbook.auth import create_access_token, get_password_hash
from classbook.core.config import Settings
from classbook.database import Base
from classbook.main import create_app
from classbook.models import (
    Customer,
    Enrollment,
    ExerciseType,
    Instructor,
    ScheduledClass,
    User,
)

from tests.helpers import WEBHOOK_SECRET

TEST_PASSWORD = "Correct-Horse-42"
_TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite:///:memory:",
        stripe_webhook_secret=WEBHOOK_SECRET,
        secret_key="classbook-test-secret",
        environment="test",
        cors_origins="http://localhost:3000",
        _env_file=None,
    )


@pytest.fixture
def app(test_settings: Settings):
    application = create_app(test_settings)
    Base.metadata.create_all(application.state.engine)
    yield application
    Base.metadata.drop_all(application.state.engine)
    application.state.engine.dispose()


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_user(db) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(role: str = "customer", email: Optional[str] = None, **overrides: Any) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role}{counter['n']}@example.com",
            hashed_password=_TEST_PASSWORD_HASH,
            full_name=overrides.pop("full_name", f"Test {role.title()}"),
            role=role,
            is_active=overrides.pop("is_active", True),
            **overrides,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user("admin", email="admin@example.com")


@pytest.fixture
def customer_user(make_user) -> User:
    return make_user("customer", email="member@example.com")


@pytest.fixture
def login_as(client: TestClient, test_settings: Settings) -> Callable[[User], TestClient]:
    """Put a valid session cookie for ``user`` on the test client."""

    def _login(user: User) -> TestClient:
        token = create_access_token({"sub": user.id, "email": user.email}, test_settings)
        client.cookies.set(test_settings.session_cookie_name, token)
        return client

    return _login


@pytest.fixture
def admin_client(login_as, admin_user) -> TestClient:
    return login_as(admin_user)


@pytest.fixture
def exercise_type(db) -> ExerciseType:
    row = ExerciseType(name="Aqua Aerobics")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def instructor(db) -> Instructor:
    row = Instructor(name="Dana Coach", email="dana@example.com", phone="0400 000 000")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def make_class(db, instructor, exercise_type) -> Callable[..., ScheduledClass]:
    counter = {"n": 0}

    def _make(**overrides: Any) -> ScheduledClass:
        counter["n"] += 1
        values: dict[str, Any] = {
            "name": f"Morning Class {counter['n']}",
            "code": f"CLS-{counter['n']:03d}",
            "exercise_type_id": exercise_type.id,
            "venue": "Community Pool",
            "address": "1 Harbour St",
            "zip_code": "2000",
            "day_of_week": 3,
            "start_time": dt_time(9, 0),
            "end_time": dt_time(10, 0),
            "instructor_id": instructor.id,
            "fee_criteria": "Per term",
            "fee_amount": Decimal("120.00"),
            "term": "Term1",
            "class_capacity": 20,
            "is_subsidised": False,
        }
        values.update(overrides)
        row = ScheduledClass(**values)
        db.add(row)
        db.commit()
        return row

    return _make


@pytest.fixture
def customer(db) -> Customer:
    row = Customer(
        first_name="Ada",
        surname="Swimmer",
        email="ada@example.com",
        contact_no="0411 111 111",
        medical_history="Mild asthma",
        paq_form=True,
    )
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def make_enrollment(db, customer) -> Callable[..., Enrollment]:
    def _make(**overrides: Any) -> Enrollment:
        values: dict[str, Any] = {
            "customer_id": customer.id,
            "enrollment_type": "standard",
            "payment_status": "pending",
            "status": "active",
            "payment_intent": None,
        }
        values.update(overrides)
        row = Enrollment(**values)
        db.add(row)
        db.commit()
        return row

    return _make

