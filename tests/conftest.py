import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-healthbridge-suite-0001")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_EMAIL", "admin@healthbridge.test")
os.environ.setdefault("ADMIN_PASSWORD", "admin-secret")

import pytest
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from fastapi.testclient import TestClient

from healthbridge.main import app
from healthbridge.core.config import settings
from healthbridge.core.security import PrincipalKind, create_access_token, get_password_hash
from healthbridge.domain.doctors.models import Doctor
from healthbridge.domain.users.models import User
from healthbridge.infrastructure.database import get_db, init_db
from healthbridge.services import cloudinary_service
from healthbridge.services.payment_gateway import PaymentGateway, RAZORPAY, STRIPE, get_payment_gateways

DOCTOR_PASSWORD = "doctorpass123"
USER_PASSWORD = "pw123456"


class FakeGateway(PaymentGateway):
    """In-memory payment provider; tests mark references paid explicitly"""

    def __init__(self, name: str):
        self.name = name
        self.orders = {}
        self.paid = set()

    def create_order(self, appointment_id, amount, origin=None):
        reference = f"{self.name}_ref_{len(self.orders) + 1}"
        self.orders[reference] = appointment_id
        return {
            "reference": reference,
            "order": {"id": reference, "amount": amount * 100, "receipt": appointment_id},
            "session_url": f"{origin}/checkout/{reference}",
        }

    def confirm_payment(self, reference):
        if reference in self.paid:
            return self.orders.get(reference)
        return None


@pytest.fixture(scope="function")
def engine(tmp_path):
    """File-backed SQLite database, fresh for each test."""
    test_engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def uploads(monkeypatch):
    """Replace the media store; returns the list of uploaded filenames."""
    uploaded = []

    def fake_upload(file_obj, filename, folder="healthbridge"):
        uploaded.append(filename)
        return f"https://cdn.test/{folder}/{filename}"

    monkeypatch.setattr(cloudinary_service, "upload_file", fake_upload)
    return uploaded


@pytest.fixture(scope="function")
def gateways():
    return {RAZORPAY: FakeGateway(RAZORPAY), STRIPE: FakeGateway(STRIPE)}


@pytest.fixture(scope="function")
def client(session_factory, gateways, uploads) -> Generator[TestClient, None, None]:
    """Create a test client with database and provider overrides."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateways] = lambda: gateways

    yield TestClient(app)

    app.dependency_overrides.clear()


def make_doctor(db: Session, email: str = "doc@x.com", **overrides) -> Doctor:
    data = {
        "name": "Dr. Richard James",
        "email": email,
        "password_hash": get_password_hash(DOCTOR_PASSWORD),
        "image": "https://cdn.test/doc.png",
        "speciality": "General physician",
        "degree": "MBBS",
        "experience": "4 Years",
        "about": "Primary care.",
        "fees": 50,
        "address": {"line1": "17th Cross, Richmond", "line2": "Circle, Ring Road"},
        "available": True,
        "slots_booked": {},
    }
    data.update(overrides)
    doctor = Doctor(**data)
    db.add(doctor)
    db.commit()
    db.refresh(doctor)
    return doctor


def make_user(db: Session, email: str = "a@x.com", name: str = "Alice") -> User:
    user = User(name=name, email=email, password_hash=get_password_hash(USER_PASSWORD))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def doctor_factory(db_session):
    return lambda **kwargs: make_doctor(db_session, **kwargs)


@pytest.fixture(scope="function")
def user_factory(db_session):
    return lambda **kwargs: make_user(db_session, **kwargs)


@pytest.fixture(scope="function")
def test_doctor(db_session) -> Doctor:
    return make_doctor(db_session)


@pytest.fixture(scope="function")
def test_user(db_session) -> User:
    return make_user(db_session)


@pytest.fixture(scope="function")
def user_headers(test_user) -> dict:
    return {"token": create_access_token(test_user.id, PrincipalKind.USER)}


@pytest.fixture(scope="function")
def doctor_headers(test_doctor) -> dict:
    return {"dtoken": create_access_token(test_doctor.id, PrincipalKind.DOCTOR)}


@pytest.fixture(scope="function")
def admin_headers() -> dict:
    return {"atoken": create_access_token(settings.ADMIN_EMAIL, PrincipalKind.ADMIN)}


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "auth: mark test as authentication related"
    )
    config.addinivalue_line(
        "markers", "booking: mark test as slot ledger and booking related"
    )
    config.addinivalue_line(
        "markers", "payments: mark test as payment related"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
