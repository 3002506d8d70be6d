"""
Shared pytest fixtures.

The environment is pinned before carequeue is imported so that the module
level configuration (database URL, cache switch, timezone) picks it up.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["APP_TIMEZONE"] = "UTC"

from datetime import datetime, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from carequeue.database import Base, build_engine, get_db
from carequeue.main import app
from carequeue.models import Appointment, AppointmentStatus, Service, Staff, StaffStatus
from carequeue.shared import dates


@pytest.fixture
def db():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db):
    """API client sharing the test session"""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def day():
    """A calendar day safely in the future"""
    return dates.today() + timedelta(days=2)


@pytest.fixture
def at(day):
    """Build a stored datetime on the test day at the given hour"""

    def _at(hour: int, minute: int = 0, offset_days: int = 0) -> datetime:
        return datetime.combine(day + timedelta(days=offset_days), time(hour, minute))

    return _at


@pytest.fixture
def make_staff(db):
    def _make(
        name="Dr. Lee",
        service_type="DOCTOR",
        daily_capacity=2,
        status=StaffStatus.AVAILABLE.value,
    ) -> Staff:
        staff = Staff(
            name=name, service_type=service_type, daily_capacity=daily_capacity, status=status
        )
        db.add(staff)
        db.commit()
        db.refresh(staff)
        return staff

    return _make


@pytest.fixture
def make_service(db):
    def _make(name="General Checkup", duration="MIN_30", required_staff_type="DOCTOR") -> Service:
        service = Service(name=name, duration=duration, required_staff_type=required_staff_type)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    return _make


@pytest.fixture
def make_appointment(db):
    """Insert an appointment directly, bypassing the engine"""

    def _make(
        service: Service,
        appointment_at: datetime,
        staff: Staff = None,
        customer_name="Jane Doe",
        status=AppointmentStatus.SCHEDULED.value,
    ) -> Appointment:
        appointment = Appointment(
            customer_name=customer_name,
            service_id=service.id,
            staff_id=staff.id if staff else None,
            appointment_at=appointment_at,
            status=status,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def file_sessions(tmp_path):
    """Session factory on a file-backed SQLite database, one connection per session"""
    engine = build_engine(f"sqlite:///{tmp_path / 'carequeue.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
