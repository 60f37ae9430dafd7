"""Fixtures: SQLite em memória, sessões rastreadas e fábricas de dados."""

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.security import create_user_token
from app.database import enable_sqlite_foreign_keys, get_session, get_session_factory
from app.main import app
from app.models.appointment import Appointment, AppointmentStatus
from app.models.barber import Barber
from app.models import notification  # noqa: F401  (registra as tabelas)
from app.models.service import Service
from app.models.user import User, UserRole


class TrackingSession(Session):
    """Session que conta rollbacks e fechamentos."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.rollback_calls = 0
        self.close_calls = 0

    def rollback(self):
        self.rollback_calls += 1
        super().rollback()

    def close(self):
        self.close_calls += 1
        super().close()


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def opened_sessions():
    return []


@pytest.fixture
def session_factory(engine, opened_sessions):
    def factory():
        tx_session = TrackingSession(engine)
        opened_sessions.append(tx_session)
        return tx_session

    return factory


@pytest.fixture(name="client")
def client_fixture(session, session_factory):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    yield TestClient(app)

    app.dependency_overrides.clear()


# =========================
# FÁBRICAS
# =========================

@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make_user(role=UserRole.CLIENT, first_name="Anna", last_name="Nowak", email=None):
        counter["n"] += 1
        user = User(
            email=email or f"{role.value}{counter['n']}@example.com",
            first_name=first_name,
            last_name=last_name,
            password_hash="not-a-real-hash",
            role=role,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_barber(session, make_user):
    def _make_barber(working_hours="09:00-11:00", first_name="Jan", last_name="Barber"):
        user = make_user(UserRole.BARBER, first_name=first_name, last_name=last_name)
        barber = Barber(user_id=user.id, job_title="Senior Barber", experience_years=5, working_hours=working_hours)
        session.add(barber)
        session.commit()
        session.refresh(barber)
        return barber

    return _make_barber


@pytest.fixture
def make_service(session):
    def _make_service(name="Haircut", duration=30, price="40.00", is_active=True):
        service = Service(name=name, duration=duration, price=Decimal(price), is_active=is_active)
        session.add(service)
        session.commit()
        session.refresh(service)
        return service

    return _make_service


@pytest.fixture
def make_appointment(session):
    def _make_appointment(client, barber, service, when: datetime, status=AppointmentStatus.CONFIRMED):
        appt = Appointment(
            client_id=client.id,
            barber_id=barber.id,
            service_id=service.id,
            appointment_time=when,
            status=status,
        )
        session.add(appt)
        session.commit()
        session.refresh(appt)
        return appt

    return _make_appointment


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_user_token(user)}"}

    return _auth_headers
