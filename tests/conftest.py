import os

# Must be set before carequeue settings are first imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SKIP_DB_CHECK"] = "1"

from datetime import date, datetime, time, timezone
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient

from carequeue.core.clock import Clock, get_clock
from carequeue.db.base import build_engine, build_session_factory, init_db
from carequeue.db.session import db_manager
from carequeue.main import app
from carequeue.models.database import Appointment, Patient, User
from carequeue.repositories.queue_repository import QueueRepository

FIXED_NOW = datetime(2026, 3, 2, 10, 30, tzinfo=timezone.utc)
TODAY = FIXED_NOW.date()


class Seeder:
    """Inserts rows through short-lived sessions so each insert is committed."""

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._counter = 0

    async def _save(self, obj):
        async with self.session_factory() as session:
            session.add(obj)
            await session.flush()
            await session.commit()
        return obj

    async def patient(
        self,
        patient_id: str = "P001",
        name: str = "Asha Verma",
        age: Optional[int] = 34,
        gender: Optional[str] = "female",
        phone: Optional[str] = "9876500001",
    ) -> Patient:
        return await self._save(
            Patient(patient_id=patient_id, name=name, age=age, gender=gender, contact_number=phone)
        )

    async def doctor(self, name: str = "Dr. Mehta", role: str = "doctor") -> User:
        return await self._save(User(name=name, email=f"{name.lower().replace(' ', '')}@example.org", role=role))

    async def appointment(
        self,
        patient_id: str = "P001",
        doctor_id: Optional[int] = None,
        at: Optional[time] = None,
        status: str = "scheduled",
        notes: Optional[str] = None,
        on: Optional[date] = None,
        created_at: Optional[datetime] = None,
        appointment_id: Optional[str] = None,
        appointment_type: Optional[str] = None,
    ) -> Appointment:
        self._counter += 1
        created = created_at or datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)
        return await self._save(
            Appointment(
                appointment_id=appointment_id or f"APT{self._counter:04d}",
                patient_id=patient_id,
                doctor_id=doctor_id,
                appointment_date=on or TODAY,
                appointment_time=at,
                status=status,
                notes=notes,
                appointment_type=appointment_type,
                created_at=created,
                updated_at=created,
            )
        )


@pytest.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)


@pytest.fixture
async def repository(session_factory):
    async with session_factory() as session:
        yield QueueRepository(session)


@pytest.fixture
def clock():
    return Clock(fixed=FIXED_NOW)


@pytest.fixture
async def client(session_factory, clock, monkeypatch):
    monkeypatch.setattr(db_manager, "session_factory", session_factory)
    app.dependency_overrides[get_clock] = lambda: clock
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
