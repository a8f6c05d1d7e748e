"""
Queue repository: the only place that talks to the database for the queue.
"""

from datetime import date, datetime
from typing import Any, List, Mapping, Optional
from sqlalchemy import and_, case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carequeue.models.database import Appointment, Patient, User
from carequeue.models.queue import QueueStatus

DOCTOR_ROLE = "doctor"

# Driver connection failures (refused, reset) surface as OSError, unwrapped
STORAGE_ERRORS = (SQLAlchemyError, OSError)


class QueueRepository:
    """Reads and writes appointment rows backing the reception queue."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_todays_appointments(self, today: date) -> List[Mapping[str, Any]]:
        """Appointments dated ``today`` joined to patient and doctor, in storage order."""
        query = (
            select(
                Appointment.id,
                Appointment.appointment_id,
                Appointment.patient_id,
                Appointment.appointment_time,
                Appointment.appointment_date,
                Appointment.status,
                Appointment.notes,
                Appointment.appointment_type,
                Appointment.priority,
                Appointment.created_at,
                Patient.name.label("patient_name"),
                Patient.age,
                Patient.gender,
                Patient.contact_number.label("phone"),
                User.name.label("doctor_name"),
            )
            .select_from(Appointment)
            .outerjoin(Patient, Patient.patient_id == Appointment.patient_id)
            .outerjoin(User, User.id == Appointment.doctor_id)
            .where(Appointment.appointment_date == today)
            .order_by(Appointment.id)
        )
        result = await self.session.execute(query)
        return list(result.mappings().all())

    async def find_doctor_load(self, today: date) -> List[Mapping[str, Any]]:
        """Every doctor with the number of consultations in progress today."""
        active = func.count(case((Appointment.status == QueueStatus.IN_PROGRESS.value, 1)))
        query = (
            select(
                User.id,
                User.name,
                active.label("active_consultations"),
            )
            .select_from(User)
            .outerjoin(
                Appointment,
                and_(
                    Appointment.doctor_id == User.id,
                    Appointment.appointment_date == today,
                ),
            )
            .where(User.role == DOCTOR_ROLE)
            .group_by(User.id, User.name)
            .order_by(User.id)
        )
        result = await self.session.execute(query)
        return list(result.mappings().all())

    async def find_status(self, appointment_id: str) -> Optional[str]:
        """Current stored status, or None when the appointment does not exist."""
        query = select(Appointment.status).where(Appointment.appointment_id == appointment_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def update_status(
        self,
        appointment_id: str,
        status: str,
        notes: Optional[str],
        expected_current: str,
        now: datetime,
    ) -> int:
        """Set status (and notes when given) if the row still has ``expected_current``.

        Returns the number of rows changed; 0 means the row is gone or its
        status moved on since it was read.
        """
        values = {"status": status, "updated_at": now}
        if notes is not None:
            values["notes"] = notes

        statement = (
            update(Appointment)
            .where(
                Appointment.appointment_id == appointment_id,
                Appointment.status == expected_current,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return result.rowcount

    async def insert_walk_in(self, record: Appointment) -> int:
        """Insert a walk-in appointment and return its primary key."""
        self.session.add(record)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        await self.session.refresh(record)
        return record.id

    async def patient_exists(self, patient_id: str) -> bool:
        query = select(Patient.id).where(Patient.patient_id == patient_id)
        result = await self.session.execute(query)
        return result.first() is not None

    async def doctor_exists(self, doctor_id: int) -> bool:
        query = select(User.id).where(User.id == doctor_id, User.role == DOCTOR_ROLE)
        result = await self.session.execute(query)
        return result.first() is not None
