"""
Walk-in admission: puts an unscheduled arrival into today's queue.
"""

import logging
import secrets
import string
import time
from typing import Optional, Union

from carequeue.core.clock import Clock, system_clock
from carequeue.core.config import settings
from carequeue.core.exceptions import InvalidParameter, MissingParameter, NotFound, StorageUnavailable
from carequeue.core.logging import audit_logger
from carequeue.models.database import Appointment
from carequeue.models.queue import AppointmentType, QueuePriority, QueueStatus
from carequeue.repositories.queue_repository import STORAGE_ERRORS, QueueRepository

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_walk_in_id(prefix: str = "WLK", now_ms: Optional[int] = None) -> str:
    """Prefix + base-36 millisecond timestamp + 4 random base-36 characters."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(4))
    return f"{prefix}{to_base36(now_ms)}{suffix}".upper()


class WalkInAdmissionHandler:
    """Creates queue entries for patients without an appointment."""

    def __init__(self, repository: QueueRepository, clock: Clock = system_clock):
        self.repository = repository
        self.clock = clock

    async def admit(
        self,
        patient_id: Optional[str],
        doctor_id: Optional[Union[int, str]],
        priority: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> str:
        """Admit a walk-in and return the new external appointment id."""
        if not patient_id or doctor_id in (None, ""):
            audit_logger.log_rejected("walk_in", "missing_parameter", {"patient_id": patient_id, "doctor_id": doctor_id})
            raise MissingParameter("Missing patientId or doctorId")

        try:
            doctor_key = int(doctor_id)
        except (TypeError, ValueError):
            raise InvalidParameter(f"Invalid doctorId: {doctor_id}")

        try:
            queue_priority = QueuePriority(priority or QueuePriority.NORMAL.value)
        except ValueError:
            raise InvalidParameter(f"Invalid priority: {priority}")

        try:
            if not await self.repository.patient_exists(patient_id):
                raise NotFound(f"Patient {patient_id} not found", patient_id=patient_id)
            if not await self.repository.doctor_exists(doctor_key):
                raise NotFound(f"Doctor {doctor_key} not found", doctor_id=doctor_key)

            now = self.clock.now()
            record = Appointment(
                appointment_id=generate_walk_in_id(settings.walk_in_id_prefix),
                patient_id=patient_id,
                doctor_id=doctor_key,
                appointment_date=self.clock.today(),
                appointment_time=None,
                status=QueueStatus.SCHEDULED.value,
                notes=notes or settings.walk_in_default_note,
                appointment_type=AppointmentType.WALK_IN.value,
                priority=queue_priority.value,
                created_at=now,
                updated_at=now,
            )
            await self.repository.insert_walk_in(record)
        except STORAGE_ERRORS as e:
            logger.error(f"Error adding walk-in for patient {patient_id}: {str(e)}")
            raise StorageUnavailable("Failed to add patient to queue")

        audit_logger.log_walk_in(record.appointment_id, patient_id, doctor_key, queue_priority.value)
        logger.info(f"Walk-in admitted: {record.appointment_id}")
        return record.appointment_id
