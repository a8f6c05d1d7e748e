"""
Queue assembler: builds today's ordered reception queue.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

from carequeue.core.clock import Clock, system_clock
from carequeue.core.config import settings
from carequeue.core.exceptions import QueueFetchError
from carequeue.models.queue import QueuePriority, QueueRules, QueueStatus
from carequeue.repositories.queue_repository import STORAGE_ERRORS, QueueRepository
from carequeue.schemas.queue import DoctorAvailability, QueueEntry, QueueResponse, QueueStats

logger = logging.getLogger(__name__)


def build_entry(row: Mapping[str, Any], now: datetime, marker: str) -> QueueEntry:
    """Turn one joined appointment row into a queue entry with derived fields."""
    return QueueEntry(
        id=row["id"],
        appointment_id=row["appointment_id"],
        patient_id=row["patient_id"],
        patient_name=row["patient_name"],
        age=row["age"],
        gender=row["gender"],
        phone=row["phone"],
        doctor_name=row["doctor_name"],
        appointment_time=row["appointment_time"],
        appointment_date=row["appointment_date"],
        status=row["status"],
        appointment_type=QueueRules.appointment_type(
            row["appointment_time"],
            row["notes"],
            explicit_type=row["appointment_type"],
            marker=marker,
        ),
        priority=row["priority"] or QueuePriority.NORMAL.value,
        priority_order=QueueRules.priority_order(row["status"]),
        waiting_time_minutes=QueueRules.waiting_minutes(row["created_at"], now),
        notes=row["notes"],
    )


def order_queue(entries: Iterable[QueueEntry]) -> List[QueueEntry]:
    """Sort entries for display. ``sorted`` is stable so storage order breaks ties."""
    return sorted(
        entries,
        key=lambda e: QueueRules.sort_key(e.status, e.appointment_time),
    )


def compute_stats(queue: List[QueueEntry]) -> QueueStats:
    """Summary counters shown above the queue."""
    total = len(queue)
    average_wait = 0
    if total:
        average_wait = round(sum(e.waiting_time_minutes for e in queue) / total)

    return QueueStats(
        total=total,
        waiting=len([e for e in queue if e.status == QueueStatus.SCHEDULED.value]),
        in_consultation=len([e for e in queue if e.status == QueueStatus.IN_PROGRESS.value]),
        completed=len([e for e in queue if e.status == QueueStatus.COMPLETED.value]),
        emergency=len([e for e in queue if e.status == QueueStatus.EMERGENCY.value]),
        average_wait_minutes=average_wait,
    )


def build_doctor_availability(row: Mapping[str, Any]) -> DoctorAvailability:
    active = row["active_consultations"] or 0
    return DoctorAvailability(
        id=row["id"],
        name=row["name"],
        active_consultations=active,
        status="busy" if active > 0 else "available",
    )


class QueueAssembler:
    """Read-only view of today's queue, doctor availability and counters."""

    def __init__(
        self,
        repository: QueueRepository,
        clock: Clock = system_clock,
        timeout_seconds: Optional[float] = None,
        emergency_marker: Optional[str] = None,
    ):
        self.repository = repository
        self.clock = clock
        self.timeout_seconds = timeout_seconds or settings.queue_read_timeout_seconds
        self.emergency_marker = emergency_marker or settings.queue_emergency_marker

    async def _load(self, today):
        rows = await self.repository.find_todays_appointments(today)
        doctor_rows = await self.repository.find_doctor_load(today)
        return rows, doctor_rows

    async def assemble(self) -> QueueResponse:
        """Assemble the queue. Raises QueueFetchError instead of returning a partial list."""
        now = self.clock.now()
        today = self.clock.today()

        try:
            rows, doctor_rows = await asyncio.wait_for(self._load(today), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Queue read for {today} timed out after {self.timeout_seconds}s")
            raise QueueFetchError()
        except STORAGE_ERRORS as e:
            logger.error(f"Error reading queue for {today}: {str(e)}")
            raise QueueFetchError()

        queue = order_queue(build_entry(row, now, self.emergency_marker) for row in rows)
        doctors = [build_doctor_availability(row) for row in doctor_rows]
        stats = compute_stats(queue)

        logger.debug(f"Queue assembled for {today}: {stats.total} entries")
        return QueueResponse(queue=queue, doctors=doctors, stats=stats)
