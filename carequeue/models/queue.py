"""
Queue status model, transition table and derivation rules.
"""

from datetime import datetime, time
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


class QueueStatus(str, Enum):
    """Queue entry status enumeration."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    NO_SHOW = "no-show"
    EMERGENCY = "emergency"


class AppointmentType(str, Enum):
    """How the patient arrived in the queue."""
    SCHEDULED = "scheduled"
    WALK_IN = "walk-in"
    EMERGENCY = "emergency"


class QueuePriority(str, Enum):
    """Triage priority set at the reception desk."""
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


ALLOWED_TRANSITIONS: Dict[QueueStatus, FrozenSet[QueueStatus]] = {
    QueueStatus.SCHEDULED: frozenset({
        QueueStatus.IN_PROGRESS,
        QueueStatus.NO_SHOW,
        QueueStatus.EMERGENCY,
    }),
    QueueStatus.IN_PROGRESS: frozenset({QueueStatus.COMPLETED}),
    QueueStatus.EMERGENCY: frozenset({
        QueueStatus.IN_PROGRESS,
        QueueStatus.COMPLETED,
    }),
    QueueStatus.COMPLETED: frozenset(),
    QueueStatus.NO_SHOW: frozenset(),
}

PRIORITY_ORDER: Dict[str, int] = {
    QueueStatus.IN_PROGRESS.value: 1,
    QueueStatus.SCHEDULED.value: 2,
    QueueStatus.COMPLETED.value: 3,
}
UNRANKED_PRIORITY_ORDER = 4


def parse_status(value: Optional[str]) -> Optional[QueueStatus]:
    """Return the matching status, or None for unknown values."""
    try:
        return QueueStatus(value)
    except ValueError:
        return None


class QueueRules:
    """Pure rules used to assemble and mutate the queue."""

    @staticmethod
    def priority_order(status: Optional[str]) -> int:
        return PRIORITY_ORDER.get(status, UNRANKED_PRIORITY_ORDER)

    @staticmethod
    def appointment_type(
        appointment_time: Optional[time],
        notes: Optional[str],
        explicit_type: Optional[str] = None,
        marker: str = "emergency"
    ) -> str:
        """Classify an appointment.

        An explicitly stored type wins. Otherwise a missing time means a
        walk-in and a note containing the marker (any case) means an
        emergency.
        """
        if explicit_type:
            return explicit_type
        if appointment_time is None:
            return AppointmentType.WALK_IN.value
        if notes and marker and marker.lower() in notes.lower():
            return AppointmentType.EMERGENCY.value
        return AppointmentType.SCHEDULED.value

    @staticmethod
    def waiting_minutes(created_at: Optional[datetime], now: datetime) -> int:
        """Whole minutes since creation, never negative."""
        if created_at is None:
            return 0
        elapsed = (now - created_at).total_seconds()
        if elapsed <= 0:
            return 0
        return int(elapsed // 60)

    @staticmethod
    def sort_key(status: Optional[str], appointment_time: Optional[time]) -> Tuple:
        """Emergencies first, then priority order, then time with nulls last."""
        return (
            0 if status == QueueStatus.EMERGENCY.value else 1,
            QueueRules.priority_order(status),
            appointment_time is None,
            appointment_time or time.min,
        )

    @staticmethod
    def can_transition(current: QueueStatus, target: QueueStatus) -> bool:
        """Check whether ``current -> target`` is allowed. Same-state is a no-op."""
        if current == target:
            return True
        return target in ALLOWED_TRANSITIONS.get(current, frozenset())

    @staticmethod
    def is_terminal(status: QueueStatus) -> bool:
        return not ALLOWED_TRANSITIONS.get(status)
