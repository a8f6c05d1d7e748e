"""
Database models and queue rules for CareQueue.
"""

from carequeue.models.database import Appointment, Patient, User
from carequeue.models.queue import (
    ALLOWED_TRANSITIONS,
    AppointmentType,
    QueuePriority,
    QueueRules,
    QueueStatus,
    parse_status,
)

__all__ = [
    "Appointment",
    "Patient",
    "User",
    "ALLOWED_TRANSITIONS",
    "AppointmentType",
    "QueuePriority",
    "QueueRules",
    "QueueStatus",
    "parse_status",
]
