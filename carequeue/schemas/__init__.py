"""
Pydantic schemas for request/response models.
"""

from .queue import (
    DoctorAvailability,
    MessageResponse,
    QueueEntry,
    QueueResponse,
    QueueStats,
    StatusUpdateRequest,
    WalkInRequest,
    WalkInResponse,
)

__all__ = [
    "DoctorAvailability",
    "MessageResponse",
    "QueueEntry",
    "QueueResponse",
    "QueueStats",
    "StatusUpdateRequest",
    "WalkInRequest",
    "WalkInResponse",
]
