"""
Schemas for the reception queue endpoints.
"""

from datetime import date, time
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def number_to_str(v):
    """Accept numeric ids and codes where the body carries strings."""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class CamelSchema(BaseModel):
    """Base schema serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class QueueEntry(CamelSchema):
    """One patient in today's queue."""

    id: int
    appointment_id: str
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    doctor_name: Optional[str] = None
    appointment_time: Optional[time] = None
    appointment_date: date
    status: str
    appointment_type: str
    priority: str = "normal"
    priority_order: int
    waiting_time_minutes: int = Field(ge=0)
    notes: Optional[str] = None


class DoctorAvailability(CamelSchema):
    id: int
    name: str
    active_consultations: int = 0
    status: str


class QueueStats(CamelSchema):
    total: int = 0
    waiting: int = 0
    in_consultation: int = 0
    completed: int = 0
    emergency: int = 0
    average_wait_minutes: int = 0


class QueueResponse(CamelSchema):
    """Assembled queue for today."""

    queue: List[QueueEntry] = Field(default_factory=list)
    doctors: List[DoctorAvailability] = Field(default_factory=list)
    stats: QueueStats = Field(default_factory=QueueStats)


class StatusUpdateRequest(CamelSchema):
    """Body of ``PUT /queue``. Required fields are checked by the service."""

    appointment_id: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    expected_status: Optional[str] = None

    coerce_numbers = field_validator(
        "appointment_id", "status", "notes", "expected_status", mode="before"
    )(number_to_str)


class WalkInRequest(CamelSchema):
    """Body of ``POST /queue``. Required fields are checked by the service."""

    patient_id: Optional[str] = None
    doctor_id: Optional[Union[int, str]] = None
    priority: Optional[str] = None
    notes: Optional[str] = None

    coerce_numbers = field_validator("patient_id", "priority", "notes", mode="before")(number_to_str)


class MessageResponse(BaseModel):
    message: str


class WalkInResponse(CamelSchema):
    message: str
    appointment_id: str
