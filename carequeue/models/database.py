"""
SQLModel table models for the hospital tables the queue reads and writes.
"""

from datetime import datetime, date, time, timezone
from typing import Optional
from sqlmodel import SQLModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PatientBase(SQLModel):
    """Base patient model."""
    name: str
    age: Optional[int] = None
    gender: Optional[str] = None
    contact_number: Optional[str] = None


class Patient(PatientBase, table=True):
    """Patient model. ``patient_id`` is the code appointments refer to."""
    __tablename__ = "patients"
    __table_args__ = {'extend_existing': True}

    id: Optional[int] = Field(default=None, primary_key=True)
    patient_id: str = Field(unique=True, index=True, max_length=32)
    created_at: datetime = Field(default_factory=utc_now)


class UserBase(SQLModel):
    """Base user model."""
    name: str
    email: Optional[str] = None
    role: str = Field(default="staff")
    is_active: bool = Field(default=True)


class User(UserBase, table=True):
    """Staff user. Doctors have ``role == "doctor"``."""
    __tablename__ = "users"
    __table_args__ = {'extend_existing': True}

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)


class AppointmentBase(SQLModel):
    """Base appointment model."""
    appointment_date: date = Field(index=True)
    appointment_time: Optional[time] = None
    # Plain VARCHAR so unknown values written by other flows still load
    status: str = Field(default="scheduled", max_length=32)
    notes: Optional[str] = None
    appointment_type: Optional[str] = Field(default=None, max_length=16)
    priority: str = Field(default="normal", max_length=16)


class Appointment(AppointmentBase, table=True):
    """Appointment row backing one queue entry."""
    __tablename__ = "appointments"
    __table_args__ = {'extend_existing': True}

    id: Optional[int] = Field(default=None, primary_key=True)
    appointment_id: str = Field(unique=True, index=True, max_length=32)
    patient_id: str = Field(foreign_key="patients.patient_id", index=True)
    doctor_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
