from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime, date
from enum import Enum
import uuid

from careslot.utils.dates import normalize_time


class AppointmentStatus(str, Enum):
    """Appointment status enum."""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Statuses that hold a (doctor, date, time) slot against new bookings.
OCCUPYING_STATUSES = (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)


class BookedSlot(BaseModel):
    """The part of an appointment the slot calculator cares about."""
    doctor_id: str
    appointment_date: date
    appointment_time: str  # "HH:MM"
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

    @field_validator("appointment_time", mode="before")
    @classmethod
    def validate_time(cls, value):
        return normalize_time(value)

    @property
    def is_occupying(self) -> bool:
        return self.status in OCCUPYING_STATUSES


class Appointment(BookedSlot):
    """Complete appointment record."""
    appointment_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    patient_id: str
    reason_for_visit: Optional[str] = None
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class AppointmentRequest(BaseModel):
    """Booking request coming from the booking page."""
    patient_id: str = Field(..., min_length=1)
    doctor_id: str = Field(..., min_length=1)
    appointment_date: date
    appointment_time: str
    reason_for_visit: str = Field(..., max_length=1000)

    @field_validator("appointment_time")
    @classmethod
    def validate_time(cls, value):
        return normalize_time(value)

    @field_validator("reason_for_visit")
    @classmethod
    def validate_reason(cls, value):
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Reason for visit is required")
        return cleaned


class AppointmentStatusUpdate(BaseModel):
    """Status change, optionally with doctor notes."""
    status: AppointmentStatus
    notes: Optional[str] = None


class TimeSlot(BaseModel):
    """A bookable hour on a given date. Derived, never stored."""
    date: date
    time: str
    available: bool = True


class NextSlot(BaseModel):
    """Nearest open (date, time) found by the next-slot search."""
    date: date
    time: str


class DaySlots(BaseModel):
    """Slots offered for one doctor on one date."""
    doctor_id: str
    date: date
    is_bookable_date: bool
    slots: List[TimeSlot] = []


class CategorizedAppointments(BaseModel):
    upcoming: List[Appointment] = []
    past: List[Appointment] = []


class AppointmentResponse(BaseModel):
    """API response for appointment operations."""
    success: bool
    message: str
    appointment: Optional[Appointment] = None
    error: Optional[str] = None
