from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional
from enum import Enum

from careslot.utils.dates import WEEKDAY_NAMES, normalize_time, parse_hour


class Specialization(str, Enum):
    """Medical specializations offered in the directory."""
    GENERAL_PRACTICE = "General Practice"
    CARDIOLOGY = "Cardiology"
    DERMATOLOGY = "Dermatology"
    ENDOCRINOLOGY = "Endocrinology"
    GASTROENTEROLOGY = "Gastroenterology"
    NEUROLOGY = "Neurology"
    ONCOLOGY = "Oncology"
    ORTHOPEDICS = "Orthopedics"
    PEDIATRICS = "Pediatrics"
    PSYCHIATRY = "Psychiatry"
    RADIOLOGY = "Radiology"
    SURGERY = "Surgery"
    OTHER = "Other"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


def clean_days(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple, set)):
        raise ValueError("available_days must be a list of weekday names")
    days = []
    for day in value:
        name = str(getattr(day, "value", day)).strip().lower()
        # unknown names are dropped, duplicates collapse
        if name in WEEKDAY_NAMES and name not in days:
            days.append(name)
    return days


def clean_hours(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return normalize_time(text)
    except ValueError:
        # kept as-is; parse_hour() yields None and the doctor gets no slots
        return text


class Doctor(BaseModel):
    """Doctor profile together with the weekly availability window.

    Only ``doctor_id`` is required. Missing hours or days mean the doctor
    publishes no bookable slots, never an error.
    """
    doctor_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    full_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None

    license_number: Optional[str] = None
    specialization: Optional[Specialization] = None
    years_of_experience: int = Field(0, ge=0)
    education: Optional[str] = None
    certifications: Optional[str] = None
    bio: Optional[str] = None
    consultation_fee: float = Field(0, ge=0)

    # Availability
    available_days: List[Weekday] = []
    available_hours_start: Optional[str] = None  # "09:00"
    available_hours_end: Optional[str] = None  # "17:00"

    @field_validator("available_days", mode="before")
    @classmethod
    def validate_days(cls, value):
        return clean_days(value)

    @field_validator("available_hours_start", "available_hours_end", mode="before")
    @classmethod
    def validate_hours(cls, value):
        return clean_hours(value)

    def __str__(self):
        name = self.full_name or self.doctor_id
        return f"Dr. {name} ({self.specialization_name or 'Unspecified'})"

    @property
    def specialization_name(self) -> str:
        return self.specialization.value if self.specialization else ""

    @property
    def start_hour(self) -> Optional[int]:
        return parse_hour(self.available_hours_start)

    @property
    def end_hour(self) -> Optional[int]:
        return parse_hour(self.available_hours_end)

    @property
    def day_names(self) -> List[str]:
        return [day.value for day in self.available_days]

    def is_available_on_day(self, day_name: str) -> bool:
        return day_name.lower() in self.day_names


class DoctorUpdate(BaseModel):
    """Editable fields of a doctor's own profile (doctor dashboard)."""
    specialization: Optional[Specialization] = None
    years_of_experience: Optional[int] = Field(None, ge=0)
    education: Optional[str] = None
    certifications: Optional[str] = None
    consultation_fee: Optional[float] = Field(None, ge=0)
    available_days: Optional[List[Weekday]] = None
    available_hours_start: Optional[str] = None
    available_hours_end: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("available_days", mode="before")
    @classmethod
    def validate_days(cls, value):
        if value is None:
            return None
        return clean_days(value)

    @field_validator("available_hours_start", "available_hours_end")
    @classmethod
    def validate_hours(cls, value):
        if value is None:
            return None
        return normalize_time(value)

    def changes(self) -> Dict[str, Any]:
        """Fields the caller actually sent.

        An explicit null clears a nullable field such as the hours; it is
        ignored for fields a doctor record cannot hold as null.
        """
        sent = self.model_dump(mode="json", exclude_unset=True)
        return {
            name: value for name, value in sent.items()
            if value is not None or name in CLEARABLE_DOCTOR_FIELDS
        }


CLEARABLE_DOCTOR_FIELDS = frozenset({
    "specialization",
    "education",
    "certifications",
    "available_hours_start",
    "available_hours_end",
    "bio",
})


class DoctorResponse(BaseModel):
    """API response for doctor operations."""
    success: bool
    message: str
    doctor: Optional[Doctor] = None
    error: Optional[str] = None
