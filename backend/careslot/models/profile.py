from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date, datetime
from enum import Enum
import uuid

from careslot.models.doctor import Doctor, Specialization, Weekday, clean_days
from careslot.utils.dates import normalize_time, parse_hour


class UserRole(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"


class Profile(BaseModel):
    """Account-level profile shared by both roles."""
    user_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    full_name: str
    email: str
    phone: Optional[str] = None
    role: UserRole
    created_at: datetime = Field(default_factory=datetime.now)


class Patient(BaseModel):
    """Patient record created at registration or on profile completion."""
    patient_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    full_name: str = ""
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    medical_history: Optional[str] = None
    allergies: Optional[str] = None
    current_medications: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None

    def age_on(self, today: date) -> Optional[int]:
        """Age by calendar-year difference, as the practice analytics count it."""
        if self.date_of_birth is None:
            return None
        return today.year - self.date_of_birth.year


class _AccountFields(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=7, max_length=20)

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, value):
        return value.strip()

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value):
        return value.lower()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value):
        cleaned = value.replace(" ", "").replace("-", "")
        if not cleaned.lstrip("+").isdigit():
            raise ValueError("Phone number must contain only digits")
        return cleaned


class DoctorRegistration(_AccountFields):
    """Doctor sign-up: account, credentials and practice details."""
    license_number: str = Field(..., min_length=1)
    specialization: Specialization
    years_of_experience: int = Field(..., ge=0)
    education: str = Field(..., min_length=1)
    certifications: Optional[str] = None
    consultation_fee: float = Field(..., ge=0)
    available_days: List[Weekday] = []
    available_hours_start: Optional[str] = None
    available_hours_end: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("available_days", mode="before")
    @classmethod
    def validate_days(cls, value):
        return clean_days(value)

    @field_validator("available_hours_start", "available_hours_end")
    @classmethod
    def validate_hours(cls, value):
        if value is None or not value.strip():
            return None
        return normalize_time(value)

    @model_validator(mode="after")
    def check_hour_range(self):
        start = parse_hour(self.available_hours_start)
        end = parse_hour(self.available_hours_end)
        if start is not None and end is not None and end <= start:
            raise ValueError("available_hours_end must be after available_hours_start")
        return self

    def to_doctor(self, user_id: str) -> Doctor:
        return Doctor(
            doctor_id=str(uuid.uuid4()),
            user_id=user_id,
            full_name=self.full_name,
            email=self.email,
            phone=self.phone,
            license_number=self.license_number,
            specialization=self.specialization,
            years_of_experience=self.years_of_experience,
            education=self.education,
            certifications=self.certifications,
            consultation_fee=self.consultation_fee,
            available_days=self.available_days,
            available_hours_start=self.available_hours_start,
            available_hours_end=self.available_hours_end,
            bio=self.bio,
        )


class PatientDetails(BaseModel):
    """Medical and contact details collected for a patient."""
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    medical_history: Optional[str] = None
    allergies: Optional[str] = None
    current_medications: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_patient(self, user_id: str, full_name: str = "") -> Patient:
        details = self.model_dump(include=set(PatientDetails.model_fields))
        return Patient(user_id=user_id, full_name=full_name, **details)


class PatientRegistration(_AccountFields, PatientDetails):
    """Patient sign-up. Date of birth, gender, address and an emergency
    contact are required at registration, unlike profile completion."""

    @model_validator(mode="after")
    def check_required(self):
        missing = [
            name for name in (
                "date_of_birth",
                "gender",
                "address",
                "emergency_contact_name",
                "emergency_contact_phone",
            )
            if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        return self


class ProfileCompletion(PatientDetails):
    """Payload of the complete-profile page."""
    phone: Optional[str] = None


class ProfileResponse(BaseModel):
    """API response for registration and profile operations."""
    success: bool
    message: str
    profile: Optional[Profile] = None
    doctor: Optional[Doctor] = None
    patient: Optional[Patient] = None
    already_completed: bool = False
    error: Optional[str] = None
