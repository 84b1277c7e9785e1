from .appointment import (
    Appointment,
    AppointmentRequest,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
    BookedSlot,
    CategorizedAppointments,
    DaySlots,
    NextSlot,
    OCCUPYING_STATUSES,
    TimeSlot
)
from .doctor import (
    Doctor,
    DoctorResponse,
    DoctorUpdate,
    Specialization,
    Weekday
)
from .profile import (
    DoctorRegistration,
    Patient,
    PatientRegistration,
    Profile,
    ProfileCompletion,
    ProfileResponse,
    UserRole
)
from .recommendation import (
    Recommendation,
    RecommendationRequest,
    RecommendationResponse,
    TimePreference,
    Urgency
)
from .analytics import (
    AnalyticsPeriod,
    AnalyticsSummary,
    DoctorDashboard,
    PatientDashboard
)

__all__ = [
    "Appointment",
    "AppointmentRequest",
    "AppointmentResponse",
    "AppointmentStatus",
    "AppointmentStatusUpdate",
    "BookedSlot",
    "CategorizedAppointments",
    "DaySlots",
    "NextSlot",
    "OCCUPYING_STATUSES",
    "TimeSlot",
    "Doctor",
    "DoctorResponse",
    "DoctorUpdate",
    "Specialization",
    "Weekday",
    "DoctorRegistration",
    "Patient",
    "PatientRegistration",
    "Profile",
    "ProfileCompletion",
    "ProfileResponse",
    "UserRole",
    "Recommendation",
    "RecommendationRequest",
    "RecommendationResponse",
    "TimePreference",
    "Urgency",
    "AnalyticsPeriod",
    "AnalyticsSummary",
    "DoctorDashboard",
    "PatientDashboard",
]
