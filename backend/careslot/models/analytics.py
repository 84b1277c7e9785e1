from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from enum import Enum

from careslot.models.appointment import Appointment


class AnalyticsPeriod(str, Enum):
    ONE_MONTH = "1month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    ONE_YEAR = "1year"


PERIOD_MONTHS = {
    AnalyticsPeriod.ONE_MONTH: 1,
    AnalyticsPeriod.THREE_MONTHS: 3,
    AnalyticsPeriod.SIX_MONTHS: 6,
    AnalyticsPeriod.ONE_YEAR: 12,
}


class MonthlyStat(BaseModel):
    month: str  # "Oct 2026"
    appointments: int
    revenue: float


class StatusCount(BaseModel):
    status: str
    count: int
    color: str


class SpecializationCount(BaseModel):
    specialization: str
    count: int


class BusyDay(BaseModel):
    day: str
    appointments: int


class AgeGroupCount(BaseModel):
    age_group: str
    count: int


class AnalyticsSummary(BaseModel):
    """Practice analytics for the selected period."""
    period: AnalyticsPeriod
    start_date: date
    total_patients: int
    total_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    total_revenue: float
    average_rating: float
    appointments_by_month: List[MonthlyStat]
    appointments_by_status: List[StatusCount]
    appointments_by_specialization: List[SpecializationCount]
    busy_days: List[BusyDay]
    patient_demographics: List[AgeGroupCount]


class DashboardAppointment(BaseModel):
    """Appointment card with the label shown on dashboards."""
    appointment: Appointment
    label: str
    counterpart_name: Optional[str] = None


class PatientDashboard(BaseModel):
    patient_id: str
    upcoming: List[DashboardAppointment] = []
    recent: List[DashboardAppointment] = []


class DoctorStats(BaseModel):
    total_appointments: int
    today_appointments: int
    pending_appointments: int
    completed_appointments: int


class DoctorDashboard(BaseModel):
    doctor_id: str
    stats: DoctorStats
    today: List[DashboardAppointment] = []
    upcoming: List[DashboardAppointment] = []
