from datetime import date, datetime
from typing import Dict, Optional, Sequence

import pytz

from careslot.config import settings
from careslot.models.analytics import (
    DashboardAppointment,
    DoctorDashboard,
    DoctorStats,
    PatientDashboard
)
from careslot.models.appointment import Appointment, AppointmentStatus
from careslot.models.doctor import Doctor
from careslot.models.profile import Patient
from careslot.services.appointment_service import appointment_service
from careslot.services.doctor_service import doctor_service
from careslot.services.profile_service import profile_service
from careslot.utils.dates import day_label
from careslot.utils.logger import app_logger as logger


PATIENT_UPCOMING_LIMIT = 3
PATIENT_RECENT_LIMIT = 3
DOCTOR_UPCOMING_LIMIT = 5


def _card(appointment: Appointment, today: date, name: Optional[str]) -> DashboardAppointment:
    return DashboardAppointment(
        appointment=appointment,
        label=day_label(appointment.appointment_date, today),
        counterpart_name=name
    )


def build_patient_dashboard(
    patient_id: str,
    appointments: Sequence[Appointment],
    doctors: Dict[str, Doctor],
    today: date
) -> PatientDashboard:
    """Next few upcoming visits and the most recent completed ones."""
    def doctor_name(apt: Appointment) -> Optional[str]:
        doctor = doctors.get(apt.doctor_id)
        return f"Dr. {doctor.full_name}" if doctor else None

    upcoming = [
        apt for apt in appointments
        if apt.appointment_date >= today and apt.status != AppointmentStatus.CANCELLED
    ][:PATIENT_UPCOMING_LIMIT]
    recent = [
        apt for apt in appointments
        if apt.status == AppointmentStatus.COMPLETED
    ][:PATIENT_RECENT_LIMIT]

    return PatientDashboard(
        patient_id=patient_id,
        upcoming=[_card(apt, today, doctor_name(apt)) for apt in upcoming],
        recent=[_card(apt, today, doctor_name(apt)) for apt in recent]
    )


def build_doctor_dashboard(
    doctor_id: str,
    appointments: Sequence[Appointment],
    patients: Dict[str, Patient],
    today: date
) -> DoctorDashboard:
    """Day view and headline counts for a doctor."""
    def patient_name(apt: Appointment) -> Optional[str]:
        patient = patients.get(apt.patient_id)
        return patient.full_name if patient else None

    active = [apt for apt in appointments if apt.status != AppointmentStatus.CANCELLED]
    todays = [apt for apt in active if apt.appointment_date == today]
    upcoming = [apt for apt in active if apt.appointment_date > today][:DOCTOR_UPCOMING_LIMIT]

    stats = DoctorStats(
        total_appointments=len(appointments),
        today_appointments=len(todays),
        pending_appointments=sum(1 for apt in appointments if apt.status == AppointmentStatus.SCHEDULED),
        completed_appointments=sum(1 for apt in appointments if apt.status == AppointmentStatus.COMPLETED)
    )

    return DoctorDashboard(
        doctor_id=doctor_id,
        stats=stats,
        today=[_card(apt, today, patient_name(apt)) for apt in todays],
        upcoming=[_card(apt, today, patient_name(apt)) for apt in upcoming]
    )


class DashboardService:
    """Role-specific dashboards."""

    def __init__(self):
        self.timezone = pytz.timezone(settings.CLINIC_TIMEZONE)
        logger.info("Dashboard Service initialized")

    def _today(self) -> date:
        return datetime.now(self.timezone).date()

    async def get_patient_dashboard(self, patient_id: str, today: Optional[date] = None) -> PatientDashboard:
        today = today or self._today()
        appointments = await appointment_service.list_appointments(patient_id=patient_id)
        doctors = {doctor.doctor_id: doctor for doctor in await doctor_service.get_all_doctors()}
        return build_patient_dashboard(patient_id, appointments, doctors, today)

    async def get_doctor_dashboard(self, doctor_id: str, today: Optional[date] = None) -> DoctorDashboard:
        today = today or self._today()
        appointments = await appointment_service.list_appointments(doctor_id=doctor_id)
        patients = {patient.patient_id: patient for patient in await profile_service.get_all_patients()}
        logger.info(f"Doctor dashboard for {doctor_id}: {len(appointments)} appointments")
        return build_doctor_dashboard(doctor_id, appointments, patients, today)


# Create singleton instance
dashboard_service = DashboardService()
