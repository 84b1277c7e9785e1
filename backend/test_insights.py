from datetime import date, timedelta

import pytest

from careslot.models.analytics import AnalyticsPeriod
from careslot.models.appointment import AppointmentStatus
from careslot.models.profile import Patient
from careslot.services.analytics_service import age_group, compute_analytics, period_start
from careslot.services.dashboard_service import build_doctor_dashboard, build_patient_dashboard

from conftest import TODAY


@pytest.mark.parametrize(
    ("period", "expected"),
    [
        (AnalyticsPeriod.ONE_MONTH, date(2026, 9, 1)),
        (AnalyticsPeriod.THREE_MONTHS, date(2026, 7, 1)),
        (AnalyticsPeriod.SIX_MONTHS, date(2026, 4, 1)),
        (AnalyticsPeriod.ONE_YEAR, date(2025, 10, 1)),
    ],
)
def test_period_start(period, expected) -> None:
    assert period_start(period, TODAY) == expected


@pytest.mark.parametrize(
    ("age", "group"),
    [(0, "0-18"), (18, "0-18"), (19, "19-30"), (45, "31-45"), (60, "46-60"), (61, "60+"), (90, "60+")],
)
def test_age_groups(age, group) -> None:
    assert age_group(age) == group


@pytest.fixture
def practice(make_doctor, make_appointment):
    doctors = {"doc-1": make_doctor(specialization="Cardiology", consultation_fee=150)}
    patients = {
        "adult": Patient(patient_id="adult", user_id="u1", date_of_birth=date(1996, 3, 1)),
        "child": Patient(patient_id="child", user_id="u2", date_of_birth=date(2015, 7, 1)),
    }
    appointments = [
        make_appointment(on=date(2026, 8, 30), status=AppointmentStatus.COMPLETED, patient_id="adult"),
        make_appointment(on=date(2026, 9, 15), patient_id="child"),
        make_appointment(on=date(2026, 10, 6), status=AppointmentStatus.CANCELLED, doctor_id="ghost", patient_id="nobody"),
        make_appointment(on=TODAY, status=AppointmentStatus.COMPLETED, patient_id="adult"),
    ]
    return appointments, doctors, patients


def test_analytics_totals(practice) -> None:
    """Test headline numbers for the one-month window."""
    appointments, doctors, patients = practice

    summary = compute_analytics(appointments, doctors, patients, 2, AnalyticsPeriod.ONE_MONTH, TODAY)

    assert summary.start_date == date(2026, 9, 1)
    assert summary.total_patients == 2
    assert summary.total_appointments == 3
    assert summary.completed_appointments == 1
    assert summary.cancelled_appointments == 1
    assert summary.total_revenue == 150
    assert summary.average_rating == 4.8


def test_analytics_breakdowns(practice) -> None:
    appointments, doctors, patients = practice

    summary = compute_analytics(appointments, doctors, patients, 2, AnalyticsPeriod.ONE_MONTH, TODAY)

    assert [m.month for m in summary.appointments_by_month] == [
        "May 2026", "Jun 2026", "Jul 2026", "Aug 2026", "Sep 2026", "Oct 2026"
    ]
    assert [m.appointments for m in summary.appointments_by_month] == [0, 0, 0, 0, 1, 2]
    assert summary.appointments_by_month[-1].revenue == 150

    assert [(s.status, s.count) for s in summary.appointments_by_status] == [
        ("Completed", 1), ("Confirmed", 0), ("Scheduled", 1), ("Cancelled", 1), ("No Show", 0)
    ]
    assert {s.specialization: s.count for s in summary.appointments_by_specialization} == {
        "Cardiology": 2, "Unknown": 1
    }
    assert [(d.day, d.appointments) for d in summary.busy_days] == [("Tuesday", 2), ("Monday", 1)]
    assert {g.age_group: g.count for g in summary.patient_demographics} == {
        "0-18": 1, "19-30": 1, "31-45": 0, "46-60": 0, "60+": 0
    }


def test_analytics_longer_period_includes_older_appointments(practice) -> None:
    appointments, doctors, patients = practice

    summary = compute_analytics(appointments, doctors, patients, 2, AnalyticsPeriod.SIX_MONTHS, TODAY)

    assert summary.total_appointments == 4
    assert summary.total_revenue == 300
    assert summary.appointments_by_month[3].appointments == 1


def test_analytics_with_no_data() -> None:
    summary = compute_analytics([], {}, {}, 0, AnalyticsPeriod.THREE_MONTHS, TODAY)

    assert summary.total_appointments == 0
    assert summary.total_revenue == 0
    assert len(summary.appointments_by_month) == 6
    assert summary.busy_days == []
    assert summary.appointments_by_specialization == []


def test_patient_dashboard(make_doctor, make_appointment) -> None:
    appointments = [
        make_appointment(on=date(2026, 10, 5), status=AppointmentStatus.COMPLETED, appointment_id="c1"),
        make_appointment(on=date(2026, 10, 12), status=AppointmentStatus.COMPLETED, appointment_id="c2"),
        make_appointment(on=TODAY, appointment_id="today"),
        make_appointment(on=date(2026, 10, 20), status=AppointmentStatus.CANCELLED, appointment_id="dropped"),
        make_appointment(on=date(2026, 10, 21), appointment_id="u1"),
        make_appointment(on=date(2026, 10, 22), appointment_id="u2"),
        make_appointment(on=date(2026, 10, 23), appointment_id="u3"),
    ]

    dashboard = build_patient_dashboard("pat-1", appointments, {"doc-1": make_doctor()}, TODAY)

    assert [card.appointment.appointment_id for card in dashboard.upcoming] == ["today", "u1", "u2"]
    assert [card.label for card in dashboard.upcoming] == ["Today", "Oct 21", "Oct 22"]
    assert [card.appointment.appointment_id for card in dashboard.recent] == ["c1", "c2"]
    assert dashboard.upcoming[0].counterpart_name == "Dr. Alice Grant"


def test_doctor_dashboard(make_appointment) -> None:
    appointments = [
        make_appointment(on=date(2026, 10, 12), status=AppointmentStatus.COMPLETED),
        make_appointment(on=TODAY, appointment_id="now", patient_id="known"),
        make_appointment(on=TODAY, status=AppointmentStatus.CANCELLED, at="11:00"),
        make_appointment(on=TODAY + timedelta(days=1), status=AppointmentStatus.CONFIRMED, appointment_id="next"),
    ] + [
        make_appointment(on=TODAY + timedelta(days=offset), appointment_id=f"later-{offset}")
        for offset in range(2, 8)
    ]
    patients = {"known": Patient(patient_id="known", user_id="u1", full_name="Sam Doe")}

    dashboard = build_doctor_dashboard("doc-1", appointments, patients, TODAY)

    assert dashboard.stats.total_appointments == 10
    assert dashboard.stats.today_appointments == 1
    assert dashboard.stats.pending_appointments == 7
    assert dashboard.stats.completed_appointments == 1
    assert [card.appointment.appointment_id for card in dashboard.today] == ["now"]
    assert dashboard.today[0].counterpart_name == "Sam Doe"
    assert [card.appointment.appointment_id for card in dashboard.upcoming] == [
        "next", "later-2", "later-3", "later-4", "later-5"
    ]
    assert dashboard.upcoming[0].label == "Tomorrow"
    assert dashboard.upcoming[1].counterpart_name is None
