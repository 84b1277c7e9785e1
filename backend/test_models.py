from datetime import date

import pytest
from pydantic import ValidationError

from careslot.models.appointment import (
    Appointment,
    AppointmentRequest,
    AppointmentStatus,
    BookedSlot
)
from careslot.models.doctor import Doctor, DoctorUpdate, Specialization, Weekday
from careslot.models.profile import (
    DoctorRegistration,
    Patient,
    PatientRegistration,
    ProfileCompletion
)
from careslot.models.recommendation import RecommendationRequest, TimePreference, Urgency
from careslot.utils.dates import day_label, end_of_month, normalize_time, parse_hour, shift_months


def test_doctor_needs_only_an_id() -> None:
    """Test that a bare doctor record is valid and publishes nothing."""
    doctor = Doctor(doctor_id="d1")

    assert doctor.available_days == []
    assert doctor.start_hour is None
    assert doctor.specialization_name == ""
    assert str(doctor) == "Dr. d1 (Unspecified)"


def test_doctor_requires_an_id() -> None:
    with pytest.raises(ValidationError):
        Doctor(full_name="No Id")
    with pytest.raises(ValidationError):
        Doctor(doctor_id="")


def test_doctor_days_are_normalized() -> None:
    doctor = Doctor(doctor_id="d1", available_days=["Monday", "FRIDAY", "funday", "monday"])

    assert doctor.available_days == [Weekday.MONDAY, Weekday.FRIDAY]
    assert doctor.is_available_on_day("Monday")
    assert not doctor.is_available_on_day("tuesday")


def test_doctor_days_must_be_a_list() -> None:
    with pytest.raises(ValidationError):
        Doctor(doctor_id="d1", available_days="monday")


def test_doctor_hours_normalized_and_parsed() -> None:
    doctor = Doctor(doctor_id="d1", available_hours_start="9:00", available_hours_end="17:00:00")

    assert doctor.available_hours_start == "09:00"
    assert doctor.available_hours_end == "17:00"
    assert (doctor.start_hour, doctor.end_hour) == (9, 17)


def test_doctor_keeps_malformed_hours_without_failing() -> None:
    doctor = Doctor(doctor_id="d1", available_hours_start="morning", available_hours_end="")

    assert doctor.available_hours_start == "morning"
    assert doctor.available_hours_end is None
    assert doctor.start_hour is None


def test_doctor_fee_cannot_be_negative() -> None:
    with pytest.raises(ValidationError):
        Doctor(doctor_id="d1", consultation_fee=-1)


def test_doctor_update_rejects_bad_time() -> None:
    with pytest.raises(ValidationError):
        DoctorUpdate(available_hours_start="25:00")

    update = DoctorUpdate(available_days=["Tuesday"], available_hours_end="18:00")
    assert update.available_days == [Weekday.TUESDAY]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("9:00", "09:00"), ("09:30", "09:30"), ("17:00:00", "17:00"), (" 8:05 ", "08:05")],
)
def test_normalize_time(raw, expected) -> None:
    assert normalize_time(raw) == expected


@pytest.mark.parametrize("raw", ["", "9", "24:00", "12:60", "noon"])
def test_normalize_time_rejects_invalid(raw) -> None:
    with pytest.raises(ValueError):
        normalize_time(raw)


def test_parse_hour() -> None:
    assert parse_hour("09:00") == 9
    assert parse_hour("24:00") == 24
    assert parse_hour("25:00") is None
    assert parse_hour("x") is None
    assert parse_hour(None) is None


def test_month_helpers() -> None:
    assert shift_months(date(2026, 10, 19), -6) == date(2026, 4, 1)
    assert shift_months(date(2026, 1, 31), -1) == date(2025, 12, 1)
    assert shift_months(date(2026, 12, 5), 1) == date(2027, 1, 1)
    assert end_of_month(date(2028, 2, 10)) == date(2028, 2, 29)


def test_day_label() -> None:
    today = date(2026, 10, 19)

    assert day_label(today, today) == "Today"
    assert day_label(date(2026, 10, 20), today) == "Tomorrow"
    assert day_label(date(2026, 11, 5), today) == "Nov 5"


def test_booked_slot_occupancy() -> None:
    slot = BookedSlot(doctor_id="d1", appointment_date=date(2026, 10, 19), appointment_time="9:00")

    assert slot.appointment_time == "09:00"
    assert slot.is_occupying
    assert BookedSlot(**{**slot.model_dump(), "status": "confirmed"}).is_occupying
    assert not BookedSlot(**{**slot.model_dump(), "status": "no_show"}).is_occupying


def test_appointment_defaults_to_scheduled() -> None:
    appointment = Appointment(
        appointment_id="a1",
        doctor_id="d1",
        patient_id="p1",
        appointment_date=date(2026, 10, 19),
        appointment_time="10:00"
    )

    assert appointment.status == AppointmentStatus.SCHEDULED
    assert appointment.is_occupying


def test_appointment_request_requires_reason() -> None:
    base = {
        "patient_id": "p1",
        "doctor_id": "d1",
        "appointment_date": "2026-10-19",
        "appointment_time": "9:00",
    }

    with pytest.raises(ValidationError):
        AppointmentRequest(**base, reason_for_visit="   ")

    request = AppointmentRequest(**base, reason_for_visit="  Checkup ")
    assert request.reason_for_visit == "Checkup"
    assert request.appointment_time == "09:00"
    assert request.appointment_date == date(2026, 10, 19)


def test_appointment_request_rejects_bad_time() -> None:
    with pytest.raises(ValidationError):
        AppointmentRequest(
            patient_id="p1",
            doctor_id="d1",
            appointment_date="2026-10-19",
            appointment_time="late",
            reason_for_visit="Checkup"
        )


def test_recommendation_request_defaults() -> None:
    request = RecommendationRequest(symptoms="sore throat")

    assert request.urgency == Urgency.ROUTINE
    assert request.preferred_time == TimePreference.MORNING


def test_recommendation_request_rejects_blank_symptoms() -> None:
    with pytest.raises(ValidationError):
        RecommendationRequest(symptoms="  \n ")

    with pytest.raises(ValidationError):
        RecommendationRequest(symptoms="fever", urgency="whenever")


def _doctor_registration(**overrides):
    data = {
        "full_name": "Maria Lopez",
        "email": "Maria@CareMail.org",
        "phone": "555-123-4567",
        "license_number": "LIC-1",
        "specialization": "Neurology",
        "years_of_experience": 10,
        "education": "MD",
        "consultation_fee": 120,
        "available_days": ["monday", "thursday"],
        "available_hours_start": "10:00",
        "available_hours_end": "16:00",
    }
    data.update(overrides)
    return DoctorRegistration(**data)


def test_doctor_registration_builds_doctor() -> None:
    registration = _doctor_registration()

    assert registration.email == "maria@caremail.org"
    assert registration.phone == "5551234567"

    doctor = registration.to_doctor("user-1")
    assert doctor.doctor_id
    assert registration.to_doctor("user-1").doctor_id != doctor.doctor_id
    assert doctor.user_id == "user-1"
    assert doctor.specialization == Specialization.NEUROLOGY
    assert doctor.day_names == ["monday", "thursday"]
    assert (doctor.start_hour, doctor.end_hour) == (10, 16)


def test_doctor_registration_rejects_inverted_hours() -> None:
    with pytest.raises(ValidationError):
        _doctor_registration(available_hours_start="17:00", available_hours_end="09:00")


def test_doctor_registration_rejects_bad_email_and_phone() -> None:
    with pytest.raises(ValidationError):
        _doctor_registration(email="not-an-email")
    with pytest.raises(ValidationError):
        _doctor_registration(email="a@@")
    with pytest.raises(ValidationError):
        _doctor_registration(email="maria@")
    with pytest.raises(ValidationError):
        _doctor_registration(phone="call me maybe")


def test_patient_registration_requires_contact_details() -> None:
    with pytest.raises(ValidationError):
        PatientRegistration(
            full_name="Sam Doe",
            email="sam@caremail.org",
            phone="5550001111",
            date_of_birth="1990-05-01",
            gender="other",
            address="",
            emergency_contact_name="Kim Doe",
            emergency_contact_phone="5550002222"
        )


def test_patient_registration_builds_patient() -> None:
    registration = PatientRegistration(
        full_name="Sam Doe",
        email="sam@caremail.org",
        phone="5550001111",
        date_of_birth="1990-05-01",
        gender="other",
        address="1 Main St",
        emergency_contact_name="Kim Doe",
        emergency_contact_phone="5550002222",
        allergies=""
    )

    patient = registration.to_patient("user-2", full_name=registration.full_name)

    assert patient.user_id == "user-2"
    assert patient.full_name == "Sam Doe"
    assert patient.allergies is None
    assert patient.age_on(date(2026, 1, 1)) == 36


def test_profile_completion_is_all_optional() -> None:
    completion = ProfileCompletion(phone="5550003333", gender=" ")

    patient = completion.to_patient("user-3")

    assert patient.gender is None
    assert patient.date_of_birth is None
    assert Patient(user_id="user-4").age_on(date(2026, 1, 1)) is None


def test_patient_registration_rejects_malformed_email() -> None:
    with pytest.raises(ValidationError):
        PatientRegistration(
            full_name="Sam Doe",
            email="a@@",
            phone="5550001111",
            date_of_birth="1990-05-01",
            gender="other",
            address="1 Main St",
            emergency_contact_name="Kim Doe",
            emergency_contact_phone="5550002222"
        )


def test_doctor_update_changes_only_sent_fields() -> None:
    assert DoctorUpdate(bio="Hello").changes() == {"bio": "Hello"}
    assert DoctorUpdate().changes() == {}


def test_doctor_update_null_clears_hours() -> None:
    update = DoctorUpdate.model_validate({
        "available_hours_start": None,
        "available_hours_end": None,
        "consultation_fee": None,
    })

    assert update.changes() == {"available_hours_start": None, "available_hours_end": None}
