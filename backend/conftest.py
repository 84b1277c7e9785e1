import os
from datetime import date

import pytest

os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("CLINIC_TIMEZONE", "UTC")

from careslot.models.appointment import Appointment, AppointmentStatus, BookedSlot  # noqa: E402
from careslot.models.doctor import Doctor  # noqa: E402


# A Monday.
TODAY = date(2026, 10, 19)


class FakeCursor:
    """Async cursor over a fixed list of documents."""

    def __init__(self, docs):
        self.docs = list(docs)

    def sort(self, *args, **kwargs):
        return self

    def __aiter__(self):
        self._iter = iter(self.docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_doctor():
    def _make(doctor_id="doc-1", **overrides):
        data = {
            "doctor_id": doctor_id,
            "full_name": "Alice Grant",
            "specialization": "General Practice",
            "consultation_fee": 100,
            "available_days": ["monday", "wednesday", "friday"],
            "available_hours_start": "09:00",
            "available_hours_end": "17:00",
        }
        data.update(overrides)
        return Doctor(**data)
    return _make


@pytest.fixture
def make_booking():
    def _make(doctor_id="doc-1", on=TODAY, at="09:00", status=AppointmentStatus.SCHEDULED):
        return BookedSlot(doctor_id=doctor_id, appointment_date=on, appointment_time=at, status=status)
    return _make


@pytest.fixture
def make_appointment():
    def _make(on=TODAY, at="10:00", status=AppointmentStatus.SCHEDULED, doctor_id="doc-1", patient_id="pat-1", **extra):
        return Appointment(
            doctor_id=doctor_id,
            patient_id=patient_id,
            appointment_date=on,
            appointment_time=at,
            status=status,
            **extra
        )
    return _make
