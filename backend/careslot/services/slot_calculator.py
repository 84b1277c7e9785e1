"""Slot availability calculator and next-available-slot search.

Everything here is a pure function of its arguments. ``today`` is always
passed in by the caller; nothing reads the wall clock.
"""
from datetime import date, timedelta
from typing import Iterable, List, Optional

from careslot.models.appointment import BookedSlot, NextSlot, TimeSlot
from careslot.models.doctor import Doctor
from careslot.utils.dates import format_hour, weekday_name


DEFAULT_START_TIME = "09:00"
SLOT_SEARCH_HORIZON_DAYS = 14
DAILY_APPOINTMENT_CAPACITY = 8
NO_SLOT_WAIT_DAYS = 999


def occupying_bookings(
    doctor_id: str,
    bookings: Iterable[BookedSlot],
    on_date: Optional[date] = None
) -> List[BookedSlot]:
    """Bookings that hold a slot for ``doctor_id`` (optionally on one date)."""
    return [
        booking for booking in bookings
        if booking.doctor_id == doctor_id
        and booking.is_occupying
        and (on_date is None or booking.appointment_date == on_date)
    ]


def is_candidate_booking_date(doctor: Doctor, candidate: date, today: date) -> bool:
    """A date is bookable if the doctor works that weekday and it is not in the past."""
    return doctor.is_available_on_day(weekday_name(candidate)) and candidate >= today


def generate_time_slots(
    doctor: Doctor,
    target_date: date,
    bookings: Iterable[BookedSlot] = ()
) -> List[TimeSlot]:
    """Hourly slots in ``[start, end)`` for ``target_date``.

    A slot is unavailable when an occupying booking for this doctor and date
    carries exactly the slot's time string. No declared hours means no slots.
    """
    start_hour, end_hour = doctor.start_hour, doctor.end_hour
    if start_hour is None or end_hour is None:
        return []

    taken = {
        booking.appointment_time
        for booking in occupying_bookings(doctor.doctor_id, bookings, target_date)
    }

    return [
        TimeSlot(date=target_date, time=format_hour(hour), available=format_hour(hour) not in taken)
        for hour in range(start_hour, end_hour)
    ]


def find_next_available_slot(
    doctor: Doctor,
    bookings: Iterable[BookedSlot],
    today: date,
    horizon_days: int = SLOT_SEARCH_HORIZON_DAYS,
    daily_capacity: int = DAILY_APPOINTMENT_CAPACITY,
    default_time: str = DEFAULT_START_TIME
) -> Optional[NextSlot]:
    """First working day within the horizon whose booking count is under capacity.

    This is a day-level capacity check, not a per-hour one: the returned time
    is the doctor's declared start time (or ``default_time``) even if that
    particular hour is already booked.
    """
    doctor_bookings = occupying_bookings(doctor.doctor_id, bookings)

    for offset in range(horizon_days):
        check_date = today + timedelta(days=offset)
        if not doctor.is_available_on_day(weekday_name(check_date)):
            continue

        day_count = sum(1 for booking in doctor_bookings if booking.appointment_date == check_date)
        if day_count < daily_capacity:
            return NextSlot(date=check_date, time=doctor.available_hours_start or default_time)

    return None


def calculate_wait_time(
    slot: Optional[NextSlot],
    today: date,
    not_found: int = NO_SLOT_WAIT_DAYS
) -> int:
    """Whole days until ``slot``; ``not_found`` when there is no slot."""
    if slot is None:
        return not_found
    return (slot.date - today).days
