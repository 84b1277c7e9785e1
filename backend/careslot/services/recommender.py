"""Rule-based doctor recommender behind the smart-booking page.

Each doctor is scored on its own by summing independent contributions
(specialization, availability, urgency, time of day, cost); the roster is
then stable-sorted by score. ``rank_doctors`` is pure; ``RecommendationService``
fetches the data and supplies the clinic's "today".
"""
from datetime import date, datetime
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

import pytz

from careslot.config import settings
from careslot.models.appointment import BookedSlot
from careslot.models.doctor import Doctor, Specialization
from careslot.models.recommendation import (
    Recommendation,
    RecommendationRequest,
    RecommendationResponse,
    TimePreference,
    Urgency
)
from careslot.services.appointment_service import appointment_service
from careslot.services.doctor_service import doctor_service
from careslot.services.slot_calculator import (
    DAILY_APPOINTMENT_CAPACITY,
    DEFAULT_START_TIME,
    NO_SLOT_WAIT_DAYS,
    SLOT_SEARCH_HORIZON_DAYS,
    calculate_wait_time,
    find_next_available_slot,
    occupying_bookings
)
from careslot.utils.logger import app_logger as logger


class SpecializationRule(NamedTuple):
    keywords: Tuple[str, ...]
    specialization: Specialization
    score: int


# Tested in order; the first rule that matches both the symptoms and the
# doctor's specialization wins.
SPECIALIZATION_RULES: Tuple[SpecializationRule, ...] = (
    SpecializationRule(("heart", "chest", "cardiac", "blood pressure"), Specialization.CARDIOLOGY, 30),
    SpecializationRule(("skin", "rash", "acne", "dermatitis"), Specialization.DERMATOLOGY, 30),
    SpecializationRule(("diabetes", "thyroid", "hormone"), Specialization.ENDOCRINOLOGY, 30),
    SpecializationRule(("stomach", "digestive", "nausea", "gastro"), Specialization.GASTROENTEROLOGY, 30),
    SpecializationRule(("headache", "neurological", "seizure"), Specialization.NEUROLOGY, 30),
    SpecializationRule(("bone", "joint", "fracture", "orthopedic"), Specialization.ORTHOPEDICS, 30),
    SpecializationRule(("child", "pediatric", "infant"), Specialization.PEDIATRICS, 30),
    SpecializationRule(("mental", "depression", "anxiety"), Specialization.PSYCHIATRY, 30),
)

GENERAL_PRACTICE_SCORE = 15
FALLBACK_SPECIALIZATION_SCORE = 5
DAY_SCORE = 3
BOOKING_HEADROOM = 20
GOOD_AVAILABILITY_LIMIT = 5
URGENT_BONUS = 20
TIME_MATCH_SCORE = 10
ANY_TIME_SCORE = 5
COST_BASE = 20
COST_REASON_THRESHOLD = 10
MAX_RECOMMENDATIONS = 5

Contribution = Tuple[float, Optional[str]]


def score_specialization(symptoms: str, doctor: Doctor) -> Contribution:
    text = symptoms.lower()
    specialization = doctor.specialization_name

    for rule in SPECIALIZATION_RULES:
        name = rule.specialization.value
        if any(keyword in text for keyword in rule.keywords) and name in specialization:
            return rule.score, f"Specialized in {name} for your symptoms"

    if "General" in specialization:
        return GENERAL_PRACTICE_SCORE, "General practitioner suitable for various conditions"

    return FALLBACK_SPECIALIZATION_SCORE, None


def score_availability(doctor: Doctor, bookings: Iterable[BookedSlot]) -> Contribution:
    booked = len(occupying_bookings(doctor.doctor_id, bookings))
    score = len(doctor.available_days) * DAY_SCORE + max(0, BOOKING_HEADROOM - booked)
    reason = "Good availability" if booked < GOOD_AVAILABILITY_LIMIT else None
    return score, reason


def score_urgency(urgency: str) -> Contribution:
    if urgency == Urgency.URGENT.value:
        return URGENT_BONUS, "Prioritized for urgent care"
    return 0, None


def score_time_preference(doctor: Doctor, preference: str) -> Contribution:
    start_hour, end_hour = doctor.start_hour, doctor.end_hour
    if start_hour is None or end_hour is None:
        return 0, None

    if preference == TimePreference.MORNING.value:
        score = TIME_MATCH_SCORE if start_hour <= 9 else 0
    elif preference == TimePreference.AFTERNOON.value:
        score = TIME_MATCH_SCORE if start_hour <= 14 and end_hour >= 14 else 0
    elif preference == TimePreference.EVENING.value:
        score = TIME_MATCH_SCORE if end_hour >= 17 else 0
    else:
        score = ANY_TIME_SCORE

    if score > 0:
        return score, f"Available during preferred {preference} hours"
    return 0, None


def score_cost(doctor: Doctor, urgency: str) -> Contribution:
    if urgency != Urgency.ROUTINE.value:
        return 0, None
    score = max(0, COST_BASE - doctor.consultation_fee / 10)
    return score, ("Cost-effective option" if score > COST_REASON_THRESHOLD else None)


def _value(option) -> str:
    return getattr(option, "value", option)


def score_doctor(
    doctor: Doctor,
    symptoms: str,
    urgency: str,
    preferred_time: str,
    bookings: Sequence[BookedSlot]
) -> Tuple[float, List[str]]:
    """Total score and reasons, in evaluation order."""
    urgency, preferred_time = _value(urgency), _value(preferred_time)
    contributions = (
        score_specialization(symptoms, doctor),
        score_availability(doctor, bookings),
        score_urgency(urgency),
        score_time_preference(doctor, preferred_time),
        score_cost(doctor, urgency),
    )
    total = sum(score for score, _ in contributions)
    reasons = [reason for _, reason in contributions if reason]
    return total, reasons


def rank_doctors(
    symptoms: str,
    urgency: str,
    preferred_time: str,
    doctors: Sequence[Doctor],
    bookings: Sequence[BookedSlot],
    today: date,
    limit: int = MAX_RECOMMENDATIONS,
    horizon_days: int = SLOT_SEARCH_HORIZON_DAYS,
    daily_capacity: int = DAILY_APPOINTMENT_CAPACITY,
    not_found_wait: int = NO_SLOT_WAIT_DAYS,
    default_time: str = DEFAULT_START_TIME
) -> List[Recommendation]:
    """Score every doctor independently and return the best ``limit``."""
    bookings = list(bookings)
    recommendations = []

    for doctor in doctors:
        score, reasons = score_doctor(doctor, symptoms, urgency, preferred_time, bookings)
        next_slot = find_next_available_slot(
            doctor,
            bookings,
            today,
            horizon_days=horizon_days,
            daily_capacity=daily_capacity,
            default_time=default_time
        )
        recommendations.append(Recommendation(
            doctor=doctor,
            score=score,
            reasons=reasons,
            next_available_slot=next_slot,
            estimated_wait_time=calculate_wait_time(next_slot, today, not_found=not_found_wait)
        ))

    # sorted() is stable: equal scores keep roster order
    ranked = sorted(recommendations, key=lambda rec: rec.score, reverse=True)
    return ranked[:limit]


class RecommendationService:
    """Fetches the roster and upcoming bookings, then ranks doctors."""

    def __init__(self):
        self.timezone = pytz.timezone(settings.CLINIC_TIMEZONE)
        logger.info("Recommendation Service initialized")

    def today(self) -> date:
        return datetime.now(self.timezone).date()

    async def recommend(
        self,
        request: RecommendationRequest,
        today: Optional[date] = None
    ) -> RecommendationResponse:
        today = today or self.today()
        doctors = await doctor_service.get_all_doctors()
        bookings = await appointment_service.get_occupying_bookings(from_date=today)

        recommendations = rank_doctors(
            request.symptoms,
            request.urgency,
            request.preferred_time,
            doctors,
            bookings,
            today,
            limit=settings.MAX_RECOMMENDATIONS,
            horizon_days=settings.SLOT_SEARCH_HORIZON_DAYS,
            daily_capacity=settings.DAILY_APPOINTMENT_CAPACITY,
            not_found_wait=settings.NO_SLOT_WAIT_DAYS,
            default_time=settings.DEFAULT_START_TIME
        )

        logger.info(
            f"Ranked {len(doctors)} doctors for urgency={request.urgency.value}, "
            f"returning {len(recommendations)}"
        )

        if not recommendations:
            return RecommendationResponse(success=True, message="No doctors available", recommendations=[])

        return RecommendationResponse(
            success=True,
            message=f"Found {len(recommendations)} recommended doctors",
            recommendations=recommendations
        )


# Create singleton instance
recommendation_service = RecommendationService()
