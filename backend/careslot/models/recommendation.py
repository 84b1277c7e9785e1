from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from enum import Enum

from careslot.models.appointment import NextSlot
from careslot.models.doctor import Doctor


class Urgency(str, Enum):
    ROUTINE = "routine"
    SOON = "soon"
    URGENT = "urgent"


class TimePreference(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    ANY = "any"


class RecommendationRequest(BaseModel):
    """Inputs collected by the smart-booking page."""
    symptoms: str = Field(..., max_length=2000)
    urgency: Urgency = Urgency.ROUTINE
    preferred_time: TimePreference = TimePreference.MORNING

    @field_validator("symptoms")
    @classmethod
    def validate_symptoms(cls, value):
        if not value.strip():
            raise ValueError("Please describe your symptoms")
        return value


class Recommendation(BaseModel):
    """One ranked doctor suggestion."""
    doctor: Doctor
    score: float
    reasons: List[str] = []
    next_available_slot: Optional[NextSlot] = None
    estimated_wait_time: int


class RecommendationResponse(BaseModel):
    success: bool
    message: str
    recommendations: List[Recommendation] = []
