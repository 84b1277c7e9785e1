from fastapi import APIRouter, HTTPException, Query

from careslot.models.analytics import AnalyticsPeriod, AnalyticsSummary, DoctorDashboard, PatientDashboard
from careslot.models.recommendation import RecommendationRequest, RecommendationResponse
from careslot.services.analytics_service import analytics_service
from careslot.services.dashboard_service import dashboard_service
from careslot.services.doctor_service import doctor_service
from careslot.services.profile_service import profile_service
from careslot.services.recommender import recommendation_service
from careslot.utils.logger import app_logger as logger

router = APIRouter(prefix="/api", tags=["insights"])


@router.post("/recommendations", response_model=RecommendationResponse)
async def recommend_doctors(request: RecommendationRequest):
    """Rank doctors for the described symptoms and preferences."""
    logger.info(f"Recommendation request: urgency={request.urgency.value}, time={request.preferred_time.value}")
    return await recommendation_service.recommend(request)


@router.get("/dashboard/patient/{patient_id}", response_model=PatientDashboard)
async def patient_dashboard(patient_id: str):
    patient = await profile_service.get_patient(patient_id)

    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")

    return await dashboard_service.get_patient_dashboard(patient_id)


@router.get("/dashboard/doctor/{doctor_id}", response_model=DoctorDashboard)
async def doctor_dashboard(doctor_id: str):
    doctor = await doctor_service.get_doctor_by_id(doctor_id)

    if not doctor:
        raise HTTPException(status_code=404, detail="Doctor not found")

    return await dashboard_service.get_doctor_dashboard(doctor_id)


@router.get("/analytics", response_model=AnalyticsSummary)
async def practice_analytics(period: str = Query(AnalyticsPeriod.SIX_MONTHS.value)):
    """Practice analytics; unknown periods fall back to six months."""
    try:
        selected = AnalyticsPeriod(period)
    except ValueError:
        logger.warning(f"Unknown analytics period {period!r}, using 6months")
        selected = AnalyticsPeriod.SIX_MONTHS

    return await analytics_service.get_analytics(selected)
