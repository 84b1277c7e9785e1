from fastapi import APIRouter, HTTPException, Query
from typing import List, Optional
from datetime import date

from careslot.models.appointment import (
    Appointment,
    AppointmentRequest,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
    CategorizedAppointments,
    DaySlots
)
from careslot.models.doctor import Doctor, DoctorUpdate, Specialization
from careslot.models.profile import (
    DoctorRegistration,
    PatientRegistration,
    ProfileCompletion,
    ProfileResponse
)
from careslot.services import appointment_service as appointments_module
from careslot.services import profile_service as profiles_module
from careslot.services.appointment_service import appointment_service
from careslot.services.doctor_service import doctor_service
from careslot.services.profile_service import profile_service
from careslot.utils.logger import app_logger as logger

router = APIRouter(prefix="/api", tags=["booking"])

ERROR_STATUS = {
    appointments_module.DATABASE_UNAVAILABLE: 503,
    appointments_module.DOCTOR_NOT_FOUND: 404,
    appointments_module.NOT_FOUND: 404,
    appointments_module.INVALID_DATE: 400,
    appointments_module.INVALID_TIME: 400,
    appointments_module.SLOT_UNAVAILABLE: 409,
    profiles_module.EMAIL_TAKEN: 409,
    profiles_module.PROFILE_NOT_FOUND: 404,
}


def raise_for_failure(result):
    """Turn a failed service envelope into the matching HTTP error."""
    if result.success:
        return result
    raise HTTPException(
        status_code=ERROR_STATUS.get(result.error, 500),
        detail=result.message
    )


# Registration & profiles

@router.post("/register/doctor", response_model=ProfileResponse, status_code=201)
async def register_doctor(registration: DoctorRegistration):
    """Create a doctor account with its practice details."""
    logger.info(f"Registering doctor {registration.email}")
    return raise_for_failure(await profile_service.register_doctor(registration))


@router.post("/register/patient", response_model=ProfileResponse, status_code=201)
async def register_patient(registration: PatientRegistration):
    """Create a patient account with medical details."""
    logger.info(f"Registering patient {registration.email}")
    return raise_for_failure(await profile_service.register_patient(registration))


@router.post("/profiles/{user_id}/complete", response_model=ProfileResponse)
async def complete_profile(user_id: str, completion: ProfileCompletion):
    """Fill in the details a user skipped at sign-up."""
    return raise_for_failure(await profile_service.complete_profile(user_id, completion))


# Doctor directory

@router.get("/specializations", response_model=List[str])
async def list_specializations():
    return [specialization.value for specialization in Specialization]


@router.get("/doctors", response_model=List[Doctor])
async def list_doctors(
    search: Optional[str] = Query(None),
    specialization: Optional[Specialization] = Query(None)
):
    """Doctor directory, ordered by name."""
    return await doctor_service.get_all_doctors(specialization=specialization, search=search)


@router.get("/doctors/{doctor_id}", response_model=Doctor)
async def get_doctor(doctor_id: str):
    doctor = await doctor_service.get_doctor_by_id(doctor_id)

    if not doctor:
        raise HTTPException(status_code=404, detail="Doctor not found")

    return doctor


@router.patch("/doctors/{doctor_id}", response_model=Doctor)
async def update_doctor(doctor_id: str, update: DoctorUpdate):
    """Doctor edits their own profile and availability."""
    result = await doctor_service.update_doctor(doctor_id, update)

    if not result.success:
        status_code = 404 if result.error == "Invalid doctor ID" else 400
        raise HTTPException(status_code=status_code, detail=result.message)

    return result.doctor


@router.get("/doctors/{doctor_id}/slots", response_model=DaySlots)
async def get_doctor_slots(doctor_id: str, on_date: date = Query(..., alias="date")):
    """Hourly slots for the booking calendar."""
    doctor = await doctor_service.get_doctor_by_id(doctor_id)

    if not doctor:
        raise HTTPException(status_code=404, detail="Doctor not found")

    return await appointment_service.get_day_slots(doctor, on_date)


@router.get("/doctors/{doctor_id}/next-slot")
async def get_next_slot(doctor_id: str):
    """Nearest open day within the search horizon."""
    doctor = await doctor_service.get_doctor_by_id(doctor_id)

    if not doctor:
        raise HTTPException(status_code=404, detail="Doctor not found")

    slot, wait_days = await appointment_service.get_next_available_slot(doctor)
    return {
        "doctor_id": doctor_id,
        "next_available_slot": slot.model_dump(mode="json") if slot else None,
        "estimated_wait_time": wait_days
    }


# Appointments

@router.post("/appointments", response_model=AppointmentResponse, status_code=201)
async def create_appointment(request: AppointmentRequest):
    """Book an appointment; the slot is re-checked against live bookings."""
    logger.info(
        f"Booking request: patient {request.patient_id} with doctor {request.doctor_id} "
        f"on {request.appointment_date} at {request.appointment_time}"
    )
    return raise_for_failure(await appointment_service.create_appointment(request))


@router.get("/appointments", response_model=List[Appointment])
async def list_appointments(
    patient_id: Optional[str] = Query(None),
    doctor_id: Optional[str] = Query(None),
    status: Optional[AppointmentStatus] = Query(None)
):
    """List appointments with optional filters."""
    return await appointment_service.list_appointments(
        patient_id=patient_id,
        doctor_id=doctor_id,
        status=status
    )


@router.get("/appointments/categorized", response_model=CategorizedAppointments)
async def list_categorized_appointments(
    patient_id: Optional[str] = Query(None),
    doctor_id: Optional[str] = Query(None)
):
    """Upcoming and past appointments for the appointments page."""
    appointments = await appointment_service.list_appointments(
        patient_id=patient_id,
        doctor_id=doctor_id
    )
    return appointment_service.categorize(appointments, appointment_service.today())


@router.get("/appointments/{appointment_id}", response_model=Appointment)
async def get_appointment(appointment_id: str):
    appointment = await appointment_service.get_appointment(appointment_id)

    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")

    return appointment


@router.patch("/appointments/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(appointment_id: str, update: AppointmentStatusUpdate):
    """Confirm, complete, cancel or mark a no-show, with optional notes."""
    return raise_for_failure(
        await appointment_service.update_appointment_status(appointment_id, update.status, update.notes)
    )


@router.delete("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def cancel_appointment(appointment_id: str):
    return raise_for_failure(await appointment_service.cancel_appointment(appointment_id))
