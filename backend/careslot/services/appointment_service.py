from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime, date
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError
import pytz

from careslot.models.appointment import (
    Appointment,
    AppointmentRequest,
    AppointmentResponse,
    AppointmentStatus,
    BookedSlot,
    CategorizedAppointments,
    DaySlots,
    NextSlot,
    OCCUPYING_STATUSES
)
from careslot.models.doctor import Doctor
from careslot.config import settings
from careslot.services.doctor_service import doctor_service
from careslot.services.slot_calculator import (
    calculate_wait_time,
    find_next_available_slot,
    generate_time_slots,
    is_candidate_booking_date
)
from careslot.utils.logger import app_logger as logger
from careslot.db.mongodb import get_database


# Error codes carried in AppointmentResponse.error
DATABASE_UNAVAILABLE = "database_unavailable"
DOCTOR_NOT_FOUND = "doctor_not_found"
INVALID_DATE = "invalid_date"
INVALID_TIME = "invalid_time"
SLOT_UNAVAILABLE = "slot_unavailable"
NOT_FOUND = "not_found"

_OCCUPYING_VALUES = [status.value for status in OCCUPYING_STATUSES]


class AppointmentService:
    """Booking, slot lookup and status management for appointments."""

    def __init__(self):
        self.timezone = pytz.timezone(settings.CLINIC_TIMEZONE)
        logger.info("Appointment Service initialized with MongoDB")

    def _get_collection(self):
        db = get_database()
        return db.appointments if db is not None else None

    def today(self) -> date:
        """Current calendar date at the clinic."""
        return datetime.now(self.timezone).date()

    async def get_occupying_bookings(
        self,
        from_date: Optional[date] = None,
        doctor_id: Optional[str] = None,
        on_date: Optional[date] = None
    ) -> List[BookedSlot]:
        """Scheduled/confirmed bookings, optionally narrowed by doctor and date."""
        query: Dict[str, Any] = {"status": {"$in": _OCCUPYING_VALUES}}
        if doctor_id:
            query["doctor_id"] = doctor_id
        if on_date:
            query["appointment_date"] = on_date.isoformat()
        elif from_date:
            query["appointment_date"] = {"$gte": from_date.isoformat()}

        try:
            collection = self._get_collection()
            if collection is None:
                logger.warning("MongoDB not connected")
                return []

            projection = {"doctor_id": 1, "appointment_date": 1, "appointment_time": 1, "status": 1}
            bookings = []
            async for doc in collection.find(query, projection):
                try:
                    bookings.append(BookedSlot(
                        doctor_id=doc["doctor_id"],
                        appointment_date=self._parse_date(doc["appointment_date"]),
                        appointment_time=doc["appointment_time"],
                        status=doc["status"]
                    ))
                except (KeyError, ValueError) as e:
                    logger.warning(f"Skipping malformed booking {doc.get('_id')}: {e}")
            return bookings

        except PyMongoError as e:
            logger.error(f"Error getting booked slots: {e}")
            return []

    async def get_day_slots(
        self,
        doctor: Doctor,
        on_date: date,
        today: Optional[date] = None
    ) -> DaySlots:
        """Hourly slots for the booking page; none on non-bookable dates."""
        today = today or self.today()
        if not is_candidate_booking_date(doctor, on_date, today):
            return DaySlots(doctor_id=doctor.doctor_id, date=on_date, is_bookable_date=False, slots=[])

        booked = await self.get_occupying_bookings(doctor_id=doctor.doctor_id, on_date=on_date)
        slots = generate_time_slots(doctor, on_date, booked)

        logger.info(
            f"{sum(slot.available for slot in slots)}/{len(slots)} slots open "
            f"for doctor {doctor.doctor_id} on {on_date}"
        )
        return DaySlots(doctor_id=doctor.doctor_id, date=on_date, is_bookable_date=True, slots=slots)

    async def get_next_available_slot(
        self,
        doctor: Doctor,
        today: Optional[date] = None
    ) -> Tuple[Optional[NextSlot], int]:
        """Nearest open day within the search horizon and the wait in days."""
        today = today or self.today()
        bookings = await self.get_occupying_bookings(from_date=today, doctor_id=doctor.doctor_id)
        slot = find_next_available_slot(
            doctor,
            bookings,
            today,
            horizon_days=settings.SLOT_SEARCH_HORIZON_DAYS,
            daily_capacity=settings.DAILY_APPOINTMENT_CAPACITY,
            default_time=settings.DEFAULT_START_TIME
        )
        return slot, calculate_wait_time(slot, today, not_found=settings.NO_SLOT_WAIT_DAYS)

    async def create_appointment(
        self,
        request: AppointmentRequest,
        today: Optional[date] = None
    ) -> AppointmentResponse:
        """Book a slot after re-checking it against live data.

        The unique partial index on occupied slots is the final arbiter when
        two patients race for the same hour.
        """
        collection = self._get_collection()
        if collection is None:
            logger.warning("MongoDB not connected")
            return AppointmentResponse(
                success=False,
                message="Database not available",
                error=DATABASE_UNAVAILABLE
            )

        doctor = await doctor_service.get_doctor_by_id(request.doctor_id)
        if doctor is None:
            return AppointmentResponse(
                success=False,
                message="Doctor not found",
                error=DOCTOR_NOT_FOUND
            )

        day = await self.get_day_slots(doctor, request.appointment_date, today=today)
        if not day.is_bookable_date:
            return AppointmentResponse(
                success=False,
                message="The doctor is not available on this date",
                error=INVALID_DATE
            )

        slot = next((s for s in day.slots if s.time == request.appointment_time), None)
        if slot is None:
            return AppointmentResponse(
                success=False,
                message="Selected time is outside the doctor's hours",
                error=INVALID_TIME
            )
        if not slot.available:
            return AppointmentResponse(
                success=False,
                message="This time slot is no longer available",
                error=SLOT_UNAVAILABLE
            )

        appointment = Appointment(
            patient_id=request.patient_id,
            doctor_id=request.doctor_id,
            appointment_date=request.appointment_date,
            appointment_time=request.appointment_time,
            reason_for_visit=request.reason_for_visit,
            status=AppointmentStatus.SCHEDULED
        )

        try:
            await collection.insert_one(appointment.model_dump(mode="json"))
        except DuplicateKeyError:
            logger.warning(
                f"Slot race lost for doctor {request.doctor_id} "
                f"at {request.appointment_date} {request.appointment_time}"
            )
            return AppointmentResponse(
                success=False,
                message="This time slot is no longer available",
                error=SLOT_UNAVAILABLE
            )
        except PyMongoError as e:
            logger.error(f"Error creating appointment: {e}")
            return AppointmentResponse(
                success=False,
                message="Failed to create appointment",
                error=str(e)
            )

        logger.info(f"Appointment created in MongoDB: {appointment.appointment_id}")
        return AppointmentResponse(
            success=True,
            message="Appointment booked successfully",
            appointment=appointment
        )

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        try:
            collection = self._get_collection()
            if collection is None:
                logger.warning("MongoDB not connected")
                return None

            doc = await collection.find_one({"appointment_id": appointment_id})
            return self._doc_to_model(doc) if doc else None

        except PyMongoError as e:
            logger.error(f"Error getting appointment: {e}")
            return None

    async def list_appointments(
        self,
        patient_id: Optional[str] = None,
        doctor_id: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
        from_date: Optional[date] = None
    ) -> List[Appointment]:
        """Appointments ordered by date and time."""
        query: Dict[str, Any] = {}
        if patient_id:
            query["patient_id"] = patient_id
        if doctor_id:
            query["doctor_id"] = doctor_id
        if status:
            query["status"] = status.value
        if from_date:
            query["appointment_date"] = {"$gte": from_date.isoformat()}

        try:
            collection = self._get_collection()
            if collection is None:
                logger.warning("MongoDB not connected")
                return []

            cursor = collection.find(query).sort(
                [("appointment_date", ASCENDING), ("appointment_time", ASCENDING)]
            )
            appointments = []
            async for doc in cursor:
                appointment = self._doc_to_model(doc)
                if appointment is not None:
                    appointments.append(appointment)

            return appointments

        except PyMongoError as e:
            logger.error(f"Error getting appointments: {e}")
            return []

    @staticmethod
    def categorize(appointments: List[Appointment], today: date) -> CategorizedAppointments:
        """Split into upcoming (today or later, not cancelled) and past
        (before today, or completed). A completed appointment dated today
        appears in both, as on the appointments page."""
        upcoming = [
            apt for apt in appointments
            if apt.appointment_date >= today and apt.status != AppointmentStatus.CANCELLED
        ]
        past = [
            apt for apt in appointments
            if apt.appointment_date < today or apt.status == AppointmentStatus.COMPLETED
        ]
        return CategorizedAppointments(upcoming=upcoming, past=past)

    async def update_appointment_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        notes: Optional[str] = None
    ) -> AppointmentResponse:
        try:
            collection = self._get_collection()
            if collection is None:
                logger.warning("MongoDB not connected")
                return AppointmentResponse(
                    success=False,
                    message="Database not available",
                    error=DATABASE_UNAVAILABLE
                )

            update_data: Dict[str, Any] = {
                "status": status.value,
                "updated_at": datetime.now().isoformat()
            }
            if notes is not None:
                update_data["notes"] = notes

            result = await collection.update_one(
                {"appointment_id": appointment_id},
                {"$set": update_data}
            )

            if result.matched_count == 0:
                return AppointmentResponse(
                    success=False,
                    message="Appointment not found",
                    error=NOT_FOUND
                )

            appointment = await self.get_appointment(appointment_id)

            logger.info(f"Appointment {appointment_id} status updated to {status.value}")

            return AppointmentResponse(
                success=True,
                message=f"Appointment status updated to {status.value}",
                appointment=appointment
            )

        except DuplicateKeyError:
            # re-activating a cancelled booking whose hour was taken since
            return AppointmentResponse(
                success=False,
                message="This time slot is no longer available",
                error=SLOT_UNAVAILABLE
            )
        except PyMongoError as e:
            logger.error(f"Error updating appointment: {e}")
            return AppointmentResponse(
                success=False,
                message="Failed to update appointment",
                error=str(e)
            )

    async def cancel_appointment(self, appointment_id: str) -> AppointmentResponse:
        return await self.update_appointment_status(
            appointment_id,
            AppointmentStatus.CANCELLED
        )

    @staticmethod
    def _parse_date(value: Any) -> date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value)[:10])

    def _doc_to_model(self, doc: Dict) -> Optional[Appointment]:
        """Convert MongoDB document to Appointment model; None if the record is malformed."""
        data = {key: value for key, value in doc.items() if key != "_id"}
        data.setdefault("appointment_id", str(doc.get("_id")))
        try:
            data["appointment_date"] = self._parse_date(doc["appointment_date"])
            return Appointment.model_validate(data)
        except (KeyError, ValueError) as e:
            # ValidationError is a ValueError
            logger.warning(f"Skipping malformed appointment {data['appointment_id']}: {e}")
            return None


# Create singleton instance
appointment_service = AppointmentService()
