import re
from typing import List, Optional, Dict, Any

from pymongo import ASCENDING
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from careslot.models.doctor import Doctor, DoctorResponse, DoctorUpdate, Specialization
from careslot.utils.dates import parse_hour
from careslot.utils.logger import app_logger as logger
from careslot.db.mongodb import get_database


class DoctorService:
    """Doctor directory backed by MongoDB."""

    def __init__(self):
        logger.info("Doctor Service initialized with MongoDB")

    def _get_collection(self):
        db = get_database()
        return db.doctors if db is not None else None

    @staticmethod
    def build_query(
        specialization: Optional[Specialization] = None,
        search: Optional[str] = None
    ) -> Dict[str, Any]:
        """Directory filter: exact specialization, free text on name or specialization."""
        query: Dict[str, Any] = {}
        if specialization:
            query["specialization"] = specialization.value
        if search and search.strip():
            pattern = re.escape(search.strip())
            query["$or"] = [
                {"full_name": {"$regex": pattern, "$options": "i"}},
                {"specialization": {"$regex": pattern, "$options": "i"}}
            ]
        return query

    async def create_doctor(self, doctor: Doctor) -> Optional[Doctor]:
        collection = self._get_collection()
        if collection is None:
            logger.warning("MongoDB not connected")
            return None

        await collection.insert_one(doctor.model_dump(mode="json"))
        logger.info(f"Doctor created: {doctor.doctor_id} {doctor}")
        return doctor

    async def get_all_doctors(
        self,
        specialization: Optional[Specialization] = None,
        search: Optional[str] = None
    ) -> List[Doctor]:
        """List doctors ordered by name, optionally filtered."""
        try:
            collection = self._get_collection()
            if collection is None:
                logger.warning("MongoDB not connected")
                return []

            cursor = collection.find(self.build_query(specialization, search)).sort("full_name", ASCENDING)

            doctors = []
            async for doc in cursor:
                doctor = self._doc_to_model(doc)
                if doctor is not None:
                    doctors.append(doctor)

            return doctors

        except PyMongoError as e:
            logger.error(f"Error getting doctors: {e}")
            return []

    async def get_doctor_by_id(self, doctor_id: str) -> Optional[Doctor]:
        try:
            collection = self._get_collection()
            if collection is None:
                logger.warning("MongoDB not connected")
                return None

            doc = await collection.find_one({"doctor_id": doctor_id})
            return self._doc_to_model(doc) if doc else None

        except PyMongoError as e:
            logger.error(f"Error getting doctor: {e}")
            return None

    async def get_doctor_by_user_id(self, user_id: str) -> Optional[Doctor]:
        try:
            collection = self._get_collection()
            if collection is None:
                logger.warning("MongoDB not connected")
                return None

            doc = await collection.find_one({"user_id": user_id})
            return self._doc_to_model(doc) if doc else None

        except PyMongoError as e:
            logger.error(f"Error getting doctor for user: {e}")
            return None

    async def update_doctor(self, doctor_id: str, update: DoctorUpdate) -> DoctorResponse:
        """Apply the doctor's own profile edits."""
        changes = update.changes()
        if not changes:
            return DoctorResponse(success=False, message="Nothing to update", error="Empty update")

        doctor = await self.get_doctor_by_id(doctor_id)
        if doctor is None:
            return DoctorResponse(success=False, message="Doctor not found", error="Invalid doctor ID")

        start = parse_hour(changes.get("available_hours_start", doctor.available_hours_start))
        end = parse_hour(changes.get("available_hours_end", doctor.available_hours_end))
        if start is not None and end is not None and end <= start:
            return DoctorResponse(
                success=False,
                message="End hour must be after start hour",
                error="Invalid hours"
            )

        try:
            collection = self._get_collection()
            if collection is None:
                return DoctorResponse(
                    success=False,
                    message="Database not available",
                    error="MongoDB not connected"
                )

            await collection.update_one({"doctor_id": doctor_id}, {"$set": changes})
            updated = Doctor.model_validate({**doctor.model_dump(), **changes})

            logger.info(f"Doctor {doctor_id} profile updated: {sorted(changes)}")
            return DoctorResponse(success=True, message="Profile updated", doctor=updated)

        except PyMongoError as e:
            logger.error(f"Error updating doctor: {e}")
            return DoctorResponse(success=False, message="Failed to update profile", error=str(e))

    def _doc_to_model(self, doc: Dict) -> Optional[Doctor]:
        """Convert MongoDB document to Doctor model; None if the record is malformed."""
        specialization = doc.get("specialization")
        if specialization and specialization not in {s.value for s in Specialization}:
            specialization = Specialization.OTHER.value

        try:
            return Doctor(
                doctor_id=doc["doctor_id"],
                user_id=doc.get("user_id"),
                full_name=doc.get("full_name", ""),
                email=doc.get("email"),
                phone=doc.get("phone"),
                license_number=doc.get("license_number"),
                specialization=specialization or None,
                years_of_experience=doc.get("years_of_experience") or 0,
                education=doc.get("education"),
                certifications=doc.get("certifications"),
                bio=doc.get("bio"),
                consultation_fee=doc.get("consultation_fee") or 0,
                available_days=doc.get("available_days", []),
                available_hours_start=doc.get("available_hours_start"),
                available_hours_end=doc.get("available_hours_end")
            )
        except (KeyError, ValidationError) as e:
            logger.warning(f"Skipping malformed doctor record {doc.get('doctor_id')!r}: {e}")
            return None


# Create singleton instance
doctor_service = DoctorService()
