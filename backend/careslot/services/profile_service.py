from typing import Dict, List, Optional

from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError

from careslot.models.profile import (
    DoctorRegistration,
    Patient,
    PatientRegistration,
    Profile,
    ProfileCompletion,
    ProfileResponse,
    UserRole
)
from careslot.services.doctor_service import doctor_service
from careslot.utils.logger import app_logger as logger
from careslot.db.mongodb import get_database


EMAIL_TAKEN = "email_taken"
PROFILE_NOT_FOUND = "profile_not_found"
DATABASE_UNAVAILABLE = "database_unavailable"


class ProfileService:
    """Registration for both roles and the complete-profile step.

    Credentials and e-mail confirmation live with the external auth
    provider; this service only stores the profile and role records.
    """

    def __init__(self):
        logger.info("Profile Service initialized with MongoDB")

    def _get_db(self):
        return get_database()

    async def register_doctor(self, registration: DoctorRegistration) -> ProfileResponse:
        db = self._get_db()
        if db is None:
            logger.warning("MongoDB not connected")
            return self._unavailable()

        profile = Profile(
            full_name=registration.full_name,
            email=registration.email,
            phone=registration.phone,
            role=UserRole.DOCTOR
        )

        try:
            await db.profiles.insert_one(profile.model_dump(mode="json"))
        except DuplicateKeyError:
            return self._email_taken(registration.email)
        except PyMongoError as e:
            logger.error(f"Error creating doctor profile: {e}")
            return ProfileResponse(success=False, message="Registration failed", error=str(e))

        try:
            doctor = await doctor_service.create_doctor(registration.to_doctor(profile.user_id))
        except PyMongoError as e:
            logger.error(f"Error creating doctor record, rolling back profile: {e}")
            await db.profiles.delete_one({"user_id": profile.user_id})
            return ProfileResponse(success=False, message="Registration failed", error=str(e))

        logger.info(f"Doctor registered: {profile.user_id} ({registration.specialization.value})")
        return ProfileResponse(
            success=True,
            message="Doctor account created",
            profile=profile,
            doctor=doctor
        )

    async def register_patient(self, registration: PatientRegistration) -> ProfileResponse:
        db = self._get_db()
        if db is None:
            logger.warning("MongoDB not connected")
            return self._unavailable()

        profile = Profile(
            full_name=registration.full_name,
            email=registration.email,
            phone=registration.phone,
            role=UserRole.PATIENT
        )
        patient = registration.to_patient(profile.user_id, full_name=registration.full_name)

        try:
            await db.profiles.insert_one(profile.model_dump(mode="json"))
        except DuplicateKeyError:
            return self._email_taken(registration.email)
        except PyMongoError as e:
            logger.error(f"Error creating patient profile: {e}")
            return ProfileResponse(success=False, message="Registration failed", error=str(e))

        try:
            await db.patients.insert_one(patient.model_dump(mode="json"))
        except PyMongoError as e:
            logger.error(f"Error creating patient record, rolling back profile: {e}")
            await db.profiles.delete_one({"user_id": profile.user_id})
            return ProfileResponse(success=False, message="Registration failed", error=str(e))

        logger.info(f"Patient registered: {profile.user_id}")
        return ProfileResponse(
            success=True,
            message="Patient account created",
            profile=profile,
            patient=patient
        )

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        try:
            db = self._get_db()
            if db is None:
                logger.warning("MongoDB not connected")
                return None

            doc = await db.profiles.find_one({"user_id": user_id})
            return self._to_model(Profile, doc) if doc else None

        except PyMongoError as e:
            logger.error(f"Error getting profile: {e}")
            return None

    async def get_patient(self, patient_id: str) -> Optional[Patient]:
        try:
            db = self._get_db()
            if db is None:
                logger.warning("MongoDB not connected")
                return None

            doc = await db.patients.find_one({"patient_id": patient_id})
            return self._to_model(Patient, doc) if doc else None

        except PyMongoError as e:
            logger.error(f"Error getting patient: {e}")
            return None

    async def get_patient_by_user_id(self, user_id: str) -> Optional[Patient]:
        try:
            db = self._get_db()
            if db is None:
                logger.warning("MongoDB not connected")
                return None

            doc = await db.patients.find_one({"user_id": user_id})
            return self._to_model(Patient, doc) if doc else None

        except PyMongoError as e:
            logger.error(f"Error getting patient for user: {e}")
            return None

    async def get_all_patients(self) -> List[Patient]:
        try:
            db = self._get_db()
            if db is None:
                logger.warning("MongoDB not connected")
                return []

            patients = []
            async for doc in db.patients.find({}):
                try:
                    patients.append(self._to_model(Patient, doc))
                except ValidationError as e:
                    logger.warning(f"Skipping malformed patient record {doc.get('patient_id')!r}: {e}")
            return patients

        except PyMongoError as e:
            logger.error(f"Error getting patients: {e}")
            return []

    async def complete_profile(self, user_id: str, completion: ProfileCompletion) -> ProfileResponse:
        """Save the phone number and, for patients, create the missing
        patient record. An existing record is left untouched."""
        profile = await self.get_profile(user_id)
        if profile is None:
            return ProfileResponse(
                success=False,
                message="Profile not found",
                error=PROFILE_NOT_FOUND
            )

        db = self._get_db()
        if db is None:
            return self._unavailable()

        try:
            if completion.phone:
                await db.profiles.update_one({"user_id": user_id}, {"$set": {"phone": completion.phone}})
                profile = profile.model_copy(update={"phone": completion.phone})

            if profile.role != UserRole.PATIENT:
                doctor = await doctor_service.get_doctor_by_user_id(user_id)
                return ProfileResponse(success=True, message="Profile updated", profile=profile, doctor=doctor)

            existing = await self.get_patient_by_user_id(user_id)
            if existing is not None:
                logger.info(f"Patient record already exists for user {user_id}")
                return ProfileResponse(
                    success=True,
                    message="Profile already completed",
                    profile=profile,
                    patient=existing,
                    already_completed=True
                )

            patient = completion.to_patient(user_id, full_name=profile.full_name)
            await db.patients.insert_one(patient.model_dump(mode="json"))

        except DuplicateKeyError:
            # concurrent completion created the record first
            existing = await self.get_patient_by_user_id(user_id)
            return ProfileResponse(
                success=True,
                message="Profile already completed",
                profile=profile,
                patient=existing,
                already_completed=True
            )
        except PyMongoError as e:
            logger.error(f"Error completing profile: {e}")
            return ProfileResponse(success=False, message="Failed to complete profile", error=str(e))

        logger.info(f"Patient record created for user {user_id}")
        return ProfileResponse(success=True, message="Profile completed", profile=profile, patient=patient)

    @staticmethod
    def _to_model(model, doc: Dict):
        return model.model_validate({key: value for key, value in doc.items() if key != "_id"})

    @staticmethod
    def _unavailable() -> ProfileResponse:
        return ProfileResponse(
            success=False,
            message="Database not available",
            error=DATABASE_UNAVAILABLE
        )

    @staticmethod
    def _email_taken(email: str) -> ProfileResponse:
        logger.warning(f"Registration rejected, email already registered: {email}")
        return ProfileResponse(
            success=False,
            message="An account with this email already exists",
            error=EMAIL_TAKEN
        )


# Create singleton instance
profile_service = ProfileService()
