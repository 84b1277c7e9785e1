from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING
from pymongo.errors import ConnectionFailure, PyMongoError
from careslot.config import settings
from careslot.utils.logger import app_logger as logger

# Global MongoDB client
mongodb_client: AsyncIOMotorClient = None
database = None

SLOT_INDEX_NAME = "unique_occupied_slot"
SLOT_INDEX_KEYS = [
    ("doctor_id", ASCENDING),
    ("appointment_date", ASCENDING),
    ("appointment_time", ASCENDING),
]
SLOT_INDEX_FILTER = {"status": {"$in": ["scheduled", "confirmed"]}}


async def connect_to_mongo():
    """Connect to MongoDB."""
    global mongodb_client, database

    try:
        mongodb_client = AsyncIOMotorClient(
            settings.MONGODB_URL,
            serverSelectionTimeoutMS=5000
        )

        await mongodb_client.admin.command('ping')

        database = mongodb_client[settings.MONGODB_DB_NAME]

        logger.info(f"Connected to MongoDB: {settings.MONGODB_DB_NAME}")

        await create_indexes()

    except ConnectionFailure as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        raise
    except PyMongoError as e:
        logger.error(f"MongoDB connection error: {e}")
        raise


async def close_mongo_connection():
    """Close MongoDB connection."""
    global mongodb_client, database

    if mongodb_client is not None:
        mongodb_client.close()
        mongodb_client = None
        database = None
        logger.info("Closed MongoDB connection")


async def create_slot_index() -> bool:
    """At most one scheduled/confirmed appointment per (doctor, date, time).

    Requires MongoDB 6.0+ for $in inside a partial filter. A failure is
    logged as an error and leaves double booking unguarded.
    """
    if database is None:
        return False

    try:
        await database.appointments.create_index(
            SLOT_INDEX_KEYS,
            unique=True,
            name=SLOT_INDEX_NAME,
            partialFilterExpression=SLOT_INDEX_FILTER
        )
    except PyMongoError as e:
        logger.error(f"Could not create {SLOT_INDEX_NAME}, double booking is NOT prevented: {e}")
        return False

    logger.info(f"Slot index {SLOT_INDEX_NAME} ready")
    return True


async def create_indexes():
    """Create the occupied-slot constraint, then the lookup indexes."""
    if database is None:
        return

    await create_slot_index()

    try:
        await database.profiles.create_index("user_id", unique=True)
        await database.profiles.create_index("email", unique=True)

        await database.doctors.create_index("doctor_id", unique=True)
        await database.doctors.create_index("user_id")
        await database.doctors.create_index("specialization")

        await database.patients.create_index("patient_id", unique=True)
        await database.patients.create_index("user_id", unique=True)

        await database.appointments.create_index("appointment_id", unique=True)
        await database.appointments.create_index("patient_id")
        await database.appointments.create_index([("doctor_id", ASCENDING), ("appointment_date", ASCENDING)])

        logger.info("MongoDB indexes created")
    except PyMongoError as e:
        logger.warning(f"Error creating indexes: {e}")


def get_database():
    """Get database instance."""
    return database
