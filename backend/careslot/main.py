from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pymongo.errors import PyMongoError

from careslot.config import settings
from careslot.utils.logger import app_logger as logger
from careslot.api import api_router, insights_router
from careslot.db.mongodb import connect_to_mongo, close_mongo_connection, get_database


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    settings.validate_engine_config()
    logger.info(
        f"Slot search: {settings.SLOT_SEARCH_HORIZON_DAYS} days horizon, "
        f"{settings.DAILY_APPOINTMENT_CAPACITY} bookings/day, "
        f"top {settings.MAX_RECOMMENDATIONS} recommendations"
    )

    try:
        logger.info("Connecting to MongoDB...")
        await connect_to_mongo()
        logger.info("MongoDB connected successfully")
    except PyMongoError as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        logger.warning("Running without database - requests will report the database as unavailable")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await close_mongo_connection()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
app.include_router(insights_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    db = get_database()
    db_status = "disconnected"
    doctors_count = 0
    appointments_count = 0

    if db is not None:
        db_status = "connected"
        try:
            doctors_count = await db.doctors.count_documents({})
            appointments_count = await db.appointments.count_documents({})
        except PyMongoError as e:
            logger.warning(f"Health check count failed: {e}")
            db_status = "degraded"

    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": db_status,
        "doctors_count": doctors_count,
        "appointments_count": appointments_count
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "careslot.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
