from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import os


class Settings(BaseSettings):
    """Application configuration settings."""

    # Application
    APP_NAME: str = "CareSlot"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True
    ENVIRONMENT: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "careslot_db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    # Clinic
    CLINIC_TIMEZONE: str = "UTC"
    DEFAULT_START_TIME: str = "09:00"

    # Slot search & recommendations
    SLOT_SEARCH_HORIZON_DAYS: int = 14
    DAILY_APPOINTMENT_CAPACITY: int = 8
    MAX_RECOMMENDATIONS: int = 5
    NO_SLOT_WAIT_DAYS: int = 999

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def validate_engine_config(self) -> bool:
        """Validate slot search and recommendation limits."""
        if self.SLOT_SEARCH_HORIZON_DAYS <= 0:
            raise ValueError("SLOT_SEARCH_HORIZON_DAYS must be positive")
        if self.DAILY_APPOINTMENT_CAPACITY <= 0:
            raise ValueError("DAILY_APPOINTMENT_CAPACITY must be positive")
        if self.MAX_RECOMMENDATIONS <= 0:
            raise ValueError("MAX_RECOMMENDATIONS must be positive")
        return True


settings = Settings()

if settings.LOG_FILE and os.path.dirname(settings.LOG_FILE):
    os.makedirs(os.path.dirname(settings.LOG_FILE), exist_ok=True)
