"""
Configuration management for VaidyaPortal
"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "VaidyaPortal"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENV: str = "development"

    # API
    API_PREFIX: str = "/api/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database (Supabase Postgres in production)
    DATABASE_URL: str = "sqlite:///./vaidya_portal.db"
    DATABASE_ECHO: bool = False

    # LLM Configuration (Google Gemini)
    GOOGLE_API_KEY: Optional[str] = None
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    LLM_MODEL: str = "gemini-2.5-flash"
    LLM_TEMPERATURE: float = 0.4
    LLM_MAX_TOKENS: int = 4096
    LLM_TIMEOUT_SECONDS: int = 30

    # Notifications
    NOTIFICATION_URL: Optional[str] = "http://localhost:3001/api/notifications/send"
    NOTIFICATION_TIMEOUT_SECONDS: float = 5.0

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:3001"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


class PortalConfig:
    """Domain constants for the doctor portal"""

    # Adherence
    RECENT_ACTIVITY_LIMIT: int = 10

    # AI prescription context
    AI_PREVIOUS_PRESCRIPTION_DAYS: int = 90
    AI_PREVIOUS_PRESCRIPTION_LIMIT: int = 5
    AI_ADHERENCE_RECORD_LIMIT: int = 20
    AI_DEFAULT_FOLLOW_UP_DAYS: int = 7

    # Duration normalization
    DEFAULT_DURATION: str = "7 days"
    UNIT_DEFAULT_DURATIONS: dict[str, str] = {
        "day": "7 days",
        "week": "2 weeks",
        "month": "1 month",
        "year": "1 year",
    }

    # Appointments
    APPOINTMENT_STATUSES: list[str] = [
        "scheduled", "confirmed", "in_progress", "completed", "cancelled"
    ]
    TODAY_APPOINTMENT_STATUSES: list[str] = ["confirmed", "in_progress", "scheduled"]

    # Dashboard
    DASHBOARD_MONTHS: int = 6
    DASHBOARD_WEEKS: int = 4


# Database table names
class TableNames:
    USERS = "users"
    CLINICS = "clinics"
    DOCTORS = "doctors"
    PATIENTS = "patients"
    DOCTOR_PATIENT_RELATIONSHIPS = "doctor_patient_relationships"
    APPOINTMENTS = "appointments"
    PRESCRIPTIONS = "prescriptions"
    MEDICATION_ADHERENCE = "medication_adherence"


settings = get_settings()
portal_config = PortalConfig()
