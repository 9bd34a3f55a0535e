"""
Application configuration
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # App
    PROJECT_NAME: str = "PrimeCare Warranty"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    APP_URL: str = "http://localhost:3000"

    # Security
    SECRET_KEY: str = "development-jwt-secret-32-characters"
    ALGORITHM: str = "HS256"
    SCHEDULE_TOKEN_EXPIRE_DAYS: int = 7
    CRON_SECRET: Optional[str] = None  # unset = cron endpoints are open (local/dev)

    # Database
    DATABASE_URL: str = "sqlite:///./primecare.db"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]
    ALLOWED_HOSTS: List[str] = ["localhost", "127.0.0.1", "testserver", "*.jket.in"]

    # Scheduler
    SCHEDULER_ENABLED: bool = False
    REMINDER_CRON_HOUR: int = 9
    REMINDER_CRON_MINUTE: int = 0
    REMINDER_TIMEZONE: str = "Asia/Kolkata"

    # Warranty / reminder policy
    SERVICE_INTERVAL_DAYS: int = 90
    REMINDER_TRIGGER_DAYS: List[int] = [15, 7, 3, 0, -3]

    # Email
    EMAIL_BACKEND: str = "smtp"  # smtp or mock
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM_EMAIL: str = "noreply@jket.in"
    SMTP_FROM_NAME: str = "JKET Prime Care"
    SMTP_USE_SSL: bool = False
    SMTP_TIMEOUT_SECONDS: float = 30.0
    SUPPORT_PHONE: str = "1800 202 0051"
    SUPPORT_EMAIL: str = "customer.support@jket.in"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    @property
    def email_from(self) -> str:
        return f"{self.SMTP_FROM_NAME} <{self.SMTP_FROM_EMAIL}>"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
