# voicecal/core/config.py
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Сервис
    SERVICE_NAME: str = "Voice Agent Calendar Bridge"
    SERVICE_VERSION: str = "2.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    PUBLIC_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"
    SHUTDOWN_GRACE_SECONDS: int = 10

    # Google
    GOOGLE_SERVICE_ACCOUNT_KEY: Optional[str] = None
    GOOGLE_SERVICE_ACCOUNT_FILE: Optional[str] = None
    GOOGLE_CALENDAR_ID: str = "primary"
    VERIFY_CALENDAR_ON_STARTUP: bool = True

    # Scopes
    SCOPES: list[str] = [
        'https://www.googleapis.com/auth/calendar',
    ]

    # Календарь
    TIMEZONE: str = "America/Chicago"
    DEFAULT_EVENT_DESCRIPTION: str = "Appointment created via voice agent"

    @property
    def has_service_account(self) -> bool:
        return bool(self.GOOGLE_SERVICE_ACCOUNT_KEY or self.GOOGLE_SERVICE_ACCOUNT_FILE)


# Единственный экземпляр настроек, который импортируется по умолчанию
settings = Settings()
