"""
Configuration settings for the appointment maintenance service.
Uses Pydantic for type-safe configuration management.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

from app.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Mobile Mechanic Maintenance Service"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Persistence (privileged service identity)
    database_url: Optional[str] = None
    service_role_key: Optional[str] = None

    # Auto-cancellation
    overdue_threshold_minutes: int = 15
    system_actor: str = "system"

    # CORS
    cors_origins: list[str] = ["*"]

    # API
    api_v1_prefix: str = "/api/v1"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def require_persistence(self) -> None:
        """
        Fail fast when the persistence endpoint or the service credential
        has not been deployed.
        """
        missing = [
            name for name, value in (
                ("DATABASE_URL", self.database_url),
                ("SERVICE_ROLE_KEY", self.service_role_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
