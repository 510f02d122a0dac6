"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

DEFAULT_EMAIL_FROM = '"Delicious Kitchen" <noreply@deliciouskitchen.com>'


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending order emails via the REST API",
    )
    email_from: str = Field(
        default=DEFAULT_EMAIL_FROM,
        description="Sender identity used when an outbound email does not set one",
        min_length=3,
    )
    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Base URL of the customer facing application",
    )
    app_timezone: str = Field(
        default="America/Bogota",
        description="Timezone used to stamp notifications",
    )
    delivery_max_attempts: int = Field(
        default=3,
        description="Maximum number of send attempts for a single email",
        gt=0,
    )
    delivery_base_delay_seconds: float = Field(
        default=2.0,
        description="Delay before the second attempt; doubled after each failure",
        ge=0,
    )
    subscriber_queue_size: int = Field(
        default=100,
        description="Pending payloads a live subscriber may buffer before being dropped",
        gt=0,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to open the live notification stream",
    )

    @model_validator(mode="after")
    def _validate_sender(self) -> "Settings":
        if "@" not in self.email_from:
            raise ValueError("EMAIL_FROM must contain a valid email address")
        self.frontend_url = self.frontend_url.rstrip("/")
        return self

    @property
    def email_configured(self) -> bool:
        """Return whether the email transport has the credentials it needs."""

        return bool(self.sendgrid_api_key and self.email_from)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache", "DEFAULT_EMAIL_FROM"]
