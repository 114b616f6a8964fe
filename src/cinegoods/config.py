"""Application configuration using pydantic-settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cinegoods.exceptions import ConfigurationError

# Settings field name -> environment variable reported when missing
REQUIRED_SETTINGS: dict[str, str] = {
    "database_url": "DATABASE_URL",
    "gemini_api_key": "GEMINI_API_KEY",
    "google_service_account_email": "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "google_private_key": "GOOGLE_PRIVATE_KEY",
    "google_sheet_id": "GOOGLE_SHEET_ID",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database (Postgres, e.g. the Supabase connection string)
    database_url: str = ""

    # Gemini
    gemini_api_key: str = ""

    # Google Sheets service account
    google_service_account_email: str = ""
    google_private_key: str = ""
    google_sheet_id: str = ""

    # Browser settings
    headless: bool = True
    navigation_timeout: int = 60  # seconds

    # Pipeline settings
    screenshot_dir: str = "crawled_images"
    debug_dir: str = "."
    pacing_delay: float = 3.0
    rate_limit_cooldown: float = 10.0

    # Scheduler
    schedule_hour: int = 6

    @field_validator("google_private_key")
    @classmethod
    def unescape_private_key(cls, value: str) -> str:
        # Keys pasted into .env files usually carry literal "\n" sequences
        return value.replace("\\n", "\n")

    def missing_required(self) -> list[str]:
        """Return the environment variable names of required settings that are empty."""
        return [
            env_name
            for field_name, env_name in REQUIRED_SETTINGS.items()
            if not getattr(self, field_name)
        ]


def get_settings() -> Settings:
    """Build a fresh settings instance from the current environment."""
    return Settings()


def require_settings(settings: Settings) -> Settings:
    """
    Check that every required setting is present.

    Raises:
        ConfigurationError: Listing the missing environment variables
    """
    missing = settings.missing_required()
    if missing:
        raise ConfigurationError(missing)
    return settings
