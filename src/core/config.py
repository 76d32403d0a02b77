"""Configuration management for taskpulse."""

from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # PocketBase Configuration
    pocketbase_url: str = Field(default="http://127.0.0.1:8090", description="PocketBase server URL")
    pocketbase_admin_email: str = Field(
        default="admin@test.local", description="PocketBase admin email for data access and schema sync"
    )
    pocketbase_admin_password: str = Field(
        default="testpassword123", description="PocketBase admin password for data access and schema sync"
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment name")

    # Clock Configuration
    timezone: str = Field(
        default="UTC",
        description="IANA zone used to bucket tasks and activity into calendar days (e.g. Europe/Berlin)",
    )

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        """Zone object for the configured timezone."""
        return ZoneInfo(self.timezone)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_TIMEOUT_SECONDS: int = 30
    USER_ID_HEADER: str = "X-User-Id"

    # Smart Contexts
    RECENT_TASK_WINDOW_HOURS: int = 168  # 7 days
    MORNING_END_HOUR: int = 12
    AFTERNOON_END_HOUR: int = 17
    CONTEXT_REFRESH_SECONDS: int = 60  # Clients re-fetch so "today" and "this hour" stay current

    # Analytics
    PRODUCTIVITY_WINDOW_DAYS: dict[str, int] = {"week": 7, "month": 30}  # noqa: RUF012
    UPCOMING_DUE_DAYS: int = 7
    RECENT_TASKS_LIMIT: int = 5
    GREETING_AFTERNOON_END_HOUR: int = 18
    UNCATEGORIZED_COLOR: str = "#9CA3AF"

    # Productivity Settings Defaults
    DEFAULT_PEAK_HOURS: tuple[str, ...] = ("09:00", "14:00")
    DEFAULT_WORK_DAYS: tuple[int, ...] = (1, 2, 3, 4, 5)  # 1 = Monday, 7 = Sunday
    DEFAULT_FOCUS_DURATION_MINUTES: int = 25
    MIN_FOCUS_DURATION_MINUTES: int = 5
    MAX_FOCUS_DURATION_MINUTES: int = 120

    # Pagination Defaults
    FULL_LIST_BATCH_SIZE: int = 200  # Page size used when walking every page of a collection

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
