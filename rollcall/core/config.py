# rollcall/core/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime.

    These settings are used for:
    - DB connection
    - Internal API key for scheduler-only endpoints
    - Organization wall clock (timezone)
    - Session defaults applied when a batch omits them
    - Attendance lateness policy
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Rollcall"
    APP_ENV: str = Field("local", description="Environment name: local/test/dev/stage/prod")

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./rollcall.db",
        description="SQLAlchemy-compatible database URL",
    )

    INTERNAL_API_KEY: str | None = Field(
        default=None,
        description="API key required for hitting /internal endpoints",
    )

    ORG_TIMEZONE: str = Field(
        default="Asia/Kolkata",
        description=(
            "IANA timezone whose wall clock is used as 'now' when classifying "
            "sessions. Session dates and HH:MM times are stored as local wall-clock."
        ),
    )

    # --- Logging ---
    LOG_LEVEL: str = Field(default="INFO", description="Root log level.")
    LOG_JSON: bool = Field(
        default=False,
        description="Emit JSON log lines (production) instead of console output.",
    )

    # --- Session defaults ---
    DEFAULT_START_TIME: str = Field(
        default="09:00",
        description="Start time used when a batch is created without one.",
    )
    DEFAULT_END_TIME: str = Field(
        default="17:00",
        description="End time used when a batch is created without one.",
    )
    DEFAULT_RADIUS_METERS: int = Field(
        default=100,
        description="Geofence radius applied to physical sessions when omitted.",
    )

    # --- Attendance policy ---
    LATE_ATTENDANCE_LIMIT_MINUTES: int = Field(
        default=30,
        ge=0,
        description=(
            "Minutes after session start during which a check-in is still on time. "
            "Unrelated to the fixed post-end buffer used for Live/Past status."
        ),
    )
    STRICT_ATTENDANCE: bool = Field(
        default=False,
        description="If true, check-ins after the lateness limit are rejected.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Using LRU cache ensures settings are read and validated only once,
    while still being easily importable across the app.
    """
    return Settings()
