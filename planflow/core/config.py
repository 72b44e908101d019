"""
Application configuration using Pydantic Settings.

Values are read from environment variables and an optional `.env` file.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # IANA zone used to read timezone-aware instants as local wall time.
    # Empty means the host's local zone.
    TIMEZONE: str = ""

    # ===========================================
    # LLM Configuration
    # ===========================================
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # Google API Key for Gemini. Without it AI features return fallback text.
    GOOGLE_API_KEY: str = ""

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    # ===========================================
    # Calendar / Auto-scheduler
    # ===========================================
    WORK_DAY_START: str = "09:00"
    WORK_DAY_END: str = "17:00"
    SLOT_STEP_MINUTES: int = Field(15, ge=1)
    MIN_BLOCK_MINUTES: int = Field(15, ge=1)
    # date.weekday() numbering: Monday=0 ... Sunday=6
    WEEK_START_DAY: int = Field(6, ge=0, le=6)
    # Cosmetic "thinking" delay before an auto-schedule run is computed
    AUTO_SCHEDULE_DELAY_MS: int = Field(800, ge=0)
    # Simulated latency of mocked calendar providers
    CALENDAR_CONNECT_LATENCY_MS: int = Field(1500, ge=0)

    # ===========================================
    # Planner / Focus timer
    # ===========================================
    DEFAULT_FOCUS_MINUTES: int = Field(25, ge=1)
    QUICK_ADD_MINUTES: int = Field(30, ge=0)
    QUICK_ADD_HOUR: int = Field(9, ge=0, le=23)

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
