"""Library Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is lru_cached: one Settings instance per process
    - Settings never change which fields are written, only how timestamps are
      represented and how skips are reported

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - FIELDHOOKS_ prefix: the library is embedded in host applications with their own env
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Library settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDHOOKS_", env_file=".env",
        case_sensitive=False, extra="ignore",
    )

    # Clock
    use_utc: bool = True

    # Update-time on a datetime field is written as epoch millis (int) by default;
    # downstream consumers of existing collections read it that way.
    update_time_as_epoch_millis: bool = True

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"
    diagnostic_log_level: str = "DEBUG"

    @field_validator("log_level", "diagnostic_log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_format(cls, v: str) -> str:
        """Anything other than json falls back to human-readable text."""
        if isinstance(v, str) and v.strip().lower() == "json":
            return "json"
        return "text"


@lru_cache
def get_settings() -> Settings:
    return Settings()
