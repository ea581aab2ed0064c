import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging settings
    log_level: str = "WARNING"
    log_format: str = "%(levelname)s: %(message)s"

    # Print processed/ignored/rejected counters to stderr after a run
    report_stats: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
