# -*- coding: utf-8 -*-
"""Application settings sourced from environment variables and an optional .env file."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    state_db_path: str = Field(default="tomato_state.db", validation_alias="TOMATO_STATE_DB")
    log_level: str = Field(default="INFO", validation_alias="TOMATO_LOG_LEVEL")
    tick_interval_ms: int = Field(default=1000, validation_alias="TOMATO_TICK_MS")

    @field_validator("state_db_path")
    @classmethod
    def _default_db_path(cls, value: str) -> str:
        return value.strip() or "tomato_state.db"

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in LOG_LEVELS:
            raise ValueError("TOMATO_LOG_LEVEL must be one of " + ", ".join(LOG_LEVELS))
        return normalized

    @field_validator("tick_interval_ms")
    @classmethod
    def _validate_tick(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("TOMATO_TICK_MS must be > 0")
        return value


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Return cached settings instance."""

    return AppConfig()


__all__ = ["AppConfig", "get_config"]
