"""Configuration for the mock issues service."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    port: int = 3000
    fail_rate: float = 0.0
    initial_mode: str = "online"  # online|unavailable|reject
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="MOCK_ISSUES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ["settings", "Settings"]
