"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Fleet Offline Sync"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    database_url: str = "sqlite:///data/offline_queue.db"
    # Remote issue submission endpoint (fleet maintenance API)
    issues_endpoint_url: str = "http://localhost:3000/api/issues"
    submission_timeout: float = 15.0
    retry_ceiling: int = 5
    offline_id_prefix: str = "offline"
    # Connectivity probing; falls back to the issues endpoint when unset
    connectivity_probe_url: str | None = None
    connectivity_poll_seconds: float = 30.0
    connectivity_probe_timeout: float = 5.0
    periodic_sync_seconds: float = 0.0  # 0 disables periodic wake-ups
    start_monitor: bool = False
    notifications_max_items: int = 50
    metrics_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def probe_url(self) -> str:
        return self.connectivity_probe_url or self.issues_endpoint_url


settings = Settings()

__all__ = ["settings", "Settings"]
