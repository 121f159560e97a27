from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "SafeOps Workflow Core"
    app_env: Literal["development", "testing", "production"] = "development"
    debug: bool = False
    enable_openapi: bool = True

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_ssl_mode: Literal["disable", "prefer", "require", "verify-ca", "verify-full"] = (
        "prefer"
    )

    # Redis (change feed transport - optional, feed is disabled without it)
    redis_url: str | None = None  # redis://host:6379/0
    redis_pool_size: int = 10

    # Change feed
    change_feed_channel_prefix: str = "changes"
    change_feed_reconnect_initial_delay: float = 0.5  # seconds
    change_feed_reconnect_max_delay: float = 30.0  # seconds

    # Workflow tracker
    workflow_snapshot_page_size: int = 50
    workflow_snapshot_max_page_size: int = 200

    # Live status aggregation
    live_status_window_days: int = 30
    live_status_trend_tolerance: float = 0.10  # +/- band treated as "stable"
    live_status_refresh_schedule: str | None = None  # Cron syntax, e.g., "*/15 * * * *"

    # Temporal
    temporal_host: str = "localhost:7233"
    temporal_namespace: str = "default"
    temporal_task_queue: str = "safeops-queue"

    # Notifications (delivered by the Temporal worker)
    notification_webhook_url: str | None = None  # If not set, notifications are logged only
    notification_timeout_seconds: float = 10.0

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Metrics
    metrics_api_key: str | None = None  # sent as X-Metrics-Key

    @field_validator("cors_origins")
    @classmethod
    def reject_wildcard_origin(cls, v: list[str]) -> list[str]:
        """Credentialed CORS needs explicit origins."""
        if "*" in v:
            raise ValueError("CORS_ORIGINS must list explicit origins, not '*'")
        return v

    @field_validator("live_status_trend_tolerance")
    @classmethod
    def validate_trend_tolerance(cls, v: float) -> float:
        if not 0 <= v < 1:
            raise ValueError("LIVE_STATUS_TREND_TOLERANCE must be in [0, 1)")
        return v

    @field_validator("workflow_snapshot_page_size", "workflow_snapshot_max_page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Snapshot page sizes must be positive")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
