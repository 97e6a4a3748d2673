"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Morning Routine Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://morning@localhost:5432/morning_routine"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "morning-routine"
    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    cleanup_job_hour: int = 3
    cleanup_job_minute: int = 0
    jobs_run_on_startup: bool = False
    tick_interval_seconds: float = 1.0
    runtime_persist_every_ticks: int = 15
    restore_run_on_startup: bool = True
    notifications_enabled: bool = False
    notifications_provider: str = "noop"
    default_leave_time: str = "08:00"
    default_sleep_minutes: int = 450
    default_buffer_minutes: int = 10


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
