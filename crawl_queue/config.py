#crawl_queue\config.py

from typing import List, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ControllerSettings(BaseSettings):
    """Controller configuration from environment variables (CRAWL_QUEUE_*)."""

    model_config = SettingsConfigDict(
        env_prefix="CRAWL_QUEUE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Slot pool: one port per concurrently running worker
    slots: List[int] = [9995]

    # Poller
    poll_interval_seconds: float = 20.0
    initial_delay_seconds: float = 10.0

    # Worker launch; "{slot}" is replaced with the port number
    launch_command: List[str] = ["/bin/bash", "crawl{slot}.sh"]
    launch_cwd: Optional[str] = None

    # Reconciliation
    probe_host: str = ""
    # A claimed slot whose port probes free is reclaimed on the next cycle.
    # Workers take a while to bind their port, so with 0 a quick second
    # submit can finish the first request and launch onto the same port.
    # Set this to the worker start-up time in production.
    startup_grace_seconds: float = 0.0

    # Remote stop
    control_url_template: str = "http://127.0.0.1:{slot}"
    stop_timeout_seconds: float = 10.0

    # Store
    store_backend: Literal["postgres", "memory"] = "postgres"
    database_url: Optional[str] = None  # overrides the postgres_* fields

    # PostgreSQL connection
    postgres_user: str = "crawl_queue"
    postgres_password: str = ""
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "crawl_queue"

    # Connection pool
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600

    # SQLAlchemy
    echo_sql: bool = False

    @property
    def store_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @field_validator("slots")
    @classmethod
    def _validate_slots(cls, slots: List[int]) -> List[int]:
        if not slots:
            raise ValueError("at least one slot is required")
        if len(set(slots)) != len(slots):
            raise ValueError(f"duplicate slots in {slots}")
        for slot in slots:
            if not 0 < slot < 65536:
                raise ValueError(f"slot {slot} is not a valid port")
        return slots

    @field_validator("poll_interval_seconds")
    @classmethod
    def _validate_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("poll_interval_seconds must be positive")
        return value

    @field_validator("launch_command")
    @classmethod
    def _validate_command(cls, command: List[str]) -> List[str]:
        if not command:
            raise ValueError("launch_command must not be empty")
        return command
