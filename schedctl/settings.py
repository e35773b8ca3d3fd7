"""Runtime settings loaded from the environment."""

from datetime import timedelta
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SchedulerSettings(BaseSettings):
    """Scheduler configuration. Every field can be set via ``SCHEDCTL_<NAME>``."""

    model_config = SettingsConfigDict(env_prefix="SCHEDCTL_")

    interval_seconds: float = Field(default=30.0, gt=0, allow_inf_nan=False)
    max_retries: int = Field(default=5, gt=0)
    success_status: str = Field(default="sent", min_length=1)
    failure_status: str = Field(default="failed", min_length=1)
    command_timeout: float = Field(default=300.0, gt=0)  # seconds
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {value}")
        return level

    @property
    def interval(self) -> timedelta:
        return timedelta(seconds=self.interval_seconds)
