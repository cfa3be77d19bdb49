"""Settings for stack change operations.

Provides centralized timeout and polling configuration using Pydantic
BaseSettings with environment variable support for operational tuning.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StackChangeSettings(BaseSettings):
    """cf CLI, job polling and logging configuration."""

    cf_binary: str = Field("cf", alias="CF_BINARY", description="cf CLI executable")

    cf_home: str | None = Field(
        None, alias="CF_HOME", description="Directory holding the cf CLI .cf/config.json"
    )

    cf_command_timeout: float = Field(
        600, gt=0, alias="CF_COMMAND_TIMEOUT", description="cf CLI command timeout in seconds"
    )

    job_poll_initial_delay: float = Field(
        1.0, ge=0, alias="JOB_POLL_INITIAL_DELAY", description="First delay between job fetches"
    )

    job_poll_max_delay: float = Field(
        15.0, ge=0, alias="JOB_POLL_MAX_DELAY", description="Upper bound for the job fetch delay"
    )

    job_poll_backoff_factor: float = Field(
        2.0, ge=1, alias="JOB_POLL_BACKOFF_FACTOR", description="Exponential backoff multiplier"
    )

    job_poll_max_wait: float | None = Field(
        900, gt=0, alias="JOB_POLL_MAX_WAIT", description="Maximum time to wait for a job"
    )

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    log_dir: str | None = Field(None, alias="LOG_DIR", description="Directory for the log file")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)
