"""Asynchronous job models matching the platform's /v2/jobs response body."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import JobStatus


class JobErrorDetails(BaseModel):
    """Structured failure detail of a failed job."""

    code: int = 0
    description: str = ""
    error_code: str = ""


class JobMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="guid")
    created_at: datetime | None = None
    url: str | None = None


class JobEntity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="guid")
    status: str
    error: str | None = None
    error_details: JobErrorDetails | None = None


class Job(BaseModel):
    """A remote asynchronous operation, observed by polling.

    ``status`` stays a plain string so that values outside ``JobStatus`` are
    accepted and treated as non-terminal.
    """

    metadata: JobMetadata
    entity: JobEntity

    @property
    def id(self) -> str:
        return self.entity.id

    @property
    def status(self) -> str:
        return self.entity.status

    @property
    def is_finished(self) -> bool:
        return self.entity.status == JobStatus.FINISHED.value

    @property
    def is_failed(self) -> bool:
        return self.entity.status == JobStatus.FAILED.value

    @property
    def error_details(self) -> JobErrorDetails:
        return self.entity.error_details or JobErrorDetails(description=self.entity.error or "")
