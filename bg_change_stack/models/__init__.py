"""Data models for the stack change tool."""

from .app import (  # noqa: F401
    ApplicationIdentity,
    StackChangeRequest,
)
from .enums import JobStatus  # noqa: F401
from .job import (  # noqa: F401
    Job,
    JobEntity,
    JobErrorDetails,
    JobMetadata,
)
from .responses import (  # noqa: F401
    AppSearchResponse,
    CFCliConfig,
    SpaceFields,
    V2ApiError,
    V3ApiError,
    V3ApiErrorItem,
)

__all__ = [
    # Application models
    "ApplicationIdentity",
    "StackChangeRequest",
    # Job models
    "Job",
    "JobEntity",
    "JobErrorDetails",
    "JobMetadata",
    "JobStatus",
    # Response models
    "AppSearchResponse",
    "CFCliConfig",
    "SpaceFields",
    "V2ApiError",
    "V3ApiError",
    "V3ApiErrorItem",
]
