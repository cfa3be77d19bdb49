"""Abstract base class for platform control-plane operations."""

from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from ..models.job import Job

logger = structlog.get_logger()


class PlatformOperations(ABC):
    """Named remote operations against the targeted org and space.

    Every call blocks until the platform answers. Failures are raised, never
    retried here.
    """

    def __init__(self):
        self.logger = logger.bind(component=self.__class__.__name__.lower())

    @abstractmethod
    async def create_descriptor(self, app_name: str, manifest_path: Path) -> None:
        """Export the application's deployment manifest to manifest_path."""

    @abstractmethod
    async def deploy(
        self, app_name: str, manifest_path: Path, content_path: Path, start: bool = False
    ) -> None:
        """Push content_path as app_name using the given manifest."""

    @abstractmethod
    async def rename(self, old_name: str, new_name: str) -> None:
        pass

    @abstractmethod
    async def restart(self, app_name: str) -> None:
        pass

    @abstractmethod
    async def restage(self, app_name: str) -> None:
        pass

    @abstractmethod
    async def delete(self, app_name: str) -> None:
        pass

    @abstractmethod
    async def resolve_identity(self, app_name: str) -> str:
        """Return the platform id of app_name.

        Raises:
            AppNotFoundError: If no application has that name
        """

    @abstractmethod
    async def copy_artifact(self, source_id: str, dest_id: str) -> Job:
        """Start copying the source application's bits to dest; returns the job."""

    @abstractmethod
    async def fetch_job(self, job_id: str) -> Job:
        pass

    @abstractmethod
    async def reassign_stack(self, app_id: str, stack_name: str) -> None:
        pass

    @abstractmethod
    async def count_matching(self, app_name: str, space_id: str) -> int:
        """Number of applications named app_name in the space."""

    @abstractmethod
    async def current_space_id(self) -> str:
        pass

