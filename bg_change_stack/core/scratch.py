"""Private scratch directory for one migration run."""

import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import structlog

from ..constants import MANIFEST_FILE_NAME, PLACEHOLDER_FILE_NAME, SCRATCH_DIR_PREFIX

logger = structlog.get_logger()


@dataclass(frozen=True)
class ScratchArea:
    """Staging location for the exported manifest and the placeholder payload."""

    root: Path

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_FILE_NAME

    @property
    def content_dir(self) -> Path:
        return self.root

    def write_placeholder(self) -> Path:
        """Create the minimal artifact pushed in place of real application code."""
        placeholder = self.content_dir / PLACEHOLDER_FILE_NAME
        placeholder.write_text("placeholder\n", encoding="utf-8")
        return placeholder


@asynccontextmanager
async def scratch_area(base_dir: Path | str | None = None) -> AsyncIterator[ScratchArea]:
    """Create a scratch directory and remove it on exit, success or failure."""
    root = Path(tempfile.mkdtemp(prefix=SCRATCH_DIR_PREFIX, dir=base_dir))
    logger.debug("Scratch area created", path=str(root))
    try:
        yield ScratchArea(root)
    finally:
        shutil.rmtree(root, ignore_errors=True)
        logger.debug("Scratch area removed", path=str(root))
