"""Enum definitions for platform objects."""

from enum import Enum


class JobStatus(str, Enum):
    """Status values reported for asynchronous platform jobs."""

    QUEUED = "queued"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"
