"""Service layer for the stack change tool."""

from .cloudfoundry import CloudFoundryOperations
from .operations import PlatformOperations
from .stack_change import StackChangeService

__all__ = [
    "CloudFoundryOperations",
    "PlatformOperations",
    "StackChangeService",
]
