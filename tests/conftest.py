"""Shared pytest fixtures for stack change tests."""

import pytest

from bg_change_stack.core.job_poller import JobPoller
from bg_change_stack.core.settings import StackChangeSettings
from bg_change_stack.models.app import StackChangeRequest
from bg_change_stack.services.stack_change import StackChangeService
from tests.fakes import FakePlatform


@pytest.fixture
def platform() -> FakePlatform:
    """Space holding a single running application named orders."""
    platform = FakePlatform()
    platform.add_app("orders", stack="cflinuxfs3", bits="orders-v42")
    return platform


@pytest.fixture
def request_orders() -> StackChangeRequest:
    return StackChangeRequest(application_name="orders", target_stack="cflinuxfs4")


@pytest.fixture
def settings() -> StackChangeSettings:
    """Settings that do not depend on the environment or a .env file."""
    return StackChangeSettings(_env_file=None, JOB_POLL_INITIAL_DELAY=0, JOB_POLL_MAX_DELAY=0)


@pytest.fixture
def service(platform: FakePlatform, settings: StackChangeSettings, tmp_path) -> StackChangeService:
    poller = JobPoller(platform, initial_delay=0, max_delay=0, max_wait=None)
    return StackChangeService(platform, poller=poller, settings=settings, scratch_base_dir=tmp_path)
