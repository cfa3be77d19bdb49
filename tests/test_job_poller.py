"""Tests for asynchronous job polling."""

from unittest.mock import AsyncMock, patch

import pytest

from bg_change_stack.core.exceptions import CFCommandError
from bg_change_stack.core.job_poller import JobFailedError, JobPoller, JobTimeoutError
from tests.fakes import make_job

COPY_BITS_FAILURE = {
    "code": 170001,
    "description": "Staging error: cannot get instances since staging failed",
    "error_code": "CF-StagingError",
}


def scripted_operations(*jobs):
    """Operations whose fetch_job returns the given jobs in order."""
    operations = AsyncMock()
    operations.fetch_job = AsyncMock(side_effect=list(jobs))
    return operations


@pytest.fixture
def poller_factory():
    def factory(operations, **kwargs):
        kwargs.setdefault("initial_delay", 0)
        kwargs.setdefault("max_delay", 0)
        kwargs.setdefault("max_wait", None)
        return JobPoller(operations, **kwargs)

    return factory


@pytest.mark.asyncio
class TestJobPoller:
    """Test job polling until a terminal state."""

    async def test_finishes_after_four_fetches(self, poller_factory):
        operations = scripted_operations(
            make_job("queued"), make_job("running"), make_job("running"), make_job("finished")
        )

        job = await poller_factory(operations).await_completion("job-1")

        assert job.is_finished
        assert operations.fetch_job.await_count == 4
        operations.fetch_job.assert_awaited_with("job-1")

    async def test_failure_carries_error_details(self, poller_factory):
        operations = scripted_operations(
            make_job("running"), make_job("failed", error_details=COPY_BITS_FAILURE)
        )

        with pytest.raises(JobFailedError) as exc_info:
            await poller_factory(operations).await_completion("job-1")

        assert operations.fetch_job.await_count == 2
        error = exc_info.value
        assert error.code == 170001
        assert error.error_code == "CF-StagingError"
        assert error.description == COPY_BITS_FAILURE["description"]
        assert str(error) == (
            "Error CF-StagingError, Staging error: cannot get instances since staging failed "
            "[code: 170001]"
        )

    async def test_unknown_status_keeps_polling(self, poller_factory):
        operations = scripted_operations(make_job("pending_upload"), make_job("finished"))

        await poller_factory(operations).await_completion("job-1")

        assert operations.fetch_job.await_count == 2

    async def test_fetch_error_propagates_without_retry(self, poller_factory):
        operations = scripted_operations(make_job("running"), CFCommandError("connection reset"))

        with pytest.raises(CFCommandError, match="connection reset"):
            await poller_factory(operations).await_completion("job-1")

        assert operations.fetch_job.await_count == 2

    async def test_backoff_between_fetches(self, poller_factory):
        operations = scripted_operations(*[make_job("running")] * 5, make_job("finished"))
        poller = poller_factory(operations, initial_delay=1.0, max_delay=5.0, backoff_factor=2.0)

        with patch("bg_change_stack.core.job_poller.asyncio.sleep", new=AsyncMock()) as sleep:
            await poller.await_completion("job-1")

        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0, 4.0, 5.0, 5.0]

    async def test_times_out_when_job_never_completes(self, poller_factory):
        operations = AsyncMock()
        operations.fetch_job = AsyncMock(return_value=make_job("running"))
        poller = poller_factory(operations, initial_delay=1.0, max_delay=1.0, max_wait=2.5)

        with patch("bg_change_stack.core.job_poller.asyncio.sleep", new=AsyncMock()), patch(
            "bg_change_stack.core.job_poller.time"
        ) as clock:
            clock.monotonic.side_effect = [0.0, 0.0, 1.0, 2.0]
            with pytest.raises(JobTimeoutError, match="still 'running'"):
                await poller.await_completion("job-1")

        assert operations.fetch_job.await_count == 3

    async def test_failed_job_without_details_uses_error_text(self, poller_factory):
        job = make_job("failed")
        job.entity.error = "Copy failed"
        operations = scripted_operations(job)

        with pytest.raises(JobFailedError) as exc_info:
            await poller_factory(operations).await_completion("job-1")

        assert exc_info.value.description == "Copy failed"
