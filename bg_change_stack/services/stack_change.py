"""Blue/green stack change of a running application.

The existing application is renamed to ``<name>-venerable`` and a new
application with the original name is provisioned from its manifest. The
venerable application's bits are copied over, the new application is started,
moved to the target stack and restaged, and finally the venerable application
is deleted. Until the restage succeeds, any failure deletes the new
application and renames the venerable one back.
"""

from pathlib import Path

import structlog

from ..constants import RETIRE_STEP_NAME, ROLLBACK_FAILURE_MESSAGE
from ..core.exceptions import CFCommandError, PreflightError, RemoteOperationError
from ..core.job_poller import JobPoller
from ..core.pipeline import Phase, Pipeline, Step, StepFailedError
from ..core.scratch import ScratchArea, scratch_area
from ..core.settings import StackChangeSettings
from ..models.app import ApplicationIdentity, StackChangeRequest
from .operations import PlatformOperations


class StackChangeService:
    """Builds and runs the stack change pipeline for one application."""

    def __init__(
        self,
        operations: PlatformOperations,
        poller: JobPoller | None = None,
        settings: StackChangeSettings | None = None,
        scratch_base_dir: Path | str | None = None,
    ):
        self.operations = operations
        self.settings = settings or StackChangeSettings()
        self.poller = poller or JobPoller(
            operations,
            initial_delay=self.settings.job_poll_initial_delay,
            max_delay=self.settings.job_poll_max_delay,
            backoff_factor=self.settings.job_poll_backoff_factor,
            max_wait=self.settings.job_poll_max_wait,
        )
        self.scratch_base_dir = scratch_base_dir
        self.logger = structlog.get_logger().bind(component="stack_change")

    async def change_stack(self, request: StackChangeRequest, skip_preflight: bool = False) -> None:
        """Move the application to the target stack without downtime.

        Raises:
            PreflightError: If the registry does not allow a migration to start
            StepFailedError: If a step failed and the application was restored
            RollbackFailedError: If a step failed and the restore failed too
        """
        log = self.logger.bind(app=request.application_name, stack=request.target_stack)

        if not skip_preflight:
            await self.preflight(request)

        async with scratch_area(self.scratch_base_dir) as scratch:
            pipeline = self.build_pipeline(request, scratch)
            log.info("Starting stack change", steps=len(pipeline.steps))
            try:
                await pipeline.execute()
            except StepFailedError as e:
                if e.step == RETIRE_STEP_NAME:
                    log.warning(
                        "Stack changed but the old application was left behind",
                        venerable=request.venerable_name,
                        error=str(e),
                    )
                raise

        log.info("Stack change completed")

    async def preflight(self, request: StackChangeRequest) -> None:
        """Check the application exists exactly once and no venerable copy lingers."""
        space_id = await self.operations.current_space_id()

        count = await self.operations.count_matching(request.application_name, space_id)
        if count != 1:
            raise PreflightError(
                f"Expected exactly one application named {request.application_name!r}, "
                f"found {count}"
            )

        venerable_count = await self.operations.count_matching(request.venerable_name, space_id)
        if venerable_count:
            raise PreflightError(
                f"An application named {request.venerable_name!r} already exists; "
                "delete or rename it before changing the stack"
            )

    def build_pipeline(self, request: StackChangeRequest, scratch: ScratchArea) -> Pipeline:
        """The fixed step sequence for one stack change."""
        ops = self.operations
        app = request.application_name
        venerable = request.venerable_name

        async def snapshot_configuration() -> None:
            await ops.create_descriptor(app, scratch.manifest_path)

        async def stage_placeholder() -> None:
            scratch.write_placeholder()

        async def alias_old_application() -> None:
            await ops.rename(app, venerable)

        async def provision_new_application() -> None:
            # The placeholder is not runnable, so a failing push is expected here
            try:
                await ops.deploy(app, scratch.manifest_path, scratch.content_dir, start=False)
            except (CFCommandError, RemoteOperationError) as e:
                self.logger.warning("Ignoring push failure of placeholder", app=app, error=str(e))

        async def transfer_artifact() -> None:
            source = await self._identity(venerable)
            dest = await self._identity(app)
            job = await ops.copy_artifact(source.remote_id, dest.remote_id)
            self.logger.info("Copying application bits", source=source.name, job_id=job.id)
            await self.poller.await_completion(job.id)

        async def activate_new_code() -> None:
            await ops.restart(app)

        async def apply_target_stack() -> None:
            identity = await self._identity(app)
            await ops.reassign_stack(identity.remote_id, request.target_stack)

        async def restage_for_stack_change() -> None:
            await ops.restage(app)

        async def retire_old_application() -> None:
            await ops.delete(venerable)

        async def restore_old_application() -> None:
            # Removing the new application frees the name for the rename
            await ops.delete(app)
            await ops.rename(venerable, app)

        provisioning = Phase("restore old application", restore_old_application)

        return Pipeline(
            steps=[
                Step("snapshot configuration", snapshot_configuration),
                Step("stage placeholder payload", stage_placeholder),
                Step("alias old application", alias_old_application, phase=provisioning),
                Step("provision new application", provision_new_application, phase=provisioning),
                Step("transfer artifact", transfer_artifact, phase=provisioning),
                Step("activate new code", activate_new_code, phase=provisioning),
                Step("apply target stack", apply_target_stack, phase=provisioning),
                Step("re-stage for stack change", restage_for_stack_change, phase=provisioning),
                Step(RETIRE_STEP_NAME, retire_old_application),
            ],
            rollback_failure_message=ROLLBACK_FAILURE_MESSAGE,
        )

    async def _identity(self, app_name: str) -> ApplicationIdentity:
        remote_id = await self.operations.resolve_identity(app_name)
        return ApplicationIdentity(name=app_name, remote_id=remote_id)
