"""Compensating-action pipeline for multi-step remote mutations.

Steps run in declared order. When a step fails, the steps that already
completed are unwound in reverse order by running their compensations. The
unwind stops at the first compensation that fails and no earlier compensation
runs after it; the raised error then carries both failures.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import structlog

from .exceptions import BgChangeStackError

logger = structlog.get_logger()

Action = Callable[[], Awaitable[None]]


class PipelineError(BgChangeStackError):
    """A pipeline step failed."""

    def __init__(self, message: str, step: str, cause: BaseException):
        super().__init__(message)
        self.step = step
        self.cause = cause


class StepFailedError(PipelineError):
    """A step failed and every applicable compensation succeeded."""

    def __init__(self, step: str, cause: BaseException, compensated: list[str]):
        super().__init__(str(cause), step, cause)
        self.compensated = compensated


class RollbackFailedError(PipelineError):
    """A step failed and one of the compensations failed as well."""

    def __init__(
        self,
        step: str,
        cause: BaseException,
        rollback_step: str,
        rollback_error: BaseException,
        message: str,
    ):
        super().__init__(
            f"{message}\nOriginal error ({step}): {cause}\n"
            f"Rollback error ({rollback_step}): {rollback_error}",
            step,
            cause,
        )
        self.rollback_step = rollback_step
        self.rollback_error = rollback_error
        self.rollback_message = message


@dataclass(frozen=True, eq=False)
class Phase:
    """A group of steps undone as a unit by a single compensation.

    The compensation runs at most once per unwind, when the unwind reaches the
    most recently completed member. Once every member has completed the phase
    is sealed and is no longer compensated.
    """

    name: str
    compensate: Action


@dataclass(frozen=True, eq=False)
class Step:
    """A named forward action with an optional compensation."""

    name: str
    forward: Action
    compensate: Action | None = None
    phase: Phase | None = None

    def __post_init__(self):
        if self.compensate is not None and self.phase is not None:
            raise ValueError(f"Step {self.name!r} cannot have both a compensation and a phase")


@dataclass
class Pipeline:
    """Ordered steps plus the message reported when rollback itself fails."""

    steps: list[Step] = field(default_factory=list)
    rollback_failure_message: str = "Rollback failed; manual inspection is required."

    def __post_init__(self):
        self.logger = logger.bind(component="pipeline")

    async def execute(self) -> None:
        """Run every step, unwinding completed steps on the first failure.

        Raises:
            StepFailedError: A step failed and the unwind completed
            RollbackFailedError: A step failed and a compensation failed too
        """
        completed: list[Step] = []

        for index, step in enumerate(self.steps, start=1):
            self.logger.info("Running step", step=step.name, progress=f"{index}/{len(self.steps)}")
            try:
                await step.forward()
            except Exception as e:
                self.logger.error("Step failed", step=step.name, error=str(e))
                compensated = await self._unwind(step, e, completed)
                raise StepFailedError(step.name, e, compensated) from e

            completed.append(step)

        self.logger.info("Pipeline completed", steps=len(self.steps))

    async def _unwind(
        self, failed: Step, cause: Exception, completed: list[Step]
    ) -> list[str]:
        """Run compensations for completed steps, most recent first."""
        sealed = self._sealed_phases(completed)
        compensated_phases: set[Phase] = set()
        compensated: list[str] = []

        for step in reversed(completed):
            if step.compensate is not None:
                name, action = step.name, step.compensate
            elif (
                step.phase is not None
                and step.phase not in sealed
                and step.phase not in compensated_phases
            ):
                compensated_phases.add(step.phase)
                name, action = step.phase.name, step.phase.compensate
            else:
                continue

            self.logger.info("Compensating", compensation=name, failed_step=failed.name)
            try:
                await action()
            except Exception as rollback_error:
                self.logger.error(
                    "Compensation failed, stopping rollback",
                    compensation=name,
                    error=str(rollback_error),
                )
                raise RollbackFailedError(
                    failed.name, cause, name, rollback_error, self.rollback_failure_message
                ) from rollback_error
            compensated.append(name)

        self.logger.info("Rollback completed", failed_step=failed.name, compensated=compensated)
        return compensated

    def _sealed_phases(self, completed: list[Step]) -> list[Phase]:
        """Phases whose member steps have all completed."""
        phases: list[Phase] = []
        for step in self.steps:
            if step.phase is not None and step.phase not in phases:
                phases.append(step.phase)
        return [
            phase
            for phase in phases
            if all(step in completed for step in self.steps if step.phase is phase)
        ]
