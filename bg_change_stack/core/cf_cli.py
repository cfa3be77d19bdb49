"""Async cf CLI runner with proper process cleanup."""

import asyncio
import os
from typing import Any

import structlog

from .exceptions import CFCommandError

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 600  # push and restage stage the app, which can take minutes
KILL_TIMEOUT = 5  # Time to wait after SIGTERM before SIGKILL


class CommandResult:
    """Result of a cf CLI invocation."""

    def __init__(self, returncode: int, stdout: str, stderr: str, args: list[str]):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.args = args

    @property
    def success(self) -> bool:
        """Check if the command succeeded."""
        return self.returncode == 0

    @property
    def lines(self) -> list[str]:
        """Non-empty stdout lines."""
        return [line for line in self.stdout.splitlines() if line.strip()]

    @property
    def error_message(self) -> str:
        return self.stderr.strip() or self.stdout.strip() or "Command failed"


class CFCli:
    """Runs cf CLI commands against the currently targeted org and space."""

    def __init__(
        self,
        binary: str = "cf",
        *,
        timeout: float | None = None,
        cf_home: str | None = None,
    ):
        self.binary = binary
        self.timeout = timeout or DEFAULT_TIMEOUT
        self.cf_home = cf_home
        self.logger = logger.bind(component="cf_cli")

    def _build_env(self) -> dict[str, str]:
        env = os.environ.copy()
        env["CF_COLOR"] = "false"
        if self.cf_home:
            env["CF_HOME"] = self.cf_home
        return env

    async def run(
        self,
        *args: str,
        check: bool = True,
        timeout: float | None = None,
    ) -> CommandResult:
        """
        Run a cf command and capture its output.

        Args:
            *args: cf subcommand and its arguments
            check: Raise CFCommandError if the command exits non-zero
            timeout: Timeout in seconds (default: the runner's timeout)

        Returns:
            CommandResult with returncode, stdout and stderr

        Raises:
            CFCommandError: If the command cannot start, times out, or fails with check=True
        """
        if timeout is None:
            timeout = self.timeout

        cmd = [self.binary, *args]
        self.logger.debug("Executing cf command", command=" ".join(cmd), timeout=timeout)

        kwargs: dict[str, Any] = {
            "stdout": asyncio.subprocess.PIPE,
            "stderr": asyncio.subprocess.PIPE,
            "env": self._build_env(),
        }

        try:
            process = await asyncio.create_subprocess_exec(*cmd, **kwargs)
        except OSError as e:
            raise CFCommandError(f"Unable to run {self.binary}: {e}") from e

        try:
            try:
                stdout_bytes, stderr_bytes = await asyncio.wait_for(
                    process.communicate(), timeout=timeout
                )
            except asyncio.TimeoutError:
                self.logger.warning(
                    "cf command timed out, terminating process",
                    command=" ".join(cmd),
                    timeout=timeout,
                    pid=process.pid,
                )
                raise CFCommandError(
                    f"Command timed out after {timeout} seconds: {' '.join(cmd)}"
                ) from None
        finally:
            if process.returncode is None:
                await self._terminate(process)

        result = CommandResult(
            returncode=process.returncode or 0,
            stdout=stdout_bytes.decode(errors="replace") if stdout_bytes else "",
            stderr=stderr_bytes.decode(errors="replace") if stderr_bytes else "",
            args=list(args),
        )

        if check and not result.success:
            raise CFCommandError(
                f"cf {args[0]} failed with exit code {result.returncode}: {result.error_message}"
            )

        return result

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """Terminate gracefully, then kill."""
        try:
            process.terminate()
            await asyncio.wait_for(process.wait(), timeout=KILL_TIMEOUT)
        except asyncio.TimeoutError:
            self.logger.warning(
                "Process did not terminate gracefully, sending SIGKILL", pid=process.pid
            )
            process.kill()
            await process.wait()
        except ProcessLookupError:
            # Process already terminated
            pass
