"""Core exceptions for blue/green stack change operations."""


class BgChangeStackError(Exception):
    """Base exception for stack change operations."""


class CFCommandError(BgChangeStackError):
    """cf CLI command execution failed or timed out."""


class RemoteOperationError(BgChangeStackError):
    """The platform rejected an operation."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        description: str | None = None,
        error_code: str | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.description = description
        self.error_code = error_code


class AppNotFoundError(BgChangeStackError):
    """No application with the requested name exists in the targeted space."""

    def __init__(self, app_name: str):
        super().__init__(f"app '{app_name}' not found.")
        self.app_name = app_name


class MalformedResponseError(BgChangeStackError):
    """A platform response did not match the expected schema."""


class ConfigurationError(BgChangeStackError):
    """Configuration validation or loading failed."""


class PreflightError(BgChangeStackError):
    """The application registry is not in a state the migration can start from."""
