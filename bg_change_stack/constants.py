"""Constants shared across the stack change tool."""

COMMAND_NAME = "bg-change-stack"
UNINSTALL_COMMAND = "CLI-MESSAGE-UNINSTALL"

# Suffix reserved for the pre-migration copy of an application
VENERABLE_SUFFIX = "-venerable"

MANIFEST_FILE_NAME = "manifest.yml"
PLACEHOLDER_FILE_NAME = "nofile"
SCRATCH_DIR_PREFIX = "bg-change-stack"

ROLLBACK_FAILURE_MESSAGE = (
    "Oh no. Something's gone wrong. I've tried to roll back but you should check "
    "to see if everything is OK."
)
SUCCESS_MESSAGE = "application stack has been changed with no downtime !"

# Last step; the stack change is complete once the phase before it is sealed
RETIRE_STEP_NAME = "retire old application"


def venerable_app_name(app_name: str) -> str:
    """Name under which the pre-migration application is kept during a migration."""
    return f"{app_name}{VENERABLE_SUFFIX}"
