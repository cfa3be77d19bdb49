"""Command line entry point for the blue/green stack change."""

import argparse
import asyncio
import sys

from pydantic import ValidationError

from bg_change_stack.constants import (
    COMMAND_NAME,
    RETIRE_STEP_NAME,
    SUCCESS_MESSAGE,
    UNINSTALL_COMMAND,
    venerable_app_name,
)
from bg_change_stack.core.cf_cli import CFCli
from bg_change_stack.core.exceptions import BgChangeStackError
from bg_change_stack.core.logging_config import get_logger, setup_logging
from bg_change_stack.core.pipeline import RollbackFailedError, StepFailedError
from bg_change_stack.core.settings import StackChangeSettings
from bg_change_stack.models.app import StackChangeRequest
from bg_change_stack.services import CloudFoundryOperations, StackChangeService


def positive_float(value: str) -> float:
    """argparse type for a number of seconds greater than zero."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    from dotenv import load_dotenv

    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="cf-bg-change-stack",
        description="Perform a zero-downtime stack change of an application",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    change = subparsers.add_parser(
        COMMAND_NAME,
        help="Perform a zero-downtime stack change of an application over the top of an old one",
        usage=f"cf-bg-change-stack {COMMAND_NAME} <app name> <new stack name>",
    )
    change.add_argument("app_name", help="Application to migrate")
    change.add_argument("stack_name", help="Target stack, e.g. cflinuxfs4")
    change.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: LOG_LEVEL or INFO)",
    )
    change.add_argument(
        "--job-timeout",
        type=positive_float,
        default=None,
        help="Seconds to wait for the bits copy job (default: JOB_POLL_MAX_WAIT)",
    )
    change.add_argument(
        "--skip-preflight",
        action="store_true",
        help="Do not check the application registry before starting",
    )

    return parser.parse_args(argv)


def run(args: argparse.Namespace, settings: StackChangeSettings | None = None) -> int:
    """Run the stack change and report the outcome; returns the exit status."""
    try:
        settings = settings or StackChangeSettings()
    except ValidationError as e:
        print(f"error: invalid configuration: {e}")
        return 1
    if args.job_timeout is not None:
        settings = settings.model_copy(update={"job_poll_max_wait": args.job_timeout})

    setup_logging(log_dir=settings.log_dir, log_level=args.log_level or settings.log_level)
    logger = get_logger()

    operations = CloudFoundryOperations(
        CFCli(settings.cf_binary, timeout=settings.cf_command_timeout, cf_home=settings.cf_home)
    )
    service = StackChangeService(operations, settings=settings)

    try:
        request = StackChangeRequest(application_name=args.app_name, target_stack=args.stack_name)
        asyncio.run(service.change_stack(request, skip_preflight=args.skip_preflight))
    except RollbackFailedError as e:
        logger.error("Stack change and rollback failed", step=e.step, rollback_step=e.rollback_step)
        print(f"error: {e.rollback_message}")
        print(f"  {e.step} failed: {e.cause}")
        print(f"  rollback ({e.rollback_step}) failed: {e.rollback_error}")
        print("The application could not be restored automatically; inspect it before re-running.")
        return 1
    except StepFailedError as e:
        logger.error("Stack change failed", step=e.step, compensated=e.compensated)
        print(f"error: {e.step} failed: {e}")
        if e.compensated:
            print("Rollback succeeded: the application is back in its previous state.")
            print("It is safe to re-run the stack change.")
        elif e.step == RETIRE_STEP_NAME:
            venerable = venerable_app_name(args.app_name)
            print(f"The stack change completed, but {venerable!r} could not be deleted.")
            print(f"Delete it by hand with 'cf delete {venerable} -f' before running again.")
        else:
            print(f"No rollback was required after {e.step}.")
        return 1
    except (BgChangeStackError, ValidationError) as e:
        logger.error("Stack change not started", error=str(e))
        print(f"error: {e}")
        return 1

    print()
    print(SUCCESS_MESSAGE)
    print()
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0] == UNINSTALL_COMMAND:
        sys.exit(0)

    args = parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
