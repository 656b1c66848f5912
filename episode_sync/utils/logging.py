"""Logging for the sync: Prefect's run logger inside a run, loguru everywhere else."""
import sys

from loguru import logger as loguru_logger
from prefect import get_run_logger
from prefect.exceptions import MissingContextError

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"


def get_logger():
    """
    Pick where sync progress is reported.

    Inside a sync run the Prefect run logger is used, so messages are attached
    to that run. Plain function calls, as in unit tests, have no run context
    and go to the loguru console instead.
    """
    try:
        return get_run_logger()
    except MissingContextError:
        return loguru_logger


def configure_console(level: str = "INFO") -> None:
    """Send loguru output to stdout at the given level, replacing the default handler."""
    loguru_logger.remove()
    loguru_logger.add(sys.stdout, level=level, format=CONSOLE_FORMAT)
