"""
Failure Escalator

The one place that decides what an unrecoverable failure does to the host.
"""

import logging
import sys
from typing import NoReturn

from .utils.commands import run_command

logger = logging.getLogger(__name__)

SHUTDOWN_COMMAND = "/sbin/shutdown"
SHUTDOWN_DELAY_MINUTES = 1


def schedule_shutdown(delay_minutes: int = SHUTDOWN_DELAY_MINUTES) -> bool:
    """
    Schedule a host halt, leaving time for logs to flush.

    Returns:
        bool: True if the shutdown was scheduled
    """
    logger.error("Shutting down server in %d minute(s).", delay_minutes)
    try:
        result = run_command([SHUTDOWN_COMMAND, "-h", f"+{delay_minutes}"])
    except OSError as e:
        logger.error("Could not run %s: %s", SHUTDOWN_COMMAND, e)
        return False
    if result.returncode != 0:
        logger.error("%s failed: %s", SHUTDOWN_COMMAND, (result.stderr or "").strip())
        return False
    return True


def escalate(reason: str, shutdown: bool = True,
             delay_minutes: int = SHUTDOWN_DELAY_MINUTES) -> NoReturn:
    """
    Report a fatal failure, optionally schedule a shutdown, and exit non-zero.

    Args:
        reason: Human-readable description of the failure
        shutdown: Whether to schedule a host shutdown first
        delay_minutes: Minutes before the shutdown takes effect
    """
    logger.error("Error: %s", reason)
    if shutdown:
        schedule_shutdown(delay_minutes)
    sys.exit(1)
