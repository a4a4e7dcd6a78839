"""
Thin wrapper around subprocess for the host tools the pipeline shells out to.
"""

import logging
import shutil
import subprocess
from typing import List, Optional

logger = logging.getLogger(__name__)


def run_command(cmd: List[str], input_text: Optional[str] = None) -> subprocess.CompletedProcess:
    """
    Run a host command and capture its output.

    The return code is not checked here; callers decide what failure means.

    Args:
        cmd: Command and arguments
        input_text: Optional text to feed on stdin

    Returns:
        subprocess.CompletedProcess: The finished process
    """
    logger.debug("Running: %s", " ".join(cmd))
    result = subprocess.run(cmd, input=input_text, capture_output=True, text=True)

    if result.returncode != 0:
        logger.debug("Command %s exited %d: %s", cmd[0], result.returncode, (result.stderr or "").strip())

    return result


def command_available(name: str) -> bool:
    """Check whether an executable is on PATH."""
    return shutil.which(name) is not None
