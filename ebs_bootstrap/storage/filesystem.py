"""
Filesystem Provisioner

Detects a filesystem on the active device and creates one only when detection
and a trial mount both fail.
"""

import logging
from typing import Optional

from ..errors import FormatFailed
from ..utils.commands import run_command

logger = logging.getLogger(__name__)


def detect_filesystem(device: str) -> Optional[str]:
    """
    Read the filesystem type recorded on a device.

    Returns:
        Optional[str]: The lower-cased type reported by blkid, or None
    """
    result = run_command(["blkid", "-o", "value", "-s", "TYPE", device])
    fs_type = (result.stdout or "").strip().lower() if result.returncode == 0 else ""
    return fs_type or None


def has_filesystem(device: str, fs_type: Optional[str]) -> bool:
    """
    Check whether a device already carries the configured filesystem.

    With no type configured the caller wants an auto-typed mount, so the
    device always counts as having a filesystem.
    """
    if not fs_type:
        return True
    return detect_filesystem(device) == fs_type.lower()


def trial_mount(device: str, directory: str, fs_type: str, options: str) -> bool:
    """Try to mount the device; returns True if it is now mounted."""
    result = run_command(["mount", "-t", fs_type, "-o", options, device, directory])
    return result.returncode == 0


def make_filesystem(device: str, fs_type: str, label: str) -> None:
    """
    Format a device. Destructive.

    Raises:
        FormatFailed: If mkfs exits non-zero or is not installed
    """
    logger.info("Creating %s filesystem labelled '%s' on %s", fs_type, label, device)
    try:
        result = run_command([f"mkfs.{fs_type}", "-L", label, device])
    except OSError as e:
        raise FormatFailed(f"Could not run mkfs.{fs_type}: {e}") from e
    if result.returncode != 0:
        raise FormatFailed(
            f"mkfs.{fs_type} failed on {device}: {(result.stderr or '').strip()}"
        )


def ensure_filesystem(device: str, directory: str, fs_type: Optional[str],
                      options: str, label: str) -> bool:
    """
    Make sure the device carries a filesystem of the configured type.

    Args:
        device: Active device path
        directory: Mount point, used for the trial mount
        fs_type: Configured filesystem type, or None for an auto-typed mount
        options: Mount options for the trial mount
        label: Label for a newly created filesystem

    Returns:
        bool: True if a new filesystem was created

    Raises:
        FormatFailed: If the device had to be formatted and formatting failed
    """
    if has_filesystem(device, fs_type):
        logger.info("Found existing filesystem on %s", device)
        return False

    # blkid can miss a filesystem that mount will still accept
    if trial_mount(device, directory, fs_type, options):
        logger.info("No %s filesystem detected on %s, but it mounted; not formatting", fs_type, device)
        return False

    make_filesystem(device, fs_type, label)
    return True
