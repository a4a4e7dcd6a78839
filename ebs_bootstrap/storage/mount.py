"""
Mount Manager

Mounts the prepared device, records it in the mount table and hands the
mount point to its owner.
"""

import logging
import os
import shutil
from typing import Optional

from ..errors import MountFailed, OwnershipFailed
from ..models import MountSpec
from ..utils.commands import run_command

logger = logging.getLogger(__name__)

PROC_MOUNTS = "/proc/self/mounts"


def ensure_directory(directory: str) -> None:
    if not os.path.isdir(directory):
        logger.info("Creating mount directory %s", directory)
    os.makedirs(directory, exist_ok=True)


def _unescape(field: str) -> str:
    # /proc/mounts and fstab escape whitespace as octal
    return field.replace("\\040", " ").replace("\\011", "\t")


def is_mounted(directory: str, mounts_path: str = PROC_MOUNTS) -> bool:
    """Check whether something is already mounted on the directory."""
    target = os.path.realpath(directory)
    try:
        with open(mounts_path, "r") as f:
            for line in f:
                fields = line.split()
                if len(fields) >= 2 and os.path.realpath(_unescape(fields[1])) == target:
                    return True
    except IOError:
        return False
    return False


def has_fstab_entry(directory: str, fstab_path: str) -> bool:
    """Check whether a non-comment mount table entry already uses directory as its mount point."""
    if not os.path.exists(fstab_path):
        return False

    target = directory.rstrip("/") or "/"
    with open(fstab_path, "r") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            fields = line.split()
            if len(fields) >= 2 and (_unescape(fields[1]).rstrip("/") or "/") == target:
                return True
    return False


def add_fstab_entry(device: str, directory: str, fs_type: Optional[str],
                    options: str, fstab_path: str) -> bool:
    """
    Append a mount table entry unless one for the directory already exists.

    Returns:
        bool: True if an entry was written
    """
    if has_fstab_entry(directory, fstab_path):
        logger.info("%s already has an entry for %s", fstab_path, directory)
        return False

    entry = f"{device}  {directory}  {fs_type or 'auto'}  {options}  1  2\n"
    with open(fstab_path, "a") as f:
        f.write(entry)
    logger.info("Added %s entry: %s", fstab_path, entry.strip())
    return True


def set_owner(directory: str, owner: str) -> None:
    """
    Change ownership to 'user' or 'user:group'.

    Raises:
        OwnershipFailed: If the user or group is unknown or chown is refused
    """
    user, _, group = owner.partition(":")
    logger.info("Setting owner of %s to %s", directory, owner)
    try:
        shutil.chown(directory, user=user or None, group=group or None)
    except (LookupError, ValueError, OSError) as e:
        raise OwnershipFailed(f"Failed to set owner of {directory} to '{owner}': {e}") from e


def mount_device(device: str, spec: MountSpec, fs_type: Optional[str], options: str,
                 mounts_path: str = PROC_MOUNTS) -> None:
    """
    Mount the device on spec.directory and persist the mapping.

    Args:
        device: Prepared device path
        spec: Mount target settings
        fs_type: Filesystem type, or None to let mount detect it
        options: Mount options
        mounts_path: Table of active mounts

    Raises:
        MountFailed: If the mount command fails
        OwnershipFailed: If the configured owner cannot be applied
    """
    ensure_directory(spec.directory)

    if is_mounted(spec.directory, mounts_path):
        logger.info("%s is already mounted", spec.directory)
    else:
        cmd = ["mount"]
        if fs_type:
            cmd += ["-t", fs_type]
        cmd += ["-o", options, device, spec.directory]

        logger.info("Mounting %s on %s", device, spec.directory)
        result = run_command(cmd)
        if result.returncode != 0:
            raise MountFailed(
                f"Failed to mount {device} on {spec.directory}: {(result.stderr or '').strip()}"
            )

    add_fstab_entry(device, spec.directory, fs_type, options, spec.fstab_path)

    if spec.user:
        set_owner(spec.directory, spec.user)
