"""
Device Preparer

Turns a confirmed attachment into a block device path that is ready for
filesystem operations, creating a partition on fresh volumes if asked to.
"""

import logging
import os
import stat

from ..errors import DeviceNotFound, PartitionCreationFailed
from ..models import DeviceSpec
from ..utils.commands import command_available, run_command
from ..utils.retry import poll_until
from .filesystem import has_filesystem

logger = logging.getLogger(__name__)

DEVICE_PREFIX = "/dev/"
PARTITION_WAIT_ATTEMPTS = 30
PARTITION_WAIT_INTERVAL = 1


def normalize_device_path(device: str) -> str:
    """Prepend /dev/ to bare device names (xvdf -> /dev/xvdf)."""
    if device.startswith(DEVICE_PREFIX):
        return device
    return DEVICE_PREFIX + device.lstrip("/")


def is_block_device(path: str) -> bool:
    try:
        return stat.S_ISBLK(os.stat(path).st_mode)
    except OSError:
        return False


def has_partition_table(device: str) -> bool:
    """blkid exits zero when it finds any signature, partition table included."""
    return run_command(["blkid", device]).returncode == 0


def create_partition(device: str, parted_script: str, sfdisk_script: str) -> None:
    """
    Write a partition table to the device with parted, or sfdisk if parted is missing.

    Raises:
        PartitionCreationFailed: If no tool is available or the tool fails
    """
    if command_available("parted"):
        logger.info("Creating partition on %s with parted", device)
        result = run_command(["parted", "-a", "opt", "--script", device] + parted_script.split())
    elif command_available("sfdisk"):
        logger.info("Creating partition on %s with sfdisk", device)
        result = run_command(["sfdisk", device], input_text=sfdisk_script.rstrip("\n") + "\n")
    else:
        raise PartitionCreationFailed(f"Neither parted nor sfdisk is available to partition {device}")

    if result.returncode != 0:
        raise PartitionCreationFailed(
            f"Failed to partition {device}: {(result.stderr or '').strip()}"
        )


def prepare_device(spec: DeviceSpec, attempts: int = PARTITION_WAIT_ATTEMPTS,
                   interval: float = PARTITION_WAIT_INTERVAL) -> str:
    """
    Return the device path the filesystem stage should work on.

    Args:
        spec: Device settings
        attempts: Checks for the partition device node before falling back
        interval: Seconds between those checks

    Returns:
        str: The partition device if one is in use, otherwise the base device

    Raises:
        DeviceNotFound: If the base device is not a block device
        PartitionCreationFailed: If writing the partition table fails
    """
    device = normalize_device_path(spec.device)
    if not is_block_device(device):
        raise DeviceNotFound(f"Failed to find block device '{device}'")

    if has_filesystem(device, spec.fs_type):
        logger.info("Filesystem already present on %s; not partitioning", device)
        return device

    if not spec.partition_suffix:
        return device

    if has_partition_table(device):
        logger.info("Partition table already present on %s", device)
    else:
        create_partition(device, spec.parted_script, spec.sfdisk_script)

    partition = device + spec.partition_suffix
    result = poll_until(
        lambda: is_block_device(partition),
        bool,
        attempts=attempts,
        interval=interval,
        description=f"partition {partition}",
    )
    if not result:
        logger.warning("Partition %s never appeared; using %s", partition, device)
        return device

    logger.info("Using partition %s", partition)
    return partition
