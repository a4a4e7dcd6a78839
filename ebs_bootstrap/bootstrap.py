"""
The bootstrap pipeline.

Locate -> attach -> prepare device -> provision filesystem -> mount. Each
stage raises a BootstrapError subclass on failure; nothing here decides
whether the host shuts down.
"""

import logging
from typing import Any

from .aws.attachment import attach_volume
from .aws.locator import locate_volume
from .models import BootstrapConfig
from .storage.device import prepare_device
from .storage.filesystem import ensure_filesystem
from .storage.mount import ensure_directory, mount_device

logger = logging.getLogger(__name__)


class BootstrapResult:
    """What a successful run ended up with."""

    def __init__(self, volume_id: str, device: str, directory: str,
                 attach_issued: bool, formatted: bool):
        self.volume_id = volume_id
        self.device = device
        self.directory = directory
        self.attach_issued = attach_issued
        self.formatted = formatted

    def __str__(self) -> str:
        return f"{self.volume_id} on {self.device} mounted at {self.directory}"


def run_bootstrap(config: BootstrapConfig, ec2_client: Any) -> BootstrapResult:
    """
    Run every stage in order.

    Args:
        config: Resolved configuration
        ec2_client: boto3 EC2 client for config.region

    Returns:
        BootstrapResult: Details of the mounted volume

    Raises:
        BootstrapError: From whichever stage failed
    """
    volume = locate_volume(ec2_client, config.volume, config.find_timeout)

    outcome = attach_volume(ec2_client, volume.volume_id, config.instance_id, config.device.device)

    device_spec = config.device
    device = prepare_device(device_spec)

    # The trial mount in the filesystem stage needs the mount point to exist
    ensure_directory(config.mount.directory)

    formatted = ensure_filesystem(
        device,
        config.mount.directory,
        device_spec.fs_type,
        device_spec.fs_options,
        device_spec.fs_label,
    )

    mount_device(device, config.mount, device_spec.fs_type, device_spec.fs_options)

    result = BootstrapResult(outcome.volume_id, device, config.mount.directory,
                             outcome.attach_issued, formatted)
    logger.info("Done: %s", result)
    return result
