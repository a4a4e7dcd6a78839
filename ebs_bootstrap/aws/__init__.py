"""
EC2 control plane interactions: volume lookup, attachment and instance metadata.
"""

from .locator import locate_volume, find_volume_by_tag
from .attachment import (
    attach_volume,
    get_volume_status,
    wait_until_attachable,
    AttachmentOutcome,
    VolumeState,
    VolumeStatus,
)
from .metadata import get_instance_identity, get_metadata

__all__ = [
    'locate_volume',
    'find_volume_by_tag',
    'attach_volume',
    'get_volume_status',
    'wait_until_attachable',
    'AttachmentOutcome',
    'VolumeState',
    'VolumeStatus',
    'get_instance_identity',
    'get_metadata',
]
