"""
Host-side storage stages: device preparation, filesystem creation and mounting.
"""

from .device import prepare_device, normalize_device_path, is_block_device
from .filesystem import ensure_filesystem, has_filesystem, detect_filesystem
from .mount import mount_device, ensure_directory, is_mounted, add_fstab_entry

__all__ = [
    'prepare_device',
    'normalize_device_path',
    'is_block_device',
    'ensure_filesystem',
    'has_filesystem',
    'detect_filesystem',
    'mount_device',
    'ensure_directory',
    'is_mounted',
    'add_fstab_entry',
]
