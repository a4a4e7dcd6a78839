"""
Data model for a bootstrap run: which volume, which device, where to mount.
"""

from typing import Optional

from .errors import ConfigurationError

DEFAULT_TAG_NAME = "Name"
DEFAULT_FIND_TIMEOUT = 30
DEFAULT_FS_OPTIONS = "errors=remount-ro,nofail,noatime,nodiratime"
DEFAULT_FS_LABEL = "data-vol"
DEFAULT_PARTED_SCRIPT = "mklabel gpt mkpart primary 0% 100%"
DEFAULT_SFDISK_SCRIPT = "label: gpt\n;"
DEFAULT_FSTAB_PATH = "/etc/fstab"


class VolumeRef:
    """Identifies the target volume, by id or by a tag name/value pair."""

    def __init__(self, volume_id: Optional[str] = None,
                 tag_name: str = DEFAULT_TAG_NAME, tag_value: Optional[str] = None):
        if not volume_id and not tag_value:
            raise ConfigurationError("you must supply either EBS_TAG_VALUE or EBS_VOLUME_ID")
        self._volume_id = volume_id
        self._tag_name = tag_name
        self._tag_value = tag_value

    @property
    def volume_id(self) -> Optional[str]:
        return self._volume_id

    @property
    def tag_name(self) -> str:
        return self._tag_name

    @property
    def tag_value(self) -> Optional[str]:
        return self._tag_value

    @property
    def is_resolved(self) -> bool:
        return bool(self._volume_id)

    def resolved(self, volume_id: str) -> "VolumeRef":
        """Return a copy of this ref carrying a concrete volume id."""
        return VolumeRef(volume_id=volume_id, tag_name=self._tag_name, tag_value=self._tag_value)

    def __str__(self) -> str:
        if self._volume_id:
            return self._volume_id
        return f"tag:{self._tag_name}={self._tag_value}"


class DeviceSpec:
    """Device, partitioning and filesystem settings."""

    def __init__(self, device: str, partition_suffix: Optional[str] = None,
                 fs_type: Optional[str] = None, fs_options: str = DEFAULT_FS_OPTIONS,
                 fs_label: str = DEFAULT_FS_LABEL, parted_script: str = DEFAULT_PARTED_SCRIPT,
                 sfdisk_script: str = DEFAULT_SFDISK_SCRIPT):
        self.device = device
        self.partition_suffix = partition_suffix
        self.fs_type = fs_type
        self.fs_options = fs_options
        self.fs_label = fs_label
        self.parted_script = parted_script
        self.sfdisk_script = sfdisk_script


class MountSpec:
    """Where and how the prepared device ends up mounted."""

    def __init__(self, directory: str, user: Optional[str] = None,
                 fstab_path: str = DEFAULT_FSTAB_PATH):
        self.directory = directory
        self.user = user
        self.fstab_path = fstab_path


class BootstrapConfig:
    """Fully resolved configuration for one bootstrap run."""

    def __init__(self, volume: VolumeRef, device: DeviceSpec, mount: MountSpec,
                 instance_id: str, region: str, find_timeout: int = DEFAULT_FIND_TIMEOUT,
                 shutdown_on_failure: bool = True, debug: bool = False):
        self.volume = volume
        self.device = device
        self.mount = mount
        self.instance_id = instance_id
        self.region = region
        self.find_timeout = find_timeout
        self.shutdown_on_failure = shutdown_on_failure
        self.debug = debug

