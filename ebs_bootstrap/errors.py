"""
Error types raised by the bootstrap pipeline.

Every stage raises a subclass of BootstrapError on unrecoverable failure.
Only the top-level entry point decides what to do with them.
"""

__all__ = [
    'BootstrapError',
    'ConfigurationError',
    'MetadataUnavailable',
    'VolumeNotFound',
    'AttachTimeout',
    'AttachCallFailed',
    'AttachConfirmationFailed',
    'DeviceNotFound',
    'PartitionCreationFailed',
    'FormatFailed',
    'MountFailed',
    'OwnershipFailed',
]


class ConfigurationError(ValueError):
    """Raised when the supplied options cannot form a valid configuration."""


class BootstrapError(Exception):
    """Base class for fatal provisioning failures."""


class MetadataUnavailable(BootstrapError):
    """The instance metadata service could not be reached."""


class VolumeNotFound(BootstrapError):
    """No volume matched the tag filter before the find timeout."""


class AttachTimeout(BootstrapError):
    """The volume never became available for attachment."""


class AttachCallFailed(BootstrapError):
    """The attach-volume API call was rejected."""


class AttachConfirmationFailed(BootstrapError):
    """The control plane never confirmed the attachment."""


class DeviceNotFound(BootstrapError):
    """No block device exists at the expected path after attachment."""


class PartitionCreationFailed(BootstrapError):
    pass


class FormatFailed(BootstrapError):
    pass


class MountFailed(BootstrapError):
    pass


class OwnershipFailed(BootstrapError):
    """The mount point could not be handed to the configured owner."""
