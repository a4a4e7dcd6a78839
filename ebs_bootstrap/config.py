"""
Bootstrap configuration.

Options come from the command line first and the environment second. The
result is a single BootstrapConfig, built once before any stage runs; the
stages themselves never look at os.environ.
"""

import argparse
import os
from typing import Callable, List, Mapping, Optional, Tuple

from . import __version__
from .aws.metadata import get_instance_identity
from .errors import ConfigurationError
from .models import (
    DEFAULT_FIND_TIMEOUT,
    DEFAULT_FS_LABEL,
    DEFAULT_FS_OPTIONS,
    DEFAULT_FSTAB_PATH,
    DEFAULT_PARTED_SCRIPT,
    DEFAULT_SFDISK_SCRIPT,
    DEFAULT_TAG_NAME,
    BootstrapConfig,
    DeviceSpec,
    MountSpec,
    VolumeRef,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="attach-ebs",
        description=(
            "Attach an EBS volume to this EC2 instance, create a partition and "
            "filesystem if needed, then mount it and record it in fstab."
        ),
    )
    parser.add_argument("-i", dest="instance_id", metavar="EC2_ID",
                        help="EC2 instance ID (default: detected from instance metadata)")
    parser.add_argument("-r", dest="region", metavar="REGION",
                        help="AWS region (default: detected from instance metadata)")
    parser.add_argument("-V", dest="volume_id", metavar="VOLUME_ID",
                        help="Attach this volume instead of looking one up by tag")
    parser.add_argument("-n", dest="tag_name", metavar="NAME",
                        help=f"Tag name to match (default: '{DEFAULT_TAG_NAME}')")
    parser.add_argument("-t", dest="tag_value", metavar="VALUE",
                        help="Tag value to match")
    parser.add_argument("-T", dest="find_timeout", metavar="TIMEOUT",
                        help=f"Seconds to look for a tagged volume (default: {DEFAULT_FIND_TIMEOUT})")
    parser.add_argument("-d", dest="device", metavar="DEVICE",
                        help="Device to attach and mount the volume from")
    parser.add_argument("-m", dest="mount_dir", metavar="DIRECTORY",
                        help="Directory to mount the volume on")
    parser.add_argument("-u", dest="mount_user", metavar="USER",
                        help="Make USER the owner of the mounted directory")
    parser.add_argument("-F", dest="fs_type", metavar="TYPE",
                        help="Filesystem type to create if none exists")
    parser.add_argument("-O", dest="fs_options", metavar="OPTS",
                        help="Filesystem mount options")
    parser.add_argument("-L", dest="fs_label", metavar="LABEL",
                        help="Filesystem label")
    parser.add_argument("-p", dest="partition", metavar="PART",
                        help="Create a partition named by appending PART to DEVICE")
    parser.add_argument("-S", dest="shutdown", action="store_const", const=True,
                        help="Shut the host down if the volume cannot be attached (default)")
    parser.add_argument("--no-shutdown", dest="shutdown", action="store_const", const=False,
                        help="Exit with an error instead of shutting down")
    parser.add_argument("-v", dest="debug", action="store_true",
                        help="Turn on debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _pick(value: Optional[str], environ: Mapping[str, str], key: str,
          default: Optional[str] = None) -> Optional[str]:
    if value:
        return value
    return environ.get(key) or default


def _parse_timeout(raw: str) -> int:
    try:
        timeout = int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"find timeout must be an integer, got '{raw}'")
    if timeout < 1:
        raise ConfigurationError(f"find timeout must be positive, got {timeout}")
    return timeout


def load_config(
    argv: Optional[List[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    identity_resolver: Callable[..., Tuple[str, str]] = get_instance_identity,
) -> BootstrapConfig:
    """
    Resolve command line options and environment variables into a BootstrapConfig.

    Args:
        argv: Command line arguments (default: sys.argv[1:])
        environ: Environment mapping (default: os.environ)
        identity_resolver: Fills in instance id and region when they are missing

    Returns:
        BootstrapConfig: The validated configuration

    Raises:
        ConfigurationError: If required options are missing or malformed
        MetadataUnavailable: If instance identity has to be looked up and cannot be
    """
    args = build_parser().parse_args(argv)
    env = os.environ if environ is None else environ

    volume = VolumeRef(
        volume_id=_pick(args.volume_id, env, "EBS_VOLUME_ID"),
        tag_name=_pick(args.tag_name, env, "EBS_TAG_NAME", DEFAULT_TAG_NAME),
        tag_value=_pick(args.tag_value, env, "EBS_TAG_VALUE"),
    )

    device_path = _pick(args.device, env, "MOUNT_DEVICE")
    mount_dir = _pick(args.mount_dir, env, "MOUNT_DIR")
    if not device_path or not mount_dir:
        raise ConfigurationError("you must supply both MOUNT_DEVICE and MOUNT_DIR")

    device = DeviceSpec(
        device=device_path,
        partition_suffix=_pick(args.partition, env, "MK_PARTITION"),
        fs_type=_pick(args.fs_type, env, "FS_TYPE"),
        fs_options=_pick(args.fs_options, env, "FS_OPTS", DEFAULT_FS_OPTIONS),
        fs_label=_pick(args.fs_label, env, "FS_LABEL", DEFAULT_FS_LABEL),
        parted_script=env.get("PARTED_SCRIPT") or DEFAULT_PARTED_SCRIPT,
        # Scripts passed through the environment carry literal "\n" sequences
        sfdisk_script=(env.get("SFDISK_SCRIPT") or DEFAULT_SFDISK_SCRIPT).replace("\\n", "\n"),
    )
    mount = MountSpec(
        directory=mount_dir,
        user=_pick(args.mount_user, env, "MOUNT_USER"),
        fstab_path=env.get("FSTAB_PATH") or DEFAULT_FSTAB_PATH,
    )

    find_timeout = _parse_timeout(_pick(args.find_timeout, env, "EBS_FIND_TIMEOUT", str(DEFAULT_FIND_TIMEOUT)))

    if args.shutdown is None:
        shutdown = env.get("SHUTDOWN", "1") == "1"
    else:
        shutdown = args.shutdown

    instance_id, region = identity_resolver(
        instance_id=_pick(args.instance_id, env, "EC2_ID"),
        region=_pick(args.region, env, "AWS_REGION"),
    )

    return BootstrapConfig(
        volume=volume,
        device=device,
        mount=mount,
        instance_id=instance_id,
        region=region,
        find_timeout=find_timeout,
        shutdown_on_failure=shutdown,
        debug=args.debug or env.get("DEBUG") == "1",
    )
