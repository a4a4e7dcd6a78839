"""
Tests for configuration resolution.
"""

import pytest
from unittest.mock import MagicMock
from ebs_bootstrap.config import load_config
from ebs_bootstrap.errors import ConfigurationError
from ebs_bootstrap.models import DEFAULT_FS_OPTIONS, DEFAULT_PARTED_SCRIPT


@pytest.fixture
def resolver():
    """Identity resolver that echoes what it is given, filling blanks."""
    def resolve(instance_id=None, region=None):
        return instance_id or "i-from-metadata", region or "us-east-1"
    return MagicMock(side_effect=resolve)


def test_defaults(resolver):
    """Only the required options given; everything else takes its default."""
    config = load_config(["-V", "vol-1", "-d", "xvdf", "-m", "/data"], environ={}, identity_resolver=resolver)

    assert config.volume.volume_id == "vol-1"
    assert config.volume.tag_name == "Name"
    assert config.device.device == "xvdf"
    assert config.device.partition_suffix is None
    assert config.device.fs_type is None
    assert config.device.fs_options == DEFAULT_FS_OPTIONS
    assert config.device.fs_label == "data-vol"
    assert config.device.parted_script == DEFAULT_PARTED_SCRIPT
    assert config.mount.directory == "/data"
    assert config.mount.user is None
    assert config.mount.fstab_path == "/etc/fstab"
    assert config.find_timeout == 30
    assert config.shutdown_on_failure is True
    assert config.debug is False
    assert config.instance_id == "i-from-metadata"
    assert config.region == "us-east-1"
    resolver.assert_called_once_with(instance_id=None, region=None)


def test_environment_fallback(resolver):
    """Environment variables fill in options not given on the command line."""
    env = {
        "EBS_TAG_NAME": "Role",
        "EBS_TAG_VALUE": "db",
        "EBS_FIND_TIMEOUT": "10",
        "MOUNT_DEVICE": "/dev/xvdg",
        "MOUNT_DIR": "/srv",
        "MOUNT_USER": "postgres",
        "FS_TYPE": "xfs",
        "FS_LABEL": "pgdata",
        "MK_PARTITION": "1",
        "EC2_ID": "i-env",
        "AWS_REGION": "eu-west-1",
        "SFDISK_SCRIPT": "label: gpt\\n;",
        "FSTAB_PATH": "/tmp/fstab",
        "DEBUG": "1",
    }

    config = load_config([], environ=env, identity_resolver=resolver)

    assert not config.volume.is_resolved
    assert config.volume.tag_name == "Role"
    assert config.volume.tag_value == "db"
    assert config.find_timeout == 10
    assert config.device.device == "/dev/xvdg"
    assert config.device.fs_type == "xfs"
    assert config.device.fs_label == "pgdata"
    assert config.device.partition_suffix == "1"
    assert config.device.sfdisk_script == "label: gpt\n;"
    assert config.mount.user == "postgres"
    assert config.mount.fstab_path == "/tmp/fstab"
    assert config.debug is True
    resolver.assert_called_once_with(instance_id="i-env", region="eu-west-1")


def test_arguments_override_environment(resolver):
    env = {"EBS_VOLUME_ID": "vol-env", "MOUNT_DEVICE": "xvdf", "MOUNT_DIR": "/env"}

    config = load_config(["-V", "vol-arg", "-m", "/arg"], environ=env, identity_resolver=resolver)

    assert config.volume.volume_id == "vol-arg"
    assert config.mount.directory == "/arg"
    assert config.device.device == "xvdf"


def test_requires_volume_id_or_tag(resolver):
    with pytest.raises(ConfigurationError):
        load_config(["-d", "xvdf", "-m", "/data"], environ={}, identity_resolver=resolver)
    resolver.assert_not_called()


@pytest.mark.parametrize("argv", [
    ["-t", "data", "-d", "xvdf"],
    ["-t", "data", "-m", "/data"],
])
def test_requires_device_and_directory(resolver, argv):
    with pytest.raises(ConfigurationError):
        load_config(argv, environ={}, identity_resolver=resolver)


@pytest.mark.parametrize("timeout", ["abc", "0", "-5"])
def test_rejects_bad_find_timeout(resolver, timeout):
    with pytest.raises(ConfigurationError):
        load_config(["-t", "data", "-d", "xvdf", "-m", "/data", "-T", timeout],
                    environ={}, identity_resolver=resolver)


def test_shutdown_flags(resolver):
    """SHUTDOWN=0 disables the shutdown; -S and --no-shutdown win over the environment."""
    base = ["-V", "vol-1", "-d", "xvdf", "-m", "/data"]

    assert load_config(base, environ={"SHUTDOWN": "0"}, identity_resolver=resolver).shutdown_on_failure is False
    assert load_config(base + ["-S"], environ={"SHUTDOWN": "0"}, identity_resolver=resolver).shutdown_on_failure is True
    assert load_config(base + ["--no-shutdown"], environ={}, identity_resolver=resolver).shutdown_on_failure is False


def test_volume_ref_resolution_keeps_tag():
    config = load_config(["-t", "data", "-d", "xvdf", "-m", "/data", "-i", "i-1", "-r", "us-east-2"],
                         environ={}, identity_resolver=lambda instance_id, region: (instance_id, region))

    resolved = config.volume.resolved("vol-found")

    assert resolved.volume_id == "vol-found"
    assert resolved.tag_value == "data"
    assert config.volume.volume_id is None
    assert config.instance_id == "i-1"
    assert config.region == "us-east-2"
