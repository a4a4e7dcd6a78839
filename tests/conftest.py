"""
Shared test fixtures and configuration.
"""

import pytest
import os
import sys
from unittest.mock import patch, MagicMock
from botocore.exceptions import ClientError

# Add the parent directory to the path so we can import the ebs_bootstrap package
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _completed(returncode=0, stdout="", stderr=""):
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


def _volume(volume_id="vol-123", state="available", instance_id=None, device=None, create_time=None,
            attachment_state="attached"):
    volume = {"VolumeId": volume_id, "State": state, "Attachments": []}
    if instance_id:
        volume["Attachments"].append({
            "InstanceId": instance_id,
            "Device": device or "/dev/xvdf",
            "State": attachment_state,
        })
    if create_time:
        volume["CreateTime"] = create_time
    return volume


@pytest.fixture
def completed():
    """Factory for fake subprocess.CompletedProcess results."""
    return _completed


@pytest.fixture
def volume():
    """Factory for describe_volumes entries."""
    return _volume


@pytest.fixture
def client_error():
    """Factory for botocore ClientError instances."""
    def make(code="InternalError", operation="DescribeVolumes"):
        return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)
    return make


@pytest.fixture
def ec2_client():
    """A stand-in boto3 EC2 client."""
    return MagicMock()


@pytest.fixture
def no_sleep():
    """Skip the waits in polling loops."""
    with patch('ebs_bootstrap.utils.retry.time.sleep') as mock_sleep:
        yield mock_sleep
