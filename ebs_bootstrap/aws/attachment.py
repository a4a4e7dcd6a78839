"""
Attachment Coordinator

Drives a volume through its attachment lifecycle: wait for it to become
attachable, issue the attach call when needed, and block until the control
plane confirms the attachment to this instance.
"""

import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from ..errors import AttachCallFailed, AttachConfirmationFailed, AttachTimeout
from ..utils.retry import poll_until

logger = logging.getLogger(__name__)

STATE_POLL_ATTEMPTS = 30
STATE_POLL_INTERVAL = 30


class VolumeState:
    """Volume states reported by the control plane."""
    ABSENT = "absent"
    CREATING = "creating"
    AVAILABLE = "available"
    ATTACHING = "attaching"
    IN_USE = "in-use"
    ATTACHED = "attached"
    DETACHING = "detaching"
    ERROR = "error"
    UNKNOWN = "unknown"

    ATTACHED_STATES = (IN_USE, ATTACHED)
    # Attachment states that still bind the volume to its instance
    CURRENT_ATTACHMENT_STATES = (ATTACHING, ATTACHED)


class VolumeStatus:
    """A single observation of a volume."""

    def __init__(self, state: str, instance_id: Optional[str] = None, device: Optional[str] = None,
                 attachment_state: Optional[str] = None):
        self.state = state
        self.instance_id = instance_id
        self.device = device
        self.attachment_state = attachment_state

    def is_attached_to(self, instance_id: str) -> bool:
        return (self.state in VolumeState.ATTACHED_STATES
                and self.attachment_state in VolumeState.CURRENT_ATTACHMENT_STATES
                and self.instance_id == instance_id)

    def __repr__(self) -> str:
        if self.instance_id:
            return f"{self.state} ({self.instance_id} at {self.device}, {self.attachment_state})"
        return self.state


class AttachmentOutcome:
    """Confirmed result of the attachment stage."""

    def __init__(self, volume_id: str, device: str, attach_issued: bool):
        self.volume_id = volume_id
        self.device = device
        self.attach_issued = attach_issued


def get_volume_status(ec2_client: Any, volume_id: str) -> VolumeStatus:
    """
    Query the current state of a volume.

    Never raises for query failures: a missing volume reads as "absent" and
    any other error as "unknown", so the caller simply polls again.
    """
    try:
        response = ec2_client.describe_volumes(VolumeIds=[volume_id])
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "")
        if code == "InvalidVolume.NotFound":
            return VolumeStatus(VolumeState.ABSENT)
        logger.warning("Could not query volume %s: %s", volume_id, e)
        return VolumeStatus(VolumeState.UNKNOWN)
    except BotoCoreError as e:
        logger.warning("Could not query volume %s: %s", volume_id, e)
        return VolumeStatus(VolumeState.UNKNOWN)

    volumes = response.get("Volumes", [])
    if not volumes:
        return VolumeStatus(VolumeState.ABSENT)

    volume = volumes[0]
    attachments = [a for a in volume.get("Attachments", []) if a.get("State") != "detached"]
    if attachments:
        return VolumeStatus(
            volume.get("State", VolumeState.UNKNOWN),
            instance_id=attachments[0].get("InstanceId"),
            device=attachments[0].get("Device"),
            attachment_state=attachments[0].get("State"),
        )
    return VolumeStatus(volume.get("State", VolumeState.UNKNOWN))


def wait_until_attachable(ec2_client: Any, volume_id: str, instance_id: str,
                          attempts: int = STATE_POLL_ATTEMPTS,
                          interval: float = STATE_POLL_INTERVAL) -> VolumeStatus:
    """
    Poll the volume until it is available, or already attached to this instance.

    Raises:
        AttachTimeout: If neither happens within the attempt budget
    """
    def ready(status: VolumeStatus) -> bool:
        if status.state == VolumeState.AVAILABLE or status.is_attached_to(instance_id):
            return True
        logger.info("Volume %s is in state '%r'; waiting for it to become available ...", volume_id, status)
        return False

    result = poll_until(
        lambda: get_volume_status(ec2_client, volume_id),
        ready,
        attempts=attempts,
        interval=interval,
        description=f"volume {volume_id} state",
    )
    if not result:
        raise AttachTimeout(
            f"Volume ID '{volume_id}' never became available (last state '{result.value!r}')"
        )
    return result.value


def attach_volume(ec2_client: Any, volume_id: str, instance_id: str, device: str,
                  attempts: int = STATE_POLL_ATTEMPTS,
                  interval: float = STATE_POLL_INTERVAL) -> AttachmentOutcome:
    """
    Attach a volume to an instance and wait for the attachment to be confirmed.

    Args:
        ec2_client: boto3 EC2 client
        volume_id: Resolved volume id
        instance_id: Instance to attach to (normally the current one)
        device: Device name requested for the attachment
        attempts: State polls before giving up
        interval: Seconds between state polls

    Returns:
        AttachmentOutcome: The confirmed attachment

    Raises:
        AttachTimeout: The volume never became attachable
        AttachCallFailed: The attach call was rejected
        AttachConfirmationFailed: The attachment was never confirmed
    """
    status = wait_until_attachable(ec2_client, volume_id, instance_id, attempts, interval)

    attach_issued = False
    if status.is_attached_to(instance_id):
        logger.info("Volume %s is already attached to %s; skipping attach", volume_id, instance_id)
    else:
        logger.info("Attaching volume %s to %s at %s", volume_id, instance_id, device)
        try:
            ec2_client.attach_volume(VolumeId=volume_id, InstanceId=instance_id, Device=device)
        except (ClientError, BotoCoreError) as e:
            raise AttachCallFailed(f"Failed to attach volume {volume_id} to {instance_id}: {e}") from e
        attach_issued = True

    logger.info("Waiting for volume %s to be in use by %s", volume_id, instance_id)
    try:
        ec2_client.get_waiter("volume_in_use").wait(
            VolumeIds=[volume_id],
            Filters=[
                {"Name": "attachment.instance-id", "Values": [instance_id]},
                {"Name": "attachment.status", "Values": ["attached"]},
                {"Name": "attachment.device", "Values": [device]},
            ],
        )
    except (WaiterError, ClientError, BotoCoreError) as e:
        raise AttachConfirmationFailed(
            f"Volume {volume_id} was not confirmed attached to {instance_id} at {device}: {e}"
        ) from e

    logger.info("Volume %s attached to %s at %s", volume_id, instance_id, device)
    return AttachmentOutcome(volume_id, device, attach_issued)
