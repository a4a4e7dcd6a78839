import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..models import VolumeRef
from ..errors import VolumeNotFound
from ..utils.retry import poll_until

logger = logging.getLogger(__name__)

FIND_INTERVAL = 1


def find_volume_by_tag(ec2_client: Any, tag_name: str, tag_value: str) -> Optional[str]:
    """
    Run a single tag lookup for a volume.

    When several volumes carry the tag, the oldest one (by CreateTime, then
    VolumeId) wins so repeated runs always pick the same volume.

    Args:
        ec2_client: boto3 EC2 client
        tag_name: Tag key to filter on
        tag_value: Tag value to filter on

    Returns:
        Optional[str]: The volume id, or None if nothing matched or the query failed
    """
    try:
        response = ec2_client.describe_volumes(
            Filters=[{"Name": f"tag:{tag_name}", "Values": [tag_value]}]
        )
    except (ClientError, BotoCoreError) as e:
        logger.warning("Volume lookup for tag %s=%s failed: %s", tag_name, tag_value, e)
        return None

    volumes = response.get("Volumes", [])
    if not volumes:
        return None

    volumes = sorted(volumes, key=lambda v: (str(v.get("CreateTime", "")), v["VolumeId"]))
    if len(volumes) > 1:
        logger.warning(
            "Tag %s=%s matches %d volumes (%s); using the oldest, %s",
            tag_name, tag_value, len(volumes),
            ", ".join(v["VolumeId"] for v in volumes), volumes[0]["VolumeId"],
        )
    return volumes[0]["VolumeId"]


def locate_volume(ec2_client: Any, volume: VolumeRef, find_timeout: int = 30) -> VolumeRef:
    """
    Resolve a VolumeRef to a concrete volume id.

    Args:
        ec2_client: boto3 EC2 client
        volume: The reference to resolve
        find_timeout: Number of one-second lookup attempts for tag lookups

    Returns:
        VolumeRef: A resolved reference

    Raises:
        VolumeNotFound: If no volume matched within find_timeout attempts
    """
    if volume.is_resolved:
        return volume

    logger.info("Looking for volume with tag %s=%s", volume.tag_name, volume.tag_value)
    result = poll_until(
        lambda: find_volume_by_tag(ec2_client, volume.tag_name, volume.tag_value),
        lambda volume_id: volume_id is not None,
        attempts=find_timeout,
        interval=FIND_INTERVAL,
        description="volume lookup",
    )
    if not result:
        raise VolumeNotFound(
            f"Failed to find EBS volume by tag '{volume.tag_name}:{volume.tag_value}' "
            f"in {find_timeout} seconds"
        )

    logger.info("Found volume %s", result.value)
    return volume.resolved(result.value)
