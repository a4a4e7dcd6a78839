import requests
from typing import Optional, Tuple

from ..errors import MetadataUnavailable

METADATA_URL = "http://169.254.169.254/latest"
TOKEN_TTL_SECONDS = "300"
CONNECT_TIMEOUT = 4


def _get_token() -> Optional[str]:
    """
    Request an IMDSv2 session token.

    Returns:
        Optional[str]: The token, or None if the service only speaks IMDSv1
    """
    try:
        response = requests.put(
            f"{METADATA_URL}/api/token",
            headers={"X-aws-ec2-metadata-token-ttl-seconds": TOKEN_TTL_SECONDS},
            timeout=CONNECT_TIMEOUT,
        )
        return response.text if response.status_code == 200 else None
    except requests.RequestException:
        return None


def get_metadata(path: str, token: Optional[str] = None) -> str:
    """
    Read a single value from the instance metadata service.

    Args:
        path: Path below latest/meta-data/ (e.g. "instance-id")
        token: Optional IMDSv2 token

    Returns:
        str: The value, stripped of surrounding whitespace

    Raises:
        MetadataUnavailable: If the service cannot be reached or returns an error
    """
    headers = {"X-aws-ec2-metadata-token": token} if token else {}
    try:
        response = requests.get(f"{METADATA_URL}/meta-data/{path}", headers=headers, timeout=CONNECT_TIMEOUT)
    except requests.RequestException as e:
        raise MetadataUnavailable(f"Could not reach instance metadata for '{path}': {e}") from e

    if response.status_code != 200 or not response.text.strip():
        raise MetadataUnavailable(f"Instance metadata '{path}' returned HTTP {response.status_code}")
    return response.text.strip()


def region_from_availability_zone(availability_zone: str) -> str:
    """Strip the zone letter from an availability zone (us-east-1a -> us-east-1)."""
    return availability_zone[:-1]


def get_region(token: Optional[str] = None) -> str:
    """
    Read the instance region.

    placement/region is authoritative (Local Zone names such as us-west-2-lax-1a
    do not end in a single zone letter); older metadata services lack it, so
    fall back to trimming the availability zone.
    """
    try:
        return get_metadata("placement/region", token)
    except MetadataUnavailable:
        return region_from_availability_zone(get_metadata("placement/availability-zone", token))


def get_instance_identity(instance_id: Optional[str] = None, region: Optional[str] = None) -> Tuple[str, str]:
    """
    Fill in whichever of instance id and region was not supplied.

    Args:
        instance_id: Known instance id, or None to look it up
        region: Known region, or None to look it up

    Returns:
        Tuple of (instance_id, region)
    """
    if instance_id and region:
        return instance_id, region

    token = _get_token()
    if not instance_id:
        instance_id = get_metadata("instance-id", token)
    if not region:
        region = get_region(token)
    return instance_id, region
