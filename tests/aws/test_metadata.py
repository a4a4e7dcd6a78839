import pytest
import requests
from unittest.mock import patch, MagicMock
from ebs_bootstrap.aws.metadata import (
    get_instance_identity,
    get_metadata,
    get_region,
    region_from_availability_zone,
)
from ebs_bootstrap.errors import MetadataUnavailable


def _response(text, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


def test_region_from_availability_zone():
    assert region_from_availability_zone("us-east-1a") == "us-east-1"
    assert region_from_availability_zone("eu-west-2c") == "eu-west-2"


@patch('ebs_bootstrap.aws.metadata.requests.get')
@patch('ebs_bootstrap.aws.metadata.requests.put')
def test_supplied_identity_skips_metadata(mock_put, mock_get):
    """Nothing is fetched when both values are already known."""
    assert get_instance_identity("i-123", "us-west-2") == ("i-123", "us-west-2")
    mock_put.assert_not_called()
    mock_get.assert_not_called()


@patch('ebs_bootstrap.aws.metadata.requests.get')
@patch('ebs_bootstrap.aws.metadata.requests.put')
def test_identity_from_imdsv2(mock_put, mock_get):
    """Instance id and region are read with an IMDSv2 token."""
    mock_put.return_value = _response("token-abc")

    def side_effect(url, headers=None, timeout=None):
        if url.endswith("instance-id"):
            return _response("i-0feed\n")
        if url.endswith("placement/region"):
            return _response("us-east-1")
        return _response("us-east-1b")

    mock_get.side_effect = side_effect

    assert get_instance_identity() == ("i-0feed", "us-east-1")
    for call in mock_get.call_args_list:
        assert call.kwargs["headers"] == {"X-aws-ec2-metadata-token": "token-abc"}


@patch('ebs_bootstrap.aws.metadata.requests.get')
@patch('ebs_bootstrap.aws.metadata.requests.put')
def test_identity_falls_back_to_imdsv1(mock_put, mock_get):
    """Without a token the lookups go out with no token header."""
    mock_put.side_effect = requests.ConnectionError("refused")
    mock_get.return_value = _response("us-west-2")

    instance_id, region = get_instance_identity(instance_id="i-known")

    assert instance_id == "i-known"
    assert region == "us-west-2"
    mock_get.assert_called_once()
    assert mock_get.call_args.args[0].endswith("placement/region")
    assert mock_get.call_args.kwargs["headers"] == {}


@patch('ebs_bootstrap.aws.metadata.requests.get')
def test_get_metadata_unreachable(mock_get):
    mock_get.side_effect = requests.ConnectTimeout("timed out")

    with pytest.raises(MetadataUnavailable):
        get_metadata("instance-id")


@patch('ebs_bootstrap.aws.metadata.requests.get')
def test_get_metadata_http_error(mock_get):
    mock_get.return_value = _response("Not Found", status_code=404)

    with pytest.raises(MetadataUnavailable):
        get_metadata("instance-id")


@patch('ebs_bootstrap.aws.metadata.requests.get')
def test_region_read_directly_for_local_zone(mock_get):
    """Local Zone instances get their region from placement/region, not the zone name."""
    def side_effect(url, headers=None, timeout=None):
        if url.endswith("placement/region"):
            return _response("us-west-2")
        return _response("us-west-2-lax-1a")

    mock_get.side_effect = side_effect

    assert get_region() == "us-west-2"
    mock_get.assert_called_once()


@patch('ebs_bootstrap.aws.metadata.requests.get')
def test_region_falls_back_to_availability_zone(mock_get):
    def side_effect(url, headers=None, timeout=None):
        if url.endswith("placement/region"):
            return _response("Not Found", status_code=404)
        return _response("eu-central-1c")

    mock_get.side_effect = side_effect

    assert get_region() == "eu-central-1"
    assert mock_get.call_count == 2
