"""Unit tests for account and region resolution."""
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import NoCredentialsError

from chain_indexer.config.environment import default_zones, resolve_environment
from chain_indexer.config.infrastructure_config import EnvironmentConfig
from chain_indexer.errors import ConfigurationError


def test_configured_values_used_without_credentials():
    """Test that configured values skip the credential lookup."""
    config = EnvironmentConfig(account_id="111111111111", region="us-east-1", partition="aws")
    with patch("chain_indexer.config.environment.boto3") as mock_boto3:
        assert resolve_environment(config) == ("111111111111", "us-east-1")
        mock_boto3.client.assert_not_called()


def test_account_from_caller_identity():
    """Test account lookup through the caller identity."""
    config = EnvironmentConfig(account_id=None, region="us-east-1", partition="aws")
    sts = MagicMock()
    sts.get_caller_identity.return_value = {"Account": "333333333333"}
    with patch("chain_indexer.config.environment.boto3") as mock_boto3:
        mock_boto3.client.return_value = sts
        assert resolve_environment(config) == ("333333333333", "us-east-1")
        mock_boto3.client.assert_called_once_with("sts", region_name="us-east-1")


def test_region_from_session():
    """Test region lookup from the session."""
    config = EnvironmentConfig(account_id="111111111111", region=None, partition="aws")
    with patch("chain_indexer.config.environment.boto3") as mock_boto3:
        mock_boto3.session.Session.return_value.region_name = "eu-central-1"
        assert resolve_environment(config) == ("111111111111", "eu-central-1")


def test_missing_region():
    """Test that a missing region is a configuration error."""
    config = EnvironmentConfig(account_id="111111111111", region=None, partition="aws")
    with patch("chain_indexer.config.environment.boto3") as mock_boto3:
        mock_boto3.session.Session.return_value.region_name = None
        with pytest.raises(ConfigurationError):
            resolve_environment(config)


def test_no_credentials():
    """Test that missing credentials are a configuration error."""
    config = EnvironmentConfig(account_id=None, region="us-east-1", partition="aws")
    with patch("chain_indexer.config.environment.boto3") as mock_boto3:
        mock_boto3.client.return_value.get_caller_identity.side_effect = NoCredentialsError()
        with pytest.raises(ConfigurationError):
            resolve_environment(config)


def test_default_zones():
    """Test the default zone names for a region."""
    assert default_zones("us-east-1") == ["us-east-1a", "us-east-1b", "us-east-1c"]
