"""Unit tests for environment-driven configuration."""
import os
from unittest.mock import patch

import pytest

from chain_indexer.config.infrastructure_config import (
    DEFAULT_NETWORKS_FILE,
    DEFAULT_TEMPLATE_PATH,
    load_infrastructure_config,
)
from chain_indexer.errors import ConfigurationError


@pytest.fixture
def empty_dotenv(tmp_path):
    path = tmp_path / ".env"
    path.write_text("")
    return str(path)


def test_defaults(empty_dotenv):
    """Test configuration defaults."""
    with patch.dict(os.environ, {}, clear=True):
        config = load_infrastructure_config(empty_dotenv)

    assert config.environment.account_id is None
    assert config.environment.partition == "aws"
    assert config.cluster.cluster_name == "blockchain"
    assert config.cluster.broker_volume_size_gib == 16384
    assert config.cluster.trusted_principal == "firehose.amazonaws.com"
    assert config.node_defaults.instance_class == "i8g.4xlarge"
    assert config.node_defaults.extraction_volume_size_gib == 10000
    assert config.assets.template_path == DEFAULT_TEMPLATE_PATH
    assert config.networks_file == DEFAULT_NETWORKS_FILE
    assert config.network.availability_zones == []
    assert config.max_workers == 1
    assert config.debug_mode is False


def test_environment_overrides(empty_dotenv):
    """Test environment variable overrides."""
    env = {
        'CDK_DEFAULT_ACCOUNT': '111111111111',
        'AWS_REGION': 'eu-west-1',
        'KAFKA_CLUSTER_NAME': 'stream',
        'KAFKA_BROKER_VOLUME_SIZE': '2048',
        'EXTRACTION_VOLUME_SIZE': '4096',
        'AVAILABILITY_ZONES': 'eu-west-1a, eu-west-1b,eu-west-1c',
        'TRUSTED_DELIVERY_PRINCIPAL': '',
        'ASSET_BUCKET': 'indexer-assets',
        'DEBUG': 'True',
    }
    with patch.dict(os.environ, env, clear=True):
        config = load_infrastructure_config(empty_dotenv)

    assert config.environment.account_id == '111111111111'
    assert config.environment.region == 'eu-west-1'
    assert config.cluster.cluster_name == 'stream'
    assert config.cluster.broker_volume_size_gib == 2048
    assert config.cluster.trusted_principal is None
    assert config.node_defaults.extraction_volume_size_gib == 4096
    assert config.network.availability_zones == ['eu-west-1a', 'eu-west-1b', 'eu-west-1c']
    assert config.assets.bucket == 'indexer-assets'
    assert config.debug_mode is True


def test_dotenv_file_loaded(tmp_path):
    """Test that values are read from a dotenv file."""
    dotenv = tmp_path / ".env"
    dotenv.write_text("AWS_ACCOUNT_ID=222222222222\nNODE_INSTANCE_CLASS=i8g.2xlarge\n")
    with patch.dict(os.environ, {}, clear=True):
        config = load_infrastructure_config(str(dotenv))

    assert config.environment.account_id == '222222222222'
    assert config.node_defaults.instance_class == 'i8g.2xlarge'


def test_invalid_integer(empty_dotenv):
    """Test that a non-integer setting is a configuration error."""
    with patch.dict(os.environ, {'EXTRACTION_VOLUME_SIZE': 'ten'}, clear=True):
        with pytest.raises(ConfigurationError, match="EXTRACTION_VOLUME_SIZE"):
            load_infrastructure_config(empty_dotenv)
