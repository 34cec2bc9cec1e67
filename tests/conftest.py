"""Global test configuration and fixtures."""
import logging
import sys
from pathlib import Path

import pytest

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from chain_indexer.models import (
    AssetBundle,
    ClusterRef,
    ClusterSizing,
    NetworkPlacement,
    NodeSpec,
    StackParams,
)

# Configure logging for tests
logging.basicConfig(level=logging.INFO)

ACCOUNT_ID = "111111111111"
REGION = "us-east-1"
CLUSTER_ARN = (
    "arn:aws:kafka:us-east-1:111111111111:cluster/blockchain/"
    "0c5b7d3e-1f2a-4b6c-8d9e-0a1b2c3d4e5f-3"
)
VPC_CIDR = "10.0.0.0/16"

SCRIPT_TEMPLATE = """set -euo pipefail
KAFKA_CLUSTER_ARN="__KAFKA_CLUSTER_ARN__"
unzip -o /tmp/scripts.zip -d /opt/indexer/scripts
bash /opt/indexer/scripts/start-services.sh
"""


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "scenario: end-to-end composition scenario")


@pytest.fixture
def cluster_ref():
    """A provisioned cluster with a resolved identity."""
    return ClusterRef(
        name="blockchain",
        region=REGION,
        account_id=ACCOUNT_ID,
        identity_arn=CLUSTER_ARN,
    )


@pytest.fixture
def unresolved_cluster_ref():
    """A cluster that has not been provisioned yet."""
    return ClusterRef(name="blockchain", region=REGION, account_id=ACCOUNT_ID)


@pytest.fixture
def asset_bundle():
    """Bundle with the four standard node artifacts."""
    return AssetBundle.from_mapping({
        "monitor_extraction": "s3://indexer-assets/assets/monitor_extraction.zip",
        "last_block": "s3://indexer-assets/assets/last_block.zip",
        "monitor_kafka": "s3://indexer-assets/assets/monitor_kafka.zip",
        "scripts": "s3://indexer-assets/assets/scripts.zip",
    })


@pytest.fixture
def script_template():
    return SCRIPT_TEMPLATE


@pytest.fixture
def placement():
    """Network spanning four availability zones."""
    return NetworkPlacement(
        network_id="vpc-0123456789abcdef0",
        cidr_block=VPC_CIDR,
        availability_zones=("us-east-1a", "us-east-1b", "us-east-1c", "us-east-1d"),
    )


@pytest.fixture
def stack_params(placement, asset_bundle, script_template):
    return StackParams(
        account_id=ACCOUNT_ID,
        region=REGION,
        placement=placement,
        asset_bundle=asset_bundle,
        script_template=script_template,
        sizing=ClusterSizing(),
    )


@pytest.fixture
def node_specs():
    """Mainnet with defaults and a smaller test network."""
    return [
        NodeSpec(network_variant_name="mainnet"),
        NodeSpec(network_variant_name="sepolia", instance_class="i8g.2xlarge", extraction_volume_size_gib=2048),
    ]
