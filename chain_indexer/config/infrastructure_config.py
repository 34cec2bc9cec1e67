"""Infrastructure configuration management."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from chain_indexer.errors import ConfigurationError
from chain_indexer.models import (
    DEFAULT_EXTRACTION_VOLUME_GIB,
    DEFAULT_INSTANCE_CLASS,
    ClusterSizing,
)

PACKAGE_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_TEMPLATE_PATH = PACKAGE_ROOT / "templates" / "ingestion-node-userdata.sh"
DEFAULT_NETWORKS_FILE = PACKAGE_ROOT / "templates" / "networks.yaml"


@dataclass
class EnvironmentConfig:
    account_id: Optional[str]
    region: Optional[str]
    partition: str


@dataclass
class NetworkConfig:
    network_id: str
    cidr_block: str
    availability_zones: list


@dataclass
class NodeDefaults:
    instance_class: str
    extraction_volume_size_gib: int


@dataclass
class AssetConfig:
    bucket: Optional[str]
    prefix: str
    template_path: Path


@dataclass
class InfrastructureConfig:
    environment: EnvironmentConfig
    network: NetworkConfig
    cluster: ClusterSizing
    node_defaults: NodeDefaults
    assets: AssetConfig
    networks_file: Path
    max_workers: int
    debug_mode: bool


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _list_env(name: str) -> list:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_infrastructure_config(dotenv_path: Optional[str] = None) -> InfrastructureConfig:
    """Load infrastructure configuration from environment variables.

    Values from a ``.env`` file are loaded first without overriding
    variables already set in the environment.
    """
    load_dotenv(dotenv_path=dotenv_path)

    environment = EnvironmentConfig(
        account_id=os.getenv('CDK_DEFAULT_ACCOUNT') or os.getenv('AWS_ACCOUNT_ID'),
        region=os.getenv('CDK_DEFAULT_REGION') or os.getenv('AWS_REGION'),
        partition=os.getenv('AWS_PARTITION', 'aws'),
    )

    network = NetworkConfig(
        network_id=os.getenv('NETWORK_ID', 'default'),
        cidr_block=os.getenv('NETWORK_CIDR', '172.31.0.0/16'),
        availability_zones=_list_env('AVAILABILITY_ZONES'),
    )

    trusted_principal = os.getenv('TRUSTED_DELIVERY_PRINCIPAL', 'firehose.amazonaws.com')
    cluster = ClusterSizing(
        cluster_name=os.getenv('KAFKA_CLUSTER_NAME', 'blockchain'),
        kafka_version=os.getenv('KAFKA_VERSION', '3.9.x.kraft'),
        broker_instance_type=os.getenv('KAFKA_BROKER_INSTANCE_TYPE', 'kafka.m7g.xlarge'),
        broker_volume_size_gib=_int_env('KAFKA_BROKER_VOLUME_SIZE', 16384),
        # An empty value disables the delivery principal's cluster access
        trusted_principal=trusted_principal or None,
    )

    node_defaults = NodeDefaults(
        instance_class=os.getenv('NODE_INSTANCE_CLASS', DEFAULT_INSTANCE_CLASS),
        extraction_volume_size_gib=_int_env('EXTRACTION_VOLUME_SIZE', DEFAULT_EXTRACTION_VOLUME_GIB),
    )

    assets = AssetConfig(
        bucket=os.getenv('ASSET_BUCKET'),
        prefix=os.getenv('ASSET_PREFIX', 'assets'),
        template_path=Path(os.getenv('USERDATA_TEMPLATE', str(DEFAULT_TEMPLATE_PATH))),
    )

    return InfrastructureConfig(
        environment=environment,
        network=network,
        cluster=cluster,
        node_defaults=node_defaults,
        assets=assets,
        networks_file=Path(os.getenv('NETWORK_VARIANTS_FILE', str(DEFAULT_NETWORKS_FILE))),
        max_workers=_int_env('MAX_WORKERS', 1),
        debug_mode=os.getenv('DEBUG', 'false').lower() == 'true',
    )
