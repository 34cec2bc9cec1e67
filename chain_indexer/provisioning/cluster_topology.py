"""
Broker cluster topology.

The cluster is placed one broker per availability zone across a fixed
number of zones, requires encrypted in-transit traffic and IAM-authenticated
clients, and uses tiered storage. Ingress is limited to the provisioning
network's address range.
"""
import logging
import uuid
from typing import Tuple

from chain_indexer.errors import ConfigurationError, InvalidSizeError, ProvisioningError
from chain_indexer.models import (
    ClusterRef,
    ClusterSizing,
    ClusterTopology,
    IngressRule,
    NetworkPlacement,
    PolicyStatement,
    StorageMode,
)
from chain_indexer.provisioning.access_policy import build_cluster_access_policy
from chain_indexer.provisioning.network import select_zones, validate_cidr

logger = logging.getLogger(__name__)

ZONE_COUNT = 3
ZOOKEEPER_PORT = 2181
TLS_BROKER_PORT = 9094

# Fixed namespace so cluster ids are stable across provisioning runs
_CLUSTER_ID_NAMESPACE = uuid.UUID("6f1c1c52-3a1e-4d55-9a2c-0b6a4a9f7e10")


def cluster_arn(name: str, region: str, account_id: str, partition: str = "aws") -> str:
    """Deterministic identity of a cluster provisioned by this project."""
    cluster_id = uuid.uuid5(_CLUSTER_ID_NAMESPACE, f"{account_id}/{region}/{name}")
    return f"arn:{partition}:kafka:{region}:{account_id}:cluster/{name}/{cluster_id}"


def cluster_ingress_rules(cidr_block: str) -> Tuple[IngressRule, ...]:
    return (
        IngressRule.tcp(ZOOKEEPER_PORT, cidr_block, "Cluster coordination"),
        IngressRule.tcp(TLS_BROKER_PORT, cidr_block, "TLS client traffic"),
        IngressRule.all_traffic(cidr_block, "Allow hosts from within the network"),
    )


def provision_cluster(
    placement: NetworkPlacement,
    sizing: ClusterSizing,
    account_id: str,
    region: str,
    partition: str = "aws",
) -> ClusterTopology:
    """Define the broker cluster and resolve its identity.

    Args:
        placement (NetworkPlacement): Network the brokers are placed in
        sizing (ClusterSizing): Broker sizing and the optional trusted principal
        account_id (str): Account that owns the cluster
        region (str): Region the cluster is provisioned in

    Returns:
        ClusterTopology: Cluster definition; its ``ref`` is shared by every node

    Raises:
        InvalidNetworkPlacementError: If the network has fewer than three zones
            or an invalid address range
    """
    try:
        if not account_id or not region:
            raise ConfigurationError("Account and region are required to provision the cluster")
        if not sizing.cluster_name:
            raise ConfigurationError("Cluster name must not be empty")
        if (
            isinstance(sizing.broker_volume_size_gib, bool)
            or not isinstance(sizing.broker_volume_size_gib, int)
            or sizing.broker_volume_size_gib <= 0
        ):
            raise InvalidSizeError(sizing.broker_volume_size_gib)

        cidr_block = validate_cidr(placement.cidr_block)
        zones = select_zones(placement, ZONE_COUNT)
    except ProvisioningError as e:
        logger.error(f"Failed to provision cluster {sizing.cluster_name}: {str(e)}")
        raise

    ref = ClusterRef(
        name=sizing.cluster_name,
        region=region,
        account_id=account_id,
        identity_arn=cluster_arn(sizing.cluster_name, region, account_id, partition),
        partition=partition,
    )

    access_statements: Tuple[PolicyStatement, ...] = ()
    if sizing.trusted_principal:
        access_statements = (build_cluster_access_policy(ref, sizing.trusted_principal),)

    topology = ClusterTopology(
        ref=ref,
        network_id=placement.network_id,
        zones=zones,
        broker_instance_type=sizing.broker_instance_type,
        broker_volume_size_gib=sizing.broker_volume_size_gib,
        kafka_version=sizing.kafka_version,
        storage_mode=StorageMode.TIERED,
        ingress_rules=cluster_ingress_rules(cidr_block),
        access_statements=access_statements,
        log_group_name=f"/indexer/kafka/{sizing.cluster_name}",
    )
    logger.info(
        f"Provisioned cluster {ref.name} with {topology.broker_count} brokers "
        f"across {', '.join(zones)}"
    )
    return topology
