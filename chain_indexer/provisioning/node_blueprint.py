"""
Composition of a single ingestion node.

A node definition brings together its volumes, the producer policy scoping
it to the broker cluster, the bootstrap sequence and a fixed set of ingress
rules. Composition is all-or-nothing: any failing step aborts the whole node.
"""
import logging
from typing import Tuple

from chain_indexer.errors import ProvisioningError
from chain_indexer.models import (
    ANY_IPV4,
    AssetBundle,
    ClusterRef,
    ComputeSpec,
    IngressRule,
    InstanceRole,
    NodeBlueprint,
    NodeSpec,
    PolicyStatement,
    SubnetType,
)
from chain_indexer.provisioning.access_policy import (
    build_asset_read_statements,
    build_producer_policy,
    build_volume_management_statements,
)
from chain_indexer.provisioning.bootstrap import compose_bootstrap, render_user_data
from chain_indexer.provisioning.network import validate_cidr
from chain_indexer.provisioning.volume_topology import derive_volumes

logger = logging.getLogger(__name__)

# Consensus layer client (peer-to-peer)
CONSENSUS_PEER_PORT = 9000
CONSENSUS_QUIC_PORT = 9001
# Execution layer client
EXECUTION_PEER_PORT = 30303
RPC_PORT = 8545
WS_RPC_PORT = 8546
METRICS_PORT = 9001

INSTANCE_PRINCIPAL = "ec2.amazonaws.com"
MANAGED_POLICIES = (
    "AmazonSSMManagedInstanceCore",
    "CloudWatchAgentServerPolicy",
)
# Address range of a default network
DEFAULT_PRIVATE_CIDR = "172.31.0.0/16"
MACHINE_IMAGE = "amazon-linux-2023"
CPU_TYPE = "arm64"


def node_id_for(network_variant_name: str) -> str:
    """Stable identifier of a node within the provisioning run."""
    return f"{network_variant_name}-node"


def ingress_rules(private_cidr: str) -> Tuple[IngressRule, ...]:
    """Peer ports open to any address, query and metrics ports private only."""
    return (
        IngressRule.tcp(CONSENSUS_PEER_PORT, ANY_IPV4, "P2P traffic, consensus client"),
        IngressRule.udp(CONSENSUS_PEER_PORT, ANY_IPV4, "P2P traffic, consensus client"),
        IngressRule.udp(CONSENSUS_QUIC_PORT, ANY_IPV4, "P2P traffic, consensus client"),
        IngressRule.tcp(EXECUTION_PEER_PORT, ANY_IPV4, "P2P traffic, execution client"),
        IngressRule.udp(EXECUTION_PEER_PORT, ANY_IPV4, "P2P traffic, execution client"),
        IngressRule.tcp(RPC_PORT, private_cidr, "RPC queries, execution client"),
        IngressRule.tcp(WS_RPC_PORT, private_cidr, "WS queries, execution client"),
        IngressRule.tcp(METRICS_PORT, private_cidr, "metrics, execution client"),
    )


def compose_node(
    node_spec: NodeSpec,
    cluster: ClusterRef,
    asset_bundle: AssetBundle,
    script_template: str,
    private_cidr: str = DEFAULT_PRIVATE_CIDR,
    extra_statements: Tuple[PolicyStatement, ...] = (),
) -> NodeBlueprint:
    """Compose one ingestion node against a provisioned broker cluster.

    Args:
        node_spec (NodeSpec): Per-network node parameters
        cluster (ClusterRef): Identified broker cluster
        asset_bundle (AssetBundle): Artifacts staged at first boot
        script_template (str): Bootstrap script containing the cluster placeholder
        private_cidr (str): Address range of the node's private network
        extra_statements: Additional grants attached to the node role

    Returns:
        NodeBlueprint: The composed node

    Raises:
        ProvisioningError: If any composition step fails
    """
    spec = node_spec.with_defaults()
    try:
        rules = ingress_rules(validate_cidr(private_cidr))
        volumes = derive_volumes(spec.extraction_volume_size_gib)
        producer_policy = build_producer_policy(cluster)
        steps = compose_bootstrap(asset_bundle, cluster, script_template)
        asset_grants = build_asset_read_statements(asset_bundle, cluster.partition)
    except ProvisioningError as e:
        logger.error(f"Failed to compose node {spec.network_variant_name}: {str(e)}")
        raise

    statements = (
        producer_policy
        + build_volume_management_statements(cluster.account_id, cluster.region, cluster.partition)
        + asset_grants
        + tuple(extra_statements)
    )
    role = InstanceRole(
        assumed_by=INSTANCE_PRINCIPAL,
        managed_policies=MANAGED_POLICIES,
        statements=statements,
    )
    compute = ComputeSpec(
        instance_class=spec.instance_class,
        machine_image=MACHINE_IMAGE,
        cpu_type=CPU_TYPE,
        subnet_type=SubnetType.PUBLIC,
        detailed_monitoring=True,
        role=role,
    )

    blueprint = NodeBlueprint(
        network_variant_name=spec.network_variant_name,
        node_id=node_id_for(spec.network_variant_name),
        compute=compute,
        volumes=volumes,
        ingress_rules=rules,
        producer_policy=producer_policy,
        bootstrap_steps=steps,
        user_data=render_user_data(steps),
    )
    logger.info(
        f"Composed node {blueprint.node_id}: {spec.instance_class}, "
        f"{spec.extraction_volume_size_gib} GiB extraction volume"
    )
    return blueprint
