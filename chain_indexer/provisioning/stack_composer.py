"""
Stack composition: one broker cluster, one shared storage area and one node
per configured network variant.

Adding a network variant is a data change: pass another NodeSpec.
"""
import logging
from concurrent import futures
from typing import Dict, Optional, Sequence

from chain_indexer.errors import ConfigurationError, ProvisioningError
from chain_indexer.models import (
    ClusterTopology,
    NodeBlueprint,
    NodeSpec,
    SharedStorage,
    StackParams,
    StackResult,
)
from chain_indexer.provisioning.access_policy import build_bucket_read_write_statement
from chain_indexer.provisioning.annotations import (
    NODE_SUPPRESSIONS,
    STACK_SUPPRESSIONS,
    AnnotationMap,
)
from chain_indexer.provisioning.cluster_topology import provision_cluster
from chain_indexer.provisioning.node_blueprint import compose_node
from chain_indexer.provisioning.shared_storage import define_shared_storage

logger = logging.getLogger(__name__)

STACK_RESOURCE_ID = "Indexer"


def _check_node_specs(node_specs: Sequence[NodeSpec]) -> None:
    if not node_specs:
        raise ConfigurationError("At least one network variant is required")
    names = [spec.network_variant_name for spec in node_specs]
    if not all(names):
        raise ConfigurationError("Network variant names must not be empty")
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate network variants: {', '.join(duplicates)}")
    keys = {}
    for name in names:
        key = _output_key(name)
        if key in keys:
            raise ConfigurationError(
                f"Network variants {keys[key]!r} and {name!r} both report as output {key}"
            )
        keys[key] = name


def _output_key(network_variant_name: str) -> str:
    words = network_variant_name.replace("_", "-").split("-")
    return "".join(word[:1].upper() + word[1:] for word in words) + "Node"


def stack_outputs(cluster: ClusterTopology, storage: SharedStorage, nodes: Sequence[NodeBlueprint]) -> Dict[str, str]:
    """Informational values reported to operators after provisioning."""
    outputs = {
        "KafkaVpc": cluster.network_id,
        "KafkaClusterArn": cluster.ref.identity_arn,
        "KafkaClusterName": cluster.ref.name,
    }
    for node in nodes:
        outputs[_output_key(node.network_variant_name)] = node.node_id
    outputs["FileTransferBucketName"] = storage.bucket_name
    outputs["FileTransferBucketArn"] = storage.bucket_arn
    return outputs


def compose_stack(
    params: StackParams,
    node_specs: Sequence[NodeSpec],
    max_workers: Optional[int] = None,
) -> StackResult:
    """Compose the cluster, the shared storage area and every node.

    The cluster is resolved first since every node embeds its identity.
    Nodes are independent of each other and are composed on a thread pool
    when ``max_workers`` is greater than one; results keep the order of
    ``node_specs`` either way.

    Raises:
        ProvisioningError: If the cluster or any node fails to compose; no
            partial stack is returned
    """
    _check_node_specs(node_specs)

    topology = provision_cluster(
        params.placement,
        params.sizing,
        account_id=params.account_id,
        region=params.region,
        partition=params.partition,
    )
    storage = define_shared_storage(params.account_id, params.region, params.partition)
    storage_grant = build_bucket_read_write_statement(storage.bucket_arn)

    def compose(spec: NodeSpec) -> NodeBlueprint:
        return compose_node(
            spec,
            topology.ref,
            params.asset_bundle,
            params.script_template,
            private_cidr=params.placement.cidr_block,
            extra_statements=(storage_grant,),
        )

    try:
        if max_workers and max_workers > 1:
            with futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
                nodes = tuple(executor.map(compose, node_specs))
        else:
            nodes = tuple(compose(spec) for spec in node_specs)
    except ProvisioningError as e:
        logger.error(f"Stack composition aborted: {str(e)}")
        raise

    annotations = AnnotationMap()
    annotations.add(STACK_RESOURCE_ID, STACK_SUPPRESSIONS)
    for node in nodes:
        annotations.add(node.node_id, NODE_SUPPRESSIONS)

    logger.info(
        f"Composed stack with cluster {topology.ref.name} and "
        f"{len(nodes)} node(s): {', '.join(node.node_id for node in nodes)}"
    )
    return StackResult(
        cluster=topology,
        shared_storage=storage,
        nodes=nodes,
        outputs=stack_outputs(topology, storage, nodes),
        annotations=annotations.as_dict(),
    )
