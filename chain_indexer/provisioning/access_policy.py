"""
Least-privilege access statements for ingestion nodes and the broker cluster.

Topic and group resource patterns are derived from the cluster reference
rather than passed in, so callers cannot widen or narrow them by mistake.
"""
import logging
import re
from typing import Tuple

from chain_indexer.errors import ProvisioningError
from chain_indexer.models import (
    AssetBundle,
    ClusterRef,
    PolicyStatement,
    StatementGroup,
)

logger = logging.getLogger(__name__)

DISCOVERY_ACTIONS = (
    "kafka:ListClusters",
    "kafka:ListClustersV2",
    "kafka:GetBootstrapBrokers",
)
CLUSTER_CONNECT_ACTIONS = (
    "kafka-cluster:Connect",
    "kafka-cluster:AlterCluster",
    "kafka-cluster:DescribeCluster",
)
TOPIC_ACTIONS = (
    "kafka-cluster:*Topic*",
    "kafka-cluster:WriteData",
    "kafka-cluster:ReadData",
)
GROUP_ACTIONS = (
    "kafka-cluster:AlterGroup",
    "kafka-cluster:DescribeGroup",
)
CLUSTER_ACCESS_ACTIONS = (
    "kafka:CreateVpcConnection",
    "kafka:DescribeCluster",
    "kafka:DescribeClusterV2",
    "kafka:GetBootstrapBrokers",
)
VOLUME_DISCOVERY_ACTIONS = (
    "ec2:DescribeVolumes",
)
VOLUME_MANAGEMENT_ACTIONS = (
    "ec2:AttachVolume",
    "ec2:ModifyVolume",
)
OBJECT_READ_ACTIONS = (
    "s3:GetObject*",
    "s3:GetBucket*",
    "s3:List*",
)
OBJECT_WRITE_ACTIONS = (
    "s3:DeleteObject*",
    "s3:PutObject",
    "s3:PutObjectLegalHold",
    "s3:PutObjectRetention",
    "s3:PutObjectTagging",
    "s3:PutObjectVersionTagging",
    "s3:Abort*",
)


def topic_pattern(cluster: ClusterRef) -> str:
    """All topics under the cluster."""
    return f"{cluster.resource_prefix('topic')}/*"


def group_pattern(cluster: ClusterRef) -> str:
    """All consumer groups under the cluster."""
    return f"{cluster.resource_prefix('group')}/*"


def build_producer_policy(cluster: ClusterRef) -> Tuple[PolicyStatement, ...]:
    """Build the statements that let a node produce into the cluster.

    Statements are always emitted in the same order: broker discovery,
    cluster connect, topic read/write, consumer groups. Discovery actions
    cannot be scoped to a resource and are the only wildcard statement here.

    Raises:
        MissingClusterIdentityError: If the cluster has not been identified yet
    """
    cluster_arn = cluster.require_identity()

    statements = (
        PolicyStatement(
            sid="BrokerDiscovery",
            group=StatementGroup.DISCOVERY,
            actions=DISCOVERY_ACTIONS,
            resources=("*",),
        ),
        PolicyStatement(
            sid="ClusterConnect",
            group=StatementGroup.CLUSTER_CONNECT,
            actions=CLUSTER_CONNECT_ACTIONS,
            resources=(cluster_arn,),
        ),
        PolicyStatement(
            sid="TopicReadWrite",
            group=StatementGroup.TOPIC,
            actions=TOPIC_ACTIONS,
            resources=(topic_pattern(cluster),),
        ),
        PolicyStatement(
            sid="ConsumerGroups",
            group=StatementGroup.GROUP,
            actions=GROUP_ACTIONS,
            resources=(group_pattern(cluster),),
        ),
    )
    logger.debug(f"Producer policy for cluster {cluster.name}: {[s.sid for s in statements]}")
    return statements


def build_cluster_access_policy(cluster: ClusterRef, trusted_principal: str) -> PolicyStatement:
    """Cluster resource policy letting an external service discover and connect."""
    cluster_arn = cluster.require_identity()
    return PolicyStatement(
        sid="TrustedPrincipalAccess",
        group=StatementGroup.CLUSTER_ACCESS,
        actions=CLUSTER_ACCESS_ACTIONS,
        resources=(cluster_arn,),
        principals=(trusted_principal,),
    )


def build_volume_management_statements(
    account_id: str, region: str, partition: str = "aws"
) -> Tuple[PolicyStatement, ...]:
    """Lets bootstrap scripts tune the throughput of attached volumes.

    Describing volumes cannot be scoped to a resource and is grouped with
    discovery. Attaching and modifying are limited to the node's account and
    region.
    """
    prefix = f"arn:{partition}:ec2:{region}:{account_id}"
    return (
        PolicyStatement(
            sid="VolumeDiscovery",
            group=StatementGroup.DISCOVERY,
            actions=VOLUME_DISCOVERY_ACTIONS,
            resources=("*",),
        ),
        PolicyStatement(
            sid="VolumeManagement",
            group=StatementGroup.VOLUME_MANAGEMENT,
            actions=VOLUME_MANAGEMENT_ACTIONS,
            resources=(f"{prefix}:volume/*", f"{prefix}:instance/*"),
        ),
    )


def build_asset_read_statements(
    asset_bundle: AssetBundle, partition: str = "aws"
) -> Tuple[PolicyStatement, ...]:
    """Read grants on each bootstrap artifact's bucket and object.

    Raises:
        ProvisioningError: If two artifact ids map to the same statement id
    """
    statements = []
    seen = {}
    for artifact in asset_bundle:
        sid = f"AssetRead{_sid_suffix(artifact.artifact_id)}"
        if sid in seen:
            raise ProvisioningError(
                f"Artifacts {seen[sid]!r} and {artifact.artifact_id!r} share statement id {sid}"
            )
        seen[sid] = artifact.artifact_id
        bucket_arn = f"arn:{partition}:s3:::{artifact.bucket}"
        statements.append(PolicyStatement(
            sid=sid,
            group=StatementGroup.ASSET_READ,
            actions=OBJECT_READ_ACTIONS,
            resources=(bucket_arn, f"{bucket_arn}/{artifact.key}"),
        ))
    return tuple(statements)


def build_bucket_read_write_statement(bucket_arn: str) -> PolicyStatement:
    """Read-write grant on a bucket and every object in it."""
    return PolicyStatement(
        sid="SharedStorageReadWrite",
        group=StatementGroup.SHARED_STORAGE,
        actions=OBJECT_READ_ACTIONS + OBJECT_WRITE_ACTIONS,
        resources=(bucket_arn, f"{bucket_arn}/*"),
    )


def _sid_suffix(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[^0-9A-Za-z]+", name))
