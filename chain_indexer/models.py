"""Data models for ingestion node and broker cluster provisioning."""
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatchcase
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from chain_indexer.errors import MissingClusterIdentityError, ProvisioningError

ANY_IPV4 = "0.0.0.0/0"
DEFAULT_INSTANCE_CLASS = "i8g.4xlarge"
DEFAULT_EXTRACTION_VOLUME_GIB = 10000


class StepKind(Enum):
    """Kind of bootstrap step."""
    COPY = "copy"
    EXECUTE = "execute"


class Protocol(Enum):
    """Transport protocol of an ingress rule."""
    TCP = "tcp"
    UDP = "udp"
    ALL = "all"


class Effect(Enum):
    """Effect of a policy statement."""
    ALLOW = "Allow"


class StatementGroup(Enum):
    """Purpose of a policy statement within an attached policy set."""
    DISCOVERY = "discovery"
    CLUSTER_CONNECT = "cluster-connect"
    TOPIC = "topic"
    GROUP = "group"
    VOLUME_MANAGEMENT = "volume-management"
    ASSET_READ = "asset-read"
    SHARED_STORAGE = "shared-storage"
    CLUSTER_ACCESS = "cluster-access"


class SubnetType(Enum):
    """Subnet placement of compute and brokers."""
    PUBLIC = "public"
    PRIVATE = "private"


class StorageMode(Enum):
    """Broker storage mode."""
    LOCAL = "LOCAL"
    TIERED = "TIERED"


@dataclass(frozen=True)
class NodeSpec:
    """Per-network parameters for one ingestion node."""
    network_variant_name: str
    instance_class: Optional[str] = None
    extraction_volume_size_gib: Optional[int] = None

    def with_defaults(self) -> 'NodeSpec':
        """Return a copy with documented defaults applied to absent fields."""
        return NodeSpec(
            network_variant_name=self.network_variant_name,
            instance_class=self.instance_class or DEFAULT_INSTANCE_CLASS,
            extraction_volume_size_gib=(
                DEFAULT_EXTRACTION_VOLUME_GIB
                if self.extraction_volume_size_gib is None
                else self.extraction_volume_size_gib
            ),
        )


@dataclass(frozen=True)
class ClusterRef:
    """Handle to a broker cluster shared by every node composition."""
    name: str
    region: str
    account_id: str
    identity_arn: Optional[str] = None
    partition: str = "aws"

    @property
    def is_resolved(self) -> bool:
        return bool(self.identity_arn)

    def require_identity(self) -> str:
        """Return the cluster ARN or fail if the cluster is not yet identified."""
        if not self.is_resolved:
            raise MissingClusterIdentityError(
                f"Cluster {self.name!r} has no resolved identity; "
                "provision the cluster before composing nodes against it"
            )
        return self.identity_arn

    def resource_prefix(self, resource_type: str) -> str:
        """ARN prefix for cluster-owned resources such as topics and groups."""
        return (
            f"arn:{self.partition}:kafka:{self.region}:{self.account_id}:"
            f"{resource_type}/{self.name}"
        )

    @classmethod
    def from_arn(cls, arn: str) -> 'ClusterRef':
        """Import an already provisioned cluster from its ARN.

        Expected shape: ``arn:{partition}:kafka:{region}:{account}:cluster/{name}/{id}``
        """
        parts = (arn or "").split(":", 5)
        if len(parts) != 6 or parts[0] != "arn" or parts[2] != "kafka":
            raise MissingClusterIdentityError(f"Not a broker cluster ARN: {arn!r}")
        resource = parts[5].split("/")
        if len(resource) != 3 or resource[0] != "cluster" or not all(resource[1:]):
            raise MissingClusterIdentityError(f"Not a broker cluster ARN: {arn!r}")
        return cls(
            name=resource[1],
            region=parts[3],
            account_id=parts[4],
            identity_arn=arn,
            partition=parts[1],
        )


@dataclass(frozen=True)
class VolumeEntry:
    """One block device mapping."""
    device_path: str
    size_gib: int
    encrypted: bool


@dataclass(frozen=True)
class VolumeSpec:
    """Ordered block device layout of a node: root volume then extraction volume."""
    entries: Tuple[VolumeEntry, ...]

    @property
    def root(self) -> VolumeEntry:
        return self.entries[0]

    @property
    def extraction(self) -> VolumeEntry:
        return self.entries[1]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[VolumeEntry]:
        return iter(self.entries)


@dataclass(frozen=True)
class PolicyStatement:
    """Access-control statement granting actions on resource patterns."""
    sid: str
    group: StatementGroup
    actions: Tuple[str, ...]
    resources: Tuple[str, ...]
    effect: Effect = Effect.ALLOW
    principals: Tuple[str, ...] = ()

    @property
    def action_set(self) -> frozenset:
        return frozenset(self.actions)

    @property
    def resource_arn_pattern(self) -> str:
        """The single resource pattern of a statement scoped to one resource."""
        if len(self.resources) != 1:
            raise ProvisioningError(f"Statement {self.sid} is scoped to {len(self.resources)} resources")
        return self.resources[0]

    def covers(self, arn: str) -> bool:
        """Check whether a concrete resource ARN falls under this statement."""
        return any(fnmatchcase(arn, pattern) for pattern in self.resources)

    def to_dict(self) -> Dict:
        statement = {
            "Sid": self.sid,
            "Effect": self.effect.value,
            "Action": list(self.actions),
            "Resource": list(self.resources),
        }
        if self.principals:
            statement["Principal"] = {"Service": list(self.principals)}
        return statement


def policy_document(statements) -> Dict:
    """Render statements as a JSON-ready policy document."""
    return {
        "Version": "2012-10-17",
        "Statement": [statement.to_dict() for statement in statements],
    }


@dataclass(frozen=True)
class Artifact:
    """Retrievable bootstrap artifact."""
    artifact_id: str
    location: str

    @property
    def bucket(self) -> str:
        return self._split_location()[0]

    @property
    def key(self) -> str:
        return self._split_location()[1]

    def _split_location(self) -> Tuple[str, str]:
        if not self.location.startswith("s3://"):
            raise ProvisioningError(f"Artifact {self.artifact_id} is not stored in object storage: {self.location}")
        bucket, _, key = self.location[len("s3://"):].partition("/")
        return bucket, key


@dataclass(frozen=True)
class AssetBundle:
    """Named collection of bootstrap artifacts."""
    artifacts: Tuple[Artifact, ...] = ()

    def __post_init__(self):
        ids = [artifact.artifact_id for artifact in self.artifacts]
        duplicates = sorted({artifact_id for artifact_id in ids if ids.count(artifact_id) > 1})
        if duplicates:
            raise ProvisioningError(f"Duplicate artifact ids in asset bundle: {', '.join(duplicates)}")

    @classmethod
    def from_mapping(cls, locations: Dict[str, str]) -> 'AssetBundle':
        return cls(tuple(
            Artifact(artifact_id=artifact_id, location=location)
            for artifact_id, location in sorted(locations.items())
        ))

    @property
    def artifact_ids(self) -> List[str]:
        return [artifact.artifact_id for artifact in self.artifacts]

    def __len__(self) -> int:
        return len(self.artifacts)

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self.artifacts)


@dataclass(frozen=True)
class BootstrapStep:
    """One declarative step of a node's first-boot sequence."""
    kind: StepKind
    source_artifact_id: str
    destination_path: str
    source_location: Optional[str] = None
    script: Optional[str] = None

    @property
    def command(self) -> str:
        if self.kind is StepKind.COPY:
            return f"aws s3 cp {self.source_location} {self.destination_path}"
        return self.script


@dataclass(frozen=True)
class IngressRule:
    """Inbound traffic permitted to a resource."""
    peer: str
    protocol: Protocol
    from_port: Optional[int]
    to_port: Optional[int]
    description: str = ""

    @classmethod
    def tcp(cls, port: int, peer: str, description: str = "") -> 'IngressRule':
        return cls(peer, Protocol.TCP, port, port, description)

    @classmethod
    def udp(cls, port: int, peer: str, description: str = "") -> 'IngressRule':
        return cls(peer, Protocol.UDP, port, port, description)

    @classmethod
    def all_traffic(cls, peer: str, description: str = "") -> 'IngressRule':
        return cls(peer, Protocol.ALL, None, None, description)

    @property
    def is_public(self) -> bool:
        return self.peer == ANY_IPV4


@dataclass(frozen=True)
class InstanceRole:
    """Role assumed by a node instance."""
    assumed_by: str
    managed_policies: Tuple[str, ...]
    statements: Tuple[PolicyStatement, ...]


@dataclass(frozen=True)
class ComputeSpec:
    """Compute instance definition of a node."""
    instance_class: str
    machine_image: str
    cpu_type: str
    subnet_type: SubnetType
    detailed_monitoring: bool
    role: InstanceRole


@dataclass(frozen=True)
class NodeBlueprint:
    """Fully composed ingestion node."""
    network_variant_name: str
    node_id: str
    compute: ComputeSpec
    volumes: VolumeSpec
    ingress_rules: Tuple[IngressRule, ...]
    producer_policy: Tuple[PolicyStatement, ...]
    bootstrap_steps: Tuple[BootstrapStep, ...]
    user_data: str

    @property
    def statements(self) -> Tuple[PolicyStatement, ...]:
        """Every statement attached to the node's role."""
        return self.compute.role.statements


@dataclass(frozen=True)
class NetworkPlacement:
    """Network the cluster and nodes are provisioned into."""
    network_id: str
    cidr_block: str
    availability_zones: Tuple[str, ...]
    subnet_type: SubnetType = SubnetType.PUBLIC


@dataclass(frozen=True)
class ClusterSizing:
    """Sizing and identity parameters of the broker cluster."""
    cluster_name: str = "blockchain"
    kafka_version: str = "3.9.x.kraft"
    broker_instance_type: str = "kafka.m7g.xlarge"
    broker_volume_size_gib: int = 16384
    trusted_principal: Optional[str] = "firehose.amazonaws.com"


@dataclass(frozen=True)
class ClusterTopology:
    """Provisioned broker cluster definition."""
    ref: ClusterRef
    network_id: str
    zones: Tuple[str, ...]
    broker_instance_type: str
    broker_volume_size_gib: int
    kafka_version: str
    storage_mode: StorageMode
    ingress_rules: Tuple[IngressRule, ...]
    access_statements: Tuple[PolicyStatement, ...]
    log_group_name: str
    encryption_in_transit: str = "TLS"
    client_authentication: str = "SASL_IAM"
    removal_policy: str = "DESTROY"

    @property
    def broker_count(self) -> int:
        return len(self.zones)


@dataclass(frozen=True)
class LifecycleRule:
    """Object storage lifecycle rule."""
    rule_id: str
    abort_incomplete_multipart_upload_after_days: int


@dataclass(frozen=True)
class SharedStorage:
    """Object storage area shared by every node for ad hoc file exchange."""
    bucket_name: str
    bucket_arn: str
    lifecycle_rules: Tuple[LifecycleRule, ...]
    encryption: str = "S3_MANAGED"
    enforce_ssl: bool = True
    block_public_access: bool = True
    versioned: bool = False
    auto_delete_objects: bool = True
    removal_policy: str = "DESTROY"


@dataclass(frozen=True)
class StackParams:
    """Account, network and cluster parameters shared by every node of a stack."""
    account_id: str
    region: str
    placement: NetworkPlacement
    asset_bundle: AssetBundle
    script_template: str
    sizing: ClusterSizing = field(default_factory=ClusterSizing)
    partition: str = "aws"


@dataclass(frozen=True)
class StackResult:
    """Cluster, shared storage and nodes composed for one provisioning run."""
    cluster: ClusterTopology
    shared_storage: SharedStorage
    nodes: Tuple[NodeBlueprint, ...]
    outputs: Mapping[str, str] = field(default_factory=dict, hash=False)
    annotations: Mapping[str, Tuple] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Read-only views of the composed values
        object.__setattr__(self, "outputs", MappingProxyType(dict(self.outputs)))
        object.__setattr__(self, "annotations", MappingProxyType(dict(self.annotations)))

    def node(self, network_variant_name: str) -> NodeBlueprint:
        for blueprint in self.nodes:
            if blueprint.network_variant_name == network_variant_name:
                return blueprint
        raise KeyError(network_variant_name)
