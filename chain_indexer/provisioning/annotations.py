"""Security linter suppressions recorded against provisioned resources.

Annotations are audit metadata only; composition never reads them back.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple


@dataclass(frozen=True)
class Suppression:
    """A linter rule deliberately not applied to a resource."""
    rule_id: str
    reason: str


NODE_SUPPRESSIONS = (
    Suppression("AwsSolutions-EC23", "Blockchain client syncs on peer ports with nodes on the internet"),
    Suppression("AwsSolutions-EC26", "Ephemeral drive is encrypted by default"),
    Suppression("AwsSolutions-EC29", "Deletion protection disabled intentionally for development"),
    Suppression("AwsSolutions-IAM4", "Managed policies for instance management and monitoring"),
    Suppression("AwsSolutions-IAM5", "Broker discovery and topic wildcards under the cluster namespace"),
)

STACK_SUPPRESSIONS = (
    Suppression("AwsSolutions-MSK6", "Broker logs not supported for express brokers"),
    Suppression("AwsSolutions-S1", "Access logs not needed for file transfers of public files"),
    Suppression("AwsSolutions-IAM4", "Generated monitoring role uses managed policies"),
    Suppression("AwsSolutions-IAM5", "Wildcards needed for metrics and topic operations"),
)


class AnnotationMap:
    """Suppressions keyed by resource id."""

    def __init__(self):
        self._entries: Dict[str, List[Suppression]] = {}

    def add(self, resource_id: str, suppressions: Iterable[Suppression]) -> None:
        entries = self._entries.setdefault(resource_id, [])
        for suppression in suppressions:
            # Later reasons for the same rule replace earlier ones
            entries[:] = [s for s in entries if s.rule_id != suppression.rule_id]
            entries.append(suppression)

    def for_resource(self, resource_id: str) -> Tuple[Suppression, ...]:
        return tuple(self._entries.get(resource_id, ()))

    def as_dict(self) -> Dict[str, Tuple[Suppression, ...]]:
        return {resource_id: tuple(entries) for resource_id, entries in self._entries.items()}
