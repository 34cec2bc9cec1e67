"""
Bootstrap sequence of an ingestion node.

Every artifact is staged with a copy step, then a single execute step runs
the node's script with the cluster identity substituted in.
"""
import logging
import re
from typing import Iterable, Tuple

from chain_indexer.errors import MissingTemplateError, UnresolvedPlaceholderError
from chain_indexer.models import AssetBundle, BootstrapStep, ClusterRef, StepKind

logger = logging.getLogger(__name__)

CLUSTER_ARN_PLACEHOLDER = "__KAFKA_CLUSTER_ARN__"
STAGING_DIR = "/tmp"
SCRIPT_ARTIFACT_ID = "userdata"
SCRIPT_DESTINATION = "/var/lib/cloud/instance/scripts/part-001"

# Tokens shaped like the placeholder that nothing will ever substitute
_TOKEN_PATTERN = re.compile(r"__[A-Z][A-Z0-9_]*__")


def staging_path(artifact_id: str) -> str:
    return f"{STAGING_DIR}/{artifact_id}.zip"


def render_script(script_template: str, cluster: ClusterRef) -> str:
    """Substitute the cluster identity into the script template.

    Raises:
        MissingTemplateError: If the template is empty
        UnresolvedPlaceholderError: If the placeholder does not occur exactly
            once, or another placeholder-shaped token remains
        MissingClusterIdentityError: If the cluster has not been identified yet
    """
    if not script_template or not script_template.strip():
        raise MissingTemplateError("Bootstrap script template is empty")

    occurrences = script_template.count(CLUSTER_ARN_PLACEHOLDER)
    if occurrences != 1:
        raise UnresolvedPlaceholderError(
            f"Expected exactly one {CLUSTER_ARN_PLACEHOLDER} in the bootstrap template, "
            f"found {occurrences}"
        )

    leftovers = sorted(
        set(_TOKEN_PATTERN.findall(script_template)) - {CLUSTER_ARN_PLACEHOLDER}
    )
    if leftovers:
        raise UnresolvedPlaceholderError(
            f"Bootstrap template has placeholders with no value: {', '.join(leftovers)}"
        )

    cluster_arn = cluster.require_identity()
    return script_template.replace(CLUSTER_ARN_PLACEHOLDER, cluster_arn)


def compose_bootstrap(
    asset_bundle: AssetBundle, cluster: ClusterRef, script_template: str
) -> Tuple[BootstrapStep, ...]:
    """Compose the ordered bootstrap steps for a node.

    Copy steps are emitted in artifact id order so that the result is stable,
    and always precede the single execute step.
    """
    script = render_script(script_template, cluster)

    steps = [
        BootstrapStep(
            kind=StepKind.COPY,
            source_artifact_id=artifact.artifact_id,
            destination_path=staging_path(artifact.artifact_id),
            source_location=artifact.location,
        )
        for artifact in sorted(asset_bundle, key=lambda a: a.artifact_id)
    ]
    steps.append(BootstrapStep(
        kind=StepKind.EXECUTE,
        source_artifact_id=SCRIPT_ARTIFACT_ID,
        destination_path=SCRIPT_DESTINATION,
        script=script,
    ))

    logger.debug(f"Bootstrap stages {len(steps) - 1} artifacts before execution")
    return tuple(steps)


def render_user_data(steps: Iterable[BootstrapStep]) -> str:
    """Render bootstrap steps as a Linux first-boot shell script."""
    lines = ["#!/bin/bash"]
    lines.extend(step.command for step in steps)
    return "\n".join(lines)
