#!/usr/bin/env python3
"""
Compose the indexer stack from environment configuration and report its outputs.
"""

import json
import logging
import os
import sys
from pathlib import Path

from tabulate import tabulate

from chain_indexer.config.assets import build_asset_bundle, load_script_template
from chain_indexer.config.environment import default_zones, resolve_environment
from chain_indexer.config.infrastructure_config import load_infrastructure_config
from chain_indexer.config.networks import load_network_variants
from chain_indexer.errors import ProvisioningError
from chain_indexer.models import NetworkPlacement, StackParams, policy_document
from chain_indexer.provisioning.stack_composer import compose_stack

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    """Configure logging with consistent format."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def write_definitions(result, output_dir: Path):
    """Write policy documents and user data scripts for the provisioning engine."""
    output_dir.mkdir(parents=True, exist_ok=True)
    cluster_policy = policy_document(result.cluster.access_statements)
    (output_dir / "cluster-policy.json").write_text(json.dumps(cluster_policy, indent=2))
    for node in result.nodes:
        role_policy = policy_document(node.statements)
        (output_dir / f"{node.node_id}-policy.json").write_text(json.dumps(role_policy, indent=2))
        (output_dir / f"{node.node_id}-userdata.sh").write_text(node.user_data)
    logger.info(f"Wrote definitions to {output_dir}")


def main() -> int:
    setup_logging()

    try:
        config = load_infrastructure_config()
        if config.debug_mode:
            logging.getLogger().setLevel(logging.DEBUG)
        account_id, region = resolve_environment(config.environment)
        placement = NetworkPlacement(
            network_id=config.network.network_id,
            cidr_block=config.network.cidr_block,
            availability_zones=tuple(config.network.availability_zones or default_zones(region)),
        )
        params = StackParams(
            account_id=account_id,
            region=region,
            placement=placement,
            asset_bundle=build_asset_bundle(config.assets),
            script_template=load_script_template(config.assets.template_path),
            sizing=config.cluster,
            partition=config.environment.partition,
        )
        node_specs = load_network_variants(config.networks_file, config.node_defaults)
        result = compose_stack(params, node_specs, max_workers=config.max_workers)
    except ProvisioningError as e:
        logger.error(f"Provisioning failed: {str(e)}")
        return 1

    print(tabulate(sorted(result.outputs.items()), headers=["Output", "Value"]))

    output_dir = os.getenv('OUTPUT_DIR')
    if output_dir:
        write_definitions(result, Path(output_dir))
    return 0


if __name__ == '__main__':
    sys.exit(main())
