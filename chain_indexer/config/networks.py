"""Network variants loaded from a YAML file."""

import logging
from pathlib import Path
from typing import List, Optional

import yaml

from chain_indexer.config.infrastructure_config import NodeDefaults
from chain_indexer.errors import ConfigurationError
from chain_indexer.models import NodeSpec

logger = logging.getLogger(__name__)


def parse_network_variants(document: dict, defaults: Optional[NodeDefaults] = None) -> List[NodeSpec]:
    """Build node specs from a parsed ``networks`` document.

    Example document::

        networks:
          - name: mainnet
          - name: sepolia
            extraction_volume_size_gib: 2048
    """
    if not isinstance(document, dict) or not isinstance(document.get('networks'), list):
        raise ConfigurationError("Network variants document must contain a 'networks' list")

    specs = []
    for index, entry in enumerate(document['networks']):
        if not isinstance(entry, dict) or not entry.get('name'):
            raise ConfigurationError(f"Network variant #{index} must have a name")

        size = entry.get('extraction_volume_size_gib')
        if size is None and defaults:
            size = defaults.extraction_volume_size_gib
        if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
            raise ConfigurationError(
                f"Network variant {entry['name']}: extraction_volume_size_gib must be an integer"
            )

        instance_class = entry.get('instance_class')
        if instance_class is None and defaults:
            instance_class = defaults.instance_class

        specs.append(NodeSpec(
            network_variant_name=str(entry['name']),
            instance_class=instance_class,
            extraction_volume_size_gib=size,
        ))
    return specs


def load_network_variants(path: Path, defaults: Optional[NodeDefaults] = None) -> List[NodeSpec]:
    """Load node specs for every configured network variant."""
    try:
        document = yaml.safe_load(Path(path).read_text())
    except FileNotFoundError:
        raise ConfigurationError(f"Network variants file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse network variants file {path}: {str(e)}")

    specs = parse_network_variants(document, defaults)
    logger.info(f"Loaded {len(specs)} network variant(s) from {path}")
    return specs
