"""Bootstrap artifacts and the node script template."""

import logging
from pathlib import Path
from typing import Iterable

from chain_indexer.config.infrastructure_config import AssetConfig
from chain_indexer.errors import ConfigurationError, MissingTemplateError
from chain_indexer.models import AssetBundle

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_IDS = (
    "monitor_extraction",
    "last_block",
    "monitor_kafka",
    "scripts",
)


def build_asset_bundle(config: AssetConfig, artifact_ids: Iterable[str] = DEFAULT_ARTIFACT_IDS) -> AssetBundle:
    """Map each artifact to its archive in the asset bucket."""
    if not config.bucket:
        raise ConfigurationError('Asset bucket not found. Please set ASSET_BUCKET.')

    prefix = config.prefix.strip('/')
    key_prefix = f"{prefix}/" if prefix else ""
    return AssetBundle.from_mapping({
        artifact_id: f"s3://{config.bucket}/{key_prefix}{artifact_id}.zip"
        for artifact_id in artifact_ids
    })


def load_script_template(path: Path) -> str:
    """Read the node bootstrap script template."""
    try:
        template = Path(path).read_text()
    except FileNotFoundError:
        raise MissingTemplateError(f"Bootstrap script template not found: {path}")
    logger.debug(f"Loaded bootstrap template {path} ({len(template)} bytes)")
    return template
