"""Block storage layout of an ingestion node."""

import logging

from chain_indexer.errors import InvalidSizeError
from chain_indexer.models import VolumeEntry, VolumeSpec

logger = logging.getLogger(__name__)

ROOT_DEVICE_PATH = "/dev/xvda"
ROOT_VOLUME_GIB = 64
EXTRACTION_DEVICE_PATH = "/dev/sdf"


def derive_volumes(extraction_size_gib: int) -> VolumeSpec:
    """Derive the root and extraction volumes for a node.

    Args:
        extraction_size_gib (int): Size of the extraction volume in GiB

    Returns:
        VolumeSpec: Root volume followed by the extraction volume, both encrypted

    Raises:
        InvalidSizeError: If the size is not a positive integer
    """
    if (
        isinstance(extraction_size_gib, bool)
        or not isinstance(extraction_size_gib, int)
        or extraction_size_gib <= 0
    ):
        raise InvalidSizeError(extraction_size_gib)

    logger.debug(f"Extraction volume {EXTRACTION_DEVICE_PATH}: {extraction_size_gib} GiB")
    return VolumeSpec(entries=(
        VolumeEntry(device_path=ROOT_DEVICE_PATH, size_gib=ROOT_VOLUME_GIB, encrypted=True),
        VolumeEntry(device_path=EXTRACTION_DEVICE_PATH, size_gib=extraction_size_gib, encrypted=True),
    ))
