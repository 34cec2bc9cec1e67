"""Network placement checks shared by cluster and node composition."""

import ipaddress
import logging
from typing import Tuple

from chain_indexer.errors import InvalidNetworkPlacementError
from chain_indexer.models import NetworkPlacement

logger = logging.getLogger(__name__)


def validate_cidr(cidr_block: str) -> str:
    """Return the CIDR block in canonical form, or fail if it is not one."""
    try:
        network = ipaddress.ip_network(cidr_block, strict=True)
    except (TypeError, ValueError) as e:
        raise InvalidNetworkPlacementError(f"Invalid address range {cidr_block!r}: {str(e)}")
    return str(network)


def select_zones(placement: NetworkPlacement, count: int) -> Tuple[str, ...]:
    """Pick the first ``count`` distinct availability zones of the network."""
    zones = tuple(dict.fromkeys(placement.availability_zones))
    if len(zones) < count:
        raise InvalidNetworkPlacementError(
            f"Network {placement.network_id} spans {len(zones)} availability zones, "
            f"{count} required"
        )
    return zones[:count]
