"""Resolution of the account and region a stack is provisioned into."""

import logging
from typing import List, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from chain_indexer.config.infrastructure_config import EnvironmentConfig
from chain_indexer.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _session_region() -> str:
    return boto3.session.Session().region_name


def _caller_account(region: str) -> str:
    sts = boto3.client('sts', region_name=region)
    return sts.get_caller_identity()['Account']


def resolve_environment(config: EnvironmentConfig) -> Tuple[str, str]:
    """Return ``(account_id, region)``, asking the credential chain for what is not configured.

    Raises:
        ConfigurationError: If the account or region cannot be determined
    """
    region = config.region or _session_region()
    if not region:
        raise ConfigurationError(
            'Region not found. Please set CDK_DEFAULT_REGION or AWS_REGION.'
        )

    account_id = config.account_id
    if not account_id:
        try:
            account_id = _caller_account(region)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to resolve account from credentials: {str(e)}")
            raise ConfigurationError(
                'Account not found. Please set CDK_DEFAULT_ACCOUNT or AWS_ACCOUNT_ID, '
                'or configure credentials.'
            )
        logger.info(f"Resolved account {account_id} from caller identity")

    return account_id, region


def default_zones(region: str, count: int = 3) -> List[str]:
    """Conventional zone names of a region, used when none are configured."""
    return [f"{region}{suffix}" for suffix in "abcdef"[:count]]
