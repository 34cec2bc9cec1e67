"""Object storage area used for ad hoc file exchange with the nodes."""

import logging

from chain_indexer.models import LifecycleRule, SharedStorage

logger = logging.getLogger(__name__)

BUCKET_PREFIX = "blockchain-indexer-file-transfer"
MULTIPART_ABORT_DAYS = 7


def define_shared_storage(account_id: str, region: str, partition: str = "aws") -> SharedStorage:
    """Define the encrypted, private file transfer bucket for an account and region."""
    bucket_name = f"{BUCKET_PREFIX}-{account_id}-{region}"
    storage = SharedStorage(
        bucket_name=bucket_name,
        bucket_arn=f"arn:{partition}:s3:::{bucket_name}",
        lifecycle_rules=(
            LifecycleRule(
                rule_id="DeleteIncompleteMultipartUploads",
                abort_incomplete_multipart_upload_after_days=MULTIPART_ABORT_DAYS,
            ),
        ),
    )
    logger.debug(f"Shared storage bucket {bucket_name}")
    return storage
