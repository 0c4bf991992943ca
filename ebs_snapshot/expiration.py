import logging

from botocore.exceptions import BotoCoreError, ClientError

from .errors import ExpirationError

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {'InvalidSnapshot.NotFound'}


def expire(ec2, snapshot_id):
    """Delete one snapshot. A snapshot that is already gone counts as deleted."""
    try:
        ec2.delete_snapshot(SnapshotId=snapshot_id)
    except ClientError as e:
        code = e.response.get('Error', {}).get('Code')
        if code in NOT_FOUND_CODES:
            logger.info("Snapshot %s was already deleted", snapshot_id)
            return True
        raise ExpirationError(snapshot_id, e) from e
    except BotoCoreError as e:
        raise ExpirationError(snapshot_id, e) from e

    logger.info("Deleted snapshot %s", snapshot_id)
    return True
