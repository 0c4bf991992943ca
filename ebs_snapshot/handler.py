import logging
import os

from .errors import ConfigurationError
from .models import Identity
from .runner import create_ec2_client, run

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def lambda_handler(event, context):
    """Run the snapshot policy from Lambda for the instance named in the event.

    Instance metadata is not reachable from Lambda, so ``instance_id`` and
    ``region`` must be supplied by the event (``region`` falls back to
    ``AWS_REGION``).
    """
    event = event or {}
    instance_id = event.get('instance_id')
    region = event.get('region') or os.environ.get('AWS_REGION')
    if not instance_id or not region:
        raise ConfigurationError("event must provide instance_id and region")

    retention_days = event.get('retention_days')
    if retention_days is None:
        retention_days = os.environ.get('BACKUP_RETENTION_DAYS', '30')
    retention_days = int(retention_days)
    if retention_days < 1:
        raise ConfigurationError(f"retention days must be >= 1, got {retention_days}")

    logger.info("Starting EBS snapshot job for instance %s in %s", instance_id, region)
    ec2 = create_ec2_client(region)
    summary = run(
        ec2,
        Identity(instance_id=instance_id, region=region),
        retention_days=retention_days,
        fail_fast=bool(event.get('fail_fast', False)),
    )
    logger.info("Job done. Snapshots created: %d, deleted: %d", summary.snapshots_created, summary.snapshots_deleted)
    return summary.to_dict()
