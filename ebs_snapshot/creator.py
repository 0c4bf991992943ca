import logging

from . import CREATED_BY_TAG, CREATED_BY_VALUE

logger = logging.getLogger(__name__)


def snapshot_description(volume, backup_date):
    name = volume.name or ''
    device = volume.device or ''
    return f"{name} ({device}) backup {backup_date.strftime('%Y-%m-%d')}"


def create_backup(ec2, volume, backup_date):
    """Snapshot a volume and tag the snapshot as taken by this automation.

    The tags are applied only after create_snapshot has returned the new id, so
    an untagged snapshot left behind by a failed run is never considered for
    clean-up.
    """
    name = volume.name or ''
    description = snapshot_description(volume, backup_date)

    resp = ec2.create_snapshot(
        VolumeId=volume.volume_id,
        Description=description,
    )
    snapshot_id = resp['SnapshotId']
    logger.info("New snapshot is %s for volume %s (%s)", snapshot_id, volume.volume_id, description)

    ec2.create_tags(
        Resources=[snapshot_id],
        Tags=[
            {'Key': CREATED_BY_TAG, 'Value': CREATED_BY_VALUE},
            {'Key': 'Name', 'Value': name},
        ]
    )
    logger.debug("Tagged snapshot %s with %s=%s", snapshot_id, CREATED_BY_TAG, CREATED_BY_VALUE)
    return snapshot_id
