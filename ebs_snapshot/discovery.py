import logging

from .models import Volume

logger = logging.getLogger(__name__)


def discover(ec2, instance_id):
    """Return the volumes attached to instance_id that carry a Name tag."""
    volumes = []
    paginator = ec2.get_paginator('describe_volumes')
    pages = paginator.paginate(
        Filters=[
            {'Name': 'attachment.instance-id', 'Values': [instance_id]},
            {'Name': 'tag-key', 'Values': ['Name']},
        ]
    )

    for page in pages:
        for vol in page.get('Volumes', []):
            volume = _to_volume(vol, instance_id)
            if volume is None:
                logger.debug("Skipping volume %s: not a named volume of %s", vol.get('VolumeId'), instance_id)
                continue
            logger.info("Volume ID is %s (Name=%s, Device=%s)", volume.volume_id, volume.name, volume.device)
            volumes.append(volume)

    if not volumes:
        logger.info("No named volumes attached to %s", instance_id)
    return volumes


def _to_volume(vol, instance_id):
    tags = vol.get('Tags', [])
    if not _has_tag(tags, 'Name'):
        return None

    attachment = _attachment_for(vol.get('Attachments', []), instance_id)
    if attachment is None:
        return None

    return Volume(
        volume_id=vol['VolumeId'],
        name=_get_name_tag_value(tags),
        device=attachment.get('Device'),
        instance_id=instance_id,
    )


def _attachment_for(attachments, instance_id):
    for a in attachments:
        if a.get('InstanceId') == instance_id:
            return a
    return None


def _has_tag(tags, key):
    return any(t.get('Key') == key for t in tags)


def _get_name_tag_value(tags):
    for t in tags:
        if t.get('Key') == 'Name':
            return t.get('Value')
    return None
