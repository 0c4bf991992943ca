"""Retention decisions for snapshots taken by this automation.

Only snapshots tagged ``CreatedBy=AutomatedBackup`` are ever listed here;
manually created snapshots never become candidates, whatever their age.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from . import CREATED_BY_TAG, CREATED_BY_VALUE
from .models import Backup, Decision

logger = logging.getLogger(__name__)


def compute_cutoff(now: datetime, retention_days: int) -> datetime:
    """Return the instant at or before which automated snapshots expire."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - timedelta(days=retention_days)


def list_automated_backups(ec2, volume_id: str) -> list[Backup]:
    backups = []
    paginator = ec2.get_paginator('describe_snapshots')
    pages = paginator.paginate(
        OwnerIds=['self'],
        Filters=[
            {'Name': 'volume-id', 'Values': [volume_id]},
            {'Name': f'tag:{CREATED_BY_TAG}', 'Values': [CREATED_BY_VALUE]},
        ],
    )

    for page in pages:
        for snap in page.get('Snapshots', []):
            tags = {t['Key']: t.get('Value', '') for t in snap.get('Tags', [])}
            if tags.get(CREATED_BY_TAG) != CREATED_BY_VALUE:
                continue
            backups.append(
                Backup(
                    snapshot_id=snap['SnapshotId'],
                    volume_id=snap.get('VolumeId', volume_id),
                    start_time=parse_start_time(snap.get('StartTime')),
                    description=snap.get('Description', ''),
                    tags=tags,
                )
            )
    return backups


def classify(backups, cutoff: datetime) -> list[tuple[Backup, Decision]]:
    """Classify each backup against a single cutoff instant.

    A backup created exactly at the cutoff is expired. A backup with no usable
    start time is retained.
    """
    decisions = []
    for backup in backups:
        if backup.start_time is None:
            logger.warning(
                "Keeping snapshot %s (%s): start time is missing or unparsable",
                backup.snapshot_id,
                backup.description,
            )
            decisions.append((backup, Decision.RETAIN))
        elif backup.start_time <= cutoff:
            decisions.append((backup, Decision.EXPIRE))
        else:
            decisions.append((backup, Decision.RETAIN))
    return decisions


def parse_start_time(value) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
