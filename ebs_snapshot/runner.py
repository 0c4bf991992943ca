from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import boto3
from botocore.config import Config

from .creator import create_backup
from .discovery import discover
from .errors import DependencyError, ExpirationError
from .expiration import expire
from .models import Decision, RunSummary, VolumeOutcome
from .retention import classify, compute_cutoff, list_automated_backups

logger = logging.getLogger(__name__)

BOTO_CONFIG = Config(retries={"max_attempts": 5, "mode": "standard"})


def check_dependencies(session=None):
    """Fail before any EC2 call when no AWS credentials can be resolved."""
    session = session or boto3.session.Session()
    if session.get_credentials() is None:
        raise DependencyError("In order to use this tool, AWS credentials must be configured.")
    return session


def create_ec2_client(region, session=None):
    session = session or boto3.session.Session()
    return session.client("ec2", region_name=region, config=BOTO_CONFIG)


def run(ec2, identity, *, retention_days, now=None, fail_fast=False, max_workers=1) -> RunSummary:
    """Snapshot every discovered volume, then expire old automated snapshots.

    ``now`` is read once; the snapshot date and the retention cutoff of the
    whole run derive from it.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = compute_cutoff(now, retention_days)
    logger.info(
        "Starting EBS snapshot run for %s in %s (retention %d days, cutoff %s)",
        identity.instance_id,
        identity.region,
        retention_days,
        cutoff.isoformat(),
    )

    summary = RunSummary(instance_id=identity.instance_id, region=identity.region, cutoff=cutoff)
    volumes = discover(ec2, identity.instance_id)
    if not volumes:
        logger.info("Nothing to do.")
        return summary

    outcomes = {volume.volume_id: VolumeOutcome(volume_id=volume.volume_id) for volume in volumes}
    summary.outcomes = list(outcomes.values())

    def snapshot_stage(volume):
        _snapshot_volume(ec2, volume, now, outcomes[volume.volume_id], fail_fast)

    def cleanup_stage(volume):
        _cleanup_volume(ec2, volume, cutoff, outcomes[volume.volume_id], fail_fast)

    _for_each(snapshot_stage, volumes, max_workers)
    _for_each(cleanup_stage, volumes, max_workers)

    logger.info(
        "Run finished: %d snapshots created, %d deleted, %d failures",
        summary.snapshots_created,
        summary.snapshots_deleted,
        summary.failure_count,
    )
    return summary


def _snapshot_volume(ec2, volume, now, outcome, fail_fast):
    try:
        outcome.snapshot_id = create_backup(ec2, volume, now.date())
    except Exception as e:  # pylint: disable=broad-except
        logger.exception("Failed to snapshot volume %s: %s", volume.volume_id, e)
        outcome.failures.append(f"snapshot: {_error_message(e)}")
        if fail_fast:
            raise


def _cleanup_volume(ec2, volume, cutoff, outcome, fail_fast):
    try:
        backups = list_automated_backups(ec2, volume.volume_id)
    except Exception as e:  # pylint: disable=broad-except
        logger.exception("Failed to list snapshots of volume %s: %s", volume.volume_id, e)
        outcome.failures.append(f"list: {_error_message(e)}")
        if fail_fast:
            raise
        return

    for backup, decision in classify(backups, cutoff):
        logger.info("Checking %s...", backup.snapshot_id)
        if decision is Decision.RETAIN:
            logger.info("Keeping snapshot %s (%s).", backup.snapshot_id, backup.description)
            outcome.retained.append(backup.snapshot_id)
            continue

        logger.info("DELETING snapshot %s (%s) ...", backup.snapshot_id, backup.description)
        try:
            expire(ec2, backup.snapshot_id)
        except ExpirationError as e:
            logger.error("%s", e)
            outcome.failures.append(f"delete: {e}")
            if fail_fast:
                raise
            continue
        outcome.deleted.append(backup.snapshot_id)


def _for_each(func, items, max_workers):
    if max_workers <= 1 or len(items) <= 1:
        for item in items:
            func(item)
        return

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(func, item) for item in items]
        for f in futures:
            f.result()


def _error_message(error):
    message = str(error).strip()
    return message or error.__class__.__name__
