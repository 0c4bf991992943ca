from __future__ import annotations

import logging
import sys

from . import identity as identity_resolver
from .audit import AuditLog
from .config import load_config
from .errors import AuditLogError, ConfigurationError, DependencyError, IdentityError
from .models import Identity
from .runner import check_dependencies, create_ec2_client, run

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 64
EXIT_DEPENDENCY = 70


def resolve_identity(config, session=None):
    if config.instance_id and config.region:
        return Identity(instance_id=config.instance_id, region=config.region)

    resolved = identity_resolver.resolve(session=session)
    return Identity(
        instance_id=config.instance_id or resolved.instance_id,
        region=config.region or resolved.region,
    )


def main(argv=None, *, now=None) -> int:
    try:
        config = load_config(argv)
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        session = check_dependencies()
    except DependencyError as e:
        print(e, file=sys.stderr)
        return EXIT_DEPENDENCY

    level = logging.DEBUG if config.verbose else logging.INFO
    try:
        audit = AuditLog(config.log_path, config.log_max_lines, level=level)
        audit.open()
    except AuditLogError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        try:
            identity = resolve_identity(config)
        except IdentityError as e:
            logger.error("Cannot determine which instance this is: %s", e)
            return EXIT_FAILURE

        ec2 = create_ec2_client(identity.region, session=session)
        try:
            summary = run(
                ec2,
                identity,
                retention_days=config.retention_days,
                now=now,
                fail_fast=config.fail_fast,
                max_workers=config.max_workers,
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("Run aborted: %s", e)
            return EXIT_FAILURE

        if summary.failure_count:
            logger.error("%d operation(s) failed; see messages above.", summary.failure_count)
            return EXIT_FAILURE
        return EXIT_OK
    finally:
        audit.close()
