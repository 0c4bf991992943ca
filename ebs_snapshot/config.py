from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path

from . import __version__
from .errors import ConfigurationError

DEFAULT_RETENTION_DAYS = 30
DEFAULT_LOG_PATH = "/var/log/ebs-backup.log"
DEFAULT_LOG_MAX_LINES = 5000

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppConfig:
    retention_days: int = DEFAULT_RETENTION_DAYS
    log_path: Path = Path(DEFAULT_LOG_PATH)
    log_max_lines: int = DEFAULT_LOG_MAX_LINES
    region: str | None = None
    instance_id: str | None = None
    fail_fast: bool = False
    max_workers: int = 1
    verbose: bool = False


def build_parser():
    parser = argparse.ArgumentParser(
        prog="ebs-snapshot",
        description=(
            "Snapshot every named EBS volume attached to this instance and delete "
            "snapshots taken by this tool that are older than the retention window."
        ),
    )
    parser.add_argument("--retention-days", type=int, help="Days to keep automated snapshots (default 30).")
    parser.add_argument("--log-file", type=Path, help=f"Audit log path (default {DEFAULT_LOG_PATH}).")
    parser.add_argument("--log-max-lines", type=int, help="Lines of audit log kept across runs (default 5000).")
    parser.add_argument("--region", help="Region override; resolved from instance metadata when omitted.")
    parser.add_argument("--instance-id", help="Instance id override; resolved from instance metadata when omitted.")
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=None,
        help="Abort the whole run on the first per-volume failure.",
    )
    parser.add_argument("--max-workers", type=int, help="Volumes processed in parallel (default 1).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_config(argv=None, environ=None) -> AppConfig:
    """Resolve configuration from command-line flags, then environment, then defaults."""
    environ = os.environ if environ is None else environ
    args = build_parser().parse_args(argv)

    retention_days = args.retention_days
    if retention_days is None:
        retention_days = _env_int(environ, "BACKUP_RETENTION_DAYS", DEFAULT_RETENTION_DAYS)

    log_max_lines = args.log_max_lines
    if log_max_lines is None:
        log_max_lines = _env_int(environ, "BACKUP_LOG_MAX_LINES", DEFAULT_LOG_MAX_LINES)

    max_workers = args.max_workers
    if max_workers is None:
        max_workers = _env_int(environ, "BACKUP_MAX_WORKERS", 1)

    fail_fast = args.fail_fast
    if fail_fast is None:
        fail_fast = environ.get("BACKUP_FAIL_FAST", "").strip().lower() in _TRUE_VALUES

    config = AppConfig(
        retention_days=retention_days,
        log_path=args.log_file or Path(environ.get("BACKUP_LOG") or DEFAULT_LOG_PATH),
        log_max_lines=log_max_lines,
        region=args.region or environ.get("BACKUP_REGION") or None,
        instance_id=args.instance_id or environ.get("BACKUP_INSTANCE_ID") or None,
        fail_fast=fail_fast,
        max_workers=max_workers,
        verbose=args.verbose,
    )
    validate_config(config)
    return config


def validate_config(config: AppConfig) -> None:
    if config.retention_days < 1:
        raise ConfigurationError(f"retention days must be >= 1, got {config.retention_days}")
    if config.log_max_lines < 1:
        raise ConfigurationError(f"log max lines must be >= 1, got {config.log_max_lines}")
    if config.max_workers < 1:
        raise ConfigurationError(f"max workers must be >= 1, got {config.max_workers}")


def _env_int(environ, name, default):
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
