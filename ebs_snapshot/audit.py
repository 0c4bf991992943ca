from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from .errors import AuditLogError

SCRIPT_NAME = "ebs-snapshot"
LOG_FORMAT = f"[%(asctime)s {SCRIPT_NAME}] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d+%H:%M:%S"
NOISY_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


class AuditLog:
    """Append-only run log, trimmed to its last ``max_lines`` lines on entry."""

    def __init__(self, path, max_lines, *, level=logging.INFO, logger_name="ebs_snapshot", stream=None):
        self.path = Path(path)
        self.max_lines = max_lines
        self.level = level
        self.logger = logging.getLogger(logger_name)
        self.stream = stream
        self._handlers: list[logging.Handler] = []

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        self._ensure_writable()
        truncate_log(self.path, self.max_lines)

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        file_handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        stream_handler = logging.StreamHandler(self.stream or sys.stdout)
        for handler in (file_handler, stream_handler):
            handler.setFormatter(formatter)
            handler.setLevel(self.level)
            self.logger.addHandler(handler)
            self._handlers.append(handler)

        self.logger.setLevel(self.level)
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    def close(self):
        for handler in self._handlers:
            self.logger.removeHandler(handler)
            handler.close()
        self._handlers = []

    def _ensure_writable(self):
        try:
            self.path.touch(exist_ok=True)
        except OSError as e:
            raise AuditLogError(f"Cannot write to {self.path}. Check permissions or sudo access.") from e
        if not os.access(self.path, os.W_OK):
            raise AuditLogError(f"Cannot write to {self.path}. Check permissions or sudo access.")


def truncate_log(path, max_lines):
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            lines = handle.readlines()
    except FileNotFoundError:
        return
    if len(lines) <= max_lines:
        return
    with path.open("w", encoding="utf-8") as handle:
        handle.writelines(lines[-max_lines:])
