"""Logging utilities for apidocs commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_LOGGER_NAME = "apidocs"
_CONSOLE_FORMAT = "[apidocs:%(stage)s] %(levelname)s %(message)s"
# Parsing fans out over worker threads, so the file sink records which one spoke.
_FILE_FORMAT = "%(asctime)s %(levelname)s %(stage)s [%(threadName)s]: %(message)s"


class _StageFilter(logging.Filter):
    """Expose the pipeline stage (the logger name below ``apidocs``) as ``%(stage)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        _, _, stage = record.name.partition(".")
        record.stage = stage or "cli"
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a stage logger such as ``apidocs.pipeline`` or ``apidocs.parsers.hack``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send build progress to stderr, keeping stdout for command results.

    ``log_file`` appends a full-detail copy of every record, DEBUG included,
    regardless of ``verbose``.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.addFilter(_StageFilter())
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(_StageFilter())
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
