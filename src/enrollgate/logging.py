"""Logging setup shared by the API, orchestrator and State Store.

All components log under the `enrollgate` logger into one rotating file,
optionally mirrored to stderr. Two helpers keep log lines safe to write:
`truncate_output` for long violation summaries and `sanitize_for_log` for
database error text that may embed connection credentials.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "enrollgate"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "enrollgate.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_CREDENTIAL_PATTERNS = [
    # scheme[+driver]://user:password@host
    (re.compile(r"(\w+(?:\+\w+)?://[^:/@\s]+):[^@\s]+@"), r"\1:[REDACTED]@"),
    # libpq DSN or query-string password
    (re.compile(r"password=[^&\s;]+"), "password=[REDACTED]"),
]


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the `enrollgate` logger; safe to call more than once.

    `log_dir` and `level` fall back to ENROLLGATE_LOG_DIR and
    ENROLLGATE_LOG_LEVEL, then to 'logs' and INFO. An unknown level name
    means INFO. Handlers from a previous call are closed and replaced.

    Returns:
        The `enrollgate` logger.
    """
    log_path = Path(log_dir or os.environ.get("ENROLLGATE_LOG_DIR", DEFAULT_LOG_DIR))
    log_path.mkdir(parents=True, exist_ok=True)
    log_path = log_path / log_file

    level_name = (level or os.environ.get("ENROLLGATE_LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()
    log_level = logging.getLevelNamesMapping().get(level_name, logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info("Logging to %s at %s", log_path, logging.getLevelName(log_level))
    return logger


def truncate_output(output: str, max_length: int = 2000) -> str:
    """Cut `output` to `max_length` chars, noting how much was dropped."""
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"... [truncated, {len(output) - max_length} more chars]"


def sanitize_for_log(text: str) -> str:
    """Redact passwords in database URLs and connection strings."""
    for pattern, replacement in _CREDENTIAL_PATTERNS:
        text = pattern.sub(replacement, text)
    return text
