"""Centralized logging configuration for pr-lineage.

Diagnostics go to stderr so the rendered tree on stdout stays clean. A rotating
file log can be enabled for long runs against large repositories.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Default configuration
DEFAULT_LOG_FILE = "pr-lineage.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

# Log format
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SENSITIVE_PATTERNS = [
    (r"ghp_[a-zA-Z0-9]{36}", "[GITHUB_TOKEN]"),  # GitHub PAT
    (r"gho_[a-zA-Z0-9]{36}", "[GITHUB_TOKEN]"),  # GitHub OAuth
    (r"github_pat_[a-zA-Z0-9_]{82}", "[GITHUB_TOKEN]"),  # Fine-grained PAT
    (r"Bearer [a-zA-Z0-9._-]+", "Bearer [REDACTED]"),
    (r"Basic [a-zA-Z0-9+/=]+", "Basic [REDACTED]"),
    (r"token=[a-zA-Z0-9._-]+", "token=[REDACTED]"),
]


class RedactingFormatter(logging.Formatter):
    """Formatter that strips credentials from every rendered record."""

    def format(self, record: logging.LogRecord) -> str:
        return sanitize_for_log(super().format(record))


def setup_logging(
    verbose: bool = False,
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Set up the prlineage logger.

    Args:
        verbose: Log at DEBUG level. Takes precedence over `level`.
        log_dir: Directory for a rotating log file. No file is written when
                 unset, unless the PRLINEAGE_LOG_DIR environment variable is set.
        log_file: Log file name. Defaults to 'pr-lineage.log'.
        max_bytes: Maximum size per log file before rotation. Defaults to 10MB.
        backup_count: Number of backup files to keep. Defaults to 5.
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to INFO.
               Can be overridden with PRLINEAGE_LOG_LEVEL environment variable.
        console: Whether to log to stderr. Defaults to True.

    Returns:
        The root prlineage logger.
    """
    if verbose:
        level = "DEBUG"
    elif level is None:
        level = os.environ.get("PRLINEAGE_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("prlineage")
    logger.setLevel(log_level)
    logger.propagate = False

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    formatter = RedactingFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_dir is None:
        log_dir = os.environ.get("PRLINEAGE_LOG_DIR")
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.debug("pr-lineage logging initialized (level=%s)", level)

    return logger


def truncate_output(output: str, max_length: int = 500) -> str:
    """Truncate long output (API response bodies) for logs and error messages.

    Args:
        output: The output string to truncate.
        max_length: Maximum length before truncation.

    Returns:
        Truncated string with indicator if truncated.
    """
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"... [truncated, {len(output) - max_length} more chars]"


def sanitize_for_log(text: str) -> str:
    """Remove sensitive data from log output.

    Args:
        text: Text that may contain sensitive data.

    Returns:
        Sanitized text safe for logging.
    """
    result = text
    for pat, replacement in _SENSITIVE_PATTERNS:
        result = re.sub(pat, replacement, result)
    return result
