"""Logging configuration for GitHub Release Monitor.

Provides centralized logging with secret redaction so GitHub tokens are
never written to the console or log files. Errors always reach stderr;
informational messages reach the console only in verbose mode.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional


APP_LOGGER_NAME = "release_monitor"

# Secret patterns to redact from logs
SECRET_PATTERNS = [
    # Authorization headers ("Bearer x", "token x")
    (re.compile(r'(authorization["\'\s:=]+(?:bearer|token)\s+)[^\s,}\]"\']+', re.IGNORECASE), r'\1[REDACTED]'),
    # Tokens in query strings or key/value dumps
    (re.compile(r'(token["\']?\s*[:=]\s*["\']?)[^\s,&}\]"\']+', re.IGNORECASE), r'\1[REDACTED]'),
    # GitHub token formats
    (re.compile(r'\b(?:ghp|gho|ghu|ghs|ghr)_[A-Za-z0-9]{20,}\b'), '[REDACTED]'),
    (re.compile(r'\bgithub_pat_[A-Za-z0-9_]{20,}\b'), '[REDACTED]'),
]


def redact(message: str) -> str:
    """Remove credentials from a message."""
    for pattern, replacement in SECRET_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class SecretRedactingFormatter(logging.Formatter):
    """Custom formatter that redacts secrets from log messages."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record, redacting any secrets."""
        return redact(super().format(record))


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure application logging with secret redaction.

    Args:
        verbose: Show informational messages on the console
        log_file: Optional file path for log output
        console: Whether to output to stderr (default True)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Clear any existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = SecretRedactingFormatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler: errors always, everything else only when verbose
    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.INFO if verbose else logging.ERROR)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (default is app logger)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
