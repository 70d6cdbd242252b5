"""
Centralized logging configuration for cartstore.

Usage:
    from cartstore.logging import get_logger
    logger = get_logger(__name__)

    logger.info("Cart committed")
    logger.error("Stock lookup failed", exc_info=True)

The root handler is installed on import using LOG_LEVEL from the process
environment. Entry points that load a .env file afterwards call
configure_logging(settings.log_level) to apply the level found there.
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Marks the handler this module installed, so reconfiguration never touches
# handlers owned by the host application or the test runner
_HANDLER_NAME = "cartstore"


def _parse_level(level_name: str | None) -> int:
    """Map a level name to its numeric value, INFO when unknown."""
    level = logging.getLevelName((level_name or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: str | None = None) -> None:
    """
    Install the stdout handler (once) and apply the log level.

    Args:
        level_name: Level such as "DEBUG" or "warning"; defaults to LOG_LEVEL
            from the environment
    """
    level = _parse_level(level_name if level_name is not None else os.environ.get("LOG_LEVEL"))
    root = logging.getLogger()

    own = [h for h in root.handlers if h.get_name() == _HANDLER_NAME]
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        # Terse format when LOG_FORMAT=simple (CLI output), detailed otherwise
        simple = os.environ.get("LOG_FORMAT", "").lower() == "simple"
        handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if simple else LOG_FORMAT))
        root.addHandler(handler)
        own = [handler]
    elif not own:
        # Someone else configured logging; leave their root level alone
        return

    root.setLevel(level)
    for handler in own:
        handler.setLevel(level)

    # Every stock/product lookup is an HTTP request; keep httpx quiet
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    """Get or create a logger with the given name (typically __name__)."""
    return logging.getLogger(name)


def _escape_log_injection(value: str) -> str:
    """Escape newlines and control characters so a value cannot forge log entries."""
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def sanitize_id_for_logging(id_value: object) -> str:
    """
    Sanitize a product id for logging.

    Ids reach the store straight from the UI, so they are escaped and cut to
    8 characters before being written to a log line.
    """
    if id_value is None or id_value == "":
        return "N/A"
    safe_value = _escape_log_injection(str(id_value))
    return safe_value[:8]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """
    Sanitize free text (error details, notifier messages) for logging.

    Collaborator exceptions may echo response bodies, so the text is escaped
    and truncated to max_length with a trailing "...".
    """
    if not value:
        return "N/A"
    safe_value = _escape_log_injection(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "configure_logging",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
