"""Structured logging setup for chatweave."""

import os
from pathlib import Path
from typing import Any, Optional

import structlog


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def resolve_log_level(level: Optional[str] = None) -> str:
    """
    Pick the effective log level.

    An explicit ``level`` wins over ``CHATWEAVE_LOG_LEVEL``; anything that is
    not one of LOG_LEVELS falls back to INFO.
    """
    candidate = (level or os.environ.get("CHATWEAVE_LOG_LEVEL") or "INFO").upper()
    return candidate if candidate in LOG_LEVELS else "INFO"


def configure_logging(level: Optional[str] = None, log_file: Optional[Path] = None) -> Path:
    """
    Configure structlog for JSON logging to a file.

    By default logs go to ~/.cache/chatweave/logs/chatweave.log at the level
    given by the CHATWEAVE_LOG_LEVEL environment variable (INFO if unset).

    Log levels:
    - DEBUG: Fragment merges and appends, progress message updates
    - INFO: Requests added/removed, response lifecycle transitions, change set swaps
    - WARNING: Rejected post-terminal mutations, unrepresentable content
    - ERROR: Listener failures, producer errors

    Args:
        level: Overrides CHATWEAVE_LOG_LEVEL
        log_file: Overrides the default log location

    Returns:
        Path of the log file in use

    Example:
        export CHATWEAVE_LOG_LEVEL=DEBUG
        chatweave replay transcript.ndjson
        tail -f ~/.cache/chatweave/logs/chatweave.log | jq .
    """
    if log_file is None:
        log_file = Path.home() / ".cache" / "chatweave" / "logs" / "chatweave.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_log_level(level)),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file, "a")),
        cache_logger_on_first_use=True,
    )
    return log_file


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("response_completed", response_id="...", request_id="...")
    """
    return structlog.get_logger(name)
