"""Structured logging configuration for netsweep.

Uses structlog for JSON-formatted, structured logging suitable for
log aggregation when scans run unattended.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog


def get_utc_timestamp() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add UTC timestamp to log events."""
    event_dict["timestamp"] = get_utc_timestamp()
    return event_dict


def add_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add default context fields to log events."""
    event_dict.setdefault("service", "netsweep")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> Any:
    """Configure structured logging.
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON logs for machine parsing
        log_file: Optional file path for logging
        
    Returns:
        Configured structlog logger
    """
    numeric_level = getattr(logging, level.upper())
    
    processors = [
        structlog.stdlib.filter_by_level,
        add_timestamp,
        add_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    
    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    
    # Replace handlers installed by an earlier call
    for old_handler in [h for h in root_logger.handlers if getattr(h, "_netsweep", False)]:
        root_logger.removeHandler(old_handler)
        old_handler.close()
    
    # Logs go to stderr so scan output on stdout stays parseable
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler._netsweep = True
    root_logger.addHandler(handler)
    
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler._netsweep = True
        root_logger.addHandler(file_handler)
    
    return structlog.get_logger("netsweep")


def get_logger(name: str = "netsweep") -> Any:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)


def log_target_event(
    event: str,
    target: str,
    **kwargs: Any,
) -> None:
    """Log a target-related event with standard fields.
    
    Args:
        event: Event name (e.g., "target_resolved", "target_failed")
        target: Raw target specification
        **kwargs: Additional event data
    """
    logger = get_logger("netsweep.targets")
    logger.info(event, target=target, **kwargs)
