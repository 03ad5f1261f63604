"""
Centralized logging configuration for the saved-campaigns sync engine.

This module provides standardized logging configuration using structlog
for all components. Toggle outcomes and circuit breaker transitions are
emitted through the helpers below so they share one audit format.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                       structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_sync_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound to the saved-campaigns subsystem.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for sync decisions
    """
    logger = get_logger(name)

    return logger.bind(
        subsystem="saved_campaigns",
        audit_trail=True
    )


def log_toggle_outcome(
    logger: FilteringBoundLogger,
    campaign_id: int,
    direction: str,
    status: str,
    saved: bool,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the end of a toggle request with standardized format.

    Args:
        logger: Structlog logger instance
        campaign_id: Campaign the toggle acted on
        direction: "save" or "unsave"
        status: Final toggle status value
        saved: Local membership after the toggle
        context: Additional context data
    """
    bound_logger = logger.bind(
        campaign_id=campaign_id,
        direction=direction,
        toggle_status=status,
        saved=saved,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if status in ("failed", "disabled"):
        bound_logger.warning("Toggle failed")
    else:
        bound_logger.info("Toggle completed")


def log_breaker_transition(
    logger: FilteringBoundLogger,
    from_status: str,
    to_status: str,
    consecutive_failures: int,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a circuit breaker status change with standardized format.

    Args:
        logger: Structlog logger instance
        from_status: Previous breaker status
        to_status: New breaker status
        consecutive_failures: Failure count at transition time
        trigger: What caused the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        from_status=from_status,
        to_status=to_status,
        consecutive_failures=consecutive_failures,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if to_status == "open":
        bound_logger.warning("Circuit breaker transition")
    else:
        bound_logger.info("Circuit breaker transition")


def configure_logging_from_params(params: Any) -> None:
    """Apply a ``LoggingParams`` section (level, format_json)."""
    configure_logging(level=params.level, format_json=params.format_json)
