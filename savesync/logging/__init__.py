"""
Logging configuration and utilities for the saved-campaigns sync engine.
"""
from .config import (
    configure_logging,
    configure_logging_from_params,
    get_logger,
    get_sync_logger,
)

__all__ = [
    "configure_logging",
    "configure_logging_from_params",
    "get_logger",
    "get_sync_logger",
]
