"""
Error classification system for saved-campaigns synchronization.

This module provides the exception hierarchy for remote call failures,
local system failures and recovery categories.
"""

from .remote_failures import (
    SaveSyncError,
    NetworkError,
    RequestTimeoutError,
    ServerError,
    AmbiguousNoOpError,
    RemoteListError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    ConfigurationError,
    InvalidCampaignIdError,
)
from .recovery import (
    RecoverableError,
    UnrecoverableError,
    GracefulDegradationError,
    DegradedModeError,
)

__all__ = [
    # Remote Failures
    "SaveSyncError",
    "NetworkError",
    "RequestTimeoutError",
    "ServerError",
    "AmbiguousNoOpError",
    "RemoteListError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "ConfigurationError",
    "InvalidCampaignIdError",
    # Recovery Categories
    "RecoverableError",
    "UnrecoverableError",
    "GracefulDegradationError",
    "DegradedModeError",
]
