"""
System failure error classifications.

These exceptions represent local failures (storage, configuration, caller
mistakes) rather than problems talking to the backend.
"""

from typing import Any, Optional

from .recovery import UnrecoverableError


class SystemFailureError(UnrecoverableError):
    """Base class for unrecoverable local failures."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.context = context or {}


class PersistenceError(SystemFailureError):
    """Local key/value storage read or write failure."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class ConfigurationError(SystemFailureError):
    """Configuration values failed validation."""

    def __init__(self, message: str, errors: Optional[list[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []


class InvalidCampaignIdError(SystemFailureError, ValueError):
    """Campaign identifiers must be positive integers."""

    def __init__(self, message: str, campaign_id: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.campaign_id = campaign_id
