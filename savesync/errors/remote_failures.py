"""
Remote call error classifications for the saved-campaigns backend.

Every failure of a save, unsave or list call is converted into one of these
exceptions at the HTTP boundary so the classifier never has to look at
transport-specific exception types.
"""

import json
from typing import Any, Optional

from .recovery import RecoverableError


class SaveSyncError(RecoverableError):
    """Base class for all saved-campaigns synchronization errors."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.context = context or {}


class NetworkError(SaveSyncError):
    """Request was sent but no response was received."""

    def __init__(self, message: str, endpoint: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.endpoint = endpoint


class RequestTimeoutError(NetworkError):
    """Request exceeded the fixed per-call timeout."""

    def __init__(self, message: str, timeout_seconds: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timeout_seconds = timeout_seconds


class ServerError(SaveSyncError):
    """Server answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, body: Any = None,
                 endpoint: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint

    @property
    def body_text(self) -> str:
        """Response body rendered as a single string for pattern matching."""
        if self.body is None:
            return ""
        if isinstance(self.body, str):
            return self.body
        try:
            return json.dumps(self.body, default=str)
        except (TypeError, ValueError):
            return str(self.body)

    @property
    def body_message(self) -> Optional[str]:
        """The ``message`` (or ``error``) field of a JSON object body."""
        if isinstance(self.body, dict):
            for key in ("message", "error"):
                value = self.body.get(key)
                if isinstance(value, str):
                    return value
        return None


class AmbiguousNoOpError(SaveSyncError):
    """Server reported that the requested state already holds.

    Always treated as success; it never counts against the circuit breaker.
    """

    def __init__(self, message: str, cause: Optional[ServerError] = None,
                 matched_pattern: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.cause = cause
        self.matched_pattern = matched_pattern


class RemoteListError(SaveSyncError):
    """Fetching the authoritative saved list failed."""

    def __init__(self, message: str, cause: Optional[SaveSyncError] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.cause = cause
