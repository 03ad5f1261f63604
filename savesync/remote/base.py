"""Base class for saved-campaigns remote stores."""

from abc import ABC, abstractmethod
from typing import Any

import structlog

from ..models.sync import ClassifiedOutcome


class BaseRemoteStore(ABC):
    """Authoritative store of a user's saved campaigns."""

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(f"savesync.remote.{name}")
        self._call_count = 0
        self._fallback_count = 0
        self._error_count = 0

    @abstractmethod
    async def save(self, campaign_id: int) -> ClassifiedOutcome:
        """Mark a campaign saved on the server."""

    @abstractmethod
    async def unsave(self, campaign_id: int) -> ClassifiedOutcome:
        """Remove a campaign from the server's saved list."""

    @abstractmethod
    async def list_all(self) -> list[int]:
        """
        Fetch the authoritative saved campaign ids.

        Raises:
            RemoteListError: If the list cannot be fetched
        """

    async def aclose(self) -> None:
        """Release network resources."""

    def _record(self, outcome: ClassifiedOutcome) -> ClassifiedOutcome:
        self._call_count += 1
        if outcome.used_fallback:
            self._fallback_count += 1
        if outcome.is_failure:
            self._error_count += 1
        return outcome

    def get_stats(self) -> dict[str, Any]:
        """Get remote call statistics."""
        return {
            "name": self.name,
            "call_count": self._call_count,
            "fallback_count": self._fallback_count,
            "error_count": self._error_count,
            "success_rate": (
                (self._call_count - self._error_count) / self._call_count
                if self._call_count > 0 else 0.0
            )
        }

    def reset_stats(self) -> None:
        """Reset remote call statistics."""
        self._call_count = 0
        self._fallback_count = 0
        self._error_count = 0
