"""
Saved-campaigns synchronization data models.

This module defines the immutable records exchanged between the remote
store, the error classifier, the circuit breaker and the toggle controller.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SyncDirection(str, Enum):
    """Requested change to a campaign's saved membership."""
    SAVE = "save"
    UNSAVE = "unsave"

    @property
    def target_saved(self) -> bool:
        """Membership the direction asks for."""
        return self is SyncDirection.SAVE

    @classmethod
    def for_toggle(cls, was_saved: bool) -> "SyncDirection":
        """Direction that flips the current membership."""
        return cls.UNSAVE if was_saved else cls.SAVE


class OutcomeKind(str, Enum):
    """Tag of a classified remote call attempt."""
    SUCCESS = "success"
    ALREADY_DESIRED = "already_desired"
    TRANSIENT_FAILURE = "transient_failure"
    PERMANENT_FAILURE = "permanent_failure"


@dataclass(frozen=True)
class ClassifiedOutcome:
    """Result of one save or unsave call after classification."""

    kind: OutcomeKind
    direction: SyncDirection
    campaign_id: int
    detail: Optional[str] = None
    endpoint: Optional[str] = None                   # Endpoint that produced the outcome
    used_fallback: bool = False                      # Legacy endpoint was attempted
    error: Optional[Exception] = field(default=None, compare=False)

    @property
    def is_success(self) -> bool:
        """Requested state holds on the server."""
        return self.kind in (OutcomeKind.SUCCESS, OutcomeKind.ALREADY_DESIRED)

    @property
    def is_failure(self) -> bool:
        return not self.is_success


@dataclass(frozen=True)
class PendingOperation:
    """An in-flight remote call for a single campaign."""

    campaign_id: int
    direction: SyncDirection
    started_at: datetime


class BreakerStatus(str, Enum):
    """Circuit breaker status."""
    CLOSED = "closed"
    OPEN = "open"


@dataclass(frozen=True)
class BreakerState:
    """Snapshot of the save feature's circuit breaker."""

    consecutive_failures: int = 0
    status: BreakerStatus = BreakerStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self.status is BreakerStatus.OPEN

    def with_failure(self, failure_threshold: int) -> 'BreakerState':
        """Count one more consecutive failure, opening at the threshold."""
        failures = self.consecutive_failures + 1
        status = BreakerStatus.OPEN if failures >= failure_threshold else self.status
        return BreakerState(consecutive_failures=failures, status=status)

    def with_success(self) -> 'BreakerState':
        """Reset the failure count, keeping the status."""
        return BreakerState(consecutive_failures=0, status=self.status)


class ToggleStatus(str, Enum):
    """Final status of a toggle request as reported to the UI."""
    CONFIRMED = "confirmed"                          # Server applied the change
    ALREADY_IN_STATE = "already_in_state"            # Server already had that state
    LOCAL_ONLY = "local_only"                        # Breaker open, no remote call
    FAILED = "failed"                                # Rolled back after a failure
    DISABLED = "disabled"                            # This failure tripped the breaker
    REJECTED = "rejected"                            # Another toggle for the id is in flight


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a toggle request handed back to UI event handlers."""

    campaign_id: int
    status: ToggleStatus
    saved: bool                                      # Local membership after the toggle
    message: str
    direction: Optional[SyncDirection] = None
    outcome: Optional[ClassifiedOutcome] = None
    error: Optional[Exception] = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        """The change is in effect, remotely or locally."""
        return self.status in (
            ToggleStatus.CONFIRMED,
            ToggleStatus.ALREADY_IN_STATE,
            ToggleStatus.LOCAL_ONLY,
        )

    @property
    def remote_confirmed(self) -> bool:
        return self.status in (ToggleStatus.CONFIRMED, ToggleStatus.ALREADY_IN_STATE)


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of one reconciliation run."""

    success: bool
    saved_ids: frozenset[int]                        # LocalCache contents after the run
    preserved_pending: frozenset[int] = frozenset()  # Ids kept at their optimistic state
    skipped: bool = False                            # No fetch attempted (breaker open)
    error: Optional[Exception] = field(default=None, compare=False)
