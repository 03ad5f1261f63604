"""
Optimistic save/unsave toggling.

A toggle flips the local cache first so the UI updates immediately, then
asks the remote store to apply the same change. Success keeps the flip;
failure rolls it back, except for the failure that trips the circuit
breaker, whose change is kept as the first local-only edit. While the
breaker is open, toggles never reach the network.

Only one toggle per campaign may be in flight. A second toggle for the
same campaign is rejected rather than queued, so confirm and rollback of
two requests for one id can never interleave.
"""

from typing import Optional

from ..errors import DegradedModeError, PersistenceError
from ..logging.config import get_sync_logger, log_toggle_outcome
from ..models.sync import (
    ClassifiedOutcome,
    OutcomeKind,
    PendingOperation,
    SyncDirection,
    ToggleResult,
    ToggleStatus,
)
from ..persistence.local_cache import LocalCache
from ..remote.base import BaseRemoteStore
from ..utils.ids import validate_campaign_id
from ..utils.time import utc_now
from .breaker import CircuitBreaker
from .classifier import ErrorClassifier
from .notifications import (
    FEATURE_DISABLED,
    LoggingNotificationSink,
    Notification,
    NotificationLevel,
    NotificationSink,
)

logger = get_sync_logger(__name__)

MESSAGES = {
    (ToggleStatus.CONFIRMED, SyncDirection.SAVE): "Campaign has been added to your saved list",
    (ToggleStatus.CONFIRMED, SyncDirection.UNSAVE): "Campaign has been removed from your saved list",
    (ToggleStatus.ALREADY_IN_STATE, SyncDirection.SAVE): "This campaign is already in your saved list",
    (ToggleStatus.ALREADY_IN_STATE, SyncDirection.UNSAVE): "The campaign is no longer in your saved list",
    (ToggleStatus.LOCAL_ONLY, SyncDirection.SAVE): "Campaign has been saved on this device only",
    (ToggleStatus.LOCAL_ONLY, SyncDirection.UNSAVE): "Campaign has been removed on this device only",
    (ToggleStatus.FAILED, SyncDirection.SAVE): "Unable to save this campaign. Please try again later.",
    (ToggleStatus.FAILED, SyncDirection.UNSAVE): "Unable to unsave this campaign. Please try again later.",
    (ToggleStatus.DISABLED, SyncDirection.SAVE): "The save feature has been temporarily disabled. Campaign saved on this device only.",
    (ToggleStatus.DISABLED, SyncDirection.UNSAVE): "The save feature has been temporarily disabled. Campaign removed on this device only.",
}

REJECTED_MESSAGE = "This campaign is still being updated. Please wait a moment."


class ToggleController:
    """Orchestrates single save/unsave requests."""

    def __init__(
        self,
        cache: LocalCache,
        remote: BaseRemoteStore,
        breaker: CircuitBreaker,
        classifier: Optional[ErrorClassifier] = None,
        notifier: Optional[NotificationSink] = None,
    ):
        self.cache = cache
        self.remote = remote
        self.breaker = breaker
        self.classifier = classifier or ErrorClassifier()
        self.notifier = notifier or LoggingNotificationSink()
        self._pending: dict[int, PendingOperation] = {}
        self._revisions: dict[int, int] = {}

    def pending_operations(self) -> dict[int, PendingOperation]:
        """Snapshot of in-flight operations keyed by campaign id."""
        return dict(self._pending)

    def is_pending(self, campaign_id: int) -> bool:
        return campaign_id in self._pending

    def revisions(self) -> dict[int, int]:
        """Snapshot of per-campaign local mutation counters."""
        return dict(self._revisions)

    def _set_saved(self, campaign_id: int, saved: bool) -> None:
        self.cache.set_saved(campaign_id, saved)
        self._revisions[campaign_id] = self._revisions.get(campaign_id, 0) + 1

    async def toggle(self, campaign_id: int) -> ToggleResult:
        """
        Flip the saved state of a campaign.

        Args:
            campaign_id: Campaign to save or unsave

        Returns:
            ToggleResult describing what happened; failures never raise

        Raises:
            InvalidCampaignIdError: If campaign_id is not a positive integer
        """
        campaign_id = validate_campaign_id(campaign_id)

        if campaign_id in self._pending:
            pending = self._pending[campaign_id]
            logger.info(
                "Toggle rejected, operation already in flight",
                campaign_id=campaign_id,
                pending_direction=pending.direction.value
            )
            return ToggleResult(
                campaign_id=campaign_id,
                status=ToggleStatus.REJECTED,
                saved=self.cache.contains(campaign_id),
                message=REJECTED_MESSAGE,
                direction=pending.direction,
            )

        was_saved = self.cache.contains(campaign_id)
        direction = SyncDirection.for_toggle(was_saved)
        return await self._apply(campaign_id, direction, was_saved)

    async def save(self, campaign_id: int) -> ToggleResult:
        """Save a campaign unless it is already saved locally."""
        return await self._ensure(campaign_id, SyncDirection.SAVE)

    async def unsave(self, campaign_id: int) -> ToggleResult:
        """Unsave a campaign unless it is already absent locally."""
        return await self._ensure(campaign_id, SyncDirection.UNSAVE)

    async def _ensure(self, campaign_id: int, direction: SyncDirection) -> ToggleResult:
        campaign_id = validate_campaign_id(campaign_id)
        if campaign_id not in self._pending and self.cache.contains(campaign_id) == direction.target_saved:
            return ToggleResult(
                campaign_id=campaign_id,
                status=ToggleStatus.ALREADY_IN_STATE,
                saved=direction.target_saved,
                message=MESSAGES[(ToggleStatus.ALREADY_IN_STATE, direction)],
                direction=direction,
            )
        return await self.toggle(campaign_id)

    async def _apply(self, campaign_id: int, direction: SyncDirection, was_saved: bool) -> ToggleResult:
        try:
            self._set_saved(campaign_id, direction.target_saved)
        except PersistenceError as e:
            logger.error("Optimistic update failed", campaign_id=campaign_id, error=str(e))
            return self._finish(campaign_id, direction, ToggleStatus.FAILED, error=e)

        if not self.breaker.before_attempt():
            return self._finish(
                campaign_id,
                direction,
                ToggleStatus.LOCAL_ONLY,
                error=DegradedModeError(
                    "Save feature is running local-only",
                    consecutive_failures=self.breaker.state.consecutive_failures
                ),
            )

        self._pending[campaign_id] = PendingOperation(
            campaign_id=campaign_id,
            direction=direction,
            started_at=utc_now(),
        )
        try:
            outcome = await self._call_remote(campaign_id, direction)
        finally:
            del self._pending[campaign_id]

        if self.breaker.is_open and outcome.is_failure:
            # Breaker tripped by another campaign while this call was in flight
            return self._finish(
                campaign_id, direction, ToggleStatus.LOCAL_ONLY, outcome=outcome,
                error=outcome.error
            )

        tripped = self.breaker.record_outcome(outcome)

        if outcome.is_success:
            status = (ToggleStatus.CONFIRMED if outcome.kind is OutcomeKind.SUCCESS
                      else ToggleStatus.ALREADY_IN_STATE)
            return self._finish(campaign_id, direction, status, outcome=outcome)

        if tripped:
            if self.breaker.consume_trip_notice():
                self.notifier.notify(FEATURE_DISABLED)
            return self._finish(
                campaign_id, direction, ToggleStatus.DISABLED, outcome=outcome,
                error=DegradedModeError(
                    "Save feature disabled after repeated failures",
                    consecutive_failures=self.breaker.state.consecutive_failures
                ),
            )

        self._rollback(campaign_id, was_saved)
        result = self._finish(
            campaign_id, direction, ToggleStatus.FAILED, outcome=outcome, error=outcome.error
        )
        self.notifier.notify(Notification(
            title="Error",
            description=result.message,
            level=NotificationLevel.DESTRUCTIVE,
        ))
        return result

    async def _call_remote(self, campaign_id: int, direction: SyncDirection) -> ClassifiedOutcome:
        """Run the remote write; unexpected exceptions become transient failures."""
        try:
            if direction is SyncDirection.SAVE:
                return await self.remote.save(campaign_id)
            return await self.remote.unsave(campaign_id)
        except Exception as e:
            logger.error(
                "Unexpected error from remote store",
                campaign_id=campaign_id,
                direction=direction.value,
                error=str(e)
            )
            return self.classifier.classify(direction, campaign_id, e)

    def _rollback(self, campaign_id: int, was_saved: bool) -> None:
        try:
            self._set_saved(campaign_id, was_saved)
        except PersistenceError as e:
            logger.error("Rollback failed", campaign_id=campaign_id, error=str(e))

    def _finish(
        self,
        campaign_id: int,
        direction: SyncDirection,
        status: ToggleStatus,
        outcome: Optional[ClassifiedOutcome] = None,
        error: Optional[Exception] = None,
    ) -> ToggleResult:
        saved = self.cache.contains(campaign_id)
        log_toggle_outcome(
            logger,
            campaign_id=campaign_id,
            direction=direction.value,
            status=status.value,
            saved=saved,
            context={
                "outcome": outcome.kind.value if outcome else None,
                "used_fallback": outcome.used_fallback if outcome else False,
                "consecutive_failures": self.breaker.state.consecutive_failures,
            }
        )
        return ToggleResult(
            campaign_id=campaign_id,
            status=status,
            saved=saved,
            message=MESSAGES[(status, direction)],
            direction=direction,
            outcome=outcome,
            error=error,
        )
