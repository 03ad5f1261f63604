"""
Circuit breaker for the saved-campaigns remote sync.

One breaker guards the whole save feature. Consecutive failed toggles are
counted across all campaigns; at the threshold the breaker opens and stays
open for the rest of the session unless reset explicitly. While open, the
toggle controller works against the local cache only.
"""

from typing import Optional

from ..config.defaults import BreakerParams
from ..logging.config import get_sync_logger, log_breaker_transition
from ..models.sync import BreakerState, BreakerStatus, ClassifiedOutcome

logger = get_sync_logger(__name__)


class CircuitBreaker:
    """Consecutive-failure circuit breaker with session-lifetime Open state."""

    def __init__(self, params: Optional[BreakerParams] = None):
        self.failure_threshold = (params or BreakerParams()).failure_threshold
        self._state = BreakerState()
        self._trip_notice_pending = False
        self.trip_count = 0

    @property
    def state(self) -> BreakerState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    def before_attempt(self) -> bool:
        """Whether a remote call may be attempted right now."""
        allowed = not self._state.is_open
        if not allowed:
            logger.debug(
                "Remote call suppressed by open circuit breaker",
                consecutive_failures=self._state.consecutive_failures
            )
        return allowed

    def record_outcome(self, outcome: ClassifiedOutcome) -> bool:
        """
        Update the breaker from a classified outcome.

        Args:
            outcome: Outcome of a remote call that was allowed to run

        Returns:
            True if this outcome tripped the breaker from Closed to Open
        """
        if self._state.is_open:
            # Calls started before the trip may still complete; ignore them
            return False

        previous = self._state

        if outcome.is_success:
            self._state = previous.with_success()
            if previous.consecutive_failures:
                logger.info(
                    "Circuit breaker failure count reset",
                    previous_failures=previous.consecutive_failures,
                    campaign_id=outcome.campaign_id
                )
            return False

        self._state = previous.with_failure(self.failure_threshold)
        logger.info(
            "Circuit breaker recorded failure",
            consecutive_failures=self._state.consecutive_failures,
            failure_threshold=self.failure_threshold,
            campaign_id=outcome.campaign_id,
            outcome=outcome.kind.value
        )

        if self._state.is_open:
            self.trip_count += 1
            self._trip_notice_pending = True
            log_breaker_transition(
                logger,
                from_status=previous.status.value,
                to_status=self._state.status.value,
                consecutive_failures=self._state.consecutive_failures,
                trigger=outcome.kind.value,
                context={"campaign_id": outcome.campaign_id, "detail": outcome.detail}
            )
            return True

        return False

    def consume_trip_notice(self) -> bool:
        """True exactly once after each trip, for the one-time UI notice."""
        pending = self._trip_notice_pending
        self._trip_notice_pending = False
        return pending

    def reset(self) -> None:
        """Manually close the breaker and clear the failure count."""
        previous = self._state
        self._state = BreakerState(consecutive_failures=0, status=BreakerStatus.CLOSED)
        self._trip_notice_pending = False
        if previous.is_open:
            log_breaker_transition(
                logger,
                from_status=previous.status.value,
                to_status=self._state.status.value,
                consecutive_failures=previous.consecutive_failures,
                trigger="manual_reset"
            )
