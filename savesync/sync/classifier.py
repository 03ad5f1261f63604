"""
Classification of failed save/unsave calls.

The backend reports "nothing to do" conditions inconsistently: a save of an
already-saved campaign answers 400 "Campaign already saved" and an unsave
of a missing one answers 400/404 "Saved campaign not found". These are
detected by case-insensitive substring matching on the payload message and
the body rendered as a string, layered over the status code. Anything not
recognized is a transient failure.
"""

from typing import Iterable, Optional

import structlog

from ..config.defaults import ClassifierParams
from ..errors import AmbiguousNoOpError, SaveSyncError, ServerError
from ..models.sync import ClassifiedOutcome, OutcomeKind, SyncDirection

logger = structlog.get_logger(__name__)


class ErrorClassifier:
    """Maps a failed remote call to a tagged outcome."""

    def __init__(self, params: Optional[ClassifierParams] = None):
        params = params or ClassifierParams()
        self.noop_patterns: dict[SyncDirection, tuple[str, ...]] = {
            SyncDirection.SAVE: self._normalize(params.save_noop_patterns),
            SyncDirection.UNSAVE: self._normalize(params.unsave_noop_patterns),
        }
        self.permanent_status_codes = frozenset(params.permanent_status_codes)

    @staticmethod
    def _normalize(patterns: Iterable[str]) -> tuple[str, ...]:
        return tuple(p.lower() for p in patterns if p)

    def success(
        self,
        direction: SyncDirection,
        campaign_id: int,
        endpoint: Optional[str] = None,
        used_fallback: bool = False
    ) -> ClassifiedOutcome:
        """Outcome for a 2xx response."""
        return ClassifiedOutcome(
            kind=OutcomeKind.SUCCESS,
            direction=direction,
            campaign_id=campaign_id,
            endpoint=endpoint,
            used_fallback=used_fallback,
        )

    def classify(
        self,
        direction: SyncDirection,
        campaign_id: int,
        error: Exception,
        endpoint: Optional[str] = None,
        used_fallback: bool = False
    ) -> ClassifiedOutcome:
        """
        Classify a failed call.

        Args:
            direction: Whether the call was a save or an unsave
            campaign_id: Campaign the call targeted
            error: Exception raised by the remote boundary
            endpoint: Endpoint path that failed
            used_fallback: Whether the legacy endpoint was involved

        Returns:
            AlreadyDesired, PermanentFailure or TransientFailure outcome
        """
        if isinstance(error, ServerError):
            pattern = self.match_noop(direction, error)
            if pattern is not None:
                noop = AmbiguousNoOpError(
                    f"Campaign {campaign_id} already in requested state ({direction.value})",
                    cause=error,
                    matched_pattern=pattern,
                    context={"status_code": error.status_code},
                )
                logger.info(
                    "Remote call reported no-op, treating as success",
                    campaign_id=campaign_id,
                    direction=direction.value,
                    status_code=error.status_code,
                    matched_pattern=pattern
                )
                return ClassifiedOutcome(
                    kind=OutcomeKind.ALREADY_DESIRED,
                    direction=direction,
                    campaign_id=campaign_id,
                    detail=str(error),
                    endpoint=endpoint,
                    used_fallback=used_fallback,
                    error=noop,
                )

            if error.status_code in self.permanent_status_codes:
                return ClassifiedOutcome(
                    kind=OutcomeKind.PERMANENT_FAILURE,
                    direction=direction,
                    campaign_id=campaign_id,
                    detail=str(error),
                    endpoint=endpoint,
                    used_fallback=used_fallback,
                    error=error,
                )

        if not isinstance(error, SaveSyncError):
            logger.warning(
                "Unexpected error type from remote call",
                campaign_id=campaign_id,
                error_type=type(error).__name__,
                error=str(error)
            )

        return ClassifiedOutcome(
            kind=OutcomeKind.TRANSIENT_FAILURE,
            direction=direction,
            campaign_id=campaign_id,
            detail=str(error) or type(error).__name__,
            endpoint=endpoint,
            used_fallback=used_fallback,
            error=error,
        )

    def match_noop(self, direction: SyncDirection, error: ServerError) -> Optional[str]:
        """Return the no-op pattern found in a 4xx error, if any."""
        if error.status_code >= 500:
            return None

        # Body only; a bare "404 Not Found" from a missing route is a failure
        haystacks = [error.body_text.lower()]
        message = error.body_message
        if message:
            haystacks.append(message.lower())

        for pattern in self.noop_patterns[direction]:
            if any(pattern in text for text in haystacks):
                return pattern
        return None
