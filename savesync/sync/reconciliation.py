"""
Reconciliation of the local saved set with the backend list.

On a successful fetch the server list replaces the local cache wholesale;
local-only edits made before the fetch are superseded. Campaigns with a
toggle in flight when the fetch started or finished, and campaigns the
toggle controller changed while it was running, keep their local
membership. On failure the cache is left untouched and the session is
flagged as running on offline data.
"""

from datetime import datetime
from typing import Callable, Mapping, Optional

from ..errors import PersistenceError, RemoteListError
from ..logging.config import get_sync_logger
from ..models.sync import PendingOperation, ReconciliationResult
from ..persistence.local_cache import LocalCache
from ..remote.base import BaseRemoteStore
from ..utils.time import seconds_since, utc_now
from .breaker import CircuitBreaker
from .notifications import OFFLINE_DATA, LoggingNotificationSink, NotificationSink

logger = get_sync_logger(__name__)

PendingProvider = Callable[[], Mapping[int, PendingOperation]]
RevisionProvider = Callable[[], Mapping[int, int]]


class ReconciliationJob:
    """Replaces the local saved set with the authoritative server list."""

    def __init__(
        self,
        cache: LocalCache,
        remote: BaseRemoteStore,
        breaker: Optional[CircuitBreaker] = None,
        pending: Optional[PendingProvider] = None,
        revisions: Optional[RevisionProvider] = None,
        notifier: Optional[NotificationSink] = None,
    ):
        self.cache = cache
        self.remote = remote
        self.breaker = breaker
        self.pending = pending or dict
        self.revisions = revisions or dict
        self.notifier = notifier or LoggingNotificationSink()
        self.degraded = False
        self.last_synced_at: Optional[datetime] = None
        self.last_attempt_at: Optional[datetime] = None
        self._offline_notified = False

    async def run(self) -> ReconciliationResult:
        """Fetch the server list and apply it; failures are absorbed."""
        self.last_attempt_at = utc_now()

        if self.breaker is not None and not self.breaker.before_attempt():
            logger.info("Reconciliation skipped, save feature is local-only")
            # The feature-disabled notice already told the user
            self.degraded = True
            return ReconciliationResult(
                success=False, saved_ids=self.cache.get(), skipped=True
            )

        pending_before = self.pending()
        revisions_before = self.revisions()

        try:
            server_ids = await self.remote.list_all()
        except RemoteListError as e:
            logger.warning(
                "Reconciliation failed, keeping local saved campaigns",
                local_count=len(self.cache),
                error=str(e)
            )
            self._mark_degraded()
            return ReconciliationResult(success=False, saved_ids=self.cache.get(), error=e)

        preserved = self._touched_during_fetch(pending_before, revisions_before)
        merged = set(server_ids)
        for campaign_id in preserved:
            if self.cache.contains(campaign_id):
                merged.add(campaign_id)
            else:
                merged.discard(campaign_id)

        try:
            self.cache.replace_all(merged)
        except PersistenceError as e:
            logger.error("Reconciliation could not persist server list", error=str(e))
            self._mark_degraded()
            return ReconciliationResult(success=False, saved_ids=self.cache.get(), error=e)

        self.degraded = False
        self._offline_notified = False
        self.last_synced_at = utc_now()
        logger.info(
            "Reconciled saved campaigns with server",
            server_count=len(server_ids),
            preserved_pending=len(preserved),
            saved_count=len(self.cache)
        )
        return ReconciliationResult(
            success=True,
            saved_ids=self.cache.get(),
            preserved_pending=frozenset(preserved),
        )

    def _touched_during_fetch(
        self,
        pending_before: Mapping[int, PendingOperation],
        revisions_before: Mapping[int, int],
    ) -> set[int]:
        """Ids whose local state the server list may not reflect yet."""
        touched = set(pending_before) | set(self.pending())
        for campaign_id, revision in self.revisions().items():
            if revisions_before.get(campaign_id) != revision:
                touched.add(campaign_id)
        return touched

    def is_stale(self, max_age_seconds: float) -> bool:
        """Whether the last successful sync is missing or older than max_age_seconds."""
        age = seconds_since(self.last_synced_at)
        return age is None or age > max_age_seconds

    def _mark_degraded(self) -> None:
        self.degraded = True
        if not self._offline_notified:
            self._offline_notified = True
            self.notifier.notify(OFFLINE_DATA)
