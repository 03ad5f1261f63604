"""
Saved-campaigns session coordinator.

Wires storage, cache, remote store, classifier, circuit breaker, toggle
controller and reconciliation job from one configuration, and exposes the
operations UI event handlers call.

    UI event → ToggleController → LocalCache → RemoteStore → ErrorClassifier
             → CircuitBreaker → ToggleResult (+ notification)
"""

from pathlib import Path
from typing import Any, Optional, Union

import httpx
import structlog

from .config.defaults import SaveSyncConfig
from .config.loader import ConfigLoader
from .logging.config import configure_logging_from_params
from .models.sync import ReconciliationResult, ToggleResult
from .persistence.local_cache import LocalCache
from .persistence.storage import SqliteKeyValueStore
from .remote.auth import StaticTokenProvider, StorageTokenProvider
from .remote.base import BaseRemoteStore
from .remote.http_store import HttpRemoteStore
from .sync.breaker import CircuitBreaker
from .sync.classifier import ErrorClassifier
from .sync.controller import ToggleController
from .sync.notifications import LoggingNotificationSink, NotificationSink
from .sync.reconciliation import ReconciliationJob

logger = structlog.get_logger(__name__)


class SavedCampaignsSession:
    """
    One user's saved-campaigns state for the lifetime of a page/session.

    The circuit breaker lives and dies with the session; the cache outlives
    it through the persisted storage.
    """

    def __init__(
        self,
        config: SaveSyncConfig,
        storage: SqliteKeyValueStore,
        remote: BaseRemoteStore,
        classifier: Optional[ErrorClassifier] = None,
        notifier: Optional[NotificationSink] = None,
    ) -> None:
        self.config = config
        self.storage = storage
        self.notifier = notifier or LoggingNotificationSink()
        self.classifier = classifier or ErrorClassifier(config.classifier)
        self.cache = LocalCache(storage, storage_key=config.cache.storage_key)
        self.remote = remote
        self.breaker = CircuitBreaker(config.breaker)
        self.controller = ToggleController(
            cache=self.cache,
            remote=self.remote,
            breaker=self.breaker,
            classifier=self.classifier,
            notifier=self.notifier,
        )
        self.reconciliation = ReconciliationJob(
            cache=self.cache,
            remote=self.remote,
            breaker=self.breaker,
            pending=self.controller.pending_operations,
            revisions=self.controller.revisions,
            notifier=self.notifier,
        )
        self._started = False

        logger.info(
            "Saved campaigns session initialized",
            base_url=config.remote.base_url,
            storage_path=config.cache.storage_path,
            cached_count=len(self.cache)
        )

    @classmethod
    def from_config(
        cls,
        config: Optional[SaveSyncConfig] = None,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[dict[str, Any]] = None,
        notifier: Optional[NotificationSink] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        token: Optional[str] = None,
        setup_logging: bool = False,
    ) -> "SavedCampaignsSession":
        """
        Build a session and all of its collaborators.

        Args:
            config: Ready configuration; loaded from config_dir/overrides when None
            config_dir: Directory holding ``savesync.yaml``
            overrides: Highest-precedence configuration values
            notifier: Sink for user-facing notifications
            http_client: Pre-built httpx client (tests, shared connection pools)
            token: Bearer token; read from storage when None
            setup_logging: Configure structlog from the logging section
        """
        if config is None:
            config = ConfigLoader.create(config_dir).load(overrides)

        if setup_logging:
            configure_logging_from_params(config.logging)

        storage = SqliteKeyValueStore(config.cache.storage_path)
        classifier = ErrorClassifier(config.classifier)
        token_provider = (StaticTokenProvider(token) if token is not None
                          else StorageTokenProvider(storage))
        remote = HttpRemoteStore(
            config=config.remote,
            classifier=classifier,
            token_provider=token_provider,
            http_client=http_client,
        )
        return cls(
            config=config,
            storage=storage,
            remote=remote,
            classifier=classifier,
            notifier=notifier,
        )

    async def start(self) -> ReconciliationResult:
        """Run the once-per-load reconciliation."""
        self._started = True
        return await self.reconciliation.run()

    async def refresh_if_stale(self) -> Optional[ReconciliationResult]:
        """Reconcile again when the last sync is older than the configured age."""
        if not self.reconciliation.is_stale(self.config.reconciliation.stale_after_seconds):
            return None
        return await self.reconciliation.run()

    async def toggle(self, campaign_id: int) -> ToggleResult:
        return await self.controller.toggle(campaign_id)

    async def unsave(self, campaign_id: int) -> ToggleResult:
        """Remove a campaign from the saved list (saved-list page action)."""
        return await self.controller.unsave(campaign_id)

    def is_saved(self, campaign_id: int) -> bool:
        return self.cache.contains(campaign_id)

    def saved_ids(self) -> list[int]:
        return sorted(self.cache.get())

    @property
    def save_enabled(self) -> bool:
        """False once the circuit breaker has opened."""
        return not self.breaker.is_open

    @property
    def degraded(self) -> bool:
        """Saved data is not confirmed by the server (offline or local-only)."""
        return self.breaker.is_open or self.reconciliation.degraded

    def get_stats(self) -> dict[str, Any]:
        """Snapshot for dashboards and diagnostics."""
        breaker_state = self.breaker.state
        last_synced = self.reconciliation.last_synced_at
        return {
            "saved_count": len(self.cache),
            "save_enabled": self.save_enabled,
            "degraded": self.degraded,
            "started": self._started,
            "breaker_status": breaker_state.status.value,
            "consecutive_failures": breaker_state.consecutive_failures,
            "breaker_trips": self.breaker.trip_count,
            "pending_count": len(self.controller.pending_operations()),
            "last_synced_at": last_synced.isoformat() if last_synced else None,
            "remote": self.remote.get_stats(),
        }

    async def aclose(self) -> None:
        await self.remote.aclose()
        self.storage.close()

    async def __aenter__(self) -> "SavedCampaignsSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
