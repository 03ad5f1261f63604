"""
Persisted set of saved campaign ids.

The cache is the offline source of truth for the saved-campaigns feature.
It is mutated only by the toggle controller and the reconciliation job and
every mutation is written through to storage before the call returns.
"""

import json
from typing import Iterable, Iterator

import structlog

from ..errors import PersistenceError
from ..utils.ids import is_campaign_id, validate_campaign_id
from .storage import SqliteKeyValueStore

logger = structlog.get_logger(__name__)

DEFAULT_STORAGE_KEY = "brandconnect_saved_campaigns"


class LocalCache:
    """Write-through cache of saved campaign ids."""

    def __init__(self, storage: SqliteKeyValueStore, storage_key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.storage_key = storage_key
        self._ids: frozenset[int] = self._load()

    def _load(self) -> frozenset[int]:
        """Read the persisted id list; unreadable data counts as empty."""
        try:
            raw = self.storage.get(self.storage_key)
        except PersistenceError as e:
            logger.error("Error reading saved campaigns from storage", error=str(e))
            return frozenset()

        if raw is None:
            return frozenset()

        try:
            parsed = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.error(
                "Discarding unreadable saved campaigns",
                storage_key=self.storage_key,
                error=str(e)
            )
            return frozenset()

        if not isinstance(parsed, list):
            logger.error(
                "Discarding saved campaigns with unexpected shape",
                storage_key=self.storage_key,
                value_type=type(parsed).__name__
            )
            return frozenset()

        ids = frozenset(item for item in parsed if is_campaign_id(item))
        if len(ids) != len(parsed):
            logger.warning(
                "Dropped invalid saved campaign entries",
                storage_key=self.storage_key,
                dropped=len(parsed) - len(ids)
            )

        logger.debug("Loaded saved campaigns", count=len(ids))
        return ids

    def _flush(self, ids: frozenset[int]) -> None:
        """Persist ``ids`` and only then make them the in-memory view."""
        self.storage.set(self.storage_key, json.dumps(sorted(ids)))
        self._ids = ids

    def get(self) -> frozenset[int]:
        """Current saved set."""
        return self._ids

    def contains(self, campaign_id: int) -> bool:
        return campaign_id in self._ids

    def add(self, campaign_id: int) -> None:
        """Mark a campaign saved; redundant calls are no-ops."""
        campaign_id = validate_campaign_id(campaign_id)
        if campaign_id in self._ids:
            return
        self._flush(self._ids | {campaign_id})

    def remove(self, campaign_id: int) -> None:
        """Mark a campaign unsaved; redundant calls are no-ops."""
        campaign_id = validate_campaign_id(campaign_id)
        if campaign_id not in self._ids:
            return
        self._flush(self._ids - {campaign_id})

    def set_saved(self, campaign_id: int, saved: bool) -> None:
        """Add or remove ``campaign_id`` so its membership equals ``saved``."""
        if saved:
            self.add(campaign_id)
        else:
            self.remove(campaign_id)

    def replace_all(self, campaign_ids: Iterable[int]) -> None:
        """Replace the whole saved set."""
        ids = frozenset(validate_campaign_id(cid) for cid in campaign_ids)
        self._flush(ids)
        logger.info("Replaced saved campaigns", count=len(ids))

    def clear(self) -> None:
        self._flush(frozenset())

    def __contains__(self, campaign_id: object) -> bool:
        return campaign_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._ids))
