"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from savesync.config.defaults import RemoteParams
from savesync.errors import NetworkError, ServerError
from savesync.models.sync import ClassifiedOutcome, OutcomeKind, SyncDirection
from savesync.persistence.local_cache import LocalCache
from savesync.persistence.storage import SqliteKeyValueStore
from savesync.remote.base import BaseRemoteStore
from savesync.sync.breaker import CircuitBreaker
from savesync.sync.classifier import ErrorClassifier
from savesync.sync.controller import ToggleController
from savesync.sync.notifications import RecordingNotificationSink

BASE_URL = "http://backend.test/api"

Scripted = Union[OutcomeKind, Exception]


class FakeRemoteStore(BaseRemoteStore):
    """Remote store whose write outcomes are scripted per call."""

    def __init__(self) -> None:
        super().__init__("fake")
        self.classifier = ErrorClassifier()
        self.calls: list[tuple[str, int]] = []
        self.scripted: list[Scripted] = []
        self.server_ids: list[int] = []
        self.list_error: Optional[Exception] = None
        self.list_calls = 0
        self.gate: Optional[asyncio.Event] = None
        self.list_gate: Optional[asyncio.Event] = None

    def script(self, *results: Scripted) -> None:
        self.scripted.extend(results)

    async def _write(self, direction: SyncDirection, campaign_id: int) -> ClassifiedOutcome:
        self.calls.append((direction.value, campaign_id))
        if self.gate is not None:
            await self.gate.wait()

        result = self.scripted.pop(0) if self.scripted else OutcomeKind.SUCCESS
        if isinstance(result, Exception):
            raise result

        if result is OutcomeKind.SUCCESS:
            outcome = self.classifier.success(direction, campaign_id, endpoint="/fake")
        elif result is OutcomeKind.ALREADY_DESIRED:
            body = "Campaign already saved" if direction is SyncDirection.SAVE else "Saved campaign not found"
            outcome = self.classifier.classify(
                direction, campaign_id,
                ServerError("HTTP 400", status_code=400, body=body),
                endpoint="/fake"
            )
        else:
            outcome = ClassifiedOutcome(
                kind=result,
                direction=direction,
                campaign_id=campaign_id,
                detail="scripted failure",
                endpoint="/fake",
                error=NetworkError("connection refused", endpoint="/fake"),
            )
        return self._record(outcome)

    async def save(self, campaign_id: int) -> ClassifiedOutcome:
        return await self._write(SyncDirection.SAVE, campaign_id)

    async def unsave(self, campaign_id: int) -> ClassifiedOutcome:
        return await self._write(SyncDirection.UNSAVE, campaign_id)

    async def list_all(self) -> list[int]:
        self.list_calls += 1
        server_ids = list(self.server_ids)
        if self.list_gate is not None:
            await self.list_gate.wait()
        if self.list_error is not None:
            raise self.list_error
        return server_ids


class FakeBackend:
    """In-memory stand-in for the BrandConnect saved-campaigns API.

    Served through ``httpx.MockTransport``. Mirrors the real controller's
    answers: 400 "Campaign already saved" and 400 "Saved campaign not found".
    """

    def __init__(self, saved: Optional[set[int]] = None) -> None:
        self.saved: set[int] = set(saved or ())
        self.requests: list[httpx.Request] = []
        self.offline = False
        self.legacy_routes = False
        self.fail_status: Optional[int] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"message": "Internal server error"})

        path = request.url.path.removeprefix("/api")
        parts = [p for p in path.split("/") if p]

        if request.method == "GET" and parts == ["saved-campaigns", "my"]:
            body = [
                {"id": 1000 + cid, "campaign": {"id": cid, "title": f"Campaign {cid}"}}
                for cid in sorted(self.saved)
            ]
            return httpx.Response(200, json=body)

        if len(parts) == 3 and parts[:2] == ["saved-campaigns", "save"] and request.method == "POST":
            return self._save(int(parts[2]))
        if len(parts) == 3 and parts[:2] == ["saved-campaigns", "unsave"] and request.method == "DELETE":
            return self._unsave(int(parts[2]))
        if self.legacy_routes and len(parts) == 3 and parts[0] == "campaigns" and parts[2] == "save":
            cid = int(parts[1])
            return self._save(cid) if request.method == "POST" else self._unsave(cid)

        return httpx.Response(404)

    def _save(self, campaign_id: int) -> httpx.Response:
        if campaign_id in self.saved:
            return httpx.Response(400, text="Campaign already saved")
        self.saved.add(campaign_id)
        return httpx.Response(200, json={"id": 1000 + campaign_id, "campaign": {"id": campaign_id}})

    def _unsave(self, campaign_id: int) -> httpx.Response:
        if campaign_id not in self.saved:
            return httpx.Response(400, text="Saved campaign not found")
        self.saved.discard(campaign_id)
        return httpx.Response(200)


def make_client(handler: Callable[[httpx.Request], Any]) -> httpx.AsyncClient:
    """httpx client routed to an in-process handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)


@pytest.fixture
def storage() -> SqliteKeyValueStore:
    store = SqliteKeyValueStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def cache(storage: SqliteKeyValueStore) -> LocalCache:
    return LocalCache(storage)


@pytest.fixture
def fake_remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def breaker() -> CircuitBreaker:
    return CircuitBreaker()


@pytest.fixture
def notifier() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def controller(cache, fake_remote, breaker, notifier) -> ToggleController:
    return ToggleController(
        cache=cache,
        remote=fake_remote,
        breaker=breaker,
        notifier=notifier,
    )


@pytest.fixture
def remote_params() -> RemoteParams:
    return RemoteParams(base_url=BASE_URL, timeout_seconds=2.0)


@pytest.fixture
def saved_list_payload() -> list[dict[str, Any]]:
    """Saved-campaign entries in every shape the backend has produced."""
    return [
        {"id": 11, "campaignId": 3},
        {"id": 12, "campaign": {"id": 5, "title": "Summer launch"}},
        {"id": 7},
        {"id": "not-a-number"},
    ]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client_factory() -> Callable[[Callable[[httpx.Request], Any]], httpx.AsyncClient]:
    return make_client
