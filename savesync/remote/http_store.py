"""HTTP client for the saved-campaigns backend."""

from typing import Any, Optional, Protocol

import httpx

from ..config.defaults import RemoteParams
from ..errors import (
    NetworkError,
    RemoteListError,
    RequestTimeoutError,
    SaveSyncError,
    ServerError,
)
from ..models.sync import ClassifiedOutcome, OutcomeKind, SyncDirection
from ..sync.classifier import ErrorClassifier
from ..utils.time import epoch_millis
from .adapters import parse_saved_list
from .base import BaseRemoteStore


class TokenProvider(Protocol):
    def get_token(self) -> Optional[str]:
        ...


# (method, primary path, legacy path) per direction
WRITE_ENDPOINTS: dict[SyncDirection, tuple[str, str, str]] = {
    SyncDirection.SAVE: (
        "POST",
        "/saved-campaigns/save/{campaign_id}",
        "/campaigns/{campaign_id}/save",
    ),
    SyncDirection.UNSAVE: (
        "DELETE",
        "/saved-campaigns/unsave/{campaign_id}",
        "/campaigns/{campaign_id}/save",
    ),
}

LIST_PATH = "/saved-campaigns/my"


class HttpRemoteStore(BaseRemoteStore):
    """httpx-based remote store with a single legacy-endpoint fallback."""

    def __init__(
        self,
        config: Optional[RemoteParams] = None,
        classifier: Optional[ErrorClassifier] = None,
        token_provider: Optional[TokenProvider] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        name: str = "http",
    ):
        super().__init__(name)
        self.config = config or RemoteParams()
        self.classifier = classifier or ErrorClassifier()
        self.token_provider = token_provider
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout_seconds),
                headers={
                    "Content-Type": "application/json",
                    "User-Agent": self.config.user_agent,
                },
            )
        return self._http_client

    def _url(self, path: str) -> str:
        # Injected clients may have no base_url configured
        client = self._get_client()
        if str(client.base_url):
            return path
        return self.config.base_url.rstrip("/") + path

    def _auth_headers(self) -> dict[str, str]:
        token = self.token_provider.get_token() if self.token_provider else None
        if token:
            return {"Authorization": f"Bearer {token}"}
        self.logger.debug("No token found for saved campaigns request")
        return {}

    async def _request(self, method: str, path: str) -> httpx.Response:
        """
        Perform one request, converting every failure into the error taxonomy.

        Raises:
            RequestTimeoutError: The fixed timeout elapsed
            NetworkError: No response was received
            ServerError: The response status was not 2xx
        """
        params = {"_t": epoch_millis()} if method == "GET" else None

        try:
            response = await self._get_client().request(
                method,
                self._url(path),
                params=params,
                headers=self._auth_headers(),
                timeout=self.config.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            self.logger.warning("Request timeout", method=method, endpoint=path)
            raise RequestTimeoutError(
                f"{method} {path} timed out after {self.config.timeout_seconds}s",
                timeout_seconds=self.config.timeout_seconds,
                endpoint=path,
            ) from e
        except httpx.HTTPError as e:
            self.logger.warning(
                "Network error - no response received",
                method=method,
                endpoint=path,
                error=str(e)
            )
            raise NetworkError(f"{method} {path} failed: {e}", endpoint=path) from e

        if not response.is_success:
            body = self._decode_body(response)
            self.logger.warning(
                "API error",
                method=method,
                endpoint=path,
                status_code=response.status_code,
                body=str(body)[:200]
            )
            raise ServerError(
                f"HTTP {response.status_code} from {method} {path}",
                status_code=response.status_code,
                body=body,
                endpoint=path,
            )

        return response

    @staticmethod
    def _decode_body(response: httpx.Response) -> Any:
        """JSON body when parseable, else text."""
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _write(self, direction: SyncDirection, campaign_id: int) -> ClassifiedOutcome:
        """Primary endpoint, then exactly one legacy attempt."""
        method, primary, legacy = WRITE_ENDPOINTS[direction]
        primary_path = primary.format(campaign_id=campaign_id)
        legacy_path = legacy.format(campaign_id=campaign_id)

        try:
            await self._request(method, primary_path)
            self.logger.info(
                "Remote write succeeded",
                direction=direction.value,
                campaign_id=campaign_id,
                endpoint=primary_path
            )
            return self.classifier.success(direction, campaign_id, endpoint=primary_path)
        except SaveSyncError as primary_error:
            outcome = self.classifier.classify(
                direction, campaign_id, primary_error, endpoint=primary_path
            )
            if outcome.kind is OutcomeKind.ALREADY_DESIRED:
                return outcome

        self.logger.info(
            "Primary endpoint failed, trying legacy endpoint",
            direction=direction.value,
            campaign_id=campaign_id,
            endpoint=legacy_path
        )

        try:
            await self._request(method, legacy_path)
            self.logger.info(
                "Remote write succeeded using legacy endpoint",
                direction=direction.value,
                campaign_id=campaign_id,
                endpoint=legacy_path
            )
            return self.classifier.success(
                direction, campaign_id, endpoint=legacy_path, used_fallback=True
            )
        except SaveSyncError as legacy_error:
            legacy_outcome = self.classifier.classify(
                direction, campaign_id, legacy_error, endpoint=legacy_path, used_fallback=True
            )
            if legacy_outcome.kind is OutcomeKind.ALREADY_DESIRED:
                return legacy_outcome

            self.logger.error(
                "Remote write failed on both endpoints",
                direction=direction.value,
                campaign_id=campaign_id,
                primary_error=outcome.detail,
                legacy_error=legacy_outcome.detail
            )
            return ClassifiedOutcome(
                kind=outcome.kind,
                direction=direction,
                campaign_id=campaign_id,
                detail=f"{outcome.detail}; legacy endpoint: {legacy_outcome.detail}",
                endpoint=primary_path,
                used_fallback=True,
                error=outcome.error,
            )

    async def save(self, campaign_id: int) -> ClassifiedOutcome:
        return self._record(await self._write(SyncDirection.SAVE, campaign_id))

    async def unsave(self, campaign_id: int) -> ClassifiedOutcome:
        return self._record(await self._write(SyncDirection.UNSAVE, campaign_id))

    async def list_all(self) -> list[int]:
        """Fetch saved campaign ids; there is no fallback endpoint."""
        try:
            response = await self._request("GET", LIST_PATH)
        except SaveSyncError as e:
            raise RemoteListError(f"Unable to fetch saved campaigns: {e}", cause=e) from e

        try:
            entries = parse_saved_list(response.json())
        except ValueError as e:
            self.logger.error("Unexpected saved campaigns payload", error=str(e))
            raise RemoteListError(f"Unexpected saved campaigns payload: {e}") from e

        self.logger.info("Fetched saved campaigns", count=len(entries))
        return [entry.campaign_id for entry in entries]

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "HttpRemoteStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
