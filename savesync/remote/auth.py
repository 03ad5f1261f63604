"""Bearer token lookup from client-side storage."""

import json
from typing import Optional

import structlog

from ..errors import PersistenceError
from ..persistence.storage import SqliteKeyValueStore

logger = structlog.get_logger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class StorageTokenProvider:
    """Reads the auth token written by the login flow.

    The token is looked up under ``token`` first, then as the ``token``
    field of the JSON ``user`` record. A missing token is not an error.
    """

    def __init__(self, storage: SqliteKeyValueStore):
        self.storage = storage

    def get_token(self) -> Optional[str]:
        try:
            token = self.storage.get(TOKEN_KEY)
            if token:
                return token

            user_raw = self.storage.get(USER_KEY)
        except PersistenceError as e:
            logger.warning("Error reading token from storage", error=str(e))
            return None

        if not user_raw:
            return None

        try:
            user = json.loads(user_raw)
        except ValueError as e:
            logger.warning("Stored user record is not valid JSON", error=str(e))
            return None

        if isinstance(user, dict) and isinstance(user.get("token"), str) and user["token"]:
            return user["token"]
        return None


class StaticTokenProvider:
    """Fixed token, for callers that manage auth themselves."""

    def __init__(self, token: Optional[str]):
        self.token = token

    def get_token(self) -> Optional[str]:
        return self.token
