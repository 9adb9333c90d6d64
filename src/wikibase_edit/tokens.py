"""CSRF token handling for state-changing API requests."""

from __future__ import annotations

from loguru import logger

from .connection import PARAM_ACTION, PARAM_FORMAT, ApiConnection
from .errors import MediaWikiApiError, ResponseDecodeError, TransportError
from .responses import find_token


class CsrfTokenManager:
    """Hold the CSRF token of one connection and fetch a new one on demand.

    The token carries no expiry; it is found to be stale only when the API
    rejects a request with it, or when the connection has logged in or out
    since it was fetched. Concurrent callers share the token without locking:
    two tasks that both find it missing will both refresh, and the last
    fetched token wins.
    """

    def __init__(self, connection: ApiConnection) -> None:
        self._connection = connection
        self._token: str | None = None
        self._generation = connection.session_generation

    @property
    def has_token(self) -> bool:
        return self._token is not None and not self._session_changed()

    async def current_or_fetched(self) -> str | None:
        """Return the held token, fetching one first if none is held."""
        if self._session_changed():
            self.invalidate()
        if self._token is None:
            await self.force_refresh()
        return self._token

    async def force_refresh(self) -> str | None:
        """Replace the held token with a freshly fetched one and return it.

        On failure the error is logged and the token is left unset, even if a
        token was held before.
        """
        self._token = None
        self._generation = self._connection.session_generation
        self._token = await self._fetch_token()
        return self._token

    def invalidate(self) -> None:
        self._token = None

    def _session_changed(self) -> bool:
        return self._generation != self._connection.session_generation

    async def _fetch_token(self) -> str | None:
        params = {
            PARAM_ACTION: "query",
            "meta": "tokens",
            "type": "csrf",
            PARAM_FORMAT: "json",
        }
        try:
            root = await self._connection.request_json("POST", params)
        except (TransportError, ResponseDecodeError, MediaWikiApiError) as exc:
            logger.error(f"Error when trying to fetch csrf token: {exc}")
            return None

        token = find_token(root, "csrf")
        if token is None:
            logger.error("API response did not contain a csrf token")
        return token
