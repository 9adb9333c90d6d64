"""HTTP transport for the MediaWiki action API."""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx
from loguru import logger

from .config import ApiSettings
from .errors import LoginFailedError, TransportError, build_api_error
from .responses import decode_json, find_object, find_token

PARAM_ACTION = "action"
PARAM_FORMAT = "format"


class ApiConnection:
    """Send requests to one MediaWiki API endpoint and inspect its JSON replies.

    The login session is kept in the cookie jar of the underlying
    ``httpx.AsyncClient``.
    """

    def __init__(self, client: httpx.AsyncClient, api_url: str) -> None:
        self._client = client
        self._api_url = api_url
        self._owns_client = False
        self.logged_in = False
        self.username: str | None = None
        # Bumped on login and logout; tokens fetched in an older session are stale.
        self.session_generation = 0

    @classmethod
    def from_settings(cls, settings: ApiSettings) -> ApiConnection:
        """Create a connection that owns a new HTTP client configured from settings."""
        client = httpx.AsyncClient(
            headers={"User-Agent": settings.user_agent},
            timeout=settings.timeout_seconds,
            follow_redirects=True,
        )
        connection = cls(client, str(settings.api_url))
        connection._owns_client = True
        return connection

    @property
    def api_url(self) -> str:
        return self._api_url

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ApiConnection:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def send_request(self, method: str, params: dict[str, str]) -> bytes:
        """Send a request and return the raw response body.

        Args:
            method: "GET" or "POST"
            params: API parameters; sent as form data for POST, query string otherwise
        """
        logger.debug(f"API request: {method} action={params.get(PARAM_ACTION)}")

        request_kwargs: dict[str, Any] = {}
        if method.upper() == "POST":
            request_kwargs["data"] = params
        else:
            request_kwargs["params"] = params

        try:
            response = await self._client.request(method, self._api_url, **request_kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"API request failed ({method} {self._api_url} -> "
                f"{exc.response.status_code})"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"API request failed ({method} {self._api_url}): {exc}") from exc

        return response.content

    async def request_json(self, method: str, params: dict[str, str]) -> dict[str, Any]:
        """Send a request, decode its JSON body, raise API errors and log warnings."""
        root = decode_json(await self.send_request(method, params))
        self.check_errors(root)
        self.log_warnings(root)
        return root

    @staticmethod
    def check_errors(root: dict[str, Any]) -> None:
        """Raise the matching ``MediaWikiApiError`` if the response has an error section."""
        error = root.get("error")
        if not isinstance(error, dict):
            return
        code = str(error.get("code", "unknown"))
        message = str(error.get("info", error.get("*", "")))
        raise build_api_error(code, message)

    @staticmethod
    def log_warnings(root: dict[str, Any]) -> None:
        """Log every warning in the response; never raises."""
        warnings = root.get("warnings")
        if not isinstance(warnings, dict):
            return
        for module, detail in warnings.items():
            if isinstance(detail, dict):
                text = detail.get("*", detail.get("warnings", detail))
            else:
                text = detail
            logger.warning(f"API warning {module}: {text}")

    async def login(self, username: str, password: str) -> None:
        """Log in with a (bot) password; raises ``LoginFailedError`` on rejection."""
        token_root = await self.request_json(
            "POST",
            {PARAM_ACTION: "query", "meta": "tokens", "type": "login", PARAM_FORMAT: "json"},
        )
        login_token = find_token(token_root, "login")
        if not login_token:
            raise LoginFailedError("NoToken", "API did not return a login token")

        root = await self.request_json(
            "POST",
            {
                PARAM_ACTION: "login",
                "lgname": username,
                "lgpassword": password,
                "lgtoken": login_token,
                PARAM_FORMAT: "json",
            },
        )
        login = find_object(root, "login")
        result = str(login.get("result", "Unknown"))
        if result != "Success":
            raise LoginFailedError(result, login.get("reason"))

        self.logged_in = True
        self.username = username
        self.session_generation += 1
        logger.info(f"Logged in to {self._api_url} as {username}")

    async def logout(self) -> None:
        """End the session; the server requires a CSRF token for this."""
        token_root = await self.request_json(
            "POST",
            {PARAM_ACTION: "query", "meta": "tokens", "type": "csrf", PARAM_FORMAT: "json"},
        )
        csrf_token = find_token(token_root, "csrf") or ""
        await self.request_json(
            "POST", {PARAM_ACTION: "logout", "token": csrf_token, PARAM_FORMAT: "json"}
        )
        self.logged_in = False
        self.username = None
        self.session_generation += 1
        self._client.cookies.clear()
        logger.info(f"Logged out of {self._api_url}")
