"""Error types raised by the Wikibase edit client."""

from __future__ import annotations

from dataclasses import dataclass


class WikibaseEditError(Exception):
    """Base class for all client errors."""


class TransportError(WikibaseEditError):
    """The HTTP request could not be completed (network or status failure)."""


class ResponseDecodeError(WikibaseEditError):
    """The API response body was not a JSON object."""


class LoginFailedError(WikibaseEditError):
    """The API rejected a login attempt."""

    def __init__(self, result: str, reason: str | None = None) -> None:
        self.result = result
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Login failed with result `{result}`{detail}")


@dataclass(slots=True)
class MediaWikiApiError(WikibaseEditError):
    """Represent an `error` section returned by the MediaWiki API."""

    code: str
    message: str

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class TokenError(MediaWikiApiError):
    """The CSRF token was missing, expired, or otherwise rejected."""


class EditConflictError(MediaWikiApiError):
    """The edit conflicts with a revision newer than the given base revision."""


class NoSuchEntityError(MediaWikiApiError):
    """The targeted entity does not exist."""


class MaxlagError(MediaWikiApiError):
    """The server replication lag exceeds the requested maxlag."""


class AssertUserFailedError(MediaWikiApiError):
    """The request asserted a logged-in user but the session is anonymous."""


API_ERROR_TYPES: dict[str, type[MediaWikiApiError]] = {
    "notoken": TokenError,
    "badtoken": TokenError,
    "editconflict": EditConflictError,
    "no-such-entity": NoSuchEntityError,
    "maxlag": MaxlagError,
    "assertuserfailed": AssertUserFailedError,
}


def build_api_error(code: str, message: str) -> MediaWikiApiError:
    """Return the most specific error type for an API error code."""

    error_type = API_ERROR_TYPES.get(code, MediaWikiApiError)
    return error_type(code=code, message=message)
