from __future__ import annotations

import pytest

from wikibase_edit.connection import ApiConnection
from wikibase_edit.errors import (
    AssertUserFailedError,
    EditConflictError,
    LoginFailedError,
    MaxlagError,
    MediaWikiApiError,
    NoSuchEntityError,
    TokenError,
    WikibaseEditError,
    build_api_error,
)


@pytest.mark.parametrize(
    ("code", "expected_type"),
    [
        ("notoken", TokenError),
        ("badtoken", TokenError),
        ("editconflict", EditConflictError),
        ("no-such-entity", NoSuchEntityError),
        ("maxlag", MaxlagError),
        ("assertuserfailed", AssertUserFailedError),
        ("permissiondenied", MediaWikiApiError),
    ],
)
def test_build_api_error_maps_codes(code: str, expected_type: type[MediaWikiApiError]) -> None:
    error = build_api_error(code, "details")

    assert type(error) is expected_type
    assert error.code == code
    assert error.message == "details"
    assert isinstance(error, WikibaseEditError)


def test_api_error_string_includes_code() -> None:
    assert str(build_api_error("maxlag", "Waiting for db1")) == "[maxlag] Waiting for db1"


def test_check_errors_raises_typed_error() -> None:
    root = {"error": {"code": "no-such-entity", "info": "Could not find entity Q0"}}

    with pytest.raises(NoSuchEntityError, match="Could not find entity Q0"):
        ApiConnection.check_errors(root)


def test_check_errors_ignores_successful_responses() -> None:
    ApiConnection.check_errors({"success": 1})


def test_login_failed_error_message() -> None:
    error = LoginFailedError("Failed", "Incorrect username or password entered.")

    assert error.result == "Failed"
    assert "Incorrect username" in str(error)
