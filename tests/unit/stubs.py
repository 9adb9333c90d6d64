"""Stub transport and canned API payloads shared by the unit tests."""

from __future__ import annotations

import json
from typing import Any, cast

import httpx

from wikibase_edit.connection import ApiConnection

API_URL = "https://wikibase.example.org/w/api.php"
SITE_IRI = "http://wikibase.example.org/entity/"


class StubConnection(ApiConnection):
    """Connection that replays canned responses and records every request.

    Responses are consumed in order; an ``Exception`` instance is raised
    instead of being returned. Error and warning inspection stay real.
    """

    def __init__(self, responses: list[dict[str, Any] | Exception]) -> None:
        super().__init__(cast(httpx.AsyncClient, object()), API_URL)
        self._responses = list(responses)
        self.calls: list[dict[str, str]] = []

    async def send_request(self, method: str, params: dict[str, str]) -> bytes:
        self.calls.append(dict(params))
        if not self._responses:
            raise AssertionError(f"Unexpected request: {params}")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return json.dumps(response).encode("utf-8")

    def actions(self) -> list[str]:
        return [call["action"] for call in self.calls]


def token_response(token: str) -> dict[str, Any]:
    return {"batchcomplete": "", "query": {"tokens": {"csrftoken": token}}}


def error_response(code: str, info: str) -> dict[str, Any]:
    return {"error": {"code": code, "info": info, "*": "See the API help for usage."}}


def entity_payload(entity_id: str = "Q42", **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": entity_id,
        "type": "item",
        "lastrevid": 1234,
        "labels": {"en": {"language": "en", "value": "Douglas Adams"}},
        "descriptions": {"en": {"language": "en", "value": "English writer"}},
        "aliases": {"en": [{"language": "en", "value": "Douglas Noel Adams"}]},
        "claims": {
            "P31": [
                {
                    "id": f"{entity_id}$5a1b",
                    "type": "statement",
                    "rank": "normal",
                    "mainsnak": {
                        "snaktype": "value",
                        "property": "P31",
                        "datatype": "wikibase-item",
                        "datavalue": {
                            "type": "wikibase-entityid",
                            "value": {"entity-type": "item", "numeric-id": 5, "id": "Q5"},
                        },
                    },
                }
            ]
        },
        "sitelinks": {"enwiki": {"site": "enwiki", "title": "Douglas Adams", "badges": []}},
    }
    payload.update(overrides)
    return payload
