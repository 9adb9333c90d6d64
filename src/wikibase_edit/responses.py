"""Decode API responses and locate the entity they describe."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .errors import ResponseDecodeError

# Wikibase names the returned entity differently depending on version and
# entity type; probed in this order.
ENTITY_FIELDS: tuple[str, ...] = ("item", "property", "entity")


def decode_json(raw: bytes | str) -> dict[str, Any]:
    """Parse a response body into a JSON object."""

    try:
        root = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ResponseDecodeError(f"Invalid JSON in API response: {exc}") from exc

    if not isinstance(root, dict):
        raise ResponseDecodeError(
            f"Expected a JSON object in API response, got {type(root).__name__}"
        )
    return root


@dataclass(frozen=True, slots=True)
class EntityLookup:
    """Outcome of probing a response for an entity sub-tree."""

    field: str | None
    subtree: dict[str, Any] | None

    @property
    def found(self) -> bool:
        return self.subtree is not None

    @classmethod
    def not_found(cls) -> EntityLookup:
        return cls(field=None, subtree=None)


def locate_entity(root: dict[str, Any]) -> EntityLookup:
    """Return the first entity sub-tree found under ``ENTITY_FIELDS``."""

    for field in ENTITY_FIELDS:
        subtree = root.get(field)
        if isinstance(subtree, dict):
            return EntityLookup(field=field, subtree=subtree)
    return EntityLookup.not_found()


def find_object(root: dict[str, Any], *path: str) -> dict[str, Any]:
    """Follow ``path`` through nested JSON objects.

    Returns an empty dict when a step is missing or is not an object.
    """
    node: Any = root
    for key in path:
        node = node.get(key) if isinstance(node, dict) else None
    return node if isinstance(node, dict) else {}


def find_token(root: dict[str, Any], token_type: str) -> str | None:
    """Return ``query.tokens.<type>token`` if it is a non-empty string."""
    token = find_object(root, "query", "tokens").get(f"{token_type}token")
    return token if isinstance(token, str) and token else None
