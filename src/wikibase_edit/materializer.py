"""Build typed documents from entity JSON returned by the API."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import ValidationError

from .models.documents import EntityDocument

# Wikibase serializes these maps as [] instead of {} when they are empty
# (https://phabricator.wikimedia.org/T73349).
EMPTY_CONTAINER_FIELDS: tuple[str, ...] = (
    "sitelinks",
    "labels",
    "aliases",
    "claims",
    "descriptions",
)


@dataclass(frozen=True, slots=True)
class MaterializeResult:
    """Outcome of materializing an entity sub-tree."""

    document: EntityDocument | None
    recovered: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


def fix_empty_containers(json_text: str) -> str:
    """Rewrite ``"<field>":[]`` to ``"<field>":{}`` for the known map fields."""
    for field in EMPTY_CONTAINER_FIELDS:
        json_text = json_text.replace(f'"{field}":[]', f'"{field}":{{}}')
    return json_text


class DocumentMaterializer:
    """Decode entity JSON into an ``EntityDocument``.

    The direct decode is tried first. Only a validation failure triggers the
    empty-container rewrite, which is decoded once more; anything else is
    treated as corrupt data and reported as a failure.
    """

    def materialize(self, subtree: dict[str, Any], site_iri: str) -> MaterializeResult:
        entity_id = str(subtree.get("id", "UNKNOWN"))
        steps: list[Callable[[dict[str, Any]], EntityDocument]] = [
            self._decode_direct,
            self._decode_with_container_fix,
        ]

        first_error: ValidationError | None = None
        for index, step in enumerate(steps):
            try:
                document = step(subtree)
            except ValidationError as exc:
                if first_error is None:
                    first_error = exc
                    logger.warning(
                        f"Error when reading JSON for entity {entity_id}: {exc}\n"
                        "Trying to rewrite empty containers serialized as arrays."
                    )
                    continue
                logger.error(
                    f"Failed to recover parsing of entity {entity_id}: {first_error}\n"
                    f"Second attempt failed with: {exc}\n"
                    f"Modified JSON data was: {self._rewritten_text(subtree)}"
                )
                return MaterializeResult(document=None, recovered=False, error=str(exc))
            return MaterializeResult(document=document.with_site_iri(site_iri), recovered=index > 0)

        return MaterializeResult(document=None, error=str(first_error))

    def materialize_document(
        self, subtree: dict[str, Any], site_iri: str
    ) -> EntityDocument | None:
        return self.materialize(subtree, site_iri).document

    @staticmethod
    def _decode_direct(subtree: dict[str, Any]) -> EntityDocument:
        return EntityDocument.model_validate(subtree)

    def _decode_with_container_fix(self, subtree: dict[str, Any]) -> EntityDocument:
        return EntityDocument.model_validate_json(self._rewritten_text(subtree))

    @staticmethod
    def _rewritten_text(subtree: dict[str, Any]) -> str:
        return fix_empty_containers(
            json.dumps(subtree, separators=(",", ":"), ensure_ascii=False)
        )
