"""Client for the ``wbeditentity`` API action."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field

from .connection import PARAM_ACTION, PARAM_FORMAT, ApiConnection
from .errors import TokenError
from .materializer import DocumentMaterializer
from .models.documents import EntityDocument
from .responses import locate_entity
from .tokens import CsrfTokenManager

EDIT_ACTION = "wbeditentity"


class EditOptions(BaseModel):
    """Optional flags for an entity edit.

    Attributes:
        clear: Delete all existing data of the entity before writing
        bot: Flag the edit as a bot edit (ignored by the server for non-bot users)
        base_revision: Revision the edit is based on, for edit conflict detection;
            0 disables the check
        summary: Edit summary; the server prepends an autocomment and cuts the
            combined text at its length limit
    """

    clear: bool = Field(False, description="Clear existing data before writing")
    bot: bool = Field(False, description="Mark as bot edit")
    base_revision: int = Field(0, ge=0, description="baserevid, or 0 to skip the check")
    summary: str | None = Field(None, description="Edit summary")


class EditOutcome(str, Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    DECODE_FAILED = "decode_failed"


@dataclass(frozen=True, slots=True)
class EditResult:
    """Result of an edit that the API accepted.

    ``document`` is set only for ``EditOutcome.SUCCESS``; the other outcomes
    mean the edit went through but the response could not be read.
    """

    outcome: EditOutcome
    document: EntityDocument | None = None
    detail: str | None = None


def build_edit_params(
    data: str | Mapping[str, Any] | None,
    *,
    entity_id: str | None = None,
    site: str | None = None,
    title: str | None = None,
    new_entity: str | None = None,
    options: EditOptions | None = None,
) -> dict[str, str]:
    """Validate the entity selector and assemble the request parameters.

    Exactly one of ``new_entity``, ``entity_id`` or the ``site``/``title`` pair
    must be given. Raises ``ValueError`` otherwise, or when ``data`` is missing.
    The token and format parameters are added by the caller.
    """
    if data is None:
        raise ValueError("Data parameter cannot be None when editing entity data")

    options = options or EditOptions()
    params: dict[str, str] = {PARAM_ACTION: EDIT_ACTION}

    if new_entity:
        if entity_id or site or title:
            raise ValueError(
                'Cannot use parameters "id", "site", or "title" when creating a new entity.'
            )
        params["new"] = new_entity
    elif entity_id:
        if site or title:
            raise ValueError(
                'Cannot use parameters "site" or "title" when using id to edit entity data'
            )
        params["id"] = entity_id
    elif title:
        if not site:
            raise ValueError(
                "Site parameter is required when using title parameter to edit entity data."
            )
        params["site"] = site
        params["title"] = title
    elif site:
        raise ValueError(
            "Title parameter is required when using site parameter to edit entity data."
        )
    else:
        raise ValueError(
            "This action must create a new entity, or specify an id, or specify a site and title."
        )

    params["data"] = data if isinstance(data, str) else json.dumps(dict(data))

    if options.bot:
        params["bot"] = ""
    if options.base_revision != 0:
        params["baserevid"] = str(options.base_revision)
    if options.clear:
        params["clear"] = ""
    if options.summary is not None:
        params["summary"] = options.summary

    return params


class EditEntityAction:
    """Create or modify entities on a Wikibase site.

    Unless ``clear`` is set, existing data is only added to or replaced per
    language; statements are always added, never replaced. The site IRI is
    needed because the API does not include it in returned entity data.
    """

    def __init__(
        self,
        connection: ApiConnection,
        site_iri: str,
        token_manager: CsrfTokenManager | None = None,
        materializer: DocumentMaterializer | None = None,
    ) -> None:
        self._connection = connection
        self._site_iri = site_iri
        self._tokens = token_manager or CsrfTokenManager(connection)
        self._materializer = materializer or DocumentMaterializer()

    @property
    def token_manager(self) -> CsrfTokenManager:
        return self._tokens

    async def edit_entity(
        self,
        data: str | Mapping[str, Any] | None,
        *,
        entity_id: str | None = None,
        site: str | None = None,
        title: str | None = None,
        new_entity: str | None = None,
        options: EditOptions | None = None,
    ) -> EntityDocument | None:
        """Run ``wbeditentity`` and return the created or modified entity.

        Returns None when the edit succeeded but its response held no readable
        entity; use ``edit_entity_result()`` to tell those cases apart.

        Raises:
            ValueError: invalid selector or missing data (before any request)
            TransportError: the request failed at the HTTP level
            MediaWikiApiError: the API returned an error
        """
        result = await self.edit_entity_result(
            data,
            entity_id=entity_id,
            site=site,
            title=title,
            new_entity=new_entity,
            options=options,
        )
        return result.document

    async def edit_entity_result(
        self,
        data: str | Mapping[str, Any] | None,
        *,
        entity_id: str | None = None,
        site: str | None = None,
        title: str | None = None,
        new_entity: str | None = None,
        options: EditOptions | None = None,
    ) -> EditResult:
        params = build_edit_params(
            data,
            entity_id=entity_id,
            site=site,
            title=title,
            new_entity=new_entity,
            options=options,
        )
        params["token"] = await self._tokens.current_or_fetched() or ""
        params[PARAM_FORMAT] = "json"

        try:
            return await self._submit(params)
        except TokenError as exc:
            logger.warning(f"CSRF token rejected ({exc.code}); refreshing and retrying once")

        # TODO: re-login when the refresh yields no token (session expired)
        params["token"] = await self._tokens.force_refresh() or ""
        return await self._submit(params)

    async def _submit(self, params: dict[str, str]) -> EditResult:
        root = await self._connection.request_json("POST", dict(params))

        lookup = locate_entity(root)
        if lookup.subtree is None:
            logger.error("No entity document found in API response.")
            return EditResult(
                outcome=EditOutcome.NOT_FOUND,
                detail="Response contained none of: item, property, entity",
            )

        materialized = self._materializer.materialize(lookup.subtree, self._site_iri)
        if materialized.document is None:
            return EditResult(outcome=EditOutcome.DECODE_FAILED, detail=materialized.error)
        return EditResult(outcome=EditOutcome.SUCCESS, document=materialized.document)
