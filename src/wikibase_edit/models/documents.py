"""Typed entity documents returned by Wikibase write actions.

Container fields (labels, descriptions, aliases, claims, sitelinks) must be
JSON objects. Models are frozen all the way down: objects are stored as
read-only mappings and arrays as tuples, so a materialized document cannot be
changed after it is returned. Serialization turns them back into plain JSON.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def freeze(value: Any) -> Any:
    """Return a read-only copy of a JSON-like value (mappings and sequences)."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, list | tuple):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of ``freeze`` for serialization; models are left to pydantic."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value


class MonolingualText(BaseModel):
    """A string value in a single language.

    Attributes:
        language: Language code (e.g., "en")
        value: Text in that language
    """

    model_config = ConfigDict(frozen=True)

    language: str
    value: str


class SiteLink(BaseModel):
    """Link from an item to a page on another site.

    Attributes:
        site: Site key (e.g., "enwiki")
        title: Page title on that site
        badges: Item ids of badges attached to the link
    """

    model_config = ConfigDict(frozen=True)

    site: str
    title: str
    badges: tuple[str, ...] = ()


class Snak(BaseModel):
    """Property/value pair used as main snak, qualifier, or reference snak."""

    model_config = ConfigDict(frozen=True)

    snaktype: str = Field(..., description="value, somevalue or novalue")
    property: str = Field(..., description="Property id, e.g. P31")
    datatype: str | None = None
    datavalue: Mapping[str, Any] | None = None
    hash: str | None = None

    @field_validator("datavalue", mode="after")
    @classmethod
    def _freeze_datavalue(cls, value: Mapping[str, Any] | None) -> Any:
        return freeze(value)

    @field_serializer("datavalue")
    def _thaw_datavalue(self, value: Mapping[str, Any] | None) -> Any:
        return thaw(value)


class Statement(BaseModel):
    """A claim about an entity together with its qualifiers and references."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, validate_default=True)

    id: str | None = None
    type: str = "statement"
    rank: str = "normal"
    mainsnak: Snak
    qualifiers: Mapping[str, tuple[Snak, ...]] = Field(default_factory=dict)
    qualifiers_order: tuple[str, ...] = Field(default=(), alias="qualifiers-order")
    references: tuple[Mapping[str, Any], ...] = ()

    @field_validator("qualifiers", "references", mode="after")
    @classmethod
    def _freeze_containers(cls, value: Any) -> Any:
        return freeze(value)

    @field_serializer("qualifiers", "references")
    def _thaw_containers(self, value: Any) -> Any:
        return thaw(value)


class EntityDocument(BaseModel):
    """An item or property with terms, statements and (for items) site links.

    Attributes:
        id: Entity id (e.g., "Q42")
        entity_type: "item" or "property" (JSON key ``type``)
        lastrevid: Revision id after the edit
        modified: Timestamp of the last modification
        labels: Label per language
        descriptions: Description per language
        aliases: Aliases per language
        claims: Statements grouped by property id
        sitelinks: Site links keyed by site key
        datatype: Datatype of a property; None for items
        site_iri: IRI prefix of the site the entity belongs to
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, validate_default=True)

    id: str = Field(..., min_length=1)
    entity_type: str = Field(..., alias="type")
    lastrevid: int | None = None
    modified: str | None = None
    labels: Mapping[str, MonolingualText] = Field(default_factory=dict)
    descriptions: Mapping[str, MonolingualText] = Field(default_factory=dict)
    aliases: Mapping[str, tuple[MonolingualText, ...]] = Field(default_factory=dict)
    claims: Mapping[str, tuple[Statement, ...]] = Field(default_factory=dict)
    sitelinks: Mapping[str, SiteLink] = Field(default_factory=dict)
    datatype: str | None = None
    site_iri: str | None = Field(default=None, exclude=True)

    @field_validator("labels", "descriptions", "aliases", "claims", "sitelinks", mode="after")
    @classmethod
    def _freeze_containers(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return freeze(value)

    @field_serializer("labels", "descriptions", "aliases", "claims", "sitelinks")
    def _thaw_containers(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return thaw(value)

    @property
    def entity_iri(self) -> str | None:
        if self.site_iri is None:
            return None
        return f"{self.site_iri}{self.id}"

    def label(self, language: str) -> str | None:
        text = self.labels.get(language)
        return text.value if text else None

    def with_site_iri(self, site_iri: str) -> "EntityDocument":
        """Return a copy bound to the given site."""
        return self.model_copy(update={"site_iri": site_iri})
