"""Client for editing entities on Wikibase sites."""

from .config import ApiSettings, wikidata_settings
from .connection import ApiConnection
from .edit_action import EditEntityAction, EditOptions, EditOutcome, EditResult
from .errors import (
    MediaWikiApiError,
    TokenError,
    TransportError,
    WikibaseEditError,
)
from .materializer import DocumentMaterializer
from .models.documents import EntityDocument
from .recent_changes import RecentChangesFetcher
from .tokens import CsrfTokenManager

__all__ = [
    "ApiConnection",
    "ApiSettings",
    "CsrfTokenManager",
    "DocumentMaterializer",
    "EditEntityAction",
    "EditOptions",
    "EditOutcome",
    "EditResult",
    "EntityDocument",
    "MediaWikiApiError",
    "RecentChangesFetcher",
    "TokenError",
    "TransportError",
    "WikibaseEditError",
    "wikidata_settings",
]
