"""Read the recent changes RSS feed of a Wikibase site."""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import httpx
from loguru import logger
from lxml import etree
from pydantic import BaseModel, ConfigDict

WIKIDATA_RSS_FEED_URL = (
    "https://www.wikidata.org/w/api.php?action=feedrecentchanges&format=json&feedformat=rss"
)

DC_NAMESPACE = "http://purl.org/dc/elements/1.1/"


class RecentChange(BaseModel):
    """One entry of the recent changes feed.

    Attributes:
        title: Title of the changed page (the entity id for entity pages)
        author: User name, or IP address for anonymous edits
        date: Time of the change; None if the feed value could not be parsed
    """

    model_config = ConfigDict(frozen=True)

    title: str
    author: str | None = None
    date: datetime | None = None

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RecentChange):
            return NotImplemented
        if self.date is None or other.date is None:
            return self.date is None and other.date is not None
        return self.date < other.date


def parse_pub_date(value: str) -> datetime | None:
    """Parse an RFC 822 feed date, logging values that cannot be read."""
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError) as exc:
        logger.error(f'Could not parse date from string "{value}". Error: {exc}')
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_feed(payload: bytes) -> list[RecentChange]:
    """Return one ``RecentChange`` per ``<item>`` of an RSS document."""
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    root = etree.fromstring(payload, parser=parser)

    changes: list[RecentChange] = []
    for item in root.iter("item"):
        title = (item.findtext("title") or "").strip()
        if not title:
            continue
        pub_date = item.findtext("pubDate")
        author = item.findtext(f"{{{DC_NAMESPACE}}}creator")
        changes.append(
            RecentChange(
                title=title,
                author=author.strip() if author else None,
                date=parse_pub_date(pub_date) if pub_date else None,
            )
        )
    return changes


class RecentChangesFetcher:
    """Fetch recent changes from a site's RSS feed."""

    def __init__(self, client: httpx.AsyncClient, feed_url: str = WIKIDATA_RSS_FEED_URL) -> None:
        self._client = client
        self._feed_url = feed_url

    @property
    def feed_url(self) -> str:
        return self._feed_url

    async def get_recent_change_records(self) -> list[RecentChange]:
        """Return the parsed feed entries, or an empty list if the feed is unavailable."""
        try:
            response = await self._client.get(self._feed_url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(f"Could not retrieve data from {self._feed_url}. Error: {exc}")
            return []

        try:
            changes = parse_feed(response.content)
        except etree.XMLSyntaxError as exc:
            logger.error(f"Could not parse data from {self._feed_url}. Error: {exc}")
            return []

        logger.debug(f"Read {len(changes)} recent changes from {self._feed_url}")
        return changes

    async def get_recent_changes(self) -> set[str]:
        """Return the titles of recently changed pages."""
        return {change.title for change in await self.get_recent_change_records()}
