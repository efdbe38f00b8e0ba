"""
Feed Parser - Fetch and parse podcast RSS/Atom feeds.

Handles:
- RSS 2.0 and Atom 1.0 formats via feedparser
- Podcast enclosures and itunes:duration
- Blocking HTTP fetches (callers run on request threads)
"""

from dataclasses import dataclass
from datetime import datetime

import feedparser
import httpx


@dataclass
class FeedItem:
    """Represents a single episode entry from a feed."""
    guid: str
    title: str
    description: str | None
    link: str | None
    published: datetime | None
    enclosure_url: str | None
    duration: str | None = None


@dataclass
class Feed:
    """Represents a parsed feed."""
    url: str
    title: str
    description: str | None
    items: list[FeedItem]
    last_fetched: datetime


class FeedParser:
    """Fetches podcast feeds and turns them into structured items."""

    def __init__(
        self,
        timeout: float = 30,
        user_agent: str | None = None,
        client: httpx.Client | None = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent or "podhub/1.0 (+https://github.com/podhub)"
        self._client = client

    def fetch(self, url: str) -> Feed:
        """Fetch and parse a feed URL.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
            ValueError: If the body cannot be parsed as a feed
        """
        headers = {"User-Agent": self.user_agent}
        if self._client is not None:
            resp = self._client.get(url, headers=headers, timeout=self.timeout)
        else:
            resp = httpx.get(url, headers=headers, timeout=self.timeout, follow_redirects=True)
        resp.raise_for_status()
        return self._parse(url, resp.content)

    def _parse(self, url: str, content: bytes | str) -> Feed:
        """Parse feed content using feedparser."""
        parsed = feedparser.parse(content)

        # Check for parse errors
        if parsed.bozo and not parsed.entries:
            raise ValueError(f"Failed to parse feed: {parsed.bozo_exception}")

        items = []
        for entry in parsed.entries:
            # Parse published date
            published = None
            if entry.get("published_parsed"):
                try:
                    published = datetime(*entry.published_parsed[:6])
                except (TypeError, ValueError):
                    pass
            elif entry.get("updated_parsed"):
                try:
                    published = datetime(*entry.updated_parsed[:6])
                except (TypeError, ValueError):
                    pass

            enclosure_url = None
            for enclosure in entry.get("enclosures", []):
                if enclosure.get("href"):
                    enclosure_url = enclosure["href"]
                    break

            items.append(FeedItem(
                guid=entry.get("id", "") or "",
                title=entry.get("title", "Untitled"),
                description=entry.get("summary") or entry.get("description"),
                link=entry.get("link"),
                published=published,
                enclosure_url=enclosure_url,
                duration=entry.get("itunes_duration"),
            ))

        return Feed(
            url=url,
            title=parsed.feed.get("title", "Unknown Feed"),
            description=parsed.feed.get("description") or parsed.feed.get("subtitle"),
            items=items,
            last_fetched=datetime.now()
        )


def parse_feed_sync(content: str | bytes, url: str = "") -> Feed:
    """
    Parse feed content that has already been fetched.

    Useful for testing or when you already have the feed content.
    """
    parser = FeedParser()
    return parser._parse(url, content)
