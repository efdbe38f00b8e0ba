"""
Feed synchronization: reconcile a channel's feed into persisted episodes.

A channel is refreshed when explicitly asked, when nothing is cached yet,
or when the last successful sync is older than the staleness window. A
failed fetch leaves the store untouched so cached episodes keep being
served.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from .database import Database, DBChannel, DBEpisode
from .feeds import FeedItem, FeedParser

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Naive UTC, matching the dates feedparser produces."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass
class SyncResult:
    """Outcome of one sync attempt."""
    new_count: int = 0
    updated_count: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FeedSyncEngine:
    """Fetches one channel's feed and upserts its items by guid."""

    def __init__(
        self,
        db: Database,
        feed_parser: FeedParser,
        stale_after: timedelta = timedelta(hours=1),
        item_limit: int = 50,
    ):
        self.db = db
        self.feed_parser = feed_parser
        self.stale_after = stale_after
        self.item_limit = item_limit

    def needs_sync(
        self,
        channel: DBChannel,
        episode_count: int,
        refresh: bool = False,
        now: datetime | None = None,
    ) -> bool:
        """Apply the staleness policy."""
        if refresh or episode_count == 0:
            return True
        if channel.last_synced_at is None:
            return True

        elapsed = (now or datetime.now()) - channel.last_synced_at
        if elapsed > self.stale_after:
            logger.info(
                f"Channel {channel.id} not synced for {int(elapsed.total_seconds() // 60)} min, refreshing"
            )
            return True
        return False

    def sync(self, channel: DBChannel) -> SyncResult:
        """
        Fetch the channel's feed and upsert its items.

        Returns:
            SyncResult with counts, or with ``error`` set if the fetch failed
        """
        logger.info(f"Fetching latest episodes for channel: {channel.name}")
        try:
            feed = self.feed_parser.fetch(channel.feed_url)
        except Exception as e:
            logger.error(f"Failed to fetch feed for {channel.id}: {e}")
            return SyncResult(error=str(e))

        logger.info(f"Fetched {len(feed.items)} items from feed: {channel.name}")

        items = feed.items
        existing = self.db.count_episodes(channel.id)
        if existing > 0 and len(items) > self.item_limit:
            items = items[:self.item_limit]
            logger.info(f"Channel already cached; processing only the latest {self.item_limit} items")

        result = SyncResult()
        for item in items:
            inserted = self._upsert_item(channel.id, item)
            if inserted is None:
                continue
            if inserted:
                result.new_count += 1
            else:
                result.updated_count += 1

        # Recorded even when nothing changed so the next request doesn't refetch
        self.db.mark_channel_synced(channel.id)

        logger.info(
            f"Channel {channel.name}: {result.new_count} new episodes, {result.updated_count} updated"
        )
        return result

    def _upsert_item(self, channel_id: str, item: FeedItem) -> bool | None:
        """Upsert one item. Returns None when the item has no usable key."""
        guid = item.guid or item.link
        if not guid:
            logger.debug(f"Skipping feed item without guid or link: {item.title}")
            return None

        return self.db.upsert_episode(
            guid=guid,
            channel_id=channel_id,
            title=item.title,
            description=item.description,
            link=item.link,
            published_at=item.published or utc_now(),
            audio_url=item.enclosure_url or "",
            duration=item.duration,
        )

    def list_episodes(self, channel_id: str) -> list[DBEpisode]:
        """
        Newest episodes of a channel, with stale cache paths cleared.

        An episode whose cached file has disappeared from disk gets its
        ``cached_audio_path`` reset both in the store and in the result.
        """
        episodes = self.db.get_episodes(channel_id, limit=self.item_limit)
        for episode in episodes:
            if episode.cached_audio_path and not Path(episode.cached_audio_path).exists():
                logger.info(f"Cached audio missing for {episode.guid}, clearing path")
                self.db.set_cached_audio_path(episode.guid, None)
                episode.cached_audio_path = None
        return episodes
