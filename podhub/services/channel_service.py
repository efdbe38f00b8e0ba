"""
Channel service: channel listing and the episode staleness policy.
"""

import logging

from ..database import Database, DBChannel, DBEpisode
from ..exceptions import require_channel
from ..sync import FeedSyncEngine

logger = logging.getLogger(__name__)


class ChannelService:
    """Service for channel and episode listing."""

    def __init__(self, db: Database, sync_engine: FeedSyncEngine):
        self.db = db
        self.sync_engine = sync_engine

    def list_channels(self) -> list[DBChannel]:
        return self.db.get_channels()

    def get_episodes(self, channel_id: str, refresh: bool = False) -> list[DBEpisode]:
        """
        Episodes for a channel, syncing the feed first when it is stale.

        A failed sync is logged and the cached episodes are returned as-is.

        Raises:
            HTTPException: 404 if the channel does not exist
        """
        channel = require_channel(self.db.get_channel(channel_id))

        count = self.db.count_episodes(channel_id)
        if self.sync_engine.needs_sync(channel, count, refresh=refresh):
            result = self.sync_engine.sync(channel)
            if not result.ok:
                logger.warning(f"Serving cached episodes for {channel_id}: {result.error}")

        episodes = self.sync_engine.list_episodes(channel_id)
        with_transcript = sum(1 for e in episodes if e.has_transcript)
        logger.info(
            f"Fetched {len(episodes)} episodes for channel {channel_id}. "
            f"{with_transcript} have subtitles."
        )
        return episodes
