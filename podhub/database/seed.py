"""
Default channels loaded into an empty database.
"""

import logging

from .channel_repository import ChannelRepository

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS: list[dict[str, str]] = [
    {
        "id": "the-daily",
        "name": "The Daily",
        "author": "The New York Times",
        "feed_url": "https://feeds.simplecast.com/54nAGcIl",
        "description": "This is how the news should sound.",
    },
    {
        "id": "crime-junkie",
        "name": "Crime Junkie",
        "author": "audiochuck",
        "feed_url": "https://feeds.simplecast.com/qm_9xx0g",
        "description": "If you can never get enough true crime... Congratulations, you're a Crime Junkie!",
    },
    {
        "id": "pod-save-america",
        "name": "Pod Save America",
        "author": "Crooked Media",
        "feed_url": "https://feeds.simplecast.com/dxZsm5kX",
        "description": "A political podcast for people who aren't ready to give up yet.",
    },
    {
        "id": "mel-robbins",
        "name": "The Mel Robbins Podcast",
        "author": "Mel Robbins",
        "feed_url": "https://feeds.simplecast.com/UCwaTX1J",
        "description": "Systems to change your life from the global expert on behavior change.",
    },
    {
        "id": "allearsenglish",
        "name": "All Ears English",
        "author": "All Ears English",
        "feed_url": "https://feeds.megaphone.fm/allearsenglish",
        "description": "Are you looking for a new way to learn English?",
    },
    {
        "id": "techmeme-ride-home",
        "name": "Techmeme Ride Home",
        "author": "Techmeme",
        "feed_url": "https://rsshub.app/spotify/show/6qXldSz1Ulq1Nvj2JK5kSR",
        "description": "The day's tech news, every day at 5pm ET.",
    },
    {
        "id": "gcores",
        "name": "机核 GCORES",
        "author": "GCORES",
        "feed_url": "https://wiki.dio.wtf/gcores",
        "description": "Share the core culture of games.",
    },
    {
        "id": "vergecast",
        "name": "The Vergecast",
        "author": "The Verge",
        "feed_url": "https://feeds.megaphone.fm/vergecast",
        "description": "The flagship podcast of The Verge.",
    },
]


def seed_channels(channels: ChannelRepository, defaults: list[dict[str, str]] | None = None) -> int:
    """Insert the default channels if the table is empty. Returns rows added."""
    if channels.count() > 0:
        return 0

    added = 0
    for channel in defaults if defaults is not None else DEFAULT_CHANNELS:
        if channels.add(
            channel["id"],
            channel["name"],
            channel["feed_url"],
            author=channel.get("author"),
            description=channel.get("description"),
        ):
            added += 1
    logger.info(f"Seeded {added} channels")
    return added
