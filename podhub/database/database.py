"""
Database facade - provides unified access to all repositories.
"""

from datetime import datetime
from pathlib import Path

from .connection import DatabaseConnection
from .channel_repository import ChannelRepository
from .episode_repository import EpisodeRepository
from .models import DBChannel, DBEpisode, TranscriptionState
from .seed import seed_channels


class Database:
    """
    Unified database access facade.

    Routes and services talk to this class; repositories stay an
    implementation detail.
    """

    def __init__(self, db_path: Path):
        self._connection = DatabaseConnection(db_path)

        # Initialize repositories
        self.channels = ChannelRepository(self._connection)
        self.episodes = EpisodeRepository(self._connection)

    def seed_default_channels(self) -> int:
        return seed_channels(self.channels)

    # ─────────────────────────────────────────────────────────────
    # Channel operations (delegated to ChannelRepository)
    # ─────────────────────────────────────────────────────────────

    def add_channel(
        self,
        channel_id: str,
        name: str,
        feed_url: str,
        author: str | None = None,
        description: str | None = None,
    ) -> bool:
        return self.channels.add(channel_id, name, feed_url, author, description)

    def get_channel(self, channel_id: str) -> DBChannel | None:
        return self.channels.get(channel_id)

    def get_channels(self) -> list[DBChannel]:
        return self.channels.get_all()

    def mark_channel_synced(self, channel_id: str, synced_at: datetime | None = None):
        return self.channels.mark_synced(channel_id, synced_at)

    # ─────────────────────────────────────────────────────────────
    # Episode operations (delegated to EpisodeRepository)
    # ─────────────────────────────────────────────────────────────

    def get_episode(self, guid: str) -> DBEpisode | None:
        return self.episodes.get(guid)

    def get_episodes(self, channel_id: str, limit: int = 50) -> list[DBEpisode]:
        return self.episodes.get_for_channel(channel_id, limit)

    def count_episodes(self, channel_id: str) -> int:
        return self.episodes.count_for_channel(channel_id)

    def get_episodes_by_state(self, states: list[TranscriptionState]) -> list[DBEpisode]:
        return self.episodes.get_by_states(states)

    def upsert_episode(
        self,
        guid: str,
        channel_id: str,
        title: str,
        description: str | None,
        link: str | None,
        published_at: datetime,
        audio_url: str,
        duration: str | None = None,
    ) -> bool:
        return self.episodes.upsert(
            guid, channel_id, title, description, link, published_at, audio_url, duration
        )

    def set_cached_audio_path(self, guid: str, path: str | None):
        return self.episodes.set_cached_audio_path(guid, path)

    def clear_cached_audio_path_by_filename(self, filename: str) -> int:
        return self.episodes.clear_cached_audio_path_by_filename(filename)

    def set_transcription_state(
        self, guid: str, state: TranscriptionState, force: bool = False
    ) -> bool:
        return self.episodes.set_transcription_state(guid, state, force)

    def complete_transcription(self, guid: str, transcript: str, force: bool = False) -> bool:
        return self.episodes.complete_transcription(guid, transcript, force)

    def update_transcript(self, guid: str, transcript: str) -> bool:
        return self.episodes.update_transcript(guid, transcript)

    def update_summary(self, guid: str, summary: str) -> bool:
        return self.episodes.update_summary(guid, summary)
