"""
Database row converters - convert SQLite rows to dataclasses.
"""

import sqlite3
from datetime import datetime

from .models import DBChannel, DBEpisode, TranscriptionState


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def row_to_channel(row: sqlite3.Row) -> DBChannel:
    """Convert a database row to a DBChannel."""
    return DBChannel(
        id=row["id"],
        name=row["name"],
        author=row["author"],
        feed_url=row["feed_url"],
        description=row["description"],
        last_synced_at=_parse_timestamp(row["last_synced_at"]),
    )


def row_to_episode(row: sqlite3.Row) -> DBEpisode:
    """Convert a database row to a DBEpisode."""
    try:
        state = TranscriptionState(row["transcription_state"] or "none")
    except ValueError:
        state = TranscriptionState.NONE

    # Handle optional columns - may not exist in older databases during migration
    try:
        duration = row["duration"]
    except (IndexError, KeyError):
        duration = None

    return DBEpisode(
        guid=row["guid"],
        channel_id=row["channel_id"],
        title=row["title"],
        description=row["description"],
        link=row["link"],
        published_at=_parse_timestamp(row["published_at"]),
        audio_url=row["audio_url"] or "",
        cached_audio_path=row["cached_audio_path"] or None,
        transcript=row["transcript"] or None,
        transcription_state=state,
        summary=row["summary"] or None,
        duration=duration,
        created_at=_parse_timestamp(row["created_at"]),
        updated_at=_parse_timestamp(row["updated_at"]),
    )
