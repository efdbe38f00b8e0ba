"""
Database models - dataclasses for database entities.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TranscriptionState(str, Enum):
    """Per-episode transcription lifecycle."""
    NONE = "none"
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# States only move forward; failed -> pending is the explicit re-enqueue.
ALLOWED_TRANSITIONS: dict[TranscriptionState, frozenset[TranscriptionState]] = {
    TranscriptionState.NONE: frozenset({TranscriptionState.PENDING, TranscriptionState.PROCESSING}),
    TranscriptionState.PENDING: frozenset({TranscriptionState.PROCESSING}),
    TranscriptionState.PROCESSING: frozenset({TranscriptionState.COMPLETED, TranscriptionState.FAILED}),
    TranscriptionState.COMPLETED: frozenset(),
    TranscriptionState.FAILED: frozenset({TranscriptionState.PENDING, TranscriptionState.PROCESSING}),
}


def can_transition(current: TranscriptionState, target: TranscriptionState) -> bool:
    """Return True if ``current -> target`` is a legal state change."""
    return target in ALLOWED_TRANSITIONS[current]


@dataclass
class DBChannel:
    id: str
    name: str
    author: str | None
    feed_url: str
    description: str | None
    last_synced_at: datetime | None


@dataclass
class DBEpisode:
    guid: str
    channel_id: str
    title: str
    description: str | None
    link: str | None
    published_at: datetime | None
    audio_url: str
    cached_audio_path: str | None = None
    transcript: str | None = None
    transcription_state: TranscriptionState = TranscriptionState.NONE
    summary: str | None = None
    duration: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript)
