"""
Configuration and application state management.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from fastapi import HTTPException

if TYPE_CHECKING:
    from .database import Database
    from .feeds import FeedParser
    from .media import MediaStore, EvictionWorker
    from .summarizer import SummaryService
    from .sync import FeedSyncEngine
    from .transcriber import WhisperTranscriber
    from .transcription_queue import TranscriptionQueue

# Load environment variables
load_dotenv()


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


class Config:
    """Application configuration from environment."""
    DB_PATH: Path = Path(os.getenv("DB_PATH", "./data/podhub.db"))

    # Audio cache
    MEDIA_DIR: Path = Path(os.getenv("MEDIA_DIR", "./media_cache"))
    MEDIA_CACHE_MAX_BYTES: int = int(os.getenv("MEDIA_CACHE_MAX_BYTES", str(500 * 1024 * 1024)))
    DOWNLOAD_TIMEOUT_SECONDS: float = float(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "60"))

    # Speech-to-text (OpenAI-compatible /v1/audio/transcriptions)
    WHISPER_SERVER_URL: str = os.getenv("WHISPER_SERVER_URL", "")
    WHISPER_MODEL: str = os.getenv("WHISPER_MODEL", "base")
    TRANSCRIBE_TIMEOUT_SECONDS: float = float(os.getenv("TRANSCRIBE_TIMEOUT_SECONDS", "1800"))

    # Summaries (OpenAI-compatible chat completions); requests may override each value
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_API_BASE: str = os.getenv("OPENAI_API_BASE", "") or "https://api.openai.com/v1"
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "") or "gpt-3.5-turbo"
    SUMMARY_MAX_CHARS: int = int(os.getenv("SUMMARY_MAX_CHARS", "8000"))
    SUMMARY_TIMEOUT_SECONDS: float = float(os.getenv("SUMMARY_TIMEOUT_SECONDS", "120"))

    # Feed sync
    SYNC_STALE_AFTER_MINUTES: int = int(os.getenv("SYNC_STALE_AFTER_MINUTES", "60"))
    SYNC_ITEM_LIMIT: int = int(os.getenv("SYNC_ITEM_LIMIT", "50"))
    FEED_TIMEOUT_SECONDS: float = float(os.getenv("FEED_TIMEOUT_SECONDS", "30"))

    # Startup behaviour
    SEED_CHANNELS: bool = _parse_bool(os.getenv("SEED_CHANNELS"), default=True)
    RECOVER_TRANSCRIPTIONS: bool = _parse_bool(os.getenv("RECOVER_TRANSCRIPTIONS"), default=True)

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8080"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def has_transcriber(cls) -> bool:
        return bool(cls.WHISPER_SERVER_URL)


config = Config()


class AppState:
    """Shared application state."""
    db: "Database | None" = None
    feed_parser: "FeedParser | None" = None
    sync_engine: "FeedSyncEngine | None" = None
    media_store: "MediaStore | None" = None
    eviction_worker: "EvictionWorker | None" = None
    transcriber: "WhisperTranscriber | None" = None
    transcription_queue: "TranscriptionQueue | None" = None
    summary_service: "SummaryService | None" = None


state = AppState()


def get_db() -> "Database":
    """Dependency to get database instance."""
    if not state.db:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return state.db


def get_media_store() -> "MediaStore":
    """Dependency to get the media cache."""
    if not state.media_store:
        raise HTTPException(status_code=500, detail="Media store not initialized")
    return state.media_store


def get_transcription_queue() -> "TranscriptionQueue":
    """Dependency to get the transcription queue."""
    if not state.transcription_queue:
        raise HTTPException(status_code=500, detail="Transcription queue not initialized")
    return state.transcription_queue


def get_summary_service() -> "SummaryService":
    """Dependency to get the summary service."""
    if not state.summary_service:
        raise HTTPException(status_code=500, detail="Summary service not initialized")
    return state.summary_service
