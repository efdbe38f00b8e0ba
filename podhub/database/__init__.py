"""
Database module - SQLite operations for channels and episodes.

Uses repository pattern for better separation of concerns.
"""

from .connection import DatabaseConnection
from .models import DBChannel, DBEpisode, TranscriptionState, can_transition
from .channel_repository import ChannelRepository
from .episode_repository import EpisodeRepository
from .database import Database

__all__ = [
    "Database",
    "DatabaseConnection",
    "DBChannel",
    "DBEpisode",
    "TranscriptionState",
    "can_transition",
    "ChannelRepository",
    "EpisodeRepository",
]
