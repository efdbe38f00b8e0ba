"""
Domain exceptions and HTTP exception utilities for common error patterns.

Provides helper functions to reduce boilerplate for common 404 errors.
"""

from typing import TypeVar

from fastapi import HTTPException

T = TypeVar("T")


class MediaDownloadError(Exception):
    """Audio could not be fetched into the media cache."""


class TranscriptionError(Exception):
    """The speech-to-text service failed or is unreachable."""


class SummaryError(Exception):
    """The summarization call failed."""


class SummaryNotConfiguredError(SummaryError):
    """No API key is available for the summarization call."""


def require_resource(resource: T | None, detail: str = "Resource not found") -> T:
    """
    Raise 404 if resource is None, otherwise return the resource.

    Usage:
        episode = require_resource(db.get_episode(guid), "Episode not found")
    """
    if resource is None:
        raise HTTPException(status_code=404, detail=detail)
    return resource


def require_channel(channel: T | None) -> T:
    """Raise 404 if channel is None."""
    return require_resource(channel, "Channel not found")


def require_episode(episode: T | None) -> T:
    """Raise 404 if episode is None."""
    return require_resource(episode, "Episode not found")
