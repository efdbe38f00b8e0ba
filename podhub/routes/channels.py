"""
Channel routes: channel list and per-channel episode listing.
"""

from fastapi import APIRouter

from ..schemas import ChannelResponse, EpisodeListResponse, EpisodeResponse
from ..services import ChannelServiceDep

router = APIRouter(prefix="/api/channels", tags=["channels"])


@router.get("", response_model=list[ChannelResponse])
def list_channels(service: ChannelServiceDep):
    """List all channels."""
    return [ChannelResponse.from_db(c) for c in service.list_channels()]


@router.get("/{channel_id}/episodes", response_model=EpisodeListResponse)
def list_episodes(channel_id: str, service: ChannelServiceDep, refresh: bool = False):
    """
    Newest episodes of a channel.

    The feed is re-fetched when ``refresh`` is set, when nothing is cached
    yet, or when the last sync is older than the staleness window.
    """
    episodes = service.get_episodes(channel_id, refresh=refresh)
    return EpisodeListResponse(episodes=[EpisodeResponse.from_db(e) for e in episodes])
