"""
Service layer for business logic.

Services encapsulate business logic, keeping routes as thin HTTP adapters.
Each service receives its dependencies via constructor injection.

Usage in routes:
    from ..services import ChannelServiceDep

    @router.get("/channels/{channel_id}/episodes")
    def list_episodes(channel_id: str, service: ChannelServiceDep):
        return service.get_episodes(channel_id)
"""

from typing import Annotated

from fastapi import Depends, HTTPException

from ..config import state, get_db, get_media_store
from ..database import Database
from ..media import MediaStore

from .channel_service import ChannelService
from .transcription_service import TranscriptionService

__all__ = [
    # Services
    "ChannelService",
    "TranscriptionService",
    # Dependency factories
    "get_channel_service",
    "get_transcription_service",
    # Type aliases for dependency injection
    "ChannelServiceDep",
    "TranscriptionServiceDep",
]


def get_channel_service(db: Annotated[Database, Depends(get_db)]) -> ChannelService:
    """Dependency to get ChannelService instance."""
    if not state.sync_engine:
        raise HTTPException(status_code=500, detail="Sync engine not initialized")
    return ChannelService(db=db, sync_engine=state.sync_engine)


def get_transcription_service(
    db: Annotated[Database, Depends(get_db)],
    media_store: Annotated[MediaStore, Depends(get_media_store)],
) -> TranscriptionService:
    """Dependency to get TranscriptionService instance."""
    return TranscriptionService(
        db=db,
        media_store=media_store,
        transcriber=state.transcriber,
        queue=state.transcription_queue,
    )


ChannelServiceDep = Annotated[ChannelService, Depends(get_channel_service)]
TranscriptionServiceDep = Annotated[TranscriptionService, Depends(get_transcription_service)]
