"""
Media routes: audio download into the cache and cached file serving.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ..config import get_db, get_media_store
from ..database import Database
from ..exceptions import MediaDownloadError, require_episode
from ..media import MediaStore
from ..schemas import DownloadRequest, DownloadResponse, EpisodeResponse
from ..validators import require_field

router = APIRouter(prefix="/api", tags=["media"])
files_router = APIRouter(tags=["media"])


@router.post("/download", response_model=DownloadResponse)
def download(
    request: DownloadRequest,
    db: Annotated[Database, Depends(get_db)],
    media_store: Annotated[MediaStore, Depends(get_media_store)],
):
    """Download an episode's audio into the cache, or report that it is there."""
    guid = require_field(request.guid, "guid")
    url = require_field(request.url, "url")
    require_episode(db.get_episode(guid))

    try:
        result = media_store.fetch(guid, url)
    except MediaDownloadError as e:
        raise HTTPException(status_code=502, detail=str(e))

    response = DownloadResponse(path=str(result.path), status=result.status)
    if result.status == "downloaded":
        episode = db.get_episode(guid)
        response.episode = EpisodeResponse.from_db(episode) if episode else None
    return response


@files_router.get("/media/{filename}")
def serve_media(
    filename: str,
    media_store: Annotated[MediaStore, Depends(get_media_store)],
):
    """Serve a cached audio file."""
    path = media_store.resolve(filename)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path)
