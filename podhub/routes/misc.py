"""
Miscellaneous routes: health check.
"""

from fastapi import APIRouter

from .. import __version__
from ..config import config, state
from ..schemas import StatusResponse

router = APIRouter(prefix="/api", tags=["misc"])


@router.get("/status", response_model=StatusResponse)
def health_check():
    """API health check."""
    queue = state.transcription_queue
    return StatusResponse(
        version=__version__,
        queue_size=queue.size() if queue else 0,
        transcription_enabled=bool(state.transcriber and state.transcriber.configured),
        summarization_enabled=state.summary_service is not None and bool(config.OPENAI_API_KEY),
    )
