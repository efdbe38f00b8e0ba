"""
Transcription routes: manual SRT, one-shot transcription, queueing.
"""

from fastapi import APIRouter, File, Form, UploadFile

from ..schemas import (
    QueueTranscriptionRequest,
    QueueTranscriptionResponse,
    SaveSrtRequest,
    TranscribeRequest,
    TranscribeResponse,
    UploadSrtResponse,
)
from ..services import TranscriptionServiceDep
from ..validators import MAX_SRT_UPLOAD_BYTES, require_field, require_upload_size

router = APIRouter(prefix="/api", tags=["transcription"])


# ─────────────────────────────────────────────────────────────
# Manual Subtitles
# ─────────────────────────────────────────────────────────────

@router.post("/save-srt")
def save_srt(request: SaveSrtRequest, service: TranscriptionServiceDep) -> dict:
    """Overwrite an episode's transcript."""
    guid = require_field(request.guid, "guid")
    service.save_srt(guid, request.srt_content)
    return {"success": True}


@router.post("/upload-srt", response_model=UploadSrtResponse)
def upload_srt(
    service: TranscriptionServiceDep,
    guid: str = Form(""),
    file: UploadFile = File(...),
):
    """Upload an SRT file for an episode and mark it transcribed."""
    guid = require_field(guid, "guid")
    # Read one byte past the limit so oversized files are detected without buffering them whole
    content = require_upload_size(file.file.read(MAX_SRT_UPLOAD_BYTES + 1))
    size = service.upload_srt(guid, content)
    return UploadSrtResponse(message="SRT uploaded and saved successfully", size=size)


# ─────────────────────────────────────────────────────────────
# Speech-to-text
# ─────────────────────────────────────────────────────────────

@router.post("/transcribe", response_model=TranscribeResponse)
def transcribe(request: TranscribeRequest, service: TranscriptionServiceDep):
    """Transcribe a cached audio file synchronously."""
    audio_path = require_field(request.audio_path, "audioPath")
    srt, cues = service.transcribe(audio_path, guid=request.guid.strip())
    return TranscribeResponse(srt_content=srt, line_count=cues)


@router.post("/queue-transcription", response_model=QueueTranscriptionResponse)
def queue_transcription(request: QueueTranscriptionRequest, service: TranscriptionServiceDep):
    """Add an episode to the background transcription queue."""
    guid = require_field(request.guid, "guid")
    queued, _ = service.enqueue(guid, audio_url=request.audio_url, title=request.title)
    message = "Added to transcription queue" if queued else "Already queued or transcribed"
    size = service.queue.size() if service.queue else 0
    return QueueTranscriptionResponse(queued=queued, message=message, queue_size=size)
