"""
Transcription service: manual transcripts, one-shot transcription, and
hand-off to the background queue.
"""

import logging
from pathlib import Path

from fastapi import HTTPException

from ..database import Database, DBEpisode, TranscriptionState
from ..exceptions import TranscriptionError, require_episode
from ..media import MediaStore
from ..transcriber import WhisperTranscriber, count_srt_cues
from ..transcription_queue import TranscriptionQueue, TranscriptionTask

logger = logging.getLogger(__name__)


class TranscriptionService:
    """Service for everything that writes an episode's transcript."""

    def __init__(
        self,
        db: Database,
        media_store: MediaStore,
        transcriber: WhisperTranscriber | None,
        queue: TranscriptionQueue | None,
    ):
        self.db = db
        self.media_store = media_store
        self.transcriber = transcriber
        self.queue = queue

    def _require_transcriber(self) -> WhisperTranscriber:
        if self.transcriber is None or not self.transcriber.configured:
            raise HTTPException(status_code=503, detail="Transcription service not configured")
        return self.transcriber

    # ─────────────────────────────────────────────────────────────
    # Manual transcripts
    # ─────────────────────────────────────────────────────────────

    def save_srt(self, guid: str, srt_content: str):
        """Overwrite the stored transcript; the transcription state is left alone."""
        require_episode(self.db.get_episode(guid))
        self.db.update_transcript(guid, srt_content)
        logger.info(f"Saved subtitles for {guid} ({len(srt_content)} bytes)")

    def upload_srt(self, guid: str, raw: bytes) -> int:
        """
        Store an uploaded SRT file and mark the episode completed.

        Returns:
            Size of the upload in bytes
        """
        require_episode(self.db.get_episode(guid))
        try:
            srt = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="SRT file must be UTF-8 text")
        if not srt.strip():
            raise HTTPException(status_code=400, detail="SRT file is empty")

        self.db.complete_transcription(guid, srt, force=True)
        logger.info(f"Uploaded subtitles saved for {guid} ({len(raw)} bytes)")
        return len(raw)

    # ─────────────────────────────────────────────────────────────
    # Speech-to-text
    # ─────────────────────────────────────────────────────────────

    def transcribe(self, audio_path: str, guid: str = "") -> tuple[str, int]:
        """
        Transcribe a cached file right away, bypassing the queue.

        Returns:
            (srt text, cue count)

        Raises:
            HTTPException: 404 for a missing file or episode, 503 when no
                transcriber is configured, 502 when transcription fails
        """
        transcriber = self._require_transcriber()

        path = self.media_store.resolve(Path(audio_path).name)
        if path is None:
            raise HTTPException(status_code=404, detail="Audio file not found")
        if guid:
            require_episode(self.db.get_episode(guid))
            self.db.set_transcription_state(guid, TranscriptionState.PROCESSING, force=True)

        try:
            srt = transcriber.transcribe(path)
        except TranscriptionError as e:
            logger.error(f"Transcription failed for {path.name}: {e}")
            if guid:
                self.db.set_transcription_state(guid, TranscriptionState.FAILED)
            raise HTTPException(status_code=502, detail=str(e))

        if guid:
            self.db.complete_transcription(guid, srt, force=True)
            logger.info(f"Subtitles saved to database for {guid}")
        return srt, count_srt_cues(srt)

    def enqueue(self, guid: str, audio_url: str = "", title: str = "") -> tuple[bool, DBEpisode]:
        """
        Hand an episode to the background queue.

        Returns:
            (whether a task was queued, the episode)
        """
        self._require_transcriber()
        if self.queue is None:
            raise HTTPException(status_code=503, detail="Transcription queue not running")

        episode = require_episode(self.db.get_episode(guid))
        task = TranscriptionTask(
            guid=guid,
            source_url=audio_url or episode.audio_url,
            cached_path=episode.cached_audio_path,
            title=title or episode.title,
        )
        return self.queue.enqueue(task), episode
