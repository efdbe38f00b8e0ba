"""
Speech-to-text client for an OpenAI-compatible Whisper server.

Uploads an audio file as multipart form data to
``<base>/v1/audio/transcriptions`` and returns the SRT text.
"""

import logging
import time
from pathlib import Path

import httpx

from .exceptions import TranscriptionError

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


def count_srt_cues(srt: str) -> int:
    """Number of timed cues in an SRT document."""
    return srt.count("-->")


class WhisperTranscriber:
    """Blocking client for the transcription endpoint."""

    def __init__(
        self,
        base_url: str,
        model: str = "base",
        timeout: float = 30 * 60,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._client = client or httpx.Client()

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/v1/audio/transcriptions"

    def transcribe(self, audio_path: str | Path) -> str:
        """
        Transcribe a local audio file to SRT.

        Raises:
            TranscriptionError: If the server is not configured, unreachable,
                or answers with a non-200 status
        """
        if not self.configured:
            raise TranscriptionError("WHISPER_SERVER_URL is not configured")

        path = Path(audio_path)
        try:
            size_mb = path.stat().st_size / BYTES_PER_MB
        except OSError as e:
            raise TranscriptionError(f"Cannot read audio file {path}: {e}") from e

        logger.info(f"Sending to Whisper ({size_mb:.2f} MB): {path.name}")
        start = time.monotonic()
        try:
            with open(path, "rb") as audio:
                resp = self._client.post(
                    self.endpoint,
                    files={"file": (path.name, audio)},
                    data={"model": self.model, "response_format": "srt"},
                    timeout=self.timeout,
                )
        except (httpx.HTTPError, OSError) as e:
            raise TranscriptionError(
                f"Whisper request failed after {time.monotonic() - start:.1f}s: {e}"
            ) from e

        if resp.status_code != 200:
            raise TranscriptionError(f"Whisper returned {resp.status_code}: {resp.text}")

        srt = resp.text
        if not srt.strip():
            raise TranscriptionError("Whisper returned an empty transcript")

        logger.info(
            f"Transcription completed in {time.monotonic() - start:.1f}s "
            f"({count_srt_cues(srt)} cues, {len(srt)} bytes)"
        )
        return srt

    def close(self):
        self._client.close()
