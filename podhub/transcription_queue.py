"""
Transcription queue - FIFO of episodes waiting for speech-to-text.

One long-lived worker thread blocks on the task channel and handles tasks
strictly one at a time, so the external service never sees more than one
request from us. Each episode moves none -> pending -> processing ->
completed | failed; a failed episode can be enqueued again.

Tasks live only in memory. Anything still waiting when the process stops
is dropped; ``recover()`` re-enqueues those episodes on the next start.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime

from .database import Database, TranscriptionState
from .exceptions import MediaDownloadError, TranscriptionError
from .media import MediaStore
from .transcriber import WhisperTranscriber

logger = logging.getLogger(__name__)

_STOP = object()


@dataclass
class TranscriptionTask:
    guid: str
    source_url: str
    cached_path: str | None
    title: str
    enqueued_at: datetime = field(default_factory=datetime.now)


class TranscriptionQueue:
    """Single-consumer transcription queue with one background worker."""

    def __init__(
        self,
        db: Database,
        media_store: MediaStore,
        transcriber: WhisperTranscriber,
    ):
        self.db = db
        self.media_store = media_store
        self.transcriber = transcriber
        self._tasks: queue.Queue = queue.Queue()
        # Guards the waiting set and in-flight guid only; never held across I/O.
        self._lock = threading.Lock()
        self._waiting: set[str] = set()
        self._in_flight: str | None = None
        self._thread: threading.Thread | None = None

    # ─────────────────────────────────────────────────────────────
    # Producer side
    # ─────────────────────────────────────────────────────────────

    def enqueue(self, task: TranscriptionTask) -> bool:
        """
        Add a task unless it is redundant.

        Rejected when the guid is already waiting or being processed, when
        the episode already has a transcript, or when the episode's state
        cannot move to pending.

        Returns:
            True if the task was queued
        """
        episode = self.db.get_episode(task.guid)
        if episode is None:
            logger.warning(f"Not queueing unknown episode: {task.guid}")
            return False
        if episode.transcript:
            logger.info(f"Episode already has subtitles: {task.title}")
            return False

        with self._lock:
            if task.guid in self._waiting or task.guid == self._in_flight:
                logger.info(f"Task already in queue: {task.title}")
                return False
            self._waiting.add(task.guid)

        if not self._mark_pending(episode.guid, episode.transcription_state):
            with self._lock:
                self._waiting.discard(task.guid)
            return False

        self._tasks.put(task)
        logger.info(f"Added to transcription queue: {task.title} (Queue size: {self.size()})")
        return True

    def _mark_pending(self, guid: str, current: TranscriptionState) -> bool:
        if current == TranscriptionState.PENDING:
            return True
        if current == TranscriptionState.PROCESSING:
            # Not in flight here, so this is left over from an interrupted run
            logger.info(f"Re-queueing episode stuck in processing: {guid}")
            return self.db.set_transcription_state(guid, TranscriptionState.PENDING, force=True)
        return self.db.set_transcription_state(guid, TranscriptionState.PENDING)

    def recover(self) -> int:
        """
        Re-enqueue episodes left pending or processing by a previous run.

        Returns:
            Number of tasks queued
        """
        stuck = self.db.get_episodes_by_state(
            [TranscriptionState.PENDING, TranscriptionState.PROCESSING]
        )
        recovered = 0
        for episode in stuck:
            if episode.transcript:
                self.db.set_transcription_state(episode.guid, TranscriptionState.COMPLETED, force=True)
                continue

            with self._lock:
                if episode.guid in self._waiting or episode.guid == self._in_flight:
                    continue
                self._waiting.add(episode.guid)

            self.db.set_transcription_state(episode.guid, TranscriptionState.PENDING, force=True)
            self._tasks.put(TranscriptionTask(
                guid=episode.guid,
                source_url=episode.audio_url,
                cached_path=episode.cached_audio_path,
                title=episode.title,
            ))
            recovered += 1

        if recovered:
            logger.info(f"Recovered {recovered} interrupted transcription task(s)")
        return recovered

    def size(self) -> int:
        """Tasks waiting to be picked up."""
        with self._lock:
            return len(self._waiting)

    def is_queued(self, guid: str) -> bool:
        with self._lock:
            return guid in self._waiting or guid == self._in_flight

    # ─────────────────────────────────────────────────────────────
    # Worker lifecycle
    # ─────────────────────────────────────────────────────────────

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name="transcription-worker", daemon=True)
        self._thread.start()
        logger.info("Transcription worker started")

    def stop(self, timeout: float = 5.0):
        """Stop the worker. Tasks that were not picked up yet are dropped."""
        dropped = 0
        while True:
            try:
                task = self._tasks.get_nowait()
            except queue.Empty:
                break
            if task is not _STOP:
                dropped += 1
            self._tasks.task_done()

        with self._lock:
            self._waiting.clear()

        if dropped:
            logger.warning(f"Dropping {dropped} queued transcription task(s) on shutdown")

        if self._thread:
            self._tasks.put(_STOP)
            self._thread.join(timeout)
            self._thread = None
        logger.info("Transcription worker stopped")

    def join(self):
        """Block until every queued task has been processed."""
        self._tasks.join()

    def _run(self):
        while True:
            task = self._tasks.get()
            try:
                if task is _STOP:
                    break
                with self._lock:
                    self._waiting.discard(task.guid)
                    self._in_flight = task.guid
                self._process(task)
            except Exception as e:
                logger.exception(f"Unexpected error in transcription worker: {e}")
            finally:
                with self._lock:
                    self._in_flight = None
                self._tasks.task_done()

    def _process(self, task: TranscriptionTask):
        logger.info(f"Processing transcription task: {task.title}")
        episode = self.db.get_episode(task.guid)
        if episode is None:
            logger.warning(f"Skipping transcription for deleted episode: {task.guid}")
            return
        if episode.transcript:
            # Subtitles arrived while the task was waiting
            logger.info(f"Skipping transcription, subtitles already saved: {task.title}")
            self.db.set_transcription_state(task.guid, TranscriptionState.COMPLETED, force=True)
            return
        if not self.db.set_transcription_state(task.guid, TranscriptionState.PROCESSING):
            logger.info(f"Skipping transcription for {task.title} (state {episode.transcription_state.value})")
            return

        audio_path = task.cached_path
        if not self.media_store.exists(audio_path):
            logger.info(f"Downloading audio for: {task.title}")
            try:
                audio_path = str(self.media_store.fetch(task.guid, task.source_url).path)
            except MediaDownloadError as e:
                logger.error(f"Failed to download audio for {task.title}: {e}")
                self.db.set_transcription_state(task.guid, TranscriptionState.FAILED)
                return

        try:
            srt = self.transcriber.transcribe(audio_path)
        except TranscriptionError as e:
            logger.error(f"Transcription failed for {task.title}: {e}")
            self.db.set_transcription_state(task.guid, TranscriptionState.FAILED)
            return

        if self.db.complete_transcription(task.guid, srt):
            logger.info(f"Transcription completed and saved: {task.title}")
        else:
            current = self.db.get_episode(task.guid)
            if current and current.transcript:
                # Subtitles saved by hand during the run win over the Whisper output
                self.db.set_transcription_state(task.guid, TranscriptionState.COMPLETED, force=True)
