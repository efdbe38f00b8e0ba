"""
PodHub API Server

FastAPI application providing endpoints for:
- Channel and episode listing with feed sync
- Audio download and cached media serving
- Transcription (manual upload, one-shot, background queue)
- AI summaries
"""

import logging
import sqlite3
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import config, state
from .database import Database
from .feeds import FeedParser
from .media import EvictionWorker, MediaStore
from .routes import (
    channels_router,
    media_router,
    media_files_router,
    transcription_router,
    summary_router,
    misc_router,
)
from .summarizer import SummaryService
from .sync import FeedSyncEngine
from .transcriber import WhisperTranscriber
from .transcription_queue import TranscriptionQueue

logger = logging.getLogger(__name__)


def init_state():
    """Build every shared component from config."""
    config.MEDIA_DIR.mkdir(parents=True, exist_ok=True)

    state.db = Database(config.DB_PATH)
    if config.SEED_CHANNELS:
        state.db.seed_default_channels()

    state.feed_parser = FeedParser(timeout=config.FEED_TIMEOUT_SECONDS)
    state.sync_engine = FeedSyncEngine(
        state.db,
        state.feed_parser,
        stale_after=timedelta(minutes=config.SYNC_STALE_AFTER_MINUTES),
        item_limit=config.SYNC_ITEM_LIMIT,
    )

    state.media_store = MediaStore(
        config.MEDIA_DIR,
        state.db,
        max_bytes=config.MEDIA_CACHE_MAX_BYTES,
        timeout=config.DOWNLOAD_TIMEOUT_SECONDS,
    )
    state.eviction_worker = EvictionWorker(state.media_store)
    state.eviction_worker.start()

    state.transcriber = WhisperTranscriber(
        config.WHISPER_SERVER_URL,
        model=config.WHISPER_MODEL,
        timeout=config.TRANSCRIBE_TIMEOUT_SECONDS,
    )
    if not state.transcriber.configured:
        logger.warning("WHISPER_SERVER_URL not set. Transcription disabled.")

    state.transcription_queue = TranscriptionQueue(state.db, state.media_store, state.transcriber)
    state.transcription_queue.start()
    if config.RECOVER_TRANSCRIPTIONS and state.transcriber.configured:
        state.transcription_queue.recover()

    state.summary_service = SummaryService(state.db, max_chars=config.SUMMARY_MAX_CHARS)
    if not config.OPENAI_API_KEY:
        logger.warning("No OPENAI_API_KEY configured. Summaries need a per-request apiKey.")


def shutdown_state():
    """Stop background workers and close HTTP clients."""
    if state.transcription_queue:
        state.transcription_queue.stop()
    if state.eviction_worker:
        state.eviction_worker.stop()
    if state.transcriber:
        state.transcriber.close()
    if state.media_store:
        state.media_store.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup application resources."""
    # Startup - skip if already initialized (e.g., by tests)
    owned = state.db is None
    if owned:
        init_state()
        logger.info(f"PodHub {__version__} ready (media cache: {config.MEDIA_DIR})")

    yield

    # Shutdown
    if owned:
        shutdown_state()


app = FastAPI(
    title="PodHub API",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(sqlite3.Error)
async def database_exception_handler(request: Request, exc: sqlite3.Error):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Database error"})


# Include routers
app.include_router(misc_router)
app.include_router(channels_router)
app.include_router(media_router)
app.include_router(transcription_router)
app.include_router(summary_router)
app.include_router(media_files_router)


def run():
    """Console entry point."""
    import uvicorn

    logging.basicConfig(level=config.LOG_LEVEL)
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
