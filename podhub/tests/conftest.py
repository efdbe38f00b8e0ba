"""
Pytest fixtures for backend tests.

External collaborators are replaced with in-process fakes: feeds with a
parser that counts fetches, audio hosts with ``httpx.MockTransport``, the
Whisper server with a scripted transcriber, and the LLM with MockProvider.
"""

import os
import tempfile
import threading
import time
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient

from podhub.config import state
from podhub.database import Database
from podhub.exceptions import TranscriptionError
from podhub.feeds import Feed, FeedItem
from podhub.media import EvictionWorker, MediaStore
from podhub.providers.base import LLMProvider, LLMResponse
from podhub.server import app
from podhub.summarizer import SummaryService
from podhub.sync import FeedSyncEngine
from podhub.transcription_queue import TranscriptionQueue

SAMPLE_SRT = """1
00:00:00,000 --> 00:00:04,000
Welcome to the show.

2
00:00:04,000 --> 00:00:09,500
Today we talk about feeds.
"""

AUDIO_BYTES = b"ID3" + b"\x00" * 2048


# ─────────────────────────────────────────────────────────────
# Fakes
# ─────────────────────────────────────────────────────────────

class FakeFeedParser:
    """Returns a scripted feed and counts how often it was fetched."""

    def __init__(self, items: list[FeedItem] | None = None):
        self.items = items or []
        self.error: Exception | None = None
        self.fetch_count = 0
        self.urls: list[str] = []

    def fetch(self, url: str) -> Feed:
        self.fetch_count += 1
        self.urls.append(url)
        if self.error:
            raise self.error
        return Feed(
            url=url,
            title="Fake Feed",
            description=None,
            items=list(self.items),
            last_fetched=datetime.now(),
        )


class FakeTranscriber:
    """Stands in for WhisperTranscriber."""

    def __init__(self, srt: str = SAMPLE_SRT, configured: bool = True):
        self.srt = srt
        self.configured = configured
        self.error: str | None = None
        self.calls: list[str] = []
        # Tests can clear this to hold the worker inside transcribe()
        self.gate = threading.Event()
        self.gate.set()
        self.started = threading.Event()

    def transcribe(self, audio_path) -> str:
        self.calls.append(str(audio_path))
        self.started.set()
        self.gate.wait(timeout=10)
        if self.error:
            raise TranscriptionError(self.error)
        return self.srt

    def close(self):
        pass


class MockProvider(LLMProvider):
    """Mock LLM provider that returns pre-configured responses."""

    def __init__(self):
        self.calls: list[dict] = []
        self.responses: list[str] = []
        self.error: Exception | None = None
        self._call_index = 0

    @property
    def name(self) -> str:
        return "mock"

    def queue_response(self, text: str):
        """Queue a response to be returned on the next complete() call."""
        self.responses.append(text)

    def complete(self, user_prompt: str, model: str | None = None) -> LLMResponse:
        self.calls.append({"user_prompt": user_prompt, "model": model})
        if self.error:
            raise self.error
        text = self.responses[self._call_index] if self._call_index < len(self.responses) else "A summary."
        self._call_index += 1
        return LLMResponse(text=text, model=model or "mock")


class AudioHost:
    """httpx.MockTransport handler serving fake audio files."""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.requests: list[str] = []

    def add(self, url: str, content: bytes = AUDIO_BYTES):
        self.files[url] = content

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url not in self.files:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(200, content=self.files[url])

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


def make_item(n: int, **overrides) -> FeedItem:
    """Feed item number ``n``; higher numbers are newer."""
    fields = dict(
        guid=f"ep-{n}",
        title=f"Episode {n}",
        description=f"Description {n}",
        link=f"https://example.com/ep/{n}",
        published=datetime(2024, 1, 1) + timedelta(days=n),
        enclosure_url=f"https://cdn.example.com/ep{n}.mp3",
        duration="00:30:00",
    )
    fields.update(overrides)
    return FeedItem(**fields)


def wait_for(predicate, timeout: float = 5.0) -> bool:
    """Poll until `predicate` holds or the timeout passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def add_episode(db: Database, guid: str = "ep-1", channel_id: str = "test", **overrides) -> str:
    fields = dict(
        guid=guid,
        channel_id=channel_id,
        title=f"Title {guid}",
        description="",
        link=f"https://example.com/{guid}",
        published_at=datetime(2024, 1, 1),
        audio_url=f"https://cdn.example.com/{guid}.mp3",
    )
    fields.update(overrides)
    db.upsert_episode(**fields)
    return guid


# ─────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────

@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        yield Path(f.name)
    # Cleanup
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(f.name + suffix):
            os.unlink(f.name + suffix)


@pytest.fixture
def temp_media_dir():
    """Create a temporary media cache directory."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def test_db(temp_db_path):
    """Create a test database instance with one channel."""
    db = Database(temp_db_path)
    db.add_channel("test", "Test Channel", "https://feeds.example.com/test.xml", author="Tester")
    yield db


@pytest.fixture
def audio_host():
    return AudioHost()


@pytest.fixture
def media_store(test_db, temp_media_dir, audio_host):
    store = MediaStore(temp_media_dir, test_db, max_bytes=1024 * 1024, client=audio_host.client())
    yield store
    store.close()


@pytest.fixture
def feed_parser():
    return FakeFeedParser()


@pytest.fixture
def transcriber():
    return FakeTranscriber()


@pytest.fixture
def provider():
    return MockProvider()


@pytest.fixture
def transcription_queue(test_db, media_store, transcriber):
    queue = TranscriptionQueue(test_db, media_store, transcriber)
    yield queue
    transcriber.gate.set()
    queue.stop()


@pytest.fixture
def components(test_db, feed_parser, media_store, transcriber, provider, transcription_queue, audio_host):
    """Every collaborator the routes need, wired to fakes."""
    return SimpleNamespace(
        db=test_db,
        feed_parser=feed_parser,
        sync_engine=FeedSyncEngine(test_db, feed_parser),
        media_store=media_store,
        transcriber=transcriber,
        transcription_queue=transcription_queue,
        summary_service=SummaryService(test_db, provider_factory=lambda _cfg: provider),
        provider=provider,
        audio_host=audio_host,
    )


STATE_FIELDS = (
    "db",
    "feed_parser",
    "sync_engine",
    "media_store",
    "eviction_worker",
    "transcriber",
    "transcription_queue",
    "summary_service",
)


@pytest.fixture
def client(components):
    """Create a test client with isolated database, cache and fakes."""
    # Store original state
    original = {name: getattr(state, name) for name in STATE_FIELDS}

    state.db = components.db
    state.feed_parser = components.feed_parser
    state.sync_engine = components.sync_engine
    state.media_store = components.media_store
    state.eviction_worker = EvictionWorker(components.media_store)
    state.transcriber = components.transcriber
    state.transcription_queue = components.transcription_queue
    state.summary_service = components.summary_service

    state.eviction_worker.start()
    components.transcription_queue.start()

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    state.eviction_worker.stop()

    # Restore original state
    for name, value in original.items():
        setattr(state, name, value)
