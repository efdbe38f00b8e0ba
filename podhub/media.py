"""
Media cache - episode audio on local disk, keyed by guid.

Handles:
- Deterministic, sanitized file naming from guid and source URL
- Idempotent streaming downloads (write to a part file, then rename)
- Size-bounded eviction, oldest modification time first
- A single background eviction worker fed by download events
"""

import logging
import os
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

import httpx

from .database import Database
from .exceptions import MediaDownloadError

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024
DOWNLOAD_CHUNK_SIZE = 256 * 1024
DEFAULT_EXTENSION = ".mp3"
PARTIAL_SUFFIX = ".part"


def sanitize_filename(name: str) -> str:
    """Replace characters that would break a flat cache filename."""
    for ch in ("/", "?", "&"):
        name = name.replace(ch, "_")
    return name


@dataclass
class MediaFetchResult:
    """Where the audio lives and whether it had to be downloaded."""
    path: Path
    status: Literal["exists", "downloaded"]


@dataclass
class EvictionReport:
    """Summary of one eviction pass."""
    total_before: int = 0
    total_after: int = 0
    deleted: list[str] = field(default_factory=list)


class MediaStore:
    """Filesystem-backed audio cache."""

    def __init__(
        self,
        media_dir: Path,
        db: Database,
        max_bytes: int = 500 * BYTES_PER_MB,
        timeout: float = 60,
        client: httpx.Client | None = None,
    ):
        self.media_dir = media_dir
        self.db = db
        self.max_bytes = max_bytes
        self.timeout = timeout
        self._client = client or httpx.Client(follow_redirects=True)
        self.evictor: "EvictionWorker | None" = None

    # ─────────────────────────────────────────────────────────────
    # Naming & lookup
    # ─────────────────────────────────────────────────────────────

    def filename_for(self, guid: str, source_url: str) -> str:
        """Cache filename: guid plus the extension of the URL path."""
        ext = os.path.splitext(urlparse(source_url).path)[1] or DEFAULT_EXTENSION
        return sanitize_filename(f"{guid}{ext}")

    def path_for(self, guid: str, source_url: str) -> Path:
        return self.media_dir / self.filename_for(guid, source_url)

    def exists(self, path: str | Path | None) -> bool:
        return bool(path) and Path(path).is_file()

    def resolve(self, filename: str) -> Path | None:
        """Map a requested filename to a cached file, refusing traversal."""
        if (
            not filename
            or filename in (".", "..")
            or "/" in filename
            or "\\" in filename
            or filename.endswith(PARTIAL_SUFFIX)
        ):
            return None
        path = self.media_dir / filename
        return path if path.is_file() else None

    # ─────────────────────────────────────────────────────────────
    # Download
    # ─────────────────────────────────────────────────────────────

    def fetch(self, guid: str, source_url: str) -> MediaFetchResult:
        """
        Make sure the episode's audio is in the cache.

        An already-resident file is returned without any network I/O. A
        new download streams into a part file that is renamed into place
        once the whole body is on disk; only then is the path recorded on
        the episode.

        Raises:
            MediaDownloadError: If the source cannot be fetched or written
        """
        if not source_url:
            raise MediaDownloadError(f"No audio URL for episode {guid}")

        path = self.path_for(guid, source_url)
        if path.is_file():
            self.db.set_cached_audio_path(guid, str(path))
            return MediaFetchResult(path=path, status="exists")

        try:
            self.media_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MediaDownloadError(f"Cannot create media directory: {e}") from e

        partial = path.with_name(f"{path.name}.{uuid.uuid4().hex}{PARTIAL_SUFFIX}")
        try:
            with self._client.stream(
                "GET", source_url, timeout=self.timeout, follow_redirects=True
            ) as resp:
                resp.raise_for_status()
                with open(partial, "wb") as out:
                    for chunk in resp.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                        out.write(chunk)
            os.replace(partial, path)
        except (httpx.HTTPError, OSError) as e:
            partial.unlink(missing_ok=True)
            raise MediaDownloadError(f"Failed to download {source_url}: {e}") from e

        self.db.set_cached_audio_path(guid, str(path))
        logger.info(f"Downloaded audio: {path.name} ({path.stat().st_size / BYTES_PER_MB:.2f} MB)")

        self.request_eviction()
        return MediaFetchResult(path=path, status="downloaded")

    # ─────────────────────────────────────────────────────────────
    # Eviction
    # ─────────────────────────────────────────────────────────────

    def request_eviction(self):
        """Ask the eviction worker for a pass; never blocks."""
        if self.evictor is not None:
            self.evictor.trigger()

    def cache_size(self) -> int:
        return sum(size for _, _, size in self._scan())

    def evict(self, max_bytes: int | None = None) -> EvictionReport:
        """
        Delete the oldest cached files until the cache fits ``max_bytes``.

        Nothing is deleted while the cache is within budget. A file that
        cannot be removed is skipped for this pass.
        """
        budget = self.max_bytes if max_bytes is None else max_bytes
        entries = sorted(self._scan())
        total = sum(size for _, _, size in entries)
        report = EvictionReport(total_before=total, total_after=total)

        if total <= budget:
            return report

        logger.info(
            f"Media cache size ({total // BYTES_PER_MB} MB) exceeds limit "
            f"({budget // BYTES_PER_MB} MB), cleaning up..."
        )

        for _mtime, name, size in entries:
            if total <= budget:
                break
            path = self.media_dir / name
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Could not delete cached file {name}: {e}")
                continue
            total -= size
            report.deleted.append(name)
            self.db.clear_cached_audio_path_by_filename(name)
            logger.info(f"Deleted old cache: {name}")

        report.total_after = total
        return report

    def _scan(self) -> list[tuple[float, str, int]]:
        """(mtime, name, size) for every complete file in the cache."""
        entries = []
        try:
            iterator = os.scandir(self.media_dir)
        except FileNotFoundError:
            return entries

        with iterator:
            for entry in iterator:
                if entry.name.endswith(PARTIAL_SUFFIX):
                    continue
                try:
                    if not entry.is_file():
                        continue
                    info = entry.stat()
                except OSError:
                    continue
                entries.append((info.st_mtime, entry.name, info.st_size))
        return entries

    def close(self):
        self._client.close()


class EvictionWorker:
    """
    Single background thread that runs eviction passes on demand.

    Triggers raised while a pass is already pending collapse into one, so
    a burst of downloads never fans out into concurrent directory scans.
    """

    def __init__(self, store: MediaStore, max_bytes: int | None = None):
        self.store = store
        self.max_bytes = max_bytes
        self._wake = threading.Event()
        self._stopping = False
        self._thread: threading.Thread | None = None
        self.passes = 0

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stopping = False
        self._thread = threading.Thread(target=self._run, name="media-eviction", daemon=True)
        self._thread.start()
        self.store.evictor = self
        logger.info("Media eviction worker started")

    def stop(self, timeout: float = 5.0):
        self._stopping = True
        self._wake.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None
        if self.store.evictor is self:
            self.store.evictor = None
        logger.info("Media eviction worker stopped")

    def trigger(self):
        self._wake.set()

    def _run(self):
        while True:
            self._wake.wait()
            self._wake.clear()
            if self._stopping:
                break
            try:
                self.store.evict(self.max_bytes)
            except Exception as e:
                logger.exception(f"Error during media eviction: {e}")
            self.passes += 1
