"""
Episode repository - upsert and field-level updates for episodes.

Fields that must change together (transcript and transcription state) are
written by a single UPDATE so they commit atomically.
"""

import logging
from datetime import datetime

from .connection import DatabaseConnection
from .converters import row_to_episode
from .models import ALLOWED_TRANSITIONS, DBEpisode, TranscriptionState

logger = logging.getLogger(__name__)


def _sources_for(target: TranscriptionState) -> list[str]:
    """States from which ``target`` may be entered."""
    return [s.value for s, targets in ALLOWED_TRANSITIONS.items() if target in targets]


class EpisodeRepository:
    """Repository for episode operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    # ─────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────

    def get(self, guid: str) -> DBEpisode | None:
        """Get single episode by guid."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM episodes WHERE guid = ?", (guid,)
            ).fetchone()
            return row_to_episode(row) if row else None

    def count_for_channel(self, channel_id: str) -> int:
        with self._db.conn() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM episodes WHERE channel_id = ?", (channel_id,)
            ).fetchone()[0]

    def get_for_channel(self, channel_id: str, limit: int = 50) -> list[DBEpisode]:
        """Newest episodes of a channel first."""
        with self._db.conn() as conn:
            rows = conn.execute(
                """SELECT * FROM episodes WHERE channel_id = ?
                   ORDER BY published_at DESC NULLS LAST, created_at DESC
                   LIMIT ?""",
                (channel_id, limit)
            ).fetchall()
            return [row_to_episode(row) for row in rows]

    def get_by_states(self, states: list[TranscriptionState]) -> list[DBEpisode]:
        """Episodes in any of the given states, least recently touched first."""
        if not states:
            return []
        placeholders = ",".join("?" * len(states))
        with self._db.conn() as conn:
            rows = conn.execute(
                f"""SELECT * FROM episodes WHERE transcription_state IN ({placeholders})
                    ORDER BY updated_at ASC""",
                [s.value for s in states]
            ).fetchall()
            return [row_to_episode(row) for row in rows]

    # ─────────────────────────────────────────────────────────────
    # Feed reconciliation
    # ─────────────────────────────────────────────────────────────

    def upsert(
        self,
        guid: str,
        channel_id: str,
        title: str,
        description: str | None,
        link: str | None,
        published_at: datetime,
        audio_url: str,
        duration: str | None = None,
    ) -> bool:
        """
        Insert an episode or refresh its feed-owned fields.

        Only title, description, audio_url, published_at and duration are
        overwritten on conflict; cached audio, transcript, summary and
        transcription state are left alone.

        Returns:
            True if a new row was inserted
        """
        now = datetime.now().isoformat()
        with self._db.conn() as conn:
            existing = conn.execute(
                "SELECT 1 FROM episodes WHERE guid = ?", (guid,)
            ).fetchone()
            conn.execute(
                """INSERT INTO episodes
                   (guid, channel_id, title, description, link, published_at,
                    audio_url, duration, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(guid) DO UPDATE SET
                       title = excluded.title,
                       description = excluded.description,
                       audio_url = excluded.audio_url,
                       published_at = excluded.published_at,
                       duration = COALESCE(excluded.duration, episodes.duration),
                       updated_at = excluded.updated_at""",
                (guid, channel_id, title, description, link,
                 published_at.isoformat(), audio_url, duration, now, now)
            )
            return existing is None

    # ─────────────────────────────────────────────────────────────
    # Media cache
    # ─────────────────────────────────────────────────────────────

    def set_cached_audio_path(self, guid: str, path: str | None):
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE episodes SET cached_audio_path = ?, updated_at = ? WHERE guid = ?",
                (path, datetime.now().isoformat(), guid)
            )

    def clear_cached_audio_path_by_filename(self, filename: str) -> int:
        """
        Forget a deleted cache file on every episode that points at it.

        Matches on the file name so rows recorded under another spelling of
        the media directory are cleared too.
        """
        escaped = filename.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self._db.conn() as conn:
            cursor = conn.execute(
                """UPDATE episodes SET cached_audio_path = NULL, updated_at = ?
                   WHERE cached_audio_path = ? OR cached_audio_path LIKE ? ESCAPE '\\'""",
                (datetime.now().isoformat(), filename, "%/" + escaped)
            )
            return cursor.rowcount

    # ─────────────────────────────────────────────────────────────
    # Transcription
    # ─────────────────────────────────────────────────────────────

    def set_transcription_state(
        self,
        guid: str,
        target: TranscriptionState,
        force: bool = False,
    ) -> bool:
        """
        Move an episode to ``target``.

        The legality check and the write are one statement, so concurrent
        writers cannot slip an illegal transition in between.

        Args:
            guid: Episode key
            target: New state
            force: Skip the transition check (manual overrides, recovery)

        Returns:
            True if the row changed
        """
        now = datetime.now().isoformat()
        with self._db.conn() as conn:
            if force:
                cursor = conn.execute(
                    "UPDATE episodes SET transcription_state = ?, updated_at = ? WHERE guid = ?",
                    (target.value, now, guid)
                )
            else:
                sources = _sources_for(target)
                placeholders = ",".join("?" * len(sources))
                cursor = conn.execute(
                    f"""UPDATE episodes SET transcription_state = ?, updated_at = ?
                        WHERE guid = ? AND transcription_state IN ({placeholders})""",
                    [target.value, now, guid] + sources
                )
            changed = cursor.rowcount > 0

        if not changed and not force:
            logger.warning(f"Refused transcription state change to {target.value} for {guid}")
        return changed

    def complete_transcription(self, guid: str, transcript: str, force: bool = False) -> bool:
        """
        Store the transcript and mark the episode completed in one write.

        Unless forced, an episode that already has a transcript is left alone.
        """
        now = datetime.now().isoformat()
        query = """UPDATE episodes SET transcript = ?, transcription_state = ?, updated_at = ?
                   WHERE guid = ?"""
        params: list = [transcript, TranscriptionState.COMPLETED.value, now, guid]
        if not force:
            sources = _sources_for(TranscriptionState.COMPLETED)
            query += f" AND transcription_state IN ({','.join('?' * len(sources))})"
            query += " AND (transcript IS NULL OR transcript = '')"
            params.extend(sources)

        with self._db.conn() as conn:
            changed = conn.execute(query, params).rowcount > 0

        if not changed:
            logger.warning(f"Transcript for {guid} not stored (missing episode, illegal state or existing transcript)")
        return changed

    def update_transcript(self, guid: str, transcript: str) -> bool:
        """Overwrite the transcript without touching the state."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                "UPDATE episodes SET transcript = ?, updated_at = ? WHERE guid = ?",
                (transcript, datetime.now().isoformat(), guid)
            )
            return cursor.rowcount > 0

    # ─────────────────────────────────────────────────────────────
    # Summary
    # ─────────────────────────────────────────────────────────────

    def update_summary(self, guid: str, summary: str) -> bool:
        with self._db.conn() as conn:
            cursor = conn.execute(
                "UPDATE episodes SET summary = ?, updated_at = ? WHERE guid = ?",
                (summary, datetime.now().isoformat(), guid)
            )
            return cursor.rowcount > 0
