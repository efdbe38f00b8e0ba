"""
Channel repository - CRUD operations for podcast channels.
"""

from datetime import datetime

from .connection import DatabaseConnection
from .converters import row_to_channel
from .models import DBChannel


class ChannelRepository:
    """Repository for channel operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(
        self,
        channel_id: str,
        name: str,
        feed_url: str,
        author: str | None = None,
        description: str | None = None,
    ) -> bool:
        """Add a channel. Returns False if the id is already taken."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                """INSERT OR IGNORE INTO channels (id, name, author, feed_url, description)
                   VALUES (?, ?, ?, ?, ?)""",
                (channel_id, name, author, feed_url, description)
            )
            return cursor.rowcount > 0

    def get(self, channel_id: str) -> DBChannel | None:
        """Get single channel by id."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM channels WHERE id = ?", (channel_id,)
            ).fetchone()
            return row_to_channel(row) if row else None

    def get_all(self) -> list[DBChannel]:
        """Get all channels in insertion order."""
        with self._db.conn() as conn:
            rows = conn.execute(
                "SELECT * FROM channels ORDER BY created_at, rowid"
            ).fetchall()
            return [row_to_channel(row) for row in rows]

    def count(self) -> int:
        with self._db.conn() as conn:
            return conn.execute("SELECT COUNT(*) FROM channels").fetchone()[0]

    def mark_synced(self, channel_id: str, synced_at: datetime | None = None):
        """Record a completed sync."""
        synced_at = synced_at or datetime.now()
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE channels SET last_synced_at = ? WHERE id = ?",
                (synced_at.isoformat(), channel_id)
            )
