"""
Database connection management and schema initialization.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


class DatabaseConnection:
    """Manages database connection and schema."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def conn(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with row factory.

        Everything executed inside one ``with`` block commits together.
        """
        connection = sqlite3.connect(self.db_path, timeout=30)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        try:
            yield connection
            connection.commit()
        except Exception:
            connection.rollback()
            raise
        finally:
            connection.close()

    def _init_schema(self):
        """Initialize database schema."""
        with self.conn() as connection:
            connection.execute("PRAGMA journal_mode = WAL")
            connection.executescript("""
                CREATE TABLE IF NOT EXISTS channels (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    author TEXT,
                    feed_url TEXT NOT NULL,
                    description TEXT,
                    last_synced_at TIMESTAMP,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                CREATE TABLE IF NOT EXISTS episodes (
                    guid TEXT PRIMARY KEY,
                    channel_id TEXT NOT NULL REFERENCES channels(id),
                    title TEXT NOT NULL DEFAULT '',
                    description TEXT,
                    link TEXT,
                    published_at TIMESTAMP,
                    audio_url TEXT NOT NULL DEFAULT '',
                    cached_audio_path TEXT,
                    transcript TEXT,
                    transcription_state TEXT NOT NULL DEFAULT 'none'
                        CHECK(transcription_state IN ('none', 'pending', 'processing', 'completed', 'failed')),
                    summary TEXT,
                    created_at TIMESTAMP,
                    updated_at TIMESTAMP
                );

                CREATE INDEX IF NOT EXISTS idx_episodes_channel_published
                    ON episodes(channel_id, published_at DESC);
                CREATE INDEX IF NOT EXISTS idx_episodes_state
                    ON episodes(transcription_state);
                CREATE INDEX IF NOT EXISTS idx_episodes_cached_path
                    ON episodes(cached_audio_path);
            """)

            # Migrations
            self._migrate_add_column(connection, "episodes", "duration", "TEXT")

    def _migrate_add_column(
        self,
        conn: sqlite3.Connection,
        table: str,
        column: str,
        column_type: str
    ):
        """Add a column to a table if it doesn't exist."""
        cursor = conn.execute(f"PRAGMA table_info({table})")
        columns = [row[1] for row in cursor.fetchall()]
        if column not in columns:
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
