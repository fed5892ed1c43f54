"""
SQLite song catalog for SonicStream.

This is the persistence gateway used by the import pipeline: songs are
deduplicated on their external (YouTube) id by a partial UNIQUE index, so
concurrent imports cannot create two rows for the same video.
"""

import os
import secrets
import sqlite3
import string
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from .config import get_data_dir


# Database schema version for migrations
SCHEMA_VERSION = 2

DEFAULT_ALBUM = "Unknown Album"

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 9


class DuplicateSongError(Exception):
    """Raised when a song with the same external id is already stored."""

    def __init__(self, song_id: str, external_id: str):
        self.song_id = song_id
        self.external_id = external_id
        super().__init__(f"Already in library as song {song_id} ({external_id})")


_configured_path: Optional[Path] = None


def set_database_path(path: Optional[str]) -> None:
    """Point the gateway at a configured database file (empty resets)."""
    global _configured_path
    _configured_path = Path(path).expanduser() if path else None


def get_database_path() -> Path:
    """Get the path to the SQLite database file.

    Order: configured path, ``DB_PATH``, then the data directory.
    """
    if _configured_path is not None:
        return _configured_path
    override = os.environ.get("DB_PATH")
    if override:
        return Path(override)
    return get_data_dir() / "sonicstream.db"


@contextmanager
def get_db_connection():
    """Get a database connection with proper cleanup and concurrency support."""
    db_path = get_database_path()
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row

    # WAL allows reads while an import is writing
    conn.execute("PRAGMA journal_mode=WAL")

    try:
        yield conn
    finally:
        conn.close()


def migrate_database(conn, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 2:
        # v1 databases predate the youtubeId column
        columns = {row["name"] for row in conn.execute("PRAGMA table_info(songs)")}
        if "youtube_id" not in columns:
            conn.execute("ALTER TABLE songs ADD COLUMN youtube_id TEXT DEFAULT ''")

        # Collapse duplicates left behind by v1 before adding the unique index
        conn.execute("""
            DELETE FROM songs
            WHERE youtube_id != ''
              AND rowid NOT IN (
                  SELECT MIN(rowid) FROM songs
                  WHERE youtube_id != ''
                  GROUP BY youtube_id
              )
        """)
        conn.commit()


def init_database() -> None:
    """Initialize the database with required tables."""
    db_path = get_database_path()

    # Ensure data directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection() as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS songs (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                artist TEXT NOT NULL,
                album TEXT DEFAULT 'Unknown Album',
                cover_url TEXT DEFAULT '',
                duration INTEGER DEFAULT 0,
                audio_url TEXT NOT NULL,
                youtube_id TEXT DEFAULT ''
            )
        """)

        row = conn.execute("SELECT MAX(version) AS version FROM schema_version").fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        if current_version < SCHEMA_VERSION:
            migrate_database(conn, current_version)
            conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )

        # Empty youtube_id means a manually entered song, which is never deduplicated
        conn.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_songs_youtube_id
            ON songs (youtube_id) WHERE youtube_id != ''
        """)

        conn.commit()

    logger.debug(f"Database ready at {db_path}")


def generate_song_id() -> str:
    """Short random base-36 identifier for a new song."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def song_row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
    """Convert a songs row to the JSON shape the player UI expects."""
    return {
        "id": row["id"],
        "title": row["title"],
        "artist": row["artist"],
        "album": row["album"],
        "coverUrl": row["cover_url"],
        "duration": row["duration"],
        "audioUrl": row["audio_url"],
        "youtubeId": row["youtube_id"],
    }


def get_song_by_id(song_id: str) -> Optional[Dict[str, Any]]:
    """Look up a stored song by its primary key."""
    with get_db_connection() as conn:
        row = conn.execute("SELECT * FROM songs WHERE id = ?", (song_id,)).fetchone()
        return song_row_to_dict(row) if row else None


def get_song_by_youtube_id(youtube_id: str) -> Optional[Dict[str, Any]]:
    """Look up a stored song by its external YouTube id."""
    if not youtube_id:
        return None
    with get_db_connection() as conn:
        row = conn.execute(
            "SELECT * FROM songs WHERE youtube_id = ?", (youtube_id,)
        ).fetchone()
        return song_row_to_dict(row) if row else None


def get_all_songs() -> List[Dict[str, Any]]:
    """Return every stored song in insertion order."""
    with get_db_connection() as conn:
        cursor = conn.execute("SELECT * FROM songs ORDER BY rowid")
        return [song_row_to_dict(row) for row in cursor.fetchall()]


def insert_song(
    title: str,
    artist: str,
    audio_url: str,
    album: Optional[str] = None,
    cover_url: Optional[str] = None,
    duration: Optional[int] = None,
    youtube_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Insert a song, rejecting a second row for the same YouTube id.

    The check-and-insert is a single INSERT guarded by the partial unique
    index, so two imports racing on the same video cannot both succeed.

    Raises:
        DuplicateSongError: If a song with this non-empty youtube_id exists
    """
    song_id = generate_song_id()
    youtube_id = (youtube_id or "").strip()

    with get_db_connection() as conn:
        try:
            conn.execute(
                """
                INSERT INTO songs (id, title, artist, album, cover_url, duration, audio_url, youtube_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    song_id,
                    title,
                    artist,
                    album or DEFAULT_ALBUM,
                    cover_url or f"https://picsum.photos/seed/{song_id}/400/400",
                    int(duration or 0),
                    audio_url,
                    youtube_id,
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError:
            conn.rollback()
            row = conn.execute(
                "SELECT id FROM songs WHERE youtube_id = ?", (youtube_id,)
            ).fetchone()
            if youtube_id and row:
                raise DuplicateSongError(row["id"], youtube_id)
            raise

        row = conn.execute("SELECT * FROM songs WHERE id = ?", (song_id,)).fetchone()
        return song_row_to_dict(row)


def save_song(
    title: str,
    artist: str,
    audio_url: str,
    album: Optional[str] = None,
    cover_url: Optional[str] = None,
    duration: Optional[int] = None,
    youtube_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Idempotent save: return the existing row when the YouTube id is known."""
    try:
        return insert_song(
            title=title,
            artist=artist,
            audio_url=audio_url,
            album=album,
            cover_url=cover_url,
            duration=duration,
            youtube_id=youtube_id,
        )
    except DuplicateSongError as e:
        existing = get_song_by_id(e.song_id)
        if existing is None:
            raise
        return existing


def delete_song(song_id: str) -> bool:
    """Delete a song by id. Returns True if a row was removed."""
    with get_db_connection() as conn:
        cursor = conn.execute("DELETE FROM songs WHERE id = ?", (song_id,))
        conn.commit()
        return cursor.rowcount > 0
