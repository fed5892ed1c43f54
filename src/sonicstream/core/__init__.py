"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML + environment)
- Database operations (SQLite song catalog)
- Logging (Loguru)

The core layer has no dependencies on the domain or web layers.
"""

from .config import (
    Config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
    ensure_directories,
)
from .database import (
    DuplicateSongError,
    get_database_path,
    set_database_path,
    get_db_connection,
    init_database,
    get_all_songs,
    get_song_by_id,
    get_song_by_youtube_id,
    insert_song,
    save_song,
    delete_song,
)
from .output import setup_loguru

__all__ = [
    "Config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    "ensure_directories",
    "DuplicateSongError",
    "get_database_path",
    "set_database_path",
    "get_db_connection",
    "init_database",
    "get_all_songs",
    "get_song_by_id",
    "get_song_by_youtube_id",
    "insert_song",
    "save_song",
    "delete_song",
    "setup_loguru",
]
