"""Library domain - playlist import.

This domain handles:
- Parsing YouTube/Spotify playlist references
- Resolving playlists through ordered upstream sources
- Streaming import progress events
- Persisting imported songs with deduplication
"""

# Models
from .models import PlaylistEntry, PlaylistReference, SourceKind, TrackDescriptor

# Errors
from .exceptions import (
    ConfigurationError,
    InvalidReferenceError,
    ItemSkippedError,
    SessionFatalError,
    SonicStreamError,
    SourceUnavailableError,
)

# Reference parsing and metadata
from .references import (
    extract_spotify_playlist_id,
    extract_video_id,
    extract_youtube_playlist_id,
    is_valid_video_id,
    parse_playlist_reference,
)
from .metadata import split_artist_title, stream_url

# Import pipeline
from .progress import ProgressChannel, ProgressEvent
from .importer import PlaylistImporter

__all__ = [
    # Models
    "PlaylistEntry",
    "PlaylistReference",
    "SourceKind",
    "TrackDescriptor",
    # Errors
    "ConfigurationError",
    "InvalidReferenceError",
    "ItemSkippedError",
    "SessionFatalError",
    "SonicStreamError",
    "SourceUnavailableError",
    # References
    "extract_spotify_playlist_id",
    "extract_video_id",
    "extract_youtube_playlist_id",
    "is_valid_video_id",
    "parse_playlist_reference",
    # Metadata
    "split_artist_title",
    "stream_url",
    # Import pipeline
    "ProgressChannel",
    "ProgressEvent",
    "PlaylistImporter",
]
