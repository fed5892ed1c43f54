"""Extract canonical YouTube/Spotify identifiers from free-form URLs.

Pure functions, no network access. Anything unrecognized raises
InvalidReferenceError, which callers surface as a user-facing validation error.

Note: any bare 11-character token made of letters, digits, ``_`` and ``-`` is
accepted as a video id. A search query of exactly that shape (e.g.
"lofi_beats1") is therefore indistinguishable from an id and is treated as one.
"""

import re

from .exceptions import InvalidReferenceError
from .models import PlaylistReference, SourceKind

VIDEO_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{11}$")

_VIDEO_URL_PATTERN = re.compile(
    r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([a-zA-Z0-9_-]{11})"
)
_YOUTUBE_PLAYLIST_PATTERN = re.compile(r"[?&]list=([a-zA-Z0-9_-]+)")
_SPOTIFY_PLAYLIST_PATTERN = re.compile(r"playlist/([a-zA-Z0-9]+)")


def is_valid_video_id(value: str) -> bool:
    """True for exactly 11 characters of [A-Za-z0-9_-]."""
    return bool(value) and VIDEO_ID_PATTERN.match(value) is not None


def normalize_youtube_url(url: str) -> str:
    """Map the YouTube Music host onto the main host so both parse identically."""
    return url.strip().replace("music.youtube.com", "www.youtube.com")


def extract_video_id(url: str) -> str:
    """Extract an 11-character video id.

    Accepts watch, short-link (youtu.be) and embed URLs, or a bare id.

    Raises:
        InvalidReferenceError: If no id can be found
    """
    raw = normalize_youtube_url(url or "")
    match = _VIDEO_URL_PATTERN.search(raw)
    if match:
        return match.group(1)
    if is_valid_video_id(raw):
        return raw
    raise InvalidReferenceError("Invalid YouTube URL")


def extract_youtube_playlist_id(url: str) -> str:
    """Extract the ``list=`` parameter from any YouTube or YouTube Music URL.

    Raises:
        InvalidReferenceError: If the URL carries no playlist id
    """
    match = _YOUTUBE_PLAYLIST_PATTERN.search(normalize_youtube_url(url or ""))
    if not match:
        raise InvalidReferenceError(
            "Invalid YouTube playlist URL. URL must contain ?list=..."
        )
    return match.group(1)


def extract_spotify_playlist_id(url: str) -> str:
    """Extract the id from a ``/playlist/<id>`` path segment.

    Raises:
        InvalidReferenceError: If the URL has no playlist segment
    """
    match = _SPOTIFY_PLAYLIST_PATTERN.search((url or "").strip())
    if not match:
        raise InvalidReferenceError("Invalid Spotify playlist URL.")
    return match.group(1)


def parse_playlist_reference(url: str, source_kind: SourceKind) -> PlaylistReference:
    """Parse a playlist URL for the given service into a PlaylistReference."""
    if source_kind is SourceKind.YOUTUBE:
        return PlaylistReference(source_kind, extract_youtube_playlist_id(url))
    if source_kind is SourceKind.SPOTIFY:
        return PlaylistReference(source_kind, extract_spotify_playlist_id(url))
    raise InvalidReferenceError(f"Unsupported playlist source: {source_kind}")
