"""
Music library domain models.

Contains data structures for playlist references and resolved tracks.
"""

from enum import Enum
from typing import NamedTuple


class SourceKind(str, Enum):
    """External service a playlist reference points at."""

    YOUTUBE = "youtube"
    SPOTIFY = "spotify"


class PlaylistReference(NamedTuple):
    """A parsed (source kind, playlist id) pair. Derived once per import request."""

    source_kind: SourceKind
    playlist_id: str


class PlaylistEntry(NamedTuple):
    """One raw item of a YouTube playlist listing, as returned by any source."""

    video_id: str
    title: str = "Unknown"
    channel: str = "Unknown Artist"


class TrackDescriptor(NamedTuple):
    """An unsaved, resolvable track.

    external_id is the YouTube video id backing playback; it is empty for
    manually entered tracks and for Spotify tracks not yet matched.
    """

    title: str
    artist: str
    album: str = ""
    cover_url: str = ""
    duration_seconds: int = 0
    playable_url: str = ""
    external_id: str = ""

    @property
    def label(self) -> str:
        """Human readable "Artist - Title" used in progress messages."""
        return f"{self.artist} - {self.title}"
