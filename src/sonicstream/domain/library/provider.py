"""
Source interface for playlist resolution.

Defines the contract every playlist source (metadata mirrors, yt-dlp) follows
so the importer can try them in a fixed priority order without caring which
one it is talking to.
"""

from typing import List, Optional, Protocol

from .models import PlaylistEntry


class PlaylistSource(Protocol):
    """Turns a YouTube playlist id into an ordered list of entries.

    Implementations are blocking (network or subprocess bound); the importer
    runs them in a worker thread under its own deadline.
    """

    name: str
    deadline_seconds: Optional[float]

    def fetch_playlist(self, playlist_id: str) -> List[PlaylistEntry]:
        """Fetch the playlist listing.

        Args:
            playlist_id: YouTube playlist id

        Returns:
            Entries in playlist order (may be empty only for the last-resort source)

        Raises:
            SourceUnavailableError: If this source cannot serve the playlist
        """
        ...


class TrackSearcher(Protocol):
    """Finds a playable YouTube video for a free-text query."""

    def search_video_id(self, query: str) -> Optional[str]:
        """Return the id of the top result, or None when nothing matched.

        Raises:
            SourceUnavailableError: If the search itself failed
        """
        ...
