"""
yt-dlp backed YouTube lookups.

Uses the yt-dlp library API (no download) for flat playlist listings, search
and single-video metadata. All functions are blocking; callers run them in a
worker thread.
"""

from typing import Any, Dict, List, Optional

import yt_dlp
from loguru import logger

from ...exceptions import SourceUnavailableError, truncate
from ...metadata import split_artist_title, stream_url, widest_thumbnail
from ...models import PlaylistEntry

WATCH_URL_PREFIX = "https://www.youtube.com/watch?v="
PLAYLIST_URL_TEMPLATE = "https://www.youtube.com/playlist?list={playlist_id}"

SOURCE_NAME = "yt-dlp"


def _base_options() -> Dict[str, Any]:
    return {
        "quiet": True,
        "no_warnings": True,
        "nocheckcertificate": True,
        "noplaylist": True,
    }


def describe_download_error(error: Exception) -> str:
    """Turn a yt-dlp failure into a short user-facing reason."""
    message = str(error)
    if "private" in message.lower():
        return "Playlist is private or unavailable."
    return truncate(message)


def entry_from_flat(item: Optional[Dict[str, Any]]) -> Optional[PlaylistEntry]:
    """Convert one flat-playlist entry, or None when it has no video id."""
    if not item:
        return None
    video_id = item.get("id") or (item.get("url") or "").replace(WATCH_URL_PREFIX, "")
    if not video_id:
        return None
    return PlaylistEntry(
        video_id=video_id,
        title=item.get("title") or "Unknown",
        channel=(
            item.get("uploader")
            or item.get("channel")
            or item.get("uploader_id")
            or "Unknown Artist"
        ),
    )


def get_flat_playlist(playlist_id: str) -> List[PlaylistEntry]:
    """List a playlist without resolving each video.

    Raises:
        SourceUnavailableError: If yt-dlp cannot access the playlist
    """
    ydl_opts = _base_options()
    ydl_opts.update({"extract_flat": "in_playlist", "noplaylist": False})
    playlist_url = PLAYLIST_URL_TEMPLATE.format(playlist_id=playlist_id)

    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(playlist_url, download=False)
    except yt_dlp.utils.DownloadError as e:
        raise SourceUnavailableError(SOURCE_NAME, describe_download_error(e))

    if not info:
        raise SourceUnavailableError(SOURCE_NAME, "Failed to extract playlist information")

    entries = []
    for item in info.get("entries") or []:
        entry = entry_from_flat(item)
        if entry:
            entries.append(entry)
    return entries


class YtDlpSource:
    """Last-resort playlist source backed by the local yt-dlp install."""

    name = SOURCE_NAME

    def __init__(self, deadline_seconds: Optional[float] = 120) -> None:
        # Flattening a large playlist can take minutes
        self.deadline_seconds = deadline_seconds

    def fetch_playlist(self, playlist_id: str) -> List[PlaylistEntry]:
        return get_flat_playlist(playlist_id)

    def search_video_id(self, query: str) -> Optional[str]:
        return search_first_video_id(query)


def search_first_video_id(query: str) -> Optional[str]:
    """Return the id of the first YouTube search hit for ``query``.

    Returns None when the search yields nothing.

    Raises:
        SourceUnavailableError: If the search itself failed
    """
    ydl_opts = _base_options()
    ydl_opts["extract_flat"] = True
    search = "ytsearch1:" + query.replace('"', "")

    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(search, download=False)
    except yt_dlp.utils.DownloadError as e:
        raise SourceUnavailableError(SOURCE_NAME, truncate(str(e)))

    for item in (info or {}).get("entries") or []:
        if item and item.get("id"):
            return item["id"]
    logger.debug(f"No search result for: {query}")
    return None


def get_video_info(video_id: str) -> Dict[str, Any]:
    """Fetch metadata for a single video and shape it as a track preview.

    Returns:
        Dict with videoId, title, artist, album, coverUrl, duration, audioUrl

    Raises:
        SourceUnavailableError: If the video is unavailable or region-locked
    """
    try:
        with yt_dlp.YoutubeDL(_base_options()) as ydl:
            info = ydl.extract_info(WATCH_URL_PREFIX + video_id, download=False)
    except yt_dlp.utils.DownloadError as e:
        raise SourceUnavailableError(SOURCE_NAME, truncate(str(e)))

    if not info:
        raise SourceUnavailableError(SOURCE_NAME, "Failed to extract video information")

    channel = info.get("channel") or info.get("uploader") or "Unknown Artist"
    artist, title = split_artist_title(info.get("title") or "Unknown", channel)
    return {
        "videoId": video_id,
        "title": title,
        "artist": artist,
        "album": "YouTube",
        "coverUrl": widest_thumbnail(info.get("thumbnails")),
        "duration": int(info.get("duration") or 0),
        "audioUrl": stream_url(video_id),
    }
