"""
Best-effort track metadata helpers.

Splits YouTube titles into artist/title and builds the URLs stored with
imported songs.
"""

from typing import Any, Dict, List, Optional, Tuple

TITLE_SEPARATOR = " - "

STREAM_URL_TEMPLATE = "/api/stream/{video_id}"
THUMBNAIL_URL_TEMPLATE = "https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"


def split_artist_title(raw_title: str, channel: str) -> Tuple[str, str]:
    """Derive (artist, title) from a video title.

    "Artist - Song" yields ("Artist", "Song"); the remainder keeps any further
    separators ("A - B - C" -> ("A", "B - C")). Without a separator the
    channel is the artist and the raw title is kept unchanged.

    Args:
        raw_title: Video title as published
        channel: Uploader/channel name

    Returns:
        (artist, title)
    """
    if TITLE_SEPARATOR in raw_title:
        artist, _, rest = raw_title.partition(TITLE_SEPARATOR)
        return artist.strip(), rest.strip()
    return channel, raw_title


def stream_url(video_id: str) -> str:
    """Playable URL served by the audio relay for a video."""
    return STREAM_URL_TEMPLATE.format(video_id=video_id)


def thumbnail_url(video_id: str) -> str:
    return THUMBNAIL_URL_TEMPLATE.format(video_id=video_id)


def widest_thumbnail(thumbnails: Optional[List[Dict[str, Any]]]) -> str:
    """Pick the URL of the widest thumbnail yt-dlp reported, or ''."""
    candidates = [t for t in (thumbnails or []) if t.get("url")]
    if not candidates:
        return ""
    best = max(candidates, key=lambda t: t.get("width") or 0)
    return best["url"]


def largest_image(images: Optional[List[Dict[str, Any]]]) -> str:
    """Pick the largest Spotify album image URL, or ''."""
    candidates = [img for img in (images or []) if img.get("url")]
    if not candidates:
        return ""
    best = max(
        candidates,
        key=lambda img: (img.get("width") or 0) * (img.get("height") or 0),
    )
    return best["url"]


def build_search_query(artist: str, title: str) -> str:
    """Query used to find the official audio for a Spotify track on YouTube."""
    query = f"{artist} {title} official audio"
    return " ".join(query.replace('"', "").split())
