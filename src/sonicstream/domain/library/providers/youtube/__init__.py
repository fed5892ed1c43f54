"""YouTube playlist sources: Invidious mirrors with a yt-dlp fallback."""

from .extract import (
    YtDlpSource,
    get_flat_playlist,
    get_video_info,
    search_first_video_id,
)
from .invidious import InvidiousSource

__all__ = [
    "InvidiousSource",
    "YtDlpSource",
    "get_flat_playlist",
    "get_video_info",
    "search_first_video_id",
]
