"""Tests for yt-dlp backed lookups."""

from unittest.mock import MagicMock, patch

import pytest
import yt_dlp

from sonicstream.domain.library.exceptions import SourceUnavailableError
from sonicstream.domain.library.models import PlaylistEntry
from sonicstream.domain.library.providers.youtube import extract


def _mock_ydl(info=None, error=None):
    """Patchable YoutubeDL whose extract_info returns ``info`` or raises ``error``."""
    ydl = MagicMock()
    if error is not None:
        ydl.extract_info.side_effect = error
    else:
        ydl.extract_info.return_value = info
    factory = MagicMock()
    factory.return_value.__enter__.return_value = ydl
    return factory, ydl


class TestEntryFromFlat:
    """Tests for entry_from_flat."""

    def test_uses_id_and_uploader(self):
        entry = extract.entry_from_flat({"id": "a" * 11, "title": "T", "uploader": "U"})
        assert entry == PlaylistEntry("a" * 11, "T", "U")

    def test_id_from_url_and_channel_fallbacks(self):
        entry = extract.entry_from_flat(
            {"url": "https://www.youtube.com/watch?v=" + "b" * 11, "uploader_id": "@uid"}
        )
        assert entry == PlaylistEntry("b" * 11, "Unknown", "@uid")

    def test_unusable_entries(self):
        assert extract.entry_from_flat(None) is None
        assert extract.entry_from_flat({"title": "no id"}) is None


class TestGetFlatPlaylist:
    """Tests for get_flat_playlist."""

    def test_lists_entries(self):
        factory, ydl = _mock_ydl(
            {"entries": [{"id": "a" * 11, "title": "A - B", "channel": "C"}, None]}
        )
        with patch.object(extract.yt_dlp, "YoutubeDL", factory):
            entries = extract.get_flat_playlist("PL1")

        assert entries == [PlaylistEntry("a" * 11, "A - B", "C")]
        ydl.extract_info.assert_called_once_with(
            "https://www.youtube.com/playlist?list=PL1", download=False
        )
        options = factory.call_args.args[0]
        assert options["extract_flat"] == "in_playlist"

    def test_private_playlist_message(self):
        factory, _ = _mock_ydl(
            error=yt_dlp.utils.DownloadError("ERROR: This playlist is private")
        )
        with patch.object(extract.yt_dlp, "YoutubeDL", factory):
            with pytest.raises(SourceUnavailableError) as exc_info:
                extract.get_flat_playlist("PL1")

        assert exc_info.value.reason == "Playlist is private or unavailable."

    def test_no_info(self):
        factory, _ = _mock_ydl(None)
        with patch.object(extract.yt_dlp, "YoutubeDL", factory):
            with pytest.raises(SourceUnavailableError):
                extract.get_flat_playlist("PL1")


class TestSearchFirstVideoId:
    """Tests for search_first_video_id."""

    def test_returns_first_hit(self):
        factory, ydl = _mock_ydl({"entries": [{"id": "c" * 11}]})
        with patch.object(extract.yt_dlp, "YoutubeDL", factory):
            assert extract.search_first_video_id('Artist "Song" official audio') == "c" * 11

        ydl.extract_info.assert_called_once_with(
            "ytsearch1:Artist Song official audio", download=False
        )

    def test_no_results(self):
        factory, _ = _mock_ydl({"entries": []})
        with patch.object(extract.yt_dlp, "YoutubeDL", factory):
            assert extract.search_first_video_id("nothing") is None

    def test_search_error(self):
        factory, _ = _mock_ydl(error=yt_dlp.utils.DownloadError("HTTP Error 429"))
        with patch.object(extract.yt_dlp, "YoutubeDL", factory):
            with pytest.raises(SourceUnavailableError):
                extract.search_first_video_id("query")


class TestGetVideoInfo:
    """Tests for get_video_info."""

    def test_shapes_preview(self):
        factory, _ = _mock_ydl(
            {
                "title": "Rick Astley - Never Gonna Give You Up",
                "channel": "RickAstleyVEVO",
                "duration": 213.7,
                "thumbnails": [
                    {"url": "small", "width": 120},
                    {"url": "big", "width": 1920},
                ],
            }
        )
        with patch.object(extract.yt_dlp, "YoutubeDL", factory):
            info = extract.get_video_info("dQw4w9WgXcQ")

        assert info == {
            "videoId": "dQw4w9WgXcQ",
            "title": "Never Gonna Give You Up",
            "artist": "Rick Astley",
            "album": "YouTube",
            "coverUrl": "big",
            "duration": 213,
            "audioUrl": "/api/stream/dQw4w9WgXcQ",
        }

    def test_unavailable(self):
        factory, _ = _mock_ydl(error=yt_dlp.utils.DownloadError("Video unavailable"))
        with patch.object(extract.yt_dlp, "YoutubeDL", factory):
            with pytest.raises(SourceUnavailableError):
                extract.get_video_info("dQw4w9WgXcQ")
