"""Tests for playlist and video reference parsing."""

import pytest

from sonicstream.domain.library.exceptions import InvalidReferenceError
from sonicstream.domain.library.models import PlaylistReference, SourceKind
from sonicstream.domain.library.references import (
    extract_spotify_playlist_id,
    extract_video_id,
    extract_youtube_playlist_id,
    is_valid_video_id,
    parse_playlist_reference,
)

PLAYLIST_ID = "PLFgquLnL59alCl_2TQvOiD5Vgm1hCaGSI"


class TestExtractYoutubePlaylistId:
    """Tests for extract_youtube_playlist_id."""

    @pytest.mark.parametrize(
        "url",
        [
            f"https://www.youtube.com/playlist?list={PLAYLIST_ID}",
            f"https://music.youtube.com/playlist?list={PLAYLIST_ID}",
            f"https://www.youtube.com/watch?v=dQw4w9WgXcQ&list={PLAYLIST_ID}&index=2",
            f"https://music.youtube.com/watch?v=dQw4w9WgXcQ&list={PLAYLIST_ID}",
            f"  https://m.youtube.com/playlist?list={PLAYLIST_ID}  ",
        ],
    )
    def test_same_id_with_or_without_music_host(self, url):
        assert extract_youtube_playlist_id(url) == PLAYLIST_ID

    def test_missing_list_param(self):
        with pytest.raises(InvalidReferenceError, match="must contain"):
            extract_youtube_playlist_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ")


class TestExtractSpotifyPlaylistId:
    """Tests for extract_spotify_playlist_id."""

    def test_playlist_url(self):
        url = "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=abc"
        assert extract_spotify_playlist_id(url) == "37i9dQZF1DXcBWIGoYBM5M"

    def test_album_url_rejected(self):
        with pytest.raises(InvalidReferenceError):
            extract_spotify_playlist_id("https://open.spotify.com/album/1DFixLWuPkv3KT3TnV35m3")


class TestExtractVideoId:
    """Tests for extract_video_id."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
            "https://music.youtube.com/watch?v=dQw4w9WgXcQ&feature=share",
            "dQw4w9WgXcQ",
        ],
    )
    def test_supported_forms(self, url):
        assert extract_video_id(url) == "dQw4w9WgXcQ"

    def test_bare_eleven_char_token_accepted(self):
        """Any 11-char token is taken as an id, even if meant as a query."""
        assert extract_video_id("lofi_beats1") == "lofi_beats1"

    @pytest.mark.parametrize("url", ["", "https://example.com/video", "too-short"])
    def test_unrecognized(self, url):
        with pytest.raises(InvalidReferenceError):
            extract_video_id(url)


class TestIsValidVideoId:
    """Tests for is_valid_video_id."""

    def test_valid(self):
        assert is_valid_video_id("a-b_C123456")

    @pytest.mark.parametrize("value", ["", "abc", "abcdefghijkl", "abc def ghi", "../../etc/p"])
    def test_invalid(self, value):
        assert not is_valid_video_id(value)


class TestParsePlaylistReference:
    """Tests for parse_playlist_reference."""

    def test_youtube(self):
        ref = parse_playlist_reference(
            f"https://music.youtube.com/playlist?list={PLAYLIST_ID}", SourceKind.YOUTUBE
        )
        assert ref == PlaylistReference(SourceKind.YOUTUBE, PLAYLIST_ID)

    def test_spotify(self):
        ref = parse_playlist_reference(
            "https://open.spotify.com/playlist/abc123", SourceKind.SPOTIFY
        )
        assert ref.source_kind is SourceKind.SPOTIFY
        assert ref.playlist_id == "abc123"
