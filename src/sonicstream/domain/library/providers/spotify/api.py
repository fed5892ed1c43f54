"""
Spotify Web API playlist reads.

Returns playlist tracks as TrackDescriptor values; the importer then searches
YouTube for a playable copy of each.
"""

from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from sonicstream.core.config import SpotifyConfig

from ...exceptions import SessionFatalError, truncate
from ...metadata import largest_image
from ...models import TrackDescriptor
from . import auth

API_BASE = "https://api.spotify.com/v1"

PLAYLIST_TRACK_FIELDS = "next,items(track(name,artists,album(name,images),is_local))"


def _normalize_spotify_track(track: Dict[str, Any]) -> TrackDescriptor:
    """Convert a Spotify track object to a TrackDescriptor."""
    album = track.get("album") or {}
    artists = ", ".join(
        a["name"] for a in track.get("artists") or [] if a and a.get("name")
    )
    return TrackDescriptor(
        title=(track.get("name") or "").strip() or "Unknown",
        artist=artists or "Unknown",
        album=album.get("name") or "Unknown",
        cover_url=largest_image(album.get("images")),
    )


class SpotifyPlaylistClient:
    """Reads playlist tracks with an app token, refreshing it on expiry."""

    def __init__(self, config: SpotifyConfig) -> None:
        self.config = config
        self.token_data: Optional[Dict[str, Any]] = None

    def ensure_token(self) -> Dict[str, Any]:
        """Return a valid token, requesting a new one when needed.

        Raises:
            ConfigurationError: If credentials are missing
            SessionFatalError: If the token request fails
        """
        if self.token_data is None or auth.is_token_expired(self.token_data):
            self.token_data = auth.request_access_token(self.config)
        return self.token_data

    def _get_page(self, url: str, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """GET one page, retrying once with a fresh token on 401."""
        for attempt in range(2):
            token = self.ensure_token()
            try:
                response = requests.get(
                    url,
                    params=params,
                    headers={"Authorization": f"Bearer {token['access_token']}"},
                    timeout=self.config.timeout_seconds,
                )
            except requests.RequestException as e:
                raise SessionFatalError(f"Could not reach Spotify: {truncate(str(e))}")

            if response.status_code == 401 and attempt == 0:
                logger.info("Spotify token rejected, requesting a new one")
                self.token_data = None
                continue

            if not response.ok:
                raise SessionFatalError(truncate(auth.error_description(response)))

            try:
                return response.json()
            except ValueError:
                raise SessionFatalError(truncate(auth.error_description(response)))

        raise SessionFatalError("Spotify rejected the access token.")

    def get_playlist_tracks(self, playlist_id: str) -> List[TrackDescriptor]:
        """Fetch every track of a playlist, following ``next`` links.

        Null tracks (removed/unavailable) and local files are dropped.

        Raises:
            ConfigurationError: If credentials are missing
            SessionFatalError: If Spotify cannot be read
        """
        tracks: List[TrackDescriptor] = []
        url: Optional[str] = f"{API_BASE}/playlists/{playlist_id}/tracks"
        params: Optional[Dict[str, Any]] = {
            "limit": 50,
            "fields": PLAYLIST_TRACK_FIELDS,
        }

        while url:
            data = self._get_page(url, params)
            for item in data.get("items") or []:
                track = (item or {}).get("track")
                if not track:
                    continue
                if track.get("is_local"):
                    continue
                tracks.append(_normalize_spotify_track(track))

            # ``next`` already carries the query string
            url = data.get("next")
            params = None

        logger.debug(f"Fetched {len(tracks)} tracks for Spotify playlist {playlist_id}")
        return tracks
