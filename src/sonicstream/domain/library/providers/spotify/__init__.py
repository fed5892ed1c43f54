"""Spotify playlist reads (client-credentials, no user login)."""

from .api import SpotifyPlaylistClient
from .auth import is_token_expired, request_access_token

__all__ = ["SpotifyPlaylistClient", "is_token_expired", "request_access_token"]
