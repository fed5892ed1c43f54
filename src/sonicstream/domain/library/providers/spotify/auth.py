"""
Spotify client-credentials authentication.

Playlist import only reads public playlists, so an app token (no user login)
is enough. Tokens are plain dicts carrying an ``expires_at`` ISO timestamp.
"""

import base64
from datetime import datetime, timedelta
from typing import Any, Dict

import requests
from loguru import logger

from sonicstream.core.config import SpotifyConfig

from ...exceptions import ConfigurationError, SessionFatalError, truncate

TOKEN_URL = "https://accounts.spotify.com/api/token"

MISSING_CREDENTIALS_MESSAGE = (
    "Spotify credentials not set. Add SPOTIFY_CLIENT_ID and "
    "SPOTIFY_CLIENT_SECRET to the environment or config.toml."
)


def is_token_expired(token_data: Dict[str, Any]) -> bool:
    """Check if token is expired (with 5-minute buffer)."""
    if "expires_at" not in token_data:
        return True

    expires_at = datetime.fromisoformat(token_data["expires_at"])
    buffer = timedelta(minutes=5)

    return datetime.now() >= (expires_at - buffer)


def error_description(response: requests.Response) -> str:
    """Pull a readable message out of a Spotify error response."""
    try:
        body = response.json()
    except ValueError:
        return f"Spotify returned non-JSON (HTTP {response.status_code}): {truncate(response.text, 120)}"

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return f"Spotify error: {error.get('message') or error}"
    return f"Spotify error: {body.get('error_description') or error or response.status_code}"


def request_access_token(config: SpotifyConfig) -> Dict[str, Any]:
    """Obtain an app token with the client-credentials grant.

    Args:
        config: Spotify section of the configuration

    Returns:
        Token data with ``access_token`` and ``expires_at``

    Raises:
        ConfigurationError: If client id or secret is missing
        SessionFatalError: If Spotify rejects the request
    """
    if not config.has_credentials:
        raise ConfigurationError(MISSING_CREDENTIALS_MESSAGE)

    auth_header = base64.b64encode(
        f"{config.client_id}:{config.client_secret}".encode("utf-8")
    ).decode("utf-8")

    try:
        response = requests.post(
            TOKEN_URL,
            data={"grant_type": "client_credentials"},
            headers={"Authorization": f"Basic {auth_header}"},
            timeout=config.timeout_seconds,
        )
    except requests.RequestException as e:
        logger.warning(f"Spotify token request failed: {e}")
        raise SessionFatalError(f"Could not reach Spotify: {truncate(str(e))}")

    if not response.ok:
        description = error_description(response)
        logger.warning(f"Spotify token request rejected: {description}")
        raise SessionFatalError(truncate(description))

    try:
        token_data = response.json()
    except ValueError:
        raise SessionFatalError(error_description(response))

    if not token_data.get("access_token"):
        raise SessionFatalError(
            "Spotify did not return an access token. Check your Client ID and Secret."
        )

    expires_in = token_data.get("expires_in", 3600)
    token_data["expires_at"] = (datetime.now() + timedelta(seconds=expires_in)).isoformat()
    logger.debug("Obtained Spotify client-credentials token")
    return token_data
