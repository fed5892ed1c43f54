"""Playlist listings from public Invidious instances.

Invidious mirrors expose YouTube playlists without the bot checks that block
yt-dlp on cloud hosts, but individual instances are frequently down, rate
limited, or return HTML error pages. Instances are tried in order and the
first one that returns at least one video wins.
"""

from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from ...exceptions import SourceUnavailableError, truncate
from ...models import PlaylistEntry

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class InvidiousSource:
    """Metadata-mirror adapter over an ordered list of Invidious instances."""

    name = "Invidious"
    # Each request has its own timeout; no overall deadline
    deadline_seconds = None

    def __init__(
        self,
        instances: List[str],
        page_cap: int = 10,
        timeout_seconds: int = 12,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.instances = [base.rstrip("/") for base in instances]
        self.page_cap = page_cap
        self.timeout_seconds = timeout_seconds
        # Shared session supplied by the caller; otherwise one per lookup
        self.session = session

    def _get_page(
        self, session: requests.Session, base: str, playlist_id: str, page: int
    ) -> Dict[str, Any]:
        """Fetch one page of a playlist from one instance."""
        url = f"{base}/api/v1/playlists/{playlist_id}"
        try:
            response = session.get(
                url,
                params={"page": page},
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise SourceUnavailableError(base, str(e))

        body = response.text.strip()
        if not body or body[0] not in "{[":
            raise SourceUnavailableError(
                base, f"Not JSON (HTTP {response.status_code}): {truncate(body, 80)}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise SourceUnavailableError(base, f"Invalid JSON: {e}")

    def fetch_from_instance(
        self, session: requests.Session, base: str, playlist_id: str
    ) -> List[PlaylistEntry]:
        """Page through one instance until the declared count or the page cap.

        Raises:
            SourceUnavailableError: On network or decoding errors
        """
        videos: List[Dict[str, Any]] = []
        page = 1
        while True:
            data = self._get_page(session, base, playlist_id, page)
            if (
                not isinstance(data, dict)
                or data.get("error")
                or not isinstance(data.get("videos"), list)
                or not data["videos"]
            ):
                break
            videos.extend(data["videos"])
            declared = data.get("videoCount")
            total = declared if isinstance(declared, int) and declared > 0 else len(videos)
            if len(videos) >= total or page >= self.page_cap:
                break
            page += 1

        return [
            PlaylistEntry(
                video_id=video["videoId"],
                title=video.get("title") or "Unknown",
                channel=video.get("author") or "Unknown Artist",
            )
            for video in videos
            if isinstance(video, dict) and video.get("videoId")
        ]

    def fetch_playlist(self, playlist_id: str) -> List[PlaylistEntry]:
        """Try each instance in priority order.

        Raises:
            SourceUnavailableError: If every instance errored or came back empty
        """
        if self.session is not None:
            return self._first_working_instance(self.session, playlist_id)
        with requests.Session() as session:
            return self._first_working_instance(session, playlist_id)

    def _first_working_instance(
        self, session: requests.Session, playlist_id: str
    ) -> List[PlaylistEntry]:
        errors: List[str] = []
        for base in self.instances:
            try:
                entries = self.fetch_from_instance(session, base, playlist_id)
            except SourceUnavailableError as e:
                logger.warning(f"Invidious {base} failed: {e.reason}")
                errors.append(str(e))
                continue
            except Exception as e:
                logger.warning(f"Invidious {base} sent an unusable playlist: {e!r}")
                errors.append(f"{base}: {truncate(str(e), 120)}")
                continue

            if entries:
                logger.info(f"Invidious: got {len(entries)} videos from {base}")
                return entries
            errors.append(f"{base}: empty response")

        raise SourceUnavailableError(
            self.name,
            "All Invidious instances failed. Errors: " + " | ".join(errors[:3]),
        )
