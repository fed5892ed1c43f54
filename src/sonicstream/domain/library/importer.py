"""
Playlist importer.

Resolves a YouTube or Spotify playlist URL into tracks, persists each one,
and reports every step on a ProgressChannel. Items are processed strictly in
playlist order; a failing item becomes a ``skip`` and the import continues.
"""

import asyncio
from typing import Any, Dict, List, Optional

from loguru import logger

from sonicstream.core import database
from sonicstream.core.config import Config

from .exceptions import (
    ConfigurationError,
    InvalidReferenceError,
    ItemSkippedError,
    SessionFatalError,
    SourceUnavailableError,
    truncate,
)
from .metadata import build_search_query, split_artist_title, stream_url, thumbnail_url
from .models import PlaylistEntry, SourceKind, TrackDescriptor
from .progress import (
    DoneEvent,
    ErrorEvent,
    InfoEvent,
    ProgressChannel,
    SearchingEvent,
    SkipEvent,
    SongImportedEvent,
    TotalEvent,
)
from .provider import PlaylistSource, TrackSearcher
from .providers.spotify import SpotifyPlaylistClient
from .providers.youtube import InvidiousSource, YtDlpSource
from .references import parse_playlist_reference

YOUTUBE_PLAYLIST_ALBUM = "YouTube Playlist"
EMPTY_PLAYLIST_MESSAGE = "Playlist is empty or private."
DUPLICATE_REASON = "Duplicate"


def persist_track(track: TrackDescriptor) -> Dict[str, Any]:
    """Store a resolved track. Blocking; run it in a worker thread.

    Raises:
        DuplicateSongError: If the track's external id is already stored
    """
    return database.insert_song(
        title=track.title,
        artist=track.artist,
        audio_url=track.playable_url,
        album=track.album,
        cover_url=track.cover_url,
        duration=track.duration_seconds,
        youtube_id=track.external_id,
    )


def track_from_entry(entry: PlaylistEntry) -> TrackDescriptor:
    """Build the descriptor stored for one YouTube playlist entry."""
    artist, title = split_artist_title(entry.title, entry.channel)
    return TrackDescriptor(
        title=title,
        artist=artist,
        album=YOUTUBE_PLAYLIST_ALBUM,
        cover_url=thumbnail_url(entry.video_id),
        duration_seconds=0,
        playable_url=stream_url(entry.video_id),
        external_id=entry.video_id,
    )


class PlaylistImporter:
    """Runs one import session per call against injected sources.

    Args:
        config: Application configuration
        sources: YouTube playlist sources in priority order
            (default: Invidious mirrors, then yt-dlp)
        searcher: Cross-service search used for Spotify tracks (default: yt-dlp)
        spotify_client: Spotify reader (default: built from ``config.spotify``)
    """

    def __init__(
        self,
        config: Config,
        sources: Optional[List[PlaylistSource]] = None,
        searcher: Optional[TrackSearcher] = None,
        spotify_client: Optional[SpotifyPlaylistClient] = None,
        persist=persist_track,
    ) -> None:
        self.config = config
        ytdlp_source = YtDlpSource(deadline_seconds=config.ytdlp.playlist_timeout_seconds)
        if sources is None:
            sources = [
                InvidiousSource(
                    config.invidious.instances,
                    page_cap=config.invidious.page_cap,
                    timeout_seconds=config.invidious.timeout_seconds,
                ),
                ytdlp_source,
            ]
        self.sources = sources
        self.searcher = searcher or ytdlp_source
        self.spotify_client = spotify_client
        self.persist = persist

    async def run(self, source_kind: SourceKind, url: str, channel: ProgressChannel) -> None:
        """Import one playlist, always ending the channel with a terminal event."""
        try:
            if source_kind is SourceKind.YOUTUBE:
                await self.import_youtube_playlist(url, channel)
            else:
                await self.import_spotify_playlist(url, channel)
        except (InvalidReferenceError, ConfigurationError, SessionFatalError) as e:
            logger.error(f"{source_kind.value} import failed: {e}")
            if not channel.terminated:
                await channel.emit(ErrorEvent(str(e)))
        except asyncio.CancelledError:
            logger.info(f"{source_kind.value} import cancelled by client")
            raise
        except Exception as e:
            logger.exception("Playlist import error")
            if not channel.terminated:
                await channel.emit(
                    ErrorEvent("Failed to import playlist: " + truncate(str(e)))
                )
        finally:
            channel.close()

    async def resolve_entries(
        self, playlist_id: str, channel: ProgressChannel
    ) -> List[PlaylistEntry]:
        """Try each source in order until one returns entries.

        The last source's (possibly empty) result is accepted as-is.

        Raises:
            SessionFatalError: If every source failed
        """
        last_reason = "No playlist sources configured"
        for position, source in enumerate(self.sources):
            if position > 0:
                previous = self.sources[position - 1]
                logger.info(f"Falling back from {previous.name} to {source.name}")
                await channel.emit(
                    InfoEvent(f"{previous.name} unavailable, trying {source.name} fallback...")
                )

            try:
                entries = await asyncio.wait_for(
                    asyncio.to_thread(source.fetch_playlist, playlist_id),
                    timeout=source.deadline_seconds,
                )
            except SourceUnavailableError as e:
                logger.warning(f"Playlist source failed: {e}")
                last_reason = e.reason
                continue
            except asyncio.TimeoutError:
                logger.warning(f"{source.name} timed out after {source.deadline_seconds}s")
                last_reason = f"{source.name} timed out"
                continue
            except Exception as e:
                logger.exception(f"{source.name} returned an unusable playlist")
                last_reason = f"{source.name}: {truncate(str(e))}"
                continue

            is_last = position == len(self.sources) - 1
            if entries or is_last:
                await channel.emit(
                    InfoEvent(f"Found {len(entries)} tracks via {source.name}.")
                )
                return entries
            last_reason = f"{source.name}: empty response"

        raise SessionFatalError("Import failed: " + last_reason)

    async def import_youtube_playlist(self, url: str, channel: ProgressChannel) -> None:
        reference = parse_playlist_reference(url, SourceKind.YOUTUBE)
        logger.info(f"Importing YouTube playlist {reference.playlist_id}")

        await channel.emit(InfoEvent("Fetching playlist info..."))
        entries = await self.resolve_entries(reference.playlist_id, channel)
        if not entries:
            raise SessionFatalError(EMPTY_PLAYLIST_MESSAGE)

        total = len(entries)
        await channel.emit(TotalEvent(total))

        imported: List[Dict[str, Any]] = []
        for index, entry in enumerate(entries, start=1):
            try:
                track = track_from_entry(entry)
            except Exception as e:
                logger.exception(f"Malformed playlist entry {entry!r}")
                await channel.emit(SkipEvent(index, total, truncate(str(e)) or "Malformed entry"))
                continue
            await self.persist_item(index, total, track, imported, channel)

        logger.info(f"YouTube import finished: {len(imported)}/{total} new songs")
        await channel.emit(DoneEvent(imported))

    async def find_video_id(self, track: TrackDescriptor) -> str:
        """Search YouTube for a playable copy of a Spotify track.

        Raises:
            ItemSkippedError: If nothing matched or the search failed
        """
        query = build_search_query(track.artist, track.title)
        try:
            video_id = await asyncio.wait_for(
                asyncio.to_thread(self.searcher.search_video_id, query),
                timeout=self.config.ytdlp.search_timeout_seconds,
            )
        except SourceUnavailableError as e:
            logger.warning(f"Search failed for {query!r}: {e}")
            video_id = None
        except asyncio.TimeoutError:
            logger.warning(f"Search timed out for {query!r}")
            video_id = None

        if not video_id:
            raise ItemSkippedError(f"No YouTube match for: {track.title}")
        return video_id

    async def import_spotify_playlist(self, url: str, channel: ProgressChannel) -> None:
        reference = parse_playlist_reference(url, SourceKind.SPOTIFY)
        logger.info(f"Importing Spotify playlist {reference.playlist_id}")

        await channel.emit(InfoEvent("Connecting to Spotify..."))
        client = self.spotify_client or SpotifyPlaylistClient(self.config.spotify)
        await asyncio.to_thread(client.ensure_token)

        await channel.emit(InfoEvent("Fetching playlist tracks..."))
        tracks = await asyncio.to_thread(client.get_playlist_tracks, reference.playlist_id)
        if not tracks:
            raise SessionFatalError(EMPTY_PLAYLIST_MESSAGE)

        total = len(tracks)
        await channel.emit(TotalEvent(total))

        imported: List[Dict[str, Any]] = []
        for index, track in enumerate(tracks, start=1):
            await channel.emit(SearchingEvent(index, total, track.label))
            try:
                video_id = await self.find_video_id(track)
                playable = track._replace(
                    playable_url=stream_url(video_id), external_id=video_id
                )
            except ItemSkippedError as e:
                logger.debug(f"Skipping {track.label}: {e.reason}")
                await channel.emit(SkipEvent(index, total, e.reason))
                continue
            except Exception as e:
                logger.exception(f"Lookup failed for {track.label}")
                await channel.emit(SkipEvent(index, total, truncate(str(e)) or "Lookup failed"))
                continue

            await self.persist_item(index, total, playable, imported, channel)

        logger.info(f"Spotify import finished: {len(imported)}/{total} new songs")
        await channel.emit(DoneEvent(imported))

    async def persist_item(
        self,
        index: int,
        total: int,
        track: TrackDescriptor,
        imported: List[Dict[str, Any]],
        channel: ProgressChannel,
    ) -> None:
        """Store one track and report it as ``progress`` or ``skip``."""
        try:
            song = await asyncio.to_thread(self.persist, track)
        except database.DuplicateSongError:
            logger.debug(f"Duplicate {track.external_id}: {track.label}")
            await channel.emit(SkipEvent(index, total, DUPLICATE_REASON))
            return
        except Exception as e:
            logger.exception(f"Failed to save {track.label}")
            await channel.emit(SkipEvent(index, total, truncate(str(e)) or "Failed to save"))
            return

        imported.append(song)
        await channel.emit(SongImportedEvent(index, total, song))
