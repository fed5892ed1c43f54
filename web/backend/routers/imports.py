"""Playlist import endpoints streaming progress over server-sent events."""

import asyncio
import json
from typing import AsyncIterator, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sse_starlette.sse import EventSourceResponse

from sonicstream.core.config import Config
from sonicstream.domain.library.importer import PlaylistImporter
from sonicstream.domain.library.models import SourceKind
from sonicstream.domain.library.progress import ProgressChannel

from ..deps import get_config, get_importer
from ..schemas import UrlRequest

router = APIRouter()

# Disable proxy buffering so each event is flushed immediately
SSE_HEADERS = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}


async def progress_events(
    importer: PlaylistImporter,
    source_kind: SourceKind,
    url: str,
    channel_size: int,
) -> AsyncIterator[Dict[str, str]]:
    """Run an import in the background and yield its events as SSE messages.

    Closing the generator (client disconnect) cancels the import.
    """
    channel = ProgressChannel(maxsize=channel_size)
    task = asyncio.create_task(importer.run(source_kind, url, channel))
    try:
        async for event in channel:
            yield {"data": json.dumps(event.to_payload())}
    finally:
        if not task.done():
            logger.info(f"{source_kind.value} import stream closed early, cancelling")
            task.cancel()


def _stream_import(
    source_kind: SourceKind,
    request: Optional[UrlRequest],
    importer: PlaylistImporter,
    config: Config,
) -> EventSourceResponse:
    if request is None or not request.url:
        raise HTTPException(400, "url is required")
    return EventSourceResponse(
        progress_events(importer, source_kind, request.url, config.web.channel_size),
        headers=SSE_HEADERS,
    )


@router.post("/import/youtube-playlist")
async def import_youtube_playlist(
    request: Optional[UrlRequest] = None,
    importer: PlaylistImporter = Depends(get_importer),
    config: Config = Depends(get_config),
):
    return _stream_import(SourceKind.YOUTUBE, request, importer, config)


@router.post("/import/spotify-playlist")
async def import_spotify_playlist(
    request: Optional[UrlRequest] = None,
    importer: PlaylistImporter = Depends(get_importer),
    config: Config = Depends(get_config),
):
    return _stream_import(SourceKind.SPOTIFY, request, importer, config)
