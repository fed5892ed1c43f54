"""Audio relay endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from loguru import logger

from sonicstream.core.config import Config
from sonicstream.domain.library.exceptions import (
    ClientDisconnectedError,
    ExtractionError,
    RangeNotSatisfiableError,
)
from sonicstream.domain.library.references import is_valid_video_id
from sonicstream.domain.playback import relay

from ..deps import get_config

router = APIRouter()

# Non-standard "client closed request"; nobody is left to read it
CLIENT_CLOSED_STATUS = 499


@router.get("/stream/{video_id}")
async def stream_audio(
    video_id: str, request: Request, config: Config = Depends(get_config)
):
    if not is_valid_video_id(video_id):
        raise HTTPException(400, "Invalid video ID")

    try:
        audio = await relay.fetch_audio(
            video_id, config.ytdlp, is_disconnected=request.is_disconnected
        )
    except ClientDisconnectedError:
        return Response(status_code=CLIENT_CLOSED_STATUS)
    except ExtractionError as e:
        logger.error(f"Stream {video_id} failed: {e}")
        raise HTTPException(500, "Audio extraction failed")

    try:
        status, headers, body = relay.build_range_response(
            audio, request.headers.get("range")
        )
    except RangeNotSatisfiableError as e:
        return Response(
            status_code=416,
            headers={"Accept-Ranges": "bytes", "Content-Range": f"bytes */{e.total}"},
        )

    return Response(content=body, status_code=status, headers=headers)
