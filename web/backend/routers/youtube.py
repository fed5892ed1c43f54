"""YouTube single-video lookup for SonicStream Web API."""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from sonicstream.core.config import Config
from sonicstream.domain.library.exceptions import (
    InvalidReferenceError,
    SourceUnavailableError,
)
from sonicstream.domain.library.providers.youtube import extract
from sonicstream.domain.library.references import extract_video_id

from ..deps import get_config
from ..schemas import UrlRequest, VideoInfoResponse

router = APIRouter()

UNAVAILABLE_MESSAGE = (
    "Could not fetch video info. It may be unavailable or region-locked."
)


@router.post("/youtube/info", response_model=VideoInfoResponse)
async def get_video_info(
    request: Optional[UrlRequest] = None, config: Config = Depends(get_config)
):
    """Preview a single video as a song before saving it."""
    if request is None or not request.url:
        raise HTTPException(400, "url is required")

    try:
        video_id = extract_video_id(request.url)
    except InvalidReferenceError as e:
        raise HTTPException(400, str(e))

    try:
        return await asyncio.wait_for(
            asyncio.to_thread(extract.get_video_info, video_id),
            timeout=config.ytdlp.info_timeout_seconds,
        )
    except (SourceUnavailableError, asyncio.TimeoutError) as e:
        logger.warning(f"Video info failed for {video_id}: {e!r}")
        raise HTTPException(500, UNAVAILABLE_MESSAGE)
