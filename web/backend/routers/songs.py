"""Song catalog endpoints."""

from typing import List

from fastapi import APIRouter, HTTPException
from loguru import logger

from sonicstream.core import database

from ..schemas import SongCreateRequest, SongResponse

router = APIRouter()


@router.get("/songs", response_model=List[SongResponse])
def list_songs():
    return database.get_all_songs()


@router.post("/songs", response_model=SongResponse)
def create_song(request: SongCreateRequest):
    if not request.title or not request.artist or not request.audioUrl:
        raise HTTPException(400, "title, artist, and audioUrl are required")

    try:
        return database.save_song(
            title=request.title,
            artist=request.artist,
            audio_url=request.audioUrl,
            album=request.album,
            cover_url=request.coverUrl,
            duration=request.duration,
            youtube_id=request.youtubeId,
        )
    except Exception as e:
        logger.exception("Failed to save song")
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/songs/{song_id}")
def delete_song(song_id: str):
    removed = database.delete_song(song_id)
    if not removed:
        logger.debug(f"Delete of unknown song {song_id}")
    return {"success": True}
