from pydantic import AliasChoices, BaseModel, Field
from typing import Optional


class UrlRequest(BaseModel):
    # Optional so a missing url is answered with 400 rather than 422
    url: Optional[str] = None


class SongCreateRequest(BaseModel):
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    coverUrl: Optional[str] = None
    duration: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("duration", "durationSeconds")
    )
    audioUrl: Optional[str] = None
    youtubeId: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("youtubeId", "externalId")
    )


class SongResponse(BaseModel):
    id: str
    title: str
    artist: str
    album: str
    coverUrl: str
    duration: int
    audioUrl: str
    youtubeId: str


class VideoInfoResponse(BaseModel):
    videoId: str
    title: str
    artist: str
    album: str
    coverUrl: str
    duration: int
    audioUrl: str
