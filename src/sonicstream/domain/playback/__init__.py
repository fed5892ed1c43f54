"""Playback domain - audio relay.

This domain handles:
- Spawning a scoped yt-dlp process per stream request
- Buffering the extracted audio in memory
- Serving byte ranges for seeking
"""

from .relay import (
    AUDIO_CONTENT_TYPE,
    ByteRange,
    build_extract_command,
    build_range_response,
    extraction_process,
    fetch_audio,
    parse_range_header,
)

__all__ = [
    "AUDIO_CONTENT_TYPE",
    "ByteRange",
    "build_extract_command",
    "build_range_response",
    "extraction_process",
    "fetch_audio",
    "parse_range_header",
]
