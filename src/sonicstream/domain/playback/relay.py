"""
Audio relay: serve YouTube audio through yt-dlp with byte-range support.

Each request spawns one yt-dlp process writing the audio to stdout. The whole
output is buffered in memory before answering, so Content-Length is exact and
any byte range can be sliced. Nothing is written to disk and no process
outlives its request: the process is killed on every exit path, including a
client disconnect while extraction is still running.
"""

import asyncio
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple

from loguru import logger

from sonicstream.core.config import YtDlpConfig
from sonicstream.domain.library.exceptions import (
    ClientDisconnectedError,
    ExtractionError,
    InvalidReferenceError,
    RangeNotSatisfiableError,
    truncate,
)
from sonicstream.domain.library.references import is_valid_video_id

AUDIO_CONTENT_TYPE = "audio/mpeg"
WATCH_URL_PREFIX = "https://www.youtube.com/watch?v="

DISCONNECT_POLL_SECONDS = 0.5

_RANGE_PATTERN = re.compile(r"^bytes=(\d*)-(\d*)$")

DisconnectCheck = Callable[[], Awaitable[bool]]


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range within a buffer."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, total: int) -> str:
        return f"bytes {self.start}-{self.end}/{total}"


def build_extract_command(video_id: str, config: YtDlpConfig) -> List[str]:
    """yt-dlp command line that writes the best audio stream to stdout."""
    return [
        config.binary,
        "-f",
        config.audio_format,
        "--no-playlist",
        "--no-check-certificates",
        "--quiet",
        "-o",
        "-",
        WATCH_URL_PREFIX + video_id,
    ]


@asynccontextmanager
async def extraction_process(
    command: List[str],
) -> AsyncIterator[asyncio.subprocess.Process]:
    """Run ``command`` for the duration of the block, killing it on exit."""
    proc = await asyncio.create_subprocess_exec(
        *command,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        yield proc
    finally:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass  # Exited between the check and the kill
            await proc.wait()
            logger.debug(f"Killed extraction process {proc.pid}")


async def _communicate_until_disconnect(
    proc: asyncio.subprocess.Process,
    is_disconnected: Optional[DisconnectCheck],
    poll_interval: float,
) -> Tuple[bytes, bytes]:
    """Collect all process output, giving up if the client disconnects."""
    communicate = asyncio.ensure_future(proc.communicate())
    try:
        while True:
            done, _ = await asyncio.wait({communicate}, timeout=poll_interval)
            if done:
                return communicate.result()
            if is_disconnected is not None and await is_disconnected():
                raise ClientDisconnectedError("Client disconnected during extraction")
    finally:
        if not communicate.done():
            communicate.cancel()


async def fetch_audio(
    video_id: str,
    config: YtDlpConfig,
    is_disconnected: Optional[DisconnectCheck] = None,
    poll_interval: float = DISCONNECT_POLL_SECONDS,
) -> bytes:
    """Extract the full audio of a video into memory.

    Args:
        video_id: 11-character YouTube video id
        config: yt-dlp settings (binary, format)
        is_disconnected: Awaitable check polled while extraction runs
        poll_interval: Seconds between disconnect checks

    Returns:
        Raw audio bytes

    Raises:
        InvalidReferenceError: If video_id is malformed
        ClientDisconnectedError: If the client went away first
        ExtractionError: If yt-dlp is missing or produced no output
    """
    if not is_valid_video_id(video_id or ""):
        raise InvalidReferenceError("Invalid video ID")

    command = build_extract_command(video_id, config)
    try:
        async with extraction_process(command) as proc:
            stdout, stderr = await _communicate_until_disconnect(
                proc, is_disconnected, poll_interval
            )
    except FileNotFoundError:
        raise ExtractionError(f"{config.binary} is not installed")
    except ClientDisconnectedError:
        logger.info(f"Stream {video_id}: client disconnected, extraction stopped")
        raise

    error_output = stderr.decode("utf-8", errors="replace")
    if "ERROR" in error_output:
        logger.error(f"yt-dlp ({video_id}): {truncate(error_output)}")

    if not stdout:
        raise ExtractionError(f"No audio extracted for {video_id}")

    logger.debug(f"Stream {video_id}: buffered {len(stdout)} bytes")
    return stdout


def parse_range_header(header: Optional[str], total: int) -> Optional[ByteRange]:
    """Parse a single ``Range: bytes=...`` header against a buffer size.

    Supports ``start-end``, ``start-`` (to the last byte) and ``-N`` (the
    last N bytes). An end past the buffer is clamped to the last byte.

    Returns:
        The requested range, or None when the header is absent or malformed
        (the full buffer is served)

    Raises:
        RangeNotSatisfiableError: If the range lies outside the buffer
    """
    if not header:
        return None

    match = _RANGE_PATTERN.match(header.strip())
    if not match:
        return None

    start_text, end_text = match.groups()
    if not start_text and not end_text:
        return None

    if not start_text:
        suffix = int(end_text)
        if suffix == 0 or total == 0:
            raise RangeNotSatisfiableError(total)
        return ByteRange(max(total - suffix, 0), total - 1)

    start = int(start_text)
    end = int(end_text) if end_text else total - 1
    if end < start:
        return None
    if start >= total:
        raise RangeNotSatisfiableError(total)
    return ByteRange(start, min(end, total - 1))


def build_range_response(
    audio: bytes, range_header: Optional[str]
) -> Tuple[int, Dict[str, str], bytes]:
    """Status, headers and body for serving ``audio``.

    Raises:
        RangeNotSatisfiableError: If the requested range is outside the buffer
    """
    total = len(audio)
    headers = {"Accept-Ranges": "bytes", "Content-Type": AUDIO_CONTENT_TYPE}

    byte_range = parse_range_header(range_header, total)
    if byte_range is None:
        headers["Content-Length"] = str(total)
        return 200, headers, audio

    headers["Content-Range"] = byte_range.content_range(total)
    headers["Content-Length"] = str(byte_range.length)
    return 206, headers, audio[byte_range.start : byte_range.end + 1]
