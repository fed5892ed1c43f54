"""Tests for the audio relay."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from sonicstream.core.config import YtDlpConfig
from sonicstream.domain.library.exceptions import (
    ClientDisconnectedError,
    ExtractionError,
    InvalidReferenceError,
    RangeNotSatisfiableError,
)
from sonicstream.domain.playback import relay
from sonicstream.domain.playback.relay import ByteRange, parse_range_header

AUDIO = bytes(range(256)) * 4  # 1024 bytes


class FakeProcess:
    """Stand-in for asyncio.subprocess.Process."""

    def __init__(self, stdout=b"", stderr=b"", delay=0.0):
        self.stdout_data = stdout
        self.stderr_data = stderr
        self.delay = delay
        self.returncode = None
        self.pid = 4242
        self.killed = False

    async def communicate(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        self.returncode = 0
        return self.stdout_data, self.stderr_data

    def kill(self):
        self.killed = True
        self.returncode = -9

    async def wait(self):
        return self.returncode


def _patch_spawn(proc=None, error=None):
    spawn = AsyncMock()
    if error is not None:
        spawn.side_effect = error
    else:
        spawn.return_value = proc
    return patch.object(relay.asyncio, "create_subprocess_exec", spawn)


class TestBuildExtractCommand:
    """Tests for build_extract_command."""

    def test_command(self):
        command = relay.build_extract_command("dQw4w9WgXcQ", YtDlpConfig())
        assert command[0] == "yt-dlp"
        assert command[command.index("-f") + 1] == "bestaudio[ext=m4a]/bestaudio/best"
        assert "--no-playlist" in command
        assert command[command.index("-o") + 1] == "-"
        assert command[-1] == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class TestFetchAudio:
    """Tests for fetch_audio."""

    def test_buffers_output(self):
        proc = FakeProcess(stdout=AUDIO)
        with _patch_spawn(proc) as spawn:
            audio = asyncio.run(relay.fetch_audio("dQw4w9WgXcQ", YtDlpConfig()))

        assert audio == AUDIO
        assert not proc.killed
        assert spawn.call_args.args[-1].endswith("dQw4w9WgXcQ")

    def test_invalid_id_never_spawns(self):
        with _patch_spawn(FakeProcess()) as spawn:
            with pytest.raises(InvalidReferenceError):
                asyncio.run(relay.fetch_audio("../etc/passwd", YtDlpConfig()))
        spawn.assert_not_called()

    def test_no_output_is_extraction_error(self):
        proc = FakeProcess(stdout=b"", stderr=b"ERROR: Video unavailable")
        with _patch_spawn(proc):
            with pytest.raises(ExtractionError):
                asyncio.run(relay.fetch_audio("dQw4w9WgXcQ", YtDlpConfig()))

    def test_missing_binary(self):
        with _patch_spawn(error=FileNotFoundError("yt-dlp")):
            with pytest.raises(ExtractionError, match="not installed"):
                asyncio.run(relay.fetch_audio("dQw4w9WgXcQ", YtDlpConfig()))

    def test_disconnect_kills_process(self):
        proc = FakeProcess(stdout=AUDIO, delay=10)

        async def disconnected():
            return True

        async def scenario():
            await relay.fetch_audio(
                "dQw4w9WgXcQ", YtDlpConfig(), is_disconnected=disconnected, poll_interval=0.01
            )

        with _patch_spawn(proc):
            with pytest.raises(ClientDisconnectedError):
                asyncio.run(scenario())

        assert proc.killed

    def test_cancellation_kills_process(self):
        proc = FakeProcess(stdout=AUDIO, delay=10)

        async def scenario():
            task = asyncio.create_task(relay.fetch_audio("dQw4w9WgXcQ", YtDlpConfig()))
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        with _patch_spawn(proc):
            asyncio.run(scenario())

        assert proc.killed


class TestParseRangeHeader:
    """Tests for parse_range_header."""

    def test_absent(self):
        assert parse_range_header(None, 1000) is None
        assert parse_range_header("", 1000) is None

    def test_closed_range(self):
        assert parse_range_header("bytes=0-99", 1000) == ByteRange(0, 99)

    def test_open_ended_runs_to_last_byte(self):
        assert parse_range_header("bytes=500-", 1000) == ByteRange(500, 999)

    def test_suffix(self):
        assert parse_range_header("bytes=-100", 1000) == ByteRange(900, 999)
        assert parse_range_header("bytes=-5000", 1000) == ByteRange(0, 999)

    def test_end_clamped(self):
        assert parse_range_header("bytes=900-5000", 1000) == ByteRange(900, 999)

    @pytest.mark.parametrize("header", ["items=0-1", "bytes=abc", "bytes=0-1,5-9", "bytes=-", "bytes=9-3"])
    def test_malformed_ignored(self, header):
        assert parse_range_header(header, 1000) is None

    @pytest.mark.parametrize("header", ["bytes=1000-", "bytes=2000-2100", "bytes=-0"])
    def test_unsatisfiable(self, header):
        with pytest.raises(RangeNotSatisfiableError) as exc_info:
            parse_range_header(header, 1000)
        assert exc_info.value.total == 1000


class TestBuildRangeResponse:
    """Tests for build_range_response."""

    def test_full_body(self):
        status, headers, body = relay.build_range_response(AUDIO, None)
        assert status == 200
        assert body == AUDIO
        assert headers["Content-Length"] == str(len(AUDIO))
        assert headers["Accept-Ranges"] == "bytes"
        assert headers["Content-Type"] == "audio/mpeg"
        assert "Content-Range" not in headers

    def test_first_hundred_bytes(self):
        status, headers, body = relay.build_range_response(AUDIO, "bytes=0-99")
        assert status == 206
        assert headers["Content-Range"] == f"bytes 0-99/{len(AUDIO)}"
        assert headers["Content-Length"] == "100"
        assert body == AUDIO[:100]
        assert headers["Accept-Ranges"] == "bytes"

    def test_open_ended(self):
        status, headers, body = relay.build_range_response(AUDIO, "bytes=1000-")
        assert status == 206
        assert headers["Content-Range"] == f"bytes 1000-1023/{len(AUDIO)}"
        assert body == AUDIO[1000:]
