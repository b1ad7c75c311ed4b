"""Tests for the ffmpeg audio source."""

import asyncio
import sys

import pytest

from live_transcriber.exceptions import ClientInitError
from live_transcriber.infrastructure import FFmpegAudioSource
from live_transcriber.infrastructure.ffmpeg_source import build_ffmpeg_args


def test_build_ffmpeg_args():
    args = build_ffmpeg_args("https://playback.example.com/live.m3u8", "jwt")

    assert args[args.index("-i") + 1] == "https://playback.example.com/live.m3u8?token=jwt"
    assert args[args.index("-ar") + 1] == "16000"
    assert args[args.index("-ac") + 1] == "1"
    assert args[args.index("-f") + 1] == "s16le"
    assert args[-1] == "pipe:1"
    assert "-vn" in args
    assert "-nostats" in args
    assert args[args.index("-loglevel") + 1] == "warning"


class TestFFmpegAudioSource:
    """Tests for FFmpegAudioSource."""

    @pytest.mark.asyncio
    async def test_missing_binary_raises_client_init_error(self, tmp_path):
        source = FFmpegAudioSource(
            "https://playback.example.com/live.m3u8",
            "jwt",
            ffmpeg_path=str(tmp_path / "no-ffmpeg"),
        )

        with pytest.raises(ClientInitError) as exc_info:
            await source.start()

        assert exc_info.value.client_name == "ffmpeg"

    @pytest.mark.asyncio
    async def test_unstarted_source_reads_nothing_and_terminates(self):
        source = FFmpegAudioSource("https://playback.example.com/live.m3u8", "jwt")

        assert [chunk async for chunk in source.read()] == []
        await source.terminate()
        await source.terminate()

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
    @pytest.mark.asyncio
    async def test_carriage_return_stderr_does_not_stall_audio(self, tmp_path):
        # Stands in for ffmpeg: ~600 KB of \r-separated progress stats on
        # stderr, more than the pipe buffer, before any audio on stdout.
        script = tmp_path / "ffmpeg"
        script.write_text(
            "#!/bin/sh\n"
            "i=0\n"
            "while [ $i -lt 8000 ]; do\n"
            "  printf 'frame=%d fps=25 q=-1.0 size=1024kB time=00:00:01.00"
            " bitrate=128.0kbits/s speed=1x\\r' $i >&2\n"
            "  i=$((i+1))\n"
            "done\n"
            "head -c 100000 /dev/zero\n"
        )
        script.chmod(0o755)
        source = FFmpegAudioSource(
            "https://playback.example.com/live.m3u8", "jwt", ffmpeg_path=str(script)
        )

        async def read_all():
            return b"".join([chunk async for chunk in source.read()])

        await source.start()
        try:
            audio = await asyncio.wait_for(read_all(), timeout=10)
        finally:
            await source.terminate()

        assert len(audio) == 100_000
