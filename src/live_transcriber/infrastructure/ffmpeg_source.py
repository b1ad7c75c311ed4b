"""FFmpeg decoder subprocess implementation of the AudioSource interface."""

import asyncio
import re
from collections.abc import AsyncIterator

from live_transcriber.exceptions import ClientInitError
from live_transcriber.logging import setup_logging

from .interfaces import AudioSource

logger = setup_logging(__name__)

READ_SIZE = 64 * 1024
STDERR_READ_SIZE = 4096
_LINE_BREAK = re.compile(rb"[\r\n]")


def build_ffmpeg_args(playback_url: str, playback_token: str) -> list[str]:
    """Arguments decoding a signed playback URL to 16 kHz mono s16le PCM on stdout."""
    return [
        # Progress stats are \r-separated and never needed; keep stderr to warnings
        "-nostats",
        "-loglevel",
        "warning",
        # Low latency
        "-fflags",
        "nobuffer",
        # Ride out short network drops on the playback side
        "-reconnect",
        "1",
        "-reconnect_streamed",
        "1",
        "-reconnect_delay_max",
        "2",
        "-i",
        f"{playback_url}?token={playback_token}",
        "-vn",
        "-acodec",
        "pcm_s16le",
        "-ar",
        "16000",
        "-ac",
        "1",
        "-f",
        "s16le",
        "pipe:1",
    ]


class FFmpegAudioSource(AudioSource):
    """Runs ffmpeg against the playback URL and streams its stdout."""

    def __init__(
        self,
        playback_url: str,
        playback_token: str,
        ffmpeg_path: str = "ffmpeg",
        read_size: int = READ_SIZE,
        stop_timeout: float = 5.0,
    ):
        self._args = build_ffmpeg_args(playback_url, playback_token)
        self._ffmpeg_path = ffmpeg_path
        self._read_size = read_size
        self._stop_timeout = stop_timeout
        self._process: asyncio.subprocess.Process | None = None
        self._stderr_task: asyncio.Task | None = None

    async def start(self) -> None:
        logger.info("Starting FFmpeg process")
        try:
            self._process = await asyncio.create_subprocess_exec(
                self._ffmpeg_path,
                *self._args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.exception("FFmpeg failed to start", extra={"path": self._ffmpeg_path})
            raise ClientInitError("ffmpeg", e) from e

        # stderr must be drained or ffmpeg blocks once the pipe buffer fills.
        self._stderr_task = asyncio.create_task(self._drain_stderr())

    async def read(self) -> AsyncIterator[bytes]:
        if self._process is None or self._process.stdout is None:
            return
        while True:
            data = await self._process.stdout.read(self._read_size)
            if not data:
                break
            yield data

        returncode = await self._process.wait()
        if returncode == 0:
            logger.info("FFmpeg process completed successfully")
        else:
            logger.warning("FFmpeg process exited", extra={"returncode": returncode})

    async def terminate(self) -> None:
        process = self._process
        if process is not None and process.returncode is None:
            logger.info("Cleaning up FFmpeg process")
            try:
                process.terminate()
                await asyncio.wait_for(process.wait(), timeout=self._stop_timeout)
            except ProcessLookupError:
                pass
            except asyncio.TimeoutError:
                logger.warning("FFmpeg did not exit after SIGTERM; killing")
                process.kill()
                await process.wait()

        if self._stderr_task is not None:
            await asyncio.gather(self._stderr_task, return_exceptions=True)
            self._stderr_task = None

    async def _drain_stderr(self) -> None:
        # Reads fixed-size blocks: ffmpeg may emit \r-only output, which
        # readline() rejects once it exceeds the stream reader's limit.
        assert self._process is not None and self._process.stderr is not None
        pending = b""
        while True:
            data = await self._process.stderr.read(STDERR_READ_SIZE)
            if not data:
                break
            *lines, pending = _LINE_BREAK.split(pending + data)
            if len(pending) > STDERR_READ_SIZE:
                lines.append(pending)
                pending = b""
            for line in lines:
                self._log_stderr(line)
        self._log_stderr(pending)

    def _log_stderr(self, line: bytes) -> None:
        text = line.decode(errors="replace").strip()
        if text:
            logger.debug("ffmpeg", extra={"line": text})
