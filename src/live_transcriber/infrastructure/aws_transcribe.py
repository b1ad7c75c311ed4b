"""Amazon Transcribe streaming implementation of the StreamingTranscriber interface."""

import asyncio
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from amazon_transcribe.client import TranscribeStreamingClient

from live_transcriber.exceptions import StreamSetupError, StreamTransportError
from live_transcriber.logging import setup_logging

from .interfaces import StreamingTranscriber

logger = setup_logging(__name__)

SAMPLE_RATE_HZ = 16_000
MEDIA_ENCODING = "pcm"


class AwsTranscriptionSession(StreamingTranscriber):
    """Runs one bidirectional transcription stream against Amazon Transcribe."""

    def __init__(
        self,
        client: TranscribeStreamingClient,
        sample_rate_hz: int = SAMPLE_RATE_HZ,
        media_encoding: str = MEDIA_ENCODING,
    ):
        self._client = client
        self._sample_rate_hz = sample_rate_hz
        self._media_encoding = media_encoding

    async def start(
        self, chunks: AsyncIterable[bytes], language_code: str
    ) -> AsyncIterator[Any]:
        """
        Starts the transcription stream.

        The service only answers once audio is flowing, so the returned
        iterator feeds chunks from a background task while it reads events.
        """
        if self._client is None:
            raise StreamSetupError(language_code, RuntimeError("client is closed"))

        logger.info("Setting up transcription", extra={"language_code": language_code})
        try:
            stream = await self._client.start_stream_transcription(
                language_code=language_code,
                media_sample_rate_hz=self._sample_rate_hz,
                media_encoding=self._media_encoding,
            )
        except Exception as e:
            logger.exception(
                "Transcription stream setup failed",
                extra={"language_code": language_code},
            )
            raise StreamSetupError(language_code, e) from e

        return self._events(stream, chunks)

    async def _events(self, stream: Any, chunks: AsyncIterable[bytes]) -> AsyncIterator[Any]:
        feeder = asyncio.create_task(self._feed(stream.input_stream, chunks))
        try:
            async for event in stream.output_stream:
                yield event
            # Surface a feeder failure that ended the stream early.
            await feeder
        except Exception as e:
            logger.exception("Transcription stream failed")
            raise StreamTransportError(e) from e
        finally:
            if not feeder.done():
                feeder.cancel()
            await asyncio.gather(feeder, return_exceptions=True)

    async def _feed(self, input_stream: Any, chunks: AsyncIterable[bytes]) -> None:
        sent = 0
        try:
            async for chunk in chunks:
                await input_stream.send_audio_event(audio_chunk=chunk)
                sent += 1
        except Exception:
            # Close the outbound side so the service flushes and ends the event stream.
            try:
                await input_stream.end_stream()
            except Exception:
                logger.warning("Failed to end audio stream after input error")
            raise
        logger.info("Audio input finished", extra={"chunks_sent": sent})
        await input_stream.end_stream()

    async def close(self) -> None:
        # The streaming client holds no pooled connections beyond the stream itself.
        self._client = None
