"""Abstract interface for streaming speech recognition."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any


class StreamingTranscriber(ABC):
    """Abstract base class for bidirectional streaming recognition backends."""

    @abstractmethod
    async def start(
        self, chunks: AsyncIterable[bytes], language_code: str
    ) -> AsyncIterator[Any]:
        """
        Opens a recognition stream and returns its event sequence.

        Chunks are sent concurrently with reading events; the stream ends
        when the chunk source is exhausted and the service has flushed.

        Args:
            chunks: Audio chunks, each within the service's size limit.
            language_code: Language spoken in the audio.

        Returns:
            Async iterator of recognition events.

        Raises:
            StreamSetupError: If the stream cannot be established.
        """

    @abstractmethod
    async def close(self) -> None:
        """Releases the underlying client. Safe to call more than once."""
