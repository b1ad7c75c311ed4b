"""Abstract interface for the audio byte source."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class AudioSource(ABC):
    """Produces raw PCM audio bytes from a media endpoint."""

    @abstractmethod
    async def start(self) -> None:
        """
        Starts producing audio.

        Raises:
            ClientInitError: If the decoder cannot be started.
        """

    @abstractmethod
    def read(self) -> AsyncIterator[bytes]:
        """Returns the ordered stream of raw audio reads."""

    @abstractmethod
    async def terminate(self) -> None:
        """Stops the decoder if it is still running. Safe to call more than once."""
