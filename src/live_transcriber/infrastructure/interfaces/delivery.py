"""Abstract interfaces for the downstream delivery channels."""

from abc import ABC, abstractmethod

from live_transcriber.domain.models import LiveUpdate, MetadataRecord, PersistenceRecord


class LiveUpdatePublisher(ABC):
    """Pushes live transcript updates to a real-time messaging channel."""

    @abstractmethod
    async def publish(self, update: LiveUpdate) -> None:
        """
        Sends one live update.

        Raises:
            DeliveryError: If the messaging call fails.
        """

    @abstractmethod
    async def close(self) -> None:
        """Releases the underlying client. Safe to call more than once."""


class MetadataPublisher(ABC):
    """Attaches metadata for finalized results to the live channel."""

    @abstractmethod
    async def attach(self, record: MetadataRecord) -> None:
        """
        Attaches one metadata record.

        Raises:
            ExpectedInactiveDestinationError: If the channel is not live.
            DeliveryError: If the metadata call fails.
        """

    @abstractmethod
    async def close(self) -> None:
        """Releases the underlying client. Safe to call more than once."""


class TranscriptStore(ABC):
    """Persists finalized transcripts."""

    @abstractmethod
    async def save(self, record: PersistenceRecord) -> None:
        """
        Persists one transcript record.

        Raises:
            DeliveryError: If the persistence call fails.
        """

    @abstractmethod
    async def close(self) -> None:
        """Releases the underlying client. Safe to call more than once."""
