"""Abstract interface for constructing the remote clients of a run."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from live_transcriber.domain.models import JobSpec
from live_transcriber.logging import setup_logging

from .audio_source import AudioSource
from .delivery import LiveUpdatePublisher, MetadataPublisher, TranscriptStore
from .transcription_service import StreamingTranscriber
from .translation_service import TranslationService

logger = setup_logging(__name__)


@dataclass
class PipelineClients:
    """Remote collaborators of one run; any of them may be missing after a failed build."""

    transcriber: StreamingTranscriber | None = None
    translator: TranslationService | None = None
    live_publisher: LiveUpdatePublisher | None = None
    metadata_publisher: MetadataPublisher | None = None
    transcript_store: TranscriptStore | None = None

    async def close(self) -> None:
        """Closes every constructed client once; later calls are no-ops."""
        for name in (
            "transcriber",
            "translator",
            "live_publisher",
            "metadata_publisher",
            "transcript_store",
        ):
            client = getattr(self, name)
            if client is None:
                continue
            setattr(self, name, None)
            logger.info("Closing client", extra={"client": name})
            try:
                await client.close()
            except Exception:
                logger.exception("Failed to close client", extra={"client": name})


class ClientFactory(ABC):
    """Builds the remote clients and the audio source for a job."""

    @abstractmethod
    def build(self, job: JobSpec, clients: PipelineClients) -> None:
        """
        Constructs the clients a job needs, assigning each to ``clients`` as it
        succeeds so that a failure leaves the constructed ones for teardown.

        Raises:
            Exception: Whatever the underlying SDK raises on construction.
        """

    @abstractmethod
    def audio_source(self, job: JobSpec) -> AudioSource:
        """Returns a (not yet started) audio source for the job's media endpoint."""
