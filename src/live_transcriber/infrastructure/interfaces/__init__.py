"""Infrastructure interface exports."""

from .audio_source import AudioSource
from .client_factory import ClientFactory, PipelineClients
from .delivery import LiveUpdatePublisher, MetadataPublisher, TranscriptStore
from .message_broker import MessageBroker, MessagePublisher
from .transcription_service import StreamingTranscriber
from .translation_service import TranslationService

__all__ = [
    "AudioSource",
    "ClientFactory",
    "PipelineClients",
    "LiveUpdatePublisher",
    "MetadataPublisher",
    "TranscriptStore",
    "MessageBroker",
    "MessagePublisher",
    "StreamingTranscriber",
    "TranslationService",
]
