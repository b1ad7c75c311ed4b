"""Infrastructure layer exports."""

from .aws_transcribe import AwsTranscriptionSession
from .aws_translate import AwsTranslator
from .ffmpeg_source import FFmpegAudioSource
from .http_transcript_store import HttpTranscriptStore, transcription_url
from .ivs_chat import IvsChatPublisher
from .ivs_metadata import IvsMetadataPublisher
from .rabbitmq_broker import RabbitMQBroker

__all__ = [
    "AwsTranscriptionSession",
    "AwsTranslator",
    "FFmpegAudioSource",
    "HttpTranscriptStore",
    "transcription_url",
    "IvsChatPublisher",
    "IvsMetadataPublisher",
    "RabbitMQBroker",
]
