"""Dependency injection configuration for the live-transcriber service."""

import boto3
import httpx
import pika
from amazon_transcribe.client import TranscribeStreamingClient

from live_transcriber.config import AppConfig, AwsConfig, PipelineConfig
from live_transcriber.domain import JobSpec
from live_transcriber.exceptions import ClientInitError, ConfigurationError
from live_transcriber.handlers import PipelineDriver
from live_transcriber.infrastructure import (
    AwsTranscriptionSession,
    AwsTranslator,
    FFmpegAudioSource,
    HttpTranscriptStore,
    IvsChatPublisher,
    IvsMetadataPublisher,
    RabbitMQBroker,
    transcription_url,
)
from live_transcriber.infrastructure.interfaces import (
    AudioSource,
    ClientFactory,
    MessageBroker,
    PipelineClients,
)
from live_transcriber.logging import setup_logging
from live_transcriber.worker import Worker

logger = setup_logging(__name__)


class AwsClientFactory(ClientFactory):
    """Builds the AWS, HTTP and decoder collaborators of a run."""

    def __init__(
        self,
        aws: AwsConfig,
        pipeline: PipelineConfig,
        session: boto3.session.Session | None = None,
    ):
        self._aws = aws
        self._pipeline = pipeline
        self._session = session or boto3.session.Session()

    def build(self, job: JobSpec, clients: PipelineClients) -> None:
        logger.info("Creating IVS Chat client", extra={"region": self._aws.ivs_region})
        clients.live_publisher = IvsChatPublisher(
            self._client("ivschat", self._aws.ivs_region), job.chat_room_arn
        )

        logger.info("Creating IVS client", extra={"region": self._aws.ivs_region})
        clients.metadata_publisher = IvsMetadataPublisher(
            self._client("ivs", self._aws.ivs_region), job.channel_arn
        )

        logger.info(
            "Creating Transcribe client", extra={"region": self._aws.transcribe_region}
        )
        try:
            streaming_client = TranscribeStreamingClient(
                region=self._aws.transcribe_region
            )
        except Exception as e:
            logger.exception("Failed to instantiate Transcribe client")
            raise ClientInitError("transcribe", e) from e
        clients.transcriber = AwsTranscriptionSession(streaming_client)

        if job.needs_translation:
            logger.info(
                "Creating Translate client",
                extra={"region": self._aws.translate_region},
            )
            clients.translator = AwsTranslator(
                self._client("translate", self._aws.translate_region)
            )

        clients.transcript_store = HttpTranscriptStore(
            self._http_client(), transcription_url(job.domain, job.livestream_id)
        )

    def audio_source(self, job: JobSpec) -> AudioSource:
        return FFmpegAudioSource(
            job.playback_url,
            job.playback_token,
            ffmpeg_path=self._pipeline.ffmpeg_path,
        )

    def _client(self, service_name: str, region: str):
        try:
            return self._session.client(service_name, region_name=region)
        except Exception as e:
            logger.exception(
                "Failed to instantiate client", extra={"service": service_name}
            )
            raise ClientInitError(service_name, e) from e

    def _http_client(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if self._pipeline.persistence_api_token:
            headers["Authorization"] = f"Bearer {self._pipeline.persistence_api_token}"
        return httpx.AsyncClient(
            headers=headers, timeout=self._pipeline.persistence_timeout_seconds
        )


def get_client_factory(config: AppConfig) -> ClientFactory:
    """Returns the configured client factory."""
    return AwsClientFactory(config.aws, config.pipeline)


def get_driver(config: AppConfig) -> PipelineDriver:
    """Returns a pipeline driver wired to the AWS collaborators."""
    return PipelineDriver(get_client_factory(config), config.pipeline)


def get_broker(config: AppConfig) -> MessageBroker:
    """Connects to RabbitMQ and returns the configured broker."""
    if config.rabbitmq is None:
        raise ConfigurationError(["RABBITMQ_HOST", "RABBITMQ_USER", "RABBITMQ_PASSWORD"])

    credentials = pika.PlainCredentials(config.rabbitmq.user, config.rabbitmq.password)
    # A job blocks the connection thread for the whole livestream, so heartbeats stay off.
    parameters = pika.ConnectionParameters(
        host=config.rabbitmq.host,
        credentials=credentials,
        heartbeat=0,
    )
    connection = pika.BlockingConnection(parameters)
    broker = RabbitMQBroker(connection.channel(), config.rabbitmq)
    broker.setup()
    return broker


def get_worker(config: AppConfig) -> Worker:
    """Returns the configured queue worker."""
    return Worker(get_broker(config), get_driver(config), config.rabbitmq)
