"""Tests for dependency wiring."""

import boto3
import pytest

from live_transcriber import dependencies
from live_transcriber.config import AppConfig, AwsConfig, PipelineConfig
from live_transcriber.exceptions import ClientInitError, ConfigurationError
from live_transcriber.infrastructure import (
    AwsTranscriptionSession,
    AwsTranslator,
    FFmpegAudioSource,
    HttpTranscriptStore,
    IvsChatPublisher,
    IvsMetadataPublisher,
)
from live_transcriber.infrastructure.interfaces import PipelineClients

from tests.fakes import make_job

AWS = AwsConfig(
    ivs_region="eu-west-1", transcribe_region="eu-west-1", translate_region="eu-central-1"
)


class FakeStreamingClient:
    def __init__(self, region):
        self.region = region


@pytest.fixture
def session():
    return boto3.session.Session(
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        region_name="eu-west-1",
    )


@pytest.fixture
def streaming_client(monkeypatch):
    monkeypatch.setattr(dependencies, "TranscribeStreamingClient", FakeStreamingClient)


class TestAwsClientFactory:
    """Tests for AwsClientFactory."""

    @pytest.mark.asyncio
    async def test_builds_clients_without_translator(self, session, streaming_client):
        factory = dependencies.AwsClientFactory(AWS, PipelineConfig(), session)
        clients = PipelineClients()

        factory.build(make_job(), clients)

        assert isinstance(clients.live_publisher, IvsChatPublisher)
        assert isinstance(clients.metadata_publisher, IvsMetadataPublisher)
        assert isinstance(clients.transcriber, AwsTranscriptionSession)
        assert isinstance(clients.transcript_store, HttpTranscriptStore)
        assert clients.translator is None
        await clients.close()

    @pytest.mark.asyncio
    async def test_builds_translator_for_other_languages(self, session, streaming_client):
        factory = dependencies.AwsClientFactory(AWS, PipelineConfig(), session)
        clients = PipelineClients()

        factory.build(make_job(target_languages=["fr-FR"]), clients)

        assert isinstance(clients.translator, AwsTranslator)
        await clients.close()
        assert clients.translator is None

    def test_unknown_service_raises_client_init_error(self, session):
        factory = dependencies.AwsClientFactory(AWS, PipelineConfig(), session)

        with pytest.raises(ClientInitError) as exc_info:
            factory._client("not-a-service", "eu-west-1")

        assert exc_info.value.client_name == "not-a-service"

    def test_transcribe_client_failure(self, session, monkeypatch):
        def broken(region):
            raise ValueError("bad region")

        monkeypatch.setattr(dependencies, "TranscribeStreamingClient", broken)
        factory = dependencies.AwsClientFactory(AWS, PipelineConfig(), session)

        with pytest.raises(ClientInitError) as exc_info:
            factory.build(make_job(), PipelineClients())

        assert exc_info.value.client_name == "transcribe"

    @pytest.mark.asyncio
    async def test_http_client_sends_bearer_token(self, session):
        factory = dependencies.AwsClientFactory(
            AWS, PipelineConfig(persistence_api_token="secret"), session
        )

        client = factory._http_client()

        assert client.headers["Authorization"] == "Bearer secret"
        await client.aclose()

    def test_audio_source_uses_configured_ffmpeg(self, session):
        factory = dependencies.AwsClientFactory(
            AWS, PipelineConfig(ffmpeg_path="/opt/ffmpeg"), session
        )

        source = factory.audio_source(make_job())

        assert isinstance(source, FFmpegAudioSource)


def test_get_broker_requires_rabbitmq_config():
    with pytest.raises(ConfigurationError):
        dependencies.get_broker(AppConfig(aws=AWS))
