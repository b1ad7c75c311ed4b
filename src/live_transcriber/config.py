"""Application configuration loaded from environment variables."""

import os

from pydantic import BaseModel, Field, ValidationError

from live_transcriber.domain.models import JobSpec
from live_transcriber.domain.retry import RetryPolicy
from live_transcriber.exceptions import ConfigurationError


class AwsConfig(BaseModel, frozen=True):
    """AWS regions of the remote services."""

    ivs_region: str = Field(min_length=1)
    transcribe_region: str = Field(min_length=1)
    translate_region: str = Field(min_length=1)


class RetryConfig(BaseModel, frozen=True):
    """Delivery retry configuration."""

    max_attempts: int = Field(default=3, ge=1)
    base_delay_ms: int = Field(default=500, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1)
    persistence_retry: bool = False

    def policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay_ms / 1000,
            multiplier=self.backoff_multiplier,
        )


class PipelineConfig(BaseModel, frozen=True):
    """Per-run pipeline settings."""

    drain_timeout_seconds: float = Field(default=5.0, ge=0)
    ffmpeg_path: str = "ffmpeg"
    persistence_api_token: str | None = None
    persistence_timeout_seconds: float = Field(default=10.0, gt=0)
    retry: RetryConfig = RetryConfig()


class QueueConfig(BaseModel, frozen=True):
    """RabbitMQ queue configuration."""

    name: str = "live_transcription_queue"
    queue_type: str = "quorum"
    max_delivery_count: int = 3
    expected_routing_key: str = "transcription.job.requested"
    success_routing_key: str = "transcription.job.completed"
    dlq_name: str = "dlq_live_transcriber"
    dlq_exchange_name: str = "dead_letter_exchange"
    dlq_routing_key: str = "transcription.job.failed"


class RabbitMQConfig(BaseModel, frozen=True):
    """RabbitMQ connection configuration."""

    host: str = Field(min_length=1)
    user: str = Field(min_length=1)
    password: str = Field(min_length=1)
    exchange_name: str = "events"
    queue_config: QueueConfig = QueueConfig()


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    job_source: str = "env"
    aws: AwsConfig
    pipeline: PipelineConfig = PipelineConfig()
    rabbitmq: RabbitMQConfig | None = None


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def _field_names(error: ValidationError) -> list[str]:
    return [".".join(str(part) for part in err["loc"]) for err in error.errors()]


def load_config() -> AppConfig:
    """
    Loads configuration from environment variables.

    Raises:
        ConfigurationError: If a required variable is missing or invalid.
    """
    job_source = os.getenv("JOB_SOURCE", "env").strip().lower()
    if job_source not in ("env", "queue"):
        raise ConfigurationError(["JOB_SOURCE"])

    try:
        rabbitmq = None
        if job_source == "queue":
            rabbitmq = RabbitMQConfig(
                host=os.getenv("RABBITMQ_HOST", ""),
                user=os.getenv("RABBITMQ_USER", ""),
                password=os.getenv("RABBITMQ_PASSWORD", ""),
            )

        return AppConfig(
            job_source=job_source,
            aws=AwsConfig(
                ivs_region=os.getenv("AWS_IVS_REGION", ""),
                transcribe_region=os.getenv("AWS_TRANSCRIBE_REGION", ""),
                translate_region=os.getenv("AWS_TRANSLATE_REGION", ""),
            ),
            pipeline=PipelineConfig(
                drain_timeout_seconds=float(os.getenv("DRAIN_TIMEOUT_SECONDS", "5")),
                ffmpeg_path=os.getenv("FFMPEG_PATH", "ffmpeg"),
                persistence_api_token=os.getenv("PERSISTENCE_API_TOKEN") or None,
                persistence_timeout_seconds=float(
                    os.getenv("PERSISTENCE_TIMEOUT_SECONDS", "10")
                ),
                retry=RetryConfig(
                    max_attempts=int(os.getenv("DELIVERY_MAX_ATTEMPTS", "3")),
                    base_delay_ms=int(os.getenv("DELIVERY_BASE_DELAY_MS", "500")),
                    backoff_multiplier=float(
                        os.getenv("DELIVERY_BACKOFF_MULTIPLIER", "2")
                    ),
                    persistence_retry=_env_flag("PERSISTENCE_RETRY"),
                ),
            ),
            rabbitmq=rabbitmq,
        )
    except ValidationError as e:
        raise ConfigurationError(_field_names(e), e) from e
    except ValueError as e:
        raise ConfigurationError(["numeric setting"], e) from e


def load_job_from_env() -> JobSpec:
    """
    Builds the job of a single-run deployment from environment variables.

    Raises:
        ConfigurationError: If a required variable is missing or invalid.
    """
    try:
        return JobSpec(
            playback_url=os.getenv("PLAYBACK_URL", ""),
            playback_token=os.getenv("PLAYBACK_JWT", ""),
            source_language=os.getenv("FROM_LANG") or "en-IE",
            target_languages=os.getenv("TO_LANG", ""),
            chat_room_arn=os.getenv("IVS_CHAT_ROOM_ARN", ""),
            channel_arn=os.getenv("IVS_CHANNEL_ARN", ""),
            livestream_id=os.getenv("LIVESTREAM_ID", ""),
            domain=os.getenv("DOMAIN", ""),
        )
    except ValidationError as e:
        raise ConfigurationError(_field_names(e), e) from e
