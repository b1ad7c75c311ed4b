"""Domain models for the live transcription service."""

import json
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class JobSpec(BaseModel, frozen=True):
    """Parameters of one transcription run, from a queue message or the environment."""

    playback_url: str = Field(min_length=1)
    playback_token: str = Field(min_length=1)
    source_language: str = "en-IE"
    target_languages: tuple[str, ...] = ()
    chat_room_arn: str = Field(min_length=1)
    channel_arn: str = Field(min_length=1)
    livestream_id: str = Field(min_length=1)
    domain: str = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _default_targets(cls, data):
        # Without explicit targets the job transcribes the source language only.
        if isinstance(data, dict) and not data.get("target_languages"):
            source = data.get("source_language") or "en-IE"
            data = {**data, "target_languages": (source,)}
        return data

    @field_validator("target_languages", mode="before")
    @classmethod
    def _split_languages(cls, value):
        if isinstance(value, str):
            return tuple(code.strip() for code in value.split(",") if code.strip())
        return value

    @property
    def delivery_languages(self) -> tuple[str, ...]:
        """Source language first, then each distinct other target language."""
        languages = [self.source_language]
        for code in self.target_languages:
            if code not in languages:
                languages.append(code)
        return tuple(languages)

    @property
    def needs_translation(self) -> bool:
        return any(code != self.source_language for code in self.target_languages)


class RecognitionResult(BaseModel, frozen=True):
    """Best candidate of one recognition event."""

    result_id: str | None
    is_partial: bool
    start_time: float | None = None
    end_time: float | None = None
    text: str


class DeliveryTarget(BaseModel, frozen=True):
    """One (result, language) pair ready for delivery."""

    language_code: str
    text: str
    source_result: RecognitionResult


class LiveUpdate(BaseModel, frozen=True):
    """Live update pushed to the chat room."""

    transcript: str
    is_partial: bool
    result_id: str
    language_code: str

    def to_attributes(self) -> dict[str, str]:
        """Chat event attributes; the chat API only accepts string values."""
        return {
            "transcript": self.transcript,
            "isPartial": str(self.is_partial).lower(),
            "resultId": self.result_id,
            "languageCode": self.language_code,
        }


class MetadataRecord(BaseModel, frozen=True):
    """Timed metadata attached to the live channel for a finalized result."""

    type: str = "transcript"
    transcript: str
    language_code: str
    message_id: str

    def to_payload(self) -> str:
        return json.dumps(self.model_dump(), ensure_ascii=False)


class PersistenceRecord(BaseModel, frozen=True):
    """Finalized transcript sent to the persistence endpoint."""

    transcript: str
    language_code: str
    start_time: float | None = None
    end_time: float | None = None


class DeliveryReport(BaseModel, frozen=True):
    """Outcome of each delivery action; None means the action was not attempted."""

    language_code: str
    result_id: str | None
    live_update: bool | None = None
    metadata: bool | None = None
    persistence: bool | None = None


class PipelineState(str, Enum):
    """Lifecycle states of a pipeline run."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    STREAMING = "streaming"
    DRAINING = "draining"
    TERMINATED = "terminated"


class PipelineOutcome(BaseModel, frozen=True):
    """Terminal outcome of a pipeline run."""

    success: bool
    cancelled: bool = False
    error: str | None = None
    results_processed: int = 0

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1
