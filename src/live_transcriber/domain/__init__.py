"""Domain layer exports."""

from .classifier import classify
from .models import (
    DeliveryReport,
    DeliveryTarget,
    JobSpec,
    LiveUpdate,
    MetadataRecord,
    PersistenceRecord,
    PipelineOutcome,
    PipelineState,
    RecognitionResult,
)
from .retry import SINGLE_ATTEMPT, RetryPolicy, deliver_with_retry
from .segmenter import MAX_CHUNK_SIZE, segment, split_chunk

__all__ = [
    "classify",
    "DeliveryReport",
    "DeliveryTarget",
    "JobSpec",
    "LiveUpdate",
    "MetadataRecord",
    "PersistenceRecord",
    "PipelineOutcome",
    "PipelineState",
    "RecognitionResult",
    "SINGLE_ATTEMPT",
    "RetryPolicy",
    "deliver_with_retry",
    "MAX_CHUNK_SIZE",
    "segment",
    "split_chunk",
]
