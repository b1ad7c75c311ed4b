"""Delivery of transcripts to the chat room, the channel metadata and the store."""

import asyncio
import time
from collections.abc import Callable

from live_transcriber.domain import (
    SINGLE_ATTEMPT,
    DeliveryReport,
    DeliveryTarget,
    LiveUpdate,
    MetadataRecord,
    PersistenceRecord,
    RetryPolicy,
    deliver_with_retry,
)
from live_transcriber.domain.retry import Sleep
from live_transcriber.infrastructure.interfaces import (
    LiveUpdatePublisher,
    MetadataPublisher,
    TranscriptStore,
)
from live_transcriber.logging import setup_logging

logger = setup_logging(__name__)


class DeliveryPublisher:
    """Runs the delivery actions of one DeliveryTarget independently of each other."""

    def __init__(
        self,
        live_publisher: LiveUpdatePublisher,
        metadata_publisher: MetadataPublisher,
        transcript_store: TranscriptStore,
        retry_policy: RetryPolicy = RetryPolicy(),
        persistence_retry: bool = False,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        started_at: float | None = None,
    ):
        self._live_publisher = live_publisher
        self._metadata_publisher = metadata_publisher
        self._transcript_store = transcript_store
        self._retry_policy = retry_policy
        self._persistence_policy = retry_policy if persistence_retry else SINGLE_ATTEMPT
        self._sleep = sleep
        self._clock = clock
        self._started_at = clock() if started_at is None else started_at

    async def deliver(self, target: DeliveryTarget) -> DeliveryReport:
        """
        Delivers one (result, language) pair.

        The live update is always attempted. Finalized results are also
        attached as channel metadata and persisted. The actions run
        concurrently and a failure of one never affects the others; failures
        are logged, never raised.

        Args:
            target: The language-specific text and its recognition result.

        Returns:
            DeliveryReport with the outcome of each attempted action.
        """
        result = target.source_result
        context = {
            "result_id": result.result_id,
            "language_code": target.language_code,
            "is_partial": result.is_partial,
        }

        if not result.result_id:
            logger.error("Missing result id, skipping delivery", extra=context)
            return DeliveryReport(language_code=target.language_code, result_id=None)

        if result.is_partial:
            live_ok = await self._push_live_update(target, context)
            return DeliveryReport(
                language_code=target.language_code,
                result_id=result.result_id,
                live_update=live_ok,
            )

        live_ok, metadata_ok, persisted = await asyncio.gather(
            self._push_live_update(target, context),
            self._attach_metadata(target, context),
            self._persist(target, context),
        )
        return DeliveryReport(
            language_code=target.language_code,
            result_id=result.result_id,
            live_update=live_ok,
            metadata=metadata_ok,
            persistence=persisted,
        )

    async def _push_live_update(self, target: DeliveryTarget, context: dict) -> bool:
        update = LiveUpdate(
            transcript=target.text,
            is_partial=target.source_result.is_partial,
            result_id=target.source_result.result_id,
            language_code=target.language_code,
        )
        return await deliver_with_retry(
            lambda: self._live_publisher.publish(update),
            self._retry_policy,
            "live_update",
            context,
            self._sleep,
        )

    async def _attach_metadata(self, target: DeliveryTarget, context: dict) -> bool:
        record = MetadataRecord(
            transcript=target.text,
            language_code=target.language_code,
            message_id=target.source_result.result_id,
        )
        return await deliver_with_retry(
            lambda: self._metadata_publisher.attach(record),
            self._retry_policy,
            "metadata",
            context,
            self._sleep,
        )

    async def _persist(self, target: DeliveryTarget, context: dict) -> bool:
        result = target.source_result
        start_time = result.start_time
        if start_time is None:
            start_time = round(self._clock() - self._started_at, 3)

        record = PersistenceRecord(
            transcript=target.text,
            language_code=target.language_code,
            start_time=start_time,
            end_time=result.end_time,
        )
        return await deliver_with_retry(
            lambda: self._transcript_store.save(record),
            self._persistence_policy,
            "persistence",
            context,
            self._sleep,
        )
