"""Lifecycle of one transcription run: initialize, stream, drain, terminate."""

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Coroutine
from typing import Any

from live_transcriber.config import PipelineConfig
from live_transcriber.domain import (
    DeliveryTarget,
    JobSpec,
    PipelineOutcome,
    PipelineState,
    RecognitionResult,
    classify,
    segment,
)
from live_transcriber.domain.retry import Sleep
from live_transcriber.exceptions import ClientInitError, FatalPipelineError
from live_transcriber.infrastructure.interfaces import (
    AudioSource,
    ClientFactory,
    PipelineClients,
)
from live_transcriber.logging import setup_logging

from .fanout import TranslationFanout
from .publisher import DeliveryPublisher

logger = setup_logging(__name__)


class _ShutdownDuringSetup(Exception):
    """Shutdown was requested before the stream was established."""


class PipelineDriver:
    """Wires audio, recognition, translation and delivery into one run per job."""

    def __init__(
        self,
        client_factory: ClientFactory,
        config: PipelineConfig = PipelineConfig(),
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client_factory = client_factory
        self._config = config
        self._sleep = sleep
        self._clock = clock
        self._state = PipelineState.IDLE
        self._deliveries: set[asyncio.Task] = set()
        self._results_processed = 0

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def pending_deliveries(self) -> int:
        return len(self._deliveries)

    async def run(self, job: JobSpec, shutdown: asyncio.Event) -> PipelineOutcome:
        """
        Runs the pipeline for a job until the stream ends, a fatal error
        occurs, or ``shutdown`` is set.

        Every exit path goes through Draining: outstanding deliveries get a
        bounded drain, the decoder is terminated and every constructed client
        is closed exactly once. A shutdown requested while the decoder or the
        recognition stream is still starting abandons that step.

        Args:
            job: Media endpoint, languages and destinations of the run.
            shutdown: Set by the caller to stop the run (e.g. on SIGTERM).

        Returns:
            PipelineOutcome describing how the run ended.
        """
        started_at = self._clock()
        self._deliveries = set()
        self._results_processed = 0
        self._transition(PipelineState.INITIALIZING, job)

        clients = PipelineClients()
        audio: AudioSource | None = None
        error: str | None = None
        cancelled = False

        try:
            self._build_clients(job, clients)
            audio = self._client_factory.audio_source(job)
            await self._unless_shutdown(audio.start(), shutdown)

            events = await self._unless_shutdown(
                clients.transcriber.start(segment(audio.read()), job.source_language),
                shutdown,
            )
            publisher = DeliveryPublisher(
                clients.live_publisher,
                clients.metadata_publisher,
                clients.transcript_store,
                retry_policy=self._config.retry.policy(),
                persistence_retry=self._config.retry.persistence_retry,
                sleep=self._sleep,
                clock=self._clock,
                started_at=started_at,
            )
            fanout = TranslationFanout(clients.translator)

            self._transition(PipelineState.STREAMING, job)
            cancelled = await self._stream(events, job, fanout, publisher, shutdown)
        except _ShutdownDuringSetup:
            logger.info(
                "Shutdown requested during setup",
                extra={"livestream_id": job.livestream_id},
            )
            cancelled = True
        except FatalPipelineError as e:
            logger.error(
                "Pipeline run failed",
                extra={"livestream_id": job.livestream_id, "error": str(e)},
            )
            error = str(e)
        except Exception as e:
            logger.exception(
                "Unexpected pipeline error", extra={"livestream_id": job.livestream_id}
            )
            error = str(e)
        finally:
            self._transition(PipelineState.DRAINING, job)
            if audio is not None:
                await audio.terminate()
            await self._drain_deliveries()
            await clients.close()
            self._transition(PipelineState.TERMINATED, job)

        outcome = PipelineOutcome(
            success=error is None,
            cancelled=cancelled,
            error=error,
            results_processed=self._results_processed,
        )
        logger.info(
            "Pipeline run finished",
            extra={"livestream_id": job.livestream_id, **outcome.model_dump()},
        )
        return outcome

    def _build_clients(self, job: JobSpec, clients: PipelineClients) -> None:
        try:
            self._client_factory.build(job, clients)
        except ClientInitError:
            raise
        except Exception as e:
            raise ClientInitError("client_factory", e) from e

        required = ["transcriber", "live_publisher", "metadata_publisher", "transcript_store"]
        if job.needs_translation:
            required.append("translator")
        for name in required:
            if getattr(clients, name) is None:
                raise ClientInitError(name)

    async def _unless_shutdown(self, step: Awaitable[Any], shutdown: asyncio.Event) -> Any:
        """Awaits a setup step, abandoning it if shutdown is requested first."""
        task = asyncio.ensure_future(step)
        stop = asyncio.create_task(shutdown.wait())
        try:
            done, _ = await asyncio.wait({task, stop}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            stop.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise _ShutdownDuringSetup()

    async def _stream(
        self,
        events: AsyncIterator[Any],
        job: JobSpec,
        fanout: TranslationFanout,
        publisher: DeliveryPublisher,
        shutdown: asyncio.Event,
    ) -> bool:
        """Consumes events until the stream ends or shutdown is requested; True if cancelled."""
        consumer = asyncio.create_task(self._consume(events, job, fanout, publisher))
        stop = asyncio.create_task(shutdown.wait())
        try:
            done, _ = await asyncio.wait(
                {consumer, stop}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            consumer.cancel()
            raise
        finally:
            stop.cancel()

        if consumer in done:
            consumer.result()
            logger.info(
                "Transcription stream ended", extra={"livestream_id": job.livestream_id}
            )
            return False

        logger.info(
            "Shutdown requested, stopping transcription",
            extra={"livestream_id": job.livestream_id},
        )
        consumer.cancel()
        await asyncio.gather(consumer, return_exceptions=True)
        return True

    async def _consume(
        self,
        events: AsyncIterator[Any],
        job: JobSpec,
        fanout: TranslationFanout,
        publisher: DeliveryPublisher,
    ) -> None:
        try:
            async for event in events:
                result = classify(event)
                if result is None:
                    continue
                self._results_processed += 1
                self._fan_out(result, job, fanout, publisher)
        finally:
            aclose = getattr(events, "aclose", None)
            if aclose is not None:
                await aclose()

    def _fan_out(
        self,
        result: RecognitionResult,
        job: JobSpec,
        fanout: TranslationFanout,
        publisher: DeliveryPublisher,
    ) -> None:
        # Source language first, straight to delivery; other languages go
        # through translation. None of these are awaited by intake.
        source_target = DeliveryTarget(
            language_code=job.source_language, text=result.text, source_result=result
        )
        self._dispatch(publisher.deliver(source_target))

        for language in job.delivery_languages[1:]:
            self._dispatch(
                self._translate_and_deliver(
                    result, job.source_language, language, fanout, publisher
                )
            )

    async def _translate_and_deliver(
        self,
        result: RecognitionResult,
        source_language: str,
        target_language: str,
        fanout: TranslationFanout,
        publisher: DeliveryPublisher,
    ) -> None:
        target = await fanout.target_for(result, source_language, target_language)
        await publisher.deliver(target)

    def _dispatch(self, coro: Coroutine) -> None:
        task = asyncio.create_task(coro)
        self._deliveries.add(task)
        task.add_done_callback(self._on_delivery_done)

    def _on_delivery_done(self, task: asyncio.Task) -> None:
        self._deliveries.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Delivery task failed", exc_info=task.exception())

    async def _drain_deliveries(self) -> None:
        pending = set(self._deliveries)
        if not pending:
            return

        logger.info("Draining deliveries", extra={"pending": len(pending)})
        _, still_pending = await asyncio.wait(
            pending, timeout=self._config.drain_timeout_seconds
        )
        if still_pending:
            logger.warning(
                "Abandoning unfinished deliveries",
                extra={"abandoned": len(still_pending)},
            )
            for task in still_pending:
                task.cancel()
            await asyncio.gather(*still_pending, return_exceptions=True)

    def _transition(self, state: PipelineState, job: JobSpec) -> None:
        logger.info(
            "Pipeline state changed",
            extra={
                "from_state": self._state.value,
                "to_state": state.value,
                "livestream_id": job.livestream_id,
            },
        )
        self._state = state
