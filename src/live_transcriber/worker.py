"""Worker that handles job consumption from the queue and runs one pipeline per job."""

import asyncio
import json
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from live_transcriber.config import RabbitMQConfig
from live_transcriber.domain import JobSpec, PipelineOutcome
from live_transcriber.exceptions import EventPublishError
from live_transcriber.handlers import PipelineDriver
from live_transcriber.infrastructure.interfaces import MessageBroker
from live_transcriber.logging import setup_logging
from live_transcriber.runner import run_job

logger = setup_logging(__name__)


class Worker:
    """Consumes job messages one at a time and orchestrates a pipeline run for each."""

    def __init__(
        self,
        broker: MessageBroker,
        driver: PipelineDriver,
        config: RabbitMQConfig,
        run: Callable[..., Any] = run_job,
    ):
        self._broker = broker
        self._driver = driver
        self._config = config
        self._run = run

    def start(self) -> None:
        """Starts consuming messages from the queue."""
        logger.info("Worker initialized, starting message consumption")
        self._broker.consume(self._on_message)

    def _on_message(
        self, body: bytes, delivery_tag: int, headers: dict[str, Any] | None
    ) -> None:
        """Callback for each received message."""
        delivery_count = headers.get("x-delivery-count", 1) if headers else 1

        logger.info(
            "Message received",
            extra={
                "attempt": delivery_count,
                "max_attempts": self._config.queue_config.max_delivery_count,
            },
        )

        try:
            job = JobSpec.model_validate(json.loads(body))
        except (ValidationError, ValueError) as e:
            logger.exception("Invalid message format", extra={"error": str(e)})
            self._broker.reject(delivery_tag)
            return

        try:
            outcome = asyncio.run(self._run(self._driver, job))
        except Exception as e:
            logger.exception(
                "Pipeline run crashed", extra={"livestream_id": job.livestream_id}
            )
            outcome = PipelineOutcome(success=False, error=str(e))
        finally:
            # Jobs are not retried at the queue level: the message is removed
            # whatever the outcome.
            self._broker.acknowledge(delivery_tag)

        self._report(job, outcome)

        if outcome.cancelled:
            logger.info("Run was stopped by a signal, stopping consumption")
            self._broker.stop()

    def _report(self, job: JobSpec, outcome: PipelineOutcome) -> None:
        try:
            self._broker.publish(
                routing_key=self._config.queue_config.success_routing_key,
                payload={"livestream_id": job.livestream_id, **outcome.model_dump()},
            )
        except EventPublishError:
            logger.warning(
                "Failed to report job outcome",
                extra={"livestream_id": job.livestream_id},
            )

        log = logger.info if outcome.success else logger.error
        log(
            "Message processed",
            extra={"livestream_id": job.livestream_id, **outcome.model_dump()},
        )
