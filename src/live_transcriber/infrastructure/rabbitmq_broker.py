"""RabbitMQ implementation of the MessageBroker interface."""

import json
from collections.abc import Callable
from typing import Any

from pika.adapters.blocking_connection import BlockingChannel

from live_transcriber.config import RabbitMQConfig
from live_transcriber.exceptions import EventPublishError
from live_transcriber.logging import setup_logging

from .interfaces import MessageBroker

logger = setup_logging(__name__)


class RabbitMQBroker(MessageBroker):
    """Handles job consumption and outcome publishing using RabbitMQ."""

    def __init__(self, channel: BlockingChannel, config: RabbitMQConfig):
        self._channel = channel
        self._config = config

    def publish(self, routing_key: str, payload: dict) -> None:
        """
        Publishes a job outcome event to the configured exchange.

        Args:
            routing_key: The routing key, e.g. the job-completed key.
            payload: The outcome data as a dictionary.

        Raises:
            EventPublishError: If publishing fails.
        """
        try:
            self._channel.basic_publish(
                exchange=self._config.exchange_name,
                routing_key=routing_key,
                body=json.dumps(payload),
            )
            logger.info(
                "Event published to RabbitMQ",
                extra={
                    "exchange": self._config.exchange_name,
                    "routing_key": routing_key,
                },
            )
        except Exception as e:
            logger.exception(
                "RabbitMQ publish failed",
                extra={"routing_key": routing_key},
            )
            raise EventPublishError(routing_key, e) from e

    def acknowledge(self, delivery_tag: int) -> None:
        """Acknowledges a job message once its run has finished."""
        self._channel.basic_ack(delivery_tag=delivery_tag)

    def reject(self, delivery_tag: int) -> None:
        """Rejects a malformed job message without requeueing, so it is dead-lettered."""
        self._channel.basic_nack(delivery_tag=delivery_tag, requeue=False)

    def consume(
        self, callback: Callable[[bytes, int, dict[str, Any] | None], None]
    ) -> None:
        """
        Consumes job messages from the configured queue, one at a time.

        Blocks until consumption is stopped. Each job runs to completion inside
        the callback before the next message is delivered.

        Args:
            callback: Function called for each message with (body, delivery_tag, headers).
        """

        def on_message(ch, method, properties, body):
            headers = properties.headers if properties else None
            callback(body, method.delivery_tag, headers)

        # One job in flight per worker: the next message is only dispatched
        # after the current one is acknowledged.
        self._channel.basic_qos(prefetch_count=1)
        self._channel.basic_consume(
            queue=self._config.queue_config.name,
            on_message_callback=on_message,
        )
        logger.info(
            "Message consumption started",
            extra={"queue": self._config.queue_config.name},
        )
        self._channel.start_consuming()

    def stop(self) -> None:
        """Stops consuming; called after a run that a signal cut short."""
        self._channel.stop_consuming()
        logger.info("Message consumption stopped")

    def setup(self) -> None:
        """Sets up dead-letter exchange, main exchange, queue, and bindings."""
        queue_config = self._config.queue_config

        # Dead letter infrastructure
        self._channel.exchange_declare(
            exchange=queue_config.dlq_exchange_name,
            exchange_type="direct",
            durable=True,
        )
        self._channel.queue_declare(queue=queue_config.dlq_name, durable=True)
        self._channel.queue_bind(
            queue=queue_config.dlq_name,
            exchange=queue_config.dlq_exchange_name,
            routing_key=queue_config.dlq_routing_key,
        )

        # Main exchange
        self._channel.exchange_declare(
            exchange=self._config.exchange_name,
            exchange_type="topic",
            durable=True,
        )

        # Main queue with dead-letter configuration
        queue_args = {
            "x-queue-type": queue_config.queue_type,
            "x-delivery-limit": queue_config.max_delivery_count,
            "x-dead-letter-exchange": queue_config.dlq_exchange_name,
            "x-dead-letter-routing-key": queue_config.dlq_routing_key,
        }
        self._channel.queue_declare(
            queue=queue_config.name,
            durable=True,
            arguments=queue_args,
        )
        self._channel.queue_bind(
            queue=queue_config.name,
            exchange=self._config.exchange_name,
            routing_key=queue_config.expected_routing_key,
        )

        logger.info(
            "RabbitMQ infrastructure setup complete",
            extra={
                "queue": queue_config.name,
                "exchange": self._config.exchange_name,
            },
        )
