"""IVS Chat implementation of the LiveUpdatePublisher interface."""

import asyncio

from live_transcriber.domain.models import LiveUpdate
from live_transcriber.exceptions import DeliveryError
from live_transcriber.logging import setup_logging

from .interfaces import LiveUpdatePublisher

logger = setup_logging(__name__)

EVENT_NAME = "Transcript Update"


class IvsChatPublisher(LiveUpdatePublisher):
    """Sends transcript updates as custom events to an IVS Chat room."""

    def __init__(self, client, room_arn: str, event_name: str = EVENT_NAME):
        self._client = client
        self._room_arn = room_arn
        self._event_name = event_name

    async def publish(self, update: LiveUpdate) -> None:
        try:
            await asyncio.to_thread(
                self._client.send_event,
                roomIdentifier=self._room_arn,
                eventName=self._event_name,
                attributes=update.to_attributes(),
            )
        except Exception as e:
            raise DeliveryError(self._room_arn, e) from e

        logger.debug(
            "Chat event sent",
            extra={
                "result_id": update.result_id,
                "language_code": update.language_code,
                "is_partial": update.is_partial,
            },
        )

    async def close(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            client.close()
