"""IVS timed-metadata implementation of the MetadataPublisher interface."""

import asyncio

from botocore.exceptions import ClientError

from live_transcriber.domain.models import MetadataRecord
from live_transcriber.exceptions import DeliveryError, ExpectedInactiveDestinationError
from live_transcriber.logging import setup_logging

from .interfaces import MetadataPublisher

logger = setup_logging(__name__)

# Error code IVS returns when the channel is not live.
NOT_BROADCASTING = "ChannelNotBroadcasting"


class IvsMetadataPublisher(MetadataPublisher):
    """Inserts finalized transcripts as timed metadata into an IVS channel."""

    def __init__(self, client, channel_arn: str):
        self._client = client
        self._channel_arn = channel_arn

    async def attach(self, record: MetadataRecord) -> None:
        try:
            await asyncio.to_thread(
                self._client.put_metadata,
                channelArn=self._channel_arn,
                metadata=record.to_payload(),
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == NOT_BROADCASTING:
                raise ExpectedInactiveDestinationError(self._channel_arn, e) from e
            raise DeliveryError(self._channel_arn, e) from e
        except Exception as e:
            raise DeliveryError(self._channel_arn, e) from e

        logger.debug(
            "Metadata attached",
            extra={
                "message_id": record.message_id,
                "language_code": record.language_code,
            },
        )

    async def close(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            client.close()
