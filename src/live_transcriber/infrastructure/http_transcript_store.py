"""HTTP implementation of the TranscriptStore interface."""

import httpx

from live_transcriber.domain.models import PersistenceRecord
from live_transcriber.exceptions import DeliveryError
from live_transcriber.logging import setup_logging

from .interfaces import TranscriptStore

logger = setup_logging(__name__)

TRANSCRIPTION_PATH = "/api/livestreams-v2/{livestream_id}/rtmps-transcription"


def transcription_url(domain: str, livestream_id: str) -> str:
    """Builds the persistence endpoint for a livestream."""
    return f"https://{domain}" + TRANSCRIPTION_PATH.format(livestream_id=livestream_id)


class HttpTranscriptStore(TranscriptStore):
    """Posts finalized transcripts to the livestream API."""

    def __init__(self, client: httpx.AsyncClient, url: str):
        self._client = client
        self._url = url

    async def save(self, record: PersistenceRecord) -> None:
        try:
            response = await self._client.post(self._url, json=record.model_dump())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Transcript store rejected record",
                extra={
                    "url": self._url,
                    "status_code": e.response.status_code,
                    "body": e.response.text[:500],
                },
            )
            raise DeliveryError(self._url, e) from e
        except httpx.HTTPError as e:
            raise DeliveryError(self._url, e) from e

        logger.info(
            "Transcript saved",
            extra={"language_code": record.language_code, "url": self._url},
        )

    async def close(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()
