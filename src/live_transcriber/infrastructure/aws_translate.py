"""Amazon Translate implementation of the TranslationService interface."""

import asyncio

from live_transcriber.exceptions import TranslationError
from live_transcriber.logging import setup_logging

from .interfaces import TranslationService

logger = setup_logging(__name__)


class AwsTranslator(TranslationService):
    """Translates text using a boto3 ``translate`` client."""

    def __init__(self, client):
        self._client = client

    async def translate(
        self, text: str, source_language: str, target_language: str
    ) -> str:
        try:
            response = await asyncio.to_thread(
                self._client.translate_text,
                Text=text,
                SourceLanguageCode=source_language,
                TargetLanguageCode=target_language,
            )
        except Exception as e:
            raise TranslationError(source_language, target_language, e) from e

        return response.get("TranslatedText") or ""

    async def close(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            client.close()
