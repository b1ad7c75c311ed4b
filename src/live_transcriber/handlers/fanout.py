"""Translation of recognition results into each target language."""

import asyncio
from collections.abc import Iterable

from live_transcriber.domain import DeliveryTarget, RecognitionResult
from live_transcriber.infrastructure.interfaces import TranslationService
from live_transcriber.logging import setup_logging

logger = setup_logging(__name__)


class TranslationFanout:
    """Produces one DeliveryTarget per distinct target language."""

    def __init__(self, translator: TranslationService | None):
        self._translator = translator

    async def target_for(
        self, result: RecognitionResult, source_language: str, target_language: str
    ) -> DeliveryTarget:
        """
        Builds the DeliveryTarget of one language.

        The source language is passed through without a remote call. A failed
        or empty translation falls back to the source text so the result is
        still shown, in the original language. Translation is attempted once.
        """
        if target_language == source_language:
            return DeliveryTarget(
                language_code=target_language, text=result.text, source_result=result
            )

        text = result.text
        if self._translator is None:
            logger.warning(
                "No translator configured, delivering source text",
                extra={"target_language": target_language},
            )
        else:
            try:
                translated = await self._translator.translate(
                    result.text, source_language, target_language
                )
                if translated:
                    text = translated
                else:
                    logger.warning(
                        "Empty translation, delivering source text",
                        extra={
                            "result_id": result.result_id,
                            "target_language": target_language,
                        },
                    )
            except Exception as e:
                logger.warning(
                    "Translation failed, delivering source text",
                    extra={
                        "result_id": result.result_id,
                        "source_language": source_language,
                        "target_language": target_language,
                        "error": str(e),
                    },
                )

        return DeliveryTarget(
            language_code=target_language, text=text, source_result=result
        )

    async def fanout(
        self,
        result: RecognitionResult,
        source_language: str,
        target_languages: Iterable[str],
    ) -> list[DeliveryTarget]:
        """
        Builds the targets of all distinct languages, translating concurrently.

        Batch form of ``target_for``. The pipeline driver calls ``target_for``
        per language of ``JobSpec.delivery_languages`` instead, so each
        language is delivered as soon as its own translation is ready.
        """
        languages = list(dict.fromkeys(target_languages))
        return list(
            await asyncio.gather(
                *(
                    self.target_for(result, source_language, language)
                    for language in languages
                )
            )
        )
