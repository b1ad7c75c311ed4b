"""Tests for translation fan-out."""

import pytest

from live_transcriber.domain import DeliveryTarget, RecognitionResult
from live_transcriber.handlers import TranslationFanout

from tests.fakes import FakeTranslator, make_job


@pytest.fixture
def final_result():
    return RecognitionResult(result_id="r1", is_partial=False, text="hello")


class TestTargetFor:
    """Tests for a single target language."""

    @pytest.mark.asyncio
    async def test_source_language_passthrough_skips_translation(self, final_result):
        translator = FakeTranslator()

        target = await TranslationFanout(translator).target_for(
            final_result, "en-IE", "en-IE"
        )

        assert target == DeliveryTarget(
            language_code="en-IE", text="hello", source_result=final_result
        )
        assert translator.calls == []

    @pytest.mark.asyncio
    async def test_other_language_is_translated_once(self, final_result):
        translator = FakeTranslator({"fr-FR": "bonjour"})

        target = await TranslationFanout(translator).target_for(
            final_result, "en-IE", "fr-FR"
        )

        assert target.text == "bonjour"
        assert target.language_code == "fr-FR"
        assert translator.calls == [("hello", "en-IE", "fr-FR")]

    @pytest.mark.asyncio
    async def test_translation_failure_falls_back_to_source_text(self, final_result):
        translator = FakeTranslator(fail=True)

        target = await TranslationFanout(translator).target_for(
            final_result, "en-IE", "de-DE"
        )

        assert target.text == "hello"
        assert target.language_code == "de-DE"
        assert len(translator.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_translation_falls_back_to_source_text(self, final_result):
        translator = FakeTranslator({"es-ES": ""})

        target = await TranslationFanout(translator).target_for(
            final_result, "en-IE", "es-ES"
        )

        assert target.text == "hello"

    @pytest.mark.asyncio
    async def test_missing_translator_falls_back_to_source_text(self, final_result):
        target = await TranslationFanout(None).target_for(final_result, "en-IE", "fr-FR")

        assert target.text == "hello"


class TestFanout:
    """Tests for all target languages of a result."""

    @pytest.mark.asyncio
    async def test_passthrough_and_translation(self, final_result):
        translator = FakeTranslator({"fr-FR": "bonjour"})

        targets = await TranslationFanout(translator).fanout(
            final_result, "en-IE", ["en-IE", "fr-FR"]
        )

        assert [(t.language_code, t.text) for t in targets] == [
            ("en-IE", "hello"),
            ("fr-FR", "bonjour"),
        ]
        assert translator.calls == [("hello", "en-IE", "fr-FR")]

    @pytest.mark.asyncio
    async def test_duplicate_languages_are_translated_once(self, final_result):
        translator = FakeTranslator()

        targets = await TranslationFanout(translator).fanout(
            final_result, "en-IE", ["fr-FR", "fr-FR", "de-DE"]
        )

        assert [t.language_code for t in targets] == ["fr-FR", "de-DE"]
        assert len(translator.calls) == 2

    @pytest.mark.asyncio
    async def test_one_failure_does_not_drop_other_languages(self, final_result):
        class PartlyFailing(FakeTranslator):
            async def translate(self, text, source_language, target_language):
                if target_language == "de-DE":
                    raise RuntimeError("unsupported")
                return await super().translate(text, source_language, target_language)

        targets = await TranslationFanout(PartlyFailing({"fr-FR": "bonjour"})).fanout(
            final_result, "en-IE", ["fr-FR", "de-DE"]
        )

        assert [(t.language_code, t.text) for t in targets] == [
            ("fr-FR", "bonjour"),
            ("de-DE", "hello"),
        ]

    @pytest.mark.asyncio
    async def test_batch_over_job_languages_matches_driver_order(self, final_result):
        job = make_job(target_languages=["fr-FR", "en-IE", "fr-FR"])

        targets = await TranslationFanout(FakeTranslator()).fanout(
            final_result, job.source_language, job.delivery_languages
        )

        assert [t.language_code for t in targets] == ["en-IE", "fr-FR"]
