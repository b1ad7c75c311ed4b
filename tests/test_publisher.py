"""Tests for delivery of transcripts to the downstream channels."""

import pytest

from live_transcriber.domain import DeliveryTarget, RecognitionResult, RetryPolicy
from live_transcriber.handlers import DeliveryPublisher

from tests.fakes import (
    FakeLivePublisher,
    FakeMetadataPublisher,
    FakeTranscriptStore,
    RecordingSleep,
)


def _target(text="hello", language="en-IE", **result_fields):
    fields = {"result_id": "r1", "is_partial": False, "start_time": 1.0, "end_time": 2.5}
    fields.update(result_fields)
    result = RecognitionResult(text=text, **fields)
    return DeliveryTarget(language_code=language, text=text, source_result=result)


class Channels:
    def __init__(self, live=None, metadata=None, store=None):
        self.live = live or FakeLivePublisher()
        self.metadata = metadata or FakeMetadataPublisher()
        self.store = store or FakeTranscriptStore()
        self.sleep = RecordingSleep()

    def publisher(self, **kwargs):
        return DeliveryPublisher(
            self.live, self.metadata, self.store, sleep=self.sleep, **kwargs
        )


class TestDeliverActions:
    """Tests for which actions run for a result."""

    @pytest.mark.asyncio
    async def test_partial_result_only_pushes_live_update(self):
        channels = Channels()

        report = await channels.publisher().deliver(_target(is_partial=True))

        assert len(channels.live.updates) == 1
        assert channels.live.updates[0].is_partial is True
        assert channels.metadata.records == []
        assert channels.store.records == []
        assert report.live_update is True
        assert report.metadata is None
        assert report.persistence is None

    @pytest.mark.asyncio
    async def test_final_result_runs_all_three_actions(self):
        channels = Channels()

        report = await channels.publisher().deliver(_target("bonjour", "fr-FR"))

        update = channels.live.updates[0]
        assert update.to_attributes() == {
            "transcript": "bonjour",
            "isPartial": "false",
            "resultId": "r1",
            "languageCode": "fr-FR",
        }
        record = channels.metadata.records[0]
        assert (record.type, record.transcript, record.language_code, record.message_id) == (
            "transcript",
            "bonjour",
            "fr-FR",
            "r1",
        )
        saved = channels.store.records[0]
        assert saved.model_dump() == {
            "transcript": "bonjour",
            "language_code": "fr-FR",
            "start_time": 1.0,
            "end_time": 2.5,
        }
        assert (report.live_update, report.metadata, report.persistence) == (True, True, True)

    @pytest.mark.asyncio
    async def test_missing_result_id_skips_everything(self):
        channels = Channels()

        report = await channels.publisher().deliver(_target(result_id=None))

        assert channels.live.flaky.calls == 0
        assert channels.metadata.flaky.calls == 0
        assert channels.store.flaky.calls == 0
        assert report.result_id is None
        assert report.live_update is None

    @pytest.mark.asyncio
    async def test_missing_start_time_uses_elapsed_run_time(self):
        ticks = iter([100.0, 112.5])
        channels = Channels()
        publisher = channels.publisher(clock=lambda: next(ticks))

        await publisher.deliver(_target(start_time=None))

        assert channels.store.records[0].start_time == 12.5

    @pytest.mark.asyncio
    async def test_elapsed_time_counts_from_given_run_start(self):
        channels = Channels()
        publisher = channels.publisher(clock=lambda: 130.0, started_at=100.0)

        await publisher.deliver(_target(start_time=None))

        assert channels.store.records[0].start_time == 30.0


class TestDeliverFailures:
    """Tests for retry and independence of the actions."""

    @pytest.mark.asyncio
    async def test_live_update_succeeds_on_third_attempt(self):
        channels = Channels(live=FakeLivePublisher(failures=2))

        report = await channels.publisher().deliver(_target(is_partial=True))

        assert channels.live.flaky.calls == 3
        assert channels.sleep.delays == [1.0, 2.0]
        assert report.live_update is True

    @pytest.mark.asyncio
    async def test_failing_live_update_does_not_block_other_actions(self):
        channels = Channels(live=FakeLivePublisher(failures=10))

        report = await channels.publisher().deliver(_target())

        assert channels.live.flaky.calls == 3
        assert len(channels.metadata.records) == 1
        assert len(channels.store.records) == 1
        assert (report.live_update, report.metadata, report.persistence) == (False, True, True)

    @pytest.mark.asyncio
    async def test_inactive_channel_gives_up_without_retry(self):
        channels = Channels(metadata=FakeMetadataPublisher(inactive=True))

        report = await channels.publisher().deliver(_target())

        assert channels.metadata.flaky.calls == 1
        assert report.metadata is False
        assert report.live_update is True
        assert report.persistence is True

    @pytest.mark.asyncio
    async def test_persistence_is_single_attempt_by_default(self):
        channels = Channels(store=FakeTranscriptStore(failures=1))

        report = await channels.publisher().deliver(_target())

        assert channels.store.flaky.calls == 1
        assert report.persistence is False

    @pytest.mark.asyncio
    async def test_persistence_retry_can_be_enabled(self):
        channels = Channels(store=FakeTranscriptStore(failures=1))

        report = await channels.publisher(persistence_retry=True).deliver(_target())

        assert channels.store.flaky.calls == 2
        assert report.persistence is True

    @pytest.mark.asyncio
    async def test_custom_retry_policy(self):
        channels = Channels(live=FakeLivePublisher(failures=10))
        policy = RetryPolicy(max_attempts=2, base_delay=0.25, multiplier=2)

        await channels.publisher(retry_policy=policy).deliver(_target(is_partial=True))

        assert channels.live.flaky.calls == 2
        assert channels.sleep.delays == [0.5]
