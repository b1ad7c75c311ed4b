"""Tests for byte stream segmentation."""

import pytest

from live_transcriber.domain import MAX_CHUNK_SIZE, segment, split_chunk


async def _source(reads):
    for data in reads:
        yield data


async def _collect(reads, size=MAX_CHUNK_SIZE):
    return [chunk async for chunk in segment(_source(reads), size)]


class TestSplitChunk:
    """Tests for the synchronous slicing primitive."""

    def test_small_buffer_is_one_chunk(self):
        assert list(split_chunk(b"abc", 10)) == [b"abc"]

    def test_exact_multiple(self):
        assert list(split_chunk(b"abcdef", 3)) == [b"abc", b"def"]

    def test_empty_buffer_yields_nothing(self):
        assert list(split_chunk(b"", 3)) == []

    def test_non_positive_size_rejected(self):
        with pytest.raises(ValueError):
            list(split_chunk(b"abc", 0))


class TestSegment:
    """Tests for the lazy async segmenter."""

    @pytest.mark.asyncio
    async def test_fifty_thousand_bytes_gives_two_chunks(self):
        chunks = await _collect([b"\x01" * 50_000])

        assert [len(c) for c in chunks] == [32_000, 18_000]

    @pytest.mark.asyncio
    async def test_concatenation_preserves_bytes_and_bounds(self):
        reads = [bytes(range(256)) * 300, b"", b"x", bytes(70_001), b"tail" * 5]

        chunks = await _collect(reads)

        assert b"".join(chunks) == b"".join(reads)
        assert all(0 < len(c) <= MAX_CHUNK_SIZE for c in chunks)

    @pytest.mark.asyncio
    async def test_boundaries_follow_reads_not_content(self):
        chunks = await _collect([b"aaaaa", b"bbb"], size=4)

        assert chunks == [b"aaaa", b"a", b"bbb"]

    @pytest.mark.asyncio
    async def test_pulls_source_lazily(self):
        pulled = []

        async def source():
            for data in (b"one", b"two", b"three"):
                pulled.append(data)
                yield data

        chunks = segment(source(), 2)
        first = await chunks.__anext__()

        assert first == b"on"
        assert pulled == [b"one"]
        await chunks.aclose()
