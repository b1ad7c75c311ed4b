"""Length-based splitting of the decoder byte stream into protocol-sized chunks."""

from collections.abc import AsyncIterable, AsyncIterator, Iterator

# Hard per-event limit of the streaming recognition service.
MAX_CHUNK_SIZE = 32_000


def split_chunk(data: bytes, max_chunk_size: int = MAX_CHUNK_SIZE) -> Iterator[bytes]:
    """
    Splits one buffer into consecutive slices of at most ``max_chunk_size`` bytes.

    Raises:
        ValueError: If max_chunk_size is not positive.
    """
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")

    offset = 0
    while offset < len(data):
        end = min(offset + max_chunk_size, len(data))
        yield data[offset:end]
        offset = end


async def segment(
    source: AsyncIterable[bytes], max_chunk_size: int = MAX_CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """
    Lazily re-chunks a byte source without looking at its content.

    Only the current source read is held; the next read is pulled when the
    consumer asks for the chunk after the last slice of the current one.
    Empty reads produce nothing.
    """
    async for data in source:
        for chunk in split_chunk(data, max_chunk_size):
            yield chunk
