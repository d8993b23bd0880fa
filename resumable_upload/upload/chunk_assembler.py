"""Re-buffer arbitrary byte fragments into fixed-size chunks."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class ChunkAssembler:
    """Iterator of ``chunk_size`` chunks built from a stream of fragments.

    Fragments are accumulated until at least ``chunk_size`` bytes are
    buffered; exactly ``chunk_size`` bytes are then handed out and the rest
    is kept for the next chunk. Once the fragments run out, whatever is left
    is handed out as one shorter final chunk. Chunks are never empty and
    their concatenation is exactly the concatenation of the fragments.

    The source is only pulled from inside ``__next__``, so a consumer that
    sends each chunk before asking for the next one never has more than one
    chunk read ahead.
    """

    def __init__(self, fragments: Iterable[bytes], chunk_size: int) -> None:
        """Initialize the assembler.

        Args:
            fragments: Source of byte fragments of any length.
            chunk_size: Size in bytes of every chunk except the last.

        Raises:
            ValueError: If ``chunk_size`` is not positive.
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self._fragments = iter(fragments)
        self._buffer = bytearray()
        self._exhausted = False

    @property
    def buffered(self) -> int:
        """Bytes read from the source but not yet handed out."""
        return len(self._buffer)

    @property
    def exhausted(self) -> bool:
        """True once the source has no more fragments."""
        return self._exhausted

    def close(self) -> None:
        """Release the source, e.g. an open HTTP response, without reading it."""
        close = getattr(self._fragments, "close", None)
        if close is not None:
            close()
        self._exhausted = True
        self._buffer.clear()

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        while not self._exhausted and len(self._buffer) < self.chunk_size:
            try:
                fragment = next(self._fragments)
            except StopIteration:
                self._exhausted = True
                break
            self._buffer += fragment

        if len(self._buffer) >= self.chunk_size:
            chunk = bytes(self._buffer[: self.chunk_size])
            del self._buffer[: self.chunk_size]
            return chunk

        if self._buffer:
            chunk = bytes(self._buffer)
            self._buffer.clear()
            return chunk

        raise StopIteration
