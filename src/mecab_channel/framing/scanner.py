"""Sentinel search over a chunked byte stream.

mecab-channel framing module v0.1.0

The subprocess marks the end of every analysed sentence with a fixed
sentinel (``EOS`` plus a line terminator by default). Output arrives in
arbitrary chunks, so a sentinel can be split across two deliveries. The
scanner keeps the unconsumed tail of one delivery and prepends it to the
next one before searching again.
"""

from __future__ import annotations

__all__ = [
    "SentinelScanner",
    "find_sentinel",
]


def find_sentinel(
    buffer: bytes,
    sentinel: bytes,
    offset: int = 0,
    *,
    line_terminator: bytes | None = None,
) -> int:
    """Find the next full occurrence of ``sentinel`` in ``buffer``.

    Args:
        buffer: Bytes to search. Position 0 is always a record boundary.
        sentinel: Marker to look for
        offset: Position to start searching from
        line_terminator: When given, only occurrences starting at a line
            start (position 0 or right after a terminator) are accepted.

    Returns:
        Index of the occurrence, or -1 when none is found
    """
    index = buffer.find(sentinel, offset)
    if line_terminator is None:
        return index

    size = len(line_terminator)
    while index > 0 and buffer[max(0, index - size):index] != line_terminator:
        index = buffer.find(sentinel, index + 1)
    return index


class SentinelScanner:
    """Sentinel scanner with tail carry-over between chunks.

    Example:
        scanner = SentinelScanner(b"EOS\\n")
        buffer = scanner.feed(chunk)
        offset = 0
        while (index := scanner.find(buffer, offset)) != -1:
            handle(buffer[offset:index])
            offset = index + len(scanner.sentinel)
        scanner.retain(buffer, offset)
    """

    def __init__(
        self,
        sentinel: bytes,
        *,
        line_terminator: bytes | None = None,
    ) -> None:
        """
        Args:
            sentinel: Non-empty marker bytes
            line_terminator: Enables the line-start guard when given
        """
        if not sentinel:
            raise ValueError("sentinel must not be empty")
        self.sentinel = sentinel
        self.line_terminator = line_terminator
        self._tail: bytes = b""

    @property
    def pending(self) -> int:
        """Number of retained bytes waiting for the next chunk."""
        return len(self._tail)

    def feed(self, chunk: bytes) -> bytes:
        """Return the retained tail followed by ``chunk``."""
        if not self._tail:
            return bytes(chunk)
        # TODO: replace the concatenation with a rolling matcher so large
        # sentences are not copied on every chunk.
        buffer = self._tail + chunk
        self._tail = b""
        return buffer

    def find(self, buffer: bytes, offset: int) -> int:
        return find_sentinel(
            buffer,
            self.sentinel,
            offset,
            line_terminator=self.line_terminator,
        )

    def retain(self, buffer: bytes, offset: int) -> None:
        """Keep ``buffer[offset:]`` for the next call to :meth:`feed`."""
        self._tail = buffer[offset:]
