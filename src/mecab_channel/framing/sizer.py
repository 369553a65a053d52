"""Expected sentinel count for an outbound payload.

mecab-channel framing module v0.1.0

MeCab answers every input line with one ``EOS`` line. The channel always
appends one line terminator after the payload, so a payload with N line
breaks produces N + 1 sentinels.
"""

from __future__ import annotations

from collections.abc import Callable

__all__ = [
    "SentinelPolicy",
    "count_line_breaks",
    "default_sentinel_policy",
]

CR = 0x0D
LF = 0x0A
CRLF = b"\r\n"

SentinelPolicy = Callable[[bytes], int]


def _detect_line_break(payload: bytes) -> tuple[bytes, int] | None:
    """Return the first line break convention and where it ends."""
    for i, byte in enumerate(payload):
        if byte == LF:
            return b"\n", i + 1
        if byte == CR:
            if payload[i + 1:i + 2] == b"\n":
                return CRLF, i + 2
            return b"\r", i + 1
    return None


def count_line_breaks(payload: bytes) -> int:
    """Count line breaks using the convention of the first one found.

    Args:
        payload: Outbound bytes (after any encode hook)

    Returns:
        Number of occurrences of the detected convention, 0 if none
    """
    detected = _detect_line_break(payload)
    if detected is None:
        return 0
    line_break, offset = detected
    return 1 + payload.count(line_break, offset)


def default_sentinel_policy(payload: bytes) -> int:
    """One sentinel per line break plus one for the appended terminator."""
    return count_line_breaks(payload) + 1
