"""Record decoding for one sentinel-delimited segment.

mecab-channel framing module v0.1.0
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any, Union

__all__ = [
    "LineParser",
    "DecodeHook",
    "EncodeHook",
    "RecordDecoder",
    "create_line_parser",
]

LineParser = Callable[[str], Any]
# Hooks are opaque byte transforms; a decode hook may also return text directly.
DecodeHook = Callable[[bytes], Union[bytes, str]]
EncodeHook = Callable[[bytes], bytes]


def create_line_parser(separator: str | re.Pattern[str]) -> LineParser:
    """Build a parser that splits a line into fields.

    Args:
        separator: Regular expression (string or compiled) between fields

    Returns:
        Function mapping one line to its list of fields
    """
    pattern = re.compile(separator) if isinstance(separator, str) else separator

    def parse(line: str) -> list[str]:
        return pattern.split(line)

    return parse


class RecordDecoder:
    """Turn the bytes before a sentinel into parsed records.

    Only lines closed by the line terminator are emitted; an unterminated
    remainder at the end of the segment is dropped.

    Attributes:
        line_parser: Function applied to each line
        decoder: Optional byte transform applied before splitting
        line_terminator: Line separator of the decoded text
        encoding: Text encoding used when the hook returns bytes
    """

    def __init__(
        self,
        line_parser: LineParser,
        *,
        decoder: DecodeHook | None = None,
        line_terminator: str = "\n",
        encoding: str = "utf-8",
    ) -> None:
        self.line_parser = line_parser
        self.decoder = decoder
        self.line_terminator = line_terminator
        self.encoding = encoding

    def decode_text(self, segment: bytes) -> str:
        data: bytes | str = self.decoder(segment) if self.decoder else segment
        if isinstance(data, str):
            return data
        return bytes(data).decode(self.encoding)

    def decode(self, segment: bytes) -> list[Any]:
        """Parse every terminated line of ``segment`` in order."""
        if not segment:
            return []
        text = self.decode_text(segment)
        if not text:
            return []
        lines = text.split(self.line_terminator)
        # The last piece follows the final terminator (or is unterminated).
        return [self.line_parser(line) for line in lines[:-1]]
