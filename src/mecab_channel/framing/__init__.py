"""Framing primitives for sentinel-terminated subprocess output.

This module provides:
- SentinelScanner: sentinel search with tail carry-over across chunks
- RecordDecoder: line splitting and parsing of one delimited segment
- Request sizing: expected sentinel count for an outbound payload
"""

from __future__ import annotations

from .decoder import (
    DecodeHook,
    EncodeHook,
    LineParser,
    RecordDecoder,
    create_line_parser,
)
from .scanner import SentinelScanner, find_sentinel
from .sizer import SentinelPolicy, count_line_breaks, default_sentinel_policy

__all__ = [
    "DecodeHook",
    "EncodeHook",
    "LineParser",
    "RecordDecoder",
    "SentinelPolicy",
    "SentinelScanner",
    "count_line_breaks",
    "create_line_parser",
    "default_sentinel_policy",
    "find_sentinel",
]
