"""Framing unit tests.

Test coverage:
- Sentinel search and the line-start guard
- Tail carry-over across chunks
- Segment decoding and line parsers
- Line break counting for request sizing
"""

from __future__ import annotations

import re

import pytest

from mecab_channel.framing import (
    RecordDecoder,
    SentinelScanner,
    count_line_breaks,
    create_line_parser,
    default_sentinel_policy,
    find_sentinel,
)

EOS = b"EOS\n"


# =============================================================================
# SentinelScanner
# =============================================================================


class TestFindSentinel:
    """Test sentinel search."""

    def test_finds_first_occurrence(self):
        assert find_sentinel(b"a\nEOS\nb\nEOS\n", EOS) == 2

    def test_respects_offset(self):
        assert find_sentinel(b"a\nEOS\nb\nEOS\n", EOS, 6) == 8

    def test_not_found(self):
        assert find_sentinel(b"a\nEO", EOS) == -1

    def test_loose_mode_accepts_mid_line(self):
        assert find_sentinel(b"xEOS\nEOS\n", EOS) == 1

    def test_strict_mode_requires_line_start(self):
        buffer = b"xEOS\nEOS\n"
        assert find_sentinel(buffer, EOS, line_terminator=b"\n") == 5

    def test_strict_mode_accepts_buffer_start(self):
        assert find_sentinel(b"EOS\n", EOS, line_terminator=b"\n") == 0

    def test_strict_mode_with_crlf(self):
        buffer = b"aEOS\r\nb\r\nEOS\r\n"
        assert find_sentinel(buffer, b"EOS\r\n", line_terminator=b"\r\n") == 9


class TestSentinelScanner:
    """Test tail carry-over between chunks."""

    def test_rejects_empty_sentinel(self):
        with pytest.raises(ValueError):
            SentinelScanner(b"")

    def test_feed_without_tail_returns_chunk(self):
        scanner = SentinelScanner(EOS)
        assert scanner.feed(b"abc") == b"abc"

    def test_retained_tail_is_prepended(self):
        scanner = SentinelScanner(EOS)
        buffer = scanner.feed(b"a\nEO")
        assert scanner.find(buffer, 0) == -1
        scanner.retain(buffer, 0)
        assert scanner.pending == 4

        buffer = scanner.feed(b"S\n")
        assert buffer == b"a\nEOS\n"
        assert scanner.find(buffer, 0) == 2
        assert scanner.pending == 0


# =============================================================================
# RecordDecoder
# =============================================================================


class TestCreateLineParser:
    """Test the default field splitter."""

    def test_splits_on_tab_and_comma(self):
        parse = create_line_parser(r"[\t,]")
        assert parse("すもも\t名詞,一般") == ["すもも", "名詞", "一般"]

    def test_accepts_compiled_pattern(self):
        parse = create_line_parser(re.compile(r"\t"))
        assert parse("a\tb,c") == ["a", "b,c"]


class TestRecordDecoder:
    """Test segment decoding."""

    @pytest.fixture
    def decoder(self) -> RecordDecoder:
        return RecordDecoder(create_line_parser(r"\t"), line_terminator="\n")

    def test_lines_in_order(self, decoder: RecordDecoder):
        assert decoder.decode(b"a1\ta2\nb1\tb2\n") == [["a1", "a2"], ["b1", "b2"]]

    def test_empty_segment_yields_nothing(self, decoder: RecordDecoder):
        assert decoder.decode(b"") == []

    def test_empty_line_is_parsed(self, decoder: RecordDecoder):
        assert decoder.decode(b"a\n\nb\n") == [["a"], [""], ["b"]]

    def test_unterminated_remainder_is_dropped(self, decoder: RecordDecoder):
        assert decoder.decode(b"a\nb") == [["a"]]

    def test_decode_hook_applied_before_split(self):
        decoder = RecordDecoder(
            lambda line: line,
            decoder=lambda data: data.decode("shift_jis").encode("utf-8"),
            line_terminator="\n",
        )
        assert decoder.decode("東京\n".encode("shift_jis")) == ["東京"]

    def test_decode_hook_may_return_text(self):
        decoder = RecordDecoder(
            lambda line: line,
            decoder=lambda data: data.decode("euc_jp"),
            line_terminator="\n",
        )
        assert decoder.decode("大阪\n京都\n".encode("euc_jp")) == ["大阪", "京都"]

    def test_crlf_terminator(self):
        decoder = RecordDecoder(lambda line: line, line_terminator="\r\n")
        assert decoder.decode(b"a\r\nb\r\n") == ["a", "b"]


# =============================================================================
# Request sizing
# =============================================================================


class TestCountLineBreaks:
    """Test line break counting."""

    @pytest.mark.parametrize(
        "payload,expected",
        [
            (b"", 0),
            (b"single line", 0),
            (b"a\nb", 1),
            (b"a\nb\nc\n", 3),
            (b"a\r\nb\r\nc", 2),
            (b"a\rb\rc", 2),
            (b"\n\n", 2),
        ],
    )
    def test_counts(self, payload: bytes, expected: int):
        assert count_line_breaks(payload) == expected

    def test_convention_fixed_by_first_break(self):
        # CRLF first: lone LFs are not counted
        assert count_line_breaks(b"a\r\nb\nc\r\n") == 2
        # LF first: the LF inside each CRLF is counted
        assert count_line_breaks(b"a\nb\r\nc") == 2

    def test_trailing_cr_is_cr_convention(self):
        assert count_line_breaks(b"a\r") == 1


class TestDefaultSentinelPolicy:
    """Test the expected sentinel count."""

    @pytest.mark.parametrize("breaks", [0, 1, 5])
    def test_line_breaks_plus_one(self, breaks: int):
        payload = "\n".join(["x"] * (breaks + 1)).encode()
        assert default_sentinel_policy(payload) == breaks + 1
