"""Tests for the item dispatcher."""

import pytest

from sie4.core.parser.dispatch import TAG_TABLE, parse_item
from sie4.core.parser.items import ITEM_KINDS, Account, Flag
from sie4.core.parser.span import NEED_MORE, Done, Failure, Span


class TestTagTable:
    """Tests for the tag lookup table."""

    def test_every_kind_is_registered(self) -> None:
        """Test that each kind is found under its own tag."""
        assert len(TAG_TABLE) == len(ITEM_KINDS)
        for kind in ITEM_KINDS:
            assert TAG_TABLE[kind.TAG.encode("ascii")] is kind


class TestParseItem:
    """Tests for parse_item."""

    def test_leading_blank_lines_are_skipped(self) -> None:
        """Test that separators before the marker are consumed."""
        outcome = parse_item(Span(b"\r\n\r\n  #FLAGGA 0\r\n"))
        assert isinstance(outcome, Done)
        assert outcome.value == Flag(read=False)

    def test_remainder_starts_after_record(self) -> None:
        """Test that the next record is left unconsumed."""
        outcome = parse_item(Span(b'#KONTO 1930 "Bank"\n#KONTO 1940 "Bank 2"\n'))
        assert isinstance(outcome, Done)
        assert outcome.value == Account(no=1930, name="Bank")
        assert outcome.rest.tobytes() == b'\n#KONTO 1940 "Bank 2"\n'

    def test_unknown_tag(self) -> None:
        """Test that an unknown tag is a hard error."""
        outcome = parse_item(Span(b"#FOO 1 2\n"))
        assert isinstance(outcome, Failure)
        assert outcome.fatal
        assert outcome.details == {"code": "SIE-PARSE-002", "tag": "FOO"}

    @pytest.mark.parametrize("data", [b"#konto 1 x\n", b"#Konto 1 x\n", b"#KONTOX 1 x\n"])
    def test_tags_match_exactly(self, data: bytes) -> None:
        """Test that tags are case-sensitive and not prefix-matched."""
        outcome = parse_item(Span(data))
        assert isinstance(outcome, Failure)
        assert outcome.details["code"] == "SIE-PARSE-002"

    def test_tag_prefix_of_another(self) -> None:
        """Test that #KONTO is not mistaken for #KTYP or vice versa."""
        outcome = parse_item(Span(b"#KTYP 1930 T\n"))
        assert isinstance(outcome, Done)
        assert outcome.value.tag == "KTYP"

    def test_missing_marker(self) -> None:
        """Test content that does not start with '#'."""
        outcome = parse_item(Span(b'KONTO 1930 "Bank"\n'))
        assert isinstance(outcome, Failure)
        assert outcome.details["code"] == "SIE-PARSE-003"
        assert outcome.details["found"] == "K"

    def test_missing_tag(self) -> None:
        """Test a marker without a tag."""
        outcome = parse_item(Span(b"# 1930\n"))
        assert isinstance(outcome, Failure)
        assert outcome.details["code"] == "SIE-PARSE-002"

    @pytest.mark.parametrize("data", [b"", b"\r\n  ", b"#", b"#KON", b"#KONTO"])
    def test_needs_more(self, data: bytes) -> None:
        """Test inputs that cannot be decided yet."""
        assert parse_item(Span(data)) is NEED_MORE

    def test_blank_final_input(self) -> None:
        """Test that a complete blank input has no record."""
        outcome = parse_item(Span(b"\n\n", final=True))
        assert isinstance(outcome, Failure)
        assert not outcome.fatal

    @pytest.mark.parametrize(
        "data",
        [b"#", b'#KONTO 1930 "Ba', b"#KONTO 1930", b"#VER A 1 20230101\n{\n"],
    )
    def test_end_of_input_is_truncation(self, data: bytes) -> None:
        """Test that running out of input is marked as truncated."""
        outcome = parse_item(Span(data, final=True))
        assert isinstance(outcome, Failure)
        assert outcome.truncated

    @pytest.mark.parametrize("data", [b"#BOGUS", b"#FLAGGA 2", b"#GEN 20201301", b"#KONTO 12a"])
    def test_bad_last_record_is_not_truncation(self, data: bytes) -> None:
        """Test that a complete but invalid last record is a plain error."""
        outcome = parse_item(Span(data, final=True))
        assert isinstance(outcome, Failure)
        assert outcome.fatal
        assert not outcome.truncated

    def test_failure_carries_record_context(self) -> None:
        """Test that field failures are tagged with the record."""
        outcome = parse_item(Span(b"#FLAGGA 2\n"))
        assert isinstance(outcome, Failure)
        assert outcome.context == ("read", "FLAGGA")
        assert outcome.describe() == "FLAGGA > read: expected 0 or 1, found '2'"

    def test_failure_offset_is_stream_relative(self) -> None:
        """Test failure positions honour the span origin."""
        outcome = parse_item(Span(b"#FLAGGA 2\n", origin=1000))
        assert isinstance(outcome, Failure)
        assert outcome.offset == 1008
