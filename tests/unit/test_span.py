"""Tests for spans and decode outcomes."""

from sie4.core.parser.span import (
    NEED_MORE,
    SEPARATORS,
    TOKEN_TERMINATORS,
    Failure,
    NeedMore,
    Span,
    fail,
)


class TestSpan:
    """Tests for the Span view."""

    def test_peek(self) -> None:
        """Test peeking at bytes relative to the span start."""
        span = Span(b"abc")
        assert span.peek() == ord("a")
        assert span.peek(2) == ord("c")
        assert span.peek(3) is None

    def test_advance_clamps_to_end(self) -> None:
        """Test that advancing past the end yields an empty span."""
        span = Span(b"abc").advance(10)
        assert len(span) == 0
        assert not span
        assert span.tobytes() == b""

    def test_offset_includes_origin(self) -> None:
        """Test that offsets are relative to the logical stream start."""
        span = Span(b"abcdef", origin=100).advance(2)
        assert span.offset == 102

    def test_take(self) -> None:
        """Test taking a prefix."""
        span = Span(b"abcdef").advance(1).take(3)
        assert span.tobytes() == b"bcd"
        assert not span.final

    def test_take_final_override(self) -> None:
        """Test that a prefix can be marked complete."""
        span = Span(b"abc").take(2, final=True)
        assert span.final
        assert Span(b"abc", final=True).take(2).final

    def test_skip_while(self) -> None:
        """Test skipping separators."""
        span = Span(b"  \r\n\t#X").skip_while(SEPARATORS)
        assert span.tobytes() == b"#X"

    def test_count_until(self) -> None:
        """Test counting bytes up to a terminator."""
        assert Span(b"1220 rest").count_until(TOKEN_TERMINATORS) == 4
        assert Span(b"1220{").count_until(TOKEN_TERMINATORS) == 4
        assert Span(b"1220").count_until(TOKEN_TERMINATORS) == 4

    def test_startswith(self) -> None:
        """Test prefix checks respect the span bounds."""
        span = Span(b'x""').advance(1)
        assert span.startswith(b'""')
        assert not span.take(1).startswith(b'""')

    def test_equality_by_offset_and_content(self) -> None:
        """Test that spans compare by stream position and bytes."""
        assert Span(b"xab", 1) == Span(b"ab", origin=1)
        assert Span(b"ab") != Span(b"ab", origin=1)

    def test_text_decoder_is_carried(self) -> None:
        """Test that derived spans keep the text decoder."""
        span = Span(b"\x94 x")
        assert span.advance(1).text(b"\x94") == "ö"


class TestOutcomes:
    """Tests for decode outcome types."""

    def test_need_more_is_singleton(self) -> None:
        """Test NEED_MORE is a falsy singleton."""
        assert NeedMore() is NEED_MORE
        assert not NEED_MORE
        assert repr(NEED_MORE) == "NEED_MORE"

    def test_fail_position(self) -> None:
        """Test that failures point at the start of the span."""
        failure = fail(Span(b"abc", origin=10).advance(1), "bad", found="b")
        assert failure.offset == 11
        assert failure.fatal
        assert failure.details == {"found": "b"}

    def test_within_builds_context(self) -> None:
        """Test that context is recorded innermost first."""
        failure = fail(Span(b"x"), "expected integer").within("no").within("KONTO")
        assert failure.context == ("no", "KONTO")
        assert failure.describe() == "KONTO > no: expected integer"

    def test_describe_without_context(self) -> None:
        """Test describing a bare failure."""
        assert fail(Span(b""), "oops").describe() == "oops"

    def test_as_fatal(self) -> None:
        """Test promoting a shape mismatch to a hard failure."""
        soft = fail(Span(b"x"), "expected token", fatal=False).within("[0]")
        hard = soft.as_fatal()
        assert not soft.fatal
        assert hard.fatal
        assert hard.context == ("[0]",)
        assert isinstance(hard, Failure)

    def test_as_fatal_clears_truncation(self) -> None:
        """Test that a failure inside a closed region is never a truncation."""
        cut = fail(Span(b"", final=True), "unterminated quoted string", truncated=True)
        assert cut.truncated
        settled = cut.as_fatal()
        assert settled.fatal
        assert not settled.truncated
        assert "truncated" not in settled.details
