"""
Delimiter scanner for brace-delimited regions.

Finds the end of a region like ``{ ... }`` while honouring nested
delimiters and backslash escapes. The scanner works on whatever is
buffered: if the region is not closed yet it asks for more bytes and the
caller retries the whole scan after the refill.
"""

from __future__ import annotations

from .span import (
    BACKSLASH,
    CLOSE_BRACE,
    NEED_MORE,
    OPEN_BRACE,
    Done,
    Outcome,
    Span,
    fail,
)


def take_until_unbalanced(
    span: Span,
    opening: int = OPEN_BRACE,
    closing: int = CLOSE_BRACE,
    escape: int = BACKSLASH,
) -> Outcome[Span]:
    """
    Take bytes up to the first unbalanced closing delimiter.

    ``span`` must start right after an already consumed opening delimiter.
    Nested opening/closing pairs are skipped. The escape byte and the byte
    following it never change the nesting depth.

    Returns:
        Done(content, rest) where ``rest`` starts at the closing delimiter
        (not consumed), NEED_MORE if the buffer ends first, or a Failure if
        the span is final and the region never closes.
    """
    buffer = span.buffer
    end = span.end
    pos = span.start
    depth = 0

    while pos < end:
        byte = buffer[pos]
        if byte == escape:
            if pos + 1 >= end:
                break
            pos += 2
            continue
        if byte == opening:
            depth += 1
        elif byte == closing:
            if depth == 0:
                length = pos - span.start
                return Done(span.take(length), span.advance(length))
            depth -= 1
        pos += 1

    if span.final:
        return fail(
            span,
            f"unbalanced {chr(opening)!r}, missing {chr(closing)!r}",
            expected=chr(closing),
            truncated=True,
        )
    return NEED_MORE


def in_delimiters(
    span: Span,
    opening: int = OPEN_BRACE,
    closing: int = CLOSE_BRACE,
) -> Outcome[Span]:
    """
    Consume ``opening``, the balanced content and ``closing``.

    The content is returned as a final span: once the closing delimiter has
    been seen, nothing more can be appended to the region.
    """
    first = span.peek()
    if first is None:
        if span.final:
            return fail(
                span,
                f"expected {chr(opening)!r}, found end of input",
                fatal=False,
                expected=chr(opening),
                truncated=True,
            )
        return NEED_MORE
    if first != opening:
        return fail(
            span,
            f"expected {chr(opening)!r}",
            fatal=False,
            expected=chr(opening),
            found=chr(first),
        )

    outcome = take_until_unbalanced(span.advance(1), opening, closing)
    if not isinstance(outcome, Done):
        return outcome

    content = outcome.value
    return Done(content.take(len(content), final=True), outcome.rest.advance(1))
