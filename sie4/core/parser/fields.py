"""
Field decoders.

Each decoder takes a Span and returns Done(value, rest), NEED_MORE or a
Failure. Decoders never skip leading separators; the record grammar does
that between fields.

Shape versus value:
- A non-fatal Failure means the next bytes do not even look like the
  expected field (no token, or e.g. a quoted string where a date was
  expected). ``optional`` turns this into an absent value.
- A fatal Failure means the shape matched but the value is invalid (e.g.
  eight digits that are not a calendar date). Nothing turns it into an
  absent value.
"""

from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

from .currencies import is_currency_code
from .scanner import in_delimiters
from .span import (
    BACKSLASH,
    NEED_MORE,
    QUOTE,
    SEPARATORS,
    TOKEN_TERMINATORS,
    Decoder,
    Done,
    Failure,
    NeedMore,
    Outcome,
    Span,
    fail,
)

E = TypeVar("E", bound=Enum)

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
UINT32_MAX = 2**32 - 1

_DIGITS = frozenset(b"0123456789")
_MINUS = ord("-")

_INTEGER_PATTERN = re.compile(r"-?[0-9]+")
_DATE_PATTERN = re.compile(r"[0-9]{8}")
_AMOUNT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def _at_end(span: Span, expected: str) -> Outcome[Any]:
    """Outcome for a decoder that found no bytes at all."""
    if span.final:
        return fail(span, f"expected {expected}, found end of input", fatal=False, truncated=True)
    return NEED_MORE


# =============================================================================
# Tokens
# =============================================================================


def bare_token(span: Span) -> Outcome[Span]:
    """
    Take a run of bytes up to a separator, ``#``, ``{`` or ``}``.

    The token is only complete once its terminator is buffered, unless the
    span is final.
    """
    length = span.count_until(TOKEN_TERMINATORS)
    if length == len(span) and not span.final:
        return NEED_MORE
    if length == 0:
        found = span.peek()
        if found is None:
            return _at_end(span, "a token")
        return fail(span, "expected a token", fatal=False, found=chr(found))
    return Done(span.take(length), span.advance(length))


def quoted(span: Span) -> Outcome[bytes]:
    """
    Take a double-quoted string and return its unescaped bytes.

    ``\\"`` is a literal quote and ``\\\\`` a literal backslash. Any other
    backslash is kept as-is.
    """
    first = span.peek()
    if first is None:
        return _at_end(span, "'\"'")
    if first != QUOTE:
        return fail(span, "expected '\"'", fatal=False, found=chr(first))

    buffer = span.buffer
    end = span.end
    pos = span.start + 1
    out = bytearray()

    while pos < end:
        byte = buffer[pos]
        if byte == BACKSLASH:
            if pos + 1 >= end:
                break
            following = buffer[pos + 1]
            if following not in (QUOTE, BACKSLASH):
                out.append(byte)
            out.append(following)
            pos += 2
            continue
        if byte == QUOTE:
            return Done(bytes(out), span.advance(pos + 1 - span.start))
        out.append(byte)
        pos += 1

    if span.final:
        return fail(span, "unterminated quoted string", truncated=True)
    return NEED_MORE


def _token_text(span: Span) -> Outcome[str]:
    """Bare token passed through the text decoder."""
    outcome = bare_token(span)
    if not isinstance(outcome, Done):
        return outcome
    return Done(span.text(outcome.value.tobytes()), outcome.rest)


# =============================================================================
# Scalars
# =============================================================================


def text(span: Span) -> Outcome[str]:
    """A quoted string or a bare token, decoded to text."""
    first = span.peek()
    if first is None:
        return _at_end(span, "text")
    if first == QUOTE:
        outcome = quoted(span)
        if not isinstance(outcome, Done):
            return outcome
        return Done(span.text(outcome.value), outcome.rest)
    return _token_text(span)


def boolean(span: Span) -> Outcome[bool]:
    """The one-character tokens ``0`` and ``1``."""
    outcome = _token_text(span)
    if not isinstance(outcome, Done):
        return outcome
    if outcome.value == "0":
        return Done(False, outcome.rest)
    if outcome.value == "1":
        return Done(True, outcome.rest)
    return fail(span, f"expected 0 or 1, found {outcome.value!r}", found=outcome.value)


def _integer(span: Span, low: int, high: int) -> Outcome[int]:
    first = span.peek()
    if first is None:
        return _at_end(span, "integer")
    if first != _MINUS and first not in _DIGITS:
        return fail(span, "expected integer", fatal=False, found=chr(first))

    outcome = _token_text(span)
    if not isinstance(outcome, Done):
        return outcome

    raw = outcome.value
    if not _INTEGER_PATTERN.fullmatch(raw):
        return fail(span, f"invalid integer {raw!r}", found=raw)

    value = int(raw)
    if not low <= value <= high:
        return fail(
            span,
            f"integer {raw} out of range [{low}, {high}]",
            found=raw,
            expected=f"{low}..{high}",
        )
    return Done(value, outcome.rest)


def int32(span: Span) -> Outcome[int]:
    """Signed 32-bit integer."""
    return _integer(span, INT32_MIN, INT32_MAX)


def uint32(span: Span) -> Outcome[int]:
    """Unsigned 32-bit integer."""
    return _integer(span, 0, UINT32_MAX)


def date(span: Span) -> Outcome[dt.date]:
    """Calendar date written as ``YYYYMMDD``."""
    first = span.peek()
    if first is None:
        return _at_end(span, "date")
    if first not in _DIGITS:
        return fail(span, "expected date", fatal=False, found=chr(first))

    outcome = _token_text(span)
    if not isinstance(outcome, Done):
        return outcome

    raw = outcome.value
    if not _DATE_PATTERN.fullmatch(raw):
        return fail(span, f"date must be YYYYMMDD, got {raw!r}", found=raw, expected="YYYYMMDD")

    try:
        value = dt.date(int(raw[:4]), int(raw[4:6]), int(raw[6:]))
    except ValueError:
        return fail(span, f"invalid calendar date {raw!r}", found=raw)
    return Done(value, outcome.rest)


def currency(span: Span) -> Outcome[str]:
    """ISO 4217 currency code."""
    outcome = _token_text(span)
    if not isinstance(outcome, Done):
        return outcome
    if not is_currency_code(outcome.value):
        return fail(span, f"unknown currency code {outcome.value!r}", found=outcome.value)
    return Done(outcome.value, outcome.rest)


def amount(span: Span) -> Outcome[Decimal]:
    """Signed decimal amount with ``.`` as radix point."""
    outcome = _token_text(span)
    if not isinstance(outcome, Done):
        return outcome

    raw = outcome.value
    if not _AMOUNT_PATTERN.fullmatch(raw):
        return fail(span, f"invalid amount {raw!r}", found=raw)
    try:
        value = Decimal(raw)
    except InvalidOperation:
        return fail(span, f"invalid amount {raw!r}", found=raw)
    return Done(value, outcome.rest)


# =============================================================================
# Combinators
# =============================================================================


def one_of(choices: type[E]) -> Decoder:
    """Bare token matched exactly against the values of an enum."""
    table = {member.value: member for member in choices}
    expected = ", ".join(table)

    def decode(span: Span) -> Outcome[E]:
        outcome = _token_text(span)
        if not isinstance(outcome, Done):
            return outcome
        member = table.get(outcome.value)
        if member is None:
            return fail(
                span,
                f"expected one of {expected}, found {outcome.value!r}",
                found=outcome.value,
                expected=expected,
            )
        return Done(member, outcome.rest)

    return decode


def optional(decoder: Decoder, *, blank: bool = False) -> Decoder:
    """
    Make a field optional.

    A non-fatal failure yields ``None`` with the input unconsumed. Fatal
    failures and NEED_MORE pass through.

    With ``blank=True`` an empty quoted string ``""`` is consumed as an
    explicitly absent value.
    """

    def decode(span: Span) -> Outcome[Any]:
        if blank and span.startswith(b'""'):
            following = span.peek(2)
            if following is None and not span.final:
                return NEED_MORE
            if following is None or following in TOKEN_TERMINATORS:
                return Done(None, span.advance(2))

        outcome = decoder(span)
        if isinstance(outcome, Failure) and not outcome.fatal:
            return Done(None, span)
        return outcome

    return decode


def list_of(element: Decoder) -> Decoder:
    """
    Brace-delimited list of separator-separated values.

    Once the closing brace has been found the content is complete, so any
    element that fails to decode is a fatal error.
    """

    def decode(span: Span) -> Outcome[list[Any]]:
        outcome = in_delimiters(span)
        if not isinstance(outcome, Done):
            return outcome

        inner = outcome.value
        values: list[Any] = []
        while True:
            inner = inner.skip_while(SEPARATORS)
            if not inner:
                break
            result = element(inner)
            if isinstance(result, Failure):
                return result.within(f"[{len(values)}]").as_fatal()
            if isinstance(result, NeedMore):
                return fail(inner, "incomplete list element")
            values.append(result.value)
            inner = result.rest

        return Done(values, outcome.rest)

    return decode
