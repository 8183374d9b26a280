"""
Spans and decode outcomes.

A Span is an index-based view into an immutable snapshot of the reader's
buffer. Decoders never hold on to a Span after they return: every value they
produce is copied out of the buffer first.

Every decoder returns one of three outcomes:
- Done: a value and the remainder Span
- NEED_MORE: the buffered bytes end before the decoder could decide
- Failure: the input is malformed (fatal) or does not have the expected
  shape at all (non-fatal, used by optional fields)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

from .encoding import CP437, TextDecoder

T = TypeVar("T")

SPACE = 0x20
TAB = 0x09
CR = 0x0D
LF = 0x0A
HASH = 0x23
QUOTE = 0x22
BACKSLASH = 0x5C
OPEN_BRACE = 0x7B
CLOSE_BRACE = 0x7D

WHITESPACE = frozenset((SPACE, TAB))
LINE_BREAKS = frozenset((CR, LF))
SEPARATORS = WHITESPACE | LINE_BREAKS
TOKEN_TERMINATORS = SEPARATORS | {HASH, OPEN_BRACE, CLOSE_BRACE}


class Span:
    """
    Immutable view into a bytes snapshot.

    The span also carries the text decoder for its bytes, so field decoders
    can turn tokens into text without extra plumbing.
    """

    __slots__ = ("buffer", "end", "final", "origin", "start", "text")

    def __init__(
        self,
        buffer: bytes,
        start: int = 0,
        end: int | None = None,
        *,
        origin: int = 0,
        final: bool = False,
        text: TextDecoder = CP437,
    ) -> None:
        self.buffer = buffer
        self.start = start
        self.end = len(buffer) if end is None else end
        self.origin = origin
        # final: the region is known complete, its end terminates tokens
        self.final = final
        self.text = text

    @property
    def offset(self) -> int:
        """Byte offset from the logical start of the stream."""
        return self.origin + self.start

    def __len__(self) -> int:
        return self.end - self.start

    def __bool__(self) -> bool:
        return self.end > self.start

    def __repr__(self) -> str:
        return f"Span(offset={self.offset}, data={self.tobytes()!r}, final={self.final})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Span):
            return NotImplemented
        return self.offset == other.offset and self.tobytes() == other.tobytes()

    def __hash__(self) -> int:
        return hash((self.offset, self.tobytes()))

    def peek(self, index: int = 0) -> int | None:
        """Byte at ``index`` relative to the span start, or None past the end."""
        pos = self.start + index
        if pos >= self.end:
            return None
        return self.buffer[pos]

    def tobytes(self) -> bytes:
        return self.buffer[self.start : self.end]

    def advance(self, count: int) -> Span:
        """Span with the first ``count`` bytes consumed."""
        return Span(
            self.buffer,
            min(self.start + count, self.end),
            self.end,
            origin=self.origin,
            final=self.final,
            text=self.text,
        )

    def take(self, count: int, *, final: bool | None = None) -> Span:
        """Prefix of ``count`` bytes."""
        return Span(
            self.buffer,
            self.start,
            min(self.start + count, self.end),
            origin=self.origin,
            final=self.final if final is None else final,
            text=self.text,
        )

    def skip_while(self, allowed: frozenset[int]) -> Span:
        """Consume bytes while they are in ``allowed``."""
        pos = self.start
        while pos < self.end and self.buffer[pos] in allowed:
            pos += 1
        return self.advance(pos - self.start)

    def count_until(self, stop: frozenset[int]) -> int:
        """Number of leading bytes not in ``stop``."""
        pos = self.start
        while pos < self.end and self.buffer[pos] not in stop:
            pos += 1
        return pos - self.start

    def startswith(self, prefix: bytes) -> bool:
        return self.buffer.startswith(prefix, self.start, self.end)


@dataclass(frozen=True, slots=True)
class Done(Generic[T]):
    """Successful decode: a value and what is left of the input."""

    value: T
    rest: Span


class NeedMore:
    """The buffered bytes end before a decision can be made."""

    _instance: NeedMore | None = None

    def __new__(cls) -> NeedMore:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NEED_MORE"

    def __bool__(self) -> bool:
        return False


NEED_MORE = NeedMore()


@dataclass(frozen=True, slots=True)
class Failure:
    """
    Decode failure.

    ``fatal`` separates "this is not the shape I expected" (False) from
    "the shape matched but the value is invalid" (True). ``context`` holds
    the field and record names the failure bubbled through, innermost first.

    A ``truncated`` detail marks a failure caused only by running into the
    end of a final span. At end of input those are the ones the reader
    treats as a cut-off record; any other failure is a malformed record.
    """

    message: str
    offset: int
    fatal: bool = True
    context: tuple[str, ...] = ()
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def truncated(self) -> bool:
        return bool(self.details.get("truncated"))

    def within(self, name: str) -> Failure:
        """Wrap the failure with one more level of context."""
        return Failure(
            message=self.message,
            offset=self.offset,
            fatal=self.fatal,
            context=(*self.context, name),
            details=self.details,
        )

    def as_fatal(self) -> Failure:
        """
        Failure inside a closed region.

        The region's end is known, so the failure is fatal and never counts
        as truncated input.
        """
        if self.fatal and not self.truncated:
            return self
        return Failure(
            message=self.message,
            offset=self.offset,
            fatal=True,
            context=self.context,
            details={k: v for k, v in self.details.items() if k != "truncated"},
        )

    def describe(self) -> str:
        if not self.context:
            return self.message
        return f"{' > '.join(reversed(self.context))}: {self.message}"


Outcome = Union[Done[T], NeedMore, Failure]
Decoder = Callable[[Span], "Outcome[Any]"]


def fail(span: Span, message: str, *, fatal: bool = True, **details: Any) -> Failure:
    """Failure positioned at the start of ``span``."""
    return Failure(message=message, offset=span.offset, fatal=fatal, details=details)
