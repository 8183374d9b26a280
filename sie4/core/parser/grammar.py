"""
Record grammar.

Every record kind declares a static, ordered tuple of (field name, decoder)
pairs in its ``FIELDS`` class variable. ``parse_body`` interprets that table
for whatever follows the record's tag.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import ValidationError

from .fields import bare_token
from .scanner import in_delimiters
from .span import (
    HASH,
    SEPARATORS,
    WHITESPACE,
    Decoder,
    Done,
    Failure,
    NeedMore,
    Outcome,
    Span,
    fail,
)

if TYPE_CHECKING:
    from .items import SieItem

K = TypeVar("K", bound="SieItem")


def parse_body(kind: type[K], span: Span) -> Outcome[K]:
    """
    Decode the fields of one record, right after its tag.

    Fields are separated by spaces or tabs only: a line break ends the
    record, which is what lets trailing optional fields be absent.
    """
    values: dict[str, Any] = {}

    for name, decoder in kind.FIELDS:
        span = span.skip_while(WHITESPACE)
        outcome = decoder(span)
        if isinstance(outcome, Failure):
            return outcome.within(name)
        if isinstance(outcome, NeedMore):
            return outcome
        values[name] = outcome.value
        span = outcome.rest

    try:
        record = kind(**values)
    except ValidationError as e:
        return fail(span, f"invalid {kind.TAG} record: {e.error_count()} validation error(s)")
    return Done(record, span)


def sub_items(kind: type[K]) -> Decoder:
    """
    Brace-delimited block of nested records of one kind.

    Inside the block only ``#`` markers matter: bytes between records are
    skipped, and so are nested records with any other tag.
    """
    label = kind.TAG.encode("ascii")

    def decode(span: Span) -> Outcome[list[K]]:
        outcome = in_delimiters(span.skip_while(SEPARATORS))
        if not isinstance(outcome, Done):
            return outcome

        block = outcome.value
        records: list[K] = []
        while True:
            block = block.advance(block.count_until(frozenset((HASH,))))
            if not block:
                break
            block = block.advance(1)

            tag = bare_token(block)
            if not isinstance(tag, Done) or tag.value.tobytes() != label:
                continue

            result = parse_body(kind, tag.rest)
            if isinstance(result, Failure):
                return result.within(kind.TAG).as_fatal()
            if isinstance(result, NeedMore):
                return fail(tag.rest, f"incomplete nested {kind.TAG} record").within(kind.TAG)
            records.append(result.value)
            block = result.rest

        return Done(records, outcome.rest)

    return decode
