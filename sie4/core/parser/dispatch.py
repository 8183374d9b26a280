"""
Item dispatcher.

Reads the ``#TAG`` marker at the start of the input and hands the rest of
the record to the grammar of the matching kind. The tag table is closed:
an unknown tag is a hard error, never skipped.
"""

from __future__ import annotations

from .fields import bare_token
from .grammar import parse_body
from .items import ITEM_KINDS, Item, SieItem
from .span import HASH, NEED_MORE, SEPARATORS, Done, Failure, Outcome, Span, fail

# Tag matching is exact and case-sensitive
TAG_TABLE: dict[bytes, type[SieItem]] = {kind.TAG.encode("ascii"): kind for kind in ITEM_KINDS}


def parse_item(span: Span) -> Outcome[Item]:
    """
    Parse one record from the beginning of the input.

    Leading spaces and line breaks are skipped. NEED_MORE is returned
    verbatim when the record is not completely buffered yet.
    """
    span = span.skip_while(SEPARATORS)

    first = span.peek()
    if first is None:
        if span.final:
            return fail(span, "expected record, found end of input", fatal=False, truncated=True)
        return NEED_MORE
    if first != HASH:
        return fail(
            span,
            f"expected '#' record marker, found {chr(first)!r}",
            code="SIE-PARSE-003",
            found=chr(first),
        )

    tag = bare_token(span.advance(1))
    if not isinstance(tag, Done):
        if isinstance(tag, Failure):
            if tag.truncated:
                return fail(span, "missing record tag after '#'", truncated=True)
            return fail(span, "missing record tag after '#'", code="SIE-PARSE-002")
        return tag

    raw_tag = tag.value.tobytes()
    kind = TAG_TABLE.get(raw_tag)
    if kind is None:
        label = raw_tag.decode("ascii", errors="replace")
        return fail(span, f"unknown record tag #{label}", code="SIE-PARSE-002", tag=label)

    outcome = parse_body(kind, tag.rest)
    if isinstance(outcome, Failure):
        return outcome.within(kind.TAG)
    return outcome
