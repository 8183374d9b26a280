"""
Streaming reader for SIE 4 files.

The reader owns a growable buffer over a sequential byte source and turns
it into a forward-only sequence of records. Each pull:

1. parses one record from the buffered, unconsumed bytes
2. on success drops the consumed bytes, checks the group watermark and
   yields the record
3. when the record is not completely buffered yet, reads another chunk
   from the source and retries from the start of the record
4. on any failure yields exactly one ParserError and stops

A UTF-8 byte order mark at the start of the stream is skipped. At end of
input the buffered tail is parsed once more as final. If that parse fails
only because the input ran out, the tail is a truncated record and is
reported per ``ReaderConfig.strict_eof``; any other failure is a parse error
like one found mid-stream.

The only call that may block is ``source.read``.
"""

from __future__ import annotations

import codecs
import io
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, Field

from .dispatch import parse_item
from .encoding import DEFAULT_ENCODING, TextDecoder
from .errors import Location, ParserError, SieReadError
from .items import Group, Item
from .span import NEED_MORE, Done, Failure, Span

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192
DEFAULT_MAX_RECORD_BYTES = 16 * 1024 * 1024  # 16 MiB


class ByteSource(Protocol):
    """Anything with a binary ``read``: files, sockets, BytesIO."""

    def read(self, size: int = -1, /) -> bytes: ...


class ReaderConfig(BaseModel, frozen=True):
    """Reader settings."""

    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0, description="Bytes per refill")
    encoding: str = Field(default=DEFAULT_ENCODING, description="Codec for text fields")
    strict_eof: bool = Field(
        default=False,
        description="Report a truncated trailing record as an error instead of ending quietly",
    )
    max_record_bytes: int | None = Field(
        default=DEFAULT_MAX_RECORD_BYTES,
        gt=0,
        description="Largest incomplete record to buffer (None = unlimited)",
    )

    model_config = {"frozen": True}


class Reader:
    """
    Iterator over the records of a SIE byte stream.

    Yields Item models for records and a single ParserError if the stream
    turns out to be malformed, after which the iteration ends.
    """

    def __init__(
        self,
        source: ByteSource,
        config: ReaderConfig | None = None,
        *,
        filename: str | None = None,
    ) -> None:
        self.config = config or ReaderConfig()
        if self.config.encoding == "auto":
            raise ValueError("encoding 'auto' must be resolved with detect_encoding() first")
        self.filename = filename
        self.warnings: list[ParserError] = []

        self._source = source
        self._decoder = TextDecoder(self.config.encoding)
        self._buffer = bytearray()
        self._offset = 0  # logical stream offset of _buffer[0]
        self._line = 1  # line number at _buffer[0]
        self._watermark = Group.FLAG
        self._eof = False  # source has returned an empty chunk
        self._bom_pending = True
        self._exhausted = False

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        config: ReaderConfig | None = None,
        *,
        filename: str | None = "<bytes>",
    ) -> Reader:
        """Create a reader over in-memory data."""
        return cls(io.BytesIO(data), config, filename=filename)

    @property
    def watermark(self) -> Group:
        """Highest group seen so far."""
        return self._watermark

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def offset(self) -> int:
        """Number of bytes consumed from the source so far."""
        return self._offset

    def __iter__(self) -> Reader:
        return self

    def __next__(self) -> Item | ParserError:
        if self._exhausted:
            raise StopIteration

        while True:
            if self._bom_pending:
                self._skip_bom()
            snapshot = bytes(self._buffer)
            outcome = (
                NEED_MORE
                if self._bom_pending
                else parse_item(Span(snapshot, origin=self._offset, text=self._decoder))
            )

            if isinstance(outcome, Done):
                return self._emit(snapshot, outcome.value, outcome.rest.start)

            if isinstance(outcome, Failure):
                return self._terminate(self._parse_error(snapshot, outcome))

            if self._eof:
                return self._finish(snapshot)

            limit = self.config.max_record_bytes
            if limit is not None and len(self._buffer) > limit:
                return self._terminate(
                    ParserError.fatal(
                        code="SIE-IO-002",
                        title="Record too large",
                        message=f"Record exceeds maximum buffered size of {limit} bytes",
                        location=self._location(snapshot, 0),
                        context={"max_record_bytes": limit, "buffered": len(self._buffer)},
                    )
                )

            try:
                chunk = self._source.read(self.config.chunk_size)
            except OSError as e:
                return self._terminate(
                    ParserError.fatal(
                        code="SIE-IO-001",
                        title="Read failed",
                        message=str(e) or type(e).__name__,
                        location=self._location(snapshot, len(snapshot)),
                        context={"exception": repr(e)},
                    )
                )

            if not chunk:
                self._eof = True
                return self._finish(snapshot)

            logger.debug("Read %d bytes at offset %d", len(chunk), self._offset + len(snapshot))
            self._buffer += chunk

    def items(self) -> Iterator[Item]:
        """
        Iterate over records only.

        Raises:
            SieReadError: If the stream ends in an error
        """
        for result in self:
            if isinstance(result, ParserError):
                raise SieReadError(result)
            yield result

    def materialize(self) -> tuple[list[Item], list[ParserError]]:
        """
        Read all remaining records into memory.

        Returns (items, errors); errors holds at most one entry.
        """
        items: list[Item] = []
        errors: list[ParserError] = []

        for result in self:
            if isinstance(result, ParserError):
                errors.append(result)
            else:
                items.append(result)

        return items, errors

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _emit(self, snapshot: bytes, item: Item, consumed: int) -> Item | ParserError:
        if item.group < self._watermark:
            start = consumed - len(snapshot[:consumed].lstrip(b" \t\r\n"))
            return self._terminate(
                ParserError.fatal(
                    code="SIE-ORD-001",
                    title="Record out of order",
                    message=(
                        f"#{item.tag} ({item.group.name}) cannot follow "
                        f"{self._watermark.name} records"
                    ),
                    location=self._location(snapshot, start, record=item.tag),
                    context={"group": item.group.name, "watermark": self._watermark.name},
                )
            )

        self._consume(snapshot, consumed)
        self._watermark = item.group
        logger.debug("Decoded #%s", item.tag)
        return item

    def _skip_bom(self) -> None:
        """Drop a UTF-8 byte order mark at the very start of the stream."""
        head = bytes(self._buffer[: len(codecs.BOM_UTF8)])
        if head == codecs.BOM_UTF8:
            self._consume(head, len(head))
        elif codecs.BOM_UTF8.startswith(head) and not self._eof:
            return  # undecided until more bytes arrive
        self._bom_pending = False

    def _consume(self, snapshot: bytes, count: int) -> None:
        self._line += snapshot.count(b"\n", 0, count)
        self._offset += count
        del self._buffer[:count]

    def _finish(self, snapshot: bytes) -> Item | ParserError:
        """
        Handle end of input with an incomplete record (or only blanks) buffered.

        The end of input terminates the last token, so a record whose
        trailing optional fields are simply absent still decodes. Only a
        failure caused by running out of input counts as a truncated
        record; any other failure is reported like one mid-stream.
        """
        leftover = snapshot.strip(b" \t\r\n")
        if not leftover:
            self._exhausted = True
            raise StopIteration

        outcome = parse_item(Span(snapshot, origin=self._offset, final=True, text=self._decoder))
        if isinstance(outcome, Done):
            return self._emit(snapshot, outcome.value, outcome.rest.start)
        if isinstance(outcome, Failure) and not outcome.truncated:
            return self._terminate(self._parse_error(snapshot, outcome))

        start = snapshot.index(leftover[:1])
        error_args = {
            "code": "SIE-EOF-001",
            "title": "Truncated record",
            "message": f"Input ends inside a record ({len(leftover)} bytes left unparsed)",
            "location": self._location(snapshot, start),
            "context": {"unparsed_bytes": len(leftover)},
        }

        if self.config.strict_eof:
            return self._terminate(ParserError.fatal(**error_args))

        logger.warning(
            "Input ends inside a record at offset %d; %d trailing bytes ignored",
            self._offset + start,
            len(leftover),
        )
        self.warnings.append(ParserError.warn(**error_args))
        self._exhausted = True
        raise StopIteration

    def _terminate(self, error: ParserError) -> ParserError:
        logger.info("Stopping at %s: %s", error.location, error.message)
        self._exhausted = True
        self._buffer.clear()
        return error

    def _parse_error(self, snapshot: bytes, failure: Failure) -> ParserError:
        path = list(reversed(failure.context))
        record = path[0] if path else failure.details.get("tag")
        field = " > ".join(path[1:]) or None
        code = failure.details.get("code", "SIE-PARSE-001")

        return ParserError.fatal(
            code=code,
            title="Unknown record" if code == "SIE-PARSE-002" else "Malformed record",
            message=failure.describe(),
            location=self._location(snapshot, failure.offset - self._offset, record=record, field=field),
            context={k: v for k, v in failure.details.items() if k not in ("code", "truncated")},
        )

    def _location(
        self,
        snapshot: bytes,
        position: int,
        *,
        record: str | None = None,
        field: str | None = None,
    ) -> Location:
        return Location(
            file=self.filename,
            line_no=self._line + snapshot.count(b"\n", 0, position),
            offset=self._offset + position,
            record=record,
            field=field,
        )


@contextmanager
def open_file(path: Path | str, config: ReaderConfig | None = None) -> Iterator[Reader]:
    """
    Open a SIE file for streaming.

    The file is closed when the context exits.

    Raises:
        FileNotFoundError: If file does not exist
    """
    path = Path(path)
    with path.open("rb") as f:
        yield Reader(f, config, filename=str(path))


def read_items(source: ByteSource, config: ReaderConfig | None = None) -> Iterator[Item]:
    """
    Stream records from a byte source.

    Raises:
        SieReadError: If the stream ends in an error
    """
    yield from Reader(source, config).items()
