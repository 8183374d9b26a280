"""
SIE 4 Parser Core.

Public API for reading SIE 4 files.

Usage:
    from sie4.core.parser import Reader, open_file

    with open_file("export.se") as reader:
        for result in reader:
            if isinstance(result, ParserError):
                print(f"Stopped: {result}")
                break
            print(result.tag, result)

API Functions:
    open_file(path, config) -> context manager yielding Reader
    read_items(source, config) -> Iterator[Item]
    parse_file(path, config) -> ParseResult
    parse_bytes(data, filename, config) -> ParseResult
    parse_item(span) -> Done | NEED_MORE | Failure
    detect_encoding(data) -> str
"""

from __future__ import annotations

from pathlib import Path

from .dispatch import TAG_TABLE, parse_item
from .encoding import DEFAULT_ENCODING, DETECTION_SAMPLE_SIZE, TextDecoder, detect_encoding
from .errors import Location, ParserError, Severity, SieReadError
from .items import (
    ITEM_KINDS,
    Account,
    AccountKind,
    AccountType,
    AccountUnit,
    Address,
    BalanceDate,
    ChartOfAccounts,
    ChartType,
    ClosingBalance,
    Comment,
    CompanyId,
    CompanyName,
    CompanyType,
    Currency,
    Dimension,
    DimensionObject,
    Entry,
    FileFormat,
    FinancialYear,
    Flag,
    Format,
    GeneratedInfo,
    Group,
    IndustryCode,
    Item,
    OpeningBalance,
    OrganizationNumber,
    PeriodBalance,
    PeriodBudget,
    Program,
    ResultBalance,
    SieItem,
    SieType,
    SieTypeNo,
    SruCode,
    TaxYear,
    Transaction,
)
from .models import ParseResult
from .reader import ByteSource, Reader, ReaderConfig, open_file, read_items
from .span import NEED_MORE, Done, Failure, Span


def parse_file(path: Path | str, config: ReaderConfig | None = None) -> ParseResult:
    """
    Read a SIE file to the end.

    An ``encoding`` of ``"auto"`` in the config is resolved by sniffing the
    start of the file.

    Raises:
        FileNotFoundError: If file does not exist
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    config = config or ReaderConfig()
    if config.encoding == "auto":
        with path.open("rb") as f:
            sample = f.read(DETECTION_SAMPLE_SIZE)
        config = config.model_copy(update={"encoding": detect_encoding(sample)})

    with open_file(path, config) as reader:
        items, errors = reader.materialize()

    return ParseResult(
        file_path=path,
        encoding=config.encoding,
        items=items,
        errors=errors,
        warnings=reader.warnings,
    )


def parse_bytes(
    data: bytes, filename: str = "<bytes>", config: ReaderConfig | None = None
) -> ParseResult:
    """
    Read SIE data from bytes.

    Args:
        data: Raw file content
        filename: Optional filename for error messages
    """
    config = config or ReaderConfig()
    if config.encoding == "auto":
        config = config.model_copy(update={"encoding": detect_encoding(data)})

    reader = Reader.from_bytes(data, config, filename=filename)
    items, errors = reader.materialize()

    return ParseResult(
        file_path=Path(filename),
        encoding=config.encoding,
        items=items,
        errors=errors,
        warnings=reader.warnings,
    )


# =============================================================================
# Public API Exports
# =============================================================================

__all__ = [
    # Main functions
    "open_file",
    "parse_bytes",
    "parse_file",
    "parse_item",
    "read_items",
    # Reader
    "ByteSource",
    "ParseResult",
    "Reader",
    "ReaderConfig",
    # Decoding
    "DEFAULT_ENCODING",
    "DETECTION_SAMPLE_SIZE",
    "NEED_MORE",
    "TAG_TABLE",
    "Done",
    "Failure",
    "Span",
    "TextDecoder",
    "detect_encoding",
    # Errors
    "Location",
    "ParserError",
    "Severity",
    "SieReadError",
    # Records
    "ITEM_KINDS",
    "Account",
    "AccountKind",
    "AccountType",
    "AccountUnit",
    "Address",
    "BalanceDate",
    "ChartOfAccounts",
    "ChartType",
    "ClosingBalance",
    "Comment",
    "CompanyId",
    "CompanyName",
    "CompanyType",
    "Currency",
    "Dimension",
    "DimensionObject",
    "Entry",
    "FileFormat",
    "FinancialYear",
    "Flag",
    "Format",
    "GeneratedInfo",
    "Group",
    "IndustryCode",
    "Item",
    "OpeningBalance",
    "OrganizationNumber",
    "PeriodBalance",
    "PeriodBudget",
    "Program",
    "ResultBalance",
    "SieItem",
    "SieType",
    "SieTypeNo",
    "SruCode",
    "TaxYear",
    "Transaction",
]
