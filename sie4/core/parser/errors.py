"""
Reader error models.

This module defines structured errors for the SIE reader.
All reader errors use error codes from the SIE-XXX-NNN taxonomy.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Severity(Enum):
    """Error severity levels."""

    FATAL = "fatal"  # Ends the record sequence
    WARN = "warn"  # Informational, reading continues


class Location(BaseModel, frozen=True):
    """Error location in the input."""

    file: str | None = None
    line_no: int | None = None
    offset: int | None = None
    record: str | None = None
    field: str | None = None

    def __str__(self) -> str:
        """Format location for display."""
        parts = []
        if self.file:
            parts.append(self.file)
        if self.line_no is not None:
            parts.append(f"line {self.line_no}")
        if self.offset is not None:
            parts.append(f"byte {self.offset}")
        if self.record:
            parts.append(f"#{self.record}")
        if self.field:
            parts.append(f"field '{self.field}'")
        return ", ".join(parts) if parts else "<unknown>"


class ParserError(BaseModel, frozen=True):
    """
    Structured reader error.

    Uses error codes from the Error Taxonomy (SIE-XXX-NNN).
    Error domains:
    - SIE-IO-*: Reading from the byte source
    - SIE-PARSE-*: Malformed records and fields
    - SIE-ORD-*: Record ordering
    - SIE-EOF-*: Truncated input
    """

    code: str = Field(
        pattern=r"^SIE-[A-Z]{2,5}-\d{3}$",
        description="Error code, e.g., 'SIE-PARSE-001'",
    )
    severity: Severity
    title: str = Field(description="Short error title")
    message: str = Field(description="Detailed error message")
    location: Location = Field(
        default_factory=Location,
        description="Where the error occurred",
    )
    context: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional context (found, expected, exception, etc.)",
    )

    @classmethod
    def fatal(
        cls,
        code: str,
        title: str,
        message: str,
        *,
        location: Location | None = None,
        context: dict[str, Any] | None = None,
    ) -> ParserError:
        """Create a FATAL severity error."""
        return cls(
            code=code,
            severity=Severity.FATAL,
            title=title,
            message=message,
            location=location or Location(),
            context=context or {},
        )

    @classmethod
    def warn(
        cls,
        code: str,
        title: str,
        message: str,
        *,
        location: Location | None = None,
        context: dict[str, Any] | None = None,
    ) -> ParserError:
        """Create a WARN severity error."""
        return cls(
            code=code,
            severity=Severity.WARN,
            title=title,
            message=message,
            location=location or Location(),
            context=context or {},
        )

    def __str__(self) -> str:
        """Format error for display."""
        return f"[{self.code}] {self.severity.value.upper()}: {self.title} - {self.message}"


class SieReadError(Exception):
    """Raised by the exception-style APIs when the record sequence ends in an error."""

    def __init__(self, error: ParserError) -> None:
        self.error = error
        super().__init__(f"{error} ({error.location})")


# =============================================================================
# Error Codes Registry
# =============================================================================

PARSER_ERROR_CODES: dict[str, str] = {
    # I/O errors
    "SIE-IO-001": "Reading from the byte source failed",
    "SIE-IO-002": "Record exceeds the maximum buffered size",
    # Parse errors
    "SIE-PARSE-001": "Malformed record or field",
    "SIE-PARSE-002": "Unknown or missing record tag",
    "SIE-PARSE-003": "Expected '#' record marker",
    # Ordering errors
    "SIE-ORD-001": "Record group out of order",
    # End of input
    "SIE-EOF-001": "Truncated record at end of input",
}


def get_error_description(code: str) -> str | None:
    """Get the description for an error code."""
    return PARSER_ERROR_CODES.get(code)
