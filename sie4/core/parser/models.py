"""
Parse result model.

Holds everything read from one SIE file when the caller wants the whole
record sequence in memory instead of streaming it.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from pydantic import BaseModel, Field

from .errors import ParserError, Severity
from .items import Group, Item


class ParseResult(BaseModel):
    """
    Result of reading a SIE file to the end.

    ``errors`` holds at most one entry: the error that ended the stream.
    ``warnings`` holds non-fatal observations such as an ignored truncated
    trailing record.
    """

    file_path: Path
    encoding: str
    items: list[Item] = Field(default_factory=list)
    errors: list[ParserError] = Field(default_factory=list)
    warnings: list[ParserError] = Field(default_factory=list)

    @property
    def has_fatal_errors(self) -> bool:
        """Check if reading stopped on an error."""
        return any(e.severity == Severity.FATAL for e in self.errors)

    def count_by_group(self) -> dict[Group, int]:
        """Number of records per group, in group order."""
        counts = Counter(item.group for item in self.items)
        return {group: counts.get(group, 0) for group in Group}

    def count_by_tag(self) -> dict[str, int]:
        """Number of records per tag, in order of first appearance."""
        return dict(Counter(item.tag for item in self.items))
