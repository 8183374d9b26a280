"""
JSON output adapter.

Renders records and results as JSON for machine processing. Records are
rendered one JSON document per line.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TextIO

from sie4.cli.output.base import OutputAdapter, OutputFormat

if TYPE_CHECKING:
    from sie4.core.parser import Item, ParseResult, ParserError


class JsonOutput(OutputAdapter):
    """JSON output adapter."""

    format = OutputFormat.JSON

    def __init__(self, stream: TextIO | None = None, color: bool = False, indent: int | None = 2):
        super().__init__(stream=stream, color=False)  # Never colorize JSON
        self.indent = indent

    def render_result(self, result: ParseResult) -> str:
        """Render a read summary as JSON."""
        output: dict[str, Any] = {
            "file": str(result.file_path),
            "encoding": result.encoding,
            "records": len(result.items),
            "groups": {group.name.lower(): count for group, count in result.count_by_group().items()},
            "tags": result.count_by_tag(),
            "errors": [self._error_to_dict(e) for e in result.errors],
            "warnings": [self._error_to_dict(w) for w in result.warnings],
        }
        return json.dumps(output, indent=self.indent, default=str)

    def render_item(self, item: Item) -> str:
        """Render a record as a single JSON line."""
        output = {"tag": item.tag, **item.model_dump(mode="json")}
        return json.dumps(output, ensure_ascii=False)

    def render_error(self, error: ParserError) -> str:
        return json.dumps({"error": self._error_to_dict(error)}, ensure_ascii=False, default=str)

    def _error_to_dict(self, error: ParserError) -> dict[str, Any]:
        """Convert an error to a dictionary."""
        return {
            "code": error.code,
            "severity": error.severity.value,
            "title": error.title,
            "message": error.message,
            "location": error.location.model_dump(exclude_none=True),
            "context": error.context,
        }
