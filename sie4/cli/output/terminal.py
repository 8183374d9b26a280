"""
Terminal output adapter.

Renders records and read summaries for humans, with ANSI colors when
writing to a TTY.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from sie4.cli.output.base import OutputAdapter, OutputFormat

if TYPE_CHECKING:
    from sie4.core.parser import Item, ParseResult, ParserError


# Check if Unicode is supported
def _supports_unicode() -> bool:
    """Check if terminal supports Unicode."""
    try:
        "✓".encode(sys.stdout.encoding or "utf-8")
        return True
    except (UnicodeEncodeError, LookupError):
        return False


SEVERITY_COLORS = {
    "fatal": "bold red",
    "warn": "yellow",
}

SEVERITY_SYMBOLS_UNICODE = {
    "fatal": "✖",
    "warn": "⚠",
}

SEVERITY_SYMBOLS_ASCII = {
    "fatal": "X",
    "warn": "!",
}

SUCCESS_SYMBOL_UNICODE = "✓"
SUCCESS_SYMBOL_ASCII = "OK"

_ANSI_CODES = {
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "bold red": "\033[1;31m",
}
_ANSI_RESET = "\033[0m"


class TerminalOutput(OutputAdapter):
    """Terminal output with ANSI colors."""

    format = OutputFormat.TERMINAL

    def __init__(self, stream: TextIO | None = None, color: bool = True):
        super().__init__(stream=stream, color=color)
        self._use_color = color and self._is_tty()
        self._use_unicode = _supports_unicode()
        self._severity_symbols = SEVERITY_SYMBOLS_UNICODE if self._use_unicode else SEVERITY_SYMBOLS_ASCII
        self._success_symbol = SUCCESS_SYMBOL_UNICODE if self._use_unicode else SUCCESS_SYMBOL_ASCII

    def _is_tty(self) -> bool:
        """Check if output is a TTY."""
        return hasattr(self.stream, "isatty") and self.stream.isatty()

    def render_result(self, result: ParseResult) -> str:
        """Render a read summary."""
        lines: list[str] = [self._style(str(result.file_path), "bold")]
        lines.append(f"  encoding: {result.encoding}")
        lines.append(f"  records:  {len(result.items)}")

        for group, count in result.count_by_group().items():
            lines.append(f"    {group.name.lower():<15} {count}")

        for warning in result.warnings:
            lines.append(self._format_error(warning))

        for error in result.errors:
            lines.append(self._format_error(error))

        if not result.errors:
            lines.append(self._style(f"{self._success_symbol} Read to the end.", "green"))

        return "\n".join(lines)

    def render_item(self, item: Item) -> str:
        """Render a record as ``#TAG field=value ...``."""
        parts = [self._style(f"#{item.tag}", "blue")]
        for name, value in item:
            if value is None:
                continue
            if name == "transactions":
                continue
            parts.append(f"{name}={self._format_value(value)}")

        lines = [" ".join(parts)]
        for transaction in getattr(item, "transactions", ()):
            lines.append("    " + self.render_item(transaction))
        return "\n".join(lines)

    def render_error(self, error: ParserError) -> str:
        return self._format_error(error)

    def _format_value(self, value: object) -> str:
        if isinstance(value, str):
            return repr(value)
        if isinstance(value, list):
            return "{" + " ".join(self._format_value(v) for v in value) + "}"
        if hasattr(value, "value") and hasattr(value, "name"):
            return str(value.value)  # enum members
        return str(value)

    def _format_error(self, error: ParserError) -> str:
        """Format a single error."""
        severity = error.severity.value
        color = SEVERITY_COLORS.get(severity, "red")
        symbol = self._severity_symbols.get(severity, "*")

        styled_symbol = self._style(symbol, color)
        styled_code = self._style(error.code, "dim")
        return f"  {styled_symbol} {error.location}: {error.message} [{styled_code}]"

    def _style(self, text: str, style: str) -> str:
        """Apply style to text if colors are enabled."""
        if not self._use_color:
            return text

        code = _ANSI_CODES.get(style, "")
        if code:
            return f"{code}{text}{_ANSI_RESET}"
        return text
