"""
Output adapters for CLI.

Provides different output formats: terminal, JSON.
"""

from sie4.cli.output.base import OutputAdapter, OutputFormat, get_output_adapter
from sie4.cli.output.json import JsonOutput
from sie4.cli.output.terminal import TerminalOutput

__all__ = [
    "JsonOutput",
    "OutputAdapter",
    "OutputFormat",
    "TerminalOutput",
    "get_output_adapter",
]
