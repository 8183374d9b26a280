"""
CLI for sie4.

Command-line interface for checking and dumping SIE 4 files.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sie4.cli.context import ExitCode

if TYPE_CHECKING:
    from typer import Typer

    app: Typer


def __getattr__(name: str) -> Any:
    if name == "app":
        from sie4.cli.main import app as _app

        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ExitCode",
    "app",
]
