"""
CLI context and configuration.

Exit codes and resolution of reader settings from options and environment.
"""

from __future__ import annotations

import os
from enum import IntEnum

from sie4.core.parser.reader import DEFAULT_MAX_RECORD_BYTES

MAX_RECORD_BYTES_ENV = "SIE4_MAX_RECORD_BYTES"


class ExitCode(IntEnum):
    """CLI exit codes following Unix conventions."""

    SUCCESS = 0  # File read to the end
    FATAL = 2  # Reading stopped on an error
    USAGE = 64  # Command line usage error
    CONFIG = 78  # Configuration error


class ConfigError(ValueError):
    """Invalid setting from the command line or environment."""


def resolve_max_record_bytes(max_record_bytes: int | None) -> int | None:
    """
    Resolve the record size limit.

    Precedence: command line option, then SIE4_MAX_RECORD_BYTES, then the
    reader default. Zero or a negative value means unlimited.
    """
    if max_record_bytes is not None:
        return None if max_record_bytes <= 0 else max_record_bytes

    env_value = os.environ.get(MAX_RECORD_BYTES_ENV)
    if env_value:
        try:
            parsed = int(env_value)
        except ValueError:
            raise ConfigError(f"{MAX_RECORD_BYTES_ENV} must be an integer") from None
        return None if parsed <= 0 else parsed

    return DEFAULT_MAX_RECORD_BYTES


def get_exit_code(has_fatal: bool) -> ExitCode:
    """Determine exit code from the outcome of reading."""
    return ExitCode.FATAL if has_fatal else ExitCode.SUCCESS
