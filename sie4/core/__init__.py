"""
sie4 core library.

This package contains the core functionality:
- parser: record grammar, field decoders and the streaming reader
"""

__all__: list[str] = []
