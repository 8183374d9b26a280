"""
sie4: streaming reader for SIE 4 accounting files.

A library and CLI tool for reading Swedish SIE 4 export files into typed
records, incrementally, from any byte stream.

Usage:
    from sie4.core.parser import parse_file
    result = parse_file("export.se")
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
