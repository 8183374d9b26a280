"""
Text decoding for SIE files.

SIE 4 files declare ``#FORMAT PC8``: text is IBM PC 8-bit, i.e. code page
437. In practice exporters also write Windows-1252 or UTF-8, so the decoder
is configurable and ``detect_encoding`` sniffs a sample.

The decoder is a pure function of its input bytes. It is applied to each
token separately, so it must never need context from neighbouring bytes.
"""

from __future__ import annotations

import codecs
import re

from charset_normalizer import from_bytes

DEFAULT_ENCODING = "cp437"

# Size of data to use for encoding detection
DETECTION_SAMPLE_SIZE = 8192

_FORMAT_PC8 = re.compile(rb"^\s*#FORMAT\s+PC8\b", re.MULTILINE)


class TextDecoder:
    """Decode byte tokens to text with a fixed codec."""

    def __init__(self, encoding: str = DEFAULT_ENCODING) -> None:
        # Fail early on unknown codec names
        self.encoding = codecs.lookup(encoding).name

    def __call__(self, data: bytes) -> str:
        return data.decode(self.encoding, errors="replace")

    def __repr__(self) -> str:
        return f"TextDecoder({self.encoding!r})"


CP437 = TextDecoder(DEFAULT_ENCODING)


def detect_encoding(data: bytes) -> str:
    """
    Detect the text encoding of SIE file data.

    Detection priority:
    1. UTF-8 BOM
    2. Pure ASCII or an explicit ``#FORMAT PC8`` declaration: cp437
    3. charset-normalizer reports UTF-8: utf-8
    4. charset-normalizer reports a Windows/Latin codec: cp1252
    5. Fallback to cp437

    Args:
        data: First ~8KB of file content (or full file if smaller)

    Returns:
        Codec name: "utf-8-sig", "utf-8", "cp1252" or "cp437"
    """
    if data.startswith(codecs.BOM_UTF8):
        return "utf-8-sig"

    sample = data[:DETECTION_SAMPLE_SIZE]

    if sample.isascii():
        return DEFAULT_ENCODING

    # Exporters that bother to declare PC8 tend to honour it
    if _FORMAT_PC8.search(sample):
        return DEFAULT_ENCODING

    results = from_bytes(sample)
    best = results.best() if results else None
    if best is not None:
        encoding = best.encoding.lower().replace("_", "-")

        if encoding in ("utf-8", "utf8"):
            return "utf-8"

        if encoding in ("cp1252", "windows-1252", "latin-1", "iso-8859-1", "iso-8859-15"):
            return "cp1252"

    return DEFAULT_ENCODING
