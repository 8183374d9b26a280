"""
Pytest configuration and fixtures for sie4 tests.

Provides fixtures for:
- Golden test files (SIE samples)
- Generated SIE documents in CP437
- Byte sources that hand out data in small chunks
"""

from __future__ import annotations

from pathlib import Path

import pytest

# =============================================================================
# Path Fixtures
# =============================================================================

FIXTURES_DIR = Path(__file__).parent / "fixtures"
GOLDEN_DIR = FIXTURES_DIR / "golden"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return FIXTURES_DIR


@pytest.fixture
def golden_dir() -> Path:
    """Return the golden files directory path."""
    return GOLDEN_DIR


# =============================================================================
# Golden File Fixtures
# =============================================================================


@pytest.fixture
def valid_minimal(golden_dir: Path) -> Path:
    """Minimal valid SIE 4 file with one record of most kinds."""
    return golden_dir / "valid_minimal.se"


@pytest.fixture
def out_of_order(golden_dir: Path) -> Path:
    """File with an identification record after the account plan."""
    return golden_dir / "out_of_order.se"


@pytest.fixture
def truncated_entry(golden_dir: Path) -> Path:
    """File that ends inside an unclosed #VER block."""
    return golden_dir / "truncated_entry.se"


# =============================================================================
# Generated Documents
# =============================================================================

SAMPLE_SIE = (
    "#FLAGGA 0\n"
    '#PROGRAM "Bokföring Plus" 4.2\n'
    "#FORMAT PC8\n"
    '#GEN 20230315 "JD"\n'
    "#SIETYP 4\n"
    '#FNAMN "Räksmörgås AB"\n'
    "#ORGNR 556677-8899\n"
    "#RAR 0 20230101 20231231\n"
    "#KPTYP BAS96\n"
    "#VALUTA SEK\n"
    '#KONTO 1930 "Företagskonto"\n'
    '#KONTO 4010 "Inköp material"\n'
    "#KTYP 1930 T\n"
    '#DIM 1 "Kostnadsställe"\n'
    '#OBJEKT 1 "10" "Göteborg"\n'
    "#IB 0 1930 12000.00\n"
    "#UB 0 1930 11928.00\n"
    '#PSALDO 0 202303 4010 {1 "10"} 72.00\n'
    '#VER A 42 20230314 "Pi Day" 20230314\n'
    "{\n"
    '   #TRANS 1930 {} -72.00 20230314 "Paj"\n'
    '   #TRANS 4010 {1 "10"} 72.00 20230314 "Paj"\n'
    "}\n"
)


@pytest.fixture
def sample_sie_text() -> str:
    """A complete SIE 4 document as text."""
    return SAMPLE_SIE


@pytest.fixture
def sample_sie_bytes() -> bytes:
    """A complete SIE 4 document encoded as PC8 (CP437)."""
    return SAMPLE_SIE.encode("cp437")


@pytest.fixture
def sample_sie_file(tmp_path: Path, sample_sie_bytes: bytes) -> Path:
    """A complete SIE 4 document written to disk in CP437."""
    path = tmp_path / "sample.se"
    path.write_bytes(sample_sie_bytes)
    return path


@pytest.fixture
def large_sie_bytes() -> bytes:
    """A document with a thousand entries, for refill-heavy reads."""
    lines = ["#FLAGGA 0", "#SIETYP 4", '#KONTO 1930 "Bank"', '#KONTO 3010 "Sales"']
    for i in range(1, 1001):
        lines.append(f'#VER A {i} 20230101 "Sale {i}"')
        lines.append("{")
        lines.append(f"   #TRANS 1930 {{}} {i}.00")
        lines.append(f"   #TRANS 3010 {{}} -{i}.00")
        lines.append("}")
    return ("\r\n".join(lines) + "\r\n").encode("cp437")


# =============================================================================
# Byte Sources
# =============================================================================


class ChunkedSource:
    """Byte source that never returns more than ``chunk`` bytes per read."""

    def __init__(self, data: bytes, chunk: int = 1) -> None:
        self.data = data
        self.chunk = chunk
        self.pos = 0
        self.reads = 0

    def read(self, size: int = -1, /) -> bytes:
        self.reads += 1
        count = self.chunk if size < 0 else min(size, self.chunk)
        out = self.data[self.pos : self.pos + count]
        self.pos += len(out)
        return out


class FailingSource:
    """Byte source that hands out ``data`` once, then raises OSError."""

    def __init__(self, data: bytes, error: OSError | None = None) -> None:
        self.data = data
        self.error = error or OSError("device not ready")
        self.done = False

    def read(self, size: int = -1, /) -> bytes:
        if self.done:
            raise self.error
        self.done = True
        return self.data


@pytest.fixture
def chunked_source() -> type[ChunkedSource]:
    """Factory for sources that return data in fixed-size pieces."""
    return ChunkedSource


@pytest.fixture
def failing_source() -> type[FailingSource]:
    """Factory for sources that fail after their first read."""
    return FailingSource
