"""Tests for text decoding and encoding detection."""

import pytest

from sie4.core.parser import DEFAULT_ENCODING, TextDecoder, detect_encoding


class TestTextDecoder:
    """Tests for TextDecoder."""

    def test_default_is_pc8(self) -> None:
        """Test that the default codec is code page 437."""
        decoder = TextDecoder()
        assert decoder.encoding == "cp437"
        assert decoder(b"R\x84ksm\x94rg\x86s") == "Räksmörgås"

    def test_codec_names_are_normalized(self) -> None:
        """Test codec aliases."""
        assert TextDecoder("UTF8").encoding == "utf-8"
        assert TextDecoder("windows-1252").encoding == "cp1252"

    def test_unknown_codec(self) -> None:
        """Test that an unknown codec fails early."""
        with pytest.raises(LookupError):
            TextDecoder("no-such-codec")

    def test_invalid_bytes_are_replaced(self) -> None:
        """Test that undecodable bytes never raise."""
        assert TextDecoder("utf-8")(b"a\xffb") == "a�b"

    def test_every_byte_decodes_as_pc8(self) -> None:
        """Test that code page 437 maps every byte."""
        text = TextDecoder()(bytes(range(256)))
        assert len(text) == 256
        assert "�" not in text


class TestDetectEncoding:
    """Tests for detect_encoding function."""

    def test_utf8_with_bom(self) -> None:
        """Test detection of UTF-8 with BOM."""
        data = b"\xef\xbb\xbf#FLAGGA 0\n"
        assert detect_encoding(data) == "utf-8-sig"

    def test_ascii(self) -> None:
        """Test that plain ASCII is read as PC8."""
        assert detect_encoding(b'#FLAGGA 0\n#KONTO 1930 "Bank"\n') == DEFAULT_ENCODING

    def test_declared_pc8(self) -> None:
        """Test that a #FORMAT PC8 declaration is trusted."""
        data = '#FLAGGA 0\n#FORMAT PC8\n#FNAMN "Räksmörgås AB"\n'.encode("cp437")
        assert detect_encoding(data) == "cp437"

    def test_plain_utf8(self) -> None:
        """Test detection of UTF-8 without BOM."""
        lines = [f'#KONTO {1000 + i} "Försäljning av varor och tjänster {i}, moms 25 %"' for i in range(40)]
        data = ("#FLAGGA 0\n" + "\n".join(lines) + "\n").encode("utf-8")
        assert detect_encoding(data) == "utf-8"

    def test_empty_data(self) -> None:
        """Test with empty data falls back to PC8."""
        assert detect_encoding(b"") == DEFAULT_ENCODING
