"""
Tests for the decoding building blocks.

Tests cover:
- Byte-order mark detection
- Embedded charset sniffing (XML, HTML meta, CSS @charset)
- Codec registry lookups and native charsets
- Incremental gzip, deflate and brotli decompression
"""

from __future__ import annotations

import gzip
import zlib

import brotli
import pytest

from httptext.decoding.bom import detect_bom
from httptext.decoding.charsets import CodecRegistry
from httptext.decoding.decompress import (
    BrotliDecompressor,
    DeflateDecompressor,
    GzipDecompressor,
    select_decompressor,
)
from httptext.decoding.sniff import MAX_EXAMINE, sniff_embedded_encoding
from httptext.exceptions import (
    DecompressionError,
    HTTPError,
    UnsupportedContentEncodingError,
    UnsupportedMediaTypeError,
)

SAMPLE = "Côte d'Ivoire"
DECOY = "<!-- Ignore this <meta charset=\"utf-8\"> -->\n"


def _feed_all(decompressor, data: bytes, size: int = 7) -> bytes:
    out = [decompressor.decompress(data[i:i + size]) for i in range(0, len(data), size)]
    out.append(decompressor.flush())
    return b"".join(out)


class TestDetectBom:
    """Test byte-order mark detection."""

    @pytest.mark.parametrize(
        ("encoding", "length"),
        [
            ("utf-8", 3),
            ("utf-16le", 2),
            ("utf-16be", 2),
            ("utf-32le", 4),
            ("utf-32be", 4),
            ("utf-7", 4),
        ],
    )
    def test_detects_each_mark(self, encoding, length):
        data = ("\ufeff" + SAMPLE).encode(encoding)

        match = detect_bom(data)

        assert match is not None
        assert match.encoding == encoding
        assert match.length == length

    def test_utf32le_is_not_mistaken_for_utf16le(self):
        assert detect_bom(b"\xff\xfe\x00\x00A\x00\x00\x00").encoding == "utf-32le"

    def test_no_mark(self):
        assert detect_bom(SAMPLE.encode("utf-8")) is None

    def test_too_short(self):
        assert detect_bom(b"") is None
        assert detect_bom(b"\xef") is None

    def test_utf7_requires_valid_fourth_byte(self):
        assert detect_bom(b"+/vA") is None
        assert detect_bom(b"+/v") is None


class TestSniffEmbeddedEncoding:
    """Test charset declarations found inside the content."""

    def test_xml_declaration(self):
        body = f'<?xml version="1.0" encoding="macroman"?>\n<country>{SAMPLE}</country>'

        assert sniff_embedded_encoding(body.encode("mac_roman")) == "macroman"

    def test_meta_charset_after_decoy_comment(self):
        body = (
            f"<!DOCTYPE html>\n<html><head>{DECOY}"
            f'<meta charset="macroman"></head><body>{SAMPLE}</body></html>'
        )

        assert sniff_embedded_encoding(body.encode("mac_roman")) == "macroman"

    def test_meta_http_equiv(self):
        body = (
            f"<html><head>{DECOY}"
            '<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=macroman">'
            f"</head><body>{SAMPLE}</body></html>"
        )

        assert sniff_embedded_encoding(body.encode("mac_roman")) == "macroman"

    def test_css_charset(self):
        body = f'@charset "macroman";\n.country::after {{ content: "{SAMPLE}"; }}'

        assert sniff_embedded_encoding(body.encode("mac_roman")) == "macroman"

    def test_css_charset_must_lead(self):
        body = 'body { color: red; }\n@charset "macroman";'

        assert sniff_embedded_encoding(body.encode("ascii")) is None

    @pytest.mark.parametrize("body", [b'<!-- x -->@charset "macroman";', b'  @charset "macroman";'])
    def test_css_charset_must_be_first_byte(self, body):
        assert sniff_embedded_encoding(body) is None

    def test_declaration_past_examined_prefix_is_ignored(self):
        body = "<html>" + " " * MAX_EXAMINE + '<meta charset="macroman">'

        assert sniff_embedded_encoding(body.encode("ascii")) is None

    @pytest.mark.parametrize("encoding", ["utf-16le", "utf-16be", "utf-32le", "utf-32be"])
    def test_wide_encodings_from_zero_bytes(self, encoding):
        assert sniff_embedded_encoding("<html>".encode(encoding)) == encoding

    def test_plain_text(self):
        assert sniff_embedded_encoding(b"just some text") is None
        assert sniff_embedded_encoding(b"") is None


class TestCodecRegistry:
    """Test charset existence checks and decoding."""

    def test_known_and_unknown(self):
        codecs = CodecRegistry()

        assert codecs.encoding_exists("utf-8")
        assert codecs.encoding_exists("macroman")
        assert codecs.encoding_exists("ISO-8859-1")
        assert not codecs.encoding_exists("klingon")
        assert not codecs.encoding_exists("")

    def test_bytes_to_bytes_codecs_are_not_charsets(self):
        assert not CodecRegistry().encoding_exists("zlib_codec")

    def test_native_representations(self):
        codecs = CodecRegistry()

        assert codecs.decode(b"\x01\xff", "hex") == "01ff"
        assert codecs.decode(b"hi", "base64") == "aGk="
        assert codecs.decode(b"\xe9", "binary") == "\xe9"

    def test_strip_bom(self):
        codecs = CodecRegistry()
        data = ("\ufeff" + SAMPLE).encode("utf-8")

        assert codecs.decode(data, "utf-8") == "\ufeff" + SAMPLE
        assert codecs.decode(data, "utf-8", strip_bom=True) == SAMPLE

    def test_invalid_sequences_are_replaced(self):
        assert CodecRegistry().decode(b"a\xffb", "utf-8") == "a\ufffdb"


class TestDecompressors:
    """Test incremental decompression."""

    payload = (SAMPLE * 200).encode("utf-8")

    def test_gzip(self):
        assert _feed_all(GzipDecompressor(), gzip.compress(self.payload)) == self.payload

    def test_gzip_multiple_members(self):
        data = gzip.compress(b"first ") + gzip.compress(b"second")

        assert _feed_all(GzipDecompressor(), data) == b"first second"

    def test_gzip_corrupt_checksum(self):
        data = bytearray(gzip.compress(self.payload))
        data[-8] ^= 0xFF  # CRC32 trailer

        with pytest.raises(DecompressionError) as exc_info:
            _feed_all(GzipDecompressor("http://test.local/x"), bytes(data))

        assert exc_info.value.encoding == "gzip"
        assert exc_info.value.url == "http://test.local/x"

    def test_gzip_truncated(self):
        data = gzip.compress(self.payload)

        with pytest.raises(DecompressionError):
            _feed_all(GzipDecompressor(), data[: len(data) // 2])

    def test_deflate_zlib_wrapped(self):
        assert _feed_all(DeflateDecompressor(), zlib.compress(self.payload)) == self.payload

    def test_deflate_raw(self):
        compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
        data = compressor.compress(self.payload) + compressor.flush()

        assert _feed_all(DeflateDecompressor(), data) == self.payload

    @pytest.mark.parametrize("wbits", [zlib.MAX_WBITS, -zlib.MAX_WBITS])
    def test_deflate_header_split_across_chunks(self, wbits):
        compressor = zlib.compressobj(wbits=wbits)
        data = compressor.compress(self.payload) + compressor.flush()
        decompressor = DeflateDecompressor()

        out = decompressor.decompress(data[:1])
        out += decompressor.decompress(data[1:])
        out += decompressor.flush()

        assert out == self.payload

    def test_brotli(self):
        assert _feed_all(BrotliDecompressor(), brotli.compress(self.payload)) == self.payload

    def test_brotli_truncated(self):
        data = brotli.compress(self.payload)

        with pytest.raises(DecompressionError):
            _feed_all(BrotliDecompressor(), data[: len(data) // 2])

    def test_empty_body(self):
        assert GzipDecompressor().flush() == b""
        assert BrotliDecompressor().flush() == b""

    @pytest.mark.parametrize(
        ("header", "name"),
        [
            (None, "identity"),
            ("", "identity"),
            ("identity", "identity"),
            ("gzip", "gzip"),
            ("X-GZIP", "gzip"),
            ("deflate", "deflate"),
            ("br", "br"),
        ],
    )
    def test_select(self, header, name):
        assert select_decompressor(header).name == name

    def test_select_unsupported(self):
        with pytest.raises(UnsupportedContentEncodingError) as exc_info:
            select_decompressor("compress", "http://test.local/x")

        err = exc_info.value
        assert isinstance(err, UnsupportedMediaTypeError)
        assert not isinstance(err, HTTPError)
        assert err.status_code == 415
        assert err.content_encoding == "compress"
