"""
Codec capability used by the decode pipeline.

Code-table conversion is delegated to Python's codec registry. A handful of
names are handled directly because they describe representations of bytes
rather than character sets (base64, hex, and the byte-preserving "binary").
"""

from __future__ import annotations

import base64
import codecs

__all__ = ["NATIVE_CHARSETS", "CodecRegistry", "default_codecs"]

NATIVE_CHARSETS = frozenset({"ascii", "utf-8", "utf-16le", "binary", "base64", "hex"})

BOM_CHAR = "\ufeff"


class CodecRegistry:
    """Answers "does this charset exist" and decodes bytes with a named charset."""

    def encoding_exists(self, charset: str) -> bool:
        if not charset:
            return False
        if charset.lower() in NATIVE_CHARSETS:
            return True
        try:
            codecs.lookup(charset)
            # bytes-to-bytes codecs (rot13, zlib, ...) are not charsets
            b"".decode(charset)
        except LookupError:
            return False
        return True

    def decode(self, data: bytes, charset: str, strip_bom: bool = False) -> str:
        """
        Decode data with charset. Undecodable sequences become U+FFFD.

        A leading U+FEFF survives decoding unless strip_bom is set.
        """
        name = charset.lower()

        if name == "base64":
            return base64.b64encode(data).decode("ascii")
        if name == "hex":
            return bytes(data).hex()
        if name == "binary":
            text = bytes(data).decode("latin-1")
        else:
            text = bytes(data).decode(name, errors="replace")

        if strip_bom and text.startswith(BOM_CHAR):
            text = text[1:]
        return text


default_codecs = CodecRegistry()
