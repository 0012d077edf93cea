"""
Incremental Content-Encoding decompressors.

Each decompressor consumes raw body chunks as they arrive and returns the
inflated bytes available so far. flush() must be called at end of stream; it
raises DecompressionError if the compressed stream was cut short.
"""

from __future__ import annotations

import zlib
from typing import Optional

import brotli

from ..exceptions import DecompressionError, UnsupportedContentEncodingError

__all__ = [
    "Decompressor",
    "IdentityDecompressor",
    "GzipDecompressor",
    "DeflateDecompressor",
    "BrotliDecompressor",
    "select_decompressor",
]


class Decompressor:
    """Base decompressor; also the passthrough used for identity bodies."""

    name = "identity"

    def __init__(self, url: Optional[str] = None):
        self.url = url

    def decompress(self, chunk: bytes) -> bytes:
        return chunk

    def flush(self) -> bytes:
        return b""

    def _error(self, reason: str, cause: Optional[BaseException] = None) -> DecompressionError:
        return DecompressionError(
            message=f"Failed to decompress {self.name} body: {reason}",
            url=self.url,
            encoding=self.name,
            cause=cause,
        )


IdentityDecompressor = Decompressor


class GzipDecompressor(Decompressor):
    name = "gzip"

    def __init__(self, url: Optional[str] = None):
        super().__init__(url)
        self._obj = zlib.decompressobj(16 + zlib.MAX_WBITS)
        self._seen_data = False

    def decompress(self, chunk: bytes) -> bytes:
        if not chunk:
            return b""
        self._seen_data = True
        out = []
        try:
            out.append(self._obj.decompress(chunk))
            # Concatenated gzip members
            while self._obj.eof and self._obj.unused_data:
                rest = self._obj.unused_data
                self._obj = zlib.decompressobj(16 + zlib.MAX_WBITS)
                out.append(self._obj.decompress(rest))
        except zlib.error as exc:
            raise self._error(str(exc), exc) from exc
        return b"".join(out)

    def flush(self) -> bytes:
        try:
            tail = self._obj.flush()
        except zlib.error as exc:
            raise self._error(str(exc), exc) from exc
        if self._seen_data and not self._obj.eof:
            raise self._error("truncated stream")
        return tail


class DeflateDecompressor(Decompressor):
    """
    "deflate" is meant to be zlib-wrapped, but some servers send raw deflate.
    The wrapped form is tried first; input is held back until the two-byte
    zlib header is complete, and that header decides.
    """

    name = "deflate"

    def __init__(self, url: Optional[str] = None):
        super().__init__(url)
        self._obj = zlib.decompressobj()
        self._pending: Optional[bytes] = b""   # None once the format is decided
        self._seen_data = False

    def decompress(self, chunk: bytes) -> bytes:
        if not chunk:
            return b""
        self._seen_data = True

        if self._pending is not None:
            self._pending += chunk
            if len(self._pending) < 2:
                return b""
            chunk, self._pending = self._pending, None
            try:
                return self._obj.decompress(chunk)
            except zlib.error:
                self._obj = zlib.decompressobj(-zlib.MAX_WBITS)

        try:
            return self._obj.decompress(chunk)
        except zlib.error as exc:
            raise self._error(str(exc), exc) from exc

    def flush(self) -> bytes:
        out = b""
        try:
            if self._pending:
                # A lone byte can only be raw deflate.
                pending, self._pending = self._pending, None
                self._obj = zlib.decompressobj(-zlib.MAX_WBITS)
                out = self._obj.decompress(pending)
            tail = out + self._obj.flush()
        except zlib.error as exc:
            raise self._error(str(exc), exc) from exc
        if self._seen_data and not self._obj.eof:
            raise self._error("truncated stream")
        return tail


class BrotliDecompressor(Decompressor):
    name = "br"

    def __init__(self, url: Optional[str] = None):
        super().__init__(url)
        self._obj = brotli.Decompressor()
        self._seen_data = False

    def decompress(self, chunk: bytes) -> bytes:
        if not chunk:
            return b""
        self._seen_data = True
        try:
            return self._obj.process(chunk)
        except brotli.error as exc:
            raise self._error(str(exc), exc) from exc

    def flush(self) -> bytes:
        if self._seen_data and not self._obj.is_finished():
            raise self._error("truncated stream")
        return b""


_DECOMPRESSORS: dict[str, type[Decompressor]] = {
    "": IdentityDecompressor,
    "identity": IdentityDecompressor,
    "gzip": GzipDecompressor,
    "x-gzip": GzipDecompressor,
    "deflate": DeflateDecompressor,
    "br": BrotliDecompressor,
}


def select_decompressor(content_encoding: Optional[str], url: Optional[str] = None) -> Decompressor:
    """
    Pick the decompressor for a Content-Encoding header value.

    Raises:
        UnsupportedContentEncodingError: for any scheme other than gzip,
            x-gzip, deflate, br or identity
    """
    key = (content_encoding or "").strip().lower()
    factory = _DECOMPRESSORS.get(key)
    if factory is None:
        raise UnsupportedContentEncodingError(
            message="",
            url=url,
            content_encoding=content_encoding,
        )
    return factory(url)
