"""
Charset resolution and streaming decode of a response body.

One DecodePipeline is created per response. The orchestrator calls start()
once the status line and headers are in, feed() for every raw chunk in
arrival order, and finish() at end of stream. Only finish() produces a
result, so an error at any point leaves nothing partially decoded behind.

Charset precedence, highest first:
    1. the caller's encoding, when force_encoding is set
    2. a byte-order mark at the start of the (decompressed) body
    3. the Content-Type charset parameter
    4. an encoding declared inside the content (XML, HTML meta, CSS @charset)
    5. the caller's default encoding, or utf-8

A forced encoding still lets the BOM be detected and removed; it only keeps
the BOM from changing the charset. The Content-Type charset pins the charset
against sniffing but not against a BOM.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

import httpx

from ..exceptions import EncodingError, PayloadSizeLimitError, UnsupportedCharsetError
from ..models.options import FetchOptions
from ..models.results import ResponseInfo
from ..observability.logging import HttptextLoggerAdapter, get_httptext_logger, log_content_processing
from ..utils import (
    extract_charset,
    is_binary_content_type,
    maybe_await,
    normalize_charset,
    parse_content_length,
)
from .bom import detect_bom
from .charsets import NATIVE_CHARSETS, CodecRegistry, default_codecs
from .decompress import Decompressor, IdentityDecompressor, select_decompressor
from .sniff import sniff_embedded_encoding

__all__ = [
    "AWAITING_HEADERS",
    "STREAMING",
    "ENDED",
    "ERRORED",
    "OUTPUT_MODES",
    "DecodeState",
    "DecodePipeline",
]

# Phases
AWAITING_HEADERS = "awaiting_headers"
STREAMING = "streaming"
ENDED = "ended"
ERRORED = "errored"

# "auto": classify from Content-Type; "text": always decode;
# "binary": raw bytes; "sink": forward bytes to a writable as they arrive
OUTPUT_MODES = ("auto", "text", "binary", "sink")

DEFAULT_ENCODING = "utf-8"
BINARY = "binary"


@dataclass
class DecodeState:
    """Mutable per-response decode bookkeeping."""

    charset: Optional[str] = None
    autodetect: bool = False
    binary: bool = False
    bom_detected: bool = False
    remove_bom: bool = False
    bytes_read: int = 0               # raw bytes from the wire
    total_expected: Optional[int] = None
    bytes_decoded: int = 0            # bytes after decompression
    first_chunk_seen: bool = False
    buffer: bytearray = field(default_factory=bytearray)
    phase: str = AWAITING_HEADERS


class DecodePipeline:
    """
    Per-response state machine: awaiting_headers -> streaming -> ended,
    with errored reachable from anywhere.

    Example:
        pipeline = DecodePipeline(options, mode="text")
        pipeline.start(response.status_code, response.headers, url)
        async for chunk in response.aiter_raw():
            await pipeline.feed(chunk)
        text = await pipeline.finish()
    """

    def __init__(
        self,
        options: Optional[FetchOptions] = None,
        mode: str = "auto",
        sink: Any = None,
        *,
        codecs: Optional[CodecRegistry] = None,
        max_decompressed_bytes: Optional[int] = None,
        logger: Optional[HttptextLoggerAdapter] = None,
    ):
        if mode not in OUTPUT_MODES:
            raise ValueError(f"Unknown output mode: {mode!r}")
        if (mode == "sink") != (sink is not None):
            raise ValueError("A sink is required for, and only allowed in, sink mode")

        self.options = options or FetchOptions()
        self.mode = mode
        self.sink = sink
        self.state = DecodeState()
        self._codecs = codecs or default_codecs
        self._max_decompressed_bytes = max_decompressed_bytes
        self._logger = logger or get_httptext_logger(__name__)
        self._decompressor: Decompressor = IdentityDecompressor()
        self._forced = False
        self._bytes_written = 0

        self.url: Optional[str] = None
        self.status_code = 0
        self.content_type = ""
        self.content_encoding = ""
        self.headers: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, status_code: int, headers: httpx.Headers, url: Optional[str] = None) -> None:
        """
        Headers received: decide binary vs text, pick the initial charset and
        the decompressor.

        Raises:
            UnsupportedContentEncodingError: unknown Content-Encoding
            UnsupportedCharsetError: initial charset unknown to the codecs
        """
        self._expect(AWAITING_HEADERS)
        try:
            self._start(status_code, headers, url)
        except BaseException:
            self.state.phase = ERRORED
            raise
        self.state.phase = STREAMING

    async def feed(self, chunk: bytes) -> None:
        """Process one raw chunk from the wire, in arrival order."""
        self._expect(STREAMING)
        try:
            state = self.state
            state.bytes_read += len(chunk)
            if self.options.progress:
                await maybe_await(self.options.progress(state.bytes_read, state.total_expected))
            await self._consume(self._decompressor.decompress(chunk))
        except BaseException:
            self.state.phase = ERRORED
            raise

    async def finish(self) -> Union[str, bytes, int]:
        """
        End of stream: flush, report, and produce the result.

        Returns:
            bytes written (sink mode), raw bytes (binary) or decoded text
        """
        self._expect(STREAMING)
        try:
            await self._consume(self._decompressor.flush())
            result = self._result()

            state = self.state
            if self.options.progress and state.total_expected is None:
                await maybe_await(self.options.progress(state.bytes_read, state.bytes_read))
            if self.options.response_info:
                await maybe_await(self.options.response_info(self.info))
        except BaseException:
            self.state.phase = ERRORED
            raise

        self.state.phase = ENDED
        return result

    def fail(self) -> None:
        """Mark the pipeline errored after a transport-level failure."""
        self.state.phase = ERRORED

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def info(self) -> ResponseInfo:
        state = self.state
        if self.mode == "sink":
            charset = state.charset or BINARY
        else:
            charset = BINARY if state.binary else (state.charset or DEFAULT_ENCODING)

        return ResponseInfo(
            url=self.url or "",
            status_code=self.status_code,
            bom_detected=state.bom_detected,
            bom_removed=state.remove_bom,
            charset=charset,
            content_encoding=self.content_encoding or "identity",
            content_length=state.bytes_read,
            content_type=self.content_type,
            headers=self.headers,
        )

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _expect(self, phase: str) -> None:
        if self.state.phase != phase:
            raise RuntimeError(
                f"DecodePipeline is {self.state.phase}, expected {phase}"
            )

    def _start(self, status_code: int, headers: httpx.Headers, url: Optional[str]) -> None:
        state = self.state
        options = self.options

        self.url = url
        self.status_code = status_code
        self.headers = dict(headers)
        self.content_type = headers.get("Content-Type", "").strip().lower()
        self.content_encoding = headers.get("Content-Encoding", "").strip().lower()
        state.total_expected = parse_content_length(headers)

        encoding = normalize_charset(options.encoding) if options.encoding else None
        state.binary = self._is_binary(encoding)

        if options.dont_decompress and state.binary:
            self._decompressor = IdentityDecompressor(url)
        else:
            self._decompressor = select_decompressor(self.content_encoding, url)
            if self._decompressor.name != "identity":
                log_content_processing(
                    self._logger,
                    operation="decompress",
                    content_type=self.content_type,
                    compression=self._decompressor.name,
                    url=url,
                )

        if self.mode == "sink":
            # Nothing is decoded; detection only feeds ResponseInfo. Embedded
            # declarations count only in bodies the server labels as text.
            state.autodetect = bool(self.content_type) and not is_binary_content_type(
                self.content_type
            )
            return
        if state.binary:
            return

        header_charset = extract_charset(self.content_type)

        if encoding and options.force_encoding:
            self._forced = True
            state.charset, source = encoding, "forced"
            state.autodetect = False
        elif header_charset:
            state.charset, source = header_charset, "header"
            state.autodetect = False
        else:
            state.charset, source = encoding or DEFAULT_ENCODING, "default"
            state.autodetect = True

        if state.charset not in NATIVE_CHARSETS:
            self._require_codec(state.charset, source)

    def _is_binary(self, encoding: Optional[str]) -> bool:
        if self.mode in ("binary", "sink") or encoding == BINARY:
            return True
        if self.mode == "text":
            return False
        if self.options.dont_decompress:
            return True
        # A caller-supplied encoding means the caller wants text.
        if self.content_type and encoding is None:
            return is_binary_content_type(self.content_type)
        return False

    def _require_codec(self, charset: str, source: str) -> None:
        if not self._codecs.encoding_exists(charset):
            self._logger.warning(
                "content.unsupported_charset", charset=charset, source=source, url=self.url
            )
            raise UnsupportedCharsetError(
                message="", url=self.url, charset=charset, source=source
            )

    async def _consume(self, data: bytes) -> None:
        if not data:
            return

        state = self.state
        state.bytes_decoded += len(data)

        if self.sink is None:
            limit = self._max_decompressed_bytes
            if limit is not None and state.bytes_decoded > limit:
                raise PayloadSizeLimitError(
                    message="",
                    url=self.url,
                    actual_size=state.bytes_decoded,
                    max_size=limit,
                )

        if not state.first_chunk_seen:
            state.first_chunk_seen = True
            self._inspect_first_chunk(data)

        if self.sink is not None:
            await maybe_await(self.sink.write(bytes(data)))
            self._bytes_written += len(data)
        else:
            state.buffer.extend(data)

    def _inspect_first_chunk(self, data: bytes) -> None:
        state = self.state
        informational = self.mode == "sink"

        if state.binary and not informational:
            return

        if not self.options.ignore_bom:
            match = detect_bom(data)
            if match:
                if not self._forced:
                    if not informational:
                        self._require_codec(match.encoding, "bom")
                    state.charset = match.encoding
                    state.autodetect = False
                state.bom_detected = True
                if not self.options.keep_bom and not informational:
                    state.remove_bom = True
                log_content_processing(
                    self._logger,
                    operation="bom_detected",
                    charset=match.encoding,
                    bom_length=match.length,
                    forced=self._forced,
                    url=self.url,
                )

        if state.autodetect:
            declared = sniff_embedded_encoding(data)
            if declared:
                if not informational:
                    self._require_codec(declared, "sniffed")
                state.charset = declared
                state.autodetect = False
                log_content_processing(
                    self._logger,
                    operation="charset_sniffed",
                    charset=declared,
                    url=self.url,
                )

    def _result(self) -> Union[str, bytes, int]:
        state = self.state

        if self.sink is not None:
            return self._bytes_written
        if state.binary:
            return bytes(state.buffer)

        charset = state.charset or DEFAULT_ENCODING
        try:
            text = self._codecs.decode(state.buffer, charset, strip_bom=state.remove_bom)
        except (LookupError, UnicodeError) as exc:
            raise EncodingError(message="", url=self.url, charset=charset, cause=exc) from exc

        log_content_processing(
            self._logger,
            operation="decode",
            content_type=self.content_type,
            charset=charset,
            size_bytes=len(state.buffer),
            url=self.url,
        )
        return text
