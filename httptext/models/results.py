from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass
class ResponseInfo:
    """Metadata emitted once per response, after the body has been consumed."""

    url: str
    status_code: int = 200
    bom_detected: bool = False
    bom_removed: bool = False
    charset: str = "binary"               # charset used for decoding, or "binary"
    content_encoding: str = "identity"    # Content-Encoding as received
    content_length: int = 0               # bytes read from the wire
    content_type: str = ""                # lower-cased Content-Type header
    callback: Optional[str] = None        # JSONP callback name (fetch_json only)
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass
class FetchResult:
    """Result from DataFetch.fetch - decoded text or raw bytes, by classification."""

    url: str
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict)
    content_type: Optional[str] = None
    kind: str = "text"                    # "text" | "binary"
    text: Optional[str] = None            # decoded for text kinds
    bytes_: Optional[bytes] = None        # for binary kinds
    charset: Optional[str] = None
    duration_ms: int = 0
    size_bytes: int = 0
    info: Optional[ResponseInfo] = None
