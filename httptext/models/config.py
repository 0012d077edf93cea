from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

import httpx

if TYPE_CHECKING:
    from ..observability.logging import HttptextLoggerAdapter

DEFAULT_UA = "httptext/0.1"
DEFAULT_ACCEPT_ENCODING = "gzip, deflate, br"

@dataclass
class Timeouts:
    connect: float = 5.0
    read: float = 60.0
    write: float = 10.0
    pool: float = 5.0

@dataclass
class FetchSettings:
    # HTTP basics
    user_agent: str = DEFAULT_UA

    # HTTP behavior
    http2: bool = True
    follow_redirects: bool = True
    max_redirects: int = 20
    timeouts: Timeouts = field(default_factory=Timeouts)

    # Default headers
    accept: str = "*/*"
    accept_encoding: str = DEFAULT_ACCEPT_ENCODING

    # Safety
    max_decompressed_size_mb: int = 200   # Guard against decompression bombs

    # Logging
    logger: Optional["HttptextLoggerAdapter"] = None  # Optional custom logger instance

    # Connection pooling
    max_connections: int = 100
    max_keepalive_connections: int = 20

    # Transport override (httpx.MockTransport in tests, custom transports in apps)
    transport: Optional[httpx.AsyncBaseTransport] = None

    @property
    def max_decompressed_bytes(self) -> int:
        return self.max_decompressed_size_mb * 1024 * 1024
