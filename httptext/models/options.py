from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional, Union

import httpx

from ..exceptions import InvalidSettingsError, InvalidURLError

if TYPE_CHECKING:
    from .results import ResponseInfo

# Callbacks may be plain functions or coroutine functions.
ProgressCallback = Callable[[int, Optional[int]], Union[None, Awaitable[None]]]
ResponseInfoCallback = Callable[["ResponseInfo"], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class RequestTarget:
    """Structured alternative to a URL string."""

    host: str
    path: str = "/"
    protocol: str = "http"
    port: Optional[int] = None

    @property
    def url(self) -> str:
        scheme = self.protocol.rstrip(":").lower() or "http"
        path = self.path if self.path.startswith("/") else f"/{self.path}"
        netloc = self.host if self.port is None else f"{self.host}:{self.port}"
        return f"{scheme}://{netloc}{path}"


Target = Union[str, httpx.URL, RequestTarget]


def build_url(target: Target) -> str:
    """Turn any accepted target shape into a URL string."""
    if isinstance(target, RequestTarget):
        if not target.host or not target.host.strip():
            raise InvalidURLError(message="Request target has no host", url=None)
        return target.url
    if isinstance(target, httpx.URL):
        url = str(target)
    else:
        url = (target or "").strip()
    if not url:
        raise InvalidURLError(message="URL cannot be empty", url=url)
    return url


@dataclass(frozen=True)
class FetchOptions:
    """
    Per-call request descriptor.

    encoding is the caller's default charset. It only becomes authoritative
    when force_encoding is set; otherwise a Content-Type charset, a BOM or an
    embedded declaration takes precedence. "binary" requests raw bytes.
    """

    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    # Charset resolution
    encoding: Optional[str] = None
    force_encoding: bool = False
    ignore_bom: bool = False       # skip BOM detection entirely
    keep_bom: bool = False         # detect, but leave U+FEFF in the text

    # Content handling
    dont_decompress: bool = False  # only honoured for binary output

    # Observers
    progress: Optional[ProgressCallback] = None
    response_info: Optional[ResponseInfoCallback] = None

    # Overall timeout in seconds (connect through end of body)
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout <= 0:
            raise InvalidSettingsError(
                message="", setting_name="timeout", setting_value=self.timeout
            )
        if not self.method or not self.method.strip():
            raise InvalidSettingsError(
                message="", setting_name="method", setting_value=self.method
            )

    def merge(self, **changes: Any) -> "FetchOptions":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
