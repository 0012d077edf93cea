"""
Errors raised by httptext.

A fetch either returns its full result or raises one of these from the
awaited call. Which branch is raised tells the caller how far the fetch got:

    FetchError
    ├── ValidationError            bad input, raised before any network activity
    │   ├── InvalidURLError
    │   ├── InvalidSettingsError
    │   ├── InvalidDestinationError
    │   └── PayloadSizeLimitError  (decompressed body outgrew the buffer limit)
    ├── NetworkError               transport failed
    │   ├── ConnectionError
    │   ├── TimeoutError
    │   └── DNSResolutionError
    ├── HTTPError                  non-2xx status, body never read
    │   ├── ClientError            4xx: 400, 401, 403, 404, 408, 429
    │   └── ServerError            5xx: 500, 502, 503
    ├── RedirectError
    │   └── TooManyRedirectsError
    └── ContentError               body arrived but could not be turned into a result
        ├── DecompressionError
        ├── EncodingError
        ├── InvalidJSONError
        └── UnsupportedMediaTypeError
            ├── UnsupportedContentEncodingError
            └── UnsupportedCharsetError

    try:
        text = await client.fetch_text(url)
    except UnsupportedCharsetError:
        text = await client.fetch_text(url, FetchOptions(encoding="latin-1", force_encoding=True))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Dict, Any

import httpx

__all__ = [
    "FetchError",
    # before the request
    "ValidationError",
    "InvalidURLError",
    "InvalidSettingsError",
    "InvalidDestinationError",
    "PayloadSizeLimitError",
    # transport
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    "DNSResolutionError",
    # status
    "HTTPError",
    "ClientError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ClientTimeoutError",
    "RateLimitError",
    "ServerError",
    "InternalServerError",
    "BadGatewayError",
    "ServiceUnavailableError",
    "RedirectError",
    "TooManyRedirectsError",
    # body
    "ContentError",
    "DecompressionError",
    "EncodingError",
    "InvalidJSONError",
    "UnsupportedMediaTypeError",
    "UnsupportedContentEncodingError",
    "UnsupportedCharsetError",
    "retry_after_from_response",
    "classify_http_error",
]

UNSUPPORTED_MEDIA_TYPE = 415
UNSUPPORTED_MEDIA_TYPE_MESSAGE = "Unsupported Media Type"


@dataclass(slots=True)
class FetchError(Exception):
    """
    Root of every httptext error.

    Subclasses fill in a default message in __post_init__ when raised with
    message="", built from their own fields.
    """

    message: str
    url: Optional[str] = None
    response: Optional[httpx.Response] = None
    cause: Optional[BaseException] = None
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)
        if self.cause is not None:
            self.__cause__ = self.cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"url={self.url}")
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"context=({ctx_str})")
        return " | ".join(parts)


# --- input ---


@dataclass(slots=True)
class ValidationError(FetchError):
    pass


@dataclass(slots=True)
class InvalidURLError(ValidationError):
    """Empty target, or one httpx cannot parse."""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Invalid or empty URL: {self.url!r}"
        FetchError.__post_init__(self)


@dataclass(slots=True)
class InvalidSettingsError(ValidationError):
    """A FetchSettings or FetchOptions field holds a value httptext rejects."""

    setting_name: Optional[str] = None
    setting_value: Optional[Any] = None

    def __post_init__(self) -> None:
        if not self.message and self.setting_name:
            self.message = f"Invalid setting {self.setting_name}={self.setting_value!r}"
        FetchError.__post_init__(self)


@dataclass(slots=True)
class InvalidDestinationError(ValidationError):
    """fetch_to_file got no sink, no path, and no file name in the URL."""

    destination: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = (
                "A writable sink, a file path, or a URL from which a file name "
                "can be extracted must be provided"
            )
        FetchError.__post_init__(self)


@dataclass(slots=True)
class PayloadSizeLimitError(ValidationError):
    """
    The decompressed body passed max_decompressed_bytes while being buffered
    for decoding. Sinks are not limited.
    """

    actual_size: int = 0
    max_size: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = (
                f"Payload size {self.actual_size:,} bytes exceeds "
                f"limit of {self.max_size:,} bytes"
            )
        FetchError.__post_init__(self)


# --- transport ---


@dataclass(slots=True)
class NetworkError(FetchError):
    pass


@dataclass(slots=True)
class ConnectionError(NetworkError):
    """Connection refused or reset, including mid-body."""

    host: Optional[str] = None
    port: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Failed to connect to {self.host}:{self.port}"
        FetchError.__post_init__(self)


@dataclass(slots=True)
class TimeoutError(NetworkError):
    """
    timeout_type is "total" when FetchOptions.timeout ran out, otherwise the
    httpx phase that timed out ("connect", "read", "write", "pool").
    """

    timeout_type: Optional[str] = None
    timeout_seconds: Optional[float] = None
    elapsed_ms: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.message:
            elapsed = f" after {self.elapsed_ms:.0f} ms" if self.elapsed_ms is not None else ""
            self.message = (
                f"Request timed out ({self.timeout_type}: {self.timeout_seconds}s){elapsed}"
            )
        FetchError.__post_init__(self)


@dataclass(slots=True)
class DNSResolutionError(NetworkError):
    hostname: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"DNS resolution failed for {self.hostname}"
        FetchError.__post_init__(self)


# --- status ---


@dataclass(slots=True)
class HTTPError(FetchError):
    """
    The server answered outside 200-299. The body is left unread, so only
    the status and headers (via response) are available.
    """

    status_code: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"HTTP {self.status_code}"
        FetchError.__post_init__(self)


@dataclass(slots=True)
class ClientError(HTTPError):
    pass


@dataclass(slots=True)
class BadRequestError(ClientError):
    status_code: int = 400


@dataclass(slots=True)
class UnauthorizedError(ClientError):
    status_code: int = 401


@dataclass(slots=True)
class ForbiddenError(ClientError):
    status_code: int = 403


@dataclass(slots=True)
class NotFoundError(ClientError):
    status_code: int = 404


@dataclass(slots=True)
class ClientTimeoutError(ClientError):
    status_code: int = 408


@dataclass(slots=True)
class RateLimitError(ClientError):
    """429. httptext does not retry; retry_after is passed on for the caller."""

    status_code: int = 429
    retry_after: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.message:
            retry_msg = f". Retry after {self.retry_after}s" if self.retry_after is not None else ""
            self.message = f"Rate limit exceeded (HTTP {self.status_code}){retry_msg}"
        FetchError.__post_init__(self)


@dataclass(slots=True)
class ServerError(HTTPError):
    pass


@dataclass(slots=True)
class InternalServerError(ServerError):
    status_code: int = 500


@dataclass(slots=True)
class BadGatewayError(ServerError):
    status_code: int = 502


@dataclass(slots=True)
class ServiceUnavailableError(ServerError):
    status_code: int = 503
    retry_after: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.message:
            retry_msg = f", retry after {self.retry_after}s" if self.retry_after is not None else ""
            self.message = f"Service unavailable (HTTP {self.status_code}){retry_msg}"
        FetchError.__post_init__(self)


@dataclass(slots=True)
class RedirectError(FetchError):
    redirect_chain: list[str] = field(default_factory=list)


@dataclass(slots=True)
class TooManyRedirectsError(RedirectError):
    """httpx stopped following redirects at FetchSettings.max_redirects."""

    max_redirects: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Too many redirects (limit {self.max_redirects})"
        FetchError.__post_init__(self)


# --- body ---


@dataclass(slots=True)
class ContentError(FetchError):
    pass


@dataclass(slots=True)
class DecompressionError(ContentError):
    """Corrupt or truncated gzip, deflate or br body; encoding names which."""

    encoding: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            enc = f" ({self.encoding})" if self.encoding else ""
            self.message = f"Decompression failed{enc}"
        FetchError.__post_init__(self)


@dataclass(slots=True)
class EncodingError(ContentError):
    """The codec for an accepted charset still failed on the buffered body."""

    charset: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Text decoding failed with charset={self.charset}"
        FetchError.__post_init__(self)


@dataclass(slots=True)
class InvalidJSONError(ContentError):
    """fetch_json found neither a JSON document nor a JSONP callback around one."""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = "Valid JSON not found"
        FetchError.__post_init__(self)


@dataclass(slots=True)
class UnsupportedMediaTypeError(ContentError):
    """
    The body uses a compression scheme or charset httptext cannot read.

    Carries status_code 415 for callers that map errors back onto HTTP; it is
    not an HTTPError, the server's own status was 2xx.
    """

    status_code: int = UNSUPPORTED_MEDIA_TYPE

    def __post_init__(self) -> None:
        if not self.message:
            self.message = UNSUPPORTED_MEDIA_TYPE_MESSAGE
        FetchError.__post_init__(self)


@dataclass(slots=True)
class UnsupportedContentEncodingError(UnsupportedMediaTypeError):
    """Raised from DecodePipeline.start, before any body byte is read."""

    content_encoding: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = (
                f"{UNSUPPORTED_MEDIA_TYPE_MESSAGE}: content encoding {self.content_encoding!r}"
            )
        FetchError.__post_init__(self)


@dataclass(slots=True)
class UnsupportedCharsetError(UnsupportedMediaTypeError):
    """
    The resolved charset has no codec. source says where it came from:
    "forced", "header", "default", "bom" or "sniffed".
    """

    charset: Optional[str] = None
    source: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            origin = f" ({self.source})" if self.source else ""
            self.message = f"{UNSUPPORTED_MEDIA_TYPE_MESSAGE}: charset {self.charset!r}{origin}"
        FetchError.__post_init__(self)


_STATUS_ERRORS: Dict[int, type[HTTPError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    408: ClientTimeoutError,
    429: RateLimitError,
    500: InternalServerError,
    502: BadGatewayError,
    503: ServiceUnavailableError,
}


def retry_after_from_response(response: Optional[httpx.Response]) -> Optional[float]:
    """
    Seconds to wait according to Retry-After (delta-seconds or HTTP-date),
    never negative. None if the header is missing or unparseable.
    """
    if response is None:
        return None

    header = response.headers.get("Retry-After", "").strip()
    if not header:
        return None
    if header.isdigit():
        return float(header)

    try:
        retry_dt = parsedate_to_datetime(header)
    except (TypeError, ValueError):
        return None
    if retry_dt is None:
        return None
    if retry_dt.tzinfo is None:
        retry_dt = retry_dt.replace(tzinfo=timezone.utc)

    return max((retry_dt - datetime.now(timezone.utc)).total_seconds(), 0.0)


def classify_http_error(
    status_code: int,
    url: str,
    response: Optional[httpx.Response] = None,
) -> HTTPError:
    """
    Build the error for a non-2xx status: the specific class where one
    exists, else ClientError or ServerError by range, else HTTPError.
    """
    if status_code in _STATUS_ERRORS:
        error_class = _STATUS_ERRORS[status_code]
    elif 400 <= status_code < 500:
        error_class = ClientError
    elif 500 <= status_code < 600:
        error_class = ServerError
    else:
        error_class = HTTPError

    kwargs: Dict[str, Any] = {
        "message": "",
        "url": url,
        "response": response,
        "status_code": status_code,
    }
    if error_class in (RateLimitError, ServiceUnavailableError) and response is not None:
        kwargs["retry_after"] = retry_after_from_response(response)

    return error_class(**kwargs)
