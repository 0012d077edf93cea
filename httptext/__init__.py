from .clients import (
    BaseFetch,
    DataFetch,
    FileFetch,
)
from .models import (
    FetchResult,
    ResponseInfo,
    FetchSettings,
    Timeouts,
    FetchOptions,
    RequestTarget,
)
from .api import (
    fetch,
    fetch_text,
    fetch_binary,
    fetch_json,
    fetch_to_file,
    wget,
)
from .exceptions import (
    # Base exceptions
    FetchError,
    # Validation errors
    ValidationError,
    InvalidURLError,
    InvalidSettingsError,
    InvalidDestinationError,
    PayloadSizeLimitError,
    # Network errors
    NetworkError,
    ConnectionError,
    TimeoutError,
    DNSResolutionError,
    # HTTP errors
    HTTPError,
    ClientError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ClientTimeoutError,
    ServerError,
    InternalServerError,
    BadGatewayError,
    ServiceUnavailableError,
    # Redirect errors
    RedirectError,
    TooManyRedirectsError,
    # Content errors
    ContentError,
    DecompressionError,
    EncodingError,
    InvalidJSONError,
    UnsupportedMediaTypeError,
    UnsupportedContentEncodingError,
    UnsupportedCharsetError,
    # Utilities
    retry_after_from_response,
    classify_http_error,
)
from .jsonp import parse_json_or_jsonp
from .observability.logging import configure_logging


__all__ = [
    # Clients
    "DataFetch",
    "FileFetch",

    # One-shot helpers
    "fetch",
    "fetch_text",
    "fetch_binary",
    "fetch_json",
    "fetch_to_file",
    "wget",

    # Configuration
    "FetchSettings",
    "Timeouts",
    "FetchOptions",
    "RequestTarget",
    "configure_logging",

    # Result models
    "FetchResult",
    "ResponseInfo",

    # Base class (for extending)
    "BaseFetch",

    # Base exceptions
    "FetchError",
    # Validation errors
    "ValidationError",
    "InvalidURLError",
    "InvalidSettingsError",
    "InvalidDestinationError",
    "PayloadSizeLimitError",
    # Network errors
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    "DNSResolutionError",
    # HTTP errors
    "HTTPError",
    "ClientError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitError",
    "ClientTimeoutError",
    "ServerError",
    "InternalServerError",
    "BadGatewayError",
    "ServiceUnavailableError",
    # Redirect errors
    "RedirectError",
    "TooManyRedirectsError",
    # Content errors
    "ContentError",
    "DecompressionError",
    "EncodingError",
    "InvalidJSONError",
    "UnsupportedMediaTypeError",
    "UnsupportedContentEncodingError",
    "UnsupportedCharsetError",
    # Utility functions
    "retry_after_from_response",
    "classify_http_error",
    "parse_json_or_jsonp",
]
