from .results import (
    FetchResult,
    ResponseInfo,
)

from .config import (
    FetchSettings,
    Timeouts,
)

from .options import (
    FetchOptions,
    RequestTarget,
    build_url,
)

__all__ = [
    # Result Models
    "FetchResult",
    "ResponseInfo",

    # Config Models
    "FetchSettings",
    "Timeouts",

    # Request descriptor
    "FetchOptions",
    "RequestTarget",
    "build_url",
]
