from .logging import (
    HttptextLoggerAdapter,
    configure_logging,
    get_httptext_logger,
    log_content_processing,
    log_exception,
)

__all__ = [
    "HttptextLoggerAdapter",
    "configure_logging",
    "get_httptext_logger",
    "log_content_processing",
    "log_exception",
]
