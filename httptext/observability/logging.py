"""
Logging adapter for the httptext client.

httptext never configures handlers itself. It emits dotted event names
("request.started", "content.bom_detected", ...) with structured fields in
``extra`` and lets the embedding application decide how they are rendered.

Architecture:
- HttptextLoggerAdapter wraps any LoggerAdapter and provides event helpers
- _logger_factory allows consumers to inject their logger factory
- Default factory uses standard library logging when no custom factory is configured

Usage in httptext:
    from httptext.observability.logging import get_httptext_logger

    logger = get_httptext_logger(__name__, url="https://example.com/")
    logger.info("request.started")

Usage in consumer applications (configuring the factory):
    from httptext.observability.logging import configure_logging
    from myapp.logging import get_custom_logger

    configure_logging(logger_factory=get_custom_logger)

    async with DataFetch() as client:
        text = await client.fetch_text(url)
"""

from __future__ import annotations

import logging
from logging import Logger, LoggerAdapter
from typing import Any, Callable, Dict, Optional


# Global logger factory (can be injected by embedding applications)
_logger_factory: Optional[Callable[..., LoggerAdapter]] = None


class HttptextLoggerAdapter:
    """
    Thin wrapper around LoggerAdapter providing httptext logging helpers.

    Keeps event naming and metadata structure consistent across the package
    while allowing flexible backend implementations.
    """

    def __init__(self, logger: LoggerAdapter, context: Optional[Dict[str, Any]] = None):
        """
        Initialize the adapter.

        Args:
            logger: Underlying LoggerAdapter (from custom logger or stdlib)
            context: Additional context to bind to all log records
        """
        self._logger = logger
        self._context = context or {}

    def _merge_context(self, **extra: Any) -> Dict[str, Any]:
        """Merge bound context with extra fields."""
        return {**self._context, **extra}

    def bind(self, **context: Any) -> "HttptextLoggerAdapter":
        """Return a new adapter with additional bound context."""
        return HttptextLoggerAdapter(self._logger, self._merge_context(**context))

    def debug(self, event: str, **extra: Any) -> None:
        """Log DEBUG-level event."""
        self._logger.debug(event, extra=self._merge_context(**extra))

    def info(self, event: str, **extra: Any) -> None:
        """Log INFO-level event."""
        self._logger.info(event, extra=self._merge_context(**extra))

    def warning(self, event: str, **extra: Any) -> None:
        """Log WARNING-level event."""
        self._logger.warning(event, extra=self._merge_context(**extra))

    def error(self, event: str, exc_info: Optional[BaseException] = None, **extra: Any) -> None:
        """Log ERROR-level event."""
        self._logger.error(event, extra=self._merge_context(**extra), exc_info=exc_info)


class _ContextAdapter(LoggerAdapter):
    """LoggerAdapter that merges per-call extra fields over the bound context."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


def _default_logger_factory(name: str, **context: Any) -> LoggerAdapter:
    """
    Default logger factory using standard library logging.

    Returns a basic LoggerAdapter when no custom factory is configured.
    Event fields become attributes of the LogRecord.
    """
    base_logger: Logger = logging.getLogger(name)
    return _ContextAdapter(base_logger, context)


def configure_logging(logger_factory: Optional[Callable[..., LoggerAdapter]]) -> None:
    """
    Configure httptext to use a custom logger factory.

    Args:
        logger_factory: Callable returning a LoggerAdapter, signature
                       (name: str, **context) -> LoggerAdapter. Pass None to
                       restore the standard library default.
    """
    global _logger_factory
    _logger_factory = logger_factory


def get_httptext_logger(
    name: str,
    url: Optional[str] = None,
    method: Optional[str] = None,
    **extra_context: Any
) -> HttptextLoggerAdapter:
    """
    Get an httptext logger with request context.

    Uses the configured logger factory if set, otherwise falls back to stdlib logging.

    Args:
        name: Logger name (typically __name__)
        url: Request URL
        method: HTTP method (GET, POST, etc.)
        **extra_context: Additional context to bind

    Returns:
        HttptextLoggerAdapter with bound context
    """
    context: Dict[str, Any] = {**extra_context}

    if url is not None:
        context["url"] = url
    if method is not None:
        context["method"] = method

    factory = _logger_factory or _default_logger_factory
    base_logger = factory(name, **context)

    return HttptextLoggerAdapter(base_logger, context)


def log_exception(
    logger: HttptextLoggerAdapter,
    exc: BaseException,
    event: str,
    **context: Any
) -> None:
    """
    Log an exception with httptext context.

    Usage:
        try:
            text = await client.fetch_text(url)
        except FetchError as exc:
            log_exception(logger, exc, "request.failed", method="GET")
            raise
    """
    error_context = {
        **context,
        "error_type": exc.__class__.__name__,
        "error_message": str(exc),
    }

    logger.error(event, exc_info=exc, **error_context)


def log_content_processing(
    logger: HttptextLoggerAdapter,
    operation: str,
    content_type: Optional[str] = None,
    charset: Optional[str] = None,
    size_bytes: Optional[int] = None,
    **context: Any
) -> None:
    """
    Log content processing operations (decompression, BOM, sniffing, decoding).

    Usage:
        log_content_processing(
            logger,
            operation="decompress",
            content_type="text/html",
            compression="gzip"
        )
    """
    logger.debug(
        f"content.{operation}",
        content_type=content_type,
        charset=charset,
        size_bytes=size_bytes,
        **context
    )
