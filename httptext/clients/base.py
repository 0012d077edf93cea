from __future__ import annotations
import asyncio
import time
from typing import Any, Optional, Union

import httpx

from ..models.config import FetchSettings
from ..models.options import FetchOptions, Target, build_url
from ..models.results import ResponseInfo
from ..decoding.pipeline import DecodePipeline
from ..exceptions import (
    FetchError,
    InvalidURLError,
    NetworkError,
    TooManyRedirectsError,
    TimeoutError as FetchTimeoutError,
    ConnectionError as FetchConnectionError,
    DNSResolutionError,
    classify_http_error,
)
from ..observability.logging import get_httptext_logger, log_exception

_DNS_FAILURE_MARKERS = (
    "Name or service not known",
    "getaddrinfo failed",
    "nodename nor servname provided",
    "Temporary failure in name resolution",
)


class BaseFetch:
    """
    Base class for async fetch clients.

    Provides shared functionality:
      - Async HTTP client management (httpx.AsyncClient)
      - The request orchestrator: one streamed request wired through the
        decompression and decode pipeline
      - Mapping of transport failures to httptext exceptions

    Nothing is retried. Every failure is raised from the awaited call.
    """

    def __init__(self, settings: Optional[FetchSettings] = None):
        self.settings = settings or FetchSettings()
        self._client: Optional[httpx.AsyncClient] = None
        self._logger = self.settings.logger or get_httptext_logger(__name__)

    async def __aenter__(self) -> "BaseFetch":
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": self.settings.user_agent,
                "Accept": self.settings.accept,
                "Accept-Encoding": self.settings.accept_encoding,
            },
            timeout=httpx.Timeout(
                connect=self.settings.timeouts.connect,
                read=self.settings.timeouts.read,
                write=self.settings.timeouts.write,
                pool=self.settings.timeouts.pool,
            ),
            http2=self.settings.http2,
            follow_redirects=self.settings.follow_redirects,
            max_redirects=self.settings.max_redirects,
            limits=httpx.Limits(
                max_keepalive_connections=self.settings.max_keepalive_connections,
                max_connections=self.settings.max_connections,
                keepalive_expiry=self.settings.timeouts.pool,
            ),
            transport=self.settings.transport,
        )

        self._logger.debug(
            "client.initialized",
            http2=self.settings.http2,
            follow_redirects=self.settings.follow_redirects,
            max_connections=self.settings.max_connections,
            custom_transport=self.settings.transport is not None,
        )
        return self

    async def __aexit__(self, *exc) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._logger.debug("client.closed")

    async def request(
        self,
        target: Target,
        options: Optional[FetchOptions] = None,
        mode: str = "auto",
        sink: Any = None,
    ) -> tuple[Union[str, bytes, int], ResponseInfo]:
        """
        Issue one request and run the body through the decode pipeline.

        Args:
            target: URL string, httpx.URL or RequestTarget
            options: Per-call request descriptor
            mode: "auto", "text", "binary" or "sink" (see DecodePipeline)
            sink: Writable receiving the body in sink mode

        Returns:
            Tuple of (text, bytes or bytes written, ResponseInfo)

        Raises:
            InvalidURLError: empty or malformed target
            HTTPError: status outside 200-299 (body is not read)
            UnsupportedMediaTypeError: unknown Content-Encoding or charset
            DecompressionError: corrupt compressed body
            TimeoutError: transport timeout or the overall options.timeout
            NetworkError: connection, DNS or mid-stream socket failures
        """
        assert self._client is not None, "Use async context manager: `async with DataFetch()`"
        url = build_url(target)
        options = options or FetchOptions()
        start = time.perf_counter()

        try:
            if options.timeout is None:
                return await self._perform(url, options, mode, sink, start)
            return await asyncio.wait_for(
                self._perform(url, options, mode, sink, start), options.timeout
            )
        except asyncio.TimeoutError as exc:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self._logger.error(
                "request.failed",
                method=options.method,
                url=url,
                error_type="timeout",
                timeout_type="total",
                duration_ms=round(elapsed_ms, 2),
            )
            raise FetchTimeoutError(
                message=f"Request timed out after {elapsed_ms:.0f} ms (limit {options.timeout}s)",
                url=url,
                timeout_type="total",
                timeout_seconds=options.timeout,
                elapsed_ms=elapsed_ms,
                cause=exc,
            ) from exc

    async def _perform(
        self,
        url: str,
        options: FetchOptions,
        mode: str,
        sink: Any,
        start: float,
    ) -> tuple[Union[str, bytes, int], ResponseInfo]:
        assert self._client is not None
        method = options.method.upper()
        pipeline = DecodePipeline(
            options,
            mode,
            sink,
            max_decompressed_bytes=self.settings.max_decompressed_bytes,
            logger=self._logger,
        )

        self._logger.info("request.started", method=method, url=url, mode=mode)

        try:
            async with self._client.stream(
                method, url, headers=dict(options.headers), content=options.body
            ) as resp:
                final_url = str(resp.url)

                # The body of an error response is never decoded.
                if not 200 <= resp.status_code < 300:
                    raise classify_http_error(resp.status_code, final_url, response=resp)

                pipeline.start(resp.status_code, resp.headers, final_url)
                async for chunk in resp.aiter_raw():
                    await pipeline.feed(chunk)
                result = await pipeline.finish()

        except FetchError as exc:
            pipeline.fail()
            log_exception(self._logger, exc, "request.failed", method=method, url=url)
            raise
        except httpx.InvalidURL as exc:
            pipeline.fail()
            raise InvalidURLError(message=f"Invalid URL: {exc}", url=url, cause=exc) from exc
        except httpx.HTTPError as exc:
            pipeline.fail()
            raise self._map_transport_error(exc, method, url, start) from exc

        info = pipeline.info
        duration_ms = (time.perf_counter() - start) * 1000
        self._logger.info(
            "request.completed",
            method=method,
            url=info.url,
            status_code=info.status_code,
            charset=info.charset,
            content_encoding=info.content_encoding,
            size_bytes=info.content_length,
            duration_ms=round(duration_ms, 2),
        )
        return result, info

    def _map_transport_error(
        self, exc: httpx.HTTPError, method: str, url: str, start: float
    ) -> FetchError:
        """Convert an httpx failure into the matching httptext exception."""
        duration_ms = (time.perf_counter() - start) * 1000
        error: FetchError

        if isinstance(exc, httpx.TimeoutException):
            timeout_type = "unknown"
            seconds = None
            if isinstance(exc, httpx.ConnectTimeout):
                timeout_type, seconds = "connect", self.settings.timeouts.connect
            elif isinstance(exc, httpx.ReadTimeout):
                timeout_type, seconds = "read", self.settings.timeouts.read
            elif isinstance(exc, httpx.WriteTimeout):
                timeout_type, seconds = "write", self.settings.timeouts.write
            elif isinstance(exc, httpx.PoolTimeout):
                timeout_type, seconds = "pool", self.settings.timeouts.pool
            error_type = "timeout"
            error = FetchTimeoutError(
                message=f"Request timed out ({timeout_type}) after {duration_ms:.0f} ms",
                url=url,
                timeout_type=timeout_type,
                timeout_seconds=seconds,
                elapsed_ms=duration_ms,
                cause=exc,
            )
        elif isinstance(exc, httpx.ConnectError):
            parsed_url = httpx.URL(url)
            if any(marker in str(exc) for marker in _DNS_FAILURE_MARKERS):
                error_type = "dns_error"
                error = DNSResolutionError(
                    message=f"DNS resolution failed: {exc}",
                    url=url,
                    hostname=parsed_url.host,
                    cause=exc,
                )
            else:
                error_type = "connection_error"
                error = FetchConnectionError(
                    message=f"Connection failed: {exc}",
                    url=url,
                    host=parsed_url.host,
                    port=parsed_url.port,
                    cause=exc,
                )
        elif isinstance(exc, httpx.UnsupportedProtocol):
            error_type = "invalid_url"
            error = InvalidURLError(message=f"Unsupported URL: {exc}", url=url, cause=exc)
        elif isinstance(exc, httpx.TooManyRedirects):
            error_type = "too_many_redirects"
            error = TooManyRedirectsError(
                message="",
                url=url,
                max_redirects=self.settings.max_redirects,
                cause=exc,
            )
        else:
            error_type = "network_error"
            error = NetworkError(message=f"Request failed: {exc}", url=url, cause=exc)

        self._logger.error(
            "request.failed",
            method=method,
            url=url,
            error_type=error_type,
            duration_ms=round(duration_ms, 2),
            exc_info=exc,
        )
        return error
