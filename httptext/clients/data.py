from __future__ import annotations
import time
from typing import Any, Optional

from .base import BaseFetch
from ..models.options import FetchOptions, Target
from ..models.results import FetchResult, ResponseInfo
from ..exceptions import InvalidSettingsError
from ..jsonp import parse_json_or_jsonp
from ..utils import maybe_await, normalize_charset, normalize_content_type


class DataFetch(BaseFetch):
    """
    Async HTTP client returning response bodies in memory.

    Responsibilities:
      - Content decompression (gzip/deflate/br)
      - Charset resolution: forced encoding, BOM, Content-Type, embedded
        declaration, caller default
      - Decode to str for text; keep bytes for binary
      - JSON / JSONP parsing on top of decoded text

    Example:
        async with DataFetch() as client:
            text = await client.fetch_text("https://example.com/page.html")
            data = await client.fetch_json("https://example.com/data.json")
    """

    async def fetch(self, target: Target, options: Optional[FetchOptions] = None) -> FetchResult:
        """
        Fetch and classify: text-like content types are decoded, everything
        else is returned as bytes.

        Args:
            target: URL string, httpx.URL or RequestTarget
            options: Per-call request descriptor

        Returns:
            FetchResult with either text or bytes_ set
        """
        start = time.perf_counter()
        body, info = await self.request(target, options, mode="auto")
        duration_ms = int((time.perf_counter() - start) * 1000)

        is_text = isinstance(body, str)
        return FetchResult(
            url=info.url,
            status_code=info.status_code,
            headers=info.headers,
            content_type=normalize_content_type(info.content_type),
            kind="text" if is_text else "binary",
            text=body if is_text else None,
            bytes_=None if is_text else body,
            charset=info.charset,
            duration_ms=duration_ms,
            size_bytes=info.content_length,
            info=info,
        )

    async def fetch_text(self, target: Target, options: Optional[FetchOptions] = None) -> str:
        """
        Fetch and decode the body as text, whatever the Content-Type.

        Raises:
            InvalidSettingsError: if options.encoding is "binary"
        """
        options = options or FetchOptions()
        if options.encoding and normalize_charset(options.encoding) == "binary":
            raise InvalidSettingsError(
                message="Binary encoding not permitted. Please use fetch_binary.",
                setting_name="encoding",
                setting_value=options.encoding,
            )

        text, _ = await self.request(target, options, mode="text")
        return text

    async def fetch_binary(self, target: Target, options: Optional[FetchOptions] = None) -> bytes:
        """Fetch the body as raw bytes; no charset logic runs."""
        data, _ = await self.request(target, options, mode="binary")
        return data

    async def fetch_json(self, target: Target, options: Optional[FetchOptions] = None) -> Any:
        """
        Fetch text and parse it as JSON, or as JSONP when wrapped in a callback.

        The JSONP callback name, if any, is reported via ResponseInfo.callback;
        the response_info observer is called after parsing.

        Raises:
            InvalidJSONError: when no valid JSON is found
        """
        options = options or FetchOptions()
        observer = options.response_info
        captured: list[ResponseInfo] = []

        text = await self.fetch_text(target, options.merge(response_info=captured.append))
        info = captured[0]
        value, callback = parse_json_or_jsonp(text, url=info.url)

        if observer:
            info.callback = callback
            await maybe_await(observer(info))

        return value
