"""
Shared fixtures: hermetic HTTP via httpx.MockTransport.

Handlers receive an httpx.Request and return an httpx.Response; they may be
plain functions or coroutines. Bodies passed as bytes carry a Content-Length,
bodies built with chunked() arrive in several pieces without one.
"""

from __future__ import annotations

from typing import AsyncIterator, Callable

import httpx
import pytest

from httptext import FetchSettings


async def _iterate(parts: tuple[bytes, ...]) -> AsyncIterator[bytes]:
    for part in parts:
        yield part


class _Body(httpx.AsyncByteStream):
    """Streaming body that yields a fixed payload, so aiter_raw() can read it."""

    def __init__(self, content: bytes) -> None:
        self._content = content

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield self._content


def chunked(*parts: bytes) -> AsyncIterator[bytes]:
    """Streaming body delivered in the given pieces, length unknown up front."""
    return _iterate(parts)


class RecordingHandler:
    """Route table for MockTransport that remembers every request it served."""

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[path] = handler

    def respond(
        self,
        path: str,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
        status_code: int = 200,
    ) -> None:
        """Serve a fixed response at path."""
        self.routes[path] = lambda request: httpx.Response(
            status_code,
            headers={"Content-Length": str(len(content)), **(headers or {})},
            stream=_Body(content),
        )

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, content=b"not found")
        result = handler(request)
        if hasattr(result, "__await__"):
            result = await result
        return result


@pytest.fixture
def server() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def settings(server: RecordingHandler) -> FetchSettings:
    return FetchSettings(http2=False, transport=httpx.MockTransport(server))
