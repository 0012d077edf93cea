"""
One-shot helpers: each call opens a short-lived client, performs a single
request and closes the client again.

Example:
    import httptext

    html = await httptext.fetch_text("https://example.com/")
    data = await httptext.fetch_json("https://example.com/api?callback=cb")
    size = await httptext.wget("https://example.com/logo.png", "images/")
"""

from __future__ import annotations
from typing import Any, Optional

from .clients.data import DataFetch
from .clients.file import Destination, FileFetch
from .models.config import FetchSettings
from .models.options import FetchOptions, Target
from .models.results import FetchResult

__all__ = [
    "fetch",
    "fetch_text",
    "fetch_binary",
    "fetch_json",
    "fetch_to_file",
    "wget",
]


async def fetch(
    target: Target,
    options: Optional[FetchOptions] = None,
    settings: Optional[FetchSettings] = None,
) -> FetchResult:
    async with DataFetch(settings) as client:
        return await client.fetch(target, options)


async def fetch_text(
    target: Target,
    options: Optional[FetchOptions] = None,
    settings: Optional[FetchSettings] = None,
) -> str:
    async with DataFetch(settings) as client:
        return await client.fetch_text(target, options)


async def fetch_binary(
    target: Target,
    options: Optional[FetchOptions] = None,
    settings: Optional[FetchSettings] = None,
) -> bytes:
    async with DataFetch(settings) as client:
        return await client.fetch_binary(target, options)


async def fetch_json(
    target: Target,
    options: Optional[FetchOptions] = None,
    settings: Optional[FetchSettings] = None,
) -> Any:
    async with DataFetch(settings) as client:
        return await client.fetch_json(target, options)


async def fetch_to_file(
    target: Target,
    destination: Destination = None,
    options: Optional[FetchOptions] = None,
    settings: Optional[FetchSettings] = None,
) -> int:
    """Stream a body to a path, a directory, or a writable; returns bytes written."""
    async with FileFetch(settings) as client:
        return await client.fetch_to_file(target, destination, options)


wget = fetch_to_file
