from __future__ import annotations
import os
import time
from typing import Any, Optional, Union
from pathlib import Path

import aiofiles
import httpx

from .base import BaseFetch
from ..models.config import FetchSettings
from ..models.options import FetchOptions, Target, build_url
from ..exceptions import InvalidDestinationError

Destination = Union[str, os.PathLike, Any, None]


def file_name_from_url(url: str) -> str:
    """Last segment of the URL path, ignoring a trailing slash ("" if none)."""
    path = httpx.URL(url).path.rstrip("/")
    return path.rsplit("/", 1)[-1]


class FileFetch(BaseFetch):
    """
    Async client streaming response bodies to a file or a writable sink.

    The body is decompressed but never decoded: bytes land on disk as the
    server meant them after Content-Encoding is undone.

    Example:
        async with FileFetch(download_dir=Path("downloads")) as client:
            n = await client.fetch_to_file("https://example.com/archive.zip")

        # Into an explicit directory; the name comes from the URL
        async with FileFetch() as client:
            await client.fetch_to_file("https://example.com/a/report.csv", "out/")
    """

    def __init__(
        self,
        settings: Optional[FetchSettings] = None,
        download_dir: Optional[Path] = None,
    ):
        """
        Initialize FileFetch client.

        Args:
            settings: Fetch settings
            download_dir: Directory used when no destination is given (default: cwd)
        """
        super().__init__(settings)
        self.download_dir = Path(download_dir) if download_dir else Path.cwd()

    def resolve_path(self, url: str, destination: Destination) -> Path:
        """
        Work out the output file path for a URL and a path-like destination.

        Raises:
            InvalidDestinationError: if no file name can be derived
        """
        url_file = file_name_from_url(url)

        if destination is None:
            if not url_file:
                raise InvalidDestinationError(message="", url=url)
            return self.download_dir / url_file

        raw = os.fspath(destination)
        if not raw:
            raise InvalidDestinationError(message="", url=url, destination=raw)

        is_dir = raw.endswith(("/", os.sep)) or Path(raw).is_dir()
        if is_dir:
            if not url_file:
                raise InvalidDestinationError(message="", url=url, destination=raw)
            return Path(raw) / url_file
        return Path(raw)

    async def fetch_to_file(
        self,
        target: Target,
        destination: Destination = None,
        options: Optional[FetchOptions] = None,
    ) -> int:
        """
        Stream a response body to a file path or writable sink.

        Args:
            target: URL string, httpx.URL or RequestTarget
            destination: File path, directory path, object with write(), or None
            options: Per-call request descriptor (encoding options are ignored)

        Returns:
            Number of bytes written (after decompression)

        Raises:
            InvalidDestinationError: no usable destination, raised before any
                network activity
            HTTPError: status outside 200-299; a created file is removed
        """
        url = build_url(target)

        # A caller-owned sink: written to, never closed.
        if destination is not None and hasattr(destination, "write"):
            self._logger.info("file_fetch.started", url=url, destination="<sink>")
            written, _ = await self.request(target, options, mode="sink", sink=destination)
            self._logger.info("file_fetch.completed", url=url, bytes_written=written)
            return written

        path = self.resolve_path(url, destination)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = await aiofiles.open(path, "wb")
        except OSError as exc:
            raise InvalidDestinationError(
                message=f"Cannot open {path} for writing: {exc}",
                url=url,
                destination=str(path),
                cause=exc,
            ) from exc

        self._logger.info("file_fetch.started", url=url, destination=str(path))
        start = time.perf_counter()

        try:
            written, _ = await self.request(target, options, mode="sink", sink=fh)
        except BaseException:
            await fh.close()
            path.unlink(missing_ok=True)
            self._logger.debug("file_fetch.removed_partial", path=str(path))
            raise
        await fh.close()

        self._logger.info(
            "file_fetch.completed",
            url=url,
            destination=str(path),
            bytes_written=written,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return written
