from __future__ import annotations
from typing import Optional
import inspect
import re

import httpx

__all__ = [
    "normalize_content_type",
    "extract_charset",
    "normalize_charset",
    "is_binary_content_type",
    "parse_content_length",
    "maybe_await",
]

_CHARSET_PARAM = re.compile(r"\bcharset\s*=\s*['\"]?\s*([\w\-]+)\b", re.IGNORECASE)
_HAS_CHARSET = re.compile(r";\s*charset\s*=", re.IGNORECASE)
_TEXTUAL_APPLICATION = re.compile(r"^(javascript|ecmascript|json|ld\+json|rtf)$", re.IGNORECASE)

_CHARSET_ALIASES = {
    "utf8": "utf-8",
}

def normalize_content_type(content_type: Optional[str]) -> Optional[str]:
        """MIME type without parameters, lower-cased."""
        return content_type.split(";")[0].strip().lower() if content_type else None

def extract_charset(content_type: Optional[str]) -> Optional[str]:
        if not content_type:
            return None
        m = _CHARSET_PARAM.search(content_type)
        return normalize_charset(m.group(1)) if m else None

def normalize_charset(charset: str) -> str:
        charset = charset.strip().lower()
        return _CHARSET_ALIASES.get(charset, charset)

def is_binary_content_type(content_type: str) -> bool:
        """
        Decide from a Content-Type value alone whether the body is opaque binary.

        An explicit charset parameter always means text, whatever the MIME type.
        """
        if _HAS_CHARSET.search(content_type):
            return False

        mime = normalize_content_type(content_type) or ""

        if mime.startswith("text/") or mime.endswith("+xml"):
            return False
        if mime.startswith("application/"):
            return not _TEXTUAL_APPLICATION.match(mime[len("application/"):])
        return True

def parse_content_length(hdrs: httpx.Headers) -> Optional[int]:
        value = hdrs.get("Content-Length")
        if value is None:
            return None
        try:
            length = int(value.strip())
        except ValueError:
            return None
        return length if length >= 0 else None

async def maybe_await(result):
        """Await value if it is awaitable, otherwise return as-is."""
        if inspect.isawaitable(result):
            return await result
        return result
