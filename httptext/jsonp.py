"""JSON and JSONP parsing of already-decoded response text."""

from __future__ import annotations

import json
import re
from typing import Any, Optional, Tuple

from .exceptions import InvalidJSONError

__all__ = ["parse_json_or_jsonp"]

_LEADING_COMMENT = re.compile(r"/\*.*\*/\s*(?=.*\()")
_JSONP_CALL = re.compile(r"([A-Za-z$_][0-9A-Za-z$_.]*)\s*\(((?s:.*))\)")


def parse_json_or_jsonp(text: str, url: Optional[str] = None) -> Tuple[Any, Optional[str]]:
    """
    Parse text as JSON, falling back to a JSONP callback wrapper.

    Returns:
        Tuple of (parsed value, JSONP callback name or None)

    Raises:
        InvalidJSONError: when neither form parses
    """
    if not text.startswith("/*"):
        try:
            return json.loads(text), None
        except ValueError:
            pass

    # Possibly JSONP, optionally preceded by a comment.
    stripped = _LEADING_COMMENT.sub("", text, count=1)
    m = _JSONP_CALL.search(stripped)
    if m:
        try:
            return json.loads(m.group(2).strip()), m.group(1)
        except ValueError as exc:
            raise InvalidJSONError(message="", url=url, cause=exc) from exc

    raise InvalidJSONError(message="", url=url)
