"""
Sniffing of in-content encoding declarations.

Markup and stylesheets may declare their own charset near the top of the
file. Those declarations are plain ASCII, so the prefix can be scanned as
ASCII text regardless of the real encoding, as long as the body is not a
16 or 32-bit encoding (checked first from the position of zero bytes).
"""

from __future__ import annotations

import re
from typing import Optional

__all__ = ["MAX_EXAMINE", "sniff_embedded_encoding"]

MAX_EXAMINE = 2048

_NEWLINES = re.compile(r"[\r\n]+")
_COMMENT = re.compile(r"<!--.*?-->")
_TAG = re.compile(r"<[^>]*>")

_XML_DECL = re.compile(r"^<\?xml\b")
_XML_ENCODING = re.compile(r"\bencoding\s*=\s*['\"]\s*([\w\-]+)\b")
_META = re.compile(r"^<meta\b")
_META_CHARSET = re.compile(r"\bcharset\s*=\s*['\"]?\s*([\w\-]+)\b")
_HTTP_EQUIV_CONTENT_TYPE = re.compile(r"\bhttp-equiv\s*=\s*['\"]?\s*content-type\b")
_META_CONTENT_CHARSET = re.compile(r"\bcontent\s*=\s*['\"]?.*;\s*charset\s*=\s*([\w\-]+)\b")
_CSS_CHARSET = re.compile(r"@charset\s+['\"]\s*([\w\-]+)\b")


def _guess_wide_encoding(data: bytes) -> Optional[str]:
    # Missing bytes compare unequal to zero.
    b0, b1, b2, b3 = (list(data[:4]) + [None] * 4)[:4]

    if b0 == 0 and b1 == 0 and (b2 != 0 or b3 != 0):
        return "utf-32be"
    if (b0 != 0 or b1 != 0) and b2 == 0 and b3 == 0:
        return "utf-32le"
    if b0 == 0 and b1 != 0:
        return "utf-16be"
    if b0 != 0 and b1 == 0:
        return "utf-16le"
    return None


def _scan_tags(tag_text: str) -> Optional[str]:
    for tag in _TAG.findall(tag_text):
        if tag.startswith("</"):
            continue

        if _XML_DECL.match(tag):
            m = _XML_ENCODING.search(tag)
            if m:
                return m.group(1)
        elif _META.match(tag):
            m = _META_CHARSET.search(tag)
            if m:
                return m.group(1)
            if _HTTP_EQUIV_CONTENT_TYPE.search(tag):
                m = _META_CONTENT_CHARSET.search(tag)
                if m:
                    return m.group(1)
    return None


def sniff_embedded_encoding(data: bytes) -> Optional[str]:
    """
    Look for a declared encoding in the first MAX_EXAMINE bytes of a body.

    Checks, in order: the 16/32-bit width heuristic, an XML declaration, an
    HTML <meta charset> or http-equiv Content-Type tag (the first matching tag
    wins, comments are ignored), and finally a CSS @charset rule opening the
    file, with nothing before it (not even whitespace or a comment). Returns
    the declared name, lower-cased, or None.
    """
    if not data:
        return None

    wide = _guess_wide_encoding(data)
    if wide:
        return wide

    text = bytes(data[:MAX_EXAMINE]).decode("ascii", errors="replace").lower()
    tag_text = _COMMENT.sub("", _NEWLINES.sub(" ", text)).strip()

    declared = _scan_tags(tag_text)
    if declared:
        return declared

    # @charset counts only as the very first bytes of the stylesheet.
    m = _CSS_CHARSET.match(text)
    if m:
        return m.group(1)

    return None
