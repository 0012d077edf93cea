"""Byte-order mark detection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

__all__ = ["BomMatch", "detect_bom"]


@dataclass(frozen=True)
class BomMatch:
    encoding: str
    length: int


# Order matters: the UTF-32LE mark starts with the UTF-16LE one.
_BOMS: tuple[tuple[bytes, str], ...] = (
    (b"\x00\x00\xfe\xff", "utf-32be"),
    (b"\xff\xfe\x00\x00", "utf-32le"),
    (b"\xfe\xff", "utf-16be"),
    (b"\xff\xfe", "utf-16le"),
    (b"\xef\xbb\xbf", "utf-8"),
)

_UTF7_PREFIX = b"+/v"
_UTF7_FOURTH = frozenset(b"+/89")


def detect_bom(data: bytes) -> Optional[BomMatch]:
    """
    Report the encoding announced by a leading byte-order mark, if any.

    Only the first four bytes are examined. Fewer than two bytes never match.
    """
    if not data or len(data) < 2:
        return None

    head = bytes(data[:4])

    for mark, encoding in _BOMS:
        if head.startswith(mark):
            return BomMatch(encoding, len(mark))

    if head.startswith(_UTF7_PREFIX) and len(head) == 4 and head[3] in _UTF7_FOURTH:
        return BomMatch("utf-7", 4)

    return None
