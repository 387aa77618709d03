"""
Text/binary sniffing for file contents.
"""

from __future__ import annotations

import enum

# Only the head of a file is scanned for NUL bytes
_BINARY_SCAN_BYTES = 1024

_BOMS = (
    # UTF-32 marks first: FF FE 00 00 also starts with the UTF-16LE mark
    (b"\x00\x00\xfe\xff", "UTF_32BE"),
    (b"\xff\xfe\x00\x00", "UTF_32LE"),
    (b"\xef\xbb\xbf", "UTF_8_BOM"),
    (b"\xff\xfe", "UTF_16LE"),
    (b"\xfe\xff", "UTF_16BE"),
)

_BINARY_MAGIC = (b"%PDF-",)


class ContentType(enum.Enum):
    BINARY = "binary"
    UTF_8 = "utf-8"
    UTF_8_BOM = "utf-8-bom"
    UTF_16LE = "utf-16le"
    UTF_16BE = "utf-16be"
    UTF_32LE = "utf-32le"
    UTF_32BE = "utf-32be"


TEXT_TYPES = frozenset({ContentType.UTF_8, ContentType.UTF_16LE, ContentType.UTF_16BE})


def inspect(data: bytes) -> ContentType:
    """Guess the content type of *data* from its byte-order mark and head."""
    for bom, name in _BOMS:
        if data.startswith(bom):
            return ContentType[name]

    if b"\0" in data[:_BINARY_SCAN_BYTES] or data.startswith(_BINARY_MAGIC):
        return ContentType.BINARY

    return ContentType.UTF_8


def is_text(data: bytes) -> bool:
    return inspect(data) in TEXT_TYPES
