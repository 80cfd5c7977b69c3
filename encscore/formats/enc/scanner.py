"""
Block tag scanner.

Encore files are a header followed by tagged blocks ("LINE", "MEAS",
"TITL", "TEXT", "TKnn", ...), each followed by a u32 size. Sizes are not
always trustworthy and some block kinds are not decoded at all, so the
scanner looks for the next tag it knows and slides one byte at a time
until it finds one.
"""

import logging
from typing import Optional

from encscore.formats.enc.cursor import ByteCursor

logger = logging.getLogger(__name__)


def is_instrument_tag(tag: bytes) -> bool:
    """Check for "TK<digit><digit>" (typically TK00)."""
    return (
        len(tag) == 4
        and tag[:2] == b"TK"
        and 0x30 <= tag[2] <= 0x39
        and 0x30 <= tag[3] <= 0x39
    )


class BlockScanner:
    """
    Finds the next known block tag in a cursor.

    Example:
        scanner = BlockScanner(cursor)
        tag = scanner.next_tag()   # "MEAS", "TK00", ... or None at end
    """

    KNOWN_TAGS = (b"LINE", b"MEAS", b"TITL", b"TEXT")

    def __init__(self, cursor: ByteCursor, diagnostics: Optional[logging.Logger] = None):
        self.cursor = cursor
        self.log = diagnostics or logger

    @classmethod
    def is_known_tag(cls, tag: bytes) -> bool:
        return tag in cls.KNOWN_TAGS or is_instrument_tag(tag)

    def next_tag(self) -> Optional[str]:
        """
        Read up to the next known tag.

        Returns:
            The tag as a string with the cursor just after it, or None when
            the buffer ends without another known tag.
        """
        cursor = self.cursor
        start = cursor.pos
        window = bytearray()

        while len(window) < 4 and not cursor.at_end():
            window.append(cursor.read_u8())

        while not self.is_known_tag(bytes(window)) and not cursor.at_end():
            del window[0]
            window.append(cursor.read_u8())

        if not self.is_known_tag(bytes(window)):
            if cursor.pos > start:
                self.log.debug("no further blocks after 0x%X", start)
            return None

        tag_offset = cursor.pos - 4
        if tag_offset > start:
            self.log.debug(
                "resynchronized: skipped %d bytes at 0x%X", tag_offset - start, start
            )
        tag = bytes(window).decode("ascii")
        self.log.debug("filepos 0x%X tag %s", tag_offset, tag)
        return tag
