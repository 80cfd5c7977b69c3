"""
Sequential byte reader over an in-memory Encore buffer.

The byte order is not known until the header's magic tag has been read,
so it can be switched after construction.
"""

import struct

from encscore.models.score import ByteOrder
from encscore.utils.validation import TruncatedDataError


class ByteCursor:
    """
    Endian-aware cursor with fixed-width reads and skips.

    Reads past the end raise TruncatedDataError. Skips past the end stop
    at the end of the buffer.

    Example:
        cursor = ByteCursor(data)
        magic = cursor.read_bytes(4)
        cursor.byte_order = ByteOrder.BIG
        count = cursor.read_u16()
    """

    def __init__(self, data: bytes, byte_order: ByteOrder = ByteOrder.LITTLE):
        self.data = bytes(data)
        self.pos = 0
        self.byte_order = byte_order

    def __len__(self) -> int:
        return len(self.data)

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def _prefix(self) -> str:
        return ">" if self.byte_order == ByteOrder.BIG else "<"

    def read_bytes(self, count: int) -> bytes:
        if count > self.remaining:
            raise TruncatedDataError(self.pos, count, self.remaining)
        chunk = self.data[self.pos : self.pos + count]
        self.pos += count
        return chunk

    def _unpack(self, fmt: str) -> int:
        size = struct.calcsize(fmt)
        return struct.unpack(self._prefix() + fmt, self.read_bytes(size))[0]

    def read_u8(self) -> int:
        return self._unpack("B")

    def read_i8(self) -> int:
        return self._unpack("b")

    def read_u16(self) -> int:
        return self._unpack("H")

    def read_i16(self) -> int:
        return self._unpack("h")

    def read_u32(self) -> int:
        return self._unpack("I")

    def read_u16_le(self) -> int:
        """Read a little-endian word regardless of the stream byte order."""
        return struct.unpack("<H", self.read_bytes(2))[0]

    def peek(self, count: int) -> bytes:
        return self.data[self.pos : self.pos + count]

    def skip(self, count: int) -> int:
        """
        Skip up to count bytes. Non-positive counts are ignored.

        Returns:
            Number of bytes actually skipped
        """
        if count <= 0:
            return 0
        skipped = min(count, self.remaining)
        self.pos += skipped
        return skipped
