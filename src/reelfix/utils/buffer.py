"""Bounds-checked, big-endian byte buffer."""

import struct

from reelfix.errors import FieldOverflowError, OutOfBoundsError

_U32 = struct.Struct(">I")
_U64 = struct.Struct(">Q")


class ByteBuffer:
    """Owned, fixed-length, mutable byte sequence.

    The constructor copies its input, so patching a ByteBuffer never touches
    the caller's bytes. All multi-byte accessors are big-endian, as ISO-BMFF
    stores every integer field that way. Writes happen in place and the
    buffer never grows or shrinks.

    Raises:
        OutOfBoundsError: On any access with offset + width past the end.
        FieldOverflowError: When a written value does not fit the field.
    """

    __slots__ = ("_data",)

    def __init__(self, data: bytes | bytearray | memoryview):
        self._data = bytearray(data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ByteBuffer(length={len(self._data)})"

    def _check(self, offset: int, width: int) -> None:
        if offset < 0 or offset + width > len(self._data):
            raise OutOfBoundsError(offset, width, len(self._data))

    def read_u8(self, offset: int) -> int:
        self._check(offset, 1)
        return self._data[offset]

    def read_u32(self, offset: int) -> int:
        self._check(offset, 4)
        return _U32.unpack_from(self._data, offset)[0]

    def read_u64(self, offset: int) -> int:
        self._check(offset, 8)
        return _U64.unpack_from(self._data, offset)[0]

    def read_tag(self, offset: int) -> str:
        """Read a four-character box tag."""
        self._check(offset, 4)
        return self._data[offset : offset + 4].decode("latin-1")

    def write_u32(self, offset: int, value: int) -> None:
        self._check(offset, 4)
        if not 0 <= value <= 0xFFFFFFFF:
            raise FieldOverflowError(f"{value} does not fit a 32-bit field at offset {offset}")
        _U32.pack_into(self._data, offset, value)

    def write_u64(self, offset: int, value: int) -> None:
        self._check(offset, 8)
        if not 0 <= value <= 0xFFFFFFFFFFFFFFFF:
            raise FieldOverflowError(f"{value} does not fit a 64-bit field at offset {offset}")
        _U64.pack_into(self._data, offset, value)

    def find(self, needle: bytes, start: int = 0) -> int:
        """Return the index of needle at or after start, or -1."""
        return self._data.find(needle, start)

    def to_bytes(self) -> bytes:
        """Return an immutable copy of the current contents."""
        return bytes(self._data)
