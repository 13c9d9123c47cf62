"""
Bounds-Checked Byte View
=========================

:class:`ByteView` wraps a raw buffer (``bytes``, ``bytearray`` or
``mmap.mmap``) and exposes typed little-endian field
readers.  Every accessor validates the byte range it touches before
decoding, so no read can go past the end of the buffer: an out-of-range
request raises :class:`~undefsym.core.errors.OutOfBoundsError` instead.

The view never writes to the buffer.
"""

from __future__ import annotations

import struct
from typing import Any

from undefsym.core.errors import OutOfBoundsError


_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


class ByteView:
    """Read-only, bounds-checked accessor over a byte buffer.

    Args:
        data: The buffer to read from.
        name: Label used in error messages (normally the file path).
    """

    __slots__ = ("_data", "_size", "name")

    def __init__(self, data: Any, name: str = "<buffer>") -> None:
        self._data = data
        self._size: int = len(data)
        self.name = name

    def __len__(self) -> int:
        return self._size

    @property
    def size(self) -> int:
        """Length of the underlying buffer in bytes."""
        return self._size

    # ------------------------------------------------------------------ #
    #  Range checks
    # ------------------------------------------------------------------ #

    def fits(self, start: int, length: int) -> bool:
        """Return ``True`` if ``[start, start + length)`` lies in the buffer."""
        return start >= 0 and length >= 0 and start + length <= self._size

    def require(
        self,
        start: int,
        length: int,
        what: str = "read",
        error: type[OutOfBoundsError] = OutOfBoundsError,
    ) -> None:
        """Raise *error* unless ``[start, start + length)`` is in bounds.

        Args:
            start:  First byte of the range.
            length: Number of bytes in the range.
            what:   Description of the structure, for the error message.
            error:  Which :class:`OutOfBoundsError` subclass to raise.
        """
        if not self.fits(start, length):
            raise error(self.name, start, start + length, self._size, what=what)

    # ------------------------------------------------------------------ #
    #  Typed readers
    # ------------------------------------------------------------------ #

    def unpack(self, fmt: struct.Struct, offset: int) -> tuple[Any, ...]:
        """Decode a precompiled :class:`struct.Struct` at *offset*."""
        self.require(offset, fmt.size, what=f"{fmt.size}-byte record")
        return fmt.unpack_from(self._data, offset)

    def read_u8(self, offset: int) -> int:
        return self.unpack(_U8, offset)[0]

    def read_u16(self, offset: int) -> int:
        return self.unpack(_U16, offset)[0]

    def read_u32(self, offset: int) -> int:
        return self.unpack(_U32, offset)[0]

    def read_u64(self, offset: int) -> int:
        return self.unpack(_U64, offset)[0]

    def read_bytes(self, offset: int, length: int) -> bytes:
        """Copy *length* bytes starting at *offset*."""
        self.require(offset, length)
        return bytes(self._data[offset:offset + length])

    def read_cstring(
        self,
        table_start: int,
        table_size: int,
        offset: int,
        error: type[OutOfBoundsError] = OutOfBoundsError,
    ) -> str:
        """Read a NUL-terminated string from a table inside the buffer.

        The string must start inside the table and its terminator must
        also lie inside the table.

        Args:
            table_start: File offset of the string table.
            table_size:  Size of the string table in bytes.
            offset:      Offset of the string relative to *table_start*.
            error:       Which :class:`OutOfBoundsError` subclass to raise.

        Returns:
            The decoded string (UTF-8, undecodable bytes replaced).

        Raises:
            OutOfBoundsError: If the table itself, the string start, or the
                terminator falls outside the permitted range.
        """
        self.require(table_start, table_size, what="string table", error=error)
        table_end = table_start + table_size
        start = table_start + offset
        if offset < 0 or offset >= table_size:
            raise error(
                self.name, offset, offset + 1, table_size,
                what=f"string at table offset {offset}",
                limit="string table size is only",
            )
        end = self._data.find(b"\x00", start, table_end)
        if end == -1:
            raise error(
                self.name, start, table_end + 1, table_end,
                what=f"unterminated string at table offset {offset}",
                limit="string table ends at byte",
            )
        return bytes(self._data[start:end]).decode("utf-8", errors="replace")
