"""
Big-Endian Byte Reader
=======================

Sequential cursor over an immutable byte buffer.  All multi-byte values
in a class file are stored big-endian (network byte order), so every
integer read here unpacks with the ``>`` :mod:`struct` prefix.

A read either returns exactly the requested number of bytes or raises
:class:`~jinspect.core.errors.UnexpectedEof`; the cursor never advances
on a failed read.
"""

from __future__ import annotations

import struct
from typing import Optional

from jinspect.core.errors import InvalidText, UnexpectedEof

_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")


class ByteReader:
    """Position-advancing reader over a ``bytes`` object.

    Usage::

        reader = ByteReader(path.read_bytes())
        magic = reader.read_u32("magic")
        minor = reader.read_u16("minor_version")
    """

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes) -> None:
        self._data: bytes = bytes(data)
        self._pos: int = 0

    # ------------------------------------------------------------------ #
    #  Cursor state
    # ------------------------------------------------------------------ #

    @property
    def position(self) -> int:
        """Offset of the next unread byte."""
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def seek(self, offset: int) -> None:
        """Move the cursor to an absolute *offset* within the buffer.

        Raises:
            UnexpectedEof: If *offset* lies beyond the end of the buffer.
        """
        if offset < 0:
            raise ValueError(f"negative offset: {offset}")
        if offset > len(self._data):
            raise UnexpectedEof(
                offset - self._pos,
                self.remaining,
                offset=self._pos,
            )
        self._pos = offset

    # ------------------------------------------------------------------ #
    #  Primitive reads
    # ------------------------------------------------------------------ #

    def _require(self, count: int, field: Optional[str]) -> None:
        if count < 0:
            raise ValueError(f"negative read length: {count}")
        if self.remaining < count:
            raise UnexpectedEof(
                count, self.remaining, offset=self._pos, field=field
            )

    def read_u8(self, field: Optional[str] = None) -> int:
        self._require(1, field)
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_u16(self, field: Optional[str] = None) -> int:
        self._require(2, field)
        (value,) = _U16.unpack_from(self._data, self._pos)
        self._pos += 2
        return value

    def read_u32(self, field: Optional[str] = None) -> int:
        self._require(4, field)
        (value,) = _U32.unpack_from(self._data, self._pos)
        self._pos += 4
        return value

    def read_bytes(self, count: int, field: Optional[str] = None) -> bytes:
        """Read exactly *count* raw bytes."""
        self._require(count, field)
        chunk = self._data[self._pos : self._pos + count]
        self._pos += count
        return chunk

    def read_utf8(self, count: int, field: Optional[str] = None) -> str:
        """Read *count* bytes and decode them as UTF-8.

        Class files actually store "modified UTF-8"; the two encodings
        agree for every string without NUL or supplementary characters,
        which covers the names and descriptors this tool displays.

        Raises:
            UnexpectedEof: Fewer than *count* bytes remain.
            InvalidText: The bytes are not well-formed UTF-8.  The cursor
                is left after the consumed bytes.
        """
        start = self._pos
        raw = self.read_bytes(count, field)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidText(
                f"malformed UTF-8 at byte {exc.start}: {exc.reason}",
                offset=start + exc.start,
                field=field,
            ) from exc
