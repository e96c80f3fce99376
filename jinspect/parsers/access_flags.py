"""
Access Flags
=============

A 16-bit access mask means different things depending on where it is
declared: bit ``0x0020`` is ``super`` on a class but ``synchronized`` on a
method, and ``0x0040`` is ``volatile`` on a field but ``bridge`` on a
method.  :class:`AccessFlags` therefore pairs the raw mask with an
:class:`AccessContext` that selects the label table.

Labels are lower-case and joined with a single space, in table order::

    >>> AccessFlags(0x0021, AccessContext.CLASS).label_string()
    'public super'
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from jinspect.parsers.reader import ByteReader


class AccessContext(str, enum.Enum):
    """Declaration context selecting a label table."""
    CLASS = "class"
    FIELD = "field"
    METHOD = "method"


CLASS_FLAGS: tuple[tuple[str, int], ...] = (
    ("public", 0x0001),
    ("final", 0x0010),
    ("super", 0x0020),
    ("interface", 0x0200),
    ("abstract", 0x0400),
    ("synthetic", 0x1000),
    ("annotation", 0x2000),
    ("enum", 0x4000),
)

FIELD_FLAGS: tuple[tuple[str, int], ...] = (
    ("public", 0x0001),
    ("private", 0x0002),
    ("protected", 0x0004),
    ("static", 0x0008),
    ("final", 0x0010),
    ("volatile", 0x0040),
    ("transient", 0x0080),
    ("synthetic", 0x1000),
    ("enum", 0x4000),
)

METHOD_FLAGS: tuple[tuple[str, int], ...] = (
    ("public", 0x0001),
    ("private", 0x0002),
    ("protected", 0x0004),
    ("static", 0x0008),
    ("final", 0x0010),
    ("synchronized", 0x0020),
    ("bridge", 0x0040),
    ("varargs", 0x0080),
    ("native", 0x0100),
    ("abstract", 0x0400),
    ("strict", 0x0800),
    ("synthetic", 0x1000),
)

FLAG_TABLES: dict[AccessContext, tuple[tuple[str, int], ...]] = {
    AccessContext.CLASS: CLASS_FLAGS,
    AccessContext.FIELD: FIELD_FLAGS,
    AccessContext.METHOD: METHOD_FLAGS,
}

LABEL_DELIMITER: str = " "


@dataclass(frozen=True, slots=True)
class AccessFlags:
    """A raw access mask tagged with its declaration context."""
    mask: int
    context: AccessContext

    @classmethod
    def parse(cls, context: AccessContext, reader: ByteReader) -> AccessFlags:
        """Read one u16 mask from *reader* and tag it with *context*."""
        return cls(reader.read_u16(f"{context.value}.access_flags"), context)

    @property
    def table(self) -> tuple[tuple[str, int], ...]:
        return FLAG_TABLES[self.context]

    def labels(self) -> tuple[str, ...]:
        """Names whose bits are all set in the mask, in table order."""
        return tuple(name for name, bit in self.table if self.mask & bit == bit)

    def label_string(self) -> str:
        return LABEL_DELIMITER.join(self.labels())

    def has(self, name: str) -> bool:
        """Whether the flag called *name* is set.

        Raises:
            KeyError: *name* is not a flag of this context.
        """
        for label, bit in self.table:
            if label == name:
                return self.mask & bit == bit
        raise KeyError(f"{name!r} is not a {self.context.value} access flag")

    @property
    def unknown_bits(self) -> int:
        """Bits set in the mask that no label of this context covers."""
        known = 0
        for _, bit in self.table:
            known |= bit
        return self.mask & ~known

    def __str__(self) -> str:
        return self.label_string()
