"""
Constant Pool
==============

The constant pool is the 1-indexed table of literals and symbolic
references that every other part of a class file points into.  Entries
refer to each other by index, so a class name is reached through a
``Class`` entry that names a ``Utf8`` entry, and a field reference through
a ``Class`` entry plus a ``NameAndType`` entry naming two more ``Utf8``
entries.

Entries are immutable tagged values.  After :meth:`ConstantPool.build` the
pool is never mutated; :meth:`ConstantPool.resolve` follows indirections
with a bounded depth so a malformed self-referential pool fails instead of
looping.

Layout per tag (all integers big-endian)::

    1  Utf8                u2 length, u1[length]
    3  Integer             u4 bytes
    4  Float               u4 bytes
    5  Long                u4 high, u4 low        (occupies two slots)
    6  Double              u4 high, u4 low        (occupies two slots)
    7  Class               u2 name_index
    8  String              u2 string_index
    9  Fieldref            u2 class_index, u2 name_and_type_index
    10 Methodref           u2 class_index, u2 name_and_type_index
    11 InterfaceMethodref  u2 class_index, u2 name_and_type_index
    12 NameAndType         u2 name_index, u2 descriptor_index
    15 MethodHandle        u1 reference_kind, u2 reference_index
    16 MethodType          u2 descriptor_index
    18 InvokeDynamic       u2 bootstrap_method_attr_index, u2 name_and_type_index

References:
    - Lindholm, T. et al. (2014). The Java Virtual Machine Specification,
      Java SE 8 Edition, section 4.4.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterator, Optional, Sequence, Union

from jinspect.core.errors import (
    InvalidPoolIndex,
    ResolutionDepthExceeded,
    UnresolvedEntryKind,
)
from jinspect.parsers.reader import ByteReader
from shared.logger import InspectLogger


# ---------------------------------------------------------------------------
# Tag constants
# ---------------------------------------------------------------------------

CONSTANT_UTF8: int = 1
CONSTANT_INTEGER: int = 3
CONSTANT_FLOAT: int = 4
CONSTANT_LONG: int = 5
CONSTANT_DOUBLE: int = 6
CONSTANT_CLASS: int = 7
CONSTANT_STRING: int = 8
CONSTANT_FIELDREF: int = 9
CONSTANT_METHODREF: int = 10
CONSTANT_INTERFACE_METHODREF: int = 11
CONSTANT_NAME_AND_TYPE: int = 12
CONSTANT_METHOD_HANDLE: int = 15
CONSTANT_METHOD_TYPE: int = 16
CONSTANT_INVOKE_DYNAMIC: int = 18

DEFAULT_MAX_DEPTH: int = 16


# ---------------------------------------------------------------------------
# Entry types
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Utf8:
    text: str

    kind: ClassVar[str] = "UTF8"
    tag: ClassVar[int] = CONSTANT_UTF8

    def describe(self) -> str:
        return f"UTF8 => Value: {self.text}"


@dataclass(frozen=True, slots=True)
class Integer:
    """Raw 32-bit pattern of an ``int`` constant."""
    bits: int

    kind: ClassVar[str] = "INTEGER"
    tag: ClassVar[int] = CONSTANT_INTEGER

    def describe(self) -> str:
        return f"Integer => Value: {self.bits}"


@dataclass(frozen=True, slots=True)
class Float:
    """Raw IEEE-754 single-precision bit pattern."""
    bits: int

    kind: ClassVar[str] = "FLOAT"
    tag: ClassVar[int] = CONSTANT_FLOAT

    def describe(self) -> str:
        return f"Float => Value: {self.bits}"


@dataclass(frozen=True, slots=True)
class Long:
    high: int
    low: int

    kind: ClassVar[str] = "LONG"
    tag: ClassVar[int] = CONSTANT_LONG

    def describe(self) -> str:
        return f"Long => High: {self.high}, Low: {self.low}"


@dataclass(frozen=True, slots=True)
class Double:
    high: int
    low: int

    kind: ClassVar[str] = "DOUBLE"
    tag: ClassVar[int] = CONSTANT_DOUBLE

    def describe(self) -> str:
        return f"Double => High: {self.high}, Low: {self.low}"


@dataclass(frozen=True, slots=True)
class ClassRef:
    name_index: int

    kind: ClassVar[str] = "CLASS"
    tag: ClassVar[int] = CONSTANT_CLASS

    def describe(self) -> str:
        return f"Class => Index: {self.name_index}"


@dataclass(frozen=True, slots=True)
class StringRef:
    string_index: int

    kind: ClassVar[str] = "STRING"
    tag: ClassVar[int] = CONSTANT_STRING

    def describe(self) -> str:
        return f"String => Index: {self.string_index}"


@dataclass(frozen=True, slots=True)
class Fieldref:
    class_index: int
    name_and_type_index: int

    kind: ClassVar[str] = "FIELD"
    tag: ClassVar[int] = CONSTANT_FIELDREF

    def describe(self) -> str:
        return (
            f"Field => ClassIndex: {self.class_index}, "
            f"NatIndex: {self.name_and_type_index}"
        )


@dataclass(frozen=True, slots=True)
class Methodref:
    class_index: int
    name_and_type_index: int

    kind: ClassVar[str] = "METHOD"
    tag: ClassVar[int] = CONSTANT_METHODREF

    def describe(self) -> str:
        return (
            f"Method => ClassIndex: {self.class_index}, "
            f"NatIndex: {self.name_and_type_index}"
        )


@dataclass(frozen=True, slots=True)
class InterfaceMethodref:
    class_index: int
    name_and_type_index: int

    kind: ClassVar[str] = "INTERFACE_METHOD"
    tag: ClassVar[int] = CONSTANT_INTERFACE_METHODREF

    def describe(self) -> str:
        return (
            f"InterfaceMethod => ClassIndex: {self.class_index}, "
            f"NatIndex: {self.name_and_type_index}"
        )


@dataclass(frozen=True, slots=True)
class NameAndType:
    name_index: int
    descriptor_index: int

    kind: ClassVar[str] = "NAME_AND_TYPE"
    tag: ClassVar[int] = CONSTANT_NAME_AND_TYPE

    def describe(self) -> str:
        return (
            f"NameAndType => NameIndex: {self.name_index}, "
            f"DescIndex: {self.descriptor_index}"
        )


@dataclass(frozen=True, slots=True)
class MethodHandle:
    reference_kind: int
    reference_index: int

    kind: ClassVar[str] = "METHOD_HANDLE"
    tag: ClassVar[int] = CONSTANT_METHOD_HANDLE

    def describe(self) -> str:
        return (
            f"MethodHandle => Kind: {self.reference_kind}, "
            f"RefIndex: {self.reference_index}"
        )


@dataclass(frozen=True, slots=True)
class MethodType:
    descriptor_index: int

    kind: ClassVar[str] = "METHOD_TYPE"
    tag: ClassVar[int] = CONSTANT_METHOD_TYPE

    def describe(self) -> str:
        return f"MethodType => DescIndex: {self.descriptor_index}"


@dataclass(frozen=True, slots=True)
class InvokeDynamic:
    bootstrap_index: int
    name_and_type_index: int

    kind: ClassVar[str] = "INVOKE_DYNAMIC"
    tag: ClassVar[int] = CONSTANT_INVOKE_DYNAMIC

    def describe(self) -> str:
        return (
            f"InvokeDynamic => BootstrapMethodAttrIndex: {self.bootstrap_index}, "
            f"NatIndex: {self.name_and_type_index}"
        )


@dataclass(frozen=True, slots=True)
class Unknown:
    """Placeholder for a tag this decoder does not know."""
    raw_tag: int

    kind: ClassVar[str] = "UNKNOWN"

    @property
    def tag(self) -> int:
        return self.raw_tag

    def describe(self) -> str:
        return f"Unknown => Tag: {self.raw_tag}"


@dataclass(frozen=True, slots=True)
class Reserved:
    """The unusable slot following a ``Long`` or ``Double`` entry."""

    kind: ClassVar[str] = "RESERVED"
    tag: ClassVar[int] = 0

    def describe(self) -> str:
        return "Reserved => (second slot of a Long/Double)"


Entry = Union[
    Utf8, Integer, Float, Long, Double, ClassRef, StringRef,
    Fieldref, Methodref, InterfaceMethodref, NameAndType,
    MethodHandle, MethodType, InvokeDynamic, Unknown, Reserved,
]

# Prefixes for member references rendered as "<prefix>: <class> <name> <desc>"
_MEMBER_PREFIX: dict[type, str] = {
    Fieldref: "Field",
    Methodref: "Method",
    InterfaceMethodref: "InterfaceMethod",
}


# ---------------------------------------------------------------------------
# Entry decoding
# ---------------------------------------------------------------------------

def read_entry(reader: ByteReader, tag: int) -> Entry:
    """Decode the body of one entry whose *tag* byte was already consumed.

    An unrecognised tag consumes nothing further and yields
    :class:`Unknown`.
    """
    if tag == CONSTANT_UTF8:
        length = reader.read_u16("utf8.length")
        return Utf8(reader.read_utf8(length, "utf8.bytes"))
    if tag == CONSTANT_INTEGER:
        return Integer(reader.read_u32("integer.bytes"))
    if tag == CONSTANT_FLOAT:
        return Float(reader.read_u32("float.bytes"))
    if tag == CONSTANT_LONG:
        return Long(reader.read_u32("long.high"), reader.read_u32("long.low"))
    if tag == CONSTANT_DOUBLE:
        return Double(reader.read_u32("double.high"), reader.read_u32("double.low"))
    if tag == CONSTANT_CLASS:
        return ClassRef(reader.read_u16("class.name_index"))
    if tag == CONSTANT_STRING:
        return StringRef(reader.read_u16("string.string_index"))
    if tag in (CONSTANT_FIELDREF, CONSTANT_METHODREF, CONSTANT_INTERFACE_METHODREF):
        class_index = reader.read_u16("ref.class_index")
        nat_index = reader.read_u16("ref.name_and_type_index")
        if tag == CONSTANT_FIELDREF:
            return Fieldref(class_index, nat_index)
        if tag == CONSTANT_METHODREF:
            return Methodref(class_index, nat_index)
        return InterfaceMethodref(class_index, nat_index)
    if tag == CONSTANT_NAME_AND_TYPE:
        return NameAndType(
            reader.read_u16("name_and_type.name_index"),
            reader.read_u16("name_and_type.descriptor_index"),
        )
    if tag == CONSTANT_METHOD_HANDLE:
        return MethodHandle(
            reader.read_u8("method_handle.reference_kind"),
            reader.read_u16("method_handle.reference_index"),
        )
    if tag == CONSTANT_METHOD_TYPE:
        return MethodType(reader.read_u16("method_type.descriptor_index"))
    if tag == CONSTANT_INVOKE_DYNAMIC:
        return InvokeDynamic(
            reader.read_u16("invoke_dynamic.bootstrap_index"),
            reader.read_u16("invoke_dynamic.name_and_type_index"),
        )
    return Unknown(tag)


# ---------------------------------------------------------------------------
# ConstantPool
# ---------------------------------------------------------------------------

class ConstantPool:
    """Immutable, 1-indexed table of constant-pool entries.

    Usage::

        pool = ConstantPool.build(reader)
        pool.get(1)          # => Utf8(text='Foo')
        pool.resolve(7)      # => 'java/lang/Object'
    """

    def __init__(
        self,
        entries: Sequence[Entry],
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._entries: tuple[Entry, ...] = tuple(entries)
        self._max_depth = max_depth

    @classmethod
    def build(
        cls,
        reader: ByteReader,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        logger: Optional[InspectLogger] = None,
    ) -> ConstantPool:
        """Read ``constant_pool_count`` and that many minus one slots.

        ``Long`` and ``Double`` entries fill two slots; the second one is
        a synthesized :class:`Reserved` entry so that indices stay aligned
        with the ones used throughout the class file.

        Raises:
            UnexpectedEof: The stream ends inside the pool.
            InvalidText: A Utf8 entry is malformed.
        """
        count = reader.read_u16("constant_pool_count")
        entries: list[Entry] = []
        index = 1
        while index < count:
            offset = reader.position
            tag = reader.read_u8(f"constant_pool[{index}].tag")
            entry = read_entry(reader, tag)
            if isinstance(entry, Unknown) and logger is not None:
                logger.debug(
                    "Unknown constant pool tag %d at #%d (offset 0x%x)",
                    tag, index, offset,
                )
            entries.append(entry)
            index += 1
            if isinstance(entry, (Long, Double)) and index < count:
                entries.append(Reserved())
                index += 1
        return cls(entries, max_depth=max_depth)

    # ------------------------------------------------------------------ #
    #  Lookup
    # ------------------------------------------------------------------ #

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[int, Entry]]:
        """Yield ``(index, entry)`` pairs in pool order, starting at 1."""
        return iter(enumerate(self._entries, start=1))

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._entries

    def contains(self, index: int) -> bool:
        return 1 <= index <= len(self._entries)

    def get(self, index: int) -> Entry:
        """Return the entry at 1-based *index*.

        Raises:
            InvalidPoolIndex: *index* is 0 or exceeds the pool size.
        """
        if not self.contains(index):
            raise InvalidPoolIndex(index, len(self._entries))
        return self._entries[index - 1]

    def kind(self, index: int) -> str:
        """Upper-case kind name of the entry at *index* (``UTF8``, ``CLASS``...)."""
        return self.get(index).kind

    def value(self, index: int) -> str:
        """The text of a Utf8 entry, or the kind name for any other entry."""
        entry = self.get(index)
        if isinstance(entry, Utf8):
            return entry.text
        return entry.kind

    # ------------------------------------------------------------------ #
    #  Resolution
    # ------------------------------------------------------------------ #

    def resolve(self, index: int) -> str:
        """Follow indirections from *index* down to a display string.

        Raises:
            InvalidPoolIndex: *index* or any index reached from it is out of range.
            UnresolvedEntryKind: A ``MethodHandle``, ``InvokeDynamic`` or
                ``Reserved`` entry was reached.
            ResolutionDepthExceeded: More than ``max_depth`` indirections
                were followed (a cyclic pool).
        """
        return self._resolve(index, 0)

    def _resolve(self, index: int, depth: int) -> str:
        if depth > self._max_depth:
            raise ResolutionDepthExceeded(
                f"resolution of constant pool entry #{index} exceeded "
                f"depth {self._max_depth}"
            )
        entry = self.get(index)

        if isinstance(entry, Utf8):
            return entry.text
        if isinstance(entry, (Integer, Float)):
            return str(entry.bits)
        if isinstance(entry, (Long, Double)):
            return f"H:{entry.high},L:{entry.low}"
        if isinstance(entry, Unknown):
            return f"Unknown({entry.raw_tag})"
        if isinstance(entry, ClassRef):
            return self._resolve(entry.name_index, depth + 1)
        if isinstance(entry, StringRef):
            return self._resolve(entry.string_index, depth + 1)
        if isinstance(entry, MethodType):
            return self._resolve(entry.descriptor_index, depth + 1)
        if isinstance(entry, NameAndType):
            name = self._resolve(entry.name_index, depth + 1)
            descriptor = self._resolve(entry.descriptor_index, depth + 1)
            return f"{name} {descriptor}"
        if isinstance(entry, (Fieldref, Methodref, InterfaceMethodref)):
            owner = self._resolve(entry.class_index, depth + 1)
            member = self._resolve(entry.name_and_type_index, depth + 1)
            return f"{_MEMBER_PREFIX[type(entry)]}: {owner} {member}"

        # MethodHandle, InvokeDynamic, Reserved
        raise UnresolvedEntryKind(index, entry.kind)

    def try_resolve(self, index: int) -> Optional[str]:
        """Like :meth:`resolve` but ``None`` for an entry kind with no text.

        Index and depth errors still propagate.
        """
        try:
            return self.resolve(index)
        except UnresolvedEntryKind:
            return None
