"""
jinspect Data Models
=====================

Pydantic models for the decoded structure of a Java class file.  The
:class:`ClassFile` aggregate owns the constant pool it was decoded with,
so resolved names stored on records can always be traced back to their
pool indices.

Attribute payloads form a recursive grammar: a ``Code`` attribute holds
its own attribute list, which may in turn hold a ``LineNumberTable``.
Unrecognised attributes keep their payload verbatim in ``raw``.

References:
    - Lindholm, T. et al. (2014). The Java Virtual Machine Specification,
      Java SE 8 Edition, chapter 4.
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

from typing import ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from jinspect.parsers.access_flags import AccessContext, AccessFlags
from jinspect.parsers.constant_pool import ConstantPool

CLASS_FILE_MAGIC: int = 0xCAFEBABE

# Major version -> platform release
_JAVA_RELEASES: dict[int, str] = {
    45: "1.1", 46: "1.2", 47: "1.3", 48: "1.4", 49: "5", 50: "6",
    51: "7", 52: "8", 53: "9", 54: "10", 55: "11", 56: "12", 57: "13",
    58: "14", 59: "15", 60: "16", 61: "17", 62: "18", 63: "19", 64: "20",
    65: "21", 66: "22", 67: "23", 68: "24",
}


class _Model(BaseModel):
    model_config = ConfigDict(ser_json_bytes="base64")


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------

class ClassHeader(_Model):
    """The fixed eight leading bytes of a class file.

    Attributes:
        magic: Leading u32, ``0xCAFEBABE`` for a well-formed file.
        minor_version: Minor format version.
        major_version: Major format version (52 = Java 8).
    """
    magic: int = CLASS_FILE_MAGIC
    minor_version: int = 0
    major_version: int = 0

    @property
    def java_release(self) -> str:
        return _JAVA_RELEASES.get(self.major_version, "unknown")


# ---------------------------------------------------------------------------
# Attribute payloads
# ---------------------------------------------------------------------------

class ExceptionTableEntry(_Model):
    """One handler range of a ``Code`` attribute.

    ``catch_type`` 0 means the handler catches everything (``finally``).
    """
    start_pc: int
    end_pc: int
    handler_pc: int
    catch_type: int
    catch_type_name: Optional[str] = None


class LineNumberEntry(_Model):
    start_pc: int
    line_number: int


class CodeAttribute(_Model):
    """Bytecode, frame sizing, handlers and nested attributes of a method."""
    kind: Literal["Code"] = "Code"
    max_stack: int
    max_locals: int
    code: bytes
    exception_table: list[ExceptionTableEntry] = Field(default_factory=list)
    attributes: list[AttributeRecord] = Field(default_factory=list)

    @property
    def code_length(self) -> int:
        return len(self.code)

    @property
    def line_numbers(self) -> list[LineNumberEntry]:
        """Rows of every nested ``LineNumberTable``, in stream order."""
        rows: list[LineNumberEntry] = []
        for attr in self.attributes:
            if isinstance(attr.payload, LineNumberTableAttribute):
                rows.extend(attr.payload.entries)
        return rows


class LineNumberTableAttribute(_Model):
    kind: Literal["LineNumberTable"] = "LineNumberTable"
    entries: list[LineNumberEntry] = Field(default_factory=list)


class SourceFileAttribute(_Model):
    kind: Literal["SourceFile"] = "SourceFile"
    source_file_index: int
    source_file: str


AttributePayload = Union[CodeAttribute, LineNumberTableAttribute, SourceFileAttribute]


class AttributeRecord(_Model):
    """A named, length-prefixed attribute.

    Attributes:
        name_index: Pool index of the attribute name.
        name: Resolved attribute name.
        length: Declared payload length in bytes.
        offset: Stream offset at which the payload starts.
        payload: Structured payload for recognised names, else ``None``.
        raw: Verbatim payload bytes for unrecognised names, else ``None``.
    """
    name_index: int
    name: str
    length: int
    offset: int = 0
    payload: Optional[AttributePayload] = None
    raw: Optional[bytes] = None

    @property
    def is_recognized(self) -> bool:
        return self.payload is not None


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

class _MemberRecord(_Model):
    access_flags: int
    name_index: int
    name: str
    descriptor_index: int
    descriptor: str
    attributes: list[AttributeRecord] = Field(default_factory=list)

    access_context: ClassVar[AccessContext] = AccessContext.FIELD

    @property
    def flags(self) -> AccessFlags:
        return AccessFlags(self.access_flags, self.access_context)

    def attribute(self, name: str) -> Optional[AttributeRecord]:
        """First attribute called *name*, or ``None``."""
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None


class FieldRecord(_MemberRecord):
    """A ``field_info`` structure."""
    access_context: ClassVar[AccessContext] = AccessContext.FIELD


class MethodRecord(_MemberRecord):
    """A ``method_info`` structure."""
    access_context: ClassVar[AccessContext] = AccessContext.METHOD

    @property
    def code(self) -> Optional[CodeAttribute]:
        attr = self.attribute("Code")
        if attr is not None and isinstance(attr.payload, CodeAttribute):
            return attr.payload
        return None


class ClassReference(_Model):
    """A pool index known to name a ``Class`` entry, with its resolved name."""
    index: int
    name: str


class Diagnostic(_Model):
    """A recoverable problem met during decoding."""
    kind: str
    message: str
    offset: Optional[int] = None
    field: Optional[str] = None


# ---------------------------------------------------------------------------
# Aggregate root
# ---------------------------------------------------------------------------

class ClassFile(_Model):
    """Fully decoded class file.

    Attributes:
        header: Magic and version numbers.
        constant_pool: The pool every index on this object refers to.
        access_flags: Raw class-level access mask.
        this_class: The class defined by this file.
        super_class: Direct superclass; ``None`` only for ``java/lang/Object``.
        interfaces: Directly implemented interfaces, in declaration order.
        fields: Field records.
        methods: Method records.
        attributes: Top-level attribute records.
        diagnostics: Recoverable problems (attribute length mismatches).
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    header: ClassHeader = Field(default_factory=ClassHeader)
    constant_pool: ConstantPool = Field(exclude=True)
    access_flags: int = 0
    this_class: ClassReference
    super_class: Optional[ClassReference] = None
    interfaces: list[ClassReference] = Field(default_factory=list)
    fields: list[FieldRecord] = Field(default_factory=list)
    methods: list[MethodRecord] = Field(default_factory=list)
    attributes: list[AttributeRecord] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def flags(self) -> AccessFlags:
        return AccessFlags(self.access_flags, AccessContext.CLASS)

    @property
    def name(self) -> str:
        return self.this_class.name

    @property
    def source_file(self) -> Optional[str]:
        for attr in self.attributes:
            if isinstance(attr.payload, SourceFileAttribute):
                return attr.payload.source_file
        return None

    def find_field(self, name: str) -> Optional[FieldRecord]:
        return next((f for f in self.fields if f.name == name), None)

    def find_methods(self, name: str) -> list[MethodRecord]:
        """All overloads called *name*."""
        return [m for m in self.methods if m.name == name]


CodeAttribute.model_rebuild()
AttributeRecord.model_rebuild()
FieldRecord.model_rebuild()
MethodRecord.model_rebuild()
ClassFile.model_rebuild()
