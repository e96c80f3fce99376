"""
Java Class File Parser
=======================

Sequential decoder for the JVM class-file format.  The file is read in
one strict pass, in the order the format lays it out::

    u4 magic, u2 minor_version, u2 major_version
    constant pool
    u2 access_flags, u2 this_class, u2 super_class
    u2 interfaces_count, u2 interfaces[]
    u2 fields_count, field_info[]
    u2 methods_count, method_info[]
    u2 attributes_count, attribute_info[]

Truncation, an out-of-range pool index, malformed text and a bad magic
number abort the decode; no partial :class:`ClassFile` is returned.
Unknown pool tags and unrecognised attributes are absorbed and decoding
continues.

References:
    - Lindholm, T. et al. (2014). The Java Virtual Machine Specification,
      Java SE 8 Edition, chapter 4.
"""

from __future__ import annotations

from contextlib import nullcontext
from typing import ContextManager, Optional

from jinspect.core.errors import UnexpectedEntryKind, InvalidMagic, ClassFileError
from jinspect.core.models import (
    CLASS_FILE_MAGIC,
    ClassFile,
    ClassHeader,
    ClassReference,
    FieldRecord,
    MethodRecord,
)
from jinspect.parsers.access_flags import AccessContext, AccessFlags
from jinspect.parsers.attributes import AttributeDecoder, resolve_at
from jinspect.parsers.constant_pool import DEFAULT_MAX_DEPTH, ClassRef, ConstantPool
from jinspect.parsers.reader import ByteReader
from shared.logger import InspectLogger


class ClassFileParser:
    """Decode one class file from an in-memory buffer.

    Usage::

        parser = ClassFileParser(path.read_bytes())
        class_file = parser.parse()
        print(class_file.name, class_file.flags.label_string())
    """

    def __init__(
        self,
        data: bytes | ByteReader,
        *,
        validate_magic: bool = True,
        strict_attribute_length: bool = False,
        max_resolve_depth: int = DEFAULT_MAX_DEPTH,
        logger: Optional[InspectLogger] = None,
    ) -> None:
        """Initialise the parser.

        Args:
            data: Complete class file contents, or a reader positioned at
                its first byte.
            validate_magic: Fail with :class:`InvalidMagic` unless the file
                starts with ``0xCAFEBABE``.
            strict_attribute_length: Raise on attribute length mismatches
                instead of recording them.
            max_resolve_depth: Indirection limit for pool resolution.
            logger: Optional logger; decode stages are logged at debug level.
        """
        self._reader = data if isinstance(data, ByteReader) else ByteReader(data)
        self._validate_magic = validate_magic
        self._strict = strict_attribute_length
        self._max_depth = max_resolve_depth
        self._logger = logger

    @property
    def reader(self) -> ByteReader:
        return self._reader

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def parse(self) -> ClassFile:
        """Run the full sequential decode.

        Raises:
            ClassFileError: Any fatal decoding problem; see
                :mod:`jinspect.core.errors`.
        """
        r = self._reader

        with self._stage("header"):
            header = self._parse_header(r)

        with self._stage("constant_pool"):
            pool = ConstantPool.build(r, max_depth=self._max_depth, logger=self._logger)
            self._debug("Constant pool: %d slot(s)", len(pool))

        with self._stage("linkage"):
            access_flags = AccessFlags.parse(AccessContext.CLASS, r)
            this_class = self._read_class_ref(r, pool, "this_class")
            super_class = self._read_class_ref(r, pool, "super_class", allow_zero=True)
            interfaces = [
                self._read_class_ref(r, pool, f"interfaces[{i}]")
                for i in range(r.read_u16("interfaces_count"))
            ]
            self._debug("Interfaces: %d", len(interfaces))

        attributes = AttributeDecoder(pool, strict=self._strict, logger=self._logger)

        with self._stage("fields"):
            fields = [
                FieldRecord(**self._read_member(r, pool, attributes, "field", i))
                for i in range(r.read_u16("fields_count"))
            ]
            self._debug("Fields: %d", len(fields))

        with self._stage("methods"):
            methods = [
                MethodRecord(**self._read_member(r, pool, attributes, "method", i))
                for i in range(r.read_u16("methods_count"))
            ]
            self._debug("Methods: %d", len(methods))

        with self._stage("attributes"):
            class_attributes = attributes.read_attributes(r, owner="class")
            self._debug("Attributes: %d", len(class_attributes))

        if not r.at_end and self._logger is not None:
            self._logger.warning(
                "%d trailing byte(s) after the class file body", r.remaining
            )

        return ClassFile(
            header=header,
            constant_pool=pool,
            access_flags=access_flags.mask,
            this_class=this_class,
            super_class=super_class,
            interfaces=interfaces,
            fields=fields,
            methods=methods,
            attributes=class_attributes,
            diagnostics=attributes.diagnostics,
        )

    # ------------------------------------------------------------------ #
    #  Sections
    # ------------------------------------------------------------------ #

    def _parse_header(self, r: ByteReader) -> ClassHeader:
        magic = r.read_u32("magic")
        if self._validate_magic and magic != CLASS_FILE_MAGIC:
            raise InvalidMagic(
                f"bad magic number 0x{magic:08X}, expected 0x{CLASS_FILE_MAGIC:08X}",
                offset=0,
                field="magic",
            )
        minor = r.read_u16("minor_version")
        major = r.read_u16("major_version")
        self._debug("Header: magic=0x%08X major=%d minor=%d", magic, major, minor)
        return ClassHeader(magic=magic, minor_version=minor, major_version=major)

    @staticmethod
    def _read_class_ref(
        r: ByteReader,
        pool: ConstantPool,
        field: str,
        *,
        allow_zero: bool = False,
    ) -> Optional[ClassReference]:
        """Read a u16 index that must name a ``Class`` entry.

        Index 0 is accepted only when *allow_zero* is set (``super_class``
        of ``java/lang/Object``) and yields ``None``.
        """
        offset = r.position
        index = r.read_u16(field)
        if index == 0 and allow_zero:
            return None
        try:
            entry = pool.get(index)
        except ClassFileError as exc:
            exc.offset, exc.field = offset, field
            raise
        if not isinstance(entry, ClassRef):
            raise UnexpectedEntryKind(
                f"{field} #{index} is a {entry.kind} entry, expected CLASS",
                offset=offset,
                field=field,
            )
        return ClassReference(
            index=index,
            name=resolve_at(pool, index, offset=offset, field=field),
        )

    @staticmethod
    def _read_member(
        r: ByteReader,
        pool: ConstantPool,
        attributes: AttributeDecoder,
        kind: str,
        position: int,
    ) -> dict:
        """Read one ``field_info`` / ``method_info`` into model keyword args."""
        context = AccessContext.FIELD if kind == "field" else AccessContext.METHOD
        label = f"{kind}[{position}]"

        access_flags = AccessFlags.parse(context, r)
        name_offset = r.position
        name_index = r.read_u16(f"{label}.name_index")
        descriptor_offset = r.position
        descriptor_index = r.read_u16(f"{label}.descriptor_index")
        name = resolve_at(pool, name_index, offset=name_offset, field=f"{label}.name_index")
        descriptor = resolve_at(
            pool, descriptor_index,
            offset=descriptor_offset, field=f"{label}.descriptor_index",
        )
        return {
            "access_flags": access_flags.mask,
            "name_index": name_index,
            "name": name,
            "descriptor_index": descriptor_index,
            "descriptor": descriptor,
            "attributes": attributes.read_attributes(r, owner=f"{kind} {name}"),
        }

    def _stage(self, name: str) -> ContextManager[object]:
        if self._logger is None:
            return nullcontext()
        return self._logger.stage(name)

    def _debug(self, msg: str, *args: object) -> None:
        if self._logger is not None:
            self._logger.debug(msg, *args)
