"""
Attribute Decoder
==================

Attributes are the extensible part of the class-file format: a u16 name
index, a u32 length, and ``length`` bytes whose layout depends on the
name.  This decoder gives structure to ``Code``, ``LineNumberTable`` and
``SourceFile`` and keeps every other payload verbatim.

Layouts::

    Code             u2 max_stack, u2 max_locals,
                     u4 code_length, u1[code_length],
                     u2 exception_table_length,
                     {u2 start_pc, u2 end_pc, u2 handler_pc, u2 catch_type}[...],
                     u2 attributes_count, attribute_info[...]
    LineNumberTable  u2 count, {u2 start_pc, u2 line_number}[count]
    SourceFile       u2 sourcefile_index

After a recognised payload the bytes consumed must equal the declared
length.  A mismatch is recorded as a diagnostic and the stream is
realigned to the declared end, or raised when strict mode is on.
"""

from __future__ import annotations

from typing import Optional

from jinspect.core.errors import AttributeLengthMismatch, ClassFileError
from jinspect.core.models import (
    AttributeRecord,
    CodeAttribute,
    Diagnostic,
    ExceptionTableEntry,
    LineNumberEntry,
    LineNumberTableAttribute,
    SourceFileAttribute,
)
from jinspect.parsers.constant_pool import ConstantPool
from jinspect.parsers.reader import ByteReader
from shared.logger import InspectLogger


ATTR_CODE: str = "Code"
ATTR_LINE_NUMBER_TABLE: str = "LineNumberTable"
ATTR_SOURCE_FILE: str = "SourceFile"

RECOGNIZED_ATTRIBUTES: frozenset[str] = frozenset(
    {ATTR_CODE, ATTR_LINE_NUMBER_TABLE, ATTR_SOURCE_FILE}
)


def resolve_at(
    pool: ConstantPool,
    index: int,
    *,
    offset: int,
    field: str,
) -> str:
    """Resolve *index*, attaching stream context to any error raised."""
    try:
        return pool.resolve(index)
    except ClassFileError as exc:
        if exc.offset is None:
            exc.offset = offset
        if exc.field is None:
            exc.field = field
        raise


class AttributeDecoder:
    """Decodes attribute lists against one constant pool.

    Usage::

        decoder = AttributeDecoder(pool)
        records = decoder.read_attributes(reader, owner="method main")
        for diag in decoder.diagnostics:
            print(diag.message)
    """

    def __init__(
        self,
        pool: ConstantPool,
        *,
        strict: bool = False,
        logger: Optional[InspectLogger] = None,
    ) -> None:
        """
        Args:
            pool: Constant pool used to resolve names and indices.
            strict: Raise :class:`AttributeLengthMismatch` instead of
                recording it and realigning.
            logger: Logger for debug traces and mismatch warnings.
        """
        self._pool = pool
        self._strict = strict
        self._logger = logger
        self.diagnostics: list[Diagnostic] = []

    # ------------------------------------------------------------------ #
    #  Lists and records
    # ------------------------------------------------------------------ #

    def read_attributes(self, reader: ByteReader, owner: str = "class") -> list[AttributeRecord]:
        """Read a u16 count followed by that many attribute records."""
        count = reader.read_u16(f"{owner}.attributes_count")
        return [self.read_attribute(reader, owner) for _ in range(count)]

    def read_attribute(self, reader: ByteReader, owner: str = "class") -> AttributeRecord:
        name_offset = reader.position
        name_index = reader.read_u16(f"{owner}.attribute.name_index")
        name = resolve_at(
            self._pool, name_index,
            offset=name_offset, field=f"{owner}.attribute.name_index",
        )
        length = reader.read_u32(f"{owner}.attribute[{name}].length")
        start = reader.position

        if name not in RECOGNIZED_ATTRIBUTES:
            raw = reader.read_bytes(length, f"{owner}.attribute[{name}].info")
            if self._logger is not None:
                self._logger.debug(
                    "Kept %d opaque byte(s) of attribute %s on %s",
                    length, name, owner,
                )
            return AttributeRecord(
                name_index=name_index, name=name, length=length,
                offset=start, raw=raw,
            )

        if name == ATTR_CODE:
            payload = self._read_code(reader, owner)
        elif name == ATTR_LINE_NUMBER_TABLE:
            payload = self._read_line_number_table(reader, owner)
        else:
            payload = self._read_source_file(reader, owner)

        self._check_length(reader, name, length, start, owner)
        return AttributeRecord(
            name_index=name_index, name=name, length=length,
            offset=start, payload=payload,
        )

    # ------------------------------------------------------------------ #
    #  Recognised payloads
    # ------------------------------------------------------------------ #

    def _read_code(self, reader: ByteReader, owner: str) -> CodeAttribute:
        field = f"{owner}.Code"
        max_stack = reader.read_u16(f"{field}.max_stack")
        max_locals = reader.read_u16(f"{field}.max_locals")
        code_length = reader.read_u32(f"{field}.code_length")
        code = reader.read_bytes(code_length, f"{field}.code")

        table_length = reader.read_u16(f"{field}.exception_table_length")
        exception_table: list[ExceptionTableEntry] = []
        for _ in range(table_length):
            start_pc = reader.read_u16(f"{field}.exception_table.start_pc")
            end_pc = reader.read_u16(f"{field}.exception_table.end_pc")
            handler_pc = reader.read_u16(f"{field}.exception_table.handler_pc")
            catch_offset = reader.position
            catch_type = reader.read_u16(f"{field}.exception_table.catch_type")
            catch_name = None
            if catch_type != 0:
                catch_name = resolve_at(
                    self._pool, catch_type,
                    offset=catch_offset, field=f"{field}.exception_table.catch_type",
                )
            exception_table.append(ExceptionTableEntry(
                start_pc=start_pc,
                end_pc=end_pc,
                handler_pc=handler_pc,
                catch_type=catch_type,
                catch_type_name=catch_name,
            ))

        nested = self.read_attributes(reader, owner=field)
        return CodeAttribute(
            max_stack=max_stack,
            max_locals=max_locals,
            code=code,
            exception_table=exception_table,
            attributes=nested,
        )

    @staticmethod
    def _read_line_number_table(reader: ByteReader, owner: str) -> LineNumberTableAttribute:
        field = f"{owner}.LineNumberTable"
        count = reader.read_u16(f"{field}.length")
        entries = [
            LineNumberEntry(
                start_pc=reader.read_u16(f"{field}.start_pc"),
                line_number=reader.read_u16(f"{field}.line_number"),
            )
            for _ in range(count)
        ]
        return LineNumberTableAttribute(entries=entries)

    def _read_source_file(self, reader: ByteReader, owner: str) -> SourceFileAttribute:
        field = f"{owner}.SourceFile.sourcefile_index"
        offset = reader.position
        index = reader.read_u16(field)
        return SourceFileAttribute(
            source_file_index=index,
            source_file=resolve_at(self._pool, index, offset=offset, field=field),
        )

    # ------------------------------------------------------------------ #
    #  Length check
    # ------------------------------------------------------------------ #

    def _check_length(
        self,
        reader: ByteReader,
        name: str,
        declared: int,
        start: int,
        owner: str,
    ) -> None:
        consumed = reader.position - start
        if consumed == declared:
            return

        mismatch = AttributeLengthMismatch(name, declared, consumed, offset=start)
        if self._strict:
            raise mismatch

        self.diagnostics.append(Diagnostic(
            kind=type(mismatch).__name__,
            message=f"{owner}: {mismatch.message}",
            offset=start,
            field=mismatch.field,
        ))
        if self._logger is not None:
            self._logger.warning(
                "%s on %s; realigning to offset 0x%x",
                mismatch.message, owner, start + declared,
            )
        reader.seek(start + declared)
