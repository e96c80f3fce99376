"""Tests for attribute decoding and the length invariant."""

import pytest

from classfile_builder import (
    CUSTOM,
    EXCEPTION,
    LINE_NUMBER_TABLE,
    SAMPLE_BYTECODE,
    SAMPLE_POOL,
    SAMPLE_RAW,
    SOURCE_FILE,
    SOURCE_NAME,
    attribute,
    attributes,
    line_number_payload,
    sample_code_attribute,
    u2,
)
from jinspect.core.errors import AttributeLengthMismatch, InvalidPoolIndex, IoTruncated
from jinspect.core.models import CodeAttribute, LineNumberTableAttribute, SourceFileAttribute
from jinspect.parsers.attributes import AttributeDecoder
from jinspect.parsers.constant_pool import ConstantPool
from jinspect.parsers.reader import ByteReader

HEADER_SIZE = 6


@pytest.fixture
def constant_pool():
    return ConstantPool.build(ByteReader(SAMPLE_POOL))


@pytest.fixture
def decoder(constant_pool, logger):
    return AttributeDecoder(constant_pool, logger=logger)


class TestCode:
    def test_cursor_advances_by_declared_length(self, decoder):
        reader = ByteReader(sample_code_attribute())
        record = decoder.read_attribute(reader, owner="method main")
        assert record.length == 52
        assert record.offset == HEADER_SIZE
        assert reader.position == HEADER_SIZE + record.length
        assert reader.at_end
        assert decoder.diagnostics == []

    def test_code_payload(self, decoder):
        record = decoder.read_attribute(ByteReader(sample_code_attribute()))
        code = record.payload
        assert isinstance(code, CodeAttribute)
        assert record.is_recognized
        assert code.max_stack == 2
        assert code.max_locals == 1
        assert code.code == SAMPLE_BYTECODE
        assert code.code_length == 4

    def test_exception_table(self, decoder):
        code = decoder.read_attribute(ByteReader(sample_code_attribute())).payload
        first, second = code.exception_table
        assert (first.start_pc, first.end_pc, first.handler_pc) == (0, 3, 3)
        assert first.catch_type == EXCEPTION
        assert first.catch_type_name == "java/lang/Exception"
        assert second.catch_type == 0
        assert second.catch_type_name is None

    def test_nested_line_numbers(self, decoder):
        code = decoder.read_attribute(ByteReader(sample_code_attribute())).payload
        assert [a.name for a in code.attributes] == ["LineNumberTable"]
        assert isinstance(code.attributes[0].payload, LineNumberTableAttribute)
        assert [(e.start_pc, e.line_number) for e in code.line_numbers] == [
            (0, 3), (1, 4), (3, 5),
        ]


class TestOtherAttributes:
    def test_source_file(self, decoder):
        record = decoder.read_attribute(ByteReader(attribute(SOURCE_FILE, u2(SOURCE_NAME))))
        assert isinstance(record.payload, SourceFileAttribute)
        assert record.payload.source_file == "App.java"

    def test_unrecognized_kept_verbatim(self, decoder):
        reader = ByteReader(attribute(CUSTOM, SAMPLE_RAW) + b"\xee")
        record = decoder.read_attribute(reader)
        assert record.name == "Custom"
        assert record.length == 5
        assert record.raw == SAMPLE_RAW
        assert record.payload is None
        assert not record.is_recognized
        assert reader.position == HEADER_SIZE + 5

    def test_attribute_list(self, decoder):
        reader = ByteReader(attributes(
            attribute(SOURCE_FILE, u2(SOURCE_NAME)),
            attribute(LINE_NUMBER_TABLE, line_number_payload([(0, 1)])),
        ))
        records = decoder.read_attributes(reader)
        assert [r.name for r in records] == ["SourceFile", "LineNumberTable"]
        assert reader.at_end

    def test_bad_name_index(self, decoder):
        with pytest.raises(InvalidPoolIndex) as info:
            decoder.read_attribute(ByteReader(attribute(500, b"")))
        assert info.value.offset == 0

    def test_truncated_payload(self, decoder):
        with pytest.raises(IoTruncated):
            decoder.read_attribute(ByteReader(attribute(CUSTOM, b"\x01", length=5)))


class TestLengthMismatch:
    def padded_source_file(self):
        # declared 4 bytes; the SourceFile layout only uses 2
        return attribute(SOURCE_FILE, u2(SOURCE_NAME) + b"\x00\x00") + b"\xab"

    def test_recorded_and_realigned(self, decoder):
        reader = ByteReader(self.padded_source_file())
        record = decoder.read_attribute(reader, owner="class")
        assert record.payload.source_file == "App.java"
        assert reader.position == HEADER_SIZE + 4
        assert reader.read_u8() == 0xAB

        (diag,) = decoder.diagnostics
        assert diag.kind == "AttributeLengthMismatch"
        assert diag.offset == HEADER_SIZE
        assert diag.field == "attribute:SourceFile"
        assert "declared 4" in diag.message

    def test_strict_mode_raises(self, constant_pool):
        strict = AttributeDecoder(constant_pool, strict=True)
        with pytest.raises(AttributeLengthMismatch) as info:
            strict.read_attribute(ByteReader(self.padded_source_file()))
        assert info.value.declared == 4
        assert info.value.consumed == 2

    def test_declared_end_past_buffer(self, decoder):
        data = attribute(SOURCE_FILE, u2(SOURCE_NAME), length=10)
        with pytest.raises(IoTruncated):
            decoder.read_attribute(ByteReader(data))
