"""Byte-level helpers for assembling class files in tests."""

import struct


def u1(value):
    return struct.pack(">B", value)


def u2(value):
    return struct.pack(">H", value)


def u4(value):
    return struct.pack(">I", value)


# -- constant pool entries ---------------------------------------------------

def utf8(text):
    data = text.encode("utf-8")
    return u1(1) + u2(len(data)) + data


def integer(value):
    return u1(3) + u4(value)


def float_(bits):
    return u1(4) + u4(bits)


def long_(high, low):
    return u1(5) + u4(high) + u4(low)


def double_(high, low):
    return u1(6) + u4(high) + u4(low)


def class_ref(name_index):
    return u1(7) + u2(name_index)


def string_ref(string_index):
    return u1(8) + u2(string_index)


def fieldref(class_index, nat_index):
    return u1(9) + u2(class_index) + u2(nat_index)


def methodref(class_index, nat_index):
    return u1(10) + u2(class_index) + u2(nat_index)


def interface_methodref(class_index, nat_index):
    return u1(11) + u2(class_index) + u2(nat_index)


def name_and_type(name_index, descriptor_index):
    return u1(12) + u2(name_index) + u2(descriptor_index)


def method_handle(kind, reference_index):
    return u1(15) + u1(kind) + u2(reference_index)


def method_type(descriptor_index):
    return u1(16) + u2(descriptor_index)


def invoke_dynamic(bootstrap_index, nat_index):
    return u1(18) + u2(bootstrap_index) + u2(nat_index)


def pool(count, *entries):
    """``constant_pool_count`` followed by the encoded entries."""
    return u2(count) + b"".join(entries)


# -- attributes --------------------------------------------------------------

def attribute(name_index, payload, length=None):
    """An attribute_info; *length* overrides the true payload length."""
    declared = len(payload) if length is None else length
    return u2(name_index) + u4(declared) + payload


def attributes(*records):
    return u2(len(records)) + b"".join(records)


def code_payload(code, handlers=(), nested=(), max_stack=2, max_locals=1):
    """Payload of a Code attribute; *handlers* are 4-tuples of u2 values."""
    body = u2(max_stack) + u2(max_locals) + u4(len(code)) + code
    body += u2(len(handlers))
    for start_pc, end_pc, handler_pc, catch_type in handlers:
        body += u2(start_pc) + u2(end_pc) + u2(handler_pc) + u2(catch_type)
    return body + attributes(*nested)


def line_number_payload(rows):
    body = u2(len(rows))
    for start_pc, line in rows:
        body += u2(start_pc) + u2(line)
    return body


def member(access_flags, name_index, descriptor_index, *records):
    return u2(access_flags) + u2(name_index) + u2(descriptor_index) + attributes(*records)


# -- whole files -------------------------------------------------------------

def class_file(
    constant_pool,
    access_flags=0x0021,
    this_class=2,
    super_class=4,
    interfaces=(),
    fields=(),
    methods=(),
    class_attributes=b"\x00\x00",
    magic=0xCAFEBABE,
    minor=0,
    major=52,
):
    out = u4(magic) + u2(minor) + u2(major) + constant_pool
    out += u2(access_flags) + u2(this_class) + u2(super_class)
    out += u2(len(interfaces)) + b"".join(u2(i) for i in interfaces)
    out += u2(len(fields)) + b"".join(fields)
    out += u2(len(methods)) + b"".join(methods)
    return out + class_attributes


# Pool indices of the sample class below.
APP = 2
OBJECT = 4
MAIN = 5
MAIN_DESC = 6
CODE = 7
LINE_NUMBER_TABLE = 8
SOURCE_FILE = 9
SOURCE_NAME = 10
COUNT = 11
COUNT_DESC = 12
RUNNABLE = 14
FIELD_REF = 16
EXCEPTION = 18
CUSTOM = 19
LONG_CONST = 20

SAMPLE_POOL = pool(
    22,
    utf8("App"),                         # 1
    class_ref(1),                        # 2
    utf8("java/lang/Object"),            # 3
    class_ref(3),                        # 4
    utf8("main"),                        # 5
    utf8("([Ljava/lang/String;)V"),      # 6
    utf8("Code"),                        # 7
    utf8("LineNumberTable"),             # 8
    utf8("SourceFile"),                  # 9
    utf8("App.java"),                    # 10
    utf8("count"),                       # 11
    utf8("I"),                           # 12
    utf8("java/lang/Runnable"),          # 13
    class_ref(13),                       # 14
    name_and_type(11, 12),               # 15
    fieldref(2, 15),                     # 16
    utf8("java/lang/Exception"),         # 17
    class_ref(17),                       # 18
    utf8("Custom"),                      # 19
    long_(1, 2),                         # 20 (+21 reserved)
)

SAMPLE_BYTECODE = bytes([0xB2, 0x00, 0x10, 0xB1])
SAMPLE_RAW = b"\x01\x02\x03\x04\x05"


def sample_code_attribute(length=None):
    payload = code_payload(
        SAMPLE_BYTECODE,
        handlers=[(0, 3, 3, EXCEPTION), (0, 3, 3, 0)],
        nested=[
            attribute(LINE_NUMBER_TABLE, line_number_payload([(0, 3), (1, 4), (3, 5)])),
        ],
    )
    return attribute(CODE, payload, length)


def sample_class(**overrides):
    """A small but complete class: one field, one method, two class attributes."""
    options = dict(
        constant_pool=SAMPLE_POOL,
        interfaces=(RUNNABLE,),
        fields=(member(0x000A, COUNT, COUNT_DESC),),
        methods=(member(0x0009, MAIN, MAIN_DESC, sample_code_attribute()),),
        class_attributes=attributes(
            attribute(SOURCE_FILE, u2(SOURCE_NAME)),
            attribute(CUSTOM, SAMPLE_RAW),
        ),
    )
    options.update(overrides)
    return class_file(**options)
