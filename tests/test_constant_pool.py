"""Tests for constant pool decoding and resolution."""

import pytest

from classfile_builder import (
    class_ref,
    double_,
    fieldref,
    float_,
    integer,
    interface_methodref,
    invoke_dynamic,
    long_,
    method_handle,
    method_type,
    methodref,
    name_and_type,
    pool,
    string_ref,
    u1,
    u2,
    utf8,
)
from jinspect.core.errors import (
    InvalidPoolIndex,
    ResolutionDepthExceeded,
    UnexpectedEof,
    UnresolvedEntryKind,
)
from jinspect.parsers.constant_pool import (
    ClassRef,
    ConstantPool,
    Double,
    Long,
    Reserved,
    Unknown,
    Utf8,
)
from jinspect.parsers.reader import ByteReader


def build(data, **kwargs):
    return ConstantPool.build(ByteReader(data), **kwargs)


@pytest.fixture
def member_pool():
    return build(pool(
        10,
        utf8("Foo"),                     # 1
        class_ref(1),                    # 2
        utf8("bar"),                     # 3
        utf8("I"),                       # 4
        name_and_type(3, 4),             # 5
        fieldref(2, 5),                  # 6
        methodref(2, 5),                 # 7
        string_ref(3),                   # 8
        integer(42),                     # 9
    ))


class TestBuild:
    def test_single_utf8(self):
        p = build(pool(2, utf8("Foo")))
        assert len(p) == 1
        assert p.resolve(1) == "Foo"
        with pytest.raises(InvalidPoolIndex):
            p.get(2)

    def test_entry_count_matches_header(self, member_pool):
        assert len(member_pool) == 9

    def test_index_zero_rejected(self, member_pool):
        with pytest.raises(InvalidPoolIndex) as info:
            member_pool.get(0)
        assert info.value.index == 0
        assert info.value.size == 9

    def test_every_index_in_range_is_reachable(self, member_pool):
        for index in range(1, len(member_pool) + 1):
            member_pool.get(index)

    def test_long_takes_two_slots(self):
        p = build(pool(4, long_(7, 9), utf8("after")))
        assert len(p) == 3
        assert isinstance(p.get(1), Long)
        assert isinstance(p.get(2), Reserved)
        assert p.resolve(3) == "after"
        assert p.resolve(1) == "H:7,L:9"

    def test_wide_entry_in_last_slot(self):
        p = build(pool(3, utf8("first"), double_(3, 4)))
        assert len(p) == 2
        assert isinstance(p.get(2), Double)
        assert p.resolve(2) == "H:3,L:4"
        with pytest.raises(InvalidPoolIndex):
            p.get(3)

    def test_long_as_only_entry(self):
        p = build(pool(2, long_(1, 2)))
        assert len(p) == 1
        assert isinstance(p.get(1), Long)

    def test_unknown_tag_is_absorbed(self):
        p = build(u2(2) + u1(99))
        assert p.get(1) == Unknown(99)
        assert p.resolve(1) == "Unknown(99)"
        assert p.kind(1) == "UNKNOWN"

    def test_truncated_pool(self):
        with pytest.raises(UnexpectedEof):
            build(pool(3, utf8("Foo")))

    def test_iteration_is_one_based(self, member_pool):
        indices = [index for index, _ in member_pool]
        assert indices == list(range(1, 10))


class TestResolve:
    def test_class_resolves_to_its_name(self, member_pool):
        assert member_pool.resolve(2) == member_pool.resolve(1) == "Foo"

    def test_name_and_type(self, member_pool):
        assert member_pool.resolve(5) == "bar I"

    def test_fieldref(self, member_pool):
        assert member_pool.resolve(6) == "Field: Foo bar I"

    def test_methodref(self, member_pool):
        assert member_pool.resolve(7) == "Method: Foo bar I"

    def test_string_and_integer(self, member_pool):
        assert member_pool.resolve(8) == "bar"
        assert member_pool.resolve(9) == "42"

    def test_interface_methodref(self):
        p = build(pool(
            6,
            utf8("java/lang/Runnable"),  # 1
            class_ref(1),                # 2
            utf8("run"),                 # 3
            utf8("()V"),                 # 4
            name_and_type(3, 4),         # 5
        ) + interface_methodref(2, 5))
        assert p.resolve(6) == "InterfaceMethod: java/lang/Runnable run ()V"
        assert p.kind(6) == "INTERFACE_METHOD"

    def test_method_type_resolves_to_descriptor(self):
        p = build(pool(3, utf8("(I)V"), method_type(1)))
        assert p.resolve(2) == "(I)V"
        assert p.kind(2) == "METHOD_TYPE"

    def test_float_is_raw_bits(self):
        # 1.5f
        p = build(pool(2, float_(0x3FC00000)))
        assert p.resolve(1) == "1069547520"
        assert p.kind(1) == "FLOAT"

    def test_resolve_is_idempotent(self, member_pool):
        assert member_pool.resolve(6) == member_pool.resolve(6)

    def test_dangling_reference(self):
        p = build(pool(2, class_ref(5)))
        with pytest.raises(InvalidPoolIndex):
            p.resolve(1)

    def test_self_reference_hits_depth_guard(self):
        p = build(pool(2, class_ref(1)), max_depth=4)
        with pytest.raises(ResolutionDepthExceeded):
            p.resolve(1)

    def test_method_handle_has_no_text(self):
        p = build(pool(3, utf8("x"), method_handle(6, 1)))
        with pytest.raises(UnresolvedEntryKind) as info:
            p.resolve(2)
        assert info.value.kind == "METHOD_HANDLE"
        assert p.try_resolve(2) is None

    def test_invoke_dynamic_and_reserved_have_no_text(self):
        p = build(pool(4, invoke_dynamic(0, 0), long_(0, 0)))
        assert p.try_resolve(1) is None
        assert p.try_resolve(3) is None

    def test_try_resolve_still_raises_on_bad_index(self, member_pool):
        with pytest.raises(InvalidPoolIndex):
            member_pool.try_resolve(99)


class TestEntries:
    def test_describe(self):
        assert Utf8("Foo").describe() == "UTF8 => Value: Foo"
        assert ClassRef(1).describe() == "Class => Index: 1"

    def test_value(self, member_pool):
        assert member_pool.value(1) == "Foo"
        assert member_pool.value(2) == "CLASS"
