"""
jinspect Error Taxonomy
========================

Every failure raised while decoding a class file derives from
:class:`ClassFileError` and carries the stream offset and the name of the
field being decoded, so that a single reported error points at the
offending bytes.

Fatal conditions (truncation, invalid pool index, malformed text, bad
magic) abort the decode.  :class:`AttributeLengthMismatch` is recoverable:
the structural decoder records it and realigns the stream unless strict
mode is enabled.
"""

from __future__ import annotations

from typing import Optional


class ClassFileError(Exception):
    """Base class for all class-file decoding errors.

    Attributes:
        offset: Byte offset in the input where the problem was detected.
        field:  Name of the class-file field being decoded.
    """

    def __init__(
        self,
        message: str,
        *,
        offset: Optional[int] = None,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.field = field

    def __str__(self) -> str:
        context: list[str] = []
        if self.field:
            context.append(f"field={self.field}")
        if self.offset is not None:
            context.append(f"offset=0x{self.offset:x}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class IoTruncated(ClassFileError):
    """Fewer bytes were available than a read requested."""


class UnexpectedEof(IoTruncated):
    """Raised by the byte reader when the source is exhausted mid-read."""

    def __init__(
        self,
        requested: int,
        available: int,
        *,
        offset: Optional[int] = None,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"unexpected end of input: needed {requested} byte(s), "
            f"{available} available",
            offset=offset,
            field=field,
        )
        self.requested = requested
        self.available = available


class InvalidText(ClassFileError):
    """A Utf8 payload is not valid UTF-8."""


class InvalidMagic(ClassFileError):
    """The leading u32 is not ``0xCAFEBABE``."""


class InvalidPoolIndex(ClassFileError):
    """A constant-pool index is 0 or larger than the pool."""

    def __init__(
        self,
        index: int,
        size: int,
        *,
        offset: Optional[int] = None,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"constant pool index {index} out of range [1, {size}]",
            offset=offset,
            field=field,
        )
        self.index = index
        self.size = size


class UnresolvedEntryKind(ClassFileError):
    """Resolution reached an entry kind with no textual form."""

    def __init__(
        self,
        index: int,
        kind: str,
        *,
        offset: Optional[int] = None,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"constant pool entry #{index} of kind {kind} cannot be resolved to text",
            offset=offset,
            field=field,
        )
        self.index = index
        self.kind = kind


class ResolutionDepthExceeded(ClassFileError):
    """Resolution followed more indirections than the configured limit."""


class UnexpectedEntryKind(ClassFileError):
    """An index points at an entry of the wrong kind (e.g. this_class not a Class)."""


class AttributeLengthMismatch(ClassFileError):
    """Bytes consumed by a recognised attribute differ from its declared length."""

    def __init__(
        self,
        name: str,
        declared: int,
        consumed: int,
        *,
        offset: Optional[int] = None,
    ) -> None:
        super().__init__(
            f"attribute {name!r} declared {declared} byte(s) but "
            f"{consumed} were consumed",
            offset=offset,
            field=f"attribute:{name}",
        )
        self.name = name
        self.declared = declared
        self.consumed = consumed


class FileUnavailable(Exception):
    """The input file is missing, unreadable, or exceeds the size limit.

    Raised only at the engine boundary; the decoder never sees it.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"could not open file: {path}: {reason}")
        self.path = path
        self.reason = reason
