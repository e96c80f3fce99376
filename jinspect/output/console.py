"""
jinspect Console Output
========================

Rich-powered terminal display for decoded class files.  Each section of
the class file (header, class linkage, constant pool, interfaces,
fields, methods, attributes) is rendered only when the active
:class:`~jinspect.output.verbosity.VerboseMode` selects it.

Uses the InspectConsole abstraction for consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from shared.console import InspectConsole

from jinspect.core.errors import ClassFileError
from jinspect.core.models import (
    AttributeRecord,
    ClassFile,
    CodeAttribute,
    FieldRecord,
    LineNumberTableAttribute,
    MethodRecord,
    SourceFileAttribute,
)
from jinspect.output.verbosity import Section, VerboseMode

_RAW_PREVIEW_BYTES: int = 16

_KIND_COLOURS: dict[str, str] = {
    "UTF8": "bright_green",
    "CLASS": "bright_cyan",
    "STRING": "green",
    "FIELD": "bright_magenta",
    "METHOD": "magenta",
    "INTERFACE_METHOD": "magenta",
    "NAME_AND_TYPE": "bright_blue",
    "UNKNOWN": "bright_red",
    "RESERVED": "dim",
}


def _table(*columns: str) -> Table:
    tbl = Table(
        border_style="bright_cyan",
        header_style="bold bright_magenta",
        padding=(0, 1),
    )
    tbl.add_column("#", style="dim", justify="right")
    for name in columns:
        tbl.add_column(name)
    return tbl


def _attribute_summary(attr: AttributeRecord) -> str:
    """One-line description of an attribute's payload."""
    payload = attr.payload
    if isinstance(payload, CodeAttribute):
        return (
            f"MaxStack: {payload.max_stack}, MaxLocals: {payload.max_locals}, "
            f"CodeLen: {payload.code_length}, "
            f"Handlers: {len(payload.exception_table)}, "
            f"Nested: {escape(', '.join(a.name for a in payload.attributes)) or '-'}"
        )
    if isinstance(payload, LineNumberTableAttribute):
        rows = ", ".join(f"{e.start_pc}->{e.line_number}" for e in payload.entries)
        return f"Lines: {rows or '-'}"
    if isinstance(payload, SourceFileAttribute):
        return f"SourceFile: {escape(payload.source_file)}"
    raw = attr.raw or b""
    preview = raw[:_RAW_PREVIEW_BYTES].hex(" ")
    if len(raw) > _RAW_PREVIEW_BYTES:
        preview += " ..."
    return f"[dim]opaque[/dim] {preview}"


class ClassFileConsoleOutput:
    """Rich terminal display for a decoded :class:`ClassFile`.

    Usage::

        output = ClassFileConsoleOutput()
        output.display(class_file, VerboseMode.build(["pool", "method"]))
    """

    def __init__(self, console: InspectConsole | None = None) -> None:
        self._console: InspectConsole = console or InspectConsole()

    def display(
        self,
        class_file: ClassFile,
        mode: VerboseMode | None = None,
        path: str = "",
    ) -> None:
        """Render every section selected by *mode* (all when ``None``)."""
        mode = mode or VerboseMode()

        if path:
            self._console.banner(path)

        if mode.can_show(Section.HEADER):
            self.display_header(class_file)
        if mode.can_show(Section.POOL):
            self.display_pool(class_file)
        if mode.can_show(Section.CLAZZ):
            self.display_class(class_file)
        if mode.can_show(Section.INTERFACE):
            self.display_interfaces(class_file)
        if mode.can_show(Section.FIELD):
            self.display_fields(class_file.fields)
        if mode.can_show(Section.METHOD):
            self.display_methods(class_file.methods)
        if mode.can_show(Section.ATTRIBUTE):
            self.display_attributes(class_file.attributes)

        if class_file.diagnostics:
            self._console.blank()
            self._console.table(
                "Diagnostics",
                ["Kind", "Offset", "Field", "Message"],
                [
                    (
                        d.kind,
                        f"0x{d.offset:x}" if d.offset is not None else "-",
                        escape(d.field) if d.field else "-",
                        escape(d.message),
                    )
                    for d in class_file.diagnostics
                ],
                styles=["bold yellow", "dim", "", ""],
            )

    # ------------------------------------------------------------------ #
    #  Sections
    # ------------------------------------------------------------------ #

    def display_header(self, class_file: ClassFile) -> None:
        h = class_file.header
        lines = [
            f"[bold]Magic:[/bold]  0x{h.magic:08X}",
            f"[bold]Major:[/bold]  {h.major_version} (Java {h.java_release})",
            f"[bold]Minor:[/bold]  {h.minor_version}",
        ]
        self._console.rich.print(Panel(
            "\n".join(lines),
            title="[bold bright_cyan]Header[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(0, 2),
        ))

    def display_class(self, class_file: ClassFile) -> None:
        self._console.section("Class")
        super_name = escape(class_file.super_class.name) if class_file.super_class else "-"
        lines = [
            f"[bold]AccessFlags:[/bold] 0x{class_file.access_flags:04X} "
            f"({class_file.flags.label_string() or '-'})",
            f"[bold]ThisClass:[/bold]   #{class_file.this_class.index} {escape(class_file.name)}",
            f"[bold]SuperClass:[/bold]  {super_name}",
        ]
        if class_file.source_file:
            lines.append(f"[bold]SourceFile:[/bold]  {escape(class_file.source_file)}")
        self._console.print("\n".join(lines))

    def display_pool(self, class_file: ClassFile) -> None:
        pool = class_file.constant_pool
        self._console.section(f"Constant Pool ({len(pool)})")
        tbl = _table("Kind", "Entry", "Resolved")
        for index, entry in pool:
            colour = _KIND_COLOURS.get(entry.kind, "white")
            try:
                resolved = pool.try_resolve(index)
                cell = escape(resolved) if resolved is not None else "[dim]-[/dim]"
            except ClassFileError as exc:
                cell = f"[red]{escape(str(exc))}[/red]"
            tbl.add_row(
                f"{index:03}",
                f"[{colour}]{entry.kind}[/{colour}]",
                escape(entry.describe()),
                cell,
            )
        self._console.print(tbl)

    def display_interfaces(self, class_file: ClassFile) -> None:
        self._console.section(f"Interfaces ({len(class_file.interfaces)})")
        if not class_file.interfaces:
            return
        tbl = _table("Index", "Name")
        for i, ref in enumerate(class_file.interfaces):
            tbl.add_row(f"{i:02}", str(ref.index), escape(ref.name))
        self._console.print(tbl)

    def display_fields(self, fields: list[FieldRecord]) -> None:
        self._console.section(f"Fields ({len(fields)})")
        if not fields:
            return
        tbl = _table("Flags", "Name", "Descriptor", "Attributes")
        for i, fld in enumerate(fields):
            tbl.add_row(
                f"{i:02}",
                fld.flags.label_string(),
                escape(fld.name),
                escape(fld.descriptor),
                "\n".join(f"{escape(a.name)}: {_attribute_summary(a)}" for a in fld.attributes),
            )
        self._console.print(tbl)

    def display_methods(self, methods: list[MethodRecord]) -> None:
        self._console.section(f"Methods ({len(methods)})")
        if not methods:
            return
        tbl = _table("Flags", "Name", "Descriptor", "Attributes")
        for i, method in enumerate(methods):
            tbl.add_row(
                f"{i:02}",
                method.flags.label_string(),
                escape(method.name),
                escape(method.descriptor),
                "\n".join(f"{escape(a.name)}: {_attribute_summary(a)}" for a in method.attributes),
            )
        self._console.print(tbl)

    def display_attributes(self, attributes: list[AttributeRecord]) -> None:
        self._console.section(f"Attributes ({len(attributes)})")
        if not attributes:
            return
        tbl = _table("Name", "Length", "Value")
        for i, attr in enumerate(attributes):
            tbl.add_row(f"{i:02}", escape(attr.name), str(attr.length), _attribute_summary(attr))
        self._console.print(tbl)
