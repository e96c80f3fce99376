"""
jinspect Report Generator
==========================

Builds a JSON document from a decoded :class:`ClassFile`.  Everything the
console view shows is included: the header, class linkage, the constant
pool (each slot with its description and resolved text), interfaces,
members and attributes.  Bytecode and opaque attribute payloads are
emitted as lowercase hex strings.

The document is suitable for diffing two builds of the same class or
feeding downstream tooling.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jinspect.core.errors import ClassFileError
from jinspect.core.models import (
    AttributeRecord,
    ClassFile,
    CodeAttribute,
    LineNumberTableAttribute,
    SourceFileAttribute,
    FieldRecord,
    MethodRecord,
)

REPORT_TYPE: str = "jinspect_class_file"
REPORT_VERSION: str = "1.0.0"


class ClassFileReportGenerator:
    """Generate JSON reports for decoded class files.

    Usage::

        gen = ClassFileReportGenerator()
        gen.generate_json(class_file, "reports/App.json", source="App.class")
    """

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def build_report(self, class_file: ClassFile, source: str = "") -> dict[str, Any]:
        """Build the report as a plain, JSON-serialisable dictionary."""
        header = class_file.header
        return {
            "report_type": REPORT_TYPE,
            "version": REPORT_VERSION,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "source": source,
            "header": {
                "magic": f"0x{header.magic:08X}",
                "minor_version": header.minor_version,
                "major_version": header.major_version,
                "java_release": header.java_release,
            },
            "class": {
                "access_flags": class_file.access_flags,
                "flags": class_file.flags.labels(),
                "this_class": class_file.this_class.model_dump(),
                "super_class": (
                    class_file.super_class.model_dump()
                    if class_file.super_class is not None
                    else None
                ),
                "source_file": class_file.source_file,
            },
            "constant_pool": self._pool(class_file),
            "interfaces": [ref.model_dump() for ref in class_file.interfaces],
            "fields": [self._member(f) for f in class_file.fields],
            "methods": [self._member(m) for m in class_file.methods],
            "attributes": [self._attribute(a) for a in class_file.attributes],
            "diagnostics": [d.model_dump() for d in class_file.diagnostics],
        }

    def render_json(self, class_file: ClassFile, source: str = "") -> str:
        return json.dumps(
            self.build_report(class_file, source),
            indent=2,
            ensure_ascii=False,
            default=str,
        )

    def generate_json(
        self,
        class_file: ClassFile,
        output_path: str,
        source: str = "",
    ) -> str:
        """Write the JSON report to *output_path*.

        Args:
            class_file: The decoded class file.
            output_path: Filesystem path for the output JSON file.
            source: Path of the inspected class file, recorded in the report.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(self.render_json(class_file, source))
            f.write("\n")

        return str(path.resolve())

    # ------------------------------------------------------------------ #
    #  Section builders
    # ------------------------------------------------------------------ #

    @staticmethod
    def _pool(class_file: ClassFile) -> list[dict[str, Any]]:
        pool = class_file.constant_pool
        rows: list[dict[str, Any]] = []
        for index, entry in pool:
            row: dict[str, Any] = {
                "index": index,
                "kind": entry.kind,
                "tag": entry.tag,
                "description": entry.describe(),
            }
            try:
                row["resolved"] = pool.try_resolve(index)
            except ClassFileError as exc:
                row["resolved"] = None
                row["error"] = str(exc)
            rows.append(row)
        return rows

    def _member(self, member: FieldRecord | MethodRecord) -> dict[str, Any]:
        return {
            "access_flags": member.access_flags,
            "flags": member.flags.labels(),
            "name_index": member.name_index,
            "name": member.name,
            "descriptor_index": member.descriptor_index,
            "descriptor": member.descriptor,
            "attributes": [self._attribute(a) for a in member.attributes],
        }

    def _attribute(self, attr: AttributeRecord) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name_index": attr.name_index,
            "name": attr.name,
            "length": attr.length,
            "offset": attr.offset,
        }
        payload = attr.payload
        if isinstance(payload, CodeAttribute):
            data["code"] = {
                "max_stack": payload.max_stack,
                "max_locals": payload.max_locals,
                "code_length": payload.code_length,
                "bytecode": payload.code.hex(),
                "exception_table": [e.model_dump() for e in payload.exception_table],
                "attributes": [self._attribute(a) for a in payload.attributes],
            }
        elif isinstance(payload, LineNumberTableAttribute):
            data["line_numbers"] = [e.model_dump() for e in payload.entries]
        elif isinstance(payload, SourceFileAttribute):
            data["source_file"] = payload.source_file
        else:
            data["raw"] = (attr.raw or b"").hex()
        return data
