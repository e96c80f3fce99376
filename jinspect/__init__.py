"""
jinspect -- Java Class File Inspector
======================================

Decodes compiled JVM class files into a typed, inspectable structure:
header, constant pool with reference resolution, class linkage,
interfaces, fields, methods and their nested attributes.

Modules:
    - jinspect.parsers.reader: Big-endian byte cursor
    - jinspect.parsers.constant_pool: Pool entries and resolution
    - jinspect.parsers.access_flags: Context-dependent flag decoding
    - jinspect.parsers.attributes: Code / LineNumberTable / SourceFile decoding
    - jinspect.parsers.class_parser: Sequential class-file decoder
    - jinspect.core.engine: File access and decode orchestration
    - jinspect.core.models: Pydantic data models
    - jinspect.output: Console and JSON report output
    - jinspect.cli: Click-based command-line interface

References:
    - Lindholm, T. et al. (2014). The Java Virtual Machine Specification,
      Java SE 8 Edition, chapter 4.
"""

__version__ = "0.1.0"
__tool_name__ = "jinspect"
