"""
jinspect Parsers
=================

Byte-level decoding of the class-file format: the big-endian reader, the
constant pool, access flags, attributes and the top-level class parser.
"""
