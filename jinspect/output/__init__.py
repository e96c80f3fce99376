"""
jinspect Output Module
=======================

Console display, JSON report generation and section selection for
decoded class files.
"""

from jinspect.output.console import ClassFileConsoleOutput
from jinspect.output.report import ClassFileReportGenerator
from jinspect.output.verbosity import Section, VerboseMode

__all__ = [
    "ClassFileConsoleOutput",
    "ClassFileReportGenerator",
    "Section",
    "VerboseMode",
]
