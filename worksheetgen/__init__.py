"""Worksheet generator: PDF teaching material to student/teacher worksheets.

The package has no dependency on the UI layer except for
``worksheetgen.app``; everything else can be driven from the CLI or tests.
"""

__version__ = "0.1.0"
