"""Output subsystem: writes generated files and their traces."""

from segtrace.output.writer import TracedFileWriter

__all__ = [
    "TracedFileWriter",
]
