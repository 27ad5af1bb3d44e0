"""Per-file and per-artifact trace models and their persistence."""

from segtrace.traces.models import (
    FileTraceModel,
    TraceLoadError,
    TraceModel,
    manifest_path,
    normalize_path,
    trace_path_for,
)
from segtrace.traces.store import TraceStore

__all__ = [
    "FileTraceModel",
    "TraceLoadError",
    "TraceModel",
    "TraceStore",
    "manifest_path",
    "normalize_path",
    "trace_path_for",
]
