"""segtrace - segment trees, trace persistence and model synchronization for generated code."""

from segtrace.config import SegTraceConfig, load_config
from segtrace.output import TracedFileWriter
from segtrace.regenerator import RegenerationReport, regenerate
from segtrace.segments import (
    AppendableVariableSegment,
    CompositeSegment,
    LiteralSegment,
    OrderedSynchronizationSegment,
    Segment,
    SynchronizationSegment,
    VariableSegment,
    synchronize,
)
from segtrace.traces import FileTraceModel, TraceModel, TraceStore

__version__ = "0.1.0"

__all__ = [
    "AppendableVariableSegment",
    "CompositeSegment",
    "FileTraceModel",
    "LiteralSegment",
    "OrderedSynchronizationSegment",
    "RegenerationReport",
    "Segment",
    "SegTraceConfig",
    "SynchronizationSegment",
    "TraceModel",
    "TraceStore",
    "TracedFileWriter",
    "VariableSegment",
    "load_config",
    "regenerate",
    "synchronize",
]
