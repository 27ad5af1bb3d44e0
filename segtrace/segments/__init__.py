"""Segment trees: the regions a generated file is made of."""

from segtrace.segments.base import Segment, SegmentStructureError
from segtrace.segments.composite import AppendableVariableSegment, CompositeSegment
from segtrace.segments.content import LiteralSegment, VariableSegment
from segtrace.segments.serialization import (
    TraceRecordError,
    segment_from_json,
    segment_from_trace,
    segment_to_json,
)
from segtrace.segments.sync import (
    OrderedSynchronizationSegment,
    SynchronizationSegment,
    synchronize,
)

__all__ = [
    "AppendableVariableSegment",
    "CompositeSegment",
    "LiteralSegment",
    "OrderedSynchronizationSegment",
    "Segment",
    "SegmentStructureError",
    "SynchronizationSegment",
    "TraceRecordError",
    "VariableSegment",
    "segment_from_json",
    "segment_from_trace",
    "segment_to_json",
    "synchronize",
]
