"""Rebuilding segment trees from persisted trace records."""

from __future__ import annotations

import json
import logging
from typing import Any

from segtrace.segments.base import Segment
from segtrace.segments.composite import AppendableVariableSegment, CompositeSegment
from segtrace.segments.content import LiteralSegment, VariableSegment

logger = logging.getLogger(__name__)

_LEAF_KINDS = {"literal": LiteralSegment, "variable": VariableSegment}
_CONTAINER_KINDS = {"composite": CompositeSegment, "appendable": AppendableVariableSegment}


class TraceRecordError(ValueError):
    """The root of a trace record cannot be turned into a segment."""


def _record_kind(record: dict[str, Any]) -> str | None:
    kind = record.get("type")
    if kind is None:
        # Minimal records: {"id", "children"} or {"id", "content"}
        if "children" in record:
            return "composite"
        if "content" in record:
            return "variable"
    return kind


def _build(record: Any) -> Segment | None:
    """Build one segment; None means the record carries no usable content."""
    if not isinstance(record, dict):
        return None
    segment_id = record.get("id")
    if not isinstance(segment_id, str) or not segment_id.strip():
        return None

    kind = _record_kind(record)
    if kind in _LEAF_KINDS:
        content = record.get("content")
        if not isinstance(content, str):
            return None
        return _LEAF_KINDS[kind](segment_id, content)

    if kind in _CONTAINER_KINDS:
        if kind == "appendable":
            segment: CompositeSegment = AppendableVariableSegment(
                segment_id, ordered=bool(record.get("ordered", False))
            )
        else:
            segment = CompositeSegment(segment_id)
        children = record.get("children")
        if not isinstance(children, list):
            children = []
        for child_record in children:
            child = _build(child_record)
            if child is None:
                logger.warning(
                    "dropping unusable trace record under %r: %.80r", segment_id, child_record
                )
                continue
            if child.id in segment:
                logger.warning("duplicate id %r under %r, keeping first", child.id, segment_id)
                continue
            segment.add_child(child)
        return segment

    return None


def segment_from_trace(record: Any) -> Segment:
    """Rebuild a segment tree from a trace record produced by ``to_trace()``.

    Malformed records below the root are dropped (their ids simply have no
    prior content). A root that cannot be rebuilt raises TraceRecordError.
    """
    segment = _build(record)
    if segment is None:
        raise TraceRecordError(f"not a valid segment trace record: {record!r:.120}")
    return segment


def segment_to_json(segment: Segment, indent: int | None = None) -> str:
    """Serialize a segment tree to a JSON string."""
    return json.dumps(segment.to_trace(), indent=indent, ensure_ascii=False)


def segment_from_json(data: str) -> Segment:
    """Deserialize a segment tree from a JSON string."""
    return segment_from_trace(json.loads(data))
