"""Abstract segment interface shared by every node of a traced file."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class SegmentStructureError(ValueError):
    """Raised when a segment tree would become structurally inconsistent."""


class Segment(ABC):
    """A named region of a generated file.

    Every node in a trace tree is a Segment. The id is unique among siblings
    and stays stable across regenerations for the same model element.
    """

    kind: str = ""

    def __init__(self, segment_id: str) -> None:
        if not isinstance(segment_id, str) or not segment_id.strip():
            raise SegmentStructureError(f"segment id must be a non-empty string, got {segment_id!r}")
        self._id = segment_id

    @property
    def id(self) -> str:
        return self._id

    @abstractmethod
    def render(self) -> str:
        """Return exactly the text that belongs at this segment's position."""
        ...

    @abstractmethod
    def to_trace(self) -> dict[str, Any]:
        """Return a JSON-serializable record sufficient to rebuild this segment."""
        ...

    def get_child(self, child_id: str) -> Segment | None:
        """Look up a direct child by id. Absence is returned as None."""
        return None

    @property
    def child_order(self) -> tuple[str, ...]:
        """Child ids in emitted order."""
        return ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._id!r})"
