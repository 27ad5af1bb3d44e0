"""Container segments: fixed template skeletons and open-ended model lists."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from segtrace.segments.base import Segment, SegmentStructureError


class CompositeSegment(Segment):
    """An ordered container of named child segments.

    The child-id sequence and the id -> child map are always kept in step:
    every id in the sequence has exactly one entry in the map and no id
    appears twice.
    """

    kind = "composite"

    def __init__(self, segment_id: str, children: Iterable[Segment] = ()) -> None:
        super().__init__(segment_id)
        self._order: list[str] = []
        self._children: dict[str, Segment] = {}
        for child in children:
            self.add_child(child)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_child(self, child: Segment) -> Segment:
        """Append *child* at the end of the child sequence."""
        return self.insert_child(len(self._order), child)

    def insert_child(self, index: int, child: Segment) -> Segment:
        """Insert *child* at *index*. Duplicate ids are rejected."""
        if not isinstance(child, Segment):
            raise SegmentStructureError(f"expected a Segment, got {type(child).__name__}")
        if child.id in self._children:
            raise SegmentStructureError(
                f"duplicate child id {child.id!r} in segment {self.id!r}"
            )
        self._order.insert(index, child.id)
        self._children[child.id] = child
        return child

    def remove_child(self, child_id: str) -> Segment | None:
        """Remove and return the child with *child_id*, or None if absent."""
        child = self._children.pop(child_id, None)
        if child is not None:
            self._order.remove(child_id)
        return child

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_child(self, child_id: str) -> Segment | None:
        return self._children.get(child_id)

    @property
    def child_order(self) -> tuple[str, ...]:
        return tuple(self._order)

    def __iter__(self) -> Iterator[Segment]:
        return (self._children[cid] for cid in self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, child_id: object) -> bool:
        return child_id in self._children

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render(self) -> str:
        return "".join(child.render() for child in self)

    def to_trace(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind,
            "children": [child.to_trace() for child in self],
        }


class AppendableVariableSegment(CompositeSegment):
    """A composite whose children track a dynamic list of model elements.

    Membership and order change between regenerations. ``ordered`` is the
    region's declared synchronization policy: when set, the previous run's
    order of surviving children is kept and new children go last.
    """

    kind = "appendable"

    def __init__(
        self,
        segment_id: str,
        children: Iterable[Segment] = (),
        *,
        ordered: bool = False,
    ) -> None:
        super().__init__(segment_id, children)
        self.ordered = ordered

    def to_trace(self) -> dict[str, Any]:
        record = super().to_trace()
        record["ordered"] = self.ordered
        return record
