"""Merging a freshly generated segment tree with the previously persisted one.

The new tree is authoritative for structure and membership: ids the model no
longer produces disappear. The old tree is authoritative for variable
content, so hand edits survive regeneration. For appendable regions the
emitted child order is either the new generation order or, for regions
declared ``ordered``, the previous run's order with new ids appended.
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import Any

from segtrace.segments.base import Segment
from segtrace.segments.composite import AppendableVariableSegment, CompositeSegment
from segtrace.segments.content import VariableSegment

logger = logging.getLogger(__name__)


def synchronize(new: Segment, old: Segment | None) -> Segment:
    """Merge *new* with its previous counterpart *old* (same id, may be None).

    Total over any pair of segments: a missing or mismatched old segment
    simply means the new generation's content is used.
    """
    if isinstance(new, VariableSegment):
        if isinstance(old, VariableSegment):
            return VariableSegment(new.id, old.content)
        return new
    if isinstance(new, AppendableVariableSegment):
        cls = OrderedSynchronizationSegment if new.ordered else SynchronizationSegment
        return cls(new, old)
    if isinstance(new, CompositeSegment):
        merged = CompositeSegment(new.id)
        for child in new:
            old_child = old.get_child(child.id) if old is not None else None
            merged.add_child(synchronize(child, old_child))
        return merged
    # Literal template text always comes from the current generation.
    return new


class SynchronizationSegment(Segment):
    """Pairs a new appendable segment with the persisted one of the same id.

    Membership is taken from ``new_side``; each surviving child is merged
    recursively with its ``old_side`` counterpart. Emitted order is the new
    generation order. The old side is only read, never modified.
    """

    kind = "appendable"

    def __init__(
        self,
        new_side: AppendableVariableSegment,
        old_side: Segment | None = None,
    ) -> None:
        super().__init__(new_side.id)
        self.new_side = new_side
        self.old_side = old_side
        self._merged: dict[str, Segment] = {}
        for child in new_side:
            old_child = old_side.get_child(child.id) if old_side is not None else None
            self._merged[child.id] = synchronize(child, old_child)
        logger.debug(
            "synchronized %r: %d merged, %d dropped",
            self.id,
            len(self._merged),
            len(self.dropped_ids),
        )

    @property
    def ordered(self) -> bool:
        return self.new_side.ordered

    @property
    def old_order(self) -> tuple[str, ...]:
        return self.old_side.child_order if self.old_side is not None else ()

    @property
    def merged_children(self) -> dict[str, Segment]:
        return dict(self._merged)

    @property
    def dropped_ids(self) -> tuple[str, ...]:
        """Ids of the previous run that the model no longer produces."""
        return tuple(cid for cid in self.old_order if cid not in self._merged)

    def is_member(self, child_id: str) -> bool:
        return child_id in self._merged

    def get_child(self, child_id: str) -> Segment | None:
        """Merged child first, then the previous run's child, else None."""
        child = self._merged.get(child_id)
        if child is None and self.old_side is not None:
            child = self.old_side.get_child(child_id)
        return child

    def _compute_order(self) -> list[str]:
        return list(self.new_side.child_order)

    @cached_property
    def _emitted_order(self) -> tuple[str, ...]:
        return tuple(self._compute_order())

    @property
    def child_order(self) -> tuple[str, ...]:
        return self._emitted_order

    def render(self) -> str:
        return "".join(self._merged[cid].render() for cid in self._emitted_order)

    def to_trace(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind,
            "ordered": self.ordered,
            "children": [self._merged[cid].to_trace() for cid in self._emitted_order],
        }


class OrderedSynchronizationSegment(SynchronizationSegment):
    """Keeps the previous relative order of surviving children.

    Ids still in the merged membership are placed in the order the previous
    run emitted them; ids introduced by this regeneration follow in
    generation order.
    """

    def _compute_order(self) -> list[str]:
        placed: set[str] = set()
        order: list[str] = []
        for cid in self.old_order:
            if cid in self._merged and cid not in placed:
                order.append(cid)
                placed.add(cid)
        for cid in self.new_side.child_order:
            if cid not in placed:
                order.append(cid)
                placed.add(cid)
        return order
