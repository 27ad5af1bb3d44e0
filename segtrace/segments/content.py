"""Leaf segments holding literal template text or user-editable content."""

from __future__ import annotations

from typing import Any

from segtrace.segments.base import Segment


class LiteralSegment(Segment):
    """Fixed template text. The generator owns it and re-emits it every run."""

    kind = "literal"

    def __init__(self, segment_id: str, content: str = "") -> None:
        super().__init__(segment_id)
        self._content = content

    @property
    def content(self) -> str:
        return self._content

    def render(self) -> str:
        return self._content

    def to_trace(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.kind, "content": self._content}


class VariableSegment(Segment):
    """Free-form content carried forward verbatim once it has been persisted."""

    kind = "variable"

    def __init__(self, segment_id: str, content: str = "") -> None:
        super().__init__(segment_id)
        self.content = content

    def render(self) -> str:
        return self.content

    def to_trace(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.kind, "content": self.content}
