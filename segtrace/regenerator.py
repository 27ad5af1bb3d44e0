"""One regeneration pass: merge new skeleton trees with the previous run's traces."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from segtrace.config.models import TraceConfig
from segtrace.segments import Segment
from segtrace.traces import (
    FileTraceModel,
    TraceLoadError,
    TraceModel,
    TraceStore,
    normalize_path,
)

logger = logging.getLogger(__name__)


class RegenerationReport(BaseModel):
    """Outcome of a regeneration pass."""

    merged: list[str] = Field(default_factory=list)
    fresh: list[str] = Field(default_factory=list)
    failed: list[tuple[str, str]] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)


def regenerate(
    new_roots: Mapping[str, Segment],
    previous_dir: str | Path | None = None,
    config: TraceConfig | None = None,
) -> tuple[TraceModel, RegenerationReport]:
    """Build the TraceModel for one run.

    *new_roots* maps each generated file path to the tree produced from the
    current model. Traces of the previous run are read from *previous_dir*
    (if given); a file whose old trace cannot be loaded is regenerated fresh
    and reported under ``failed``, without affecting any other file.
    """
    cfg = config or TraceConfig()
    model = TraceModel(cfg)
    report = RegenerationReport()
    previous_paths: list[str] = []

    if previous_dir is not None:
        store = TraceStore(previous_dir, cfg)
        try:
            previous_paths = store.load_manifest()
        except TraceLoadError as e:
            logger.warning("%s; treating previous run as untraced", e)
            report.failed.append((e.path, str(e.cause)))
        store.prime(model, [normalize_path(p) for p in new_roots])

    for path, root in new_roots.items():
        file_trace = model.add_file(path, root)
        if model.was_merged(file_trace.path):
            report.merged.append(file_trace.path)
        else:
            report.fresh.append(file_trace.path)

    for path, error in sorted(model.failures.items()):
        report.failed.append((path, str(error.cause)))
    report.removed = model.removed_paths(previous_paths)
    return model, report


def load_skeletons(source_dir: str | Path, suffix: str = ".traces") -> dict[str, Segment]:
    """Read skeleton trees written by a template layer.

    Each ``<path><suffix>`` file under *source_dir* holds the new tree for
    generated file ``<path>``. Unreadable skeletons are errors: there is no
    sensible fallback for a file the generator itself could not describe.
    """
    root_dir = Path(source_dir)
    roots: dict[str, Segment] = {}
    for trace_file in sorted(root_dir.rglob(f"*{suffix}")):
        if not trace_file.is_file():
            continue
        rel = trace_file.relative_to(root_dir).as_posix()[: -len(suffix)]
        text = trace_file.read_text(encoding="utf-8")
        try:
            roots[rel] = FileTraceModel.from_json(text, path=rel).root
        except ValueError as e:
            raise ValueError(f"Invalid skeleton {trace_file}: {e}") from e
    return roots
