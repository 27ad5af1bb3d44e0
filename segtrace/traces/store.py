"""Loading the previous run's manifest and per-file traces from disk."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from segtrace.config.models import TraceConfig
from segtrace.segments import Segment
from segtrace.traces.models import (
    FileTraceModel,
    TraceLoadError,
    TraceModel,
    manifest_path,
    normalize_path,
    trace_path_for,
)

logger = logging.getLogger(__name__)


class TraceStore:
    """Reads traces persisted under *base_dir* by an earlier regeneration."""

    def __init__(self, base_dir: str | Path, config: TraceConfig | None = None) -> None:
        self.base_dir = Path(base_dir)
        self.config = config or TraceConfig()

    @property
    def manifest_file(self) -> Path:
        return self.base_dir / manifest_path(self.config)

    def trace_file(self, path: str) -> Path:
        return self.base_dir / trace_path_for(path, self.config)

    def load_manifest(self) -> list[str]:
        """Paths traced by the previous run; empty when there was none."""
        manifest = self.manifest_file
        if not manifest.is_file():
            return []
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
            paths = data["tracedFiles"]
            if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
                raise ValueError("tracedFiles must be a list of strings")
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise TraceLoadError(str(manifest), e) from e

        normalized: list[str] = []
        for entry in paths:
            try:
                normalized.append(normalize_path(entry))
            except ValueError as e:
                logger.warning("%s: skipping manifest entry %r: %s", manifest, entry, e)
        return normalized

    def load_old_root(self, path: str) -> Segment | None:
        """The previous tree for *path*, or None on first generation.

        Raises TraceLoadError if a trace exists but cannot be parsed.
        """
        trace_file = self.trace_file(path)
        if not trace_file.is_file():
            return None
        try:
            text = trace_file.read_text(encoding="utf-8")
            return FileTraceModel.from_json(text, path=normalize_path(path)).root
        except (OSError, UnicodeDecodeError, ValueError) as e:
            raise TraceLoadError(path, e) from e

    def prime(self, trace_model: TraceModel, paths: Iterable[str]) -> TraceModel:
        """Load the old tree of every path into *trace_model*'s cache.

        A broken trace is recorded as a failure for that path only; the
        file is then generated as if it had no previous run.
        """
        for path in paths:
            try:
                root = self.load_old_root(path)
            except TraceLoadError as e:
                trace_model.record_failure(e)
                continue
            if root is not None:
                trace_model.remember_old(path, root)
        logger.debug(
            "primed %d old trees (%d failures) from %s",
            len(trace_model.old_roots),
            len(trace_model.failures),
            self.base_dir,
        )
        return trace_model
