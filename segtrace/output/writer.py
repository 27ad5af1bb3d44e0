"""Writes a TraceModel's files, traces and manifest to disk."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from segtrace.config.models import TraceConfig
from segtrace.traces.models import TraceModel, normalize_path, trace_path_for

logger = logging.getLogger(__name__)


class TracedFileWriter:
    """Writes the rendered outputs of one regeneration run under *base_dir*.

    Every generated file is accompanied by its ``.traces`` sibling under the
    traces directory, and the manifest lists every traced path.
    """

    def __init__(self, base_dir: str | Path, config: TraceConfig | None = None) -> None:
        self.base_dir = Path(base_dir)
        self.config = config or TraceConfig()

    def _resolve(self, rel_path: str) -> Path:
        """Map a relative output path into base_dir, refusing escapes."""
        dest = self.base_dir / rel_path
        if not dest.resolve().is_relative_to(self.base_dir.resolve()):
            raise ValueError(f"Output path escapes base directory: {rel_path}")
        return dest

    def write(
        self,
        trace_model: TraceModel,
        *,
        guidances: str | None = None,
        dry_run: bool = False,
    ) -> list[Path]:
        """Write every output of *trace_model*. Returns the destination paths."""
        written: list[Path] = []
        for rel_path, text in trace_model.rendered_files(guidances).items():
            dest = self._resolve(rel_path)
            if dry_run:
                logger.debug("dry-run: would write %s", dest)
                written.append(dest)
                continue
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(text, encoding="utf-8")
            logger.info("wrote %s (%d bytes)", dest, len(text))
            written.append(dest)
        return written

    def delete_removed(self, paths: Iterable[str], *, dry_run: bool = False) -> list[Path]:
        """Delete generated files (and their traces) no longer produced by the model."""
        removed: list[Path] = []
        for path in paths:
            rel = normalize_path(path)
            for target in (self._resolve(rel), self._resolve(trace_path_for(rel, self.config))):
                if not target.is_file():
                    continue
                if dry_run:
                    logger.debug("dry-run: would delete %s", target)
                else:
                    target.unlink()
                    logger.info("deleted %s", target)
                removed.append(target)
        return removed
