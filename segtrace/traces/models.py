"""Trace models: one segment tree per generated file, aggregated per artifact."""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import PurePosixPath
from typing import Any

from segtrace.config.models import TraceConfig
from segtrace.segments import Segment, segment_from_trace, synchronize

logger = logging.getLogger(__name__)

TRACE_VERSION = 1


class TraceLoadError(Exception):
    """A persisted trace for one file could not be loaded."""

    def __init__(self, path: str, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"cannot load trace for {path}: {cause}")
        self.__cause__ = cause


def normalize_path(path: str) -> str:
    """Relative POSIX form of a generated file path (no backslashes)."""
    normalized = str(PurePosixPath(path.replace("\\", "/"))).lstrip("/")
    if normalized in ("", "."):
        raise ValueError(f"invalid file path: {path!r}")
    return normalized


def trace_path_for(path: str, config: TraceConfig | None = None) -> str:
    """Where the trace of generated file *path* is persisted.

    ``src/Main.java`` -> ``traces/src/Main.java.traces``
    """
    cfg = config or TraceConfig()
    return f"{cfg.traces_dir}/{normalize_path(path)}{cfg.trace_suffix}"


def manifest_path(config: TraceConfig | None = None) -> str:
    cfg = config or TraceConfig()
    return f"{cfg.traces_dir}/{cfg.manifest_name}"


class FileTraceModel:
    """The segment tree of one generated file plus its derived outputs."""

    def __init__(self, path: str, root: Segment) -> None:
        self.path = normalize_path(path)
        self.root = root

    @property
    def content(self) -> str:
        """The file text as it is written to disk."""
        return self.root.render()

    def synchronize(self, old_root: Segment | None) -> FileTraceModel:
        """Merge this (new) tree with the previous run's tree for the same file."""
        if old_root is None:
            logger.debug("%s: first generation, no previous trace", self.path)
        return FileTraceModel(self.path, synchronize(self.root, old_root))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_trace(self) -> dict[str, Any]:
        return {"path": self.path, "version": TRACE_VERSION, "root": self.root.to_trace()}

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_trace(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_trace(cls, record: Any, path: str | None = None) -> FileTraceModel:
        """Rebuild from a ``.traces`` record.

        Bare segment records (without the file envelope) are accepted too;
        *path* then has to be given.
        """
        if isinstance(record, dict) and "root" in record:
            root = segment_from_trace(record["root"])
            file_path = path or record.get("path")
        else:
            root = segment_from_trace(record)
            file_path = path
        if not isinstance(file_path, str):
            raise ValueError("trace record has no file path")
        return cls(file_path, root)

    @classmethod
    def from_json(cls, data: str, path: str | None = None) -> FileTraceModel:
        return cls.from_trace(json.loads(data), path=path)

    def __repr__(self) -> str:
        return f"FileTraceModel({self.path!r})"


class TraceModel:
    """All traced files of one generated artifact, built once per run.

    Also owns the run-scoped cache of old trees loaded from the previous
    run and the per-file load failures recorded while priming it.
    """

    def __init__(self, config: TraceConfig | None = None) -> None:
        self.config = config or TraceConfig()
        self._files: dict[str, FileTraceModel] = {}
        self.old_roots: dict[str, Segment] = {}
        self.failures: dict[str, TraceLoadError] = {}

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def remember_old(self, path: str, root: Segment) -> None:
        self.old_roots[normalize_path(path)] = root

    def record_failure(self, error: TraceLoadError) -> None:
        logger.warning("%s; regenerating it without previous content", error)
        self.failures[normalize_path(error.path)] = error

    def add_file(self, path: str, new_root: Segment) -> FileTraceModel:
        """Merge *new_root* against the cached old tree for *path* and store it."""
        fresh = FileTraceModel(path, new_root)
        merged = fresh.synchronize(self.old_roots.get(fresh.path))
        self._files[merged.path] = merged
        return merged

    def add_file_trace(self, file_trace: FileTraceModel) -> None:
        """Store an already final file trace as-is."""
        self._files[file_trace.path] = file_trace

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def files(self) -> dict[str, FileTraceModel]:
        return dict(self._files)

    @property
    def paths(self) -> list[str]:
        return sorted(self._files)

    def get(self, path: str) -> FileTraceModel | None:
        return self._files.get(normalize_path(path))

    def was_merged(self, path: str) -> bool:
        """True if *path* had a usable trace from the previous run."""
        return normalize_path(path) in self.old_roots

    def __iter__(self) -> Iterator[FileTraceModel]:
        return (self._files[p] for p in self.paths)

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        try:
            return normalize_path(path) in self._files
        except ValueError:
            return False

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def to_manifest(self) -> dict[str, Any]:
        return {"tracedFiles": self.paths}

    def manifest_json(self) -> str:
        # POSIX paths and raw UTF-8: the manifest never carries backslash escapes.
        return json.dumps(self.to_manifest(), indent=self.config.indent, ensure_ascii=False)

    def removed_paths(self, previous_paths: Iterable[str]) -> list[str]:
        """Files traced by a previous run that this run no longer generates."""
        previous = {normalize_path(p) for p in previous_paths}
        return sorted(previous - set(self._files))

    def rendered_files(self, guidances: str | None = None) -> dict[str, str]:
        """Relative path -> text for every output of this run.

        Includes each generated file, its trace, the manifest and, when
        given, the guidances document.
        """
        out: dict[str, str] = {}
        for file_trace in self:
            out[file_trace.path] = file_trace.content
            out[trace_path_for(file_trace.path, self.config)] = file_trace.to_json(
                indent=self.config.indent
            )
        out[manifest_path(self.config)] = self.manifest_json()
        if guidances is not None:
            out[f"{self.config.traces_dir}/{self.config.guidances_name}"] = guidances
        return out

    def encoded_files(self, guidances: str | None = None) -> list[tuple[str, str]]:
        """Same as rendered_files(), as (path, base64 UTF-8 payload) pairs."""
        return [
            (path, base64.b64encode(text.encode("utf-8")).decode("ascii"))
            for path, text in self.rendered_files(guidances).items()
        ]
