"""Tests for the segtrace CLI (sync, show, publish, config)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from segtrace.cli import app
from segtrace.segments import (
    AppendableVariableSegment,
    CompositeSegment,
    LiteralSegment,
    VariableSegment,
)
from segtrace.traces import FileTraceModel

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    """Run every command from an empty directory with no user config."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SEGTRACE_CONFIG", raising=False)
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler.get_name() == "segtrace":
            root.removeHandler(handler)
    root.setLevel(level)


def _write_skeleton(skel_dir: Path, path: str, fields: list[str]) -> None:
    tree = CompositeSegment("file", [
        LiteralSegment("head", "class Gen {\n"),
        AppendableVariableSegment(
            "fields", [VariableSegment(f, f"  int {f};\n") for f in fields], ordered=True
        ),
        VariableSegment("body", "  // body\n"),
        LiteralSegment("tail", "}\n"),
    ])
    target = skel_dir / f"{path}.traces"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(tree.to_trace()))


# ── segtrace sync ────────────────────────────────────────────────────


def test_sync_first_run_writes_outputs(tmp_path: Path):
    _write_skeleton(tmp_path / "skel", "Gen.java", ["a", "b"])
    result = runner.invoke(app, ["sync", str(tmp_path / "skel"), "-o", str(tmp_path / "out")])
    assert result.exit_code == 0, result.output
    assert "Sync Complete" in result.output
    assert (tmp_path / "out" / "Gen.java").read_text() == (
        "class Gen {\n  int a;\n  int b;\n  // body\n}\n"
    )
    manifest = json.loads((tmp_path / "out" / "traces" / "tracedFiles.json").read_text())
    assert manifest == {"tracedFiles": ["Gen.java"]}


def test_sync_second_run_preserves_trace_edits(tmp_path: Path):
    out = tmp_path / "out"
    _write_skeleton(tmp_path / "skel", "Gen.java", ["a", "b"])
    runner.invoke(app, ["sync", str(tmp_path / "skel"), "-o", str(out)])

    trace_file = out / "traces" / "Gen.java.traces"
    ftm = FileTraceModel.from_json(trace_file.read_text())
    ftm.root.get_child("body").content = "  void keep() {}\n"
    trace_file.write_text(ftm.to_json())

    _write_skeleton(tmp_path / "skel", "Gen.java", ["c", "b", "a"])
    result = runner.invoke(app, ["sync", str(tmp_path / "skel"), "-o", str(out)])

    assert result.exit_code == 0, result.output
    assert "merged" in result.output
    assert (out / "Gen.java").read_text() == (
        "class Gen {\n  int a;\n  int b;\n  int c;\n  void keep() {}\n}\n"
    )


def test_sync_dry_run(tmp_path: Path):
    _write_skeleton(tmp_path / "skel", "Gen.java", ["a"])
    result = runner.invoke(
        app, ["sync", str(tmp_path / "skel"), "-o", str(tmp_path / "out"), "--dry-run"]
    )
    assert result.exit_code == 0
    assert "dry run" in result.output
    assert not (tmp_path / "out").exists()


def test_sync_prune_removes_stale_files(tmp_path: Path):
    out = tmp_path / "out"
    _write_skeleton(tmp_path / "skel", "Old.java", ["a"])
    runner.invoke(app, ["sync", str(tmp_path / "skel"), "-o", str(out)])
    (tmp_path / "skel" / "Old.java.traces").unlink()
    _write_skeleton(tmp_path / "skel", "New.java", ["a"])

    result = runner.invoke(app, ["sync", str(tmp_path / "skel"), "-o", str(out), "--prune"])

    assert result.exit_code == 0, result.output
    assert "No longer generated" in result.output
    assert not (out / "Old.java").exists()
    assert (out / "New.java").exists()


def test_sync_writes_guidances(tmp_path: Path):
    _write_skeleton(tmp_path / "skel", "Gen.java", ["a"])
    (tmp_path / "guidances.json").write_text('{"rules": ["keep bodies"]}')
    result = runner.invoke(app, [
        "sync", str(tmp_path / "skel"), "-o", str(tmp_path / "out"),
        "--guidances", str(tmp_path / "guidances.json"),
    ])
    assert result.exit_code == 0, result.output
    stored = tmp_path / "out" / "traces" / "guidances.json"
    assert json.loads(stored.read_text()) == {"rules": ["keep bodies"]}


def test_sync_rejects_invalid_guidances(tmp_path: Path):
    _write_skeleton(tmp_path / "skel", "Gen.java", ["a"])
    (tmp_path / "guidances.json").write_text("not json")
    result = runner.invoke(app, [
        "sync", str(tmp_path / "skel"), "-o", str(tmp_path / "out"),
        "--guidances", str(tmp_path / "guidances.json"),
    ])
    assert result.exit_code == 1
    assert not (tmp_path / "out").exists()


def test_sync_no_skeletons(tmp_path: Path):
    (tmp_path / "empty").mkdir()
    result = runner.invoke(app, ["sync", str(tmp_path / "empty")])
    assert result.exit_code == 0
    assert "No skeleton traces found" in result.output


def test_sync_invalid_skeleton(tmp_path: Path):
    skel = tmp_path / "skel"
    skel.mkdir()
    (skel / "bad.txt.traces").write_text("{nope")
    result = runner.invoke(app, ["sync", str(skel)])
    assert result.exit_code == 1
    assert "Invalid skeleton" in result.output


# ── segtrace show ────────────────────────────────────────────────────


def test_show_tree(tmp_path: Path):
    root = CompositeSegment("file", [VariableSegment("body", "hello\n")])
    trace = tmp_path / "a.txt.traces"
    trace.write_text(FileTraceModel("a.txt", root).to_json())
    result = runner.invoke(app, ["show", str(trace)])
    assert result.exit_code == 0
    assert "file" in result.output
    assert "body" in result.output
    assert "variable" in result.output


def test_show_text(tmp_path: Path):
    root = CompositeSegment("file", [LiteralSegment("l", "x = 1\n"), VariableSegment("v", "y\n")])
    trace = tmp_path / "a.txt.traces"
    trace.write_text(FileTraceModel("a.txt", root).to_json())
    result = runner.invoke(app, ["show", str(trace), "--text"])
    assert result.exit_code == 0
    assert result.output == "x = 1\ny\n"


def test_show_missing_file(tmp_path: Path):
    result = runner.invoke(app, ["show", str(tmp_path / "nope.traces")])
    assert result.exit_code == 1


# ── segtrace publish ─────────────────────────────────────────────────


def test_publish_nothing_traced(tmp_path: Path):
    result = runner.invoke(app, ["publish", "gen", "-o", str(tmp_path)])
    assert result.exit_code == 0
    assert "Nothing traced" in result.output


def test_publish_without_token(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    _write_skeleton(tmp_path / "skel", "Gen.java", ["a"])
    runner.invoke(app, ["sync", str(tmp_path / "skel"), "-o", str(tmp_path / "out")])
    result = runner.invoke(app, ["publish", "gen", "-o", str(tmp_path / "out")])
    assert result.exit_code == 1
    assert "GITHUB_TOKEN" in result.output


def test_publish_pushes_traced_files(tmp_path: Path, monkeypatch, mock_host):
    _write_skeleton(tmp_path / "skel", "Gen.java", ["a"])
    runner.invoke(app, ["sync", str(tmp_path / "skel"), "-o", str(tmp_path / "out")])
    monkeypatch.setattr("segtrace.cli.create_host", lambda cfg: mock_host)

    result = runner.invoke(app, ["publish", "gen", "-o", str(tmp_path / "out")])

    assert result.exit_code == 0, result.output
    assert "Published" in result.output
    assert "abc1234" in result.output
    pushed = mock_host.push_files.call_args.args[1]
    assert set(pushed) == {"Gen.java", "traces/Gen.java.traces", "traces/tracedFiles.json"}


def test_publish_includes_guidances_and_binary_assets(tmp_path: Path, monkeypatch, mock_host):
    _write_skeleton(tmp_path / "skel", "Gen.java", ["a"])
    (tmp_path / "guidances.json").write_text("{}")
    runner.invoke(app, [
        "sync", str(tmp_path / "skel"), "-o", str(tmp_path / "out"),
        "--guidances", str(tmp_path / "guidances.json"),
    ])
    assets = tmp_path / "assets" / "img"
    assets.mkdir(parents=True)
    (assets / "logo.png").write_bytes(b"\x89PNG\x00\xff")
    monkeypatch.setattr("segtrace.cli.create_host", lambda cfg: mock_host)

    result = runner.invoke(app, [
        "publish", "gen", "-o", str(tmp_path / "out"), "--assets", str(tmp_path / "assets"),
    ])

    assert result.exit_code == 0, result.output
    pushed = mock_host.push_files.call_args.args[1]
    assert pushed["traces/guidances.json"] == "{}"
    assert pushed["img/logo.png"] == b"\x89PNG\x00\xff"


def test_publish_missing_assets_dir(tmp_path: Path, monkeypatch, mock_host):
    _write_skeleton(tmp_path / "skel", "Gen.java", ["a"])
    runner.invoke(app, ["sync", str(tmp_path / "skel"), "-o", str(tmp_path / "out")])
    monkeypatch.setattr("segtrace.cli.create_host", lambda cfg: mock_host)
    result = runner.invoke(app, [
        "publish", "gen", "-o", str(tmp_path / "out"), "--assets", str(tmp_path / "none"),
    ])
    assert result.exit_code == 1
    mock_host.push_files.assert_not_called()


# ── segtrace config ──────────────────────────────────────────────────


def test_config_init_creates_file(tmp_path: Path):
    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 0
    assert (tmp_path / "segtrace.yaml").is_file()


def test_config_init_refuses_overwrite(tmp_path: Path):
    (tmp_path / "segtrace.yaml").write_text("log_level: info\n")
    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_config_show_json(tmp_path: Path):
    (tmp_path / "segtrace.yaml").write_text("vcs:\n  organization: acme\n")
    result = runner.invoke(app, ["config", "show", "--format", "json"])
    assert result.exit_code == 0
    assert "acme" in result.output


def test_invalid_config_exits(tmp_path: Path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("log_level: shouting\n")
    result = runner.invoke(app, ["-c", str(bad), "config", "show"])
    assert result.exit_code == 1
    assert "Invalid config" in result.output
