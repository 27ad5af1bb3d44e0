"""CLI entry point for segtrace."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from segtrace.config import SegTraceConfig, load_config
from segtrace.config.loader import DEFAULT_CONFIG_TEMPLATE
from segtrace.logging_config import setup_logging
from segtrace.output import TracedFileWriter
from segtrace.regenerator import RegenerationReport, load_skeletons, regenerate
from segtrace.segments import Segment
from segtrace.traces import (
    FileTraceModel,
    TraceLoadError,
    TraceStore,
    manifest_path,
    trace_path_for,
)
from segtrace.vcs import RepositoryHostError, create_host, publish

app = typer.Typer(
    name="segtrace",
    help="Regenerate traced files without losing manual edits.",
)

config_app = typer.Typer(help="Manage segtrace configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: SegTraceConfig | None = None


def _get_config() -> SegTraceConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to segtrace.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    setup_logging(_config.log_level, _config.log_format)


def _display_report(report: RegenerationReport) -> None:
    table = Table(title="Regeneration")
    table.add_column("File", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Detail", style="dim")
    for path in report.merged:
        table.add_row(path, "[green]merged[/green]", "")
    for path in report.fresh:
        table.add_row(path, "[blue]fresh[/blue]", "")
    for path, reason in report.failed:
        table.add_row(path, "[red]failed[/red]", reason)
    rprint(table)

    if report.removed:
        removed = Tree(f"[bold]No longer generated[/bold] ({len(report.removed)})")
        for path in report.removed:
            removed.add(f"[yellow]{path}[/yellow]")
        rprint(removed)


def _segment_tree(segment: Segment, parent: Tree | None = None) -> Tree:
    label = f"[bold]{escape(segment.id)}[/bold] [dim]({segment.kind})[/dim]"
    if not segment.child_order:
        preview = segment.render().replace("\n", "\\n")
        if len(preview) > 60:
            preview = preview[:57] + "..."
        label += f" {escape(repr(preview))}"
    node = parent.add(label) if parent is not None else Tree(label)
    for child_id in segment.child_order:
        child = segment.get_child(child_id)
        if child is not None:
            _segment_tree(child, node)
    return node


@app.command()
def sync(
    skeletons: str = typer.Argument(..., help="Directory of new skeleton .traces files"),
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Override output directory")
    ] = None,
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without writing"),
    prune: bool = typer.Option(False, "--prune", help="Delete files no longer generated"),
    guidances: Annotated[
        str | None,
        typer.Option("--guidances", help="JSON guidance document to store with the traces"),
    ] = None,
) -> None:
    """Merge freshly generated trees with the previous run and write the result."""
    cfg = _get_config()
    base_dir = Path(output or cfg.output.base_dir)

    guidance_text: str | None = None
    try:
        if guidances is not None:
            guidance_text = Path(guidances).read_text(encoding="utf-8")
            json.loads(guidance_text)
        new_roots = load_skeletons(skeletons, cfg.traces.trace_suffix)
    except (OSError, ValueError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    if not new_roots:
        rprint(f"[yellow]No skeleton traces found in {skeletons}.[/yellow]")
        raise typer.Exit(0)

    model, report = regenerate(new_roots, base_dir, cfg.traces)
    _display_report(report)

    writer = TracedFileWriter(base_dir, cfg.traces)
    try:
        written = writer.write(model, guidances=guidance_text, dry_run=dry_run)
        if prune and report.removed:
            writer.delete_removed(report.removed, dry_run=dry_run)
    except (OSError, ValueError) as e:
        rprint(f"[red]Write failed:[/red] {e}")
        raise typer.Exit(1)

    if dry_run:
        rprint(f"[yellow](dry run: {len(written)} files not written)[/yellow]")
    else:
        rprint(Panel(
            f"[dim]Directory:[/dim]  {base_dir}\n"
            f"[dim]Files:[/dim]      {len(model)}\n"
            f"[dim]Written:[/dim]    {len(written)}",
            title="Sync Complete",
            border_style="green",
        ))


@app.command()
def show(
    trace_file: str = typer.Argument(..., help="Path to a .traces file"),
    text: bool = typer.Option(False, "--text", help="Print the rendered file text"),
) -> None:
    """Show a persisted trace as a segment tree (or as rendered text)."""
    path = Path(trace_file)
    try:
        file_trace = FileTraceModel.from_json(
            path.read_text(encoding="utf-8"), path=path.stem if path.suffix else path.name
        )
    except (OSError, ValueError) as e:
        rprint(f"[red]Error:[/red] cannot read {trace_file}: {e}")
        raise typer.Exit(1)

    if text:
        typer.echo(file_trace.content, nl=False)
        return
    rprint(_segment_tree(file_trace.root))


@app.command("publish")
def publish_cmd(
    repository: str = typer.Argument(..., help="Repository name on the host"),
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Override output directory")
    ] = None,
    description: str = typer.Option("", "--description", help="Description for new repositories"),
    assets: Annotated[
        str | None,
        typer.Option("--assets", help="Directory of binary assets to publish alongside"),
    ] = None,
) -> None:
    """Push the traced files of the output directory to the repository host."""
    cfg = _get_config()
    base_dir = Path(output or cfg.output.base_dir)
    store = TraceStore(base_dir, cfg.traces)

    try:
        paths = store.load_manifest()
    except TraceLoadError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    if not paths:
        rprint(f"[yellow]Nothing traced in {base_dir}.[/yellow]")
        raise typer.Exit(0)

    files: dict[str, str | bytes] = {}
    for path in paths:
        for rel in (path, trace_path_for(path, cfg.traces)):
            target = base_dir / rel
            if target.is_file():
                files[rel] = target.read_text(encoding="utf-8")
    files[manifest_path(cfg.traces)] = store.manifest_file.read_text(encoding="utf-8")
    guidance_rel = f"{cfg.traces.traces_dir}/{cfg.traces.guidances_name}"
    if (base_dir / guidance_rel).is_file():
        files[guidance_rel] = (base_dir / guidance_rel).read_text(encoding="utf-8")
    if assets is not None:
        asset_dir = Path(assets)
        if not asset_dir.is_dir():
            rprint(f"[red]Error:[/red] assets directory not found: {assets}")
            raise typer.Exit(1)
        for asset in sorted(asset_dir.rglob("*")):
            if asset.is_file():
                files[asset.relative_to(asset_dir).as_posix()] = asset.read_bytes()

    try:
        host = create_host(cfg.vcs)
        sha = asyncio.run(
            publish(files, host, repository, cfg.vcs.commit_message, description=description)
        )
    except (ValueError, RepositoryHostError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    rprint(f"[green]Published[/green] {len(files)} files to {repository} ({sha[:7]})")


@config_app.command("show")
def config_show(
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: yaml or json")
    ] = "yaml",
) -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    if format == "json":
        rprint(json.dumps(cfg.model_dump(), indent=2))
        return
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default segtrace.yaml in current directory."""
    target = Path("segtrace.yaml")
    if target.exists() and not force:
        rprint("[yellow]segtrace.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
