"""CLI — click-based command-line interface."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from branchbox.adapters.registry import (
    EnvironmentRegistry,
    create_default_registry,
    load_adapters,
)
from branchbox.bootstrap import bootstrap_worktree, cleanup_worktree, default_registry_for
from branchbox.config import ConfigError, load_config
from branchbox.models import BootstrapStrategy, ProgressEvent
from branchbox.monorepo import detect_monorepo
from branchbox.report import (
    render_detections_json,
    render_detections_text,
    render_json,
    render_monorepo_json,
    render_monorepo_text,
    render_text,
)
from branchbox.tsconfig import patch_tsconfigs_for_monorepo

_STRATEGIES = [s.value for s in BootstrapStrategy]
_FORMATS = click.Choice(["text", "json"], case_sensitive=False)


def _echo_progress(event: ProgressEvent) -> None:
    click.echo(f"  {event.message}", err=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """branchbox — bootstrap dependency caches into fresh git worktrees."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ───────────────────────────────────────────────────────────────────
# detect
# ───────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--adapter", "adapter_spec", default="auto",
              help="auto | <name> | import:pkg.module:Class")
@click.option("--format", "fmt", default="text", type=_FORMATS, help="Output format.")
def detect(path: str, adapter_spec: str, fmt: str) -> None:
    """List the language ecosystems used in PATH."""
    root = str(Path(path).resolve())
    try:
        candidates = load_adapters(adapter_spec)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    detections = EnvironmentRegistry(candidates).detect_environments(root)
    if fmt == "json":
        click.echo(render_detections_json(root, detections))
    else:
        click.echo(render_detections_text(root, detections))


# ───────────────────────────────────────────────────────────────────
# bootstrap
# ───────────────────────────────────────────────────────────────────

@main.command()
@click.argument("worktree", type=click.Path(exists=True, file_okay=False))
@click.option("--source", "source", default=".", show_default=True,
              type=click.Path(exists=True, file_okay=False),
              help="Main checkout whose dependency caches are linked.")
@click.option("--strategy", "strategy", default=None,
              type=click.Choice(_STRATEGIES, case_sensitive=False),
              help="Override the configured bootstrap strategy.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True),
              help="Explicit config file (skips .branchbox.yml search).")
@click.option("--format", "fmt", default="text", type=_FORMATS, help="Output format.")
@click.option("--quiet", "-q", is_flag=True, default=False, help="Suppress progress output.")
def bootstrap(
    worktree: str,
    source: str,
    strategy: str | None,
    config_path: str | None,
    fmt: str,
    quiet: bool,
) -> None:
    """Link SOURCE's dependency caches into WORKTREE."""
    source_root = str(Path(source).resolve())
    try:
        cfg = load_config(start_path=source_root, config_path=config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    results = bootstrap_worktree(
        worktree,
        source_root,
        strategy=strategy,
        config=cfg,
        registry=default_registry_for(cfg),
        on_progress=None if quiet else _echo_progress,
    )

    if fmt == "json":
        click.echo(render_json(worktree, source_root, results))
    else:
        click.echo(render_text(worktree, results))

    sys.exit(0 if all(r.success for r in results) else 1)


# ───────────────────────────────────────────────────────────────────
# cleanup
# ───────────────────────────────────────────────────────────────────

@main.command()
@click.argument("worktree", type=click.Path(exists=True, file_okay=False))
def cleanup(worktree: str) -> None:
    """Remove dependency symlinks from WORKTREE (real directories are kept)."""
    cleanup_worktree(worktree)
    click.echo(f"Cleaned up {worktree}")


# ───────────────────────────────────────────────────────────────────
# monorepo / patch-tsconfig
# ───────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--format", "fmt", default="text", type=_FORMATS, help="Output format.")
def monorepo(path: str, fmt: str) -> None:
    """Show the workspace packages of the monorepo at PATH."""
    info = detect_monorepo(Path(path).resolve())
    if fmt == "json":
        click.echo(render_monorepo_json(info))
    else:
        click.echo(render_monorepo_text(info))


@main.command("patch-tsconfig")
@click.argument("worktree", type=click.Path(exists=True, file_okay=False))
@click.option("--source", "source", default=".", show_default=True,
              type=click.Path(exists=True, file_okay=False),
              help="Checkout used to resolve workspace packages.")
@click.option("--max-depth", "max_depth", default=None, type=int,
              help="Directory depth to search for tsconfig.json (default 5).")
def patch_tsconfig(worktree: str, source: str, max_depth: int | None) -> None:
    """Add local package paths to every tsconfig.json in WORKTREE."""
    source_root = Path(source).resolve()
    info = detect_monorepo(source_root)
    if not info.is_monorepo:
        click.echo(f"{source_root} is not a monorepo; nothing to patch.")
        return

    try:
        cfg = load_config(start_path=str(source_root))
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    depth = max_depth if max_depth is not None else cfg.tsconfig.max_depth

    patched = patch_tsconfigs_for_monorepo(worktree, info, _echo_progress, max_depth=depth)
    if patched:
        click.echo(f"Patched tsconfig files for {len(info.workspace_packages)} packages.")
    else:
        click.echo("No tsconfig files needed patching.")


# ───────────────────────────────────────────────────────────────────
# adapters
# ───────────────────────────────────────────────────────────────────

@main.group()
def adapters() -> None:
    """Inspect environment adapters."""


@adapters.command("list")
def adapters_list() -> None:
    """List registered adapters."""
    all_adapters = create_default_registry().get_adapters()
    if not all_adapters:
        click.echo("No adapters registered.")
        return
    click.echo(f"{'Name':<12} {'Display':<12} {'Priority'}")
    click.echo("-" * 34)
    for a in all_adapters:
        click.echo(f"{a.name:<12} {a.display_name:<12} {a.priority}")


@adapters.command("describe")
@click.argument("name")
def adapters_describe(name: str) -> None:
    """Describe a specific adapter."""
    a = create_default_registry().get_adapter(name)
    if a is None:
        click.echo(f"Adapter '{name}' not found.", err=True)
        sys.exit(1)
    click.echo(f"Name:     {a.name}")
    click.echo(f"Display:  {a.display_name}")
    click.echo(f"Priority: {a.priority}")
    click.echo(f"Class:    {type(a).__module__}.{type(a).__qualname__}")
