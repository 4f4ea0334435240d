"""Report rendering — text and JSON outputs for the CLI."""

from __future__ import annotations

import json
from typing import Any

import branchbox
from branchbox.models import BootstrapResult, DetectionResult, MonorepoInfo

_GREEN = "\033[92m"
_RED = "\033[91m"
_RESET = "\033[0m"


def _status(ok: bool, color: bool = True) -> str:
    label = "ok" if ok else "FAILED"
    if not color:
        return label
    return f"{_GREEN if ok else _RED}{label}{_RESET}"


# ---------------------------------------------------------------------------
# Text output
# ---------------------------------------------------------------------------


def render_detections_text(project_root: str, detections: list[DetectionResult]) -> str:
    lines = [f"Environments in {project_root}:"]
    if not detections:
        lines.append("  (none detected)")
    for d in detections:
        pm = d.package_manager or "-"
        lines.append(f"  • {d.name:<8} pm={pm:<7} markers: {', '.join(d.marker_files)}")
    return "\n".join(lines)


def render_monorepo_text(info: MonorepoInfo) -> str:
    if not info.is_monorepo:
        return "Not a monorepo."
    lines = [f"{info.type} monorepo ({len(info.workspace_packages)} packages):"]
    for p in info.workspace_packages:
        entry = p.entry_point or "(no entry point)"
        lines.append(f"  • {p.name}  {p.path}  {entry}")
    return "\n".join(lines)


def render_text(worktree_path: str, results: list[BootstrapResult], color: bool = True) -> str:
    """Produce human-friendly text output for a bootstrap run."""
    lines: list[str] = []

    lines.append("=" * 60)
    lines.append("branchbox bootstrap")
    lines.append("=" * 60)
    lines.append(f"Worktree: {worktree_path}")
    lines.append("")

    if not results:
        lines.append("No environments detected.")
    for r in results:
        lines.append(f"[{_status(r.success, color)}] {r.environment} ({r.strategy})")
        lines.append(f"    {r.message}")
        if r.path:
            lines.append(f"    → {r.path}")
        if r.monorepo is not None and r.monorepo.is_monorepo:
            lines.append(
                f"    {r.monorepo.type}: {len(r.monorepo.workspace_packages)} packages, "
                f"tsconfig patched: {'yes' if r.tsconfig_patched else 'no'}"
            )

    lines.append("-" * 60)
    ok = sum(1 for r in results if r.success)
    lines.append(f"Environments: {ok} ok, {len(results) - ok} failed")
    lines.append("=" * 60)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# JSON output
# ---------------------------------------------------------------------------


def render_json(worktree_path: str, source_root: str, results: list[BootstrapResult]) -> str:
    """Produce stable JSON output for a bootstrap run."""
    doc: dict[str, Any] = {
        "tool": "branchbox",
        "version": branchbox.__version__,
        "worktree_path": worktree_path,
        "source_root": source_root,
        "summary": {
            "total": len(results),
            "succeeded": sum(1 for r in results if r.success),
            "failed": sum(1 for r in results if not r.success),
        },
        "results": [r.to_dict() for r in results],
    }
    return json.dumps(doc, indent=2, ensure_ascii=False)


def render_detections_json(project_root: str, detections: list[DetectionResult]) -> str:
    doc = {
        "project_root": project_root,
        "environments": [d.to_dict() for d in detections],
    }
    return json.dumps(doc, indent=2, ensure_ascii=False)


def render_monorepo_json(info: MonorepoInfo) -> str:
    return json.dumps(info.to_dict(), indent=2, ensure_ascii=False)
