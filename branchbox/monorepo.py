"""Monorepo detection — resolve npm/pnpm/lerna workspaces to member packages.

Detection is a first-match cascade over the project root:

1. ``package.json`` with a ``workspaces`` field  → npm-workspaces
2. ``pnpm-workspace.yaml``                       → pnpm-workspaces
3. ``lerna.json``                                → lerna
4. otherwise                                     → not a monorepo

Workspace patterns are either a literal directory (``packages/core``) or a
single trailing wildcard (``packages/*``).  Any other glob form resolves to
nothing.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from branchbox.models import MonorepoInfo, WorkspacePackage

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"
PNPM_WORKSPACE = "pnpm-workspace.yaml"
LERNA_JSON = "lerna.json"

NPM_WORKSPACES = "npm-workspaces"
PNPM_WORKSPACES = "pnpm-workspaces"
LERNA = "lerna"

# Probed in order; the first existing file is the package's entry point.
ENTRY_POINT_CANDIDATES: tuple[str, ...] = (
    "src/index.ts",
    "src/index.tsx",
    "lib/index.ts",
    "index.ts",
)
DEFAULT_ENTRY_POINT = "src/index.ts"
DEFAULT_LERNA_PACKAGES = ["packages/*"]


def detect_monorepo(project_root: str | Path) -> MonorepoInfo:
    """Work out whether *project_root* is a JS monorepo and list its packages."""
    root = Path(project_root)
    package_json = root / PACKAGE_JSON
    not_monorepo = MonorepoInfo(is_monorepo=False, root_package_json=str(package_json))

    manifest = _read_json_object(package_json)
    if manifest is None:
        return not_monorepo

    workspaces = manifest.get("workspaces")
    if workspaces is not None:
        if isinstance(workspaces, dict):
            patterns = workspaces.get("packages") or []
        else:
            patterns = workspaces
        return _monorepo(root, NPM_WORKSPACES, _as_patterns(patterns))

    pnpm_workspace = root / PNPM_WORKSPACE
    if pnpm_workspace.is_file():
        try:
            text = pnpm_workspace.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return not_monorepo
        return _monorepo(root, PNPM_WORKSPACES, parse_pnpm_workspace(text))

    lerna_json = root / LERNA_JSON
    if lerna_json.is_file():
        lerna = _read_json_object(lerna_json)
        if lerna is None:
            return not_monorepo
        patterns = lerna.get("packages")
        if patterns is None:
            patterns = DEFAULT_LERNA_PACKAGES
        return _monorepo(root, LERNA, _as_patterns(patterns))

    return not_monorepo


def parse_pnpm_workspace(content: str) -> list[str]:
    """Extract the ``packages:`` list from a ``pnpm-workspace.yaml`` body.

    Only the subset pnpm projects actually use is understood: a top-level
    ``packages:`` key followed by ``- item`` lines, where the item may be
    single- or double-quoted.  Blank lines and ``#`` comments inside the
    list are skipped; the first other line ends it.  Trailing inline
    comments on an item are not stripped.
    """
    patterns: list[str] = []
    in_packages = False

    for line in content.splitlines():
        stripped = line.strip()

        if not in_packages:
            if stripped == "packages:":
                in_packages = True
            continue

        if stripped.startswith("-"):
            item = stripped[1:].strip()
            if len(item) >= 1 and item[0] in "'\"":
                item = item[1:]
            if len(item) >= 1 and item[-1] in "'\"":
                item = item[:-1]
            if item:
                patterns.append(item)
        elif stripped and not stripped.startswith("#"):
            break

    return patterns


def resolve_workspace_packages(
    project_root: str | Path,
    patterns: list[str],
) -> list[WorkspacePackage]:
    """Turn workspace *patterns* into packages that have a named manifest.

    The first package seen for a given name wins; later ones are dropped
    with a warning since two manifests sharing a name usually means a
    misconfigured workspace.
    """
    root = Path(project_root)
    packages: list[WorkspacePackage] = []
    seen: dict[str, str] = {}

    for pattern in patterns:
        for pkg in _resolve_pattern(root, pattern):
            if pkg.name in seen:
                logger.warning(
                    "Duplicate workspace package name %r in %s (already provided by %s); ignoring",
                    pkg.name,
                    pkg.path,
                    seen[pkg.name],
                )
                continue
            seen[pkg.name] = pkg.path
            packages.append(pkg)

    return packages


def find_entry_point(package_dir: str | Path) -> str | None:
    """Return the first conventional TypeScript entry file in *package_dir*."""
    base = Path(package_dir)
    for candidate in ENTRY_POINT_CANDIDATES:
        if (base / candidate).is_file():
            return candidate
    return None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _monorepo(root: Path, kind: str, patterns: list[str]) -> MonorepoInfo:
    return MonorepoInfo(
        is_monorepo=True,
        type=kind,
        root_package_json=str(root / PACKAGE_JSON),
        workspace_packages=resolve_workspace_packages(root, patterns),
    )


def _resolve_pattern(root: Path, pattern: str) -> list[WorkspacePackage]:
    if pattern.endswith("/*"):
        base = root / pattern[:-2]
        if "*" in pattern[:-2]:
            logger.debug("Unsupported workspace pattern %r", pattern)
            return []
        try:
            children = sorted(base.iterdir(), key=lambda p: p.name)
        except OSError:
            return []
        packages: list[WorkspacePackage] = []
        for child in children:
            if child.is_symlink() or not child.is_dir():
                continue
            pkg = _load_package(root, child)
            if pkg is not None:
                packages.append(pkg)
        return packages

    if "*" not in pattern:
        pkg = _load_package(root, root / pattern)
        return [pkg] if pkg is not None else []

    logger.debug("Unsupported workspace pattern %r", pattern)
    return []


def _load_package(root: Path, package_dir: Path) -> WorkspacePackage | None:
    manifest = _read_json_object(package_dir / PACKAGE_JSON)
    if manifest is None:
        return None
    name = manifest.get("name")
    if not isinstance(name, str) or not name:
        return None
    return WorkspacePackage(
        name=name,
        path=Path(os.path.relpath(package_dir, root)).as_posix(),
        absolute_path=str(package_dir.absolute()),
        entry_point=find_entry_point(package_dir),
    )


def _read_json_object(path: Path) -> dict[str, Any] | None:
    """Load a JSON file, returning *None* on missing/invalid/non-object files."""
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    return data if isinstance(data, dict) else None


def _as_patterns(val: object) -> list[str]:
    """Coerce a workspaces value to a list of string patterns."""
    if isinstance(val, list):
        return [v for v in val if isinstance(v, str)]
    if isinstance(val, str):
        return [val]
    return []
