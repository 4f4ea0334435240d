"""tsconfig patching — point workspace imports at the worktree's own sources.

With ``node_modules`` symlinked from the main checkout, a monorepo's local
packages resolve through that symlink back to the *main* checkout's code.
Adding ``compilerOptions.paths`` entries for every workspace package makes
TypeScript resolve them inside the worktree instead.

Patching is additive only: existing ``paths`` keys and an existing
``baseUrl`` are never overwritten, and a file that gains no new mapping is
not rewritten at all.
"""

from __future__ import annotations

import json
import logging
import os
import posixpath
import re
from pathlib import Path
from typing import Any

from branchbox.models import MonorepoInfo, ProgressCallback, emit
from branchbox.monorepo import DEFAULT_ENTRY_POINT

logger = logging.getLogger(__name__)

TSCONFIG_FILENAME = "tsconfig.json"
DEFAULT_MAX_DEPTH = 5
SKIP_DIRS = frozenset({"node_modules"})

_LINE_COMMENT_RE = re.compile(r"//.*$", re.MULTILINE)
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def find_tsconfig_files(root: str | Path, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Path]:
    """Return every ``tsconfig.json`` under *root*, at most *max_depth* levels down.

    Hidden directories and ``node_modules`` are never entered, and neither
    are symlinked directories.
    """
    found: list[Path] = []

    def _scan(directory: Path, depth: int) -> None:
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError:
            return

        for entry in entries:
            if entry.name == TSCONFIG_FILENAME and entry.is_file(follow_symlinks=False):
                found.append(Path(entry.path))
            elif entry.is_dir(follow_symlinks=False):
                if entry.name.startswith(".") or entry.name in SKIP_DIRS:
                    continue
                if depth >= max_depth:
                    logger.debug("Depth limit %d reached, not scanning %s", max_depth, entry.path)
                    continue
                _scan(Path(entry.path), depth + 1)

    _scan(Path(root), 0)
    return found


# ---------------------------------------------------------------------------
# Patching
# ---------------------------------------------------------------------------


def strip_json_comments(content: str) -> str:
    """Remove ``//`` and ``/* */`` comments so the text parses as JSON.

    Naive: comment markers inside string literals (``"https://..."``) are
    stripped too.
    """
    result = _LINE_COMMENT_RE.sub("", content)
    return _BLOCK_COMMENT_RE.sub("", result)


def mapping_for(tsconfig_dir: str | Path, worktree_path: str | Path, package_path: str, entry_point: str | None) -> str:
    """Relative path from a tsconfig directory to a package's entry file."""
    to_root = Path(os.path.relpath(worktree_path, tsconfig_dir)).as_posix()
    return posixpath.normpath(
        posixpath.join(to_root, package_path, entry_point or DEFAULT_ENTRY_POINT)
    )


def patch_tsconfig(
    tsconfig_path: str | Path,
    worktree_path: str | Path,
    monorepo: MonorepoInfo,
) -> int:
    """Add missing ``paths`` entries for *monorepo*'s packages to one file.

    Returns the number of mappings added.  Raises ``ValueError`` when the
    file is not a JSON object after comment stripping.
    """
    path = Path(tsconfig_path)
    tsconfig = json.loads(strip_json_comments(path.read_text(encoding="utf-8")))
    if not isinstance(tsconfig, dict):
        raise ValueError(f"{path}: top level is not an object")

    compiler_options = tsconfig.get("compilerOptions")
    if compiler_options is None:
        compiler_options = tsconfig["compilerOptions"] = {}
    if not isinstance(compiler_options, dict):
        raise ValueError(f"{path}: compilerOptions is not an object")

    if not compiler_options.get("baseUrl"):
        compiler_options["baseUrl"] = "."

    paths = compiler_options.get("paths")
    if paths is None:
        paths = compiler_options["paths"] = {}
    if not isinstance(paths, dict):
        raise ValueError(f"{path}: compilerOptions.paths is not an object")

    added = 0
    for pkg in monorepo.workspace_packages:
        if pkg.name in paths:
            continue
        paths[pkg.name] = [mapping_for(path.parent, worktree_path, pkg.path, pkg.entry_point)]
        added += 1

    if added:
        _write_json(path, tsconfig)
    return added


def patch_tsconfigs_for_monorepo(
    worktree_path: str | Path,
    monorepo: MonorepoInfo,
    on_progress: ProgressCallback | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> bool:
    """Patch every tsconfig in *worktree_path*; return whether any file changed.

    A file that cannot be read or parsed is skipped; the rest are still
    processed.
    """
    if not monorepo.is_monorepo or not monorepo.workspace_packages:
        return False

    patched = False
    for tsconfig_path in find_tsconfig_files(worktree_path, max_depth=max_depth):
        try:
            added = patch_tsconfig(tsconfig_path, worktree_path, monorepo)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            logger.debug("Skipping %s: %s", tsconfig_path, exc)
            continue
        if added:
            patched = True
            emit(
                on_progress,
                "file_written",
                f"Patched {tsconfig_path} with {added} local package paths",
                tsconfig_path=str(tsconfig_path),
                package_count=added,
            )
    return patched


def _write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
