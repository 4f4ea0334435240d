"""Node.js adapter — links ``node_modules`` and patches monorepo tsconfigs.

Detection:
  - ``package.json`` at the project root is required.
  - Lock files only refine the reported package manager
    (pnpm > yarn > bun > npm; npm when there is no lock file).

Bootstrap (``symlink``):
  - ``node_modules`` must already exist in the source checkout.
  - The worktree gets a symlink to it.  For npm/pnpm/lerna workspaces every
    ``tsconfig.json`` in the worktree is then given ``paths`` entries so
    local packages resolve to the worktree's sources rather than through the
    symlink back into the main checkout.
"""

from __future__ import annotations

import os
from pathlib import Path

from branchbox.integrations.links import link_cache, unlink_cache
from branchbox.models import (
    BootstrapResult,
    BootstrapStrategy,
    DetectionResult,
    ProgressCallback,
    emit,
)
from branchbox.monorepo import detect_monorepo
from branchbox.tsconfig import DEFAULT_MAX_DEPTH, patch_tsconfigs_for_monorepo

CACHE_DIR = "node_modules"

# (lock file, package manager), first match wins.
LOCK_FILES: list[tuple[str, str]] = [
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
    ("package-lock.json", "npm"),
]


class NodejsAdapter:
    """Adapter for npm / yarn / pnpm / bun projects."""

    name: str = "nodejs"
    display_name: str = "Node.js"
    priority: int = 100

    def __init__(self, tsconfig_max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.tsconfig_max_depth = tsconfig_max_depth

    # ── detect ──────────────────────────────────────────────────

    def detect(self, project_root: str) -> DetectionResult | None:
        root = Path(project_root)
        try:
            if not (root / "package.json").is_file():
                return None
            markers = ["package.json"]
            package_manager = "npm"
            for lock_file, manager in LOCK_FILES:
                if (root / lock_file).is_file():
                    markers.append(lock_file)
                    package_manager = manager
                    break
        except OSError:
            return None

        return DetectionResult(
            name=self.name,
            confidence=1.0,
            package_manager=package_manager,
            marker_files=markers,
        )

    # ── bootstrap ───────────────────────────────────────────────

    def bootstrap(
        self,
        worktree_path: str,
        source_root: str,
        strategy: BootstrapStrategy,
        on_progress: ProgressCallback | None = None,
    ) -> BootstrapResult:
        monorepo = detect_monorepo(source_root)

        if strategy == BootstrapStrategy.NONE:
            return BootstrapResult(
                environment=self.name,
                strategy=strategy,
                success=True,
                message="Node.js bootstrap skipped (strategy: none)",
                monorepo=monorepo,
            )

        if strategy == BootstrapStrategy.INSTALL:
            return BootstrapResult(
                environment=self.name,
                strategy=strategy,
                success=False,
                message="Install strategy not yet implemented. Use symlink for now.",
                monorepo=monorepo,
            )

        source_modules = Path(os.path.abspath(source_root)) / CACHE_DIR
        target_modules = Path(worktree_path) / CACHE_DIR

        if not source_modules.is_dir():
            detection = self.detect(source_root)
            manager = detection.package_manager if detection else "npm"
            return BootstrapResult(
                environment=self.name,
                strategy=strategy,
                success=False,
                message=(
                    f"Source node_modules not found at {source_modules}. "
                    f"Run {manager} install in the main project first."
                ),
                monorepo=monorepo,
            )

        link_cache(source_modules, target_modules)
        emit(
            on_progress,
            "file_written",
            "Symlinked node_modules",
            source=str(source_modules),
            target=str(target_modules),
        )

        tsconfig_patched = False
        package_count = len(monorepo.workspace_packages)
        if monorepo.is_monorepo and package_count:
            emit(
                on_progress,
                "step_completed",
                f"Detected {monorepo.type} monorepo with {package_count} local packages",
                monorepo=monorepo.to_dict(),
            )
            tsconfig_patched = patch_tsconfigs_for_monorepo(
                worktree_path,
                monorepo,
                on_progress,
                max_depth=self.tsconfig_max_depth,
            )
            if tsconfig_patched:
                emit(
                    on_progress,
                    "step_completed",
                    "Patched tsconfig.json files with local package paths",
                    packages=[p.name for p in monorepo.workspace_packages],
                )

        if tsconfig_patched:
            message = (
                f"Symlinked node_modules and patched tsconfig for "
                f"{package_count} local packages"
            )
        else:
            message = f"Symlinked node_modules from {source_root}"

        return BootstrapResult(
            environment=self.name,
            strategy=strategy,
            success=True,
            message=message,
            path=str(target_modules),
            tsconfig_patched=tsconfig_patched,
            monorepo=monorepo,
        )

    # ── cleanup ─────────────────────────────────────────────────

    def cleanup(self, worktree_path: str) -> None:
        unlink_cache(Path(worktree_path) / CACHE_DIR)
