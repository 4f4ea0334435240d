"""Python adapter — links the project's ``.venv`` into the worktree.

A project without a ``.venv`` is normal (fresh checkout, global tooling),
so a missing virtual environment is reported as a successful no-op rather
than a failure.
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

CACHE_DIR = ".venv"

# pyproject.toml lock files, first match wins; plain pip otherwise.
PYPROJECT_LOCK_FILES: list[tuple[str, str]] = [
    ("poetry.lock", "poetry"),
    ("uv.lock", "uv"),
]

# Fallback manifests when there is no pyproject.toml, in order.
LEGACY_MANIFESTS: list[tuple[str, str]] = [
    ("requirements.txt", "pip"),
    ("Pipfile", "pipenv"),
    ("setup.py", "pip"),
]


class PythonAdapter:
    """Adapter for pip / poetry / uv / pipenv projects."""

    name: str = "python"
    display_name: str = "Python"
    priority: int = 90

    def detect(self, project_root: str) -> DetectionResult | None:
        root = Path(project_root)
        try:
            markers, package_manager = self._probe(root)
        except OSError:
            return None
        if not markers:
            return None
        return DetectionResult(
            name=self.name,
            confidence=1.0,
            package_manager=package_manager,
            marker_files=markers,
        )

    @staticmethod
    def _probe(root: Path) -> tuple[list[str], str | None]:
        if (root / "pyproject.toml").is_file():
            for lock_file, manager in PYPROJECT_LOCK_FILES:
                if (root / lock_file).is_file():
                    return ["pyproject.toml", lock_file], manager
            return ["pyproject.toml"], "pip"

        for manifest, manager in LEGACY_MANIFESTS:
            if (root / manifest).is_file():
                return [manifest], manager
        return [], None

    def bootstrap(
        self,
        worktree_path: str,
        source_root: str,
        strategy: BootstrapStrategy,
        on_progress: ProgressCallback | None = None,
    ) -> BootstrapResult:
        if strategy == BootstrapStrategy.NONE:
            return BootstrapResult(
                environment=self.name,
                strategy=strategy,
                success=True,
                message="Python bootstrap skipped (strategy: none)",
            )

        if strategy == BootstrapStrategy.INSTALL:
            return BootstrapResult(
                environment=self.name,
                strategy=strategy,
                success=False,
                message="Install strategy not yet implemented. Use symlink for now.",
            )

        source_venv = Path(os.path.abspath(source_root)) / CACHE_DIR
        target_venv = Path(worktree_path) / CACHE_DIR

        if not source_venv.is_dir():
            return BootstrapResult(
                environment=self.name,
                strategy=strategy,
                success=True,
                message="No .venv found in source. Python environment not bootstrapped.",
            )

        link_cache(source_venv, target_venv)
        emit(
            on_progress,
            "file_written",
            "Symlinked .venv",
            source=str(source_venv),
            target=str(target_venv),
        )
        return BootstrapResult(
            environment=self.name,
            strategy=strategy,
            success=True,
            message=f"Symlinked .venv from {source_root}",
            path=str(target_venv),
        )

    def cleanup(self, worktree_path: str) -> None:
        unlink_cache(Path(worktree_path) / CACHE_DIR)
