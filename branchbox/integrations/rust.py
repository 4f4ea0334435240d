"""Rust adapter — detection only; crates live in the global cargo cache."""

from __future__ import annotations

from pathlib import Path

from branchbox.models import (
    BootstrapResult,
    BootstrapStrategy,
    DetectionResult,
    ProgressCallback,
)


class RustAdapter:
    """Adapter for Cargo projects (``Cargo.toml``)."""

    name: str = "rust"
    display_name: str = "Rust"
    priority: int = 80

    def detect(self, project_root: str) -> DetectionResult | None:
        try:
            if not (Path(project_root) / "Cargo.toml").is_file():
                return None
        except OSError:
            return None
        return DetectionResult(
            name=self.name,
            confidence=1.0,
            package_manager="cargo",
            marker_files=["Cargo.toml"],
        )

    def bootstrap(
        self,
        worktree_path: str,
        source_root: str,
        strategy: BootstrapStrategy,
        on_progress: ProgressCallback | None = None,
    ) -> BootstrapResult:
        return BootstrapResult(
            environment=self.name,
            strategy=strategy,
            success=True,
            message="Rust uses global cargo cache. No worktree setup needed.",
        )

    def cleanup(self, worktree_path: str) -> None:
        pass
