"""Go adapter — detection only; modules live in the global module cache."""

from __future__ import annotations

from pathlib import Path

from branchbox.models import (
    BootstrapResult,
    BootstrapStrategy,
    DetectionResult,
    ProgressCallback,
)


class GoAdapter:
    """Adapter for Go modules (``go.mod``)."""

    name: str = "go"
    display_name: str = "Go"
    priority: int = 80

    def detect(self, project_root: str) -> DetectionResult | None:
        try:
            if not (Path(project_root) / "go.mod").is_file():
                return None
        except OSError:
            return None
        return DetectionResult(
            name=self.name,
            confidence=1.0,
            package_manager="go",
            marker_files=["go.mod"],
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
            message="Go uses global module cache. No worktree setup needed.",
        )

    def cleanup(self, worktree_path: str) -> None:
        pass
