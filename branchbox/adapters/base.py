"""Adapter protocol — the stable contract every environment adapter must satisfy."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from branchbox.models import (
    BootstrapResult,
    BootstrapStrategy,
    DetectionResult,
    ProgressCallback,
)


@runtime_checkable
class EnvironmentAdapter(Protocol):
    """Pluggable per-ecosystem adapter.

    Implementations are stateless; a registry holds at most one per name.
    """

    name: str
    display_name: str
    priority: int  # higher is checked first

    def detect(self, project_root: str) -> DetectionResult | None:
        """Return evidence that this ecosystem is used in *project_root*.

        Must be read-only and must never raise; filesystem errors mean
        "not detected".
        """
        ...

    def bootstrap(
        self,
        worktree_path: str,
        source_root: str,
        strategy: BootstrapStrategy,
        on_progress: ProgressCallback | None = None,
    ) -> BootstrapResult:
        """Make the ecosystem's dependencies available in *worktree_path*."""
        ...

    def cleanup(self, worktree_path: str) -> None:
        """Remove artifacts created by :meth:`bootstrap`.

        Best-effort: must only ever unlink symlinks, never real data.
        """
        ...
