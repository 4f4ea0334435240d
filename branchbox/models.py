"""Data models used throughout branchbox."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable

# ---------------------------------------------------------------------------
# Bootstrap strategy
# ---------------------------------------------------------------------------


class BootstrapStrategy(str, enum.Enum):
    """How a worktree acquires an ecosystem's dependencies."""

    SYMLINK = "symlink"
    INSTALL = "install"
    NONE = "none"

    @classmethod
    def from_str(cls, label: str) -> BootstrapStrategy:
        try:
            return cls(label.strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(
                f"Unknown bootstrap strategy '{label}'. Must be one of: {valid}"
            ) from None

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Progress events
# ---------------------------------------------------------------------------


@dataclass
class ProgressEvent:
    """A human-readable step emitted during a bootstrap run."""

    type: str  # step_completed | file_written
    message: str
    data: dict[str, Any] = field(default_factory=dict)


ProgressCallback = Callable[[ProgressEvent], None]


def emit(on_progress: ProgressCallback | None, event_type: str, message: str, **data: Any) -> None:
    """Send a progress event if a sink was supplied."""
    if on_progress is not None:
        on_progress(ProgressEvent(type=event_type, message=message, data=data))


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DetectionResult:
    """Evidence that an ecosystem is in use in a project root."""

    name: str
    confidence: float = 1.0
    package_manager: str | None = None
    marker_files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "confidence": round(self.confidence, 2),
            "package_manager": self.package_manager,
            "marker_files": list(self.marker_files),
        }


# ---------------------------------------------------------------------------
# Monorepo
# ---------------------------------------------------------------------------


@dataclass
class WorkspacePackage:
    """One member project of a monorepo."""

    name: str
    path: str  # relative to the project root, POSIX separators
    absolute_path: str
    entry_point: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "absolute_path": self.absolute_path,
            "entry_point": self.entry_point,
        }


@dataclass
class MonorepoInfo:
    """Result of resolving a project's workspace layout."""

    is_monorepo: bool
    root_package_json: str
    type: str | None = None  # npm-workspaces | pnpm-workspaces | lerna
    workspace_packages: list[WorkspacePackage] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_monorepo": self.is_monorepo,
            "type": self.type,
            "root_package_json": self.root_package_json,
            "workspace_packages": [p.to_dict() for p in self.workspace_packages],
        }


# ---------------------------------------------------------------------------
# Bootstrap result
# ---------------------------------------------------------------------------


@dataclass
class BootstrapResult:
    """Outcome of bootstrapping one ecosystem into a worktree."""

    environment: str
    strategy: BootstrapStrategy
    success: bool
    message: str
    path: str | None = None
    tsconfig_patched: bool | None = None
    monorepo: MonorepoInfo | None = None

    def to_dict(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "environment": self.environment,
            "strategy": str(self.strategy),
            "success": self.success,
            "message": self.message,
            "path": self.path,
        }
        if self.tsconfig_patched is not None:
            doc["tsconfig_patched"] = self.tsconfig_patched
        if self.monorepo is not None:
            doc["monorepo"] = self.monorepo.to_dict()
        return doc
