"""Adapter registry — loading, registration, detection and bootstrap fan-out."""

from __future__ import annotations

import importlib
import logging
import sys
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from branchbox.adapters.base import EnvironmentAdapter
from branchbox.models import (
    BootstrapResult,
    BootstrapStrategy,
    DetectionResult,
    ProgressCallback,
    emit,
)

if TYPE_CHECKING:
    from branchbox.config import EnvironmentSettings

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "branchbox.adapters"


class EnvironmentRegistry:
    """Named collection of environment adapters.

    Built explicitly and passed around; there is no process-wide instance.
    Registration is expected to happen once, before any run.
    """

    def __init__(self, adapters: Iterable[EnvironmentAdapter] | None = None) -> None:
        self._adapters: dict[str, EnvironmentAdapter] = {}
        for adapter in adapters or ():
            self.register(adapter)

    def register(self, adapter: EnvironmentAdapter) -> None:
        """Store *adapter* under its name; a later registration replaces it."""
        self._adapters[adapter.name] = adapter

    def get_adapters(self) -> list[EnvironmentAdapter]:
        """All adapters, highest priority first (ties keep insertion order)."""
        return sorted(self._adapters.values(), key=lambda a: a.priority, reverse=True)

    def get_adapter(self, name: str) -> EnvironmentAdapter | None:
        return self._adapters.get(name)

    def __len__(self) -> int:
        return len(self._adapters)

    # ── detection ───────────────────────────────────────────────

    def detect_environments(self, project_root: str) -> list[DetectionResult]:
        """Run every adapter's ``detect`` and return hits, most confident first."""
        results: list[DetectionResult] = []
        for adapter in self.get_adapters():
            detection = adapter.detect(project_root)
            if detection is not None:
                results.append(detection)
        # sorted() is stable, so equal confidences keep priority order
        return sorted(results, key=lambda d: d.confidence, reverse=True)

    # ── bootstrap ───────────────────────────────────────────────

    def bootstrap_all(
        self,
        worktree_path: str,
        source_root: str,
        strategy: BootstrapStrategy,
        on_progress: ProgressCallback | None = None,
        overrides: Mapping[str, EnvironmentSettings] | None = None,
    ) -> list[BootstrapResult]:
        """Bootstrap every ecosystem detected in *source_root*, in order.

        A failing adapter does not stop the ones after it; each outcome is
        reported in its own :class:`BootstrapResult`.
        """
        results: list[BootstrapResult] = []
        for detection in self.detect_environments(source_root):
            adapter = self._adapters.get(detection.name)
            if adapter is None:
                continue

            effective = strategy
            settings = (overrides or {}).get(detection.name)
            if settings is not None:
                if not settings.enabled:
                    logger.debug("Skipping %s (disabled in config)", detection.name)
                    continue
                effective = settings.resolve(strategy)

            emit(
                on_progress,
                "step_completed",
                f"Bootstrapping {adapter.display_name} environment",
                environment=detection.name,
                strategy=str(effective),
            )
            result = adapter.bootstrap(worktree_path, source_root, effective, on_progress)
            if not result.success:
                logger.warning("%s bootstrap failed: %s", adapter.display_name, result.message)
            results.append(result)
        return results

    def cleanup_all(self, worktree_path: str) -> None:
        """Run cleanup for every registered adapter, detected or not."""
        for adapter in self.get_adapters():
            try:
                adapter.cleanup(worktree_path)
            except Exception as exc:
                logger.warning("%s cleanup failed: %s", adapter.display_name, exc)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def builtin_adapters() -> list[EnvironmentAdapter]:
    """Fresh instances of the adapters shipped with branchbox."""
    from branchbox.integrations.go import GoAdapter
    from branchbox.integrations.nodejs import NodejsAdapter
    from branchbox.integrations.python import PythonAdapter
    from branchbox.integrations.rust import RustAdapter

    return [NodejsAdapter(), PythonAdapter(), GoAdapter(), RustAdapter()]


def load_entry_point_adapters() -> list[EnvironmentAdapter]:
    """Load adapters registered via the ``branchbox.adapters`` entry-point group."""
    adapters: list[EnvironmentAdapter] = []
    if sys.version_info >= (3, 12):
        from importlib.metadata import entry_points

        eps = entry_points(group=ENTRY_POINT_GROUP)
    else:
        from importlib.metadata import entry_points as _ep

        all_eps = _ep()
        eps = (
            all_eps.get(ENTRY_POINT_GROUP, [])
            if isinstance(all_eps, dict)
            else all_eps.select(group=ENTRY_POINT_GROUP)
        )
    for ep in eps:
        try:
            cls = ep.load()
            adapters.append(cls() if isinstance(cls, type) else cls)
        except Exception as exc:
            logger.warning("Skipping broken adapter entry point %s: %s", ep.name, exc)
    return adapters


def load_import_adapter(import_string: str) -> EnvironmentAdapter:
    """Load an adapter from ``pkg.module:ClassName``."""
    module_path, class_name = import_string.rsplit(":", 1)
    mod = importlib.import_module(module_path)
    cls = getattr(mod, class_name)
    return cls() if isinstance(cls, type) else cls


def create_default_registry(
    extra: Iterable[EnvironmentAdapter] | None = None,
) -> EnvironmentRegistry:
    """Registry with the built-ins, then entry-point adapters, then *extra*.

    Later registrations win, so a plugin may replace a built-in by name.
    """
    registry = EnvironmentRegistry(builtin_adapters())
    for adapter in load_entry_point_adapters():
        registry.register(adapter)
    for adapter in extra or ():
        registry.register(adapter)
    return registry


def load_adapters(adapter_spec: str = "auto") -> list[EnvironmentAdapter]:
    """Return adapters for *adapter_spec*.

    ``auto``       — every adapter in the default registry
    ``<name>``     — the default-registry adapter with that name
    ``import:...`` — single adapter from import string
    """
    if adapter_spec.startswith("import:"):
        return [load_import_adapter(adapter_spec[len("import:") :])]

    registry = create_default_registry()
    if adapter_spec == "auto":
        return registry.get_adapters()

    adapter = registry.get_adapter(adapter_spec)
    if adapter is None:
        raise ValueError(f"No registered adapter named '{adapter_spec}'")
    return [adapter]
