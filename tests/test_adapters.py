"""Tests for the environment registry — ordering, detection, fan-out, loading."""

from __future__ import annotations

import logging

import pytest

from branchbox.adapters.base import EnvironmentAdapter
from branchbox.adapters.registry import (
    EnvironmentRegistry,
    builtin_adapters,
    create_default_registry,
    load_adapters,
    load_import_adapter,
)
from branchbox.config import EnvironmentSettings
from branchbox.integrations.nodejs import NodejsAdapter
from branchbox.models import BootstrapResult, BootstrapStrategy, DetectionResult

# ── Fake adapters for testing ───────────────────────────────────


class FakeAdapter:
    """Records calls; detection and bootstrap outcome are configurable."""

    def __init__(self, name, priority=50, confidence=1.0, detected=True, succeed=True):
        self.name = name
        self.display_name = name.title()
        self.priority = priority
        self.confidence = confidence
        self.detected = detected
        self.succeed = succeed
        self.calls: list[tuple] = []

    def detect(self, project_root: str) -> DetectionResult | None:
        self.calls.append(("detect", project_root))
        if not self.detected:
            return None
        return DetectionResult(name=self.name, confidence=self.confidence, marker_files=["x"])

    def bootstrap(self, worktree_path, source_root, strategy, on_progress=None) -> BootstrapResult:
        self.calls.append(("bootstrap", worktree_path, source_root, strategy))
        return BootstrapResult(
            environment=self.name,
            strategy=strategy,
            success=self.succeed,
            message="ok" if self.succeed else f"{self.name} cache missing",
        )

    def cleanup(self, worktree_path: str) -> None:
        self.calls.append(("cleanup", worktree_path))


# ── Registration & ordering ─────────────────────────────────────

class TestRegistration:
    def test_empty(self):
        assert EnvironmentRegistry().get_adapters() == []

    def test_initial_adapters(self):
        registry = EnvironmentRegistry([FakeAdapter("a"), FakeAdapter("b")])
        assert len(registry) == 2

    def test_sorted_by_priority(self):
        registry = EnvironmentRegistry(
            [FakeAdapter("go", 80), FakeAdapter("node", 100), FakeAdapter("rust", 80)]
        )
        assert [a.name for a in registry.get_adapters()] == ["node", "go", "rust"]

    def test_last_write_wins(self):
        first, second = FakeAdapter("a", priority=1), FakeAdapter("a", priority=2)
        registry = EnvironmentRegistry([first])
        registry.register(second)
        assert registry.get_adapters() == [second]
        assert registry.get_adapter("a") is second

    def test_unknown_adapter(self):
        assert EnvironmentRegistry().get_adapter("unknown") is None

    def test_builtins_satisfy_protocol(self):
        for adapter in builtin_adapters():
            assert isinstance(adapter, EnvironmentAdapter)

    def test_builtin_priorities(self):
        registry = EnvironmentRegistry(builtin_adapters())
        assert [a.name for a in registry.get_adapters()] == ["nodejs", "python", "go", "rust"]


# ── Detection ────────────────────────────────────────────────────

class TestDetectEnvironments:
    def test_collects_hits_only(self):
        registry = EnvironmentRegistry([FakeAdapter("a"), FakeAdapter("b", detected=False)])
        assert [d.name for d in registry.detect_environments("/p")] == ["a"]

    def test_sorted_by_confidence_then_priority(self):
        registry = EnvironmentRegistry(
            [
                FakeAdapter("low", priority=100, confidence=0.3),
                FakeAdapter("tie_b", priority=10, confidence=0.9),
                FakeAdapter("tie_a", priority=50, confidence=0.9),
            ]
        )
        assert [d.name for d in registry.detect_environments("/p")] == ["tie_a", "tie_b", "low"]

    def test_empty_directory_detects_nothing(self, tmp_path):
        registry = EnvironmentRegistry(builtin_adapters())
        assert registry.detect_environments(str(tmp_path)) == []

    def test_multi_language_project(self, tmp_path):
        (tmp_path / "package.json").write_text("{}")
        (tmp_path / "requirements.txt").write_text("")
        (tmp_path / "go.mod").write_text("module x\n")
        registry = EnvironmentRegistry(builtin_adapters())
        detections = registry.detect_environments(str(tmp_path))
        assert [(d.name, d.package_manager) for d in detections] == [
            ("nodejs", "npm"),
            ("python", "pip"),
            ("go", "go"),
        ]

    def test_fresh_results_each_call(self, tmp_path):
        registry = EnvironmentRegistry(builtin_adapters())
        assert registry.detect_environments(str(tmp_path)) == []
        (tmp_path / "Cargo.toml").write_text("")
        assert [d.name for d in registry.detect_environments(str(tmp_path))] == ["rust"]


# ── Bootstrap fan-out ────────────────────────────────────────────

class TestBootstrapAll:
    def test_partial_failure_continues(self):
        failing = FakeAdapter("python", priority=100, succeed=False)
        working = FakeAdapter("nodejs", priority=50)
        registry = EnvironmentRegistry([failing, working])

        results = registry.bootstrap_all("/wt", "/src", BootstrapStrategy.SYMLINK)

        assert [(r.environment, r.success) for r in results] == [("python", False), ("nodejs", True)]
        assert results[0].message
        assert ("bootstrap", "/wt", "/src", BootstrapStrategy.SYMLINK) in working.calls

    def test_detects_against_source_root(self):
        adapter = FakeAdapter("a")
        EnvironmentRegistry([adapter]).bootstrap_all("/wt", "/src", BootstrapStrategy.NONE)
        assert adapter.calls[0] == ("detect", "/src")

    def test_undetected_adapters_not_bootstrapped(self):
        adapter = FakeAdapter("a", detected=False)
        results = EnvironmentRegistry([adapter]).bootstrap_all("/wt", "/src", BootstrapStrategy.SYMLINK)
        assert results == []
        assert all(c[0] != "bootstrap" for c in adapter.calls)

    def test_progress_event_before_each_bootstrap(self):
        registry = EnvironmentRegistry([FakeAdapter("a", 2), FakeAdapter("b", 1)])
        events = []
        registry.bootstrap_all("/wt", "/src", BootstrapStrategy.SYMLINK, events.append)
        assert [e.message for e in events] == [
            "Bootstrapping A environment",
            "Bootstrapping B environment",
        ]
        assert events[0].data == {"environment": "a", "strategy": "symlink"}

    def test_overrides(self):
        node, python, rust = FakeAdapter("nodejs", 3), FakeAdapter("python", 2), FakeAdapter("rust", 1)
        registry = EnvironmentRegistry([node, python, rust])
        overrides = {
            "python": EnvironmentSettings(strategy=BootstrapStrategy.NONE),
            "rust": EnvironmentSettings(enabled=False),
        }

        results = registry.bootstrap_all("/wt", "/src", BootstrapStrategy.SYMLINK, overrides=overrides)

        assert [(r.environment, r.strategy) for r in results] == [
            ("nodejs", BootstrapStrategy.SYMLINK),
            ("python", BootstrapStrategy.NONE),
        ]

    def test_empty_project(self, tmp_path):
        registry = EnvironmentRegistry(builtin_adapters())
        assert registry.bootstrap_all(str(tmp_path / "wt"), str(tmp_path), BootstrapStrategy.SYMLINK) == []


# ── Cleanup ──────────────────────────────────────────────────────

class TestCleanupAll:
    def test_calls_every_registered_adapter(self):
        adapters = [FakeAdapter("a"), FakeAdapter("b", detected=False)]
        EnvironmentRegistry(adapters).cleanup_all("/wt")
        for a in adapters:
            assert a.calls == [("cleanup", "/wt")]

    def test_failing_cleanup_does_not_stop_others(self, caplog):
        class BrokenAdapter(FakeAdapter):
            def cleanup(self, worktree_path):
                raise RuntimeError("boom")

        broken = BrokenAdapter("plugin", priority=200)
        after = FakeAdapter("nodejs", priority=100)
        with caplog.at_level(logging.WARNING, logger="branchbox.adapters.registry"):
            EnvironmentRegistry([broken, after]).cleanup_all("/wt")
        assert after.calls == [("cleanup", "/wt")]
        assert "Plugin cleanup failed: boom" in caplog.text


# ── Loading ──────────────────────────────────────────────────────

class TestLoadAdapters:
    def test_default_registry_has_builtins(self):
        registry = create_default_registry()
        for name in ("nodejs", "python", "go", "rust"):
            assert registry.get_adapter(name) is not None

    def test_extra_replaces_builtin(self):
        custom = NodejsAdapter(tsconfig_max_depth=2)
        assert create_default_registry([custom]).get_adapter("nodejs") is custom

    def test_explicit_name(self):
        [adapter] = load_adapters("go")
        assert adapter.name == "go"

    def test_explicit_name_not_found_raises(self):
        with pytest.raises(ValueError, match="No registered adapter"):
            load_adapters("nonexistent_adapter_xyz")

    def test_import_string(self):
        [adapter] = load_adapters("import:branchbox.integrations.rust:RustAdapter")
        assert adapter.name == "rust"

    def test_load_import_adapter_instance(self):
        adapter = load_import_adapter("branchbox.integrations.go:GoAdapter")
        assert adapter.display_name == "Go"
