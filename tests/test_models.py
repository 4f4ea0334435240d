"""Tests for branchbox.models."""

import dataclasses

import pytest

from branchbox.models import (
    BootstrapResult,
    BootstrapStrategy,
    DetectionResult,
    ProgressEvent,
    WorkspacePackage,
    emit,
)


class TestBootstrapStrategy:
    def test_from_str(self):
        assert BootstrapStrategy.from_str("symlink") == BootstrapStrategy.SYMLINK
        assert BootstrapStrategy.from_str(" INSTALL ") == BootstrapStrategy.INSTALL

    def test_from_str_unknown(self):
        with pytest.raises(ValueError, match="Must be one of: symlink, install, none"):
            BootstrapStrategy.from_str("copy")

    def test_str(self):
        assert str(BootstrapStrategy.NONE) == "none"


class TestDetectionResult:
    def test_defaults(self):
        d = DetectionResult("go")
        assert d.confidence == 1.0
        assert d.package_manager is None
        assert d.marker_files == []

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DetectionResult("go").name = "rust"


class TestEmit:
    def test_no_sink(self):
        emit(None, "step_completed", "ignored")

    def test_sends_event(self):
        events: list[ProgressEvent] = []
        emit(events.append, "file_written", "Wrote x", path="x")
        assert events == [ProgressEvent("file_written", "Wrote x", {"path": "x"})]


class TestToDict:
    def test_workspace_package(self):
        pkg = WorkspacePackage("@x/a", "packages/a", "/r/packages/a")
        assert pkg.to_dict()["entry_point"] is None

    def test_bootstrap_result_minimal(self):
        r = BootstrapResult("rust", BootstrapStrategy.SYMLINK, True, "ok")
        assert r.to_dict() == {
            "environment": "rust",
            "strategy": "symlink",
            "success": True,
            "message": "ok",
            "path": None,
        }
