"""Tests for Go and Rust — ecosystems with a global dependency cache."""

import pytest

from branchbox.integrations.go import GoAdapter
from branchbox.integrations.rust import RustAdapter
from branchbox.models import BootstrapStrategy

CASES = [
    (GoAdapter(), "go.mod", "go", "global module cache"),
    (RustAdapter(), "Cargo.toml", "cargo", "global cargo cache"),
]


@pytest.mark.parametrize("adapter,marker,manager,_msg", CASES)
def test_detects_marker(tmp_path, adapter, marker, manager, _msg):
    (tmp_path / marker).write_text("")
    d = adapter.detect(str(tmp_path))
    assert d is not None
    assert d.package_manager == manager
    assert d.marker_files == [marker]


@pytest.mark.parametrize("adapter,marker,manager,_msg", CASES)
def test_no_marker(tmp_path, adapter, marker, manager, _msg):
    assert adapter.detect(str(tmp_path)) is None


@pytest.mark.parametrize("strategy", list(BootstrapStrategy))
@pytest.mark.parametrize("adapter,marker,manager,msg", CASES)
def test_bootstrap_is_noop_success(tmp_path, adapter, marker, manager, msg, strategy):
    src = tmp_path / "src"
    src.mkdir()
    (src / marker).write_text("")
    wt = tmp_path / "wt"
    wt.mkdir()

    result = adapter.bootstrap(str(wt), str(src), strategy)

    assert result.success is True
    assert result.strategy == strategy
    assert msg in result.message
    assert "No worktree setup needed" in result.message
    assert list(wt.iterdir()) == []
    assert [p.name for p in src.iterdir()] == [marker]


@pytest.mark.parametrize("adapter,marker,manager,_msg", CASES)
def test_cleanup_is_noop(tmp_path, adapter, marker, manager, _msg):
    (tmp_path / "keep").write_text("x")
    adapter.cleanup(str(tmp_path))
    assert (tmp_path / "keep").read_text() == "x"
