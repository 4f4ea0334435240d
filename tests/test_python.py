"""Tests for the Python adapter."""

import os

import pytest

from branchbox.integrations.python import PythonAdapter
from branchbox.models import BootstrapStrategy

adapter = PythonAdapter()


class TestPythonDetect:
    @pytest.mark.parametrize(
        "files,manager,markers",
        [
            (["pyproject.toml"], "pip", ["pyproject.toml"]),
            (["pyproject.toml", "poetry.lock"], "poetry", ["pyproject.toml", "poetry.lock"]),
            (["pyproject.toml", "uv.lock"], "uv", ["pyproject.toml", "uv.lock"]),
            (["requirements.txt"], "pip", ["requirements.txt"]),
            (["Pipfile"], "pipenv", ["Pipfile"]),
            (["setup.py"], "pip", ["setup.py"]),
        ],
    )
    def test_markers(self, tmp_path, files, manager, markers):
        for name in files:
            (tmp_path / name).write_text("")
        d = adapter.detect(str(tmp_path))
        assert d is not None
        assert d.name == "python"
        assert d.package_manager == manager
        assert d.marker_files == markers

    def test_pyproject_takes_precedence(self, tmp_path):
        (tmp_path / "requirements.txt").write_text("")
        (tmp_path / "pyproject.toml").write_text("")
        assert adapter.detect(str(tmp_path)).marker_files == ["pyproject.toml"]

    def test_lock_file_alone_is_not_enough(self, tmp_path):
        (tmp_path / "poetry.lock").write_text("")
        assert adapter.detect(str(tmp_path)) is None

    def test_empty_directory(self, tmp_path):
        assert adapter.detect(str(tmp_path)) is None


class TestPythonBootstrap:
    @pytest.fixture
    def dirs(self, tmp_path):
        src = tmp_path / "main"
        src.mkdir()
        (src / "pyproject.toml").write_text("")
        wt = tmp_path / "wt"
        wt.mkdir()
        return src, wt

    def test_missing_venv_is_not_an_error(self, dirs):
        src, wt = dirs
        result = adapter.bootstrap(str(wt), str(src), BootstrapStrategy.SYMLINK)
        assert result.success is True
        assert "No .venv" in result.message
        assert result.path is None
        assert list(wt.iterdir()) == []

    def test_symlinks_venv(self, dirs):
        src, wt = dirs
        (src / ".venv" / "bin").mkdir(parents=True)
        result = adapter.bootstrap(str(wt), str(src), BootstrapStrategy.SYMLINK)
        assert result.success is True
        assert (wt / ".venv").is_symlink()
        assert os.path.realpath(wt / ".venv") == os.path.realpath(src / ".venv")

    def test_symlink_is_idempotent(self, dirs):
        src, wt = dirs
        (src / ".venv").mkdir()
        adapter.bootstrap(str(wt), str(src), BootstrapStrategy.SYMLINK)
        again = adapter.bootstrap(str(wt), str(src), BootstrapStrategy.SYMLINK)
        assert again.success is True
        assert os.path.realpath(wt / ".venv") == os.path.realpath(src / ".venv")

    def test_none_strategy(self, dirs):
        src, wt = dirs
        (src / ".venv").mkdir()
        result = adapter.bootstrap(str(wt), str(src), BootstrapStrategy.NONE)
        assert result.success is True
        assert not (wt / ".venv").exists()

    def test_install_not_implemented(self, dirs):
        src, wt = dirs
        (src / ".venv").mkdir()
        result = adapter.bootstrap(str(wt), str(src), BootstrapStrategy.INSTALL)
        assert result.success is False
        assert "not yet implemented" in result.message


class TestPythonCleanup:
    def test_keeps_real_venv(self, tmp_path):
        venv = tmp_path / ".venv" / "lib"
        venv.mkdir(parents=True)
        (venv / "site.py").write_text("x = 1\n")
        adapter.cleanup(str(tmp_path))
        assert (venv / "site.py").read_text() == "x = 1\n"

    def test_removes_link(self, tmp_path):
        real = tmp_path / "real-venv"
        real.mkdir()
        wt = tmp_path / "wt"
        wt.mkdir()
        os.symlink(real, wt / ".venv", target_is_directory=True)
        adapter.cleanup(str(wt))
        assert not (wt / ".venv").is_symlink()
        assert real.is_dir()

    def test_removes_dangling_link(self, tmp_path):
        os.symlink(tmp_path / "gone", tmp_path / ".venv")
        adapter.cleanup(str(tmp_path))
        assert not (tmp_path / ".venv").is_symlink()
