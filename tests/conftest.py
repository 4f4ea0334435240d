"""Shared fixtures — keep tests away from the real ``~/.branchbox`` config."""

import pytest

import branchbox.config as config_module


@pytest.fixture(autouse=True)
def _isolate_user_config(tmp_path_factory, monkeypatch):
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setattr(config_module, "USER_CONFIG_PATH", home / ".branchbox" / "config.yml")
    monkeypatch.delenv(config_module.STRATEGY_ENV_VAR, raising=False)
