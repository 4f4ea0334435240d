"""Unified configuration loader for branchbox.

Configuration is resolved in priority order: **project > user > defaults**.

1. **Project-level** — ``.branchbox.yml`` in (or above) the source checkout.
   Checked into version control, shared by the team.
2. **User-level** — ``~/.branchbox/config.yml``.
   Personal defaults across all projects.
3. **Built-in defaults** — ``strategy: symlink``, ``max_depth: 5``.

Both files share the same format::

    # .branchbox.yml  or  ~/.branchbox/config.yml
    bootstrap:
      strategy: symlink        # symlink | install | none
      environments:
        python:
          strategy: none
        rust:
          enabled: false
    tsconfig:
      max_depth: 5

Project-level values override user-level values.  The
``BRANCHBOX_BOOTSTRAP_STRATEGY`` environment variable overrides both, and
CLI flags override everything.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from branchbox.models import BootstrapStrategy
from branchbox.tsconfig import DEFAULT_MAX_DEPTH

CONFIG_FILENAME = ".branchbox.yml"
USER_CONFIG_DIR = Path.home() / ".branchbox"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yml"
STRATEGY_ENV_VAR = "BRANCHBOX_BOOTSTRAP_STRATEGY"


class ConfigError(ValueError):
    """A configuration value is present but invalid."""

    def __init__(self, message: str, field: str, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class EnvironmentSettings:
    """Per-ecosystem override."""

    strategy: BootstrapStrategy | None = None
    enabled: bool = True

    def resolve(self, default: BootstrapStrategy) -> BootstrapStrategy:
        return self.strategy if self.strategy is not None else default


@dataclass
class BootstrapConfig:
    """Bootstrap sub-configuration."""

    strategy: BootstrapStrategy = BootstrapStrategy.SYMLINK
    environments: dict[str, EnvironmentSettings] = field(default_factory=dict)


@dataclass
class TsconfigConfig:
    """tsconfig patching sub-configuration."""

    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass
class BranchboxConfig:
    """Top-level configuration container."""

    bootstrap: BootstrapConfig = field(default_factory=BootstrapConfig)
    tsconfig: TsconfigConfig = field(default_factory=TsconfigConfig)

    # Where the effective config was loaded from (None = defaults only).
    project_config_path: str | None = None
    user_config_path: str | None = None


# ---------------------------------------------------------------------------
# Public loaders
# ---------------------------------------------------------------------------


def load_config(
    start_path: str | None = None,
    config_path: str | Path | None = None,
) -> BranchboxConfig:
    """Load merged configuration (project > user > defaults).

    Parameters
    ----------
    start_path:
        Directory to search for ``.branchbox.yml``.  When *None*, only
        the user-level file (and defaults) are considered.
    config_path:
        Explicit config file path.  When given, *only* this file is
        loaded (no project/user search).

    Raises
    ------
    ConfigError
        When a strategy value is not one of ``symlink``, ``install``, ``none``.
    """
    if config_path is not None:
        raw = _load_yaml(Path(config_path).expanduser())
        cfg = _raw_to_config(_apply_env(raw or {}))
        cfg.project_config_path = str(config_path)
        return cfg

    user_raw = _load_yaml(USER_CONFIG_PATH)
    user_source = str(USER_CONFIG_PATH) if user_raw else None

    project_raw: dict | None = None
    project_source: str | None = None
    if start_path is not None:
        project_path = _find_project_config(start_path)
        if project_path is not None:
            project_raw = _load_yaml(project_path)
            project_source = str(project_path)

    merged = _apply_env(_merge_raw(project_raw, user_raw))
    cfg = _raw_to_config(merged)
    cfg.project_config_path = project_source
    cfg.user_config_path = user_source
    return cfg


def parse_strategy(value: object, field_name: str) -> BootstrapStrategy:
    """Parse a strategy value, raising :class:`ConfigError` with *field_name*."""
    try:
        return BootstrapStrategy.from_str(str(value))
    except ValueError as exc:
        raise ConfigError(f"Invalid {field_name}: {exc}", field=field_name, value=value) from None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _find_project_config(start_path: str) -> Path | None:
    """Search for ``.branchbox.yml`` in *start_path* and ancestors."""
    p = Path(start_path).absolute()
    candidates = [p / CONFIG_FILENAME]
    if not (p / ".git").exists():
        for parent in p.parents:
            candidates.append(parent / CONFIG_FILENAME)
            if (parent / ".git").exists():
                break
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def _load_yaml(path: Path) -> dict | None:
    """Load a YAML file, returning *None* on missing/invalid files."""
    path = path.expanduser()
    if not path.is_file():
        return None
    try:
        raw = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError):
        return None
    return raw if isinstance(raw, dict) else None


def _merge_raw(
    project: dict | None,
    user: dict | None,
) -> dict:
    """Merge project and user raw dicts (project wins)."""
    base: dict = _deep_copy_dict(user) if user else {}

    if project:
        for key in ("bootstrap", "tsconfig"):
            section = project.get(key)
            if not isinstance(section, dict):
                continue
            target = base.setdefault(key, {})
            if not isinstance(target, dict):
                target = base[key] = {}
            for sub_key, value in section.items():
                # environments merge per ecosystem; everything else replaces
                if sub_key == "environments" and isinstance(value, dict) and isinstance(
                    target.get(sub_key), dict
                ):
                    target[sub_key].update(_deep_copy_dict(value))
                else:
                    target[sub_key] = value

    return base


def _apply_env(raw: dict) -> dict:
    """Overlay the strategy environment variable onto *raw*."""
    env_strategy = os.environ.get(STRATEGY_ENV_VAR, "").strip()
    if env_strategy:
        raw = _deep_copy_dict(raw)
        bootstrap = raw.get("bootstrap")
        if not isinstance(bootstrap, dict):
            bootstrap = raw["bootstrap"] = {}
        bootstrap["strategy"] = env_strategy
    return raw


def _deep_copy_dict(d: dict) -> dict:
    """Shallow-ish copy: top-level dict and nested dicts (good enough for YAML config)."""
    out: dict = {}
    for k, v in d.items():
        if isinstance(v, dict):
            out[k] = _deep_copy_dict(v)
        elif isinstance(v, list):
            out[k] = list(v)
        else:
            out[k] = v
    return out


def _raw_to_config(raw: dict | None) -> BranchboxConfig:
    """Convert a raw YAML dict to a ``BranchboxConfig``."""
    if not raw:
        return BranchboxConfig()

    bootstrap_raw = raw.get("bootstrap", {})
    if not isinstance(bootstrap_raw, dict):
        bootstrap_raw = {}

    tsconfig_raw = raw.get("tsconfig", {})
    if not isinstance(tsconfig_raw, dict):
        tsconfig_raw = {}

    strategy = BootstrapStrategy.SYMLINK
    if bootstrap_raw.get("strategy") is not None:
        strategy = parse_strategy(bootstrap_raw["strategy"], "bootstrap.strategy")

    environments: dict[str, EnvironmentSettings] = {}
    envs_raw = bootstrap_raw.get("environments", {})
    if isinstance(envs_raw, dict):
        for name, env_raw in envs_raw.items():
            if not isinstance(env_raw, dict):
                continue
            env_strategy = None
            if env_raw.get("strategy") is not None:
                env_strategy = parse_strategy(
                    env_raw["strategy"], f"bootstrap.environments.{name}.strategy"
                )
            environments[str(name)] = EnvironmentSettings(
                strategy=env_strategy,
                enabled=bool(env_raw.get("enabled", True)),
            )

    try:
        max_depth = int(tsconfig_raw.get("max_depth", DEFAULT_MAX_DEPTH))
    except (TypeError, ValueError):
        raise ConfigError(
            "Invalid tsconfig.max_depth: must be an integer",
            field="tsconfig.max_depth",
            value=tsconfig_raw.get("max_depth"),
        ) from None

    return BranchboxConfig(
        bootstrap=BootstrapConfig(strategy=strategy, environments=environments),
        tsconfig=TsconfigConfig(max_depth=max_depth),
    )
