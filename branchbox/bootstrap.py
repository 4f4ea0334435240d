"""Bootstrap orchestration — the entry point the worktree workflow calls.

Typical use right after ``git worktree add``::

    results = bootstrap_worktree("worktrees/add-auth", os.getcwd())
    print(summarize(results))

and before ``git worktree remove``::

    cleanup_worktree("worktrees/add-auth")
"""

from __future__ import annotations

import logging

from branchbox.adapters.registry import EnvironmentRegistry, create_default_registry
from branchbox.config import BranchboxConfig, load_config
from branchbox.integrations.nodejs import NodejsAdapter
from branchbox.models import BootstrapResult, BootstrapStrategy, ProgressCallback, emit
from branchbox.tsconfig import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)


def default_registry_for(config: BranchboxConfig) -> EnvironmentRegistry:
    """Default registry, with the Node adapter honouring ``tsconfig.max_depth``."""
    extra = []
    if config.tsconfig.max_depth != DEFAULT_MAX_DEPTH:
        extra.append(NodejsAdapter(tsconfig_max_depth=config.tsconfig.max_depth))
    return create_default_registry(extra)


def bootstrap_worktree(
    worktree_path: str,
    source_root: str,
    *,
    strategy: BootstrapStrategy | str | None = None,
    config: BranchboxConfig | None = None,
    registry: EnvironmentRegistry | None = None,
    on_progress: ProgressCallback | None = None,
) -> list[BootstrapResult]:
    """Bootstrap every detected ecosystem of *source_root* into *worktree_path*.

    *strategy* wins over the configured default; per-environment overrides
    and disabled environments come from *config* (loaded from *source_root*
    when omitted).  Returns one result per bootstrapped ecosystem.
    """
    if config is None:
        config = load_config(start_path=source_root)
    if registry is None:
        registry = default_registry_for(config)

    if strategy is None:
        effective = config.bootstrap.strategy
    elif isinstance(strategy, BootstrapStrategy):
        effective = strategy
    else:
        effective = BootstrapStrategy.from_str(strategy)

    emit(on_progress, "step_completed", "Bootstrapping environments", strategy=str(effective))
    results = registry.bootstrap_all(
        worktree_path,
        source_root,
        effective,
        on_progress,
        overrides=config.bootstrap.environments,
    )

    successful = [r.environment for r in results if r.success]
    if successful:
        emit(on_progress, "step_completed", f"Bootstrapped: {', '.join(successful)}")
    logger.info(
        "Bootstrap of %s complete: %d ok, %d failed",
        worktree_path,
        len(successful),
        len(results) - len(successful),
    )
    return results


def cleanup_worktree(worktree_path: str, registry: EnvironmentRegistry | None = None) -> None:
    """Remove bootstrap symlinks before the worktree itself is removed."""
    if registry is None:
        registry = create_default_registry()
    registry.cleanup_all(worktree_path)


def summarize(results: list[BootstrapResult]) -> str:
    """One line describing what was bootstrapped and what failed."""
    if not results:
        return "No environments detected."

    ok = [r.environment for r in results if r.success]
    failed = [r for r in results if not r.success]
    parts: list[str] = []
    if ok:
        parts.append(f"Bootstrapped: {', '.join(ok)}")
    if failed:
        parts.append(
            "Failed: " + ", ".join(f"{r.environment} ({r.message})" for r in failed)
        )
    return "; ".join(parts)
