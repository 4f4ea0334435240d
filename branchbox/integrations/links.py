"""Symlink helpers shared by adapters that link a dependency cache."""

from __future__ import annotations

import contextlib
import os
import shutil
from pathlib import Path


def link_cache(source: Path, target: Path) -> None:
    """Point *target* at *source*, replacing whatever is at *target*.

    Running it twice leaves the same link in place.
    """
    if target.is_symlink() or target.is_file():
        target.unlink()
    elif target.is_dir():
        shutil.rmtree(target)

    target.parent.mkdir(parents=True, exist_ok=True)
    os.symlink(source, target, target_is_directory=True)


def unlink_cache(target: Path) -> None:
    """Remove *target* only if it is a symlink; real directories are kept."""
    with contextlib.suppress(OSError):
        if target.is_symlink():
            target.unlink()
