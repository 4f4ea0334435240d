"""Filesystem builders shared by the tests."""

import json
from pathlib import Path


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


def make_package(root: Path, rel: str, name: str | None, entry: str | None = "src/index.ts") -> Path:
    """Create a workspace member at *root*/*rel* with an optional entry file."""
    pkg_dir = root / rel
    pkg_dir.mkdir(parents=True, exist_ok=True)
    if name is not None:
        write_json(pkg_dir / "package.json", {"name": name})
    if entry:
        entry_path = pkg_dir / entry
        entry_path.parent.mkdir(parents=True, exist_ok=True)
        entry_path.write_text("export {};\n")
    return pkg_dir


def snapshot(root: Path) -> dict[str, str]:
    """Map every regular file under *root* to its content (symlinks not followed)."""
    out: dict[str, str] = {}
    for p in sorted(root.rglob("*")):
        if p.is_file() and not p.is_symlink():
            out[str(p.relative_to(root))] = p.read_text()
    return out
