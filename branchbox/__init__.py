"""branchbox — environment bootstrap for fresh git worktrees."""

__version__ = "0.1.0"
