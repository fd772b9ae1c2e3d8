"""Directories never walked when qis looks for source files.

Tier 0 (HARDCODED_DIRS): VCS internals and qis's own output directory.
Tier 1 (DEFAULT_PRUNABLE_DIRS): dependencies, caches and build outputs.

Any other directory whose name starts with a dot is pruned as well, so tool
state such as ``.tox/`` or ``.nox/`` never shows up in reports.
"""

from __future__ import annotations

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        ".git",
        ".svn",
        ".hg",
        ".bzr",
        ".qis",
    )
)

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # JavaScript
        "node_modules",
        "bower_components",
        # Python
        "venv",
        ".venv",
        "virtualenv",
        "env",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".tox",
        ".nox",
        "eggs",
        ".eggs",
        "site-packages",
        "htmlcov",
        # Build outputs
        "build",
        "dist",
    )
)

PRUNABLE_DIRS: frozenset[str] = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS


def should_prune_dir(name: str) -> bool:
    """True for directories a source walk must not descend into."""
    return name.startswith(".") or name in PRUNABLE_DIRS or name.endswith(".egg-info")
