"""Path helpers: common-root inference and bounded recursive globbing."""

from __future__ import annotations

import fnmatch
import os
import re
from collections.abc import Collection, Sequence
from pathlib import Path

from qis.core.errors import ConfigError
from qis.core.excludes import should_prune_dir

SEP = "/"


def _with_trailing_sep(path: str) -> str:
    return path if path.endswith(SEP) else path + SEP


def common_root_one(path: str) -> str:
    """Directory part of a single path, with a trailing separator.

    A bare filename has no directory part and yields an empty string.
    """
    parent = SEP.join(path.split(SEP)[:-1])
    if parent == "" and not path.startswith(SEP):
        return ""
    return _with_trailing_sep(parent)


def find_common_root(paths: Sequence[str]) -> str:
    """Longest directory prefix shared by every path.

    Paths are compared segment by segment so the result is empty or ends at a
    separator: ``foo/bar/baz`` and ``foo/bar/bax`` share ``foo/bar/``, never
    ``foo/bar/ba``.
    """
    if not paths:
        return ""
    if len(paths) == 1:
        return common_root_one(paths[0])

    split = [path.split(SEP) for path in paths]
    longest = max(len(parts) for parts in split)

    root = ""
    for i in range(1, longest + 1):
        prefixes = {_with_trailing_sep(SEP.join(parts[:i])) for parts in split}
        if len(prefixes) > 1:
            return root
        root = prefixes.pop()
    return root


def compile_ignore(patterns: Sequence[str], *, setting: str = "ignore") -> re.Pattern[str] | None:
    """Join ignore patterns into one regex alternation, or None if empty.

    Raises:
        ConfigError: If a pattern is not a valid regular expression.
    """
    cleaned = [p for p in (pattern.strip() for pattern in patterns) if p]
    if not cleaned:
        return None
    for pattern in cleaned:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ConfigError.invalid_value(setting, pattern, f"bad regular expression ({e})") from e
    return re.compile("|".join(cleaned))


def is_ignored(path: str, ignore: re.Pattern[str] | None) -> bool:
    return ignore is not None and ignore.search(path) is not None


def find_files(
    pattern: str, root: str | Path, *, skip_dirs: Collection[str] = ()
) -> list[str]:
    """Recursively glob ``pattern`` under ``root``.

    Returns sorted file paths rendered as ``root`` joined with the relative
    path. An empty root or the filesystem root is refused (empty result)
    rather than scanning the whole disk. Dot-directories, the prunable
    directories of ``qis.core.excludes`` and any directory named in
    ``skip_dirs`` are not descended into.
    """
    root_str = str(root)
    if root_str.strip() in ("", SEP, "\\"):
        return []

    base = Path(root_str)
    if not base.is_dir():
        return []

    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames[:] = [d for d in dirnames if not should_prune_dir(d) and d not in skip_dirs]
        for filename in fnmatch.filter(filenames, pattern):
            relative = (Path(dirpath) / filename).relative_to(base)
            found.append(_with_trailing_sep(root_str) + relative.as_posix())
    return sorted(found)
