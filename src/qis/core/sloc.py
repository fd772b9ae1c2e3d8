"""Source line counting.

Three numbers per file, as reported by classic loc tools:
- loc: physical lines
- cloc: comment lines
- lloc: logical lines (statements)

Python sources are measured with ``tokenize``; anything else falls back to a
line-based heuristic.
"""

from __future__ import annotations

import io
import tokenize
from dataclasses import dataclass
from pathlib import Path

_COMMENT_MARKERS = ("#", "//", "/*", "*", "--", ";")


@dataclass(frozen=True, slots=True)
class SourceLines:
    loc: int = 0
    cloc: int = 0
    lloc: int = 0

    def __add__(self, other: SourceLines) -> SourceLines:
        return SourceLines(
            loc=self.loc + other.loc,
            cloc=self.cloc + other.cloc,
            lloc=self.lloc + other.lloc,
        )


def count_source_lines(path: str | Path) -> SourceLines:
    """Count physical, comment and logical lines of one file."""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return SourceLines()

    if str(path).endswith((".py", ".pyi")):
        try:
            return _count_python(text)
        except (tokenize.TokenError, SyntaxError):
            pass
    return _count_text(text)


def count_logical_lines(path: str | Path) -> int:
    return count_source_lines(path).lloc


def _count_python(text: str) -> SourceLines:
    comment_lines: set[int] = set()
    logical = 0
    for token in tokenize.generate_tokens(io.StringIO(text).readline):
        if token.type == tokenize.COMMENT:
            comment_lines.add(token.start[0])
        elif token.type == tokenize.NEWLINE:
            logical += 1
    return SourceLines(loc=len(text.splitlines()), cloc=len(comment_lines), lloc=logical)


def _count_text(text: str) -> SourceLines:
    lines = text.splitlines()
    comments = 0
    logical = 0
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith(_COMMENT_MARKERS):
            comments += 1
        else:
            logical += 1
    return SourceLines(loc=len(lines), cloc=comments, lloc=logical)
