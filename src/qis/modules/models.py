"""Findings and test outcomes read back from tool output."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Literal

CaseStatus = Literal["passed", "failed", "skipped", "error"]


@dataclass(frozen=True)
class Finding:
    """One complaint about one source line.

    ``is_error`` separates what counts against the module from what is only
    reported (ruff warnings, mypy notes).
    """

    path: str
    line: int
    message: str
    code: str | None = None
    column: int | None = None
    is_error: bool = False


@dataclass(frozen=True)
class JunitCase:
    name: str
    classname: str | None
    status: CaseStatus
    duration: float = 0.0
    message: str | None = None

    @property
    def node_id(self) -> str:
        return f"{self.classname}::{self.name}" if self.classname else self.name


@dataclass
class JunitReport:
    """Every test case of one JUnit file; counts are derived from the cases."""

    name: str
    cases: list[JunitCase] = field(default_factory=list)

    def _count(self, status: CaseStatus) -> int:
        return Counter(case.status for case in self.cases)[status]

    @property
    def total(self) -> int:
        return len(self.cases)

    @property
    def passed(self) -> int:
        return self._count("passed")

    @property
    def failed(self) -> int:
        return self._count("failed")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def errors(self) -> int:
        return self._count("error")

    @property
    def duration(self) -> float:
        return sum(case.duration for case in self.cases)
