"""Coverage dataset model.

A dataset is what a loader makes of one coverage artifact: file entries
keyed by their path exactly as the artifact spells it, either directly under
the project or inside named groupings (packages).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from qis.core.formatting import round_half_up


@dataclass(frozen=True, slots=True)
class LineStat:
    """Execution annotation of one source line."""

    num: int
    type: str = "stmt"
    count: int = 0
    name: str | None = None


@dataclass(slots=True)
class DatasetFile:
    """One file node of the dataset."""

    name: str
    statements: int = 0
    covered_statements: int = 0
    lines: dict[int, LineStat] = field(default_factory=dict)


@dataclass(slots=True)
class FileGroup:
    """A named grouping of files (a package)."""

    name: str | None
    files: list[DatasetFile] = field(default_factory=list)


@dataclass(slots=True)
class CoverageDataset:
    """Parsed coverage artifact.

    ``has_project`` is False when the artifact has no project node at all,
    in which case there is nothing to gather.
    """

    source_format: str
    project_name: str | None = None
    timestamp: int | None = None
    has_project: bool = True
    files: list[DatasetFile] = field(default_factory=list)
    groups: list[FileGroup] = field(default_factory=list)

    def iter_files(self) -> list[DatasetFile]:
        """All file nodes: direct ones first, then group by group."""
        result = list(self.files)
        for group in self.groups:
            result.extend(group.files)
        return result

    def find_file(self, name: str) -> DatasetFile | None:
        for entry in self.iter_files():
            if entry.name == name:
                return entry
        return None

    @property
    def title(self) -> str:
        """Project name, else the first group's name, else 'Coverage'."""
        if self.project_name:
            return self.project_name
        if self.groups and self.groups[0].name:
            return self.groups[0].name
        return "Coverage"


@dataclass(frozen=True, slots=True)
class FileMetrics:
    """Statement counts of one report row."""

    statements: int = 0
    covered_statements: int = 0

    @property
    def percent(self) -> int:
        """Whole-number coverage percentage, 0 for files without statements."""
        if self.statements == 0:
            return 0
        return int(round_half_up(self.covered_statements / self.statements * 100))

