"""Coverage report aggregation.

Turns a coverage dataset plus the source tree on disk into a fixed-width text
report::

    ----------------------------------------------------------------
    myproject
    ----------------------------------------------------------------
    Coverage report generated 2024-01-31 12:00:00
    Root: /home/me/myproject/src/
    ----------------------------------------------------------------
    app.py     |  9 / 10 |  90%  [********* ]
    util.py    |  0 / 12 |   0%  [          ]
    ----------------------------------------------------------------
    Total Coverage: 40.91%
    ----------------------------------------------------------------

Source files found under the root but absent from the dataset are listed
with zero covered statements, so untested files show up in the report.
Output is collected in a buffer and only handed out once generation has
succeeded.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

import structlog

from qis.core.errors import CoverageReportError
from qis.core.formatting import format_percent, round_half_up
from qis.core.paths import compile_ignore, find_common_root, find_files, is_ignored
from qis.core.sloc import count_logical_lines
from qis.coverage.loaders import load_dataset
from qis.coverage.models import CoverageDataset, FileMetrics

log = structlog.get_logger()

RULE = "-" * 64
BAR_WIDTH = 10
TESTS_DIR = "tests"


def coverage_bar(percent: int) -> str:
    """Ten-block bar, one block per full 10%."""
    blocks = int(percent / BAR_WIDTH)
    return "[" + ("*" * blocks).ljust(BAR_WIDTH) + "]"


class CoverageAggregator:
    """Builds coverage reports from one dataset.

    Holds the gathered per-file metrics between calls, so an instance is
    meant for a single report generation.
    """

    def __init__(
        self,
        dataset: CoverageDataset,
        *,
        ignore_paths: Sequence[str] | re.Pattern[str] = (),
        pattern: str = "*.py",
        line_counter: Callable[[str], int] = count_logical_lines,
    ) -> None:
        self._dataset = dataset
        if isinstance(ignore_paths, re.Pattern):
            self._ignore: re.Pattern[str] | None = ignore_paths
        else:
            self._ignore = compile_ignore(ignore_paths, setting="ignore_paths")
        self._pattern = pattern
        self._count_lines = line_counter
        self._files: dict[str, FileMetrics] = {}
        self._lines: list[str] = []

    @classmethod
    def from_file(
        cls, path: Path, *, format_id: str | None = None, **kwargs: object
    ) -> CoverageAggregator:
        """Load the dataset at ``path`` and wrap it.

        ``format_id`` forces a loader instead of detecting the format.

        Raises:
            CoverageReportError: If the dataset is missing or malformed.
        """
        log.debug("coverage_dataset_loading", path=str(path))
        return cls(load_dataset(path, format_id=format_id), **kwargs)  # type: ignore[arg-type]

    @property
    def dataset(self) -> CoverageDataset:
        return self._dataset

    @property
    def files(self) -> dict[str, FileMetrics]:
        return dict(self._files)

    @property
    def text(self) -> str:
        return "".join(line + "\n" for line in self._lines)

    def _append(self, text: str) -> None:
        self._lines.append(text)

    def gather_file_metrics(self) -> dict[str, FileMetrics]:
        """Flatten the dataset's file nodes into path-keyed metrics.

        Files matching an ignore pattern are dropped. A dataset without a
        project node gathers nothing.
        """
        if not self._dataset.has_project:
            return {}

        for entry in self._dataset.iter_files():
            if is_ignored(entry.name, self._ignore):
                continue
            self._files[entry.name] = FileMetrics(
                statements=entry.statements,
                covered_statements=entry.covered_statements,
            )
        return self.files

    def generate_report(self, root: str | None = None) -> str:
        """Build the full report; ``root`` defaults to the files' common root."""
        self.gather_file_metrics()
        if root is None:
            root = find_common_root(list(self._files))

        for path in find_files(self._pattern, root, skip_dirs=(TESTS_DIR,)):
            if is_ignored(path, self._ignore):
                continue
            if path not in self._files:
                self._files[path] = FileMetrics(statements=self._count_lines(path))

        timestamp = self._dataset.timestamp
        if timestamp is None:
            timestamp = int(time.time())
        generated = datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")

        self._add_title()
        self._append(f"Coverage report generated {generated}")
        self._append(f"Root: {root}")
        self._append(RULE)
        self._add_file_metrics(root)
        self._append(RULE)
        self._append(f"Total Coverage: {format_percent(self.get_total_coverage())}%")
        self._append(RULE)

        log.debug("coverage_report_generated", files=len(self._files), root=root)
        return self.text

    def _add_title(self) -> None:
        self._append(RULE)
        self._append(self._dataset.title)
        self._append(RULE)

    def _add_file_metrics(self, root: str) -> None:
        rows = [(name.removeprefix(root), metrics) for name, metrics in sorted(self._files.items())]

        name_width = max([10, *(len(name) for name, _ in rows)])
        largest = max([2, *(metrics.statements for _, metrics in rows)])
        count_width = len(str(largest))

        for name, metrics in rows:
            percent = metrics.percent
            self._append(
                name.ljust(name_width)
                + " | "
                + str(metrics.covered_statements).rjust(count_width)
                + " / "
                + str(metrics.statements).rjust(count_width)
                + " | "
                + str(percent).rjust(3)
                + "%"
                + "  "
                + coverage_bar(percent)
            )

    def generate_file_analysis(self, file: str, root: str | None = None) -> bool:
        """Annotate one source file with per-line execution counts.

        The file is looked up as given, then prefixed with the root. Returns
        False when the dataset is empty or does not know the file.
        """
        files = self.gather_file_metrics()
        if not files:
            return False

        if root is None:
            root = find_common_root(list(files))

        if file not in files:
            file = root + file

        if file not in files:
            self._append(f"No coverage information available\n for file {file}")
            return False

        entry = self._dataset.find_file(file)
        stats = entry.lines if entry is not None else {}

        try:
            source = Path(file).read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as e:
            raise CoverageReportError.unreadable_source(file, str(e)) from e

        for number, line in enumerate(source, start=1):
            gutter = f"{number:>5} "
            stat = stats.get(number)
            if stat is not None:
                gutter += f"{stat.count:>8} : "
            else:
                gutter += " " * 8 + " : "
            self._append(gutter + line.rstrip())
        return True

    def get_total_coverage(self) -> float:
        """Covered over total statements across gathered files, 2 decimals."""
        total = sum(metrics.statements for metrics in self._files.values())
        covered = sum(metrics.covered_statements for metrics in self._files.values())
        if total == 0:
            return 0.0
        return float(round_half_up(covered / total * 100, 2))
