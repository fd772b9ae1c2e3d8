"""Coverage module - report statement coverage from the last test run."""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from qis.core.arguments import Arguments
from qis.core.errors import CoverageReportError
from qis.core.formatting import format_percent
from qis.core.paths import compile_ignore
from qis.coverage import CoverageAggregator
from qis.modules.base import RETURN_SUCCESS, Module, as_list

if TYPE_CHECKING:
    from qis.app import Qis

log = structlog.get_logger()

TEST_RESULTS_DIR = "test-results"
DATASET_FILENAME = "coverage.xml"
TOTAL_FILENAME = "totalcoverage.txt"
LASTRUN_FILENAME = "lastrun"

PASSING_COVERAGE = 80.0

_TOTAL_PATTERN = re.compile(r"Total Coverage:\s*([-+]?\d+(?:\.\d+)?)")


class CoverageModule(Module):
    """Shows the coverage report built from the test module's dataset."""

    name = "coverage"
    command = "coverage"

    def __init__(self, qis: Qis, settings: Mapping[str, Any]) -> None:
        super().__init__(qis, settings)
        self._root: str = str(self.setting("root", "."))
        self._ignore = compile_ignore(
            as_list(self.setting("ignorePaths")), setting=f"{self.name}.ignorePaths"
        )
        self._pattern: str = str(self.setting("pattern", "*.py"))
        self._dataset_setting: str | None = self.setting("file")
        self._format: str | None = self.setting("format") or None

    @classmethod
    def get_default_ini(cls) -> str:
        return (
            "; Module for code coverage of unit tests.\n"
            f"{cls.name}.command={cls.command}\n"
            f"{cls.name}.class={cls.class_path()}\n"
            f"{cls.name}.root=.\n"
            f"{cls.name}.ignorePaths=\\.venv/,build/\n"
        )

    @property
    def root(self) -> str:
        return self._root

    @property
    def dataset_path(self) -> Path:
        if self._dataset_setting:
            path = Path(self._dataset_setting)
            return path if path.is_absolute() else self._qis.project_root / path
        return self._qis.project_qis_root / TEST_RESULTS_DIR / DATASET_FILENAME

    def initialize(self) -> None:
        super().initialize()
        root = Path(self._root)
        if not root.is_absolute():
            root = self._qis.project_root / root
        self._root = str(root.resolve()).rstrip("/") + "/"

    def execute(self, args: Arguments) -> int:
        target_file = args.target
        self._save_timestamp()

        self._qis.qecho("\nRunning coverage module task...\n")
        report = self._check_coverage(target_file)
        self._qis.terminal.out(report)
        self._qis.qecho("\nCompleted coverage module task.\n")
        return RETURN_SUCCESS

    def _check_coverage(self, target_file: str | None) -> str:
        path = self.dataset_path
        if not path.exists():
            raise CoverageReportError.dataset_missing(str(path))

        self._qis.log("Parsing coverage dataset...")
        aggregator = CoverageAggregator.from_file(
            path, format_id=self._format, ignore_paths=self._ignore or (), pattern=self._pattern
        )
        if target_file:
            aggregator.generate_file_analysis(target_file, self._root)
        else:
            aggregator.generate_report(self._root)

        total = aggregator.get_total_coverage()
        self._save_total_coverage(total)
        log.info("coverage_computed", total=total, files=len(aggregator.files))
        return aggregator.text

    def _save_timestamp(self) -> None:
        (self.output_path / LASTRUN_FILENAME).write_text(
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"), encoding="utf-8"
        )

    def _save_total_coverage(self, total: float) -> None:
        (self.output_path / TOTAL_FILENAME).write_text(
            f"Total Coverage: {format_percent(total)}%", encoding="utf-8"
        )

    def get_total_coverage(self) -> str:
        path = self.output_path / TOTAL_FILENAME
        if not path.exists():
            return "No data."
        return path.read_text(encoding="utf-8")

    def get_help_message(self) -> str:
        return "Show code coverage for unit tests.\n"

    def get_extended_help_message(self) -> str:
        return (
            self.get_help_message()
            + "\n"
            + "Usage: coverage [filename]\n"
            + "By default this will show a coverage report for project files.\n"
            + "If a filename is specified, a source file coverage report is displayed\n"
            + "for the given filename.\n"
        )

    def get_summary(self, short: bool = False) -> str:
        prefix = "Coverage: " if short else "Coverage results:\n"
        return prefix + self.get_total_coverage()

    def get_metrics(self, only_primary: bool = False) -> Any:
        coverage = 0.0
        match = _TOTAL_PATTERN.search(self.get_total_coverage())
        if match:
            coverage = float(match.group(1))

        if only_primary:
            return coverage
        return {"coverage": coverage}

    def get_status(self) -> bool:
        return bool(self.get_metrics()["coverage"] > PASSING_COVERAGE)
