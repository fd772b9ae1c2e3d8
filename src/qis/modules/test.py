"""Test module - run the test suite with pytest."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from qis.core.arguments import Arguments
from qis.core.console import REPORT_STYLE
from qis.core.formatting import format_duration, render_table
from qis.core.process import stream_tool
from qis.modules.base import RETURN_BENIGN, RETURN_SUCCESS, Module, as_bool
from qis.modules.models import JunitReport
from qis.modules.parsers import parse_junit_xml

if TYPE_CHECKING:
    from qis.app import Qis

log = structlog.get_logger()

RESULTS_DIR = "test-results"
JUNIT_FILENAME = "log.junit"
COVERAGE_FILENAME = "coverage.xml"
COVERAGE_HTML_DIR = "coverage"
OUTPUT_FILENAME = "output.log"
LASTRUN_FILENAME = "lastrun"


class TestModule(Module):
    """Runs pytest and keeps its JUnit log and coverage dataset."""

    __test__ = False  # not a pytest test class

    name = "test"
    command = "test"

    def __init__(self, qis: Qis, settings: Mapping[str, Any]) -> None:
        super().__init__(qis, settings)
        self._bin: str = str(self.setting("bin", "pytest"))
        self._path: str = str(self.setting("path", "tests"))
        self._configuration: str | None = self.setting("configuration")
        self._coverage = as_bool(self.setting("coverage"), default=True)
        self._coverage_source: str = str(self.setting("cov", "."))
        self._coverage_html = as_bool(self.setting("coverage_html"))

    @classmethod
    def get_default_ini(cls) -> str:
        return (
            "; Run unit and integration tests for a project\n"
            f"{cls.name}.command={cls.command}\n"
            f"{cls.name}.class={cls.class_path()}\n"
            f"{cls.name}.bin=pytest\n"
            f"{cls.name}.configuration=\n"
            f"{cls.name}.coverage=1\n"
            f"{cls.name}.cov=src\n"
            f"{cls.name}.coverage_html=0\n"
            f"{cls.name}.path=tests\n"
        )

    @property
    def output_path(self) -> Path:
        return self._qis.project_qis_root / RESULTS_DIR

    @property
    def junit_path(self) -> Path:
        return self.output_path / JUNIT_FILENAME

    @property
    def coverage_path(self) -> Path:
        return self.output_path / COVERAGE_FILENAME

    def execute(self, args: Arguments) -> int:
        self._qis.qecho("\nRunning Test (unit tests) module task...\n")

        if args.flag("list"):
            return self.show_list()

        tests_dir = self._qis.project_root / self._path
        if not tests_dir.exists():
            return self._qis.halt(f"Tests directory '{self._path}' not found.")

        self._save_timestamp()
        returncode = self.run_test(args.target or self._path, verbose=args.flag("testdox"))
        log.info("tests_finished", returncode=returncode)

        self._qis.qecho("\nCompleted Test module task.\n")
        self.display_summary()
        return RETURN_SUCCESS

    def build_command(self, path: str, *, verbose: bool = False) -> list[str]:
        command = [self._bin, f"--junitxml={self.junit_path}"]
        if self._configuration:
            command.append(f"--config-file={self._configuration}")
        if verbose:
            command.append("-v")
        if self._coverage:
            command.append(f"--cov={self._coverage_source}")
            command.append(f"--cov-report=xml:{self.coverage_path}")
            if self._coverage_html:
                command.append(f"--cov-report=html:{self.output_path / COVERAGE_HTML_DIR}")
        command.append(path)
        return command

    def run_test(self, path: str, *, verbose: bool = False) -> int:
        command = self.build_command(path, verbose=verbose)
        self._qis.log(" ".join(command))
        return stream_tool(
            self.name,
            command,
            cwd=self._qis.project_root,
            echo=self._qis.qecho,
            log_path=self.output_path / OUTPUT_FILENAME,
            timeout=self.timeout,
        )

    def _save_timestamp(self) -> None:
        (self.output_path / LASTRUN_FILENAME).write_text(
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"), encoding="utf-8"
        )

    def get_last_run_timestamp(self) -> str:
        path = self.output_path / LASTRUN_FILENAME
        if not path.exists():
            return ""
        return path.read_text(encoding="utf-8")

    def read_junit(self) -> JunitReport | None:
        if not self.junit_path.exists():
            return None
        return parse_junit_xml(self.junit_path.read_text(encoding="utf-8"))

    def show_list(self) -> int:
        """List the test cases of the last run."""
        terminal = self._qis.terminal
        terminal.out("Last run results:\n")
        terminal.out(self.get_last_run_timestamp() + " \n")
        terminal.out("-" * 32 + "\n")

        report = self.read_junit()
        if report is not None:
            for case in report.cases:
                terminal.out(f"[{case.status.upper():7}] {case.node_id}\n")
            terminal.out(f"\n{report.total} tests in {format_duration(report.duration)}\n")
        return RETURN_BENIGN

    def display_summary(self) -> None:
        self._qis.pretty_message(self.get_summary().strip(), style=REPORT_STYLE)

    def get_help_message(self) -> str:
        return "Run unit tests for project\n"

    def get_extended_help_message(self) -> str:
        return (
            self.get_help_message()
            + "\n"
            + "Usage: test [OPTIONS] [path]\n"
            + "By default this will run all tests in the configured tests directory.\n"
            + "You can specify a path to run tests for a certain file or directory.\n"
            + "\nValid Options:\n"
            + "  --list : Show list of previous tests run\n"
            + "  --testdox : List test names while running tests\n"
        )

    def get_summary(self, short: bool = False) -> str:
        if short:
            return "Test: " + ("PASS" if self.get_status() else "FAIL")

        metrics = self.get_metrics()
        if metrics is None:
            return "No data yet."
        return "Test (unit tests) results:\n" + render_table(
            list(metrics), [list(metrics.values())]
        )

    def get_metrics(self, only_primary: bool = False) -> Any:
        report = self.read_junit()
        metrics = None
        if report is not None:
            metrics = {
                "tests": report.total,
                "failures": report.failed,
                "errors": report.errors,
                "skipped": report.skipped,
            }

        if not only_primary:
            return metrics
        if metrics is None:
            return 0.0
        # Passing tests
        return metrics["tests"] - (metrics["failures"] + metrics["errors"])

    def get_status(self) -> bool:
        metrics = self.get_metrics()
        if metrics is None:
            return False
        return not (metrics["failures"] + metrics["errors"])
