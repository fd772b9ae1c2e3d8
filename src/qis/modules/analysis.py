"""Analysis module - static type analysis with mypy."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from qis.core.arguments import Arguments
from qis.core.console import FAIL_STYLE
from qis.core.errors import ModuleError, ReportSourceError
from qis.core.formatting import render_table, round_half_up
from qis.core.process import run_tool, stream_tool
from qis.modules.base import RETURN_BENIGN, RETURN_ERROR, RETURN_SUCCESS, Module, as_bool, as_list
from qis.modules.parsers import parse_mypy

if TYPE_CHECKING:
    from qis.app import Qis

log = structlog.get_logger()

RESULTS_FILENAME = "results.json"
LASTRUN_FILENAME = "lastrun"

PASSING_SCORE = 25


def error_score(errors: int) -> float:
    """100 for a clean run, falling off as the inverse of the error count."""
    if errors == 0:
        return 100.0
    return float(round_half_up(1 / errors * 100, 2))


class AnalysisModule(Module):
    """Runs mypy over the configured paths and stores its findings."""

    name = "analysis"
    command = "analysis"

    def __init__(self, qis: Qis, settings: Mapping[str, Any]) -> None:
        super().__init__(qis, settings)
        self._bin: str = str(self.setting("bin", "mypy"))
        self._paths = as_list(self.setting("paths", "src,tests")) or ["src"]
        self._strict = as_bool(self.setting("strict"))

    @classmethod
    def get_default_ini(cls) -> str:
        return (
            "; Perform static type analysis on project sources\n"
            f"{cls.name}.command={cls.command}\n"
            f"{cls.name}.class={cls.class_path()}\n"
            f"{cls.name}.bin=mypy\n"
            f"{cls.name}.paths=src,tests\n"
            f"{cls.name}.strict=0\n"
        )

    @property
    def results_path(self) -> Path:
        return self.output_path / RESULTS_FILENAME

    def execute(self, args: Arguments) -> int:
        self._qis.qecho("\nRunning Analysis module task...\n")

        if args.flag("results"):
            self.show_results()
            return RETURN_BENIGN

        if "file" in args.options:
            file = args.get("file") or args.target
            if not file:
                return self._qis.halt("Missing file name for --file.")
            return self.show_results_for_file(file)

        if args.flag("raw"):
            self._run_raw()
            return RETURN_BENIGN

        self.analyze_project()
        self.show_results()
        self._qis.qecho("\nCompleted Analysis module task.\n")
        return RETURN_SUCCESS

    def _build_command(self, *, json_output: bool) -> list[str]:
        command = [self._bin]
        if json_output:
            command.extend(["--output=json", "--no-error-summary"])
        if self._strict:
            command.append("--strict")
        command.extend(self._paths)
        return command

    def _run_raw(self) -> None:
        command = self._build_command(json_output=False)
        self._qis.log(" ".join(command))
        stream_tool(
            self.name,
            command,
            cwd=self._qis.project_root,
            echo=self._qis.terminal.out,
            timeout=self.timeout,
        )

    def analyze_project(self) -> dict[str, Any]:
        """Run mypy and store its errors grouped by file."""
        command = self._build_command(json_output=True)
        self._qis.log(" ".join(command))
        output = run_tool(self.name, command, cwd=self._qis.project_root, timeout=self.timeout)

        try:
            findings = parse_mypy(output.stdout)
        except ValueError as e:
            raise ModuleError.tool_failed(self.name, command, str(e)) from e
        if output.returncode > 1 and not findings:
            raise ModuleError.tool_failed(
                self.name, command, output.stderr.strip() or f"exit status {output.returncode}"
            )

        files: dict[str, dict[str, Any]] = {}
        for finding in findings:
            if not finding.is_error:
                continue
            name = Path(os.path.relpath(self._qis.project_root / finding.path, self._qis.project_root))
            entry = files.setdefault(name.as_posix(), {"errors": 0, "messages": []})
            entry["errors"] += 1
            entry["messages"].append(
                {"line": finding.line, "message": finding.message, "code": finding.code}
            )

        results = {
            "files": files,
            "totals": {"file_errors": sum(entry["errors"] for entry in files.values())},
        }
        self.results_path.write_text(json.dumps(results, indent=2), encoding="utf-8")
        self._save_timestamp()
        log.info("analysis_stored", files=len(files), errors=results["totals"]["file_errors"])
        return results

    def read_results(self) -> dict[str, Any]:
        """Stored results of the last run.

        Raises:
            ReportSourceError: If no run was stored or the file is damaged.
        """
        path = self.results_path
        self._qis.log(str(path))
        if not path.exists():
            raise ReportSourceError.not_found(str(path))
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ReportSourceError.malformed(str(path), str(e)) from e
        if not isinstance(data, dict) or not isinstance(data.get("files"), dict):
            raise ReportSourceError.malformed(str(path), "Missing 'files' map")
        return data

    def _rows(self, files: Mapping[str, Any]) -> list[tuple[str, str, str]]:
        rows = []
        for filename, file_results in files.items():
            for message in file_results.get("messages", []):
                rows.append((str(len(rows) + 1), f"{filename}:{message['line']}", message["message"]))
        return rows

    def show_results(self) -> None:
        results = self.read_results()
        terminal = self._qis.terminal

        terminal.out(f"Last run: {self.get_last_run_timestamp()}\n")
        terminal.out(f"Strict: {'yes' if self._strict else 'no'}\n")
        terminal.print_table(("", "File:Line", "Message"), self._rows(results["files"]))
        terminal.styled(f"Total errors: {results['totals']['file_errors']}", FAIL_STYLE)
        terminal.out("\n\nUse `qis analysis --file=<filename>` to show results per file.\n")

    def show_results_for_file(self, file: str) -> int:
        results = self.read_results()
        terminal = self._qis.terminal

        found = {
            filename: file_results
            for filename, file_results in results["files"].items()
            if file.strip() in filename
        }
        if not found:
            terminal.out(f"No results for file '{file}'\n")
            return RETURN_ERROR

        rows = self._rows(found)
        terminal.out(f"Last run: {self.get_last_run_timestamp()}\n")
        terminal.print_table(("", "File:Line", "Message"), rows)
        if len(found) == 1:
            only = next(iter(found.values()))
            terminal.styled(f"File errors: {only['errors']}", FAIL_STYLE)
        else:
            terminal.styled(f"Errors: {len(rows)}", FAIL_STYLE)
        terminal.out("\n\n")
        return RETURN_BENIGN

    def _save_timestamp(self) -> None:
        (self.output_path / LASTRUN_FILENAME).write_text(
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"), encoding="utf-8"
        )

    def get_last_run_timestamp(self) -> str:
        path = self.output_path / LASTRUN_FILENAME
        if not path.exists():
            return ""
        return path.read_text(encoding="utf-8").strip()

    def get_help_message(self) -> str:
        return "Perform static analysis for project (runs mypy)\n"

    def get_extended_help_message(self) -> str:
        return (
            self.get_help_message()
            + "\n"
            + "Usage: analysis [OPTIONS]\n"
            + "This will run the static analysis tool on the project files.\n\n"
            + "Valid Options:\n"
            + "  --results : Show results from last run\n"
            + "  --file=<name> : Show results for a specific file\n"
            + "  --raw : Run the analysis and show its raw output\n"
        )

    def get_summary(self, short: bool = False) -> str:
        metrics = self.get_metrics()
        if short:
            if metrics is None:
                return "Analysis: No data."
            return f"Analysis errors: {metrics['errors']}"

        if metrics is None:
            return "Analysis results:\nNo data yet."
        return "Analysis results:\n" + render_table(list(metrics), [list(metrics.values())])

    def get_metrics(self, only_primary: bool = False) -> Any:
        try:
            results = self.read_results()
        except ReportSourceError:
            return 0.0 if only_primary else None

        errors = int((results.get("totals") or {}).get("file_errors", 0))
        score = error_score(errors)
        if only_primary:
            return score
        return {"errors": errors, "error_score": score}

    def get_status(self) -> bool:
        metrics = self.get_metrics()
        if metrics is None:
            return False
        return metrics["error_score"] >= PASSING_SCORE
