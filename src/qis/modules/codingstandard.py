"""Codingstandard module - style and lint checks with ruff.

Results are kept per file in ``.qis/codingstandard/results.json`` so that a
run limited to a few paths only replaces the entries for those paths; the
project totals and the error level are always derived from the full set.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from qis.core.arguments import Arguments
from qis.core.console import REPORT_STYLE
from qis.core.errors import ModuleError
from qis.core.formatting import format_percent, pluralize, render_table, round_half_up
from qis.core.paths import compile_ignore, find_files, is_ignored
from qis.core.process import run_tool
from qis.core.sloc import count_source_lines
from qis.modules.base import RETURN_BENIGN, RETURN_SUCCESS, Module, as_list
from qis.modules.parsers import parse_ruff

if TYPE_CHECKING:
    from qis.app import Qis

log = structlog.get_logger()

RESULTS_FILENAME = "results.json"
LASTRUN_FILENAME = "lastrun"

DEFAULT_ERROR_CODES = "E9,F"
MAX_ERROR_LEVEL = 3.0


def calculate_error_level(errors: int, warnings: int, sloc: int, comments: int) -> float:
    """Weighted findings per hundred lines; warnings count half."""
    lines = sloc + comments
    if lines == 0:
        return 0.0
    return float(round_half_up((errors + warnings / 2) / lines * 100, 2))


class CodingstandardModule(Module):
    """Runs ruff over the project paths and grades the findings."""

    name = "codingstandard"
    command = "cs"

    def __init__(self, qis: Qis, settings: Mapping[str, Any]) -> None:
        super().__init__(qis, settings)
        self._bin: str = str(self.setting("bin", "ruff"))
        self._paths = as_list(self.setting("path", ".")) or ["."]
        self._ignore = compile_ignore(
            as_list(self.setting("ignore")), setting=f"{self.name}.ignore"
        )
        self._error_codes = tuple(as_list(self.setting("error_codes", DEFAULT_ERROR_CODES)))
        self._select = as_list(self.setting("select"))

    @classmethod
    def get_default_ini(cls) -> str:
        return (
            "; Module to run code style checks.\n"
            f"{cls.name}.command={cls.command}\n"
            f"{cls.name}.class={cls.class_path()}\n"
            f"{cls.name}.path=.\n"
            f"{cls.name}.ignore=\\.venv/\n"
            f"{cls.name}.error_codes={DEFAULT_ERROR_CODES}\n"
        )

    @property
    def results_path(self) -> Path:
        return self.output_path / RESULTS_FILENAME

    def execute(self, args: Arguments) -> int:
        self._qis.qecho("\nRunning codingstandard module task...\n")

        paths = self._paths
        if args.target:
            paths = as_list(args.target)
            for path in paths:
                if not (self._qis.project_root / path).exists():
                    return self._qis.halt(f"Path `{path}' not found.")

        if args.flag("list"):
            return self.display_list()

        self._save_timestamp()
        findings = self._run_ruff(paths)
        files = self._measure(paths, findings)

        stored: dict[str, dict[str, int]] = {}
        if args.target:
            prefixes = [self._relative(Path(path)) for path in paths]
            stored = {
                name: data
                for name, data in self._load_results().items()
                if not any(_is_under(name, prefix) for prefix in prefixes)
            }
        stored.update(files)
        self._save_results(stored)

        log.info("codingstandard_checked", files=len(files), paths=paths)
        self._qis.qecho(f"Checked {pluralize(len(files), 'file')}.\n")
        self._qis.qecho("\nCompleted codingstandard module task.\n")
        self.display_summary()
        return RETURN_SUCCESS

    def _run_ruff(self, paths: list[str]) -> dict[str, dict[str, int]]:
        command = [self._bin, "check", "--output-format=json", "--exit-zero"]
        if self._select:
            command.append("--select=" + ",".join(self._select))
        command.extend(paths)

        self._qis.qecho(f"Checking code with '{self._bin}'...\n")
        output = run_tool(self.name, command, cwd=self._qis.project_root, timeout=self.timeout)
        try:
            findings = parse_ruff(output.stdout, self._error_codes)
        except ValueError as e:
            reason = str(e)
            if output.stderr.strip():
                reason = f"{reason} ({output.stderr.strip()})"
            raise ModuleError.tool_failed(self.name, command, reason) from e

        counts: dict[str, dict[str, int]] = {}
        for finding in findings:
            name = self._relative(Path(finding.path))
            if is_ignored(name, self._ignore):
                continue
            entry = counts.setdefault(name, {"errors": 0, "warnings": 0})
            entry["errors" if finding.is_error else "warnings"] += 1
        return counts

    def _measure(
        self, paths: list[str], findings: dict[str, dict[str, int]]
    ) -> dict[str, dict[str, int]]:
        """Line counts for every checked source file, merged with findings."""
        files: dict[str, dict[str, int]] = {}
        for name in self._source_files(paths):
            lines = count_source_lines(self._qis.project_root / name)
            files[name] = {
                "sloc": lines.loc - lines.cloc,
                "comments": lines.cloc,
                "errors": 0,
                "warnings": 0,
            }

        for name, counts in findings.items():
            entry = files.setdefault(name, {"sloc": 0, "comments": 0, "errors": 0, "warnings": 0})
            entry.update(counts)
        return files

    def _source_files(self, paths: list[str]) -> list[str]:
        names: list[str] = []
        for path in paths:
            target = self._qis.project_root / path
            if target.is_file():
                candidates = [str(target)]
            else:
                candidates = find_files("*.py", target)
            for candidate in candidates:
                name = self._relative(Path(candidate))
                if not is_ignored(name, self._ignore) and name not in names:
                    names.append(name)
        return names

    def _relative(self, path: Path) -> str:
        if not path.is_absolute():
            path = self._qis.project_root / path
        return Path(os.path.relpath(path, self._qis.project_root)).as_posix()

    def _save_timestamp(self) -> None:
        (self.output_path / LASTRUN_FILENAME).write_text(
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"), encoding="utf-8"
        )

    def _load_results(self) -> dict[str, dict[str, int]]:
        if not self.results_path.exists():
            return {}
        try:
            data = json.loads(self.results_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            log.warning("codingstandard_results_unreadable", path=str(self.results_path), error=str(e))
            return {}
        files = data.get("files") if isinstance(data, dict) else None
        return files if isinstance(files, dict) else {}

    def _save_results(self, files: dict[str, dict[str, int]]) -> None:
        payload = {"files": files, "totals": self.get_project_summary(files)}
        self.results_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def get_project_summary(
        self, files: dict[str, dict[str, int]] | None = None
    ) -> dict[str, Any] | None:
        """Totals over all stored files, or None when nothing was checked."""
        if files is None:
            if not self.results_path.exists():
                return None
            files = self._load_results()

        totals = {"sloc": 0, "comments": 0, "errors": 0, "warnings": 0}
        for counts in files.values():
            for key in totals:
                totals[key] += int(counts.get(key, 0))

        error_level = calculate_error_level(
            totals["errors"], totals["warnings"], totals["sloc"], totals["comments"]
        )
        return {**totals, "error_level": error_level}

    def get_error_level(self) -> float | None:
        project = self.get_project_summary()
        return None if project is None else project["error_level"]

    def display_list(self) -> int:
        """Show error and warning counts per stored file."""
        files = self._load_results()
        rows = [
            (name, str(counts.get("errors", 0)), str(counts.get("warnings", 0)))
            for name, counts in sorted(files.items())
            if counts.get("errors", 0) or counts.get("warnings", 0)
        ]
        if not rows:
            self._qis.qecho("No files with findings.\n")
        else:
            self._qis.terminal.print_table(("File", "Errors", "Warnings"), rows)
        return RETURN_BENIGN

    def display_summary(self) -> None:
        self._qis.pretty_message(self.get_summary().strip(), style=REPORT_STYLE)

    def get_help_message(self) -> str:
        return "Run coding standard validation report (ruff)\n"

    def get_extended_help_message(self) -> str:
        return (
            self.get_help_message()
            + "\n"
            + "Usage: cs [OPTIONS] [path]\n"
            + "By default this will check the default project path(s).\n"
            + "You can specify a path to check a certain file, directory or\n"
            + "comma separated list of directories\n"
            + "\nValid Options:\n"
            + "  --list : Show list of files with findings\n"
        )

    def get_summary(self, short: bool = False) -> str:
        metrics = self.get_metrics()
        if short:
            if not metrics:
                return "Codingstandard: No data."
            return f"Codingstandard error level: {metrics['Error Level']}"

        out = "Codingstandard results:\n"
        if not metrics:
            return out + "No results."
        return out + render_table(list(metrics), [list(metrics.values())])

    def get_metrics(self, only_primary: bool = False) -> Any:
        project = self.get_project_summary()
        if only_primary:
            if project is None:
                return 0.0
            return float(round_half_up(100 - project["error_level"], 2))
        if project is None:
            return {}
        return {
            "SLOC": project["sloc"],
            "Comments": project["comments"],
            "Errors": project["errors"],
            "Warnings": project["warnings"],
            "Error Level": f"{format_percent(project['error_level'])}%",
        }

    def get_status(self) -> bool:
        error_level = self.get_error_level()
        if error_level is None:
            return False
        return error_level < MAX_ERROR_LEVEL


def _is_under(name: str, prefix: str) -> bool:
    if prefix in ("", "."):
        return True
    return name == prefix or name.startswith(prefix.rstrip("/") + "/")
