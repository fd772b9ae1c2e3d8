"""Tests for the codingstandard module."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from qis.app import Qis
from qis.core.arguments import Arguments
from qis.core.errors import ModuleError
from qis.core.process import ToolOutput
from qis.modules.base import RETURN_BENIGN, RETURN_SUCCESS
from qis.modules.codingstandard import CodingstandardModule, calculate_error_level


@pytest.fixture
def qis(make_qis: Callable[..., Qis]) -> Qis:
    return make_qis()


def _module(qis: Qis, **settings: Any) -> CodingstandardModule:
    module = CodingstandardModule(qis, settings)
    module.initialize()
    return module


def _store(module: CodingstandardModule, files: dict[str, dict[str, int]]) -> None:
    module.results_path.write_text(json.dumps({"files": files}))


def _ruff_output(findings: list[dict[str, Any]]) -> Callable[..., ToolOutput]:
    def fake_run_tool(module: str, command: list[str], **kwargs: Any) -> ToolOutput:
        return ToolOutput(
            command=command,
            returncode=0,
            stdout=json.dumps(findings),
            stderr="",
            duration_seconds=0.1,
        )

    return fake_run_tool


class TestCalculateErrorLevel:
    """Error level arithmetic tests."""

    @pytest.mark.parametrize(
        ("errors", "warnings", "sloc", "comments", "expected"),
        [
            (0, 0, 0, 0, 0.0),
            (0, 0, 100, 0, 0.0),
            (3, 1, 50, 0, 7.0),
            (1, 2, 90, 10, 2.0),
            (1, 0, 3, 0, 33.33),
        ],
    )
    def test_given_counts_when_calculated_then_weighted_per_hundred_lines(
        self, errors: int, warnings: int, sloc: int, comments: int, expected: float
    ) -> None:
        """Warnings weigh half an error; no lines means no level."""
        assert calculate_error_level(errors, warnings, sloc, comments) == expected


class TestStoredResults:
    """Summary and metrics derived from stored results."""

    def test_given_no_results_when_queried_then_no_data(self, qis: Qis) -> None:
        """Before the first run there is nothing to report."""
        # Given
        module = _module(qis)

        # Then
        assert module.get_project_summary() is None
        assert module.get_error_level() is None
        assert module.get_status() is False
        assert module.get_metrics() == {}
        assert module.get_metrics(only_primary=True) == 0.0
        assert module.get_summary(short=True) == "Codingstandard: No data."
        assert module.get_summary() == "Codingstandard results:\nNo results."

    def test_given_results_when_queried_then_totals_and_level(self, qis: Qis) -> None:
        """Totals sum every stored file."""
        # Given
        module = _module(qis)
        _store(
            module,
            {
                "a.py": {"sloc": 60, "comments": 5, "errors": 1, "warnings": 0},
                "b.py": {"sloc": 30, "comments": 5, "errors": 0, "warnings": 2},
            },
        )

        # When
        metrics = module.get_metrics()

        # Then
        assert metrics == {
            "SLOC": 90,
            "Comments": 10,
            "Errors": 1,
            "Warnings": 2,
            "Error Level": "2%",
        }
        assert module.get_metrics(only_primary=True) == 98.0
        assert module.get_status() is True
        assert module.get_summary(short=True) == "Codingstandard error level: 2%"
        assert module.get_summary().startswith("Codingstandard results:\n+")

    def test_given_high_level_when_status_then_fail(self, qis: Qis) -> None:
        """An error level of 3% or more fails."""
        # Given
        module = _module(qis)
        _store(module, {"a.py": {"sloc": 100, "comments": 0, "errors": 3, "warnings": 0}})

        # Then
        assert module.get_error_level() == 3.0
        assert module.get_status() is False

    def test_given_stored_findings_when_listed_then_table(
        self, qis: Qis, output: Callable[[], str]
    ) -> None:
        """--list shows files with findings and changes nothing."""
        # Given
        module = _module(qis)
        _store(
            module,
            {
                "clean.py": {"sloc": 10, "comments": 0, "errors": 0, "warnings": 0},
                "dirty.py": {"sloc": 10, "comments": 0, "errors": 2, "warnings": 1},
            },
        )

        # When
        result = module.execute(Arguments(action="cs", options={"list": True}))

        # Then
        assert result == RETURN_BENIGN
        assert "dirty.py" in output()
        assert "clean.py" not in output()


class TestExecute:
    """Running ruff through the module."""

    @pytest.fixture
    def project(self, qis: Qis) -> Path:
        src = qis.project_root / "src"
        src.mkdir()
        (src / "app.py").write_text("# entry point\nimport os\nx = 1\n")
        return src

    def test_given_findings_when_executed_then_results_stored(
        self,
        qis: Qis,
        project: Path,
        monkeypatch: pytest.MonkeyPatch,
        output: Callable[[], str],
    ) -> None:
        """Findings and line counts are stored per file."""
        # Given
        app = str(project / "app.py")
        monkeypatch.setattr(
            "qis.modules.codingstandard.run_tool",
            _ruff_output(
                [
                    {"filename": app, "code": "F401", "message": "unused", "location": {"row": 2}},
                    {"filename": app, "code": "E501", "message": "long", "location": {"row": 3}},
                ]
            ),
        )
        module = _module(qis, path="src")

        # When
        result = module.execute(Arguments(action="cs"))

        # Then
        assert result == RETURN_SUCCESS
        stored = json.loads(module.results_path.read_text())
        assert stored["files"] == {
            "src/app.py": {"sloc": 2, "comments": 1, "errors": 1, "warnings": 1}
        }
        assert stored["totals"]["error_level"] == 50.0
        assert "Checked 1 file." in output()

    def test_given_target_when_executed_then_other_paths_kept(
        self, qis: Qis, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A targeted run only replaces results under the target."""
        # Given
        monkeypatch.setattr("qis.modules.codingstandard.run_tool", _ruff_output([]))
        module = _module(qis)
        _store(
            module,
            {
                "lib/old.py": {"sloc": 5, "comments": 0, "errors": 1, "warnings": 0},
                "src/stale.py": {"sloc": 5, "comments": 0, "errors": 4, "warnings": 0},
            },
        )

        # When
        module.execute(Arguments(action="cs", positionals=["src"]))

        # Then
        files = json.loads(module.results_path.read_text())["files"]
        assert sorted(files) == ["lib/old.py", "src/app.py"]

    def test_given_missing_target_when_executed_then_halted(
        self, qis: Qis, halts: list[int], output: Callable[[], str]
    ) -> None:
        """A target path that does not exist stops the run."""
        # Given
        module = _module(qis)

        # When
        result = module.execute(Arguments(action="cs", positionals=["nowhere"]))

        # Then
        assert result == 1
        assert halts == [2]
        assert "Path `nowhere' not found." in output()

    def test_given_unparseable_output_when_executed_then_tool_failed(
        self, qis: Qis, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Output ruff did not write as JSON is a tool failure."""

        # Given
        def fake_run_tool(module: str, command: list[str], **kwargs: Any) -> ToolOutput:
            return ToolOutput(command, 2, "not json", "ruff: bad option", 0.0)

        monkeypatch.setattr("qis.modules.codingstandard.run_tool", fake_run_tool)
        module = _module(qis, path="src")

        # When
        with pytest.raises(ModuleError) as exc_info:
            module.execute(Arguments(action="cs"))

        # Then
        assert "ruff: bad option" in exc_info.value.message

    def test_given_select_setting_when_executed_then_passed_to_ruff(
        self, qis: Qis, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Rule selection is forwarded as one --select option."""
        # Given
        commands: list[list[str]] = []

        def fake_run_tool(module: str, command: list[str], **kwargs: Any) -> ToolOutput:
            commands.append(command)
            return ToolOutput(command, 0, "[]", "", 0.0)

        monkeypatch.setattr("qis.modules.codingstandard.run_tool", fake_run_tool)
        module = _module(qis, path="src", select="E,F,W")

        # When
        module.execute(Arguments(action="cs"))

        # Then
        assert commands == [
            ["ruff", "check", "--output-format=json", "--exit-zero", "--select=E,F,W", "src"]
        ]
