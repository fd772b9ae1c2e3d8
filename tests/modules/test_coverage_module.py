"""Tests for the coverage module."""

from collections.abc import Callable

import pytest

from qis.app import Qis
from qis.core.arguments import Arguments
from qis.core.errors import ConfigError, CoverageReportError
from qis.modules.base import RETURN_SUCCESS
from qis.modules.coverage import CoverageModule


@pytest.fixture
def qis(make_qis: Callable[..., Qis]) -> Qis:
    return make_qis()


@pytest.fixture
def module(qis: Qis) -> CoverageModule:
    module = CoverageModule(qis, {})
    module.initialize()
    return module


@pytest.fixture
def dataset(qis: Qis, module: CoverageModule) -> None:
    """A source file plus the Clover dataset of a test run covering it."""
    root = module.root
    src = qis.project_root / "src"
    src.mkdir()
    (src / "app.py").write_text("import os\n\n\ndef main():\n    return os.getcwd()\n")
    results = qis.project_qis_root / "test-results"
    results.mkdir(parents=True, exist_ok=True)
    (results / "coverage.xml").write_text(
        f"""<coverage generated="1700000000">
  <project name="Sample" timestamp="1700000000">
    <file name="{root}src/app.py">
      <line num="1" type="stmt" count="1"/>
      <line num="4" type="method" name="main" count="1"/>
      <line num="5" type="stmt" count="0"/>
      <metrics statements="4" coveredstatements="3"/>
    </file>
  </project>
</coverage>
"""
    )


class TestCoverageModule:
    """Coverage module behavior."""

    def test_given_relative_root_when_initialized_then_absolute_with_separator(
        self, qis: Qis, module: CoverageModule
    ) -> None:
        """The configured root is resolved against the project."""
        assert module.root == f"{qis.project_root}/"

    def test_given_no_dataset_when_executed_then_report_error(self, module: CoverageModule) -> None:
        """The test module must have produced a dataset first."""
        # When
        with pytest.raises(CoverageReportError) as exc_info:
            module.execute(Arguments(action="coverage"))

        # Then
        assert "Ensure test module is executed first." in exc_info.value.message
        assert exc_info.value.exit_code == 64

    @pytest.mark.usefixtures("dataset")
    def test_given_dataset_when_executed_then_report_and_total(
        self, module: CoverageModule, output: Callable[[], str]
    ) -> None:
        """The report is printed and the total kept for later queries."""
        # When
        result = module.execute(Arguments(action="coverage"))

        # Then
        assert result == RETURN_SUCCESS
        text = output()
        assert "src/app.py" in text
        assert "Total Coverage: 75%" in text
        assert module.get_total_coverage() == "Total Coverage: 75%"

    @pytest.mark.usefixtures("dataset")
    def test_given_file_target_when_executed_then_annotated_source(
        self, module: CoverageModule, output: Callable[[], str]
    ) -> None:
        """A filename argument switches to the per-line view."""
        # When
        module.execute(Arguments(action="coverage", positionals=["src/app.py"]))

        # Then
        assert "    5        0 :     return os.getcwd()" in output()

    @pytest.mark.usefixtures("dataset")
    def test_given_stored_total_when_queried_then_metrics(self, module: CoverageModule) -> None:
        """Metrics are read back from the stored total."""
        # Given
        module.execute(Arguments(action="coverage"))

        # Then
        assert module.get_metrics() == {"coverage": 75.0}
        assert module.get_metrics(only_primary=True) == 75.0
        assert module.get_status() is False
        assert module.get_summary(short=True) == "Coverage: Total Coverage: 75%"

    def test_given_no_total_when_queried_then_no_data(self, module: CoverageModule) -> None:
        """Before any run the module has no data and fails."""
        assert module.get_total_coverage() == "No data."
        assert module.get_metrics(only_primary=True) == 0.0
        assert module.get_status() is False
        assert module.get_summary() == "Coverage results:\nNo data."

    def test_given_high_total_when_status_then_pass(self, module: CoverageModule) -> None:
        """Coverage above 80% passes."""
        # Given
        (module.output_path / "totalcoverage.txt").write_text("Total Coverage: 80.5%")

        # Then
        assert module.get_status() is True

    @pytest.mark.usefixtures("dataset")
    def test_given_tool_and_vendor_dirs_when_executed_then_not_counted(
        self, qis: Qis, module: CoverageModule, output: Callable[[], str]
    ) -> None:
        """Sources under .tox, .git, node_modules and the like stay out of the report."""
        # Given
        for directory in (".tox/py312/lib", ".eggs/pkg", ".git/hooks", "node_modules/x"):
            vendored = qis.project_root / directory
            vendored.mkdir(parents=True)
            (vendored / "m.py").write_text("x = 1\ny = 2\n")

        # When
        module.execute(Arguments(action="coverage"))

        # Then
        text = output()
        assert "m.py" not in text
        assert "Total Coverage: 75%" in text

    @pytest.mark.usefixtures("dataset")
    def test_given_format_setting_when_executed_then_loader_forced(
        self, qis: Qis, output: Callable[[], str]
    ) -> None:
        """The format setting picks the loader instead of detection."""
        # Given
        module = CoverageModule(qis, {"format": "clover"})
        module.initialize()

        # When
        result = module.execute(Arguments(action="coverage"))

        # Then
        assert result == RETURN_SUCCESS
        assert "Total Coverage: 75%" in output()

    @pytest.mark.usefixtures("dataset")
    def test_given_unknown_format_setting_when_executed_then_report_error(
        self, qis: Qis
    ) -> None:
        """An unknown format is reported with the valid choices."""
        # Given
        module = CoverageModule(qis, {"format": "jacoco"})
        module.initialize()

        # When
        with pytest.raises(CoverageReportError) as exc_info:
            module.execute(Arguments(action="coverage"))

        # Then
        assert "clover, cobertura" in exc_info.value.message

    def test_given_bad_ignore_regex_when_constructed_then_config_error(self, qis: Qis) -> None:
        """A malformed ignorePaths regex is rejected before any run."""
        # When
        with pytest.raises(ConfigError) as exc_info:
            CoverageModule(qis, {"ignorePaths": "build/("})

        # Then
        assert exc_info.value.details["field"] == "coverage.ignorePaths"
        assert exc_info.value.exit_code == 2
