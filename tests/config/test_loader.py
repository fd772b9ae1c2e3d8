"""Tests for config loading."""

from pathlib import Path

import pytest

from qis.config import DEFAULT_BUILD_ORDER, QisConfig, load_config
from qis.core.errors import ConfigError, ErrorCode


def write_config(root: Path, text: str) -> Path:
    path = root / ".qis" / "config.ini"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestLoadConfig:
    """Project ini loading tests."""

    def test_given_no_config_file_when_load_then_file_not_found(self, tmp_path: Path) -> None:
        """A project without .qis/config.ini cannot be loaded."""
        # When
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)

        # Then
        assert exc_info.value.code == ErrorCode.CONFIG_FILE_NOT_FOUND

    def test_given_top_level_keys_when_load_then_typed_fields(self, tmp_path: Path) -> None:
        """Keys before any section become top-level settings."""
        # Given
        write_config(
            tmp_path,
            "; QIS configuration file v1.2.3\n"
            "project_name=Demo\n"
            'project_root="/srv/demo"\n'
            "build_order=cs,test\n",
        )

        # When
        config = load_config(tmp_path)

        # Then
        assert config.project_name == "Demo"
        assert config.project_root == "/srv/demo"
        assert config.build_order == "cs,test"

    def test_given_modules_section_when_load_then_dotted_keys_collapse(
        self, tmp_path: Path
    ) -> None:
        """name.sub=value pairs fold into one settings map per module."""
        # Given
        write_config(
            tmp_path,
            "project_name=Demo\n"
            "[modules]\n"
            "; Module for code coverage of unit tests.\n"
            "coverage.command=coverage\n"
            "coverage.ignorePaths=\\.venv/,build/\n"
            "analysis.thresholds[errors]=10\n"
            "flat=1\n",
        )

        # When
        config = load_config(tmp_path)

        # Then
        assert config.modules["coverage"] == {
            "command": "coverage",
            "ignorePaths": "\\.venv/,build/",
        }
        assert config.modules["analysis"] == {"thresholds": {"errors": "10"}}
        assert config.modules["flat"] == "1"

    def test_given_inline_comment_when_load_then_stripped(self, tmp_path: Path) -> None:
        """Trailing ; comments are not part of the value."""
        # Given
        write_config(tmp_path, "project_name=Demo ; the name\n")

        # When
        config = load_config(tmp_path)

        # Then
        assert config.project_name == "Demo"

    def test_given_extra_key_when_get_then_reachable(self, tmp_path: Path) -> None:
        """Unknown keys and sections stay reachable through get()."""
        # Given
        write_config(tmp_path, "phpunit_bin=phpunit\n[modules]\ncs.path=src\n")

        # When
        config = load_config(tmp_path)

        # Then
        assert config.get("phpunit_bin") == "phpunit"
        assert config.get("cs", section="modules") == {"path": "src"}
        assert config.get("missing") is None
        assert config.get("x", section="project_name") is None

    def test_given_env_var_when_load_then_overrides_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """QIS__ environment variables win over the ini file."""
        # Given
        write_config(tmp_path, "build_order=cs\n")
        monkeypatch.setenv("QIS__BUILD_ORDER", "test,coverage")

        # When
        config = load_config(tmp_path)

        # Then
        assert config.build_order == "test,coverage"

    def test_given_kwargs_when_load_then_highest_precedence(self, tmp_path: Path) -> None:
        """Direct keyword overrides beat every other source."""
        # Given
        write_config(tmp_path, "project_name=FromFile\n")

        # When
        config = load_config(tmp_path, project_name="FromKwargs")

        # Then
        assert config.project_name == "FromKwargs"

    def test_given_global_yaml_when_load_then_project_ini_wins(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The global YAML sits beneath the project file."""
        # Given
        global_yaml = tmp_path / "global.yaml"
        global_yaml.write_text("project_name: Global\nbuild_order: analysis\n")
        monkeypatch.setattr("qis.config.loader.GLOBAL_CONFIG_PATH", global_yaml)
        write_config(tmp_path / "p", "project_name=Local\n")

        # When
        config = load_config(tmp_path / "p")

        # Then
        assert config.project_name == "Local"
        assert config.build_order == "analysis"

    def test_given_logging_section_when_load_then_file_output_added(
        self, tmp_path: Path
    ) -> None:
        """[logging] file= adds a JSON output relative to the project."""
        # Given
        write_config(tmp_path, "[logging]\nlevel=debug\nfile=.qis/qis.log\n")

        # When
        config = load_config(tmp_path)

        # Then
        assert config.logging.level == "DEBUG"
        destinations = [output.destination for output in config.logging.outputs]
        assert destinations == ["stderr", str(tmp_path / ".qis" / "qis.log")]

    def test_given_invalid_log_level_when_load_then_invalid_value(self, tmp_path: Path) -> None:
        """Validation errors surface as ConfigError."""
        # Given
        write_config(tmp_path, "[logging]\nlevel=LOUD\n")

        # When
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)

        # Then
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert exc_info.value.exit_code == 2

    def test_given_broken_ini_when_load_then_parse_error(self, tmp_path: Path) -> None:
        """Unparsable files raise CONFIG_PARSE_ERROR."""
        # Given
        write_config(tmp_path, "[modules\ncs.path=src\n")

        # When
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)

        # Then
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR


class TestQisConfigDefaults:
    """Model default tests."""

    def test_given_defaults_when_created_then_empty_project(self) -> None:
        """A bare config has no modules and no build order."""
        # When
        config = QisConfig()

        # Then
        assert config.modules == {}
        assert config.build_order is None
        assert config.logging.level == "WARNING"
        assert DEFAULT_BUILD_ORDER == "cs,test,coverage"
