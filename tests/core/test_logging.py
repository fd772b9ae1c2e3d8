"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from qis.config.models import LoggingConfig, LogOutputConfig
from qis.core.logging import (
    clear_run_id,
    configure_logging,
    get_log_file_path,
    get_logger,
    get_run_id,
    set_run_id,
)


class TestRunIdCorrelation:
    """Run ID context variable tests."""

    def setup_method(self) -> None:
        """Clear run ID before each test."""
        clear_run_id()

    def test_given_run_id_when_set_then_can_retrieve(self) -> None:
        """Run ID can be set and retrieved."""
        # When
        result = set_run_id("run-123")

        # Then
        assert result == "run-123"
        assert get_run_id() == "run-123"

    def test_given_no_id_when_set_then_generates_short_hex(self) -> None:
        """Set generates a UUID-based ID when none is provided."""
        # When
        rid = set_run_id()

        # Then
        assert len(rid) == 12  # uuid4().hex[:12]

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        """Clear removes the current run ID."""
        # Given
        set_run_id("to-clear")

        # When
        clear_run_id()

        # Then
        assert get_run_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def teardown_method(self) -> None:
        clear_run_id()
        for handler in logging.getLogger().handlers:
            handler.close()
        logging.getLogger().handlers.clear()

    def test_given_default_config_when_log_then_console_suppressed(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Without verbose mode nothing reaches the console."""
        # Given
        configure_logging(level="DEBUG")

        # When
        get_logger("test").warning("hidden warning")

        # Then
        captured = capsys.readouterr()
        assert "hidden warning" not in captured.err

    def test_given_verbose_when_log_then_console_receives_debug(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Verbose mode lets DEBUG events through to stderr."""
        # Given
        configure_logging(level="WARNING", verbose=True)

        # When
        get_logger("test").debug("visible debug")

        # Then
        captured = capsys.readouterr()
        assert "visible debug" in captured.err

    def test_given_json_file_output_when_log_then_valid_json_with_run_id(
        self, tmp_path: Path
    ) -> None:
        """File outputs get JSON lines stamped with the run ID."""
        # Given
        log_file = tmp_path / "qis.log"
        config = LoggingConfig(
            level="INFO",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )
        configure_logging(config=config)
        set_run_id("abc123")

        # When
        get_logger().info("history_appended", module="cs")

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "history_appended"
        assert data["module"] == "cs"
        assert data["run_id"] == "abc123"
        assert data["level"] == "info"
        assert "timestamp" in data
        assert get_log_file_path() == log_file

    def test_given_multi_output_config_when_configure_then_levels_respected(
        self, tmp_path: Path
    ) -> None:
        """Each output filters at its own level."""
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content
        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content
