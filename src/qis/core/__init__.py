"""Core module exports."""

from qis.core.errors import (
    CommandError,
    ConfigError,
    CoverageReportError,
    ErrorCode,
    HistoryError,
    ModuleError,
    QisError,
    ReportSourceError,
)
from qis.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "CommandError",
    "ConfigError",
    "CoverageReportError",
    "ErrorCode",
    "HistoryError",
    "ModuleError",
    "QisError",
    "ReportSourceError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
