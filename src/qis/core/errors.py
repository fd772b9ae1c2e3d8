"""Qis error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Module
- 4xxx: Command
- 5xxx: Report source (coverage datasets, analysis results)
- 6xxx: History

Every error carries the process exit status the CLI should use when the
error reaches the top level.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

# Exit status for "data error" failures (sysexits EX_DATAERR)
EXIT_DATA_ERROR = 64


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Module (3xxx)
    MODULE_TOOL_NOT_FOUND = 3001
    MODULE_TOOL_FAILED = 3002
    MODULE_TOOL_TIMEOUT = 3003

    # Command (4xxx)
    COMMAND_UNKNOWN_TOPIC = 4001
    COMMAND_UNKNOWN_MODULE = 4002

    # Report source (5xxx)
    REPORT_SOURCE_NOT_FOUND = 5001
    REPORT_SOURCE_MALFORMED = 5002
    REPORT_FILE_UNREADABLE = 5003

    # History (6xxx)
    HISTORY_CORRUPT = 6001


@dataclass(frozen=True, slots=True)
class QisError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    exit_code: int = 1
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "exit_code": self.exit_code,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(QisError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            exit_code=2,
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            exit_code=2,
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            exit_code=2,
            details={"path": path},
        )


class ModuleError(QisError):
    """Failures raised while a module drives its external tool."""

    @classmethod
    def tool_not_found(cls, module: str, executable: str) -> "ModuleError":
        return cls(
            code=ErrorCode.MODULE_TOOL_NOT_FOUND,
            message=f"{module}: '{executable}' is not installed or not on PATH",
            details={"module": module, "executable": executable},
        )

    @classmethod
    def tool_failed(cls, module: str, command: list[str], reason: str) -> "ModuleError":
        return cls(
            code=ErrorCode.MODULE_TOOL_FAILED,
            message=f"{module}: command failed: {reason}",
            details={"module": module, "command": command, "reason": reason},
        )

    @classmethod
    def tool_timeout(cls, module: str, command: list[str], timeout: float) -> "ModuleError":
        return cls(
            code=ErrorCode.MODULE_TOOL_TIMEOUT,
            message=f"{module}: command timed out after {timeout:g}s",
            details={"module": module, "command": command, "timeout": timeout},
        )


class CommandError(QisError):
    """Errors raised by built-in commands."""

    @classmethod
    def unknown_topic(cls, topic: str) -> "CommandError":
        return cls(
            code=ErrorCode.COMMAND_UNKNOWN_TOPIC,
            message=f"No module or command by name '{topic}' found.",
            exit_code=EXIT_DATA_ERROR,
            details={"topic": topic},
        )

    @classmethod
    def unknown_module(cls, name: str) -> "CommandError":
        return cls(
            code=ErrorCode.COMMAND_UNKNOWN_MODULE,
            message=f"No module by name '{name}' found.",
            exit_code=EXIT_DATA_ERROR,
            details={"module": name},
        )


class ReportSourceError(QisError):
    """Missing or malformed report sources (datasets, tool results)."""

    @classmethod
    def not_found(cls, path: str) -> "ReportSourceError":
        return cls(
            code=ErrorCode.REPORT_SOURCE_NOT_FOUND,
            message=f"File '{path}' not found or is not readable.",
            exit_code=EXIT_DATA_ERROR,
            details={"path": path},
        )

    @classmethod
    def malformed(cls, path: str, reason: str) -> "ReportSourceError":
        return cls(
            code=ErrorCode.REPORT_SOURCE_MALFORMED,
            message=f"{reason} in file {path}",
            exit_code=EXIT_DATA_ERROR,
            details={"path": path, "reason": reason},
        )

    @classmethod
    def unreadable_source(cls, path: str, reason: str) -> "ReportSourceError":
        return cls(
            code=ErrorCode.REPORT_FILE_UNREADABLE,
            message=f"Cannot read source file '{path}': {reason}",
            exit_code=EXIT_DATA_ERROR,
            details={"path": path, "reason": reason},
        )


class CoverageReportError(ReportSourceError):
    """Coverage dataset errors."""

    @classmethod
    def dataset_missing(cls, path: str) -> "CoverageReportError":
        return cls(
            code=ErrorCode.REPORT_SOURCE_NOT_FOUND,
            message=f"Cannot find file '{path}'. Ensure test module is executed first.",
            exit_code=EXIT_DATA_ERROR,
            details={"path": path},
        )


class HistoryError(QisError):
    """History ledger errors."""

    @classmethod
    def corrupt(cls, path: str, reason: str) -> "HistoryError":
        return cls(
            code=ErrorCode.HISTORY_CORRUPT,
            message=f"History file '{path}' is corrupt: {reason}",
            details={"path": path, "reason": reason},
        )
