"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (QIS__KEY, QIS__SECTION__KEY)
3. Project ini (.qis/config.ini)
4. Global YAML (~/.config/qis/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    QIS__<KEY>=<VALUE>
    QIS__<SECTION>__<KEY>=<VALUE>

Examples:
    QIS__BUILD_ORDER=cs,test
    QIS__LOGGING__LEVEL=DEBUG
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_BUILD_ORDER = "cs,test,coverage"


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        QIS__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. -v/--verbose forces DEBUG on console outputs.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class QisConfig(BaseModel):
    """Root configuration for a qis project.

    Unknown top-level keys of the project ini are kept as extras and stay
    reachable through get().
    """

    model_config = ConfigDict(extra="allow")

    project_name: str = ""
    project_root: str = ""
    # Left untyped: a non-string value falls back to the default order
    build_order: Any = None
    modules: dict[str, Any] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get(self, key: str, section: str | None = None) -> Any | None:
        """Look up a top-level key, or a key inside a section."""
        data = self.model_dump()
        if section is not None:
            container = data.get(section)
            if not isinstance(container, dict):
                return None
            return container.get(key)
        return data.get(key)

