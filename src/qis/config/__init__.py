"""Config module exports."""

from qis.config.loader import CONFIG_FILENAME, QIS_DIR, config_file_path, load_config
from qis.config.models import DEFAULT_BUILD_ORDER, LoggingConfig, LogOutputConfig, QisConfig

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_BUILD_ORDER",
    "QIS_DIR",
    "LogOutputConfig",
    "LoggingConfig",
    "QisConfig",
    "config_file_path",
    "load_config",
]
