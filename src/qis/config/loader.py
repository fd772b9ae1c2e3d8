"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (QIS__KEY, QIS__SECTION__KEY)
3. Project config (.qis/config.ini)
4. Global config (~/.config/qis/config.yaml)
5. Built-in defaults (lowest priority)

The project file is ini-style: top-level keys before the first section,
bracketed sections after. Inside a section, ``name.sub=value`` collapses to
``{name: {sub: value}}`` and ``name.sub[key]=value`` to
``{name: {sub: {key: value}}}``, which is how ``[modules]`` carries one
settings map per module.
"""

import configparser
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from qis.config.models import LoggingConfig, QisConfig
from qis.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/qis/config.yaml").expanduser()

QIS_DIR = ".qis"
CONFIG_FILENAME = "config.ini"

_ROOT_SECTION = "__root__"
_INDEXED_KEY = re.compile(r"^(?P<name>[^\[\]]+)\[(?P<index>[^\[\]]*)\]$")


def config_file_path(project_root: Path) -> Path:
    return project_root / QIS_DIR / CONFIG_FILENAME


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _assign(target: dict[str, Any], key: str, value: str) -> None:
    """Set ``key`` in target, expanding ``key[index]`` into a nested map."""
    match = _INDEXED_KEY.match(key)
    if match is None:
        target[key] = value
        return

    name, index = match.group("name"), match.group("index")
    if index == "":
        existing = target.get(name)
        items = existing if isinstance(existing, list) else []
        items.append(value)
        target[name] = items
        return

    nested = target.get(name)
    if not isinstance(nested, dict):
        nested = {}
        target[name] = nested
    nested[index] = value


def _collapse(items: list[tuple[str, str]]) -> dict[str, Any]:
    """Fold ``name.sub=value`` pairs into one settings map per name."""
    result: dict[str, Any] = {}
    for key, raw in items:
        value = _unquote(raw)
        name, dot, sub = key.partition(".")
        if not dot or not sub:
            _assign(result, name, value)
            continue
        settings = result.get(name)
        if not isinstance(settings, dict):
            settings = {}
            result[name] = settings
        _assign(settings, sub, value)
    return result


def _load_ini(path: Path) -> dict[str, Any]:
    """Parse a project ini file into a plain nested dict."""
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        inline_comment_prefixes=(";",),
        default_section="__defaults__",
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]

    try:
        text = path.read_text(encoding="utf-8")
        parser.read_string(f"[{_ROOT_SECTION}]\n{text}", source=str(path))
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        raise ConfigError.parse_error(str(path), str(e)) from e

    data: dict[str, Any] = {}
    for section in parser.sections():
        collapsed = _collapse(list(parser.items(section, raw=True)))
        if section == _ROOT_SECTION:
            data.update(collapsed)
        else:
            data[section] = collapsed
    return data


def _logging_from_ini(section: dict[str, Any], project_root: Path) -> dict[str, Any]:
    """Map an ini ``[logging]`` section (level=, file=) onto LoggingConfig."""
    logging_config: dict[str, Any] = {}
    if section.get("level"):
        logging_config["level"] = section["level"]
    if section.get("file"):
        destination = Path(section["file"]).expanduser()
        if not destination.is_absolute():
            destination = project_root / destination
        logging_config["outputs"] = [
            {"format": "console", "destination": "stderr"},
            {"format": "json", "destination": str(destination)},
        ]
    return logging_config


class _FileSource(PydanticBaseSettingsSource):
    """Settings source that reads from the pre-loaded ini/YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], file_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._file_config = file_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._file_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._file_config


def _make_settings_class(file_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with an instance-based file source."""

    class QisSettings(BaseSettings):
        """Root config. Env vars: QIS__BUILD_ORDER, QIS__LOGGING__LEVEL, etc."""

        model_config = SettingsConfigDict(
            env_prefix="QIS__",
            env_nested_delimiter="__",
            case_sensitive=False,
            extra="allow",
        )

        project_name: str = ""
        project_root: str = ""
        build_order: Any = None
        modules: dict[str, Any] = {}
        logging: LoggingConfig = LoggingConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > config files
            return (init_settings, env_settings, _FileSource(settings_cls, file_config))

    return QisSettings


def load_config(project_root: Path | None = None, **kwargs: Any) -> QisConfig:
    """Load config: defaults < global yaml < project ini < env vars < kwargs.

    Args:
        project_root: Project directory holding ``.qis/config.ini``.
                      Defaults to current working directory.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: When the project file is missing, unparsable or invalid.
    """
    project_root = project_root or Path.cwd()
    path = config_file_path(project_root)
    if not path.exists():
        raise ConfigError.file_not_found(str(path))

    file_config = _load_ini(path)
    if isinstance(file_config.get("logging"), dict):
        file_config["logging"] = _logging_from_ini(file_config["logging"], project_root)

    global_config = _load_yaml(GLOBAL_CONFIG_PATH)
    if global_config:
        file_config = _deep_merge(global_config, file_config)

    settings_cls = _make_settings_class(file_config)
    try:
        settings = settings_cls(**kwargs)
        return QisConfig.model_validate(settings.model_dump())
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
