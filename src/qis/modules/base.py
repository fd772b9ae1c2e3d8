"""Module contract shared by every analysis module.

A module wraps one external tool. It is built from its ``[modules]``
settings, initialized once, run through ``execute`` and afterwards queried
for its verdict (``get_status``), a summary and metrics. Those three answer
from the artifacts the last run left in the module's output directory, so
they also work in a later process.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from qis.core.arguments import Arguments

if TYPE_CHECKING:
    from qis.app import Qis

RETURN_SUCCESS = 0
RETURN_ERROR = 1
RETURN_BENIGN = 8

_FALSE_VALUES = frozenset({"", "0", "false", "no", "off", "none"})


def as_bool(value: Any, default: bool = False) -> bool:
    """Interpret an ini-style flag value."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in _FALSE_VALUES


def as_list(value: Any) -> list[str]:
    """Split a comma list setting, dropping blanks."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return [item.strip() for item in str(value).split(",") if item.strip()]


class Module(ABC):
    """Base class for analysis modules."""

    #: Module name: ini prefix and output directory under ``.qis/``
    name: ClassVar[str]
    #: Command keyword used when the settings do not name one
    command: ClassVar[str]

    def __init__(self, qis: Qis, settings: Mapping[str, Any]) -> None:
        self._qis = qis
        self._settings: dict[str, Any] = dict(settings)
        timeout = self._settings.get("timeout")
        self.timeout: float | None = float(timeout) if timeout not in (None, "") else None

    @classmethod
    @abstractmethod
    def get_default_ini(cls) -> str:
        """Settings snippet written by ``qis init`` into ``[modules]``."""

    @classmethod
    def class_path(cls) -> str:
        return f"{cls.__module__}:{cls.__qualname__}"

    @property
    def output_path(self) -> Path:
        return self._qis.project_qis_root / self.name

    def setting(self, key: str, default: Any = None) -> Any:
        value = self._settings.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        return value

    def initialize(self) -> None:
        """Prepare the output directory."""
        self.output_path.mkdir(parents=True, exist_ok=True)

    @abstractmethod
    def execute(self, args: Arguments) -> int:
        """Run the module; return one of the RETURN_* codes."""

    @abstractmethod
    def get_help_message(self) -> str: ...

    def get_extended_help_message(self) -> str:
        return self.get_help_message() + "\n"

    @abstractmethod
    def get_status(self) -> bool: ...

    @abstractmethod
    def get_summary(self, short: bool = False) -> str: ...

    @abstractmethod
    def get_metrics(self, only_primary: bool = False) -> Any: ...
