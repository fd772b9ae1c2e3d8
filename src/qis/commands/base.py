"""Built-in command contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from qis.core.arguments import Arguments

if TYPE_CHECKING:
    from qis.app import Qis


class Command(ABC):
    """Base class for the subcommands qis always provides."""

    name: ClassVar[str]

    def __init__(self, qis: Qis, settings: Mapping[str, Any] | None = None) -> None:
        self._qis = qis
        self._settings: dict[str, Any] = dict(settings or {})

    def initialize(self) -> None:
        """Hook run once after registration."""

    @abstractmethod
    def execute(self, args: Arguments) -> int:
        """Run the command; return the process exit status."""

    @abstractmethod
    def get_help_message(self) -> str: ...

    def get_extended_help_message(self) -> str:
        return self.get_help_message() + "\n"
