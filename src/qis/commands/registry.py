"""Command registry - the fixed table of built-in subcommands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from qis.commands.base import Command
from qis.commands.help import HelpCommand
from qis.commands.history import HistoryCommand
from qis.commands.init import InitCommand
from qis.commands.modules import ModulesCommand
from qis.commands.orchestrator import AllCommand
from qis.commands.summary import SummaryCommand

if TYPE_CHECKING:
    from qis.app import Qis

BUILTIN_COMMANDS: tuple[type[Command], ...] = (
    AllCommand,
    HelpCommand,
    HistoryCommand,
    InitCommand,
    ModulesCommand,
    SummaryCommand,
)


class CommandRegistry:
    """Built-in commands by name, in alphabetical order."""

    def __init__(self, qis: Qis) -> None:
        self._qis = qis
        self._commands: dict[str, Command] = {}

    def register_all(self) -> None:
        for command_cls in BUILTIN_COMMANDS:
            command = command_cls(self._qis)
            command.initialize()
            self._commands[command_cls.name] = command

    def get(self, name: str) -> Command | None:
        return self._commands.get(name)

    def all(self) -> dict[str, Command]:
        return dict(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)
