"""Built-in subcommands."""

from qis.commands.base import Command
from qis.commands.help import HelpCommand
from qis.commands.history import HistoryCommand
from qis.commands.init import InitCommand
from qis.commands.modules import ModulesCommand
from qis.commands.orchestrator import AllCommand, resolve_build_order
from qis.commands.registry import BUILTIN_COMMANDS, CommandRegistry
from qis.commands.summary import SummaryCommand

__all__ = [
    "BUILTIN_COMMANDS",
    "AllCommand",
    "Command",
    "CommandRegistry",
    "HelpCommand",
    "HistoryCommand",
    "InitCommand",
    "ModulesCommand",
    "SummaryCommand",
    "resolve_build_order",
]
