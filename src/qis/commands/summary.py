"""The ``summary`` command - the default action."""

from __future__ import annotations

from qis.commands.base import Command
from qis.core.arguments import Arguments
from qis.core.console import FAIL_STYLE, PASS_STYLE, REPORT_STYLE
from qis.core.errors import CommandError


class SummaryCommand(Command):
    """Shows the latest results of one or all modules."""

    name = "summary"

    def execute(self, args: Arguments) -> int:
        terminal = self._qis.terminal
        no_color = args.flag("no-color") or terminal.no_color
        short = args.flag("short")

        target = args.target or "all"
        if target == "all":
            modules = list(self._qis.modules.all().values())
        else:
            module = self._qis.modules.get(target)
            if module is None:
                raise CommandError.unknown_module(target)
            modules = [module]

        if short:
            terminal.out("-" * 32 + "\n")

        for module in modules:
            summary = module.get_summary(short)
            if short:
                if no_color:
                    terminal.out(summary + "\n")
                else:
                    self._display_status_message(summary, module.get_status())
            elif no_color:
                terminal.out("\n" + summary + "\n" + module.get_summary(True) + "\n")
            else:
                self._qis.pretty_message(summary.strip(), style=REPORT_STYLE)
                self._display_status_message(module.get_summary(True), module.get_status())

        terminal.out("\n")
        return 0

    def _display_status_message(self, message: str, status: bool) -> None:
        self._qis.display_message(message, style=PASS_STYLE if status else FAIL_STYLE)

    def get_help_message(self) -> str:
        return "Get summary of a module or all modules\n"

    def get_extended_help_message(self) -> str:
        return (
            self.get_help_message()
            + "\n"
            + "Usage: summary [--short] [module]\n"
            + "Show the summary of the most recent results of each module.\n"
            + "If a module name is provided as an argument, it\n"
            + "will display only the summary for that module.\n\n"
            + "This is the default module that is run when no\n"
            + "module name is given when running qis.\n"
            + "\nValid Options:\n"
            + "  --short : Show only short information\n"
            + "  --no-color : Show plain text\n"
        )
