"""The ``modules`` command."""

from __future__ import annotations

from qis.commands.base import Command
from qis.core.arguments import Arguments


class ModulesCommand(Command):
    """Lists the registered modules."""

    name = "modules"

    def execute(self, args: Arguments) -> int:
        rows = [
            (module.class_path(), keyword, module.get_help_message().strip())
            for keyword, module in self._qis.modules.all().items()
        ]
        self._qis.terminal.print_table(("Module", "Command", "Description"), rows)
        return 0

    def get_help_message(self) -> str:
        return "Show registered modules\n"

    def get_extended_help_message(self) -> str:
        return (
            self.get_help_message()
            + "\n"
            + "Usage: modules\n"
            + "Shows a list of installed and enabled modules.\n"
        )
