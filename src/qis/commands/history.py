"""The ``history`` command."""

from __future__ import annotations

from qis.commands.base import Command
from qis.core.arguments import Arguments

COLUMNS = ("Date", "Module", "Status", "Summary", "Metric")


class HistoryCommand(Command):
    """Shows recorded module runs, optionally for one module."""

    name = "history"

    def execute(self, args: Arguments) -> int:
        terminal = self._qis.terminal
        module = args.target
        if module:
            terminal.out(f"Module filter: {module}\n")

        records = self._qis.history.read(module)
        if not records:
            terminal.out("No history to display.\n")
            return 0

        rows = [
            (
                record.date,
                record.module,
                "PASS" if record.status else "FAIL",
                record.summary,
                record.metric,
            )
            for record in records
        ]
        terminal.print_table(COLUMNS, rows)
        return 0

    def get_help_message(self) -> str:
        return "Show history data for modules\n"

    def get_extended_help_message(self) -> str:
        return (
            self.get_help_message()
            + "\n"
            + "Usage: history [module]\n"
            + "This will display a history of the results for modules that\n"
            + "have been run previously, including the pass/fail status and\n"
            + "basic metric. This basic metric differs per module.\n"
            + "With an argument provided, it will filter the results\n"
            + "to only show that module.\n"
        )
