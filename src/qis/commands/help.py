"""The ``help`` command."""

from __future__ import annotations

from qis.commands.base import Command
from qis.core.arguments import Arguments
from qis.core.console import LOG_STYLE, REPORT_STYLE, TITLE_STYLE
from qis.core.errors import CommandError

GLOBAL_OPTIONS = (
    ("-h [--help]", "Show help"),
    ("-v [--verbose]", "Show verbose messages"),
    ("-q [--quiet]", "Print less messages"),
    ("--no-color", "Don't use color output"),
    ("--version", "Show version and exit"),
)


class HelpCommand(Command):
    """Lists subcommands and modules, or explains one of them."""

    name = "help"

    def execute(self, args: Arguments) -> int:
        topic = args.target
        if topic is None or topic == ".":
            self.show_help()
        else:
            self.show_contextual_help(topic)
        return 0

    def show_help(self) -> None:
        terminal = self._qis.terminal
        terminal.styled("Usage: qis <subcommand|module> [OPTIONS] [ARGS]\n\n", TITLE_STYLE)

        terminal.out("Subcommands:\n")
        for name, command in self._qis.commands.all().items():
            terminal.styled(f"  {name} : {command.get_help_message()}", LOG_STYLE)

        modules = self._qis.modules.all()
        if modules:
            terminal.out("\nModules:\n")
            for name, module in modules.items():
                terminal.styled(f"  {name} : {module.get_help_message()}", LOG_STYLE)

        terminal.out(
            "\nUse `qis help [module|subcommand]` to get specific help\n"
            "for a module or subcommand.\n"
        )
        self.show_global_options()

    def show_global_options(self) -> None:
        terminal = self._qis.terminal
        terminal.out("\nGlobal Options:\n")
        for flag, description in GLOBAL_OPTIONS:
            terminal.styled(f"  {flag} : {description}\n", LOG_STYLE)

    def show_contextual_help(self, topic: str) -> None:
        """Extended help for a module, else a command, by keyword.

        Raises:
            CommandError: If neither a module nor a command has that name.
        """
        target = self._qis.modules.get(topic)
        kind = "module"
        if target is None:
            target = self._qis.commands.get(topic)
            kind = "command"
        if target is None:
            raise CommandError.unknown_topic(topic)

        self._qis.pretty_message(f"Help for {kind} '{topic}'", style=REPORT_STYLE)
        self._qis.terminal.out(target.get_extended_help_message())
        self.show_global_options()

    def get_help_message(self) -> str:
        return "Show qis help information\n"

    def get_extended_help_message(self) -> str:
        return (
            self.get_help_message()
            + "\n"
            + "Usage: help [command|module]\n"
            + "Without any arguments, display basic help.\n"
            + "This will display all the available modules\n"
            + "and commands.\n\n"
            + "Including a module or command name will provide\n"
            + "contextual help for that module or command.\n"
            + "Example: qis help coverage\n"
        )
