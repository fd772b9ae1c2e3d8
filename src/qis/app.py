"""The qis driver: loads the project, registers modules and dispatches actions."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import NoReturn

import structlog
from rich.console import Console

from qis.commands.registry import CommandRegistry
from qis.config.loader import config_file_path, load_config
from qis.config.models import QisConfig
from qis.core.arguments import Arguments
from qis.core.console import REPORT_STYLE, TITLE_STYLE, Terminal
from qis.core.logging import configure_logging
from qis.history.models import HistoryRecord
from qis.history.store import HISTORY_FILENAME, HistoryStore
from qis.modules.base import RETURN_SUCCESS, Module
from qis.modules.registry import ModuleRegistry

log = structlog.get_logger()

DEFAULT_ACTION = "summary"
UNRECOGNIZED_STATUS = 1
DEFAULT_HALT_STATUS = 2

HaltCallback = Callable[[int], None]


def _exit(status: int) -> NoReturn:
    sys.exit(status)


class Qis:
    """One qis invocation against one project root.

    ``halt`` decides what stopping means. The default exits the process;
    tests pass a recorder so a halted run simply returns.
    """

    VERSION = "1.2.3"

    def __init__(
        self,
        *,
        project_root: Path | None = None,
        verbose: bool = False,
        quiet: bool = False,
        no_color: bool = False,
        console: Console | None = None,
        halt: HaltCallback | None = None,
    ) -> None:
        self.project_root = (project_root or Path.cwd()).resolve()
        self.verbose = verbose
        self.terminal = Terminal(quiet=quiet, no_color=no_color, console=console)
        self._halt = halt or _exit

        self.config = QisConfig()
        self.config_loaded = False
        self.modules = ModuleRegistry(self)
        self.commands = CommandRegistry(self)
        self.history = HistoryStore(self.project_qis_root / HISTORY_FILENAME)
        self._booted = False

    @property
    def project_qis_root(self) -> Path:
        return self.project_root / ".qis"

    # Setup

    def boot(self) -> None:
        """Register commands, load the project config and its modules."""
        if self._booted:
            return
        self._booted = True

        self.commands.register_all()
        if self.load_project_config():
            self.modules.register_all(self.config.modules)

    def load_project_config(self) -> bool:
        path = config_file_path(self.project_root)
        if not path.exists():
            log.debug("project_config_missing", path=str(path))
            return False

        self.config = load_config(self.project_root)
        self.config_loaded = True
        configure_logging(config=self.config.logging, verbose=self.verbose)
        log.debug("project_config_loaded", path=str(path), project=self.config.project_name)
        return True

    # Dispatch

    def execute(self, args: Arguments) -> int:
        """Run an action: a built-in command first, else a module."""
        self.boot()
        action = args.action.strip() or DEFAULT_ACTION

        if not self.config_loaded and action != "init":
            self.display_error("No project config file found. Use 'qis init' to initialize.")
        else:
            self._show_title()
            if self.config_loaded:
                self.qecho(f"Project: {self.config.project_name}\n")

        command = self.commands.get(action)
        if command is not None:
            log.debug("command_dispatched", command=action)
            return command.execute(args)

        module = self.modules.get(action)
        if module is not None:
            log.debug("module_dispatched", module=action)
            return_code = module.execute(args)
            if return_code == RETURN_SUCCESS:
                self.save_history(action, module)
            return return_code

        return self.halt(f"Unrecognized command '{action}'", UNRECOGNIZED_STATUS)

    def show_help(self, args: Arguments) -> int:
        """Title, project name and help for the given action (if any)."""
        self.boot()
        self.terminal.styled(self.render_title(), TITLE_STYLE)
        if self.config_loaded and self.config.project_name:
            self.terminal.out(f"Project: {self.config.project_name}\n")

        topic = [args.action] if args.action else []
        return self.commands.all()["help"].execute(Arguments(action="help", positionals=topic))

    def save_history(self, module_name: str, module: Module) -> HistoryRecord:
        return self.history.append(module_name, module)

    # Output

    def render_title(self) -> str:
        return f"Quantal Integration System {self.VERSION}\n"

    def _show_title(self) -> None:
        if not self.terminal.quiet:
            self.terminal.styled(self.render_title(), TITLE_STYLE)

    def halt(self, message: str, status: int = DEFAULT_HALT_STATUS) -> int:
        """Show an error and stop; returns 1 when the halt callback returns."""
        log.info("halted", reason=message, status=status)
        self.display_error(message)
        self._halt(status)
        return 1

    def qecho(self, text: str) -> None:
        self.terminal.qecho(text)

    def log(self, message: str) -> None:
        """Trace line, shown with -v only."""
        log.debug("trace", message=message)
        if self.verbose:
            self.terminal.log(message)

    def display_message(self, message: str, *, style: str | None = TITLE_STYLE) -> None:
        self.terminal.display_message(message, style=style)

    def warning_message(self, message: str) -> None:
        self.terminal.warning_message(message)

    def display_error(self, message: str) -> None:
        self.terminal.display_error(message)

    def pretty_message(self, message: str, *, style: str = REPORT_STYLE) -> None:
        self.terminal.pretty_message(message, style=style)
