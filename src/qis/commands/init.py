"""The ``init`` command - create the project config."""

from __future__ import annotations

import shutil
from pathlib import Path

import click
import structlog

from qis.commands.base import Command
from qis.config.loader import CONFIG_FILENAME
from qis.config.models import DEFAULT_BUILD_ORDER
from qis.core.arguments import Arguments
from qis.modules.registry import BUILTIN_MODULES

log = structlog.get_logger()


class InitCommand(Command):
    """Writes ``.qis/config.ini`` with defaults for every built-in module."""

    name = "init"

    def execute(self, args: Arguments) -> int:
        return self.initialize_project(force=args.flag("force"))

    def initialize_project(self, *, force: bool = False) -> int:
        terminal = self._qis.terminal
        path = self._qis.project_qis_root
        terminal.out("Initializing project...\n")

        if self._verify_dir_exists(path):
            if not force and not self._prompt_overwrite():
                return 0
            shutil.rmtree(path)
            log.info("project_reset", path=str(path))

        self._verify_dir_exists(path, create=True)
        config_file = path / CONFIG_FILENAME
        config_file.write_text(self.render_config(self._prompt_project_name()), encoding="utf-8")

        log.info("project_initialized", config=str(config_file))
        terminal.status(f"Config created at {config_file}", style="success")
        return 0

    def render_config(self, project_name: str) -> str:
        contents = (
            f"; QIS configuration file v{self._qis.VERSION}\n"
            f"project_name={project_name}\n"
            f'project_root="{self._qis.project_root}"\n'
            f"\nbuild_order={DEFAULT_BUILD_ORDER}\n"
        )
        return contents + self._module_defaults()

    def _module_defaults(self) -> str:
        contents = "\n[modules]\n"
        for module_cls in BUILTIN_MODULES.values():
            self._qis.log(f"Initializing {module_cls.class_path()}")
            contents += module_cls.get_default_ini() + "\n"
        return contents

    def _prompt_project_name(self) -> str:
        default = self._qis.project_root.name
        if not self._qis.terminal.is_terminal:
            return default
        name: str = click.prompt("Enter project name", default=default)
        return name.strip()

    def _prompt_overwrite(self) -> bool:
        self._qis.warning_message("Qis has already been initialized for this project.")
        return click.confirm("Do you want to re-init [All data will be lost]?", default=False)

    def _verify_dir_exists(self, path: Path, *, create: bool = False) -> bool:
        self._qis.log(f"Checking existence of directory '{path}'")
        if path.is_dir():
            self._qis.log(f"Directory '{path}' found.")
            return True

        self._qis.log(f"Directory '{path}' doesn't exist.")
        if create:
            self._qis.log(f"Creating directory '{path}'.")
            path.mkdir(parents=True)
        return False

    def get_help_message(self) -> str:
        return "Initialize a project in the current folder\n"

    def get_extended_help_message(self) -> str:
        return (
            self.get_help_message()
            + "\n"
            + "Usage: init [--force]\n"
            + "This will initialize a qis project in the current directory.\n"
            + "If one already exists, it will prompt to overwrite it.\n"
            + "Initializing a qis project will prompt the user for some\n"
            + "basic information about the project.\n"
            + "The files will be written to a .qis directory.\n"
            + "\nValid Options:\n"
            + "  --force : Overwrite an existing project without asking\n"
        )
