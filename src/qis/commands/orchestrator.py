"""The ``all`` command: run the configured build order."""

from __future__ import annotations

from typing import Any

import structlog

from qis.commands.base import Command
from qis.config.models import DEFAULT_BUILD_ORDER
from qis.core.arguments import Arguments
from qis.core.console import REPORT_STYLE
from qis.core.errors import QisError
from qis.modules.base import RETURN_SUCCESS

log = structlog.get_logger()

RULE_CHAR = "%"
RULE_WIDTH = 80


def resolve_build_order(value: Any) -> list[str]:
    """Module keywords to run, in order.

    Anything other than a non-blank string selects the default order.
    """
    if not isinstance(value, str) or not value.strip():
        value = DEFAULT_BUILD_ORDER
    return [keyword.strip() for keyword in value.split(",")]


class AllCommand(Command):
    """Runs every module named in ``build_order`` and records its history."""

    name = "all"

    def execute(self, args: Arguments) -> int:
        self.execute_all_modules(args)
        return 0

    def execute_all_modules(self, args: Arguments) -> list[str]:
        """Run the build order; return the keywords that were executed.

        Keywords without a registered module are skipped. A module whose run
        raises a QisError is reported and the build moves on to the next one.
        """
        order = resolve_build_order(self._qis.config.get("build_order"))
        executed: list[str] = []

        for keyword in order:
            module = self._qis.modules.get(keyword)
            if module is None:
                log.debug("build_order_skipped", module=keyword)
                continue

            log.info("build_module_started", module=keyword)
            try:
                result = module.execute(args)
            except QisError as e:
                log.warning("build_module_failed", module=keyword, **e.to_dict())
                self._qis.display_error(e.message)
                result = e.exit_code

            if result == RETURN_SUCCESS:
                self._qis.save_history(keyword, module)
            executed.append(keyword)
            self._rule()

        return executed

    def _rule(self) -> None:
        self._qis.terminal.out("\n")
        self._qis.display_message(RULE_CHAR * RULE_WIDTH, style=REPORT_STYLE)
        self._qis.terminal.out("\n")

    def get_help_message(self) -> str:
        return "Execute all modules\n"

    def get_extended_help_message(self) -> str:
        return (
            self.get_help_message()
            + "\n"
            + "Usage: all\n"
            + "Runs all the modules in the order specified in .qis/config.ini\n\n"
            + f"Default: build_order={DEFAULT_BUILD_ORDER}\n"
        )
