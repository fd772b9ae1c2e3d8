"""qis CLI - the qis command.

Commands and modules are resolved at run time from the project config, so
click only handles the global options; the action and everything after it
are handed to the driver untouched.
"""

import sys
from pathlib import Path

import click
import structlog

from qis.app import Qis
from qis.core.arguments import Arguments
from qis.core.errors import QisError
from qis.core.logging import configure_logging, set_run_id

log = structlog.get_logger()


@click.command(
    context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
    add_help_option=False,
)
@click.option("-h", "--help", "show_help", is_flag=True, help="Show help")
@click.option("-v", "--verbose", is_flag=True, help="Show verbose messages")
@click.option("-q", "--quiet", is_flag=True, help="Print less messages")
@click.option("--no-color", is_flag=True, help="Don't use color output")
@click.option("--version", "show_version", is_flag=True, help="Show version and exit")
@click.argument("action", required=False, default="")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def cli(
    show_help: bool,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    show_version: bool,
    action: str,
    args: tuple[str, ...],
) -> None:
    """Quantal Integration System - build quality checks for a project."""
    configure_logging(level="DEBUG" if verbose else "WARNING", verbose=verbose)
    set_run_id()

    qis = Qis(project_root=Path.cwd(), verbose=verbose, quiet=quiet, no_color=no_color)
    arguments = Arguments.parse(args, action=action)

    try:
        if show_version:
            qis.terminal.out(qis.render_title())
            status = 0
        elif show_help:
            status = qis.show_help(arguments)
        else:
            status = qis.execute(arguments)
    except QisError as e:
        log.error("command_failed", **e.to_dict())
        qis.display_error(e.message)
        sys.exit(e.exit_code)

    sys.exit(status)


if __name__ == "__main__":
    cli()
