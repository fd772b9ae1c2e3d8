"""User-facing terminal output for qis commands and modules.

Design principles:
- Report text is written verbatim (no wrapping, no markup) so fixed-width
  layouts survive narrow terminals and pipes
- Colors are opt-out (``--no-color``) and vanish on non-TTY output
- ``--quiet`` silences informational echo, never errors or warnings
- Structured events go to structlog; this module only prints

Usage::

    terminal = Terminal()
    terminal.qecho("Running coverage module task...\\n")
    terminal.display_error("Cannot find file 'coverage.xml'")
    terminal.pretty_message("PASS", style="black on green")
    terminal.print_table(("Module", "Command"), [("codingstandard", "cs")])
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

# Style prefixes, as used by status()
_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}

PASS_STYLE = "bold black on green"
FAIL_STYLE = "bold bright_white on red"
ERROR_STYLE = "bold bright_white on red"
TITLE_STYLE = "green"
LOG_STYLE = "yellow"
WARNING_STYLE = "red"
REPORT_STYLE = "bright_white on blue"


class Terminal:
    """Rich console wrapper carrying the global output flags."""

    def __init__(
        self,
        *,
        quiet: bool = False,
        no_color: bool = False,
        console: Console | None = None,
    ) -> None:
        self.quiet = quiet
        self.no_color = no_color
        self._console = console or Console(highlight=False, no_color=no_color)

    @property
    def console(self) -> Console:
        return self._console

    @property
    def is_terminal(self) -> bool:
        return self._console.is_terminal

    def out(self, text: str) -> None:
        """Write text verbatim, without wrapping or markup."""
        self._console.out(text, end="", highlight=False)

    def qecho(self, text: str) -> None:
        """Write informational text unless quiet mode is on."""
        if self.quiet:
            return
        self.out(text)

    def styled(self, text: str, style: str | None) -> None:
        """Write text in a style, without a trailing newline."""
        if self.no_color or not style:
            self.out(text)
            return
        self._console.print(Text(text, style=style), end="", soft_wrap=True)

    def display_message(self, message: str, *, style: str | None = TITLE_STYLE) -> None:
        """Print a colored message, ensuring it ends with a newline."""
        self.styled(message, style)
        if not message.endswith("\n"):
            self.out("\n")

    def warning_message(self, message: str) -> None:
        self.display_message(message, style=WARNING_STYLE)

    def display_error(self, message: str) -> None:
        """Print an error badge surrounded by blank lines."""
        self.out("\n")
        self.styled(f" {message} ", ERROR_STYLE)
        self.out("\n\n")

    def pretty_message(self, message: str, *, style: str) -> None:
        """Print a highlighted badge line; plain text when colors are off."""
        self.out("\n")
        if self.is_terminal:
            self.styled(f" {message} ", style)
        else:
            self.out(message)
        self.out("\n")

    def status(self, message: str, *, style: str = "info", indent: int = 0) -> None:
        """Print a status line with a check/cross prefix."""
        if self.quiet and style in ("info", "none", "success"):
            return
        prefix = _STYLES.get(style, "")
        padding = " " * indent
        if self.no_color:
            self._console.print(f"{padding}{message}", markup=False, highlight=False)
        else:
            self._console.print(f"{padding}{prefix}{message}", highlight=False)

    def log(self, message: str) -> None:
        """Print a ``>>`` trace line (verbose mode only, checked by caller)."""
        self.styled(f">> {message}\n", LOG_STYLE)

    def print_table(
        self,
        columns: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        """Render rows as a rich table."""
        table = Table(title=title, show_header=True, header_style="bold", box=None)
        for column in columns:
            table.add_column(column, overflow="fold")
        for row in rows:
            table.add_row(*(Text(str(cell)) for cell in row))
        self._console.print(table)

