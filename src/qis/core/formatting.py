"""Plain-text formatting for summaries that are stored or piped.

Module summaries end up in the history ledger and in ``summary`` output, so
their rich tables are captured to uncolored text here.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

TABLE_WIDTH = 200


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return grammatically correct singular/plural form.

    Examples:
        pluralize(1, "file") -> "1 file"
        pluralize(3, "file") -> "3 files"
    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


def render_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[object]],
    *,
    align: Sequence[str] | None = None,
) -> str:
    """Render a rich table with ASCII borders to plain text.

    ``align`` holds one of "L" or "R" per column (default: all left).

    Example::

        +---------------+
        | SLOC | Errors |
        |------+--------|
        | 120  | 3      |
        +---------------+
    """
    alignment = list(align or ["L"] * len(headers))
    table = Table(box=box.ASCII, show_header=True, header_style=None)
    for header, side in zip(headers, alignment, strict=False):
        table.add_column(header, justify="right" if side == "R" else "left", overflow="fold")
    for row in rows:
        table.add_row(*(Text(str(cell)) for cell in row))

    console = Console(width=TABLE_WIDTH, color_system=None, no_color=True, highlight=False)
    with console.capture() as capture:
        console.print(table)
    return capture.get()


def format_duration(seconds: float) -> str:
    """Format a duration: "0.4s", "12.0s", "2m 5s"."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"


def round_half_up(value: float, digits: int = 0) -> int | float:
    """Round with halves away from zero, as report readers expect."""
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if digits == 0:
        return int(rounded)
    return float(rounded)


def format_percent(value: float) -> str:
    """50.0 -> '50', 66.67 -> '66.67'."""
    return f"{value:g}"
