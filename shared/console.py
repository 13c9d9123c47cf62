"""
Console Interface
==================

Rich-powered console abstraction used for every human-facing diagnostic.

The class wraps :class:`rich.console.Console` bound to stderr, so that
stdout stays reserved for the machine-readable finding lines and JSON
reports, and adds severity-coloured message helpers and table rendering.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------
_TOOL_THEME = Theme(
    {
        "tool.warning": "bold yellow",
        "tool.error": "bold red",
    }
)


class ToolConsole:
    """Unified stderr console.

    Usage::

        con = ToolConsole()
        con.error("libfoo.so: symbol table would end at byte 900 ...")
        con.table("Summary", ["File", "Status"], rows)

    Args:
        quiet:  Suppress all output (library / test mode).
        stderr: Write to stderr (default) rather than stdout.
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        stderr: bool = True,
    ) -> None:
        self._console = Console(
            theme=_TOOL_THEME,
            stderr=stderr,
            quiet=quiet,
            highlight=False,
            soft_wrap=True,
        )

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def warning(self, message: str) -> None:
        self._console.print(f"[tool.warning]warning:[/tool.warning] {escape(message)}")

    def error(self, message: str) -> None:
        self._console.print(f"[tool.error]error:[/tool.error] {escape(message)}")

    # ------------------------------------------------------------------ #
    #  Table display
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Row tuples; each cell is stringified.
            caption:  Optional footer caption.
            styles:   Optional per-column Rich style strings.
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            tbl.add_column(col_name, style=style)

        for row in rows:
            tbl.add_row(*(escape(str(cell)) for cell in row))

        self._console.print(tbl)

