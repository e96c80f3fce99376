"""
jinspect Console Interface
===========================

Rich-powered console abstraction providing one presentation layer for the
jinspect command-line tool.

The class wraps :class:`rich.console.Console` and adds convenience methods
for section rules, severity-prefixed messages and tables, all with
consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

# ---------------------------------------------------------------------------
# Theme -- consistent palette across all jinspect output
# ---------------------------------------------------------------------------
_INSPECT_THEME = Theme(
    {
        "inspect.banner": "bold bright_cyan",
        "inspect.section": "bold bright_magenta",
        "inspect.success": "bold green",
        "inspect.warning": "bold yellow",
        "inspect.error": "bold red",
        "inspect.info": "bold bright_blue",
        "inspect.dim": "dim white",
        "inspect.highlight": "bold bright_white",
    }
)

_TAGLINE = "Java class file inspector"


class InspectConsole:
    """Unified console interface for jinspect.

    Usage::

        con = InspectConsole()
        con.banner()
        con.section("Constant Pool")
        con.error("Truncated input")
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        record: bool = False,
        width: int | None = None,
    ) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (useful in library / test mode).
            record: Enable Rich recording so output can be exported.
            width:  Fixed console width; ``None`` autodetects.
        """
        self._console = Console(
            theme=_INSPECT_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
            width=width,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Banner / sections
    # ------------------------------------------------------------------ #

    def banner(self, path: str, version: str = "0.1.0") -> None:
        """Display a one-panel banner naming the inspected file."""
        panel = Panel(
            f"[inspect.banner]jinspect[/inspect.banner] "
            f"[inspect.dim]{version}[/inspect.dim]\n"
            f"[inspect.dim]{_TAGLINE}[/inspect.dim]\n"
            f"[inspect.highlight]{escape(path)}[/inspect.highlight]",
            border_style="bright_cyan",
            padding=(0, 2),
        )
        self._console.print(panel)

    def section(self, title: str) -> None:
        """Print a prominent section header."""
        self._console.rule(
            f"  {title}  ",
            style="inspect.section",
            characters="─",
        )

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(
            f"[inspect.success][✔] SUCCESS:[/inspect.success] {message}"
        )

    def warning(self, message: str) -> None:
        self._console.print(
            f"[inspect.warning][⚠] WARNING:[/inspect.warning] {message}"
        )

    def error(self, message: str) -> None:
        self._console.print(
            f"[inspect.error][✘] ERROR:[/inspect.error] {message}"
        )

    def info(self, message: str) -> None:
        self._console.print(
            f"[inspect.info][ℹ] INFO:[/inspect.info] {message}"
        )

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
            rows:     Iterable of row tuples; each element is stringified.
            caption:  Optional footer caption.
            styles:   Optional per-column Rich style strings.
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=False,
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            tbl.add_column(col_name, style=style)

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def export_text(self) -> str:
        """Export recorded console output as plain text (requires ``record=True``)."""
        return self._console.export_text()
