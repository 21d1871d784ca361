"""Rendering for the callbackhub CLI.

Data (order tables, event lists, config dumps) is written to stdout and
everything else (status lines, warnings, errors) to stderr, so
``callbackhub --json inspect order | jq`` always sees clean JSON.

On an interactive colour terminal tables are drawn with Rich; when piped,
or with ``NO_COLOR``/``TERM=dumb``/``--no-color``, they become
tab-separated lines. ``--json`` turns every table into a list of objects.

The root CLI callback installs one :class:`OutputManager` via
:func:`set_output`; commands call the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """``AUTO`` becomes ``RICH`` on a colour TTY and ``PLAIN`` otherwise."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (plain prefix, Rich markup template, hidden when quiet)
_LEVELS: dict[str, tuple[str, str, bool]] = {
    "info": ("", "{}", True),
    "success": ("", "[green]{}[/green]", True),
    "warning": ("Warning: ", "[yellow]Warning:[/yellow] {}", False),
    "error": ("Error: ", "[bold red]Error:[/bold red] {}", False),
    "debug": ("[debug] ", "[dim]\\[debug] {}[/dim]", False),
}


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


class OutputManager:
    """Writes data and diagnostics in one resolved format.

    Args:
        format: Requested format; ``AUTO`` is resolved here, once.
        no_color: Plain diagnostics and no Rich tables.
        quiet: Drop ``info`` and ``success`` lines.
        verbose: Show ``debug`` lines.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        if format == OutputFormat.AUTO:
            format = OutputFormat.PLAIN if self._no_color or not _is_tty() else OutputFormat.RICH
        self._format = format
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # --- stdout ---

    def print_data(self, text: str) -> None:
        sys.stdout.write(text + "\n")
        sys.stdout.flush()

    def format_response(self, data: Any) -> None:
        """Dump a mapping or list: JSON, ``key<TAB>value`` lines, or highlighted JSON."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data))
            return
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
            return
        if isinstance(data, dict):
            for key, value in data.items():
                if isinstance(value, (dict, list)):
                    value = json.dumps(value, default=str)
                self.print_data(f"{key}\t{value}")
        elif isinstance(data, list):
            for item in data:
                self.print_data(str(item))
        else:
            self.print_data(str(data))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Rows as a Rich table, a JSON list of header-keyed objects, or TSV.

        *title* is only shown by the Rich table.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
        elif self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
        else:
            table = Table(*headers, title=title, header_style="bold cyan")
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # --- stderr ---

    def _say(self, level: str, message: str) -> None:
        prefix, markup, quietable = _LEVELS[level]
        if quietable and self._quiet:
            return
        if level == "debug" and not self._verbose:
            return
        if self._no_color:
            sys.stderr.write(f"{prefix}{message}\n")
            sys.stderr.flush()
        else:
            self._stderr.print(markup.format(message))

    def info(self, message: str) -> None:
        self._say("info", message)

    def success(self, message: str) -> None:
        self._say("success", message)

    def warning(self, message: str) -> None:
        self._say("warning", message)

    def error(self, message: str) -> None:
        self._say("error", message)

    def debug(self, message: str) -> None:
        """Shown only when verbose."""
        self._say("debug", message)


def _is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to anything, or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# --- process-wide instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """The installed manager, or a default one created on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)
