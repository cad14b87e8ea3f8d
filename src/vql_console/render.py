"""Terminal output for the VQL console."""

from __future__ import annotations

import csv
import io
import json
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from vql_console.cancellation import ExecutionContext
from vql_console.config import OutputFormat
from vql_console.help import HelpResult

Row = Mapping[str, Any]


class Renderer:
    """Render messages, help pages and result rows with Rich."""

    def __init__(self, output_format: OutputFormat = "json", console: Console | None = None) -> None:
        self.console: Console = console or Console()
        self.output_format: OutputFormat = output_format
        self._print_lock = threading.Lock()

    def info(self, message: str) -> None:
        self._print(message)

    def error(self, message: str) -> None:
        self._print(f"[bold red]Error:[/bold red] {escape(message)}")

    def welcome(self, message: str = "[bold blue]VQL[/bold blue] console. Type HELP <name> for documentation.") -> None:
        self._print(message)

    def help(self, result: HelpResult) -> None:
        if not result.found:
            self._print(f"[yellow]{escape(result.render())}[/yellow]")
            return
        if result.kind == "artifact" or not result.arguments:
            self._out(result.render())
            return

        self._out(f"{result.title}\n{result.doc}\n")
        table = Table(title="Args", show_header=True, header_style="bold")
        table.add_column("Name", style="cyan")
        table.add_column("Doc")
        table.add_column("Type", style="magenta")
        table.add_column("Repeated")
        table.add_column("Required")
        for argument in result.arguments:
            table.add_row(
                Text(argument.field_name),
                Text(argument.doc),
                Text(argument.target_type),
                "repeated" if argument.repeated else "",
                "required" if argument.required else "",
            )
        with self._print_lock:
            self.console.print(table)

    def rows(self, rows: Iterable[Row], context: ExecutionContext) -> int:
        """Render rows in the configured format. Returns the number rendered."""

        collected = _collect(rows, context)
        if self.output_format == "text":
            self._render_table(collected)
        elif self.output_format == "csv":
            self._render_csv(collected)
        else:
            self._out(json.dumps(collected, indent=1, default=str, ensure_ascii=False))
        return len(collected)

    def _render_table(self, rows: list[dict[str, Any]]) -> None:
        table = Table(show_header=True, header_style="bold")
        columns = _columns(rows)
        for column in columns:
            table.add_column(Text(column))
        for row in rows:
            table.add_row(*(Text(_cell(row.get(column))) for column in columns))
        with self._print_lock:
            self.console.print(table)

    def _render_csv(self, rows: list[dict[str, Any]]) -> None:
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=_columns(rows), extrasaction="ignore", lineterminator="\n")
        writer.writeheader()
        for row in rows:
            writer.writerow({key: _cell(value) for key, value in row.items()})
        self._out(buffer.getvalue().rstrip("\n"))

    def _print(self, message: str) -> None:
        with self._print_lock:
            self.console.print(message)

    def _out(self, text: str) -> None:
        with self._print_lock:
            self.console.out(text, highlight=False)


def _collect(rows: Iterable[Row], context: ExecutionContext) -> list[dict[str, Any]]:
    collected: list[dict[str, Any]] = []
    for row in rows:
        if context.cancelled:
            break
        collected.append(dict(row))
    return collected


def _columns(rows: list[dict[str, Any]]) -> list[str]:
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)
