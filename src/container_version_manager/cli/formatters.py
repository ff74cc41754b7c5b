"""Output formatters for the cvm commands.

Commands hand models or plain dicts to a formatter chosen by ``--output``;
the formatter decides how they are printed.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import StrEnum
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table


class OutputFormat(StrEnum):
    """Supported output formats for CLI commands."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


def _to_data(item: Any) -> Any:
    """JSON-compatible view of a pydantic model or plain value."""
    if hasattr(item, "model_dump"):
        return item.model_dump(mode="json", exclude_none=True)
    return item


class Formatter(ABC):
    """Abstract base class for output formatters."""

    def __init__(self, console: Console) -> None:
        self.console = console

    @abstractmethod
    def format_resource(self, resource: Any, title: str = "") -> None:
        """Format and display a single resource."""

    @abstractmethod
    def format_list(
        self,
        resources: Sequence[Any],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        """Format and display a list of resources."""

    def format_success(self, message: str) -> None:
        """Display a success message."""
        self.console.print(f"[green]{message}[/green]")


class TableFormatter(Formatter):
    """Rich table output formatter."""

    def format_resource(self, resource: Any, title: str = "") -> None:
        """Format resource as a two-column key-value table."""
        table = Table(title=title or "Resource Details", show_header=True)
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value", style="green", overflow="fold")

        for field, value in _to_data(resource).items():
            table.add_row(field, self._format_value(value))

        self.console.print(table)

    def format_list(
        self,
        resources: Sequence[Any],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        """Format resources as a multi-column table."""
        table = Table(title=title, show_header=True)

        for _field_name, header in columns:
            style = "cyan" if header.lower() in ("name", "namespace") else None
            table.add_column(header, style=style, overflow="fold")

        for resource in resources:
            data = _to_data(resource)
            table.add_row(*(self._format_cell_value(data.get(field)) for field, _ in columns))

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {len(resources)} resources[/dim]")

    def _format_value(self, value: Any) -> str:
        if isinstance(value, dict):
            if not value:
                return "[dim]-[/dim]"
            return ", ".join(f"{k}={v}" for k, v in sorted(value.items()))
        elif isinstance(value, bool):
            return "[green]true[/green]" if value else "[red]false[/red]"
        elif value is None or value == "":
            return "[dim]-[/dim]"
        else:
            return str(value)

    def _format_cell_value(self, value: Any) -> str:
        if isinstance(value, bool):
            return "Yes" if value else "No"
        elif value is None or value == "":
            return "-"
        else:
            return str(value)


class JsonFormatter(Formatter):
    """JSON output formatter."""

    def format_resource(self, resource: Any, title: str = "") -> None:
        self.console.print_json(json.dumps(_to_data(resource), default=str))

    def format_list(
        self,
        resources: Sequence[Any],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        data = [_to_data(r) for r in resources]
        output = {"data": data, "total": len(data)}
        self.console.print_json(json.dumps(output, default=str))


class YamlFormatter(Formatter):
    """YAML output formatter."""

    def format_resource(self, resource: Any, title: str = "") -> None:
        self.console.print(
            yaml.safe_dump(_to_data(resource), default_flow_style=False, sort_keys=False)
        )

    def format_list(
        self,
        resources: Sequence[Any],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        data = [_to_data(r) for r in resources]
        self.console.print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))


def get_formatter(format_type: OutputFormat, console: Console | None = None) -> Formatter:
    """Factory function to get the appropriate formatter."""
    if console is None:
        console = Console()

    formatters: dict[OutputFormat, type[Formatter]] = {
        OutputFormat.TABLE: TableFormatter,
        OutputFormat.JSON: JsonFormatter,
        OutputFormat.YAML: YamlFormatter,
    }

    formatter_class = formatters.get(format_type, TableFormatter)
    return formatter_class(console)
