"""Rich terminal output utilities for avsh.

This module provides formatted output using the Rich library. All output
goes to stderr except explicit reports such as ``--folders``, so that
avsh never pollutes the output of the command it runs.
"""

from __future__ import annotations

import json
from enum import Enum

import yaml
from rich.console import Console
from rich.table import Table

console = Console()
error_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Supported output formats."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


class OutputFormatter:
    """Formats synced folder reports.

    Args:
        format_type: Output format to use (table, json, yaml).
        output_console: Rich console instance for output.

    Example:
        >>> formatter = OutputFormatter(OutputFormat.TABLE)
        >>> formatter.print_folders({"default": {"/vagrant": "/home/me/project"}})
    """

    def __init__(
        self,
        format_type: OutputFormat = OutputFormat.TABLE,
        output_console: Console | None = None,
    ) -> None:
        self.format_type = format_type
        self.console = output_console or console

    def print_folders(self, folders_by_machine: dict[str, dict[str, str]]) -> None:
        """Print merged synced folders for each machine.

        Args:
            folders_by_machine: Machine name to guest path to host path.
        """
        if self.format_type == OutputFormat.JSON:
            self.console.print_json(json.dumps(folders_by_machine, indent=2))
        elif self.format_type == OutputFormat.YAML:
            self.console.print(
                yaml.safe_dump(folders_by_machine, default_flow_style=False, sort_keys=False)
            )
        else:
            self._print_folders_table(folders_by_machine)

    def _print_folders_table(self, folders_by_machine: dict[str, dict[str, str]]) -> None:
        table = Table(title="Synced Folders", show_header=True)
        table.add_column("Machine", style="cyan", no_wrap=True)
        table.add_column("Guest Path", style="green")
        table.add_column("Host Path", style="white")

        for machine, folders in folders_by_machine.items():
            if not folders:
                table.add_row(machine, "-", "-")
            for guest_path, host_path in folders.items():
                table.add_row(machine, guest_path, host_path)

        self.console.print(table)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message to stderr."""
    error_console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message to stderr."""
    error_console.print(f"[blue]ℹ[/blue] {message}")
