"""
Output utility for the kubecomposer CLI with colors and verbosity control.

Provides a centralized output manager using the Rich library so every
command prints results, tables and errors the same way.
"""

from enum import IntEnum
from typing import Optional, List

from rich.console import Console
from rich.table import Table
from rich import box


class Verbosity(IntEnum):
    """Verbosity levels for output."""

    QUIET = 0  # Only errors and final results
    NORMAL = 1  # Standard output with colors
    VERBOSE = 2  # Detailed output including file paths


class OutputManager:
    """
    Centralized output manager for the kubecomposer CLI.

    Provides methods for formatted output with colors and verbosity control.
    Command results (YAML, DOT, JSON) go through ``emit`` so they are never
    decorated with markup and still appear in quiet mode.
    """

    def __init__(self, verbosity: Verbosity = Verbosity.NORMAL):
        """
        Initialize the output manager.

        Args:
            verbosity: Verbosity level for output
        """
        self.verbosity = verbosity
        self.console = Console()
        self.error_console = Console(stderr=True)

    def set_verbosity(self, verbosity: Verbosity) -> None:
        """Set the verbosity level."""
        self.verbosity = verbosity

    def success(self, message: str) -> None:
        """Print a success message in green."""
        if self.verbosity != Verbosity.QUIET:
            self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, suggestion: Optional[str] = None) -> None:
        """Print an error message in red to stderr."""
        error_text = f"✗ {message}"
        self.error_console.print(f"[red]{error_text}[/red]", style="red")
        if suggestion and self.verbosity >= Verbosity.NORMAL:
            self.error_console.print(f"[yellow]💡 {suggestion}[/yellow]", style="yellow")

    def warning(self, message: str) -> None:
        """Print a warning message in yellow."""
        if self.verbosity != Verbosity.QUIET:
            self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Print an info message in blue."""
        if self.verbosity >= Verbosity.NORMAL:
            self.console.print(f"[blue]ℹ[/blue] {message}", style="blue")

    def verbose(self, message: str) -> None:
        """Print a verbose message (only shown in VERBOSE mode)."""
        if self.verbosity >= Verbosity.VERBOSE:
            self.console.print(f"[dim]{message}[/dim]", style="dim")

    def emit(self, content: str) -> None:
        """Print command output verbatim, regardless of verbosity."""
        self.console.print(content, markup=False, highlight=False, emoji=False, soft_wrap=True)

    def table(
        self,
        title: str,
        columns: List[str],
        rows: List[List[str]],
        show_header: bool = True,
    ) -> None:
        """Print a table."""
        if self.verbosity != Verbosity.QUIET:
            table = Table(title=title, show_header=show_header, box=box.ROUNDED)
            for col in columns:
                table.add_column(col)
            for row in rows:
                table.add_row(*row)
            self.console.print(table)


# Global output manager instance
_output_manager: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """
    Get the global output manager instance.

    Returns:
        OutputManager instance
    """
    global _output_manager
    if _output_manager is None:
        _output_manager = OutputManager()
    return _output_manager


def set_output(manager: OutputManager) -> None:
    """Set the global output manager instance."""
    global _output_manager
    _output_manager = manager
