"""Rich display functions for the flatbridge CLI."""

from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from flatbridge.exceptions import PartialTransferError
from flatbridge.models import TransferResult

console = Console()

MAX_PREVIEW_ROWS = 10


def display_preview(columns: List[str], rows: List[Dict[str, Any]]) -> None:
    """Display the first preview rows as a table.

    Args:
        columns: Selected columns, in order
        rows: Projected rows
    """
    table = Table(show_header=True, header_style="bold blue")
    for name in columns:
        table.add_column(name, style="white")

    for row in rows[:MAX_PREVIEW_ROWS]:
        table.add_row(*("" if row.get(name) is None else str(row.get(name)) for name in columns))

    console.print(f"🔍 [bold blue]Preview ({len(rows)} rows sampled)[/bold blue]")
    console.print(table)
    if len(rows) > MAX_PREVIEW_ROWS:
        console.print(f"  ... and {len(rows) - MAX_PREVIEW_ROWS} more rows")


def display_transfer_result(result: TransferResult) -> None:
    console.print("✅ [bold green]Transfer completed successfully[/bold green]")

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Property", style="cyan", width=12)
    table.add_column("Value", style="white")
    table.add_row("Records", str(result.records_processed))
    table.add_row("Destination", result.destination)
    console.print(table)


def display_error(error: Exception, context: str = "") -> None:
    """Display an error panel, noting partial writes when they happened."""
    context_text = f" during {context}" if context else ""
    content = str(error)
    if isinstance(error, PartialTransferError):
        content += (
            f"\n\n{error.records_processed} records remain in "
            f"'{error.destination}'; they were not rolled back."
        )
    console.print(Panel(content, title=f"Error{context_text}", border_style="red"))
