"""Reporting components for bulk operations.

This module renders summaries of bulk object operations with Rich formatting
for console output.

Classes:
    ReportGenerator: Generates formatted reports for bulk operation outcomes
"""

from typing import Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .errors import ActionFailedError, BulkOperationError, EnumerationFailedError
from .models import ActionResult, BulkOutcome


class ReportGenerator:
    """Generates summary and error reports for bulk operations."""

    def __init__(self, console: Console):
        """Initialize report generator.

        Args:
            console: Rich console for output
        """
        self.console = console

    def generate_summary_report(self, outcome: BulkOutcome, operation: str):
        """Generate and display summary report.

        Args:
            outcome: Bulk operation outcome
            operation: Operation name (e.g. 'delete', 'make public')
        """
        summary_table = Table(show_header=False, box=None, padding=(0, 1))
        summary_table.add_column("Metric", style="bold cyan")
        summary_table.add_column("Value", style="bold")

        summary_table.add_row("Operation", operation.title())
        summary_table.add_row("Mode", "force" if outcome.force else "fail-fast")
        summary_table.add_row("Concurrency", str(outcome.concurrency_limit))
        summary_table.add_row("Total Processed", str(outcome.total_processed))
        summary_table.add_row("Successful", f"[green]{outcome.success_count}[/green]")
        summary_table.add_row("Failed", f"[red]{outcome.failure_count}[/red]")
        summary_table.add_row("Success Rate", f"{outcome.success_rate:.1f}%")
        summary_table.add_row("Duration", self._format_duration(outcome.duration))

        self.console.print()
        self.console.print(
            Panel(
                summary_table,
                title=f"[bold]Bulk {operation.title()} Summary[/bold]",
                border_style="blue" if outcome.ok else "red",
            )
        )

    def generate_error_summary(self, outcome: BulkOutcome):
        """Generate summary of errors encountered during processing.

        Args:
            outcome: Bulk operation outcome
        """
        if not outcome.failed:
            self.console.print("[green]No errors encountered![/green]")
            return

        # Group errors by type
        error_groups: Dict[str, List[ActionResult]] = {}
        for result in outcome.failed:
            error_type = type(result.cause).__name__ if result.cause else "Unknown error"
            error_groups.setdefault(error_type, []).append(result)

        error_table = Table(title="Error Summary", show_header=True, header_style="bold red")
        error_table.add_column("Error Type", style="red", width=30)
        error_table.add_column("Count", justify="right", width=8)
        error_table.add_column("Examples", style="dim", width=50)

        for error_type, error_results in error_groups.items():
            examples = [str(result.item) for result in error_results[:3]]
            if len(error_results) > 3:
                examples.append(f"... and {len(error_results) - 3} more")
            error_table.add_row(error_type, str(len(error_results)), "; ".join(examples))

        self.console.print()
        self.console.print(error_table)

    def report_aborted(self, error: BulkOperationError, operation: str):
        """Display why a bulk operation did not run to completion.

        Args:
            error: The error that stopped the operation
            operation: Operation name
        """
        if isinstance(error, EnumerationFailedError):
            self.console.print(
                f"[red]Could not {operation}: listing objects failed: {error.cause}[/red]"
            )
        elif isinstance(error, ActionFailedError):
            self.console.print(
                f"[red]Stopped after first failure on {error.item}: {error.cause}[/red]"
            )
            self.console.print(
                "[dim]Objects after the failure were not processed. "
                "Use --force to continue past individual failures.[/dim]"
            )
        else:
            self.console.print(f"[red]{error.message}[/red]")

        partial = getattr(error, "partial_outcome", None)
        if partial is not None and partial.success_count:
            self.console.print(
                f"[yellow]{partial.success_count} object(s) were processed before stopping.[/yellow]"
            )

    def _format_duration(self, seconds: float) -> str:
        """Format duration in seconds to human-readable string."""
        if seconds < 0:
            return "N/A"

        if seconds < 1:
            return f"{seconds*1000:.0f}ms"
        elif seconds < 60:
            return f"{seconds:.2f}s"
        elif seconds < 3600:
            minutes = int(seconds // 60)
            remaining_seconds = seconds % 60
            return f"{minutes}m {remaining_seconds:.1f}s"
        else:
            hours = int(seconds // 3600)
            remaining_minutes = int((seconds % 3600) // 60)
            remaining_seconds = seconds % 60
            return f"{hours}h {remaining_minutes}m {remaining_seconds:.1f}s"
