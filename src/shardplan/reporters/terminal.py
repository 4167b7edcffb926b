"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from datetime import timedelta

    from shardplan.sharding.plan import SplitPlan

console = Console(stderr=True)

_SECONDS_PER_MINUTE = 60.0
_SECONDS_PER_HOUR = 3600.0
_BALANCED_SHARE = 90.0
_FAIR_SHARE = 70.0


def _format_duration(value: timedelta) -> str:
    """Format a duration to a short human-readable string."""
    seconds = value.total_seconds()
    if seconds >= _SECONDS_PER_HOUR:
        return f"{seconds / _SECONDS_PER_HOUR:.1f}h"
    if seconds >= _SECONDS_PER_MINUTE:
        return f"{seconds / _SECONDS_PER_MINUTE:.1f}m"
    return f"{seconds:.1f}s"


def _share_color(share: float) -> str:
    """Return a Rich color for a partition's share of the makespan."""
    if share >= _BALANCED_SHARE:
        return "green"
    if share >= _FAIR_SHARE:
        return "yellow"
    return "red"


class CLIReporter:
    """Rich terminal output for split planning."""

    def __init__(self, target: Console | None = None) -> None:
        """Initialize the CLI reporter."""
        self.console = target or console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def print_plan(self, plan: SplitPlan) -> None:
        """Print one table per factor with filter counts and loads."""
        coalescing = plan.coalescing
        if coalescing.budget is not None:
            self.print_info(
                f"Filters: {coalescing.original_count} → {coalescing.final_count} "
                f"(budget {coalescing.budget}, {coalescing.rounds} merges)"
            )
        self.print_info(f"Total duration: {_format_duration(plan.index.total)}")

        for factor in plan.factors:
            self.console.print(self.build_table(plan, factor))

    def build_table(self, plan: SplitPlan, factor: int) -> Table:
        """Return the partition table for *factor*."""
        longest = plan.makespan(factor).total_seconds()
        table = Table(title=f"Parallelization {factor}", show_header=True, header_style="bold")
        table.add_column("Partition", justify="right")
        table.add_column("Filters", justify="right")
        table.add_column("Duration", justify="right")
        table.add_column("Share", justify="right")

        for part in plan.partitions[factor]:
            share = part.duration.total_seconds() / longest * 100 if longest else 100.0
            color = _share_color(share)
            table.add_row(
                str(part.index),
                str(len(part.keys)),
                _format_duration(part.duration),
                f"[{color}]{share:.0f}%[/{color}]",
            )
        return table


reporter = CLIReporter()
