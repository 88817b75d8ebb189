"""
Rendering functions for ghchecks output.

This module handles all pretty-printing and table formatting.
Services return data, this module makes it human-readable.
"""

from datetime import datetime
from typing import Optional, Sequence

from rich.table import Table
from rich.console import Console
from rich import box
from rich.markup import escape

from .domain import (
    CheckConclusion,
    CheckRun,
    CheckStatus,
    OverallStatus,
    RefSpec,
    RepositoryIdentity,
    StatusSummary,
)

console = Console()

CONCLUSION_GLYPHS = {
    CheckConclusion.SUCCESS: "🟢",
    CheckConclusion.FAILURE: "🔴",
    CheckConclusion.NEUTRAL: "⚪",
    CheckConclusion.CANCELLED: "❌",
    CheckConclusion.TIMED_OUT: "⌛",
    CheckConclusion.ACTION_REQUIRED: "🔧",
    CheckConclusion.SKIPPED: "⏭",
    CheckConclusion.STALE: "💤",
}

PENDING_GLYPH = "🟡"

STATE_STYLES = {
    'success': 'green',
    'failure': 'red',
    'timed_out': 'red',
    'action_required': 'red',
    'cancelled': 'dim',
    'skipped': 'dim',
    'neutral': 'dim',
    'stale': 'dim',
    'queued': 'yellow',
    'in_progress': 'yellow',
}

OVERALL_MESSAGES = {
    OverallStatus.ALL_PASSED: "[green]All checks passed[/green]",
    OverallStatus.SOME_FAILED: "[red]Some checks failed[/red]",
    OverallStatus.PENDING: "[yellow]Some checks are still running[/yellow]",
    OverallStatus.NO_RUNS: "[yellow]No check runs found[/yellow]",
}


def glyph_for(run: CheckRun) -> str:
    """Status glyph for a run: its conclusion once completed, otherwise pending."""
    if run.status == CheckStatus.COMPLETED and run.conclusion is not None:
        return CONCLUSION_GLYPHS.get(run.conclusion, run.conclusion.value)
    return PENDING_GLYPH


def format_duration(started_at: Optional[datetime], completed_at: Optional[datetime]) -> str:
    """Human duration like '1m 05s'; empty when either end is unknown."""
    if started_at is None or completed_at is None:
        return ""
    seconds = max(0, int((completed_at - started_at).total_seconds()))
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m {seconds:02d}s"
    return f"{seconds}s"


def render_summary_line(summary: StatusSummary) -> None:
    """Print the overall verdict with per-state counts."""
    message = OVERALL_MESSAGES[summary.overall]
    counts = summary.counts()
    if counts:
        details = ", ".join(f"{count} {label}" for label, count in counts.items())
        message = f"{message} [dim]({details})[/dim]"
    console.print(message)


def render_status_table(
    summary: StatusSummary,
    identity: RepositoryIdentity,
    ref: RefSpec,
    show_urls: bool = False,
) -> None:
    """
    Render check runs as a pretty table.

    Args:
        summary: Aggregated check runs
        identity: Repository they belong to
        ref: Ref they were fetched for
        show_urls: Add a column with each run's URL
    """
    console.print(f"Found {len(summary)} runs for [bold]{ref.label}[/bold] in {identity}\n")

    if summary.runs:
        table = Table(
            box=box.ROUNDED,
            show_header=True,
            header_style="bold magenta"
        )

        table.add_column("", no_wrap=True)
        table.add_column("Check", style="bold")
        table.add_column("State")
        table.add_column("Duration", style="dim", justify="right")
        if show_urls:
            table.add_column("URL", style="blue", overflow="fold")

        for run in summary.runs:
            label = run.state_label
            style = STATE_STYLES.get(label, '')
            row = [
                glyph_for(run),
                escape(run.name),
                f"[{style}]{label}[/{style}]" if style else label,
                format_duration(run.started_at, run.completed_at),
            ]
            if show_urls:
                row.append(run.url)
            table.add_row(*row)

        console.print(table)

    render_summary_line(summary)


def render_run_choices(runs: Sequence[CheckRun]) -> None:
    """Numbered list of runs for the open command's picker."""
    width = len(str(len(runs)))
    for index, run in enumerate(runs, 1):
        console.print(f"  [cyan]{index:>{width}}[/cyan]  {glyph_for(run)}  {escape(run.name)}")
