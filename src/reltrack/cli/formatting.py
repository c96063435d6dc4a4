"""Rich formatting helpers for the reltrack CLI.

Provides functions that format SDK data structures for terminal display,
plus the logging setup the commands share.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from reltrack.models.release import ReleaseInfo
    from reltrack.tracker import TrackResult


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def get_error_console() -> Console:
    """Console bound to standard error, for diagnostics and fatal errors."""
    return Console(stderr=True)


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Route reltrack's loggers to stderr through Rich.

    INFO by default, DEBUG with *verbose*, WARNING with *quiet*.
    """
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING

    handler = RichHandler(
        console=get_error_console(),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger("reltrack")
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False


def _state_style(state: str) -> str:
    if state == "NEW":
        return "cyan"
    if state == "SUCCESS":
        return "green"
    return "red"


def format_releases(releases: list[ReleaseInfo], console: Console) -> None:
    """Display ledger rows in a compact table."""
    if not releases:
        console.print("[dim]No releases.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Release", style="bold")
    table.add_column("Branch", style="magenta")
    table.add_column("Commit", style="yellow", width=8)
    table.add_column("When", style="dim")
    table.add_column("Added", style="dim")
    table.add_column("State")

    for info in releases:
        style = _state_style(info.state)
        table.add_row(
            escape(info.release),
            escape(info.branch),
            info.commit[:8],
            info.when.strftime("%Y-%m-%d %H:%M"),
            info.added.strftime("%Y-%m-%d %H:%M"),
            f"[{style}]{escape(info.state)}[/{style}]",
        )

    console.print(table)


def format_track_result(result: TrackResult, console: Console) -> None:
    """Display the summary of a tracking run."""
    if not result.discovered:
        console.print("[dim]No releases discovered.[/dim]")
    else:
        console.print(
            f"[bold]{result.discovered}[/bold] release(s) discovered: "
            f"[green]{len(result.added)} added[/green], "
            f"[yellow]{len(result.replaced)} replaced[/yellow], "
            f"[dim]{len(result.unchanged)} unchanged[/dim]",
            highlight=False,
        )
        for candidate in result.added:
            console.print(
                f"  [green]+[/green] {escape(candidate.release)} "
                f"on {escape(candidate.branch)} ({candidate.short_commit})",
                highlight=False,
            )
        for candidate in result.replaced:
            console.print(
                f"  [yellow]~[/yellow] {escape(candidate.release)} "
                f"on {escape(candidate.branch)} ({candidate.short_commit})",
                highlight=False,
            )

    if not result.dispatched:
        return
    if not result.builds:
        console.print("[dim]No pending builds.[/dim]")
        return
    for outcome in result.builds:
        style = "green" if outcome.succeeded else "red"
        console.print(
            f"  build {escape(outcome.release)} on {escape(outcome.branch)}: "
            f"[{style}]{escape(outcome.state)}[/{style}]",
            highlight=False,
        )


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
