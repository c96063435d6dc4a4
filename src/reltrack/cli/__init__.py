"""reltrack CLI -- terminal interface for release tracking.

This module is NEVER imported from reltrack/__init__.py.
It is only loaded via the entry points defined in pyproject.toml:
``track-release``, ``list-releases`` and the ``reltrack`` group.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import click

from reltrack.cli.formatting import format_error, get_error_console

if TYPE_CHECKING:
    from collections.abc import Iterator

    from reltrack.tracker import ReleaseTracker


@click.group()
def cli() -> None:
    """reltrack: discover releases in a git repository and track their builds."""


def _tracker_config(
    repo: str | None,
    db_path: str | None,
    hook_path: str | None = None,
    *,
    dispatch_builds: bool = True,
    create_ledger: bool = True,
):
    from reltrack.models.config import TrackerConfig

    return TrackerConfig(
        repo_path=repo,
        db_path=db_path,
        hook_path=hook_path,
        dispatch_builds=dispatch_builds,
        create_ledger=create_ledger,
    )


@contextmanager
def _tracker_session(
    repo: str | None,
    db_path: str | None,
    hook_path: str | None = None,
    *,
    dispatch_builds: bool = True,
    create_ledger: bool = True,
) -> Iterator[ReleaseTracker]:
    """Context manager that opens a ReleaseTracker, yields it, and handles cleanup.

    Ensures the tracker is closed on exit and reports any exception as a
    fatal CLI error (exit status 1) on standard error. LedgerNotFoundError
    is left to the caller.
    """
    from reltrack.exceptions import LedgerError, LedgerNotFoundError
    from reltrack.tracker import ReleaseTracker

    console = get_error_console()
    try:
        tracker = ReleaseTracker.open(
            _tracker_config(
                repo,
                db_path,
                hook_path,
                dispatch_builds=dispatch_builds,
                create_ledger=create_ledger,
            )
        )
        try:
            yield tracker
        finally:
            tracker.close()
    except (SystemExit, LedgerNotFoundError):
        raise
    except LedgerError as e:
        format_error(str(e.cause), console)
        format_error(f"while executing '{e.statement}'", console)
        raise SystemExit(1) from None
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from reltrack.cli.commands.track import track_release  # noqa: E402
from reltrack.cli.commands.releases import list_releases  # noqa: E402

cli.add_command(track_release, name="track")
cli.add_command(list_releases, name="list")
