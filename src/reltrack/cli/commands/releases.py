"""list-releases -- show the release ledger."""

from __future__ import annotations

import click

from reltrack.cli.formatting import format_releases, get_console


@click.command("list-releases")
@click.argument("repo", required=False, default=None)
@click.option(
    "--db",
    "db_path",
    default=None,
    envvar="RELTRACK_DB",
    help="Path to the release ledger (default: $GIT_DIR/releases.sqlite3).",
)
@click.option("-b", "--branch", default=None, help="Only show releases on this branch.")
@click.option("--pending", is_flag=True, help="Only show releases not yet built.")
def list_releases(
    repo: str | None, db_path: str | None, branch: str | None, pending: bool
) -> None:
    """Show the releases recorded for REPO.

    A repository that has never been tracked has no ledger; nothing is
    created for it.
    """
    from reltrack.cli import _tracker_session
    from reltrack.exceptions import LedgerNotFoundError

    try:
        with _tracker_session(
            repo, db_path, dispatch_builds=False, create_ledger=False
        ) as tracker:
            releases = tracker.ledger.list_releases(branch, pending_only=pending)
    except LedgerNotFoundError:
        releases = []
    format_releases(releases, get_console())
