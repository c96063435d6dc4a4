"""track-release -- discover releases and dispatch pending builds."""

from __future__ import annotations

import click

from reltrack.cli.formatting import configure_logging, format_track_result, get_console


@click.command("track-release")
@click.argument("repo", required=False, default=None)
@click.option(
    "--db",
    "db_path",
    default=None,
    envvar="RELTRACK_DB",
    help="Path to the release ledger (default: $GIT_DIR/releases.sqlite3).",
)
@click.option(
    "--hook",
    "hook_path",
    default=None,
    help="Build executor to run for new releases (default: $GIT_DIR/hooks/release).",
)
@click.option("--no-build", is_flag=True, help="Update the ledger without running builds.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug diagnostics.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
def track_release(
    repo: str | None,
    db_path: str | None,
    hook_path: str | None,
    no_build: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """Record releases found in REPO and build the new ones.

    REPO defaults to $GIT_DIR, then to the repository containing the
    current directory.
    """
    from reltrack.cli import _tracker_session

    configure_logging(verbose=verbose, quiet=quiet)
    with _tracker_session(repo, db_path, hook_path, dispatch_builds=not no_build) as tracker:
        result = tracker.run()
        if not quiet:
            format_track_result(result, get_console())
