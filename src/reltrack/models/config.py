"""Configuration models for reltrack.

TrackerConfig holds the per-run settings resolved by the CLI (or passed
directly by SDK callers).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

DEFAULT_LEDGER_NAME = "releases.sqlite3"
DEFAULT_HOOK_RELPATH = "hooks/release"
DEFAULT_NAMESPACE = "release-branch"


class TrackerConfig(BaseModel):
    """Per-run tracker configuration.

    Unset paths are derived from the repository's git directory once it
    has been opened: the ledger lives at ``$GIT_DIR/releases.sqlite3`` and
    the build executor at ``$GIT_DIR/hooks/release``.
    """

    repo_path: Optional[str] = None  # None = $GIT_DIR, then discovery
    db_path: Optional[str] = None
    db_url: Optional[str] = None
    hook_path: Optional[str] = None
    namespace: str = DEFAULT_NAMESPACE
    dispatch_builds: bool = True
    create_ledger: bool = True  # False for read-only viewers
