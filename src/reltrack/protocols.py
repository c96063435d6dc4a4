"""Protocol definitions for reltrack.

Defines the pluggable collaborator interfaces: the repository gateway,
the configuration source it doubles as, and the build runner.

No SQLAlchemy or GitPython imports allowed in this module -- pure
domain protocols.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class TagRef:
    """A tag as enumerated by the gateway.

    ``name`` is the fully-qualified reference name (``refs/tags/v1.0``);
    ``commit`` is the hash of the commit the tag ultimately points at.
    """

    name: str
    commit: str


@runtime_checkable
class ConfigSource(Protocol):
    """Free-form key/value configuration lookup."""

    def config_value(self, key: str) -> str | None:
        """Return the value for a dotted key, or None if unset."""
        ...


@runtime_checkable
class RepositoryGateway(ConfigSource, Protocol):
    """Read-only access to a version-controlled repository."""

    @property
    def git_dir(self) -> str:
        """Path to the repository's administrative directory."""
        ...

    def list_branches(self) -> list[str]:
        """Short names of all local branches."""
        ...

    def branch_tip(self, branch: str) -> str:
        """Commit hash the branch currently points at.

        Raises CommitLookupError if the branch cannot be resolved.
        """
        ...

    def list_tags(self) -> Sequence[TagRef]:
        """All tags in repository enumeration order."""
        ...

    def committer_time(self, commit: str) -> datetime:
        """Timezone-aware committer timestamp of a commit.

        Raises CommitLookupError if the commit does not exist.
        """
        ...

    def walk(self, start: str) -> Iterator[str]:
        """Yield every commit reachable from *start* exactly once.

        Order is topological: a commit is yielded only after all of its
        descendants that are part of the walk.
        """
        ...


@runtime_checkable
class BuildRunner(Protocol):
    """Runs the build executor and returns its exit status."""

    def __call__(self, path: str, args: Sequence[str]) -> int: ...
