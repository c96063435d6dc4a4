"""GitPython-backed repository gateway.

Implements :class:`reltrack.protocols.RepositoryGateway` on top of a
``git.Repo``. The repository is located from an explicit path, then
``$GIT_DIR``, then by discovery upwards from the working directory.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from datetime import datetime

from git import Repo
from git.exc import (
    BadName,
    BadObject,
    GitCommandError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

from reltrack.exceptions import CommitLookupError, RepositoryOpenError
from reltrack.protocols import TagRef

logger = logging.getLogger(__name__)

_LOOKUP_ERRORS = (BadName, BadObject, ValueError, GitCommandError)


def split_config_key(key: str) -> tuple[str, str]:
    """Split a dotted config key into (section, option).

    ``release-branch.stable.track`` becomes
    ``('release-branch "stable"', 'track')``. Keys without a subsection
    (``core.bare``) map to a plain section name.
    """
    parts = key.split(".")
    if len(parts) < 2 or not parts[0] or not parts[-1]:
        raise ValueError(f"Invalid config key: {key!r}")
    section, option = parts[0], parts[-1]
    subsection = ".".join(parts[1:-1])
    if subsection:
        section = f'{section} "{subsection}"'
    return section, option


class GitRepository:
    """Repository gateway over a GitPython ``Repo``."""

    def __init__(self, repo: Repo) -> None:
        self._repo = repo

    @classmethod
    def open(cls, path: str | None = None) -> GitRepository:
        """Open a repository.

        Args:
            path: Repository path.  Falls back to ``$GIT_DIR``, then to
                discovery from the current working directory.

        Raises:
            RepositoryOpenError: if no repository can be opened.
        """
        if path is None:
            path = os.environ.get("GIT_DIR") or None
        try:
            if path is None:
                repo = Repo(os.getcwd(), search_parent_directories=True)
            else:
                repo = Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            reason = "not a git repository" if isinstance(e, InvalidGitRepositoryError) else "no such path"
            raise RepositoryOpenError(path, reason) from e
        logger.debug("Opened repository at %s", repo.git_dir)
        return cls(repo)

    @property
    def git_dir(self) -> str:
        return str(self._repo.git_dir)

    def close(self) -> None:
        self._repo.close()

    def __enter__(self) -> GitRepository:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Refs
    # ------------------------------------------------------------------

    def list_branches(self) -> list[str]:
        return [head.name for head in self._repo.heads]

    def branch_tip(self, branch: str) -> str:
        try:
            return self._repo.heads[branch].commit.hexsha
        except (IndexError, *_LOOKUP_ERRORS) as e:
            raise CommitLookupError(f"refs/heads/{branch}", str(e)) from e

    def list_tags(self) -> list[TagRef]:
        tags: list[TagRef] = []
        for tag in self._repo.tags:
            try:
                commit = tag.commit.hexsha
            except _LOOKUP_ERRORS as e:
                # Tags on trees or blobs have no commit to release.
                logger.debug("Skipping tag %s: %s", tag.path, e)
                continue
            tags.append(TagRef(name=tag.path, commit=commit))
        return tags

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------

    def committer_time(self, commit: str) -> datetime:
        try:
            # Commit objects load lazily; reading the date is the real lookup.
            return self._repo.commit(commit).committed_datetime
        except _LOOKUP_ERRORS as e:
            raise CommitLookupError(commit, str(e)) from e

    def walk(self, start: str) -> Iterator[str]:
        self.committer_time(start)
        for commit in self._repo.iter_commits(start, topo_order=True):
            yield commit.hexsha

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def config_value(self, key: str) -> str | None:
        section, option = split_config_key(key)
        with self._repo.config_reader() as reader:
            if not reader.has_option(section, option):
                return None
            return str(reader.get(section, option))
