"""Shared test fixtures for reltrack.

Provides in-memory SQLite engine, session, repository and ledger fixtures,
an in-memory repository gateway, and a builder for real git repositories.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session, sessionmaker

from reltrack.exceptions import CommitLookupError
from reltrack.ledger import ReleaseLedger
from reltrack.models.release import CandidateRelease
from reltrack.protocols import TagRef
from reltrack.storage.engine import create_ledger_engine, init_db
from reltrack.storage.sqlite import SqliteReleaseRepository


@pytest.fixture(autouse=True)
def _reset_reltrack_logger():
    """Undo CLI logging setup so caplog sees reltrack records in every test."""
    logger = logging.getLogger("reltrack")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def engine():
    """In-memory SQLite engine with the ledger table created."""
    eng = create_ledger_engine(":memory:")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    """Session with automatic rollback after each test."""
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    sess = SessionLocal()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def release_repo(session: Session) -> SqliteReleaseRepository:
    return SqliteReleaseRepository(session)


@pytest.fixture
def ledger() -> Iterator[ReleaseLedger]:
    """In-memory ledger with a fixed clock that advances one second per call."""
    led = ReleaseLedger.open(":memory:", clock=make_clock())
    yield led
    led.close()


# ------------------------------------------------------------------
# Shared test helpers
# ------------------------------------------------------------------

BASE_TIME = datetime(2024, 3, 5, 14, 7, 9)


def make_clock(start: datetime = BASE_TIME):
    """Deterministic clock: returns start, start+1s, start+2s, ..."""
    state = {"now": start - timedelta(seconds=1)}

    def clock() -> datetime:
        state["now"] += timedelta(seconds=1)
        return state["now"]

    return clock


def sha(label: str) -> str:
    """A stable 40-hex commit hash derived from a label."""
    return hashlib.sha1(label.encode()).hexdigest()


def make_candidate(
    release: str = "1.0",
    branch: str = "stable",
    commit: str | None = None,
    when: datetime = BASE_TIME,
) -> CandidateRelease:
    return CandidateRelease(
        release=release,
        branch=branch,
        commit=commit or sha(f"{release}-{branch}"),
        when=when,
    )


class FakeGateway:
    """In-memory RepositoryGateway.

    Commits are declared with their parents; ``walk`` performs a
    topological walk (children before parents) from the start commit.
    """

    def __init__(self, git_dir: str = "/tmp/fake.git") -> None:
        self._git_dir = git_dir
        self.branches: dict[str, str] = {}
        self.tags: list[TagRef] = []
        self.config: dict[str, str] = {}
        self.parents: dict[str, list[str]] = {}
        self.times: dict[str, datetime] = {}
        self.walks: list[str] = []

    # -- builders ------------------------------------------------------

    def add_commit(
        self,
        label: str,
        *parents: str,
        when: datetime | None = None,
    ) -> str:
        commit = sha(label)
        self.parents[commit] = [sha(p) for p in parents]
        self.times[commit] = when or datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(
            hours=len(self.parents)
        )
        return commit

    def set_branch(self, name: str, label: str) -> None:
        self.branches[name] = sha(label)

    def add_tag(self, name: str, label: str) -> None:
        if not name.startswith("refs/"):
            name = f"refs/tags/{name}"
        self.tags.append(TagRef(name=name, commit=sha(label)))

    def track(self, branch: str, mode: str) -> None:
        self.config[f"release-branch.{branch}.track"] = mode

    # -- RepositoryGateway --------------------------------------------

    @property
    def git_dir(self) -> str:
        return self._git_dir

    def list_branches(self) -> list[str]:
        return list(self.branches)

    def branch_tip(self, branch: str) -> str:
        try:
            return self.branches[branch]
        except KeyError:
            raise CommitLookupError(f"refs/heads/{branch}") from None

    def list_tags(self) -> list[TagRef]:
        return list(self.tags)

    def committer_time(self, commit: str) -> datetime:
        try:
            return self.times[commit]
        except KeyError:
            raise CommitLookupError(commit) from None

    def walk(self, start: str) -> Iterator[str]:
        self.walks.append(start)
        reachable: set[str] = set()
        stack = [start]
        while stack:
            current = stack.pop()
            if current in reachable:
                continue
            reachable.add(current)
            stack.extend(self.parents.get(current, []))

        pending_children = {c: 0 for c in reachable}
        for c in reachable:
            for p in self.parents.get(c, []):
                if p in pending_children:
                    pending_children[p] += 1

        ready = [start]
        while ready:
            current = ready.pop(0)
            yield current
            for p in self.parents.get(current, []):
                if p not in pending_children:
                    continue
                pending_children[p] -= 1
                if pending_children[p] == 0:
                    ready.append(p)

    def config_value(self, key: str) -> str | None:
        return self.config.get(key)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


# ------------------------------------------------------------------
# Real git repositories (GitPython)
# ------------------------------------------------------------------


def git_date(when: datetime) -> str:
    """Format an aware datetime in git's internal ``<epoch> <+HHMM>`` form."""
    minutes = int(when.utcoffset().total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{int(when.timestamp())} {sign}{minutes // 60:02d}{minutes % 60:02d}"


class GitRepoBuilder:
    """Builds a small real repository for integration tests."""

    def __init__(self, path) -> None:
        from git import Actor, Repo

        self.path = path
        self.repo = Repo.init(path)
        self.repo.git.symbolic_ref("HEAD", "refs/heads/master")
        with self.repo.config_writer() as cw:
            cw.set_value("user", "name", "Release Bot")
            cw.set_value("user", "email", "bot@example.com")
        self.actor = Actor("Release Bot", "bot@example.com")
        self._counter = 0

    def commit(self, message: str, when: datetime = BASE_TIME.replace(tzinfo=timezone.utc)) -> str:
        self._counter += 1
        f = self.path / f"file{self._counter}.txt"
        f.write_text(message)
        self.repo.index.add([str(f)])
        date = git_date(when)
        c = self.repo.index.commit(
            message,
            author=self.actor,
            committer=self.actor,
            author_date=date,
            commit_date=date,
        )
        return c.hexsha

    def tag(self, name: str, ref: str = "HEAD", *, annotated: bool = False) -> None:
        if annotated:
            self.repo.create_tag(name, ref=ref, message=f"Release {name}")
        else:
            self.repo.create_tag(name, ref=ref)

    def branch(self, name: str, ref: str = "HEAD") -> None:
        self.repo.create_head(name, ref)

    def track(self, branch: str, mode: str) -> None:
        with self.repo.config_writer() as cw:
            cw.set_value(f'release-branch "{branch}"', "track", mode)

    def install_hook(self, script: str) -> str:
        hooks = self.path / ".git" / "hooks"
        hooks.mkdir(parents=True, exist_ok=True)
        hook = hooks / "release"
        hook.write_text("#!/bin/sh\n" + script + "\n")
        hook.chmod(0o755)
        return str(hook)


@pytest.fixture
def git_repo(tmp_path) -> Iterator[GitRepoBuilder]:
    builder = GitRepoBuilder(tmp_path / "repo")
    yield builder
    builder.repo.close()
