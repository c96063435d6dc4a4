"""The release ledger.

ReleaseLedger wraps the ``releases`` table with the three operations the
tracker needs -- reconcile, pending_builds and record_outcome -- each run
in its own transaction. Any database error is rolled back and re-raised
as LedgerError carrying the failing statement.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from reltrack.exceptions import LedgerError, LedgerNotFoundError
from reltrack.models.release import (
    CandidateRelease,
    PendingBuild,
    ReconcileOutcome,
    ReleaseInfo,
    ReleaseState,
)
from reltrack.storage.engine import create_ledger_engine, create_session_factory, init_db
from reltrack.storage.schema import ReleaseRow
from reltrack.storage.sqlite import SqliteReleaseRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the ledger stores naive UTC)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _statement_of(error: SQLAlchemyError, fallback: str) -> str:
    statement = getattr(error, "statement", None)
    return statement if statement else fallback


def _to_info(row: ReleaseRow) -> ReleaseInfo:
    return ReleaseInfo(
        release=row.release,
        branch=row.branch,
        commit=row.commit,
        when=row.when,
        added=row.added,
        state=row.state,
        built=row.built,
    )


class ReleaseLedger:
    """Persistent (release, branch)-keyed record of discovered releases.

    Use :meth:`open` to create one over a SQLite file (or URL); the
    constructor accepts an existing session for tests and embedding.
    """

    def __init__(
        self,
        session: Session,
        *,
        engine: Engine | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session = session
        self._engine = engine
        self._repo = SqliteReleaseRepository(session)
        self._clock = clock
        self._closed = False

    @classmethod
    def open(
        cls,
        path: str = ":memory:",
        *,
        url: str | None = None,
        clock: Callable[[], datetime] = utcnow,
        create: bool = True,
    ) -> ReleaseLedger:
        """Open (or create) a ledger.

        Args:
            path: SQLite path.  ``":memory:"`` for in-memory (default).
            url: Full SQLAlchemy URL; overrides *path*.
            clock: Source of ``added`` timestamps.
            create: Create the SQLite file if it is missing.  Without it a
                missing file raises LedgerNotFoundError.

        Raises:
            LedgerError: if the database cannot be opened or created.
            LedgerNotFoundError: if *create* is false and there is no file.
        """
        if not create and url is None and path != ":memory:" and not os.path.exists(path):
            raise LedgerNotFoundError(path)
        engine = create_ledger_engine(path, url=url)
        try:
            init_db(engine)
        except SQLAlchemyError as e:
            engine.dispose()
            raise LedgerError(_statement_of(e, "CREATE TABLE releases"), e) from e
        session = create_session_factory(engine)()
        return cls(session, engine=engine, clock=clock)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, description: str) -> Iterator[SqliteReleaseRepository]:
        """Run a block in one transaction, committing on success.

        On a database error the transaction is rolled back and the error
        re-raised as LedgerError.
        """
        try:
            yield self._repo
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise LedgerError(_statement_of(e, description), e) from e
        except BaseException:
            self._session.rollback()
            raise

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def reconcile(self, candidate: CandidateRelease) -> ReconcileOutcome:
        """Bring the ledger in line with one discovered release.

        - No row for the key: insert it as NEW.
        - Row with the same commit: nothing changes.
        - Row with a different commit: delete it and insert the candidate
          afresh (new ``added``, state NEW).
        """
        key = f"{candidate.release}/{candidate.branch}"
        with self._transaction(f"reconcile {key}") as repo:
            existing = repo.get(candidate.release, candidate.branch)
            if existing is not None and existing.commit == candidate.commit:
                return ReconcileOutcome.UNCHANGED

            outcome = ReconcileOutcome.ADDED
            if existing is not None:
                logger.debug(
                    "replacing %s (was %s)", key, existing.commit[:8]
                )
                repo.delete(candidate.release, candidate.branch)
                outcome = ReconcileOutcome.REPLACED

            repo.save(
                ReleaseRow(
                    release=candidate.release,
                    branch=candidate.branch,
                    commit=candidate.commit,
                    when=candidate.when,
                    added=self._clock(),
                    state=ReleaseState.NEW.value,
                    built=None,
                )
            )
        logger.info(
            "added %s as %s on %s",
            candidate.short_commit, candidate.release, candidate.branch,
        )
        return outcome

    def pending_builds(self) -> list[PendingBuild]:
        """All rows still in state NEW, as (commit, branch, release)."""
        with self._transaction("select pending releases") as repo:
            rows = repo.get_by_state(ReleaseState.NEW.value)
            return [PendingBuild(r.commit, r.branch, r.release) for r in rows]

    def record_outcome(self, release: str, branch: str, state: str) -> None:
        """Set the state of (release, branch) unconditionally."""
        with self._transaction(f"update state of {release}/{branch}") as repo:
            if repo.set_state(release, branch, state) == 0:
                logger.warning(
                    "no ledger row for %s on %s; state %s not recorded",
                    release, branch, state,
                )

    def get(self, release: str, branch: str) -> ReleaseInfo | None:
        with self._transaction(f"select {release}/{branch}") as repo:
            row = repo.get(release, branch)
            return _to_info(row) if row is not None else None

    def list_releases(
        self, branch: str | None = None, *, pending_only: bool = False
    ) -> list[ReleaseInfo]:
        """List ledger rows ordered by branch, then insertion time."""
        with self._transaction("select releases") as repo:
            rows = repo.list_all(branch)
            infos = [_to_info(r) for r in rows]
        if pending_only:
            infos = [i for i in infos if i.is_pending]
        return infos

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the session and dispose the engine."""
        if self._closed:
            return
        self._closed = True
        self._session.close()
        if self._engine is not None:
            self._engine.dispose()

    def __enter__(self) -> ReleaseLedger:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()
