"""SQLite implementation of the ledger repository interface.

Uses SQLAlchemy 2.0-style queries (select() + session.execute()).
The repository takes a Session in its constructor.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from reltrack.storage.repositories import ReleaseRepository
from reltrack.storage.schema import ReleaseRow


class SqliteReleaseRepository(ReleaseRepository):
    """SQLite implementation of the release repository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, release: str, branch: str) -> ReleaseRow | None:
        stmt = select(ReleaseRow).where(
            ReleaseRow.release == release, ReleaseRow.branch == branch
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def save(self, row: ReleaseRow) -> None:
        self._session.add(row)
        self._session.flush()

    def delete(self, release: str, branch: str) -> bool:
        row = self.get(release, branch)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def get_by_state(self, state: str) -> Sequence[ReleaseRow]:
        stmt = (
            select(ReleaseRow)
            .where(ReleaseRow.state == state)
            .order_by(ReleaseRow.added, ReleaseRow.branch, ReleaseRow.release)
        )
        return list(self._session.execute(stmt).scalars().all())

    def set_state(self, release: str, branch: str, state: str) -> int:
        row = self.get(release, branch)
        if row is None:
            return 0
        row.state = state
        self._session.flush()
        return 1

    def list_all(self, branch: str | None = None) -> Sequence[ReleaseRow]:
        stmt = select(ReleaseRow)
        if branch is not None:
            stmt = stmt.where(ReleaseRow.branch == branch)
        stmt = stmt.order_by(ReleaseRow.branch, ReleaseRow.added, ReleaseRow.release)
        return list(self._session.execute(stmt).scalars().all())
