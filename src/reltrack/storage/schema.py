"""SQLAlchemy ORM schema for the release ledger.

Defines the single ``releases`` table. Column names match the on-disk
layout other tools read (``release``, ``commit``, ``when`` ... are quoted
by SQLAlchemy where they collide with SQL keywords).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CHAR, DateTime, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from reltrack.models.release import COMMIT_HEX_LENGTH, MAX_NAME_LENGTH, ReleaseState

STATE_LENGTH = 16


class Base(DeclarativeBase):
    """Base class for all reltrack ORM models."""

    pass


class ReleaseRow(Base):
    """A discovered release and its build state.

    Keyed by (release, branch). Rows are only ever inserted, deleted as
    part of a replace, or have their ``state`` updated by the dispatcher.
    ``built`` is reserved for an external consumer and never written here.
    """

    __tablename__ = "releases"

    release: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), primary_key=True)
    commit: Mapped[str] = mapped_column(CHAR(COMMIT_HEX_LENGTH), nullable=False)
    branch: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), primary_key=True)
    when: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    added: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    state: Mapped[str] = mapped_column(
        String(STATE_LENGTH), nullable=False, default=ReleaseState.NEW.value
    )  # "NEW", "SUCCESS", "FAILED (<code>)"
    built: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_releases_state", "state"),
    )

    def __repr__(self) -> str:
        return (
            f"ReleaseRow(release={self.release!r}, branch={self.branch!r}, "
            f"commit={self.commit[:8]!r}, state={self.state!r})"
        )
