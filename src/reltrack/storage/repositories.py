"""Abstract repository interface for ledger storage.

No SQLAlchemy imports here -- pure abstract contract.

The concrete implementation is in sqlite.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from reltrack.storage.schema import ReleaseRow


class ReleaseRepository(ABC):
    """Abstract interface for release ledger rows.

    Implementations flush but never commit; transaction boundaries belong
    to the caller.
    """

    @abstractmethod
    def get(self, release: str, branch: str) -> ReleaseRow | None:
        """Get the row for (release, branch). Returns None if not found."""
        ...

    @abstractmethod
    def save(self, row: ReleaseRow) -> None:
        """Insert a new row."""
        ...

    @abstractmethod
    def delete(self, release: str, branch: str) -> bool:
        """Delete the row for (release, branch).

        Returns True if a row was deleted.
        """
        ...

    @abstractmethod
    def get_by_state(self, state: str) -> Sequence[ReleaseRow]:
        """Get all rows in a given state, oldest ``added`` first."""
        ...

    @abstractmethod
    def set_state(self, release: str, branch: str, state: str) -> int:
        """Set the state of (release, branch). Returns rows affected."""
        ...

    @abstractmethod
    def list_all(self, branch: str | None = None) -> Sequence[ReleaseRow]:
        """List rows, optionally for one branch, ordered by branch then added."""
        ...
