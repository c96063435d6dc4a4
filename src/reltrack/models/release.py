"""Release domain models for reltrack.

CandidateRelease is what discovery proposes; ReleaseInfo is the
SDK-facing view of a persisted ledger row. ReleaseState holds the
closed vocabulary for the ``state`` column.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import NamedTuple, Optional

from pydantic import BaseModel, Field

MAX_NAME_LENGTH = 32
COMMIT_HEX_LENGTH = 40


class ReleaseState(str, enum.Enum):
    """Ledger states with a fixed spelling.

    Failures are not a member: they embed the executor's exit code,
    see :func:`failed_state`.
    """

    NEW = "NEW"
    SUCCESS = "SUCCESS"

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


def failed_state(exit_code: int) -> str:
    """Return the ledger state recorded for a failed build."""
    return f"FAILED ({exit_code})"


class ReconcileOutcome(str, enum.Enum):
    """What a reconcile call did to the ledger."""

    ADDED = "added"
    REPLACED = "replaced"
    UNCHANGED = "unchanged"


class CandidateRelease(BaseModel):
    """A release proposed by discovery, not yet reconciled into the ledger."""

    model_config = {"frozen": True}

    release: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    branch: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    commit: str = Field(pattern=r"^[0-9a-f]{40}$")
    when: datetime

    @property
    def short_commit(self) -> str:
        return self.commit[:8]

    def __str__(self) -> str:
        return f"{self.short_commit} {self.release} ({self.branch})"


class ReleaseInfo(BaseModel):
    """SDK-facing ledger row.

    Not an ORM model -- used for data transfer only.
    """

    release: str
    branch: str
    commit: str
    when: datetime
    added: datetime
    state: str
    built: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.state == ReleaseState.NEW.value

    def __str__(self) -> str:
        return f"{self.commit[:8]} {self.release} ({self.branch}) {self.state}"


class PendingBuild(NamedTuple):
    """A ledger row still in state NEW, in executor argument order."""

    commit: str
    branch: str
    release: str


class BuildOutcome(BaseModel):
    """Result of invoking the build executor for one pending row."""

    commit: str
    branch: str
    release: str
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def state(self) -> str:
        if self.succeeded:
            return ReleaseState.SUCCESS.value
        return failed_state(self.exit_code)
