"""Branch domain models for reltrack.

TrackingMode is the per-branch release policy; BranchPolicy is the
resolved view of one branch's configuration.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel


class TrackingMode(str, enum.Enum):
    """How releases are discovered on a branch."""

    TIP = "tip"
    TAG = "tag"

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class BranchPolicy(BaseModel):
    """Resolved release-tracking policy for a single branch.

    Recomputed from configuration on every run; never persisted.
    ``mode`` is None both when the branch has no configuration and when the
    configured value is unsupported -- ``raw`` tells the two apart.
    """

    name: str
    mode: Optional[TrackingMode] = None
    raw: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return self.raw is not None

    @property
    def is_supported(self) -> bool:
        return self.mode is not None
