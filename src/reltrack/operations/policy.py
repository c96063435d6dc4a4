"""Branch policy resolution for reltrack.

Reads ``<namespace>.<branch>.track`` from a configuration source and maps
it onto a TrackingMode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reltrack.models.branch import BranchPolicy, TrackingMode
from reltrack.models.config import DEFAULT_NAMESPACE

if TYPE_CHECKING:
    from reltrack.protocols import ConfigSource

TRACK_ATTRIBUTE = "track"


def policy_key(branch: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Configuration key holding a branch's tracking mode."""
    return f"{namespace}.{branch}.{TRACK_ATTRIBUTE}"


def parse_tracking_mode(value: str) -> TrackingMode | None:
    """Map a configured value to a TrackingMode, None if unsupported."""
    try:
        return TrackingMode(value)
    except ValueError:
        return None


def resolve_branch_policy(
    config: ConfigSource,
    branch: str,
    *,
    namespace: str = DEFAULT_NAMESPACE,
) -> BranchPolicy:
    """Look up the tracking policy for *branch*.

    Returns a BranchPolicy whose ``raw`` is None when nothing is
    configured. Unsupported values keep ``raw`` but leave ``mode`` unset;
    reporting them is the caller's concern.
    """
    raw = config.config_value(policy_key(branch, namespace))
    if raw is None:
        return BranchPolicy(name=branch)
    return BranchPolicy(name=branch, mode=parse_tracking_mode(raw), raw=raw)
