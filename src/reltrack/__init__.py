"""reltrack: release discovery and build ledger for git repositories.

Walks tracked branches, decides which commits are releases, and keeps an
idempotent SQLite ledger so a build hook runs exactly once per release.
"""

from reltrack._version import __version__

# Core entry point
from reltrack.tracker import ReleaseTracker, TrackResult

# Ledger
from reltrack.ledger import ReleaseLedger

# Models
from reltrack.models.branch import BranchPolicy, TrackingMode
from reltrack.models.config import TrackerConfig
from reltrack.models.release import (
    BuildOutcome,
    CandidateRelease,
    PendingBuild,
    ReconcileOutcome,
    ReleaseInfo,
    ReleaseState,
    failed_state,
)

# Operations
from reltrack.operations.naming import (
    classify_release_tag,
    is_release_branch_name,
    validate_branch_name,
)
from reltrack.operations.policy import policy_key, resolve_branch_policy
from reltrack.operations.discovery import (
    build_tag_index,
    discover_branch,
    discover_releases,
    discover_tagged,
    discover_tip,
    tip_version,
)
from reltrack.operations.dispatch import BuildDispatcher, executor_available, run_build_executor

# Gateway and protocols
from reltrack.gateway import GitRepository
from reltrack.protocols import BuildRunner, ConfigSource, RepositoryGateway, TagRef

# Exceptions
from reltrack.exceptions import (
    CommitLookupError,
    InvalidBranchNameError,
    LedgerError,
    LedgerNotFoundError,
    ReleaseTrackError,
    RepositoryOpenError,
)

__all__ = [
    "__version__",
    "ReleaseTracker",
    "TrackResult",
    "ReleaseLedger",
    "BranchPolicy",
    "TrackingMode",
    "TrackerConfig",
    "BuildOutcome",
    "CandidateRelease",
    "PendingBuild",
    "ReconcileOutcome",
    "ReleaseInfo",
    "ReleaseState",
    "failed_state",
    "classify_release_tag",
    "is_release_branch_name",
    "validate_branch_name",
    "policy_key",
    "resolve_branch_policy",
    "build_tag_index",
    "discover_branch",
    "discover_releases",
    "discover_tagged",
    "discover_tip",
    "tip_version",
    "BuildDispatcher",
    "executor_available",
    "run_build_executor",
    "GitRepository",
    "BuildRunner",
    "ConfigSource",
    "RepositoryGateway",
    "TagRef",
    "CommitLookupError",
    "InvalidBranchNameError",
    "LedgerError",
    "LedgerNotFoundError",
    "ReleaseTrackError",
    "RepositoryOpenError",
]
