"""Release discovery for reltrack.

Produces the candidate releases each tracked branch should have in the
ledger. Two policies exist:

- **tip**: the commit at the branch tip is a release, versioned from its
  committer time and short hash.
- **tag**: every commit reachable from the tip that carries a release tag
  is a release, versioned by the tag.

Commit-to-tag matching uses an index built from one pass over the
repository's tags, in gateway enumeration order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime
from typing import TYPE_CHECKING

from reltrack.exceptions import CommitLookupError, InvalidBranchNameError
from reltrack.models.branch import BranchPolicy, TrackingMode
from reltrack.models.config import DEFAULT_NAMESPACE
from reltrack.models.release import CandidateRelease
from reltrack.operations.naming import classify_release_tag, validate_branch_name
from reltrack.operations.policy import resolve_branch_policy

if TYPE_CHECKING:
    from reltrack.protocols import RepositoryGateway

logger = logging.getLogger(__name__)

TIP_VERSION_FORMAT = "%y%m.%d%H.%M%S-git"
SHORT_HASH_LENGTH = 8

# commit hash -> [(tag name, version), ...] in enumeration order
TagIndex = dict[str, list[tuple[str, str]]]


def wall_clock(when: datetime) -> datetime:
    """Fold a timestamp's UTC offset into its clock value and drop it.

    ``2024-03-05 14:07:09+02:00`` becomes naive ``2024-03-05 14:07:09``:
    the time as shown on the committer's clock. Naive inputs pass through.
    """
    return when.replace(tzinfo=None)


def commit_time(gateway: RepositoryGateway, commit: str) -> datetime:
    """Committer time of *commit* as a naive wall-clock datetime."""
    return wall_clock(gateway.committer_time(commit))


def tip_version(commit: str, when: datetime) -> str:
    """Synthesize the version for a tip release.

    Format is ``YYMM.DDHH.MMSS-git<hash[:8]>``; the same commit always
    yields the same version.
    """
    return when.strftime(TIP_VERSION_FORMAT) + commit[:SHORT_HASH_LENGTH]


def build_tag_index(gateway: RepositoryGateway) -> TagIndex:
    """Map commit hashes to the release tags pointing at them.

    Tags that do not classify as releases are dropped here, so lookups
    only ever see qualifying tags.
    """
    index: TagIndex = {}
    for tag in gateway.list_tags():
        version = classify_release_tag(tag.name)
        if version is None:
            continue
        index.setdefault(tag.commit, []).append((tag.name, version))
    return index


def discover_tip(gateway: RepositoryGateway, branch: str) -> list[CandidateRelease]:
    """Return the single tip release for *branch*.

    Raises CommitLookupError if the tip cannot be resolved.
    """
    commit = gateway.branch_tip(branch)
    try:
        when = commit_time(gateway, commit)
    except CommitLookupError:
        logger.warning(
            "failed to locate commit %s as tip of branch '%s'", commit, branch
        )
        raise
    return [
        CandidateRelease(
            release=tip_version(commit, when),
            branch=branch,
            commit=commit,
            when=when,
        )
    ]


def discover_tagged(
    gateway: RepositoryGateway,
    branch: str,
    tag_index: TagIndex | None = None,
) -> list[CandidateRelease]:
    """Return a release for every tagged commit in *branch*'s history.

    The history is walked topologically from the tip. A commit carrying
    several release tags contributes only the first one in the index;
    at most one release per commit per branch is produced.
    """
    if tag_index is None:
        tag_index = build_tag_index(gateway)

    tip = gateway.branch_tip(branch)
    candidates: list[CandidateRelease] = []
    for commit in gateway.walk(tip):
        tags = tag_index.get(commit)
        if not tags:
            continue
        tag_name, version = tags[0]
        if len(tags) > 1:
            logger.debug(
                "commit %s has %d release tags; using '%s'",
                commit[:SHORT_HASH_LENGTH], len(tags), tag_name,
            )
        try:
            when = commit_time(gateway, commit)
        except CommitLookupError:
            logger.warning("failed to locate commit for tag '%s'", tag_name)
            continue
        candidates.append(
            CandidateRelease(release=version, branch=branch, commit=commit, when=when)
        )
    return candidates


def discover_branch(
    gateway: RepositoryGateway,
    policy: BranchPolicy,
    *,
    tag_index: TagIndex | None = None,
) -> list[CandidateRelease]:
    """Run the discovery rule selected by *policy*.

    Branches with no supported mode produce nothing.
    """
    if policy.mode is TrackingMode.TIP:
        return discover_tip(gateway, policy.name)
    if policy.mode is TrackingMode.TAG:
        return discover_tagged(gateway, policy.name, tag_index)
    return []


def discover_releases(
    gateway: RepositoryGateway,
    *,
    namespace: str = DEFAULT_NAMESPACE,
) -> Iterator[CandidateRelease]:
    """Yield candidate releases for every tracked local branch.

    Branches are processed one at a time in gateway order. Invalid branch
    names, unsupported modes and unresolvable tips are logged and skipped.
    The tag index is built lazily, once, the first time a tag-tracked
    branch is reached.
    """
    tag_index: TagIndex | None = None

    for branch in gateway.list_branches():
        try:
            validate_branch_name(branch)
        except InvalidBranchNameError:
            logger.warning(
                "ignoring branch '%s' because its name is not valid for release-tracking",
                branch,
            )
            continue

        policy = resolve_branch_policy(gateway, branch, namespace=namespace)
        if not policy.is_configured:
            continue
        if not policy.is_supported:
            logger.warning(
                "tracking mode '%s' (for branch '%s') is not supported",
                policy.raw, branch,
            )
            continue

        if policy.mode is TrackingMode.TAG and tag_index is None:
            tag_index = build_tag_index(gateway)

        try:
            candidates = discover_branch(gateway, policy, tag_index=tag_index)
        except CommitLookupError as e:
            logger.warning("skipping branch '%s': %s", branch, e)
            continue

        logger.debug(
            "branch '%s' (%s): %d candidate release(s)",
            branch, policy.mode, len(candidates),
        )
        yield from candidates
