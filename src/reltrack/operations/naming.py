"""Release naming rules for reltrack.

Classifies tag names as release versions and validates branch names for
release-tracking. Both are pure functions over strings.
"""

from __future__ import annotations

import re

from reltrack.exceptions import InvalidBranchNameError
from reltrack.models.release import MAX_NAME_LENGTH

TAG_NAMESPACE = "refs/tags/"

# Checked in order; at most one is stripped.
_PATH_MARKERS = ("debian/", "release/")
_LETTER_MARKERS = frozenset("vVrR")

# <major>.<minor-starting-with-digit><rest>
_VERSION_RE = re.compile(r"[0-9]+\.[0-9][A-Za-z0-9\-_.~@]*", re.ASCII)
_BRANCH_RE = re.compile(r"[A-Za-z0-9\-_]+", re.ASCII)


def strip_tag_namespace(name: str) -> str:
    if name.startswith(TAG_NAMESPACE):
        return name[len(TAG_NAMESPACE):]
    return name


def strip_version_marker(name: str) -> str:
    """Remove one leading release marker (``debian/``, ``release/``, v, r)."""
    for marker in _PATH_MARKERS:
        if name.startswith(marker):
            return name[len(marker):]
    if name and name[0] in _LETTER_MARKERS:
        return name[1:]
    return name


def classify_release_tag(name: str) -> str | None:
    """Return the version a tag encodes, or None if it is not a release tag.

    Accepts ``<major>.<minor>...`` optionally prefixed with ``v``, ``r``,
    ``debian/`` or ``release/`` (and the ``refs/tags/`` namespace). The
    major component is all digits, the minor component starts with a
    digit, and the remainder may only contain letters, digits and
    ``- _ . ~ @``. Versions longer than 32 characters are rejected.

    Examples::

        classify_release_tag("refs/tags/v1.2.3")   # "1.2.3"
        classify_release_tag("debian/1.4.2-1")     # "1.4.2-1"
        classify_release_tag("v.1")                # None
    """
    version = strip_version_marker(strip_tag_namespace(name))
    if not version:
        return None
    if _VERSION_RE.fullmatch(version) is None:
        return None
    if len(version) > MAX_NAME_LENGTH:
        return None
    return version


def validate_branch_name(name: str) -> None:
    """Validate a branch name for release-tracking.

    Only flat names made of letters, digits, ``-`` and ``_`` of at most 32
    characters qualify; hierarchical names (``feature/x``) never do.

    Raises InvalidBranchNameError on violation.
    """
    if not name:
        raise InvalidBranchNameError(name, "branch name cannot be empty")

    if _BRANCH_RE.fullmatch(name) is None:
        raise InvalidBranchNameError(
            name, "branch name may only contain letters, digits, '-' and '_'"
        )

    if len(name) > MAX_NAME_LENGTH:
        raise InvalidBranchNameError(
            name, f"branch name is longer than {MAX_NAME_LENGTH} characters"
        )


def is_release_branch_name(name: str) -> bool:
    try:
        validate_branch_name(name)
    except InvalidBranchNameError:
        return False
    return True
