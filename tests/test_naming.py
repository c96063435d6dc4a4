"""Tests for release naming rules.

Covers:
- classify_release_tag accepted and rejected forms
- marker and namespace stripping
- the 32-character cap
- validate_branch_name / is_release_branch_name
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from reltrack.exceptions import InvalidBranchNameError
from reltrack.operations.naming import (
    classify_release_tag,
    is_release_branch_name,
    strip_tag_namespace,
    strip_version_marker,
    validate_branch_name,
)
from tests.strategies import branch_names, forbidden_branch_chars, release_tags


class TestClassifyReleaseTag:
    @pytest.mark.parametrize(
        "tag, expected",
        [
            ("v1.2.3", "1.2.3"),
            ("release/2.0-rc1", "2.0-rc1"),
            ("debian/1.4.2-1", "1.4.2-1"),
            ("1.0", "1.0"),
            ("refs/tags/v1.2.3", "1.2.3"),
            ("V10.04", "10.04"),
            ("r3.1~beta", "3.1~beta"),
            ("R3.1", "3.1"),
            ("2.6.32@stable_1", "2.6.32@stable_1"),
            ("refs/tags/debian/0.9-2", "0.9-2"),
        ],
    )
    def test_accepts_release_tags(self, tag, expected):
        assert classify_release_tag(tag) == expected

    @pytest.mark.parametrize(
        "tag",
        [
            "foo",
            "v.1",
            "a" * 40,
            "",
            "v",
            "refs/tags/",
            "debian/",
            "1",
            "1.",
            "1.x",
            ".1.0",
            "x1.0",
            "vv1.0",
            "1.0+build",
            "1.0 beta",
            "1.0/2",
            "release-1.0",
            "Debian/1.0",
        ],
    )
    def test_rejects_non_release_tags(self, tag):
        assert classify_release_tag(tag) is None

    def test_only_one_marker_is_stripped(self):
        assert classify_release_tag("vr1.0") is None
        assert classify_release_tag("release/v1.0") is None

    def test_length_limit_applies_after_stripping(self):
        version = "1." + "0" * 30  # exactly 32 characters
        assert len(version) == 32
        assert classify_release_tag(f"refs/tags/release/{version}") == version
        assert classify_release_tag(version + "1") is None

    def test_non_ascii_digits_rejected(self):
        assert classify_release_tag("١.0") is None
        assert classify_release_tag("1.٠") is None

    @given(release_tags)
    def test_generated_release_tags_classify(self, tag_and_version):
        tag, version = tag_and_version
        assert classify_release_tag(tag) == version

    @given(st.text(alphabet="abcdefghijklmnopqrstuwxyz_-", min_size=1, max_size=40))
    def test_dotless_names_never_classify(self, name):
        assert classify_release_tag(name) is None


class TestStripping:
    def test_namespace(self):
        assert strip_tag_namespace("refs/tags/v1.0") == "v1.0"
        assert strip_tag_namespace("v1.0") == "v1.0"
        assert strip_tag_namespace("refs/heads/v1.0") == "refs/heads/v1.0"

    def test_path_markers_win_over_letters(self):
        assert strip_version_marker("release/1.0") == "1.0"
        assert strip_version_marker("debian/1.0") == "1.0"
        assert strip_version_marker("r1.0") == "1.0"
        assert strip_version_marker("1.0") == "1.0"
        assert strip_version_marker("") == ""


class TestValidateBranchName:
    @pytest.mark.parametrize("name", ["master", "stable", "release-2_x", "A1", "x" * 32])
    def test_valid(self, name):
        validate_branch_name(name)
        assert is_release_branch_name(name)

    @pytest.mark.parametrize(
        "name, reason",
        [
            ("", "empty"),
            ("feature/x", "letters, digits"),
            ("v1.0", "letters, digits"),
            ("has space", "letters, digits"),
            ("x" * 33, "longer than 32"),
            ("café", "letters, digits"),
        ],
    )
    def test_invalid(self, name, reason):
        with pytest.raises(InvalidBranchNameError) as exc_info:
            validate_branch_name(name)
        assert reason in exc_info.value.reason
        assert exc_info.value.name == name
        assert not is_release_branch_name(name)

    @given(branch_names)
    def test_generated_names_valid(self, name):
        assert is_release_branch_name(name)

    @given(branch_names, forbidden_branch_chars, st.integers(min_value=0, max_value=32))
    def test_any_punctuation_rejects(self, name, bad, pos):
        pos = min(pos, len(name))
        assert not is_release_branch_name(name[:pos] + bad + name[pos:])
