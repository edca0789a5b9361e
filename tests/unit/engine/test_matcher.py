"""
Unit tests for installation matching.
"""

import pytest

from uepack.engine.matcher import find_matching_installation, resolve_installations
from uepack.engine.version import VersionSpec
from uepack.errors import ResolutionError, ValidationError


@pytest.fixture
def installs(make_install):
    return [
        make_install("4.25.0"),
        make_install("4.26.0"),
        make_install("4.26.2"),
        make_install("5.0.0"),
    ]


class TestFindMatchingInstallation:
    """Test find_matching_installation."""

    def test_highest_minor_match(self, installs):
        assert str(find_matching_installation(installs, "4.26").version) == "4.26.2"

    def test_major_only_excludes_other_majors(self, installs):
        assert str(find_matching_installation(installs, "4").version) == "4.26.2"

    def test_exact_patch(self, installs):
        assert str(find_matching_installation(installs, "4.26.0").version) == "4.26.0"

    def test_no_match(self, installs):
        assert find_matching_installation(installs, "6") is None

    def test_no_installs(self):
        assert find_matching_installation([], "4") is None

    def test_accepts_spec(self, installs):
        assert str(find_matching_installation(installs, VersionSpec(5)).version) == "5.0.0"

    def test_order_independent(self, installs):
        assert str(find_matching_installation(list(reversed(installs)), "4").version) == "4.26.2"

    def test_duplicate_versions_first_wins(self, make_install):
        first = make_install("5.0.1", root="/a")
        second = make_install("5.0.1", root="/b")

        assert find_matching_installation([first, second], "5") is first

    def test_malformed_version(self, installs):
        with pytest.raises(ValidationError):
            find_matching_installation(installs, "4.x")


class TestResolveInstallations:
    """Test resolve_installations."""

    def test_request_order_preserved(self, installs):
        resolved = resolve_installations(installs, ["5", "4.25"])

        assert [str(i.version) for i in resolved] == ["5.0.0", "4.25.0"]

    def test_unresolved_names_version_and_paths(self, installs):
        with pytest.raises(ResolutionError) as exc_info:
            resolve_installations(installs, ["4.26", "9"], ["C:/Epic Games", "D:/Engines"])

        message = str(exc_info.value)
        assert "version 9" in message
        assert "C:/Epic Games" in message
        assert "D:/Engines" in message

    def test_malformed_checked_before_resolution(self, installs):
        # Every spec is parsed before any is resolved
        with pytest.raises(ValidationError):
            resolve_installations(installs, ["9", "1.2.3.4"])
