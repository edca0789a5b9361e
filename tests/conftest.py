"""Shared fixtures for uepack tests."""

import json
from pathlib import Path

import pytest

from uepack.engine import EngineVersion, Installation


def write_engine(root: Path, major: int, minor: int, patch: int) -> Path:
    """Create a minimal engine installation (just Build.version) under root."""
    version_file = root / "Engine" / "Build" / "Build.version"
    version_file.parent.mkdir(parents=True, exist_ok=True)
    version_file.write_text(
        json.dumps(
            {
                "MajorVersion": major,
                "MinorVersion": minor,
                "PatchVersion": patch,
                "Changelist": 0,
                "BranchName": f"++UE{major}+Release-{major}.{minor}",
            }
        )
    )
    (root / "Engine" / "Build" / "BatchFiles").mkdir(parents=True, exist_ok=True)
    return root


def _installation(version: str, root: str = "/engines") -> Installation:
    """Build an Installation record without touching the disk."""
    major, minor, patch = (int(part) for part in version.split("."))
    return Installation.at(Path(root) / f"UE_{version}", EngineVersion(major, minor, patch))


@pytest.fixture
def make_install():
    """Factory for in-memory Installation records: make_install("4.26.2")."""
    return _installation


@pytest.fixture
def engine_factory(tmp_path):
    """Create engine installations inside tmp_path: engine_factory("UE_4.26", 4, 26, 2)."""

    def factory(name: str, major: int, minor: int, patch: int, parent: Path = tmp_path) -> Path:
        return write_engine(parent / name, major, minor, patch)

    return factory


@pytest.fixture
def plugin_dir(tmp_path):
    """Plugin directory with a single MyPlugin.uplugin descriptor."""
    directory = tmp_path / "MyPlugin"
    directory.mkdir()
    (directory / "MyPlugin.uplugin").write_text(
        json.dumps({"FileVersion": 3, "VersionName": "1.0", "FriendlyName": "MyPlugin"})
    )
    return directory
