"""Engine installation discovery, version matching and platform rules."""

from .installation import Installation, InstallationScanner, load_installation
from .matcher import find_matching_installation, resolve_installations
from .platforms import (
    HostDetector,
    HostOS,
    TargetPlatform,
    default_platforms,
    filter_supported_platforms,
    is_platform_supported,
)
from .version import EngineVersion, VersionSpec, parse_version_spec, version_at_least

__all__ = [
    "EngineVersion",
    "VersionSpec",
    "parse_version_spec",
    "version_at_least",
    "Installation",
    "InstallationScanner",
    "load_installation",
    "find_matching_installation",
    "resolve_installations",
    "TargetPlatform",
    "HostOS",
    "HostDetector",
    "default_platforms",
    "is_platform_supported",
    "filter_supported_platforms",
]
