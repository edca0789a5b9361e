"""Target platforms and host compatibility rules.

Which target platforms an installation can build depends on the host
operating system:

    - Windows: Win64, and Android for engine 4.25.0 and newer
    - macOS:   Mac, IOS
    - Linux:   Linux
"""

import platform
from enum import Enum
from typing import Iterable, List, Optional

from ..errors import ValidationError
from .installation import Installation
from .version import VersionSpec, version_at_least

ANDROID_MIN_VERSION = VersionSpec(major=4, minor=25, patch=0)


class TargetPlatform(str, Enum):
    """Platforms a plugin package can be built for.

    Values are the names the build tool expects on its command line.
    """

    WIN64 = "Win64"
    IOS = "IOS"
    ANDROID = "Android"
    MAC = "Mac"
    LINUX = "Linux"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> "TargetPlatform":
        """Parse a platform name, case-insensitively.

        Raises:
            ValidationError: If the name is not a known platform
        """
        wanted = name.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member

        known = ", ".join(member.value for member in cls)
        raise ValidationError(f"Unknown platform '{name}'. Expected one of: {known}")


class HostOS(str, Enum):
    """Operating system the tool is running on."""

    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    OTHER = "other"


class HostDetector:
    """Detects the host operating system."""

    @staticmethod
    def detect() -> HostOS:
        """Detect the current host.

        Returns:
            HostOS for platform.system(); unknown systems map to OTHER
        """
        system = platform.system().lower()

        if system == "windows":
            return HostOS.WINDOWS
        elif system == "darwin":
            return HostOS.MACOS
        elif system == "linux":
            return HostOS.LINUX
        else:
            return HostOS.OTHER


def default_platforms(host: HostOS) -> List[TargetPlatform]:
    """Platform to build when none is configured: the host's own desktop platform."""
    if host == HostOS.WINDOWS:
        return [TargetPlatform.WIN64]
    elif host == HostOS.MACOS:
        return [TargetPlatform.MAC]
    elif host == HostOS.LINUX:
        return [TargetPlatform.LINUX]
    return []


def is_platform_supported(
    install: Installation,
    target: TargetPlatform,
    host: Optional[HostOS] = None,
) -> bool:
    """Check if a platform can be built on this host with the given installation.

    Args:
        install: Engine installation
        target: Platform to build
        host: Host OS (default: detected)

    Returns:
        True if the platform is buildable
    """
    host = host or HostDetector.detect()

    if host == HostOS.WINDOWS:
        if target == TargetPlatform.WIN64:
            return True
        return target == TargetPlatform.ANDROID and version_at_least(install.version, ANDROID_MIN_VERSION)
    elif host == HostOS.MACOS:
        return target in (TargetPlatform.MAC, TargetPlatform.IOS)
    elif host == HostOS.LINUX:
        return target == TargetPlatform.LINUX

    return False


def filter_supported_platforms(
    install: Installation,
    targets: Iterable[TargetPlatform],
    host: Optional[HostOS] = None,
) -> List[TargetPlatform]:
    """Keep the buildable platforms, in request order, without duplicates."""
    host = host or HostDetector.detect()

    result: List[TargetPlatform] = []
    for target in targets:
        if target in result:
            continue
        if is_platform_supported(install, target, host):
            result.append(target)
    return result
