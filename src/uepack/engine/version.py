"""Engine version types and version-spec parsing.

A version spec is what the user types (``"4"``, ``"4.26"``, ``"4.26.1"``).
An engine version is what an installation reports in its Build.version file.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..errors import ValidationError


@dataclass(frozen=True, order=True)
class EngineVersion:
    """Concrete three-part engine version, ordered by (major, minor, patch)."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def underscored(self) -> str:
        """Render as ``M_m_p`` for use in directory names."""
        return f"{self.major}_{self.minor}_{self.patch}"

    @classmethod
    def from_build_version(cls, data: Dict[str, Any]) -> "EngineVersion":
        """Create an EngineVersion from a parsed Build.version document.

        Args:
            data: Parsed JSON object with MajorVersion, MinorVersion, PatchVersion

        Returns:
            EngineVersion instance

        Raises:
            ValidationError: If a field is missing or not a non-negative integer
        """
        if not isinstance(data, dict):
            raise ValidationError("Build.version must contain a JSON object")

        values = []
        for key in ("MajorVersion", "MinorVersion", "PatchVersion"):
            value = data.get(key)
            # bool is an int subclass, reject it explicitly
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationError(f"Invalid or missing '{key}' in Build.version: {value!r}")
            values.append(value)

        return cls(*values)


@dataclass(frozen=True)
class VersionSpec:
    """Partial version selector.

    Absent fields match anything. A field is only present when every
    more-significant field is present.
    """

    major: int
    minor: Optional[int] = None
    patch: Optional[int] = None

    def __post_init__(self) -> None:
        if self.patch is not None and self.minor is None:
            raise ValidationError("A version spec with a patch number must also have a minor number")
        for value in (self.major, self.minor, self.patch):
            if value is not None and value < 0:
                raise ValidationError(f"Version numbers must be non-negative: {value}")

    def __str__(self) -> str:
        parts = [self.major, self.minor, self.patch]
        return ".".join(str(p) for p in parts if p is not None)

    def matches(self, version: EngineVersion) -> bool:
        """Check whether a concrete version satisfies this spec."""
        return (
            version.major == self.major
            and (self.minor is None or version.minor == self.minor)
            and (self.patch is None or version.patch == self.patch)
        )


def _is_integer_token(token: str) -> bool:
    # isdigit() alone accepts characters like superscripts
    return token.isascii() and token.isdigit()


def parse_version_spec(version: str) -> VersionSpec:
    """Parse a user-supplied version string into a VersionSpec.

    Args:
        version: One to three dot-separated non-negative integers

    Returns:
        VersionSpec with trailing components absent when not given

    Raises:
        ValidationError: If the string is empty, has more than three parts,
            or contains a part that is not a non-negative integer

    Example:
        parse_version_spec("4.26")  # VersionSpec(major=4, minor=26, patch=None)
    """
    text = version.strip()
    if not text:
        raise ValidationError(f"Invalid version format: '{version}' (empty)")

    tokens = text.split(".")
    if len(tokens) > 3:
        raise ValidationError(f"Invalid version format: '{version}' (expected at most 3 parts)")

    if not all(_is_integer_token(token) for token in tokens):
        raise ValidationError(f"Invalid version format: '{version}' (parts must be non-negative integers)")

    numbers = [int(token) for token in tokens]
    return VersionSpec(
        major=numbers[0],
        minor=numbers[1] if len(numbers) > 1 else None,
        patch=numbers[2] if len(numbers) > 2 else None,
    )


def as_version_spec(version: Union[str, VersionSpec]) -> VersionSpec:
    """Accept either a version string or an already parsed spec."""
    if isinstance(version, VersionSpec):
        return version
    return parse_version_spec(version)


def version_at_least(installed: EngineVersion, required: VersionSpec) -> bool:
    """Check that an installed version is greater than or equal to a required one.

    Comparison runs major, then minor, then patch. An absent required field
    accepts anything at that level and below.

    Args:
        installed: Version of the installation
        required: Minimum version

    Returns:
        True if installed >= required
    """
    if installed.major != required.major:
        return installed.major > required.major

    if required.minor is None:
        return True
    if installed.minor != required.minor:
        return installed.minor > required.minor

    if required.patch is None:
        return True
    return installed.patch >= required.patch
