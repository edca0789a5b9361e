"""Selection of the best installation for a requested version."""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from ..errors import ResolutionError
from .installation import Installation
from .version import VersionSpec, as_version_spec


def find_matching_installation(
    installs: Iterable[Installation],
    version: Union[str, VersionSpec],
) -> Optional[Installation]:
    """Get the newest installation that satisfies a version spec.

    Args:
        installs: Scanned installations
        version: Version spec or version string (e.g. "4.26")

    Returns:
        Matching installation with the highest version, or None if nothing matches.
        When several installations share the highest version, the first one wins.

    Raises:
        ValidationError: If a version string is malformed
    """
    spec = as_version_spec(version)

    best: Optional[Installation] = None
    for install in installs:
        if not spec.matches(install.version):
            continue
        if best is None or install.version > best.version:
            best = install

    return best


def resolve_installations(
    installs: Sequence[Installation],
    versions: Sequence[Union[str, VersionSpec]],
    search_paths: Sequence[Union[str, Path]] = (),
) -> List[Installation]:
    """Resolve every requested version, in request order.

    Args:
        installs: Scanned installations
        versions: Requested version specs
        search_paths: Searched roots, reported in the error message

    Returns:
        One installation per requested version

    Raises:
        ValidationError: If a version string is malformed
        ResolutionError: If any version has no matching installation
    """
    specs = [as_version_spec(version) for version in versions]

    resolved = []
    for spec in specs:
        install = find_matching_installation(installs, spec)
        if install is None:
            searched = ", ".join(str(p) for p in search_paths) or "none"
            raise ResolutionError(
                f"Failed to find Unreal installation for version {spec} in any of your "
                f"Unreal Engine paths ({searched}). Make sure this version is installed "
                "or remove it from your version list."
            )
        resolved.append(install)

    return resolved
