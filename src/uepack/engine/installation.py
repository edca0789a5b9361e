"""Discovery of installed Unreal Engine copies.

An installation is recognized by its ``Engine/Build/Build.version`` file.
A search root is either an installation itself or a directory whose
immediate subdirectories are installations (e.g. ``C:\\Program Files\\Epic Games``
containing ``UE_4.26`` and ``UE_5.0``).
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..errors import FileSystemError, ValidationError
from .version import EngineVersion

BUILD_VERSION_RELPATH = Path("Engine") / "Build" / "Build.version"
BATCH_FILES_RELPATH = Path("Engine") / "Build" / "BatchFiles"


@dataclass(frozen=True)
class Installation:
    """One engine installation found on disk."""

    version: EngineVersion
    root_path: Path
    batch_files_path: Path

    @classmethod
    def at(cls, root_path: Path, version: EngineVersion) -> "Installation":
        """Create an Installation, deriving the BatchFiles path from the root."""
        return cls(
            version=version,
            root_path=root_path,
            batch_files_path=root_path / BATCH_FILES_RELPATH,
        )


def load_installation(directory: Union[str, Path]) -> Installation:
    """Inspect a single directory for an engine installation.

    Args:
        directory: Candidate installation root

    Returns:
        Installation for the directory

    Raises:
        FileSystemError: If the version file is missing or unreadable
        ValidationError: If the version file is not a valid version document
    """
    directory = Path(directory)
    version_file = directory / BUILD_VERSION_RELPATH

    try:
        text = version_file.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise FileSystemError(f"'{directory}' is not a valid Unreal installation: {e}") from e
    except UnicodeDecodeError as e:
        raise ValidationError(f"{version_file} is not UTF-8 encoded: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Failed to parse {version_file}: {e}") from e

    return Installation.at(directory, EngineVersion.from_build_version(data))


class InstallationScanner:
    """Scans search roots for engine installations.

    Each root is scanned independently:
    1. If the root itself is an installation, it is the only result for that root
    2. Otherwise each immediate subdirectory is inspected; failures are skipped

    Example usage:
        scanner = InstallationScanner()
        installs = scanner.scan([Path("C:/Program Files/Epic Games")])
    """

    def __init__(self, max_workers: Optional[int] = None):
        """Initialize scanner.

        Args:
            max_workers: Upper bound on roots scanned at once (default: one per root)
        """
        self.max_workers = max_workers

    def scan(self, roots: Sequence[Union[str, Path]]) -> List[Installation]:
        """Find all installations under the given roots.

        Args:
            roots: Search roots

        Returns:
            Installations in root order; duplicates across roots are kept

        Raises:
            FileSystemError: If no root could be scanned at all
        """
        root_paths = [Path(root) for root in roots]
        if not root_paths:
            return []

        workers = self.max_workers or len(root_paths)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.scan_root, root) for root in root_paths]

        results: List[Installation] = []
        failures: List[FileSystemError] = []
        for root, future in zip(root_paths, futures):
            try:
                results.extend(future.result())
            except FileSystemError as e:
                logging.warning(f"Could not scan '{root}': {e}")
                failures.append(e)

        if len(failures) == len(root_paths):
            searched = ", ".join(str(root) for root in root_paths)
            raise FileSystemError(f"None of the Unreal Engine search paths could be scanned: {searched}")

        return results

    def scan_root(self, root: Path) -> List[Installation]:
        """Scan a single root.

        Args:
            root: Search root

        Returns:
            Installations found in the root

        Raises:
            FileSystemError: If the root does not exist or cannot be listed
        """
        logging.info(f"Scanning for Unreal installations in '{root}'.")

        try:
            installation = load_installation(root)
        except (FileSystemError, ValidationError):
            # Not an installation itself, treat it as a folder of installations
            pass
        else:
            logging.info(f"Found Unreal {installation.version} in '{root}'.")
            return [installation]

        try:
            entries = sorted(root.iterdir())
        except OSError as e:
            raise FileSystemError(f"Cannot list directory '{root}': {e}") from e

        found = []
        for entry in entries:
            try:
                is_dir = entry.is_dir()
            except OSError as e:
                logging.info(f"Skipping unreadable entry '{entry}': {e}")
                continue
            if not is_dir:
                logging.debug(f"Skipping non-directory '{entry}'.")
                continue

            try:
                installation = load_installation(entry)
            except (FileSystemError, ValidationError) as e:
                logging.info(f"Skipping non-Unreal installation '{entry}'.")
                logging.debug(f"  {e}")
                continue

            logging.info(f"Found Unreal {installation.version} in '{entry}'.")
            found.append(installation)

        return found
