"""Package archiving.

This module zips packaged plugin directories. Archives are written next to
the directory they compress (``Packages/Foo_5_0_1`` -> ``Packages/Foo_5_0_1.zip``).

Archiving runs in the background through ArchiveQueue so the next build can
start right away; the queue must be waited on before the process exits.
"""

import logging
import os
import zipfile
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from tqdm import tqdm

from ..errors import ExternalToolError


class ArchiveError(ExternalToolError):
    """Raised when an archive cannot be created."""

    pass


@dataclass
class ArchiveOutcome:
    """Result of one background archive task."""

    directory: Path
    archive_path: Optional[Path]
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class PackageArchiver:
    """Compresses a directory into a sibling .zip file."""

    def __init__(self, show_progress: bool = True):
        """Initialize archiver.

        Args:
            show_progress: Whether to show a progress bar per archive
        """
        self.show_progress = show_progress

    @staticmethod
    def archive_path_for(directory: Path) -> Path:
        """Archive location for a directory: same parent, same name, .zip."""
        directory = Path(directory)
        return directory.parent / f"{directory.name}.zip"

    @staticmethod
    def _collect_files(directory: Path) -> List[Tuple[Path, str]]:
        files = []
        for dirpath, dirnames, filenames in os.walk(directory):
            dirnames.sort()
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                files.append((path, path.relative_to(directory).as_posix()))
        return files

    def archive(self, directory: Path) -> Path:
        """Zip a directory.

        Entries are stored relative to the directory. An existing archive
        is replaced.

        Args:
            directory: Directory to compress

        Returns:
            Path to the created archive

        Raises:
            ArchiveError: If the directory is missing or the archive cannot be written
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ArchiveError(f"Cannot archive '{directory}': not a directory")

        archive_path = self.archive_path_for(directory)
        temp_path = archive_path.with_suffix(".zip.tmp")

        try:
            files = self._collect_files(directory)
            progress_bar = None
            if self.show_progress:
                progress_bar = tqdm(total=len(files), unit="file", desc=f"Zipping {directory.name}", leave=False)

            try:
                with zipfile.ZipFile(temp_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                    for path, arcname in files:
                        zf.write(path, arcname)
                        if progress_bar:
                            progress_bar.update(1)
            finally:
                if progress_bar:
                    progress_bar.close()

            temp_path.replace(archive_path)

        except (OSError, zipfile.BadZipFile, ValueError) as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ArchiveError(f"Failed to archive '{directory}': {e}") from e

        size = archive_path.stat().st_size
        logging.info(f"Created {archive_path.name}: {size:,} bytes ({size / 1024 / 1024:.2f} MB)")
        return archive_path


class ArchiveQueue:
    """Runs archive tasks in the background and collects their outcomes.

    Example usage:
        queue = ArchiveQueue(PackageArchiver())
        queue.submit(Path("Packages/Foo_5_0_1"))
        ...
        outcomes = queue.wait()
    """

    def __init__(self, archiver: Optional[PackageArchiver] = None, max_workers: int = 2):
        """Initialize queue.

        Args:
            archiver: Archiver used by every task
            max_workers: Archives compressed at the same time
        """
        self.archiver = archiver or PackageArchiver()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="archive")
        self._pending: List[Tuple[Path, Future]] = []

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def submit(self, directory: Path) -> None:
        """Schedule a directory for archiving without waiting for it."""
        logging.info(f"Archiving '{directory}' in the background.")
        future = self._executor.submit(self.archiver.archive, Path(directory))
        self._pending.append((Path(directory), future))

    def wait(self) -> List[ArchiveOutcome]:
        """Wait for every submitted task.

        Failures are logged as warnings and reported in the outcomes, never raised.

        Returns:
            One outcome per submitted task, in submission order
        """
        outcomes = []
        for directory, future in self._pending:
            try:
                archive_path = future.result()
            except ExternalToolError as e:
                logging.warning(f"Failed to archive '{directory}': {e}")
                outcomes.append(ArchiveOutcome(directory=directory, archive_path=None, error=str(e)))
            else:
                outcomes.append(ArchiveOutcome(directory=directory, archive_path=archive_path))

        self._pending = []
        self._executor.shutdown(wait=True)
        return outcomes
