"""Post-build cleanup of packaged plugin directories."""

import logging
import shutil
from pathlib import Path
from typing import List

from ..errors import FileSystemError

INTERMEDIATE_DIR = "Intermediate"
BINARIES_DIR = "Binaries"


class DirectoryCleaner:
    """Removes build byproducts from a packaged plugin.

    Removing binaries implies removing intermediates, since intermediate
    files are only useful next to the binaries they produced.
    """

    def __init__(self, remove_intermediate: bool = False, remove_binaries: bool = False):
        """Initialize cleaner.

        Args:
            remove_intermediate: Remove the Intermediate directory
            remove_binaries: Remove the Binaries directory (and Intermediate)
        """
        self.remove_intermediate = remove_intermediate
        self.remove_binaries = remove_binaries

    def targets(self, output_dir: Path) -> List[Path]:
        """Subdirectories that clean() would remove."""
        paths = []
        if self.remove_intermediate or self.remove_binaries:
            paths.append(Path(output_dir) / INTERMEDIATE_DIR)
        if self.remove_binaries:
            paths.append(Path(output_dir) / BINARIES_DIR)
        return paths

    def clean(self, output_dir: Path) -> List[Path]:
        """Remove configured subdirectories. Missing paths are ignored.

        Args:
            output_dir: Packaged plugin directory

        Returns:
            Paths that were actually removed

        Raises:
            FileSystemError: If an existing path cannot be removed
        """
        removed = []
        for path in self.targets(output_dir):
            if not path.exists():
                continue
            try:
                if path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path)
                else:
                    path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise FileSystemError(f"Failed to remove '{path}': {e}") from e

            logging.info(f"Removed '{path}'.")
            removed.append(path)

        return removed
