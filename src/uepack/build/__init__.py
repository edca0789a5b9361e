"""
Build components for uepack.

This module provides the packaging pipeline including:
- RunUAT BuildPlugin invocation
- Package cleanup (Intermediate / Binaries)
- Background archiving of finished packages
- Orchestration across engine versions
"""

from .archiver import ArchiveError, ArchiveOutcome, ArchiveQueue, PackageArchiver
from .cleaner import DirectoryCleaner
from .orchestrator import PackageOrchestrator, PackageResult, output_directory_name
from .uat_runner import BuildRequest, BuildToolRunner, kill_process_tree

__all__ = [
    "ArchiveError",
    "ArchiveOutcome",
    "ArchiveQueue",
    "PackageArchiver",
    "DirectoryCleaner",
    "PackageOrchestrator",
    "PackageResult",
    "output_directory_name",
    "BuildRequest",
    "BuildToolRunner",
    "kill_process_tree",
]
