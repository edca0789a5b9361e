"""
Packaging orchestration for uepack.

This module coordinates packaging one plugin for several engine versions:
- Installation discovery across the configured search paths
- Version resolution (every requested version, before anything is built)
- Plugin descriptor loading
- Platform filtering per installation
- RunUAT BuildPlugin invocation, one installation at a time
- Output cleanup and background archiving
"""

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import BuildSettings
from ..engine import (
    HostDetector,
    HostOS,
    Installation,
    InstallationScanner,
    TargetPlatform,
    filter_supported_platforms,
    resolve_installations,
)
from ..errors import ValidationError
from ..plugin import PluginDescriptor, load_plugin_descriptor
from .archiver import ArchiveOutcome, ArchiveQueue
from .cleaner import DirectoryCleaner
from .uat_runner import BuildRequest, BuildToolRunner


@dataclass
class PackageResult:
    """Result of packaging the plugin for one installation."""

    installation: Installation
    output_dir: Path
    platforms: List[TargetPlatform]
    build_time: float
    descriptor: Optional[PluginDescriptor] = None


def output_directory_name(descriptor: PluginDescriptor, install: Installation) -> str:
    """Name of the package directory, e.g. ``MyPlugin_5_0_1``."""
    return f"{descriptor.friendly_name}_{install.version.underscored()}"


class PackageOrchestrator:
    """
    Orchestrates packaging a plugin for several engine versions.

    Phases:
    1. Scan the search paths for installations
    2. Resolve every requested version (fail before building anything)
    3. Load the plugin descriptor
    4. Compute the buildable platforms for every installation
    5. For each installation, in request order:
       run BuildPlugin, clean the output, queue the archive

    Builds run strictly one after another. A failed build stops the
    sequence; earlier packages and their archives are kept.

    Example usage:
        orchestrator = PackageOrchestrator()
        try:
            results = orchestrator.package(settings)
        finally:
            orchestrator.wait_for_archives()
    """

    def __init__(
        self,
        scanner: Optional[InstallationScanner] = None,
        runner: Optional[BuildToolRunner] = None,
        archive_queue: Optional[ArchiveQueue] = None,
        host: Optional[HostOS] = None,
        dry_run: bool = False,
    ):
        """
        Initialize orchestrator.

        Args:
            scanner: Installation scanner (optional)
            runner: Build tool runner (default: created from settings)
            archive_queue: Queue for background archives (optional)
            host: Host OS (default: detected)
            dry_run: Log the build commands instead of running them
        """
        self.host = host or HostDetector.detect()
        self.scanner = scanner or InstallationScanner()
        self.runner = runner
        self.archive_queue = archive_queue or ArchiveQueue()
        self.dry_run = dry_run

    def resolve(self, settings: BuildSettings) -> List[Installation]:
        """Scan and resolve every requested version.

        Raises:
            ValidationError: If a version string is malformed
            ResolutionError: If a version has no matching installation
            FileSystemError: If none of the search paths could be scanned
        """
        installs = self.scanner.scan(settings.unreal_engine_paths)
        return resolve_installations(installs, settings.versions_to_install, settings.unreal_engine_paths)

    def plan(self, settings: BuildSettings) -> Tuple[Path, PluginDescriptor, List[BuildRequest]]:
        """Resolve everything needed before the first build.

        Returns:
            Tuple of (descriptor path, descriptor, build requests)

        Raises:
            ValidationError: On malformed versions, a missing descriptor, or an
                installation left with no buildable platform
            ResolutionError: If a version has no matching installation
        """
        installs = self.resolve(settings)
        plugin_file, descriptor = load_plugin_descriptor(settings.plugin_path)

        requests = []
        for install in installs:
            platforms = filter_supported_platforms(install, settings.platforms, self.host)
            if not platforms:
                requested = ", ".join(str(p) for p in settings.platforms) or "none"
                raise ValidationError(
                    f"None of the requested platforms ({requested}) can be built with "
                    f"Unreal {install.version} on this machine."
                )

            output_dir = (Path(settings.output_path) / output_directory_name(descriptor, install)).resolve()
            requests.append(BuildRequest(installation=install, platforms=platforms, output_dir=output_dir))

        return plugin_file, descriptor, requests

    def package(self, settings: BuildSettings) -> List[PackageResult]:
        """
        Package the plugin for every requested version.

        Args:
            settings: Merged build settings

        Returns:
            One PackageResult per requested version, in request order

        Raises:
            ValidationError, ResolutionError, FileSystemError: Before any build starts
            ExternalToolError: If a build fails (remaining builds are skipped)
        """
        runner = self.runner or BuildToolRunner(host=self.host, windows_toolchain=settings.windows_toolchain)
        cleaner = DirectoryCleaner(
            remove_intermediate=settings.clean_intermediate_files,
            remove_binaries=settings.clean_binary_files,
        )
        plugin_file, descriptor, requests = self.plan(settings)
        logging.info(f"Packaging '{descriptor.summary()}' for {len(requests)} engine version(s).")

        results = []
        for index, request in enumerate(requests, start=1):
            version = request.installation.version
            platforms = "+".join(str(p) for p in request.platforms)

            if self.dry_run:
                cmd = runner.build_command(request, plugin_file)
                print(f"[{index}/{len(requests)}] Would run: {subprocess.list2cmdline(cmd)}")
                results.append(
                    PackageResult(request.installation, request.output_dir, list(request.platforms), 0.0, descriptor)
                )
                continue

            print(f"[{index}/{len(requests)}] Building {version} ({platforms}) to {request.output_dir}.")
            start_time = time.time()
            runner.run(request, plugin_file)
            build_time = time.time() - start_time

            cleaner.clean(request.output_dir)

            if settings.zip_packages:
                self.archive_queue.submit(request.output_dir)

            results.append(
                PackageResult(
                    installation=request.installation,
                    output_dir=request.output_dir,
                    platforms=list(request.platforms),
                    build_time=build_time,
                    descriptor=descriptor,
                )
            )

        return results

    def wait_for_archives(self) -> List[ArchiveOutcome]:
        """Block until every queued archive is written (failures are logged)."""
        return self.archive_queue.wait()
