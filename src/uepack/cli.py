"""
Command-line interface for uepack.

This module provides the `uepack` CLI tool for packaging an Unreal Engine
plugin against several installed engine versions.
"""

import argparse
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from uepack.build import PackageOrchestrator
from uepack.cli_utils import BannerFormatter, ErrorFormatter, setup_logging
from uepack.config import resolve_settings
from uepack.engine import InstallationScanner
from uepack.errors import UEPackError

VERSION = "0.1.0"


@dataclass
class PackageArgs:
    """Arguments for a packaging run. None means "not given on the command line"."""

    plugin_path: Optional[Path] = None
    unreal_dirs: Optional[List[str]] = None
    versions: Optional[List[str]] = None
    out: Optional[Path] = None
    platforms: Optional[List[str]] = None
    clean_binaries: Optional[bool] = None
    clean_intermediate: Optional[bool] = None
    zip_packages: Optional[bool] = None
    toolchain: Optional[str] = None
    config: Optional[Path] = None
    dry_run: bool = False
    list_installs: bool = False
    verbose: bool = False

    def overrides(self) -> Dict[str, Any]:
        """Settings given on the command line, keyed by BuildSettings field."""
        return {
            "plugin_path": self.plugin_path,
            "unreal_engine_paths": self.unreal_dirs,
            "versions_to_install": self.versions,
            "output_path": self.out,
            "platforms": self.platforms,
            "clean_binary_files": self.clean_binaries,
            "clean_intermediate_files": self.clean_intermediate,
            "zip_packages": self.zip_packages,
            "windows_toolchain": self.toolchain,
        }


def list_command(args: PackageArgs) -> None:
    """Print every installation found in the configured search paths."""
    settings = resolve_settings(args.overrides(), args.config)
    installs = InstallationScanner().scan(settings.unreal_engine_paths)

    print()
    if not installs:
        print("No Unreal installations found.")
    for install in installs:
        print(f"  {str(install.version):<10} {install.root_path}")
    sys.exit(0)


def package_command(args: PackageArgs) -> None:
    """Package the plugin for every requested engine version.

    Examples:
        uepack                                   # Use unreal-package.json / defaults
        uepack MyPlugin.uplugin --versions 4.26 5
        uepack --platforms Win64 Android --zip
        uepack --unreal-dirs "D:/Epic Games" --out Build
        uepack --dry-run                         # Show RunUAT commands only
    """
    print(f"uepack Plugin Packager v{VERSION}")
    print()

    try:
        if args.list_installs:
            list_command(args)

        settings = resolve_settings(args.overrides(), args.config)

        if args.verbose:
            print(f"Plugin: {settings.plugin_path}")
            print(f"Versions: {', '.join(settings.versions_to_install)}")
            print(f"Platforms: {', '.join(str(p) for p in settings.platforms)}")
            print(f"Output: {settings.output_path}")
            print()

        orchestrator = PackageOrchestrator(dry_run=args.dry_run)

        start_time = time.time()
        try:
            results = orchestrator.package(settings)
        finally:
            outcomes = orchestrator.wait_for_archives()
        total_time = time.time() - start_time

        lines = ["PACKAGING SUCCESSFUL!" if not args.dry_run else "DRY RUN COMPLETE"]
        if results and results[0].descriptor is not None:
            lines.append(f"Plugin: {results[0].descriptor.summary()}")
        for result in results:
            platforms = "+".join(str(p) for p in result.platforms)
            line = f"{result.installation.version} ({platforms}): {result.output_dir}"
            if not args.dry_run:
                line += f" [{result.build_time:.2f}s]"
            lines.append(line)
        for outcome in outcomes:
            if outcome.success:
                lines.append(f"Archive: {outcome.archive_path}")
        lines.append(f"Total time: {total_time:.2f}s")
        BannerFormatter.print_banner("\n".join(lines))

        for outcome in outcomes:
            if not outcome.success:
                ErrorFormatter.print_warning(f"Archive failed for {outcome.directory}: {outcome.error}")

        sys.exit(0)

    except UEPackError as e:
        ErrorFormatter.handle_uepack_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def main() -> None:
    """uepack - Package an Unreal Engine plugin for several engine versions."""
    parser = argparse.ArgumentParser(
        prog="uepack",
        description="Package an Unreal Engine plugin for several installed engine versions",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"uepack {VERSION}",
    )
    parser.add_argument(
        "uplugin",
        nargs="?",
        type=Path,
        default=None,
        help="Plugin .uplugin file or directory (default: current directory)",
    )
    parser.add_argument(
        "--unreal-dirs",
        "--unrealDirs",
        dest="unreal_dirs",
        nargs="+",
        default=None,
        metavar="PATH",
        help="Directories to search for Unreal installations in",
    )
    parser.add_argument(
        "--versions",
        nargs="+",
        default=None,
        metavar="VERSION",
        help="Unreal versions to build the plugin for (e.g. 4.26 5)",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        metavar="DIR",
        help="Directory to package into; one folder is created per version",
    )
    parser.add_argument(
        "--platforms",
        nargs="+",
        default=None,
        metavar="PLATFORM",
        help="Platforms to build for; pruned to those supported by this machine",
    )
    parser.add_argument(
        "--clean-binaries",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove Binaries and Intermediate folders from each package",
    )
    parser.add_argument(
        "--clean-intermediate",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove the Intermediate folder from each package",
    )
    parser.add_argument(
        "--zip",
        dest="zip_packages",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Zip each package next to its folder",
    )
    parser.add_argument(
        "--toolchain",
        default=None,
        help="Windows compiler toolchain flag passed to RunUAT (default: VS2019)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file (default: ./unreal-package.json if present)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the RunUAT commands without running them",
    )
    parser.add_argument(
        "--list",
        dest="list_installs",
        action="store_true",
        help="List the Unreal installations found and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    parsed_args = parser.parse_args()

    setup_logging(parsed_args.verbose)

    package_args = PackageArgs(
        plugin_path=parsed_args.uplugin,
        unreal_dirs=parsed_args.unreal_dirs,
        versions=parsed_args.versions,
        out=parsed_args.out,
        platforms=parsed_args.platforms,
        clean_binaries=parsed_args.clean_binaries,
        clean_intermediate=parsed_args.clean_intermediate,
        zip_packages=parsed_args.zip_packages,
        toolchain=parsed_args.toolchain,
        config=parsed_args.config,
        dry_run=parsed_args.dry_run,
        list_installs=parsed_args.list_installs,
        verbose=parsed_args.verbose,
    )
    package_command(package_args)


if __name__ == "__main__":
    main()
