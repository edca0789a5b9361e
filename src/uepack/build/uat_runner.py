"""Unreal Automation Tool (RunUAT) invocation.

This module resolves the RunUAT script for an installation, builds the
BuildPlugin command line and runs it.

Design:
    - The script runs with its own directory as working directory, passed
      as the subprocess ``cwd`` (the process working directory is untouched)
    - Output is not captured: the tool inherits stdout/stderr so progress
      is visible live
    - No timeout; an interrupted build has its whole process tree killed
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import psutil

from ..engine.installation import Installation
from ..engine.platforms import HostDetector, HostOS, TargetPlatform
from ..errors import ExternalToolError, ValidationError

TERMINATE_GRACE_PERIOD = 3  # seconds before force kill


@dataclass(frozen=True)
class BuildRequest:
    """Everything needed to package the plugin for one installation."""

    installation: Installation
    platforms: Sequence[TargetPlatform]
    output_dir: Path


def kill_process_tree(pid: int) -> int:
    """Terminate a process and all of its children.

    Children are terminated before their parents; anything still alive after
    the grace period is force killed.

    Args:
        pid: Root process ID

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(pid)
        processes = root.children(recursive=True)[::-1] + [root]
    except psutil.NoSuchProcess:
        return 0

    signalled = []
    for proc in processes:
        try:
            proc.terminate()
            signalled.append(proc)
        except psutil.NoSuchProcess:
            pass  # Already dead
        except psutil.Error as e:
            logging.warning(f"Failed to terminate process {proc.pid}: {e}")

    _gone, alive = psutil.wait_procs(signalled, timeout=TERMINATE_GRACE_PERIOD)
    for proc in alive:
        try:
            proc.kill()
            logging.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass
        except psutil.Error as e:
            logging.warning(f"Failed to force kill process {proc.pid}: {e}")

    return len(signalled)


class BuildToolRunner:
    """Runs RunUAT BuildPlugin for a single installation.

    Example usage:
        runner = BuildToolRunner()
        runner.run(request, plugin_file=Path("MyPlugin.uplugin"))
    """

    def __init__(self, host: Optional[HostOS] = None, windows_toolchain: str = "VS2019"):
        """Initialize runner.

        Args:
            host: Host OS (default: detected)
            windows_toolchain: Compiler toolchain flag passed on Windows (e.g. VS2019)
        """
        self.host = host or HostDetector.detect()
        self.windows_toolchain = windows_toolchain

    def get_run_uat_path(self, install: Installation) -> Path:
        """Get the RunUAT script for the host.

        Args:
            install: Engine installation

        Returns:
            Path to RunUAT.bat (Windows) or RunUAT.sh (macOS, Linux)

        Raises:
            ValidationError: If the host is not Windows, macOS or Linux
        """
        if self.host == HostOS.WINDOWS:
            return install.batch_files_path / "RunUAT.bat"
        elif self.host in (HostOS.MACOS, HostOS.LINUX):
            return install.batch_files_path / "RunUAT.sh"

        raise ValidationError("Unknown host platform. Expecting Windows, macOS, or Linux.")

    def build_command(self, request: BuildRequest, plugin_file: Path) -> List[str]:
        """Build the RunUAT command line.

        Args:
            request: Build request
            plugin_file: Plugin descriptor

        Returns:
            Argument list, script first
        """
        cmd = [
            str(self.get_run_uat_path(request.installation)),
            "BuildPlugin",
            f"-Plugin={Path(plugin_file).resolve()}",
            f"-TargetPlatforms={'+'.join(str(p) for p in request.platforms)}",
            f"-Package={Path(request.output_dir).resolve()}",
            "-Rocket",
            "-StrictIncludes",
        ]
        if self.host == HostOS.WINDOWS and self.windows_toolchain:
            cmd.append(f"-{self.windows_toolchain.lstrip('-')}")
        return cmd

    def run(self, request: BuildRequest, plugin_file: Path) -> None:
        """Run the build tool and wait for it.

        Args:
            request: Build request
            plugin_file: Plugin descriptor

        Raises:
            ExternalToolError: If the tool cannot be launched or exits nonzero
        """
        cmd = self.build_command(request, plugin_file)
        tool_dir = Path(cmd[0]).parent
        version = request.installation.version

        logging.debug(f"Running: {subprocess.list2cmdline(cmd)}")
        logging.debug(f"Working directory: {tool_dir}")

        try:
            process = subprocess.Popen(cmd, cwd=tool_dir)
        except OSError as e:
            raise ExternalToolError(f"Failed to launch build tool {cmd[0]} for Unreal {version}: {e}") from e

        try:
            returncode = process.wait()
        except KeyboardInterrupt:
            logging.warning(f"Interrupted, stopping build tool (pid {process.pid})")
            kill_process_tree(process.pid)
            raise

        if returncode != 0:
            raise ExternalToolError(f"Build tool failed for Unreal {version} with exit code {returncode}")
