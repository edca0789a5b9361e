"""
Unit tests for BuildToolRunner and process tree cleanup.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import psutil
import pytest

from uepack.build.uat_runner import BuildRequest, BuildToolRunner, kill_process_tree
from uepack.engine.platforms import HostOS, TargetPlatform
from uepack.errors import ExternalToolError, ValidationError


@pytest.fixture
def request_for(make_install, tmp_path):
    """Factory for a BuildRequest against a fake installation."""

    def factory(version="5.0.1", platforms=(TargetPlatform.WIN64,)):
        return BuildRequest(
            installation=make_install(version, root=str(tmp_path / "Engines")),
            platforms=list(platforms),
            output_dir=tmp_path / "Packages" / f"Foo_{version.replace('.', '_')}",
        )

    return factory


class TestGetRunUatPath:
    """Test script selection per host."""

    def test_windows(self, make_install):
        install = make_install("5.0.1")
        path = BuildToolRunner(host=HostOS.WINDOWS).get_run_uat_path(install)

        assert path == install.root_path / "Engine" / "Build" / "BatchFiles" / "RunUAT.bat"

    @pytest.mark.parametrize("host", [HostOS.MACOS, HostOS.LINUX])
    def test_posix(self, make_install, host):
        install = make_install("5.0.1")

        assert BuildToolRunner(host=host).get_run_uat_path(install).name == "RunUAT.sh"

    def test_unknown_host(self, make_install):
        with pytest.raises(ValidationError) as exc_info:
            BuildToolRunner(host=HostOS.OTHER).get_run_uat_path(make_install("5.0.1"))

        assert "Unknown host platform" in str(exc_info.value)


class TestBuildCommand:
    """Test RunUAT command line construction."""

    def test_windows_command(self, request_for, plugin_dir):
        request = request_for("4.26.2", [TargetPlatform.WIN64, TargetPlatform.ANDROID])
        plugin_file = plugin_dir / "MyPlugin.uplugin"

        cmd = BuildToolRunner(host=HostOS.WINDOWS).build_command(request, plugin_file)

        assert cmd[0].endswith("RunUAT.bat")
        assert cmd[1:] == [
            "BuildPlugin",
            f"-Plugin={plugin_file.resolve()}",
            "-TargetPlatforms=Win64+Android",
            f"-Package={request.output_dir.resolve()}",
            "-Rocket",
            "-StrictIncludes",
            "-VS2019",
        ]

    def test_custom_toolchain(self, request_for, plugin_dir):
        runner = BuildToolRunner(host=HostOS.WINDOWS, windows_toolchain="VS2022")

        cmd = runner.build_command(request_for(), plugin_dir / "MyPlugin.uplugin")

        assert cmd[-1] == "-VS2022"

    def test_no_toolchain_flag_on_mac(self, request_for, plugin_dir):
        request = request_for("5.0.1", [TargetPlatform.MAC, TargetPlatform.IOS])

        cmd = BuildToolRunner(host=HostOS.MACOS).build_command(request, plugin_dir / "MyPlugin.uplugin")

        assert cmd[0].endswith("RunUAT.sh")
        assert "-TargetPlatforms=Mac+IOS" in cmd
        assert cmd[-1] == "-StrictIncludes"

    def test_paths_with_spaces_stay_single_arguments(self, make_install, tmp_path):
        plugin_file = tmp_path / "My Plugins" / "Foo.uplugin"
        request = BuildRequest(
            installation=make_install("5.0.1", root=str(tmp_path / "Epic Games")),
            platforms=[TargetPlatform.WIN64],
            output_dir=tmp_path / "My Packages" / "Foo_5_0_1",
        )

        cmd = BuildToolRunner(host=HostOS.WINDOWS).build_command(request, plugin_file)

        assert f"-Plugin={plugin_file.resolve()}" in cmd
        assert not any('"' in arg for arg in cmd)


class TestRun:
    """Test running the build tool."""

    def test_success(self, request_for, plugin_dir):
        request = request_for()
        mock_process = MagicMock()
        mock_process.wait.return_value = 0

        with patch("uepack.build.uat_runner.subprocess.Popen", return_value=mock_process) as mock_popen:
            BuildToolRunner(host=HostOS.WINDOWS).run(request, plugin_dir / "MyPlugin.uplugin")

        args, kwargs = mock_popen.call_args
        assert args[0][1] == "BuildPlugin"
        assert kwargs["cwd"] == request.installation.batch_files_path

    def test_working_directory_unchanged(self, request_for, plugin_dir):
        before = Path.cwd()
        mock_process = MagicMock()
        mock_process.wait.return_value = 0

        with patch("uepack.build.uat_runner.subprocess.Popen", return_value=mock_process):
            BuildToolRunner(host=HostOS.WINDOWS).run(request_for(), plugin_dir / "MyPlugin.uplugin")

        assert Path.cwd() == before

    def test_nonzero_exit(self, request_for, plugin_dir):
        mock_process = MagicMock()
        mock_process.wait.return_value = 5

        with patch("uepack.build.uat_runner.subprocess.Popen", return_value=mock_process):
            with pytest.raises(ExternalToolError) as exc_info:
                BuildToolRunner(host=HostOS.WINDOWS).run(request_for("4.26.2"), plugin_dir / "MyPlugin.uplugin")

        assert "Unreal 4.26.2" in str(exc_info.value)
        assert "exit code 5" in str(exc_info.value)

    def test_launch_failure(self, request_for, plugin_dir):
        with patch("uepack.build.uat_runner.subprocess.Popen", side_effect=FileNotFoundError("RunUAT.bat")):
            with pytest.raises(ExternalToolError) as exc_info:
                BuildToolRunner(host=HostOS.WINDOWS).run(request_for(), plugin_dir / "MyPlugin.uplugin")

        assert "Failed to launch" in str(exc_info.value)

    def test_interrupt_kills_tree(self, request_for, plugin_dir):
        mock_process = MagicMock()
        mock_process.pid = 4242
        mock_process.wait.side_effect = KeyboardInterrupt()

        with (
            patch("uepack.build.uat_runner.subprocess.Popen", return_value=mock_process),
            patch("uepack.build.uat_runner.kill_process_tree") as mock_kill,
        ):
            with pytest.raises(KeyboardInterrupt):
                BuildToolRunner(host=HostOS.WINDOWS).run(request_for(), plugin_dir / "MyPlugin.uplugin")

        mock_kill.assert_called_once_with(4242)


class TestKillProcessTree:
    """Test kill_process_tree."""

    def test_missing_process(self):
        with patch("uepack.build.uat_runner.psutil.Process", side_effect=psutil.NoSuchProcess(1)):
            assert kill_process_tree(1) == 0

    def test_children_terminated_before_parent(self):
        order = []
        child = MagicMock(pid=2)
        child.terminate.side_effect = lambda: order.append("child")
        root = MagicMock(pid=1)
        root.terminate.side_effect = lambda: order.append("root")
        root.children.return_value = [child]

        with (
            patch("uepack.build.uat_runner.psutil.Process", return_value=root),
            patch("uepack.build.uat_runner.psutil.wait_procs", return_value=([child, root], [])),
        ):
            assert kill_process_tree(1) == 2

        assert order == ["child", "root"]
        root.kill.assert_not_called()

    def test_stragglers_force_killed(self):
        root = MagicMock(pid=1)
        root.children.return_value = []

        with (
            patch("uepack.build.uat_runner.psutil.Process", return_value=root),
            patch("uepack.build.uat_runner.psutil.wait_procs", return_value=([], [root])),
        ):
            kill_process_tree(1)

        root.kill.assert_called_once()
