"""Unit tests for the build process driver."""

import io
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from v5build.build.driver import (
    ArtifactHandler,
    BuildDriver,
    BuildRequest,
    CollectingHandler,
    PostprocessHandler,
)
from v5build.build.messages import MessageDecodeError
from v5build.build.preflight import ToolchainNotReadyError
from v5build.build.process_utils import ToolNotFoundError
from v5build.build.target import TARGET_PATH, WASM_TARGET, TargetMode
from v5build.config import Settings


def artifact_line(name, executable=None):
    return json.dumps(
        {
            "reason": "compiler-artifact",
            "package_id": f"{name} 0.1.0",
            "target": {"name": name, "kind": ["bin" if executable else "lib"]},
            "filenames": [],
            "executable": executable,
        }
    )


class FakeProcess:
    """Stand-in for subprocess.Popen with canned stdout."""

    def __init__(self, lines, returncode=0):
        self.stdout = io.StringIO("".join(line + "\n" for line in lines))
        self.returncode = returncode

    def wait(self):
        return self.returncode


class RecordingHandler(ArtifactHandler):
    def __init__(self):
        self.calls = []

    def handle_artifact(self, path):
        self.calls.append(path)


@pytest.fixture
def project_dir(tmp_path):
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "robot"\n')
    return tmp_path


@pytest.fixture
def driver():
    return BuildDriver(Settings(cargo="cargo"), preflight=MagicMock())


def run_with_output(driver, request, lines, returncode=0):
    with patch("subprocess.Popen", return_value=FakeProcess(lines, returncode)) as mock_popen:
        result = driver.run(request)
    return result, mock_popen


class TestBuildDriver:
    """Test cases for BuildDriver."""

    def test_handler_called_per_executable_in_order(self, driver, project_dir):
        """Test each executable reaches the handler once, in emission order."""
        handler = RecordingHandler()
        lines = [
            artifact_line("vexide"),
            json.dumps({"reason": "compiler-message", "message": {}}),
            artifact_line("robot", "/t/robot"),
            "not json at all",
            artifact_line("tool", "/t/tool"),
            json.dumps({"reason": "build-finished", "success": True}),
        ]

        result, _ = run_with_output(driver, BuildRequest(project_dir=project_dir, handler=handler), lines)

        assert handler.calls == [Path("/t/robot"), Path("/t/tool")]
        assert result.executables == [Path("/t/robot"), Path("/t/tool")]
        assert result.success is True

    def test_library_only_build_never_calls_handler(self, driver, project_dir):
        """Test a library-only build produces zero handler calls."""
        handler = RecordingHandler()

        result, _ = run_with_output(
            driver,
            BuildRequest(project_dir=project_dir, handler=handler),
            [artifact_line("vexide"), artifact_line("robot-lib")],
        )

        assert handler.calls == []
        assert result.executables == []

    def test_physical_command_line(self, driver, project_dir):
        """Test the physical build command and working directory."""
        _, mock_popen = run_with_output(
            driver,
            BuildRequest(project_dir=project_dir, extra_args=("--release",)),
            [],
        )

        cmd = mock_popen.call_args.args[0]
        assert cmd[:6] == [
            "cargo",
            "build",
            "--message-format",
            "json-render-diagnostics",
            "--manifest-path",
            str(project_dir / "Cargo.toml"),
        ]
        assert cmd[6:8] == ["--target", str(project_dir / TARGET_PATH)]
        assert "-Zbuild-std=core,alloc,compiler_builtins" in cmd
        assert cmd[-1] == "--release"
        assert mock_popen.call_args.kwargs["cwd"] == project_dir
        assert (project_dir / TARGET_PATH).exists()

    def test_simulator_command_line(self, driver, project_dir):
        """Test the simulator build targets wasm and writes no descriptor."""
        _, mock_popen = run_with_output(
            driver,
            BuildRequest(project_dir=project_dir, target_mode=TargetMode.SIMULATOR),
            [],
        )

        cmd = mock_popen.call_args.args[0]
        assert cmd[6:8] == ["--target", WASM_TARGET]
        assert not (project_dir / TARGET_PATH).exists()

    def test_stdout_closed_after_build(self, driver, project_dir):
        """Test cargo's stdout pipe is drained and closed before waiting."""
        process = FakeProcess([artifact_line("robot", "/t/robot")])

        with patch("subprocess.Popen", return_value=process):
            result = driver.run(BuildRequest(project_dir=project_dir))

        assert result.executables == [Path("/t/robot")]
        assert process.stdout.closed

    def test_relative_project_dir(self, driver, project_dir, monkeypatch):
        """Test a relative project path is made absolute before cargo runs in it."""
        monkeypatch.chdir(project_dir.parent)

        _, mock_popen = run_with_output(driver, BuildRequest(project_dir=Path(project_dir.name)), [])

        cmd = mock_popen.call_args.args[0]
        assert cmd[5] == str(project_dir / "Cargo.toml")
        assert mock_popen.call_args.kwargs["cwd"] == project_dir

    def test_preflight_runs_first(self, project_dir):
        """Test a failing preflight stops the build before cargo starts."""
        preflight = MagicMock()
        preflight.check.side_effect = ToolchainNotReadyError("needs nightly", "rustup override set nightly")
        driver = BuildDriver(Settings(), preflight=preflight)

        with patch("subprocess.Popen") as mock_popen:
            with pytest.raises(ToolchainNotReadyError):
                driver.run(BuildRequest(project_dir=project_dir, target_mode=TargetMode.SIMULATOR))

        preflight.check.assert_called_once_with(TargetMode.SIMULATOR, project_dir)
        mock_popen.assert_not_called()

    def test_missing_cargo(self, project_dir):
        """Test a missing cargo binary raises ToolNotFoundError."""
        driver = BuildDriver(Settings(cargo="/nonexistent/cargo"), preflight=MagicMock())

        with patch("subprocess.Popen", side_effect=FileNotFoundError()):
            with pytest.raises(ToolNotFoundError) as exc_info:
                driver.run(BuildRequest(project_dir=project_dir))

        assert exc_info.value.command == "/nonexistent/cargo"

    def test_failed_build(self, driver, project_dir):
        """Test a non-zero cargo exit is reported in the result."""
        result, _ = run_with_output(driver, BuildRequest(project_dir=project_dir), [], returncode=101)

        assert result.success is False
        assert result.returncode == 101

    def test_decode_error_propagates(self, driver, project_dir):
        """Test a malformed artifact message propagates."""
        bad = json.dumps({"reason": "compiler-artifact"})
        with pytest.raises(MessageDecodeError):
            run_with_output(driver, BuildRequest(project_dir=project_dir), [bad])


class TestHandlers:
    """Test cases for the provided artifact handlers."""

    def test_collecting_handler(self):
        """Test CollectingHandler remembers every path and the last one."""
        handler = CollectingHandler()
        assert handler.last is None

        handler.handle_artifact(Path("/t/a"))
        handler.handle_artifact(Path("/t/b"))

        assert handler.paths == [Path("/t/a"), Path("/t/b")]
        assert handler.last == Path("/t/b")

    def test_postprocess_handler_strips_physical(self):
        """Test physical builds are stripped."""
        postprocessor = MagicMock()
        PostprocessHandler(postprocessor, TargetMode.PHYSICAL).handle_artifact(Path("/t/robot"))
        postprocessor.postprocess.assert_called_once_with(Path("/t/robot"), should_strip=True)

    def test_postprocess_handler_skips_simulator(self):
        """Test simulator builds are not stripped."""
        postprocessor = MagicMock()
        PostprocessHandler(postprocessor, TargetMode.SIMULATOR).handle_artifact(Path("/t/robot.wasm"))
        postprocessor.postprocess.assert_called_once_with(Path("/t/robot.wasm"), should_strip=False)
