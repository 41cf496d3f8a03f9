"""
Build process driver for v5build projects.

This module runs `cargo build` for the requested target and reacts to the
executables it reports:
- Toolchain preflight (nightly rustc, wasm target for simulator builds)
- Target provisioning (custom target JSON or wasm flags)
- Streaming cargo's JSON messages from the child's stdout
- Handing every produced executable to an ArtifactHandler, in order
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, List, Optional, Sequence, Tuple, cast

from ..config import Settings
from .messages import CompilerArtifact, parse_message_stream
from .postprocess import ArtifactPostprocessor
from .preflight import ToolchainPreflight
from .process_utils import spawn_tool
from .target import TargetMode, TargetProvisioner

logger = logging.getLogger(__name__)

MANIFEST_NAME = "Cargo.toml"


class ArtifactHandler(ABC):
    """Receives the executables produced by a build.

    `handle_artifact` is called zero or more times, synchronously, in the
    order cargo reported the executables.
    """

    @abstractmethod
    def handle_artifact(self, path: Path) -> None:
        """Handle one produced executable.

        Args:
            path: Path to the executable
        """
        pass


class PostprocessHandler(ArtifactHandler):
    """Postprocesses each executable; strips only physical-target builds."""

    def __init__(self, postprocessor: ArtifactPostprocessor, mode: TargetMode):
        self.postprocessor = postprocessor
        self.mode = mode

    def handle_artifact(self, path: Path) -> None:
        self.postprocessor.postprocess(path, should_strip=self.mode is TargetMode.PHYSICAL)


class CollectingHandler(ArtifactHandler):
    """Records executables so they can be used after the build."""

    def __init__(self) -> None:
        self.paths: List[Path] = []

    def handle_artifact(self, path: Path) -> None:
        self.paths.append(path)

    @property
    def last(self) -> Optional[Path]:
        """The most recently reported executable, if any."""
        return self.paths[-1] if self.paths else None


@dataclass(frozen=True)
class BuildRequest:
    """A single build invocation."""

    project_dir: Path
    extra_args: Tuple[str, ...] = ()
    target_mode: TargetMode = TargetMode.PHYSICAL
    handler: Optional[ArtifactHandler] = field(default=None, compare=False)


@dataclass
class BuildResult:
    """Result of running cargo."""

    success: bool
    returncode: int
    executables: List[Path] = field(default_factory=list)


class BuildDriver:
    """
    Runs cargo for one build request.

    Example usage:
        driver = BuildDriver(Settings.from_env())
        handler = CollectingHandler()
        result = driver.run(BuildRequest(
            project_dir=Path("."),
            target_mode=TargetMode.SIMULATOR,
            handler=handler,
        ))
        print(handler.last)
    """

    def __init__(
        self,
        settings: Settings,
        preflight: Optional[ToolchainPreflight] = None,
        provisioner: Optional[TargetProvisioner] = None,
    ):
        """
        Initialize build driver.

        Args:
            settings: Resolved settings (cargo command, toolchain commands)
            preflight: Toolchain checker (defaults to one built from settings)
            provisioner: Target provisioner
        """
        self.settings = settings
        self.preflight = preflight or ToolchainPreflight(settings)
        self.provisioner = provisioner or TargetProvisioner()

    def build_command(self, project_dir: Path, mode: TargetMode, extra_args: Sequence[str]) -> List[str]:
        """Assemble the cargo command line for a build.

        Writes the target descriptor for physical builds.
        """
        cmd = [
            self.settings.cargo,
            "build",
            "--message-format",
            "json-render-diagnostics",
            "--manifest-path",
            str(project_dir / MANIFEST_NAME),
        ]
        cmd.extend(self.provisioner.configure(project_dir, mode))
        cmd.extend(extra_args)
        return cmd

    def run(self, request: BuildRequest) -> BuildResult:
        """
        Run the build and dispatch produced executables.

        Args:
            request: What to build and who receives the executables

        Returns:
            BuildResult with cargo's exit status and the executables seen

        Raises:
            ToolchainNotReadyError: If preflight fails
            ToolNotFoundError: If cargo is not installed
            MessageDecodeError: If cargo emits a malformed artifact message
        """
        # cargo runs inside the project, so every path it receives must be absolute
        project_dir = Path(request.project_dir).absolute()
        self.preflight.check(request.target_mode, project_dir)

        cmd = self.build_command(project_dir, request.target_mode, request.extra_args)

        process = spawn_tool(
            cmd,
            cwd=project_dir,
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

        executables: List[Path] = []
        stdout = cast(IO[str], process.stdout)
        try:
            for message in parse_message_stream(stdout):
                if not isinstance(message, CompilerArtifact) or message.executable is None:
                    continue

                logger.debug(f"Produced executable: {message.executable}")
                executables.append(message.executable)
                if request.handler is not None:
                    request.handler.handle_artifact(message.executable)
        finally:
            stdout.close()
            returncode = process.wait()

        if returncode != 0:
            logger.debug(f"cargo exited with status {returncode}")

        return BuildResult(
            success=returncode == 0,
            returncode=returncode,
            executables=executables,
        )
