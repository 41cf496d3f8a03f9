"""Toolchain preflight checks.

Verifies that the active Rust toolchain is nightly and, for simulator builds,
that the WebAssembly target is installed. Both checks only spawn read-only
probe commands.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from ..config import Settings
from .target import WASM_TARGET, TargetMode

logger = logging.getLogger(__name__)


class PreflightError(Exception):
    """Base exception for preflight failures."""

    pass


class ToolchainNotReadyError(PreflightError):
    """Raised when a required toolchain component is missing.

    Attributes:
        hint: Remediation command to show the user
    """

    def __init__(self, message: str, hint: str):
        self.hint = hint
        super().__init__(message)


class ToolchainPreflight:
    """Checks the Rust toolchain before a build is attempted."""

    NIGHTLY_MARKER = "nightly"

    def __init__(self, settings: Settings):
        """Initialize preflight checker.

        Args:
            settings: Settings providing the rustc/rustup commands
        """
        self.settings = settings

    def check(self, mode: TargetMode, project_dir: Optional[Path] = None) -> None:
        """Run all checks required for a build in the given mode.

        Args:
            mode: Target mode of the build
            project_dir: Directory the probes run in, so per-project toolchain
                overrides are honored (current directory if None)

        Raises:
            ToolchainNotReadyError: If the toolchain cannot build this mode
        """
        if not self.is_nightly_toolchain(project_dir):
            raise ToolchainNotReadyError(
                "v5build currently requires Nightly Rust features.",
                "this can be fixed by running `rustup override set nightly`",
            )

        if mode is TargetMode.SIMULATOR and not self.has_wasm_target(project_dir):
            raise ToolchainNotReadyError(
                f"simulation requires the {WASM_TARGET} target to be installed",
                f"this can be fixed by running `rustup target add {WASM_TARGET}`",
            )

    def is_nightly_toolchain(self, project_dir: Optional[Path] = None) -> bool:
        """Check whether `rustc --version` reports a nightly compiler.

        A missing rustc counts as not nightly.
        """
        try:
            output = self._probe([self.settings.rustc, "--version"], project_dir)
        except OSError as e:
            logger.debug(f"rustc probe failed: {e}")
            return False

        logger.debug(f"rustc version: {output.strip()}")
        return self.NIGHTLY_MARKER in output

    def has_wasm_target(self, project_dir: Optional[Path] = None) -> bool:
        """Check whether the WebAssembly target is installed.

        If rustup cannot be run at all the target is assumed present, since
        toolchains installed without rustup manage targets differently.
        """
        try:
            output = self._probe([self.settings.rustup, "target", "list", "--installed"], project_dir)
        except OSError as e:
            logger.debug(f"rustup probe failed, assuming {WASM_TARGET} is installed: {e}")
            return True

        return WASM_TARGET in output

    @staticmethod
    def _probe(cmd: List[str], cwd: Optional[Path] = None) -> str:
        result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
        return result.stdout
