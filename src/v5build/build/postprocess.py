"""Artifact Postprocessing.

This module turns the ELF executable produced by a physical-target build into
a flashable raw binary image using arm-none-eabi-objcopy.

Design:
    - First pass strips PROS internal symbols into `<artifact>.stripped`
    - Second pass converts the stripped ELF into `<artifact>.bin`, dropping
      the `.hot_init` section
    - The original artifact is never modified
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .process_utils import run_tool

logger = logging.getLogger(__name__)

# Symbols removed before conversion to a raw image
STRIPPED_SYMBOLS = [
    "install_hot_table",
    "__libc_init_array",
    "_PROS_COMPILE_DIRECTORY",
    "_PROS_COMPILE_TIMESTAMP",
    "_PROS_COMPILE_TIMESTAMP_INT",
]

# Section excluded from the flashable image
HOT_INIT_SECTION = ".hot_init"


@dataclass
class PostprocessResult:
    """Files produced by postprocessing."""

    stripped_path: Path
    bin_path: Path


def stripped_path_for(artifact: Path) -> Path:
    return artifact.with_name(f"{artifact.name}.stripped")


def bin_path_for(artifact: Path) -> Path:
    return artifact.with_name(f"{artifact.name}.bin")


class ArtifactPostprocessor:
    """Strips and converts physical-target executables.

    Both objcopy invocations run to completion; a non-zero exit status is
    reported as a warning rather than an error.
    """

    def __init__(self, objcopy: str, show_progress: bool = True):
        """Initialize postprocessor.

        Args:
            objcopy: objcopy command or path
            show_progress: Whether to print progress messages
        """
        self.objcopy = objcopy
        self.show_progress = show_progress

    def postprocess(self, artifact: Path, should_strip: bool) -> Optional[PostprocessResult]:
        """Postprocess a produced executable.

        Args:
            artifact: Path to the executable reported by cargo
            should_strip: True for physical-target builds

        Returns:
            Paths of the produced files, or None when nothing was done

        Raises:
            ToolNotFoundError: If objcopy is not installed
        """
        if not should_strip:
            return None

        artifact = Path(artifact)
        if self.show_progress:
            print(f"Stripping Binary: {artifact}")

        stripped = self.strip_symbols(artifact)
        binary = self.convert_to_bin(stripped, bin_path_for(artifact))

        if self.show_progress and binary.exists():
            size = binary.stat().st_size
            print(f"✓ Created {binary.name}: {size:,} bytes ({size / 1024:.2f} KB)")

        return PostprocessResult(stripped_path=stripped, bin_path=binary)

    def strip_symbols(self, artifact: Path) -> Path:
        """Write a copy of the artifact without PROS internal symbols.

        Returns:
            Path to `<artifact>.stripped`
        """
        output = stripped_path_for(artifact)
        cmd: List[str] = [self.objcopy]
        cmd.extend(f"--strip-symbol={symbol}" for symbol in STRIPPED_SYMBOLS)
        cmd.extend([str(artifact), str(output)])

        self._run(cmd, "strip symbols")
        return output

    def convert_to_bin(self, elf_path: Path, output_bin: Path) -> Path:
        """Convert an ELF executable to a raw binary image.

        Returns:
            Path to the raw image
        """
        cmd = [
            self.objcopy,
            "-O", "binary",
            "-R", HOT_INIT_SECTION,
            str(elf_path),
            str(output_bin),
        ]

        self._run(cmd, "convert to binary")
        return output_bin

    def _run(self, cmd: List[str], description: str) -> None:
        returncode = run_tool(cmd)
        if returncode != 0:
            logger.warning(f"objcopy failed to {description} (exit status {returncode})")
