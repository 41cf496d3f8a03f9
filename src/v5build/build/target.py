"""Target descriptor provisioning.

Physical builds use a custom `armv7a-vexos-eabi` target described by a JSON
file that ships inside this package. Simulator builds use the standard
`wasm32-unknown-unknown` target with shared-memory atomics enabled.
"""

from enum import Enum
from pathlib import Path
from typing import List

TARGET_NAME = "armv7a-vexos-eabi"

# Where the descriptor is written, relative to the project root
TARGET_PATH = Path("target") / f"{TARGET_NAME}.json"

WASM_TARGET = "wasm32-unknown-unknown"

WASM_RUSTFLAGS = [
    "-Ctarget-feature=+atomics,+bulk-memory,+mutable-globals",
    "-Clink-arg=--shared-memory",
    "-Clink-arg=--export-table",
]

ASSETS_DIR = Path(__file__).parent / "assets"


class TargetMode(Enum):
    """Which binary a build produces."""

    PHYSICAL = "physical"
    SIMULATOR = "simulator"


def load_target_descriptor() -> str:
    """Return the embedded target descriptor document."""
    return (ASSETS_DIR / f"{TARGET_NAME}.json").read_text(encoding="utf-8")


class TargetProvisioner:
    """Materializes the build configuration for a target mode."""

    def configure(self, project_dir: Path, mode: TargetMode) -> List[str]:
        """Prepare the target and return the cargo arguments selecting it.

        For physical builds the descriptor is written verbatim to
        `<project>/target/armv7a-vexos-eabi.json` before every build.

        Args:
            project_dir: Project root directory
            mode: Target mode for this invocation

        Returns:
            cargo arguments for the target
        """
        if mode is TargetMode.SIMULATOR:
            return self._simulator_args()
        return self._physical_args(project_dir)

    def write_descriptor(self, project_dir: Path) -> Path:
        """Write the target descriptor under the project's build output tree.

        Returns:
            Path to the written descriptor
        """
        target_path = Path(project_dir) / TARGET_PATH
        target_path.parent.mkdir(parents=True, exist_ok=True)
        target_path.write_text(load_target_descriptor(), encoding="utf-8")
        return target_path

    def _physical_args(self, project_dir: Path) -> List[str]:
        target_path = self.write_descriptor(project_dir)
        return [
            "--target",
            str(target_path),
            "-Zbuild-std=core,alloc,compiler_builtins",
        ]

    def _simulator_args(self) -> List[str]:
        rustflags = ",".join(f"'{flag}'" for flag in WASM_RUSTFLAGS)
        return [
            "--target",
            WASM_TARGET,
            "-Zbuild-std=std,panic_abort",
            f"--config=build.rustflags=[{rustflags}]",
        ]
