"""Runtime configuration for v5build.

Settings are read once from the environment at startup and then passed
explicitly to the components that need them.

Environment variables:
    CARGO               cargo binary (set by cargo when run as a subcommand)
    RUSTC               rustc binary used for the nightly check
    RUSTUP              rustup binary used for the installed target probe
    V5BUILD_OBJCOPY     objcopy binary override
    V5BUILD_CACHE_DIR   template cache directory override
    V5BUILD_OFFLINE     when truthy, never fetch the project template
    V5BUILD_SIMULATOR   simulator executable
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .platform_utils import PlatformDetector, PlatformError

_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    """Resolved v5build settings."""

    cargo: str = "cargo"
    rustc: str = "rustc"
    rustup: str = "rustup"
    objcopy: Optional[str] = None
    cache_dir: Optional[Path] = None
    fetch_template: bool = True
    simulator: str = "pros-simulator"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ)

        Returns:
            Settings instance
        """
        if environ is None:
            environ = os.environ

        cache_env = environ.get("V5BUILD_CACHE_DIR")
        if cache_env:
            cache_dir: Optional[Path] = Path(cache_env)
        else:
            try:
                cache_dir = PlatformDetector.get_cache_dir()
            except PlatformError:
                cache_dir = None

        return cls(
            cargo=environ.get("CARGO") or "cargo",
            rustc=environ.get("RUSTC") or "rustc",
            rustup=environ.get("RUSTUP") or "rustup",
            objcopy=environ.get("V5BUILD_OBJCOPY") or None,
            cache_dir=cache_dir,
            fetch_template=not _env_flag(environ.get("V5BUILD_OFFLINE")),
            simulator=environ.get("V5BUILD_SIMULATOR") or "pros-simulator",
        )

    def get_objcopy(self) -> str:
        """Get the objcopy command, honoring the override."""
        return self.objcopy or PlatformDetector.get_objcopy_command()
