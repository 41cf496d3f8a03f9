"""Platform Detection Utilities.

This module provides utilities for detecting the host platform and resolving
the platform-specific locations v5build depends on.

Supported Platforms:
    - Windows: per-user cache under %LOCALAPPDATA%, Arm GNU Toolchain installer layout
    - Linux: XDG cache directory
    - macOS: ~/Library/Caches
"""

import os
import platform
from pathlib import Path
from typing import Literal, Optional

# Qualifier/organization/application triple used to namespace cached data.
APP_QUALIFIER = "rs"
APP_ORGANIZATION = "vexide"
APP_NAME = "cargo-v5"

# Default install root of the Arm GNU Toolchain on Windows
ARM_TOOLCHAIN_WINDOWS_ROOT = Path("C:\\Program Files (x86)\\Arm GNU Toolchain arm-none-eabi")

OBJCOPY_NAME = "arm-none-eabi-objcopy"


class PlatformError(Exception):
    """Raised when platform detection fails or platform is unsupported."""

    pass


HostPlatform = Literal["windows", "linux", "darwin"]


class PlatformDetector:
    """Detects the host platform and resolves per-platform paths."""

    @staticmethod
    def detect_host() -> HostPlatform:
        """Detect the current host operating system.

        Returns:
            'windows', 'linux', or 'darwin'

        Raises:
            PlatformError: If platform is not supported
        """
        system = platform.system().lower()

        if system == "windows":
            return "windows"
        elif system == "linux":
            return "linux"
        elif system == "darwin":
            return "darwin"
        else:
            raise PlatformError(f"Unsupported platform: {system}")

    @staticmethod
    def get_cache_dir() -> Path:
        """Get the platform-determined cache directory for v5build.

        Returns:
            Path to the namespaced cache directory (not created)

        Raises:
            PlatformError: If platform is not supported
        """
        host = PlatformDetector.detect_host()

        if host == "windows":
            local_app_data = os.environ.get("LOCALAPPDATA")
            base = Path(local_app_data) if local_app_data else Path.home() / "AppData" / "Local"
            return base / APP_ORGANIZATION / APP_NAME / "cache"
        elif host == "darwin":
            return Path.home() / "Library" / "Caches" / f"{APP_QUALIFIER}.{APP_ORGANIZATION}.{APP_NAME}"
        else:
            xdg_cache = os.environ.get("XDG_CACHE_HOME")
            base = Path(xdg_cache) if xdg_cache else Path.home() / ".cache"
            return base / APP_NAME

    @staticmethod
    def find_objcopy_windows(install_root: Path = ARM_TOOLCHAIN_WINDOWS_ROOT) -> Optional[Path]:
        """Locate objcopy inside the Arm GNU Toolchain installer layout.

        The installer places each version in its own subdirectory; the first
        one found is used.

        Args:
            install_root: Toolchain install root

        Returns:
            Path to arm-none-eabi-objcopy.exe, or None if no install was found
        """
        try:
            versions = sorted(install_root.iterdir())
        except OSError:
            return None

        if not versions:
            return None

        return versions[0] / "bin" / f"{OBJCOPY_NAME}.exe"

    @staticmethod
    def get_objcopy_command() -> str:
        """Get the objcopy command for the current host.

        Returns:
            Absolute path on Windows when the Arm toolchain is installed,
            otherwise the bare command name to be looked up on PATH
        """
        try:
            host = PlatformDetector.detect_host()
        except PlatformError:
            return OBJCOPY_NAME

        if host == "windows":
            objcopy = PlatformDetector.find_objcopy_windows()
            if objcopy is not None:
                return str(objcopy)

        return OBJCOPY_NAME
