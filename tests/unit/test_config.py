"""Unit tests for settings resolution."""

from pathlib import Path
from unittest.mock import patch

import pytest

from v5build.config import Settings
from v5build.platform_utils import OBJCOPY_NAME, PlatformError


class TestSettings:
    """Test cases for Settings.from_env."""

    def test_defaults(self, tmp_path):
        """Test an empty environment yields the default commands."""
        with patch("v5build.config.PlatformDetector.get_cache_dir", return_value=tmp_path):
            settings = Settings.from_env({})

        assert settings.cargo == "cargo"
        assert settings.rustc == "rustc"
        assert settings.rustup == "rustup"
        assert settings.objcopy is None
        assert settings.cache_dir == tmp_path
        assert settings.fetch_template is True
        assert settings.simulator == "pros-simulator"

    def test_overrides(self, tmp_path):
        """Test every variable overrides its setting."""
        settings = Settings.from_env(
            {
                "CARGO": "/home/me/.cargo/bin/cargo",
                "RUSTC": "rustc-nightly",
                "RUSTUP": "/opt/rustup",
                "V5BUILD_OBJCOPY": "llvm-objcopy",
                "V5BUILD_CACHE_DIR": str(tmp_path),
                "V5BUILD_OFFLINE": "1",
                "V5BUILD_SIMULATOR": "my-sim",
            }
        )

        assert settings.cargo == "/home/me/.cargo/bin/cargo"
        assert settings.rustc == "rustc-nightly"
        assert settings.rustup == "/opt/rustup"
        assert settings.objcopy == "llvm-objcopy"
        assert settings.cache_dir == Path(tmp_path)
        assert settings.fetch_template is False
        assert settings.simulator == "my-sim"

    @pytest.mark.parametrize("value, expected", [("true", False), ("YES", False), ("0", True), ("", True)])
    def test_offline_flag(self, tmp_path, value, expected):
        """Test only truthy values disable template fetching."""
        settings = Settings.from_env({"V5BUILD_OFFLINE": value, "V5BUILD_CACHE_DIR": str(tmp_path)})
        assert settings.fetch_template is expected

    def test_empty_cargo_falls_back(self, tmp_path):
        """Test an empty CARGO variable is treated as unset."""
        settings = Settings.from_env({"CARGO": "", "V5BUILD_CACHE_DIR": str(tmp_path)})
        assert settings.cargo == "cargo"

    def test_unsupported_platform_has_no_cache(self):
        """Test an unknown host leaves the cache directory unset."""
        with patch("v5build.config.PlatformDetector.get_cache_dir", side_effect=PlatformError("nope")):
            settings = Settings.from_env({})

        assert settings.cache_dir is None

    def test_get_objcopy(self):
        """Test the override wins over platform lookup."""
        assert Settings(objcopy="llvm-objcopy").get_objcopy() == "llvm-objcopy"

        with patch("v5build.config.PlatformDetector.get_objcopy_command", return_value=OBJCOPY_NAME):
            assert Settings().get_objcopy() == OBJCOPY_NAME
