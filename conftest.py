"""
Pytest configuration for the v5build test suite.

This configuration enables the --full flag to run integration tests and keeps
the host's toolchain environment out of unit tests.
"""

import pytest

# Variables read by Settings.from_env
SETTINGS_ENV_VARS = (
    "CARGO",
    "RUSTC",
    "RUSTUP",
    "V5BUILD_OBJCOPY",
    "V5BUILD_CACHE_DIR",
    "V5BUILD_OFFLINE",
    "V5BUILD_SIMULATOR",
)


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Run full test suite including integration tests (slow)",
    )


def pytest_configure(config):
    """Configure pytest based on command-line options."""
    if config.getoption("--full"):
        # Remove the default marker expression that excludes integration tests
        markexpr = config.getoption("-m", "")
        if markexpr == "not integration":
            config.option.markexpr = ""


@pytest.fixture(autouse=True)
def isolated_settings_env(tmp_path, monkeypatch):
    """Clear v5build settings variables and point the template cache at tmp_path."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("V5BUILD_CACHE_DIR", str(tmp_path / "template-cache"))
