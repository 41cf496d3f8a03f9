"""Shared fixtures for template tests."""

import io
import tarfile

import pytest

TEMPLATE_MANIFEST = """[package]
name = "vexide-template"
version = "0.1.0"
edition = "2021"

[dependencies]
vexide = "0.3"
"""


def build_archive(files, root="vexide-template-main"):
    """Build an in-memory .tar.gz with every entry under one root directory.

    Args:
        files: Mapping of relative path to text content
        root: Wrapper directory name

    Returns:
        Archive bytes
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        directory = tarfile.TarInfo(root)
        directory.type = tarfile.DIRTYPE
        directory.mode = 0o755
        tar.addfile(directory)

        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{root}/{name}")
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))

    return buffer.getvalue()


@pytest.fixture
def template_bytes():
    """A small template archive with a manifest and sources."""
    return build_archive(
        {
            "Cargo.toml": TEMPLATE_MANIFEST,
            "src/main.rs": "fn main() {}\n",
            ".cargo/config.toml": "[build]\n",
        }
    )


@pytest.fixture
def make_archive():
    """Factory fixture returning build_archive."""
    return build_archive
