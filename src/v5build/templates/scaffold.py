"""Project scaffolding.

Unpacks a template archive into a new project directory and renames the
project in its manifest.

Template archives are GitHub branch tarballs: every entry sits under one
wrapper directory (e.g. `vexide-template-main/`). That first path component is
dropped so the template's contents land directly in the project directory.
"""

import gzip
import io
import logging
import os
import tarfile
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple

from .artifact import TemplateArtifact
from .resolver import TemplateResolver

logger = logging.getLogger(__name__)

MANIFEST_NAME = "Cargo.toml"
PLACEHOLDER_NAME = "vexide-template"


class ScaffoldError(Exception):
    """Raised when a template cannot be unpacked."""

    pass


class ProjectDirFullError(ScaffoldError):
    """Raised when the target project directory is not empty."""

    def __init__(self, project_dir: Path):
        self.project_dir = project_dir
        super().__init__(f"Project directory {project_dir} is not empty")


def strip_first_component(name: str) -> Optional[PurePosixPath]:
    """Drop the leading path component of an archive entry name.

    Returns:
        Remaining relative path, or None for the wrapper directory itself

    Raises:
        ScaffoldError: If the entry would escape the target directory
    """
    parts = PurePosixPath(name).parts
    if parts and parts[0] == "/":
        raise ScaffoldError(f"Refusing to unpack absolute path: {name}")

    remainder = [part for part in parts[1:] if part not in ("", ".")]
    if ".." in remainder:
        raise ScaffoldError(f"Refusing to unpack path outside project: {name}")
    if not remainder:
        return None

    return PurePosixPath(*remainder)


class ProjectScaffolder:
    """Creates a project directory from a template archive."""

    def __init__(self, placeholder: str = PLACEHOLDER_NAME):
        """Initialize scaffolder.

        Args:
            placeholder: Project name used by the template's manifest
        """
        self.placeholder = placeholder

    def scaffold(self, project_dir: Path, name: str, template: TemplateArtifact) -> None:
        """Unpack a template and rename the project.

        Args:
            project_dir: Directory to create the project in (created if missing)
            name: Project name written into the manifest
            template: Template archive

        Raises:
            ProjectDirFullError: If project_dir already has entries
            ScaffoldError: If the archive cannot be decoded or unpacked
            OSError: If the manifest cannot be read or written
        """
        project_dir = Path(project_dir)
        self.ensure_empty(project_dir)

        logger.debug("Unpacking template...")
        self.unpack(template.data, project_dir)
        logger.debug("Successfully unpacked template.")

        logger.debug(f"Renaming project to {name}...")
        self.rename_project(project_dir / MANIFEST_NAME, name)

    @staticmethod
    def ensure_empty(project_dir: Path) -> None:
        """Create project_dir if needed and verify it has no entries.

        Raises:
            ProjectDirFullError: If project_dir is not empty
        """
        project_dir.mkdir(parents=True, exist_ok=True)
        if any(project_dir.iterdir()):
            raise ProjectDirFullError(project_dir)

    def unpack(self, data: bytes, project_dir: Path) -> None:
        """Extract an in-memory .tar.gz, dropping its wrapper directory.

        The whole archive is decompressed and every entry checked before the
        first file is written, so a truncated or unsafe archive leaves
        project_dir untouched.

        Raises:
            ScaffoldError: If the archive is corrupt or has unsafe entries
        """
        try:
            raw = gzip.decompress(data)
            with tarfile.open(fileobj=io.BytesIO(raw), mode="r:") as tar:
                entries = self._plan_entries(tar.getmembers())
                for member, relative in entries:
                    self._extract_member(tar, member, project_dir / relative)
        except (tarfile.TarError, EOFError, OSError) as e:
            raise ScaffoldError(f"Failed to unpack template: {e}")

    @staticmethod
    def _plan_entries(members: List[tarfile.TarInfo]) -> List[Tuple[tarfile.TarInfo, PurePosixPath]]:
        entries = []
        for member in members:
            relative = strip_first_component(member.name)
            if relative is None:
                continue
            if member.issym():
                link = PurePosixPath(member.linkname)
                if link.is_absolute() or ".." in link.parts:
                    raise ScaffoldError(f"Refusing to unpack symlink outside project: {member.name}")
            entries.append((member, relative))
        return entries

    def _extract_member(self, tar: tarfile.TarFile, member: tarfile.TarInfo, output_path: Path) -> None:
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if member.isdir():
            output_path.mkdir(parents=True, exist_ok=True)
        elif member.isfile():
            source = tar.extractfile(member)
            if source is None:
                raise ScaffoldError(f"Cannot read archive entry: {member.name}")
            with source, open(output_path, "wb") as f:
                f.write(source.read())
            os.chmod(output_path, member.mode & 0o777 | 0o600)
        elif member.issym():
            os.symlink(member.linkname, output_path)
        else:
            logger.debug(f"Skipping unsupported archive entry: {member.name}")

    def rename_project(self, manifest_path: Path, name: str) -> int:
        """Replace the template placeholder name in the manifest.

        Returns:
            Number of replacements made

        Raises:
            OSError: If the manifest cannot be read or written
        """
        manifest = manifest_path.read_text(encoding="utf-8")
        count = manifest.count(self.placeholder)

        if count == 0:
            logger.warning(
                f"{manifest_path.name} does not mention '{self.placeholder}'; "
                + "the project name was not updated"
            )
            return 0

        manifest_path.write_text(manifest.replace(self.placeholder, name), encoding="utf-8")
        return count


def new_project(
    path: Path,
    name: Optional[str],
    resolver: TemplateResolver,
    download: bool = True,
    scaffolder: Optional[ProjectScaffolder] = None,
) -> Path:
    """Create a new project.

    With a name, the project is created in `path/name`; without one, in
    `path` itself, named after that directory.

    Args:
        path: Base directory
        name: Optional project name
        resolver: Template resolution strategy
        download: Whether a fresh template may be downloaded
        scaffolder: Scaffolder to use

    Returns:
        The project directory

    Raises:
        ProjectDirFullError: If the project directory is not empty
        ScaffoldError: If the template cannot be unpacked
    """
    path = Path(path)
    if name:
        path.mkdir(parents=True, exist_ok=True)
        project_dir = path / name
    else:
        project_dir = path

    scaffolder = scaffolder or ProjectScaffolder()

    # Checked before resolving so a full directory never triggers a download
    if project_dir.exists() and project_dir.is_dir() and any(project_dir.iterdir()):
        raise ProjectDirFullError(project_dir)

    project_name = name or project_dir.resolve().name
    logger.info(f"Creating new project at {project_dir}")

    template = resolver.resolve(download=download)
    scaffolder.scaffold(project_dir, project_name, template)

    logger.info(f"Successfully created new project at {project_dir}")
    return project_dir
