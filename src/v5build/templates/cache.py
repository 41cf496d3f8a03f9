"""Template cache.

The most recently downloaded project template is kept on disk so that `new`
works offline and skips the download when the template has not changed.

Cache Structure:
    {cache_dir}/
    ├── vexide-template.tar.gz   # Raw archive bytes
    └── cache-id.txt             # Commit sha of the cached archive

The directory is passed in explicitly; `Settings.cache_dir` supplies the
platform default. Records are overwritten by newer downloads and never
deleted. Concurrent writers are not coordinated.
"""

import logging
from pathlib import Path
from typing import Optional

from .artifact import TemplateArtifact

logger = logging.getLogger(__name__)


class TemplateCache:
    """Reads and writes the cached template record."""

    ARCHIVE_NAME = "vexide-template.tar.gz"
    SHA_NAME = "cache-id.txt"

    def __init__(self, cache_dir: Path):
        """Initialize template cache.

        Args:
            cache_dir: Directory holding the cached record
        """
        self.cache_dir = Path(cache_dir)

    @property
    def archive_path(self) -> Path:
        """Path of the cached archive."""
        return self.cache_dir / self.ARCHIVE_NAME

    @property
    def sha_path(self) -> Path:
        """Path of the cached commit sha."""
        return self.cache_dir / self.SHA_NAME

    def load(self) -> Optional[TemplateArtifact]:
        """Load the cached template.

        Returns:
            The cached template, or None if no archive is cached. The sha is
            None when it was never recorded or cannot be read.
        """
        try:
            data = self.archive_path.read_bytes()
        except OSError:
            logger.debug(f"No cached template at {self.archive_path}")
            return None

        try:
            sha: Optional[str] = self.sha_path.read_text(encoding="utf-8").strip() or None
        except OSError:
            sha = None

        return TemplateArtifact(data=data, sha=sha)

    def store(self, template: TemplateArtifact) -> None:
        """Persist a template, replacing any previous record.

        Failures are logged; a template that cannot be cached is still usable.
        """
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self.archive_path.write_bytes(template.data)
            if template.sha is not None:
                self.sha_path.write_text(template.sha, encoding="utf-8")
            elif self.sha_path.exists():
                # sha of the previous archive no longer describes this one
                self.sha_path.unlink()
        except OSError as e:
            logger.warning(f"Failed to cache template in {self.cache_dir}: {e}")
            return

        logger.debug(f"Cached template ({len(template.data)} bytes, sha={template.sha})")
