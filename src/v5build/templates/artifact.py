"""Template archive value type."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class TemplateArtifact:
    """A gzip-compressed tar archive of the project template.

    Attributes:
        data: Complete archive bytes
        sha: Commit sha the archive was built from, when known
    """

    data: bytes = field(repr=False)
    sha: Optional[str] = None

    def __len__(self) -> int:
        return len(self.data)
